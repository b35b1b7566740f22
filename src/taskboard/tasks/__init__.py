"""
Task subsystem.

Components:
- task_models.py: data structures (Task, placeholder ids, timestamp parsing)
- task_store.py: hosted task table over PostgREST (httpx) + RemoteStoreError
- offline_store.py: in-memory store for demos without a hosted database
- task_api.py: small helpers used by the console (task references, formatting)
"""
