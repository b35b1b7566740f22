"""
Optimistic sync.

Components:
- optimistic.py: generic apply / remote / rollback primitive
- notices.py: single transient error message with auto-clear
- engine.py: TaskSyncEngine (load/create/toggle/remove)
"""
