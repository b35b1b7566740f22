# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
Do NOT commit real secrets. Use:
- .env (local, gitignored)

This file exists to make the repo self-documenting even without opening .env.
"""

ENV_VARS = {
    # App / logging
    "TASKBOARD_APP_NAME": "App display name (default: taskboard).",
    "TASKBOARD_LOG_LEVEL": "Console logging level (default: INFO).",
    # Hosted task table
    "TASKBOARD_STORE_URL": "Project URL of the hosted database (SUPABASE_URL also accepted). Empty => offline demo store.",
    "TASKBOARD_STORE_KEY": "Publishable project key, sent as 'apikey' (SUPABASE_KEY also accepted).",
    "TASKBOARD_TASKS_TABLE": "Table holding the tasks (default: tasks).",
    "TASKBOARD_CONNECT_TIMEOUT_SECONDS": "HTTP connect timeout (default: 5).",
    "TASKBOARD_READ_TIMEOUT_SECONDS": "HTTP read timeout (default: 15).",
    # Dashboard
    "TASKBOARD_ERROR_DISPLAY_SECONDS": "How long an error message stays visible (default: 5).",
    # Initial session (optional; /login works too)
    "TASKBOARD_USER_ID": "Signed-in user id issued by the identity provider.",
    "TASKBOARD_ACCESS_TOKEN": "Session token for that user (short-lived; refresh it in session.json).",
    "TASKBOARD_DISPLAY_NAME": "Name shown in the dashboard greeting.",
    # Paths (gitignored)
    "TASKBOARD_DATA_DIR": "Local data directory (default: .local/taskboard).",
    "TASKBOARD_SESSION_PATH": "Persisted session file (default: <data_dir>/session.json).",
}
