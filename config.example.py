# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
Do NOT commit real keys. Put them in .env (local, gitignored).

This file exists to make the repo self-documenting even without opening .env.
"""

ENV_VARS = {
    # App / logging
    "TASKBOARD_APP_NAME": "App display name (default: taskboard).",
    "TASKBOARD_LOG_LEVEL": "Console logging level (default: INFO).",
    "TASKBOARD_DATA_DIR": "Local data directory for logs (default: .local/taskboard).",
    # Record store
    "TASKBOARD_STORE_URL": "Record store base URL. Empty => offline in-memory demo store.",
    "TASKBOARD_PROJECT_ID": "Store project id (sent as X-Project-Id). APPER_PROJECT_ID also accepted.",
    "TASKBOARD_PUBLIC_KEY": "Store public key (sent as a bearer token). APPER_PUBLIC_KEY also accepted.",
    "TASKBOARD_TABLE_NAME": "Table holding tasks (default: task1).",
    "TASKBOARD_CONNECT_TIMEOUT_SECONDS": "HTTP connect timeout (default: 5).",
    "TASKBOARD_READ_TIMEOUT_SECONDS": "HTTP read timeout (default: 25, never below the connect timeout).",
    # Initial view
    "TASKBOARD_DEFAULT_FILTER": "all | completed | pending | overdue | today (default: all).",
    "TASKBOARD_DEFAULT_SORT": "dueDate | priority | title | created (default: dueDate).",
}
