# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
This file exists to make the repo self-documenting even without opening .env.
"""

ENV_VARS = {
    # App / logging
    "TRACKR_APP_NAME": "App display name (default: trackr).",
    "TRACKR_LOG_LEVEL": "Console logging level (default: INFO).",
    # Connectors
    "TRACKR_CONSOLE_ENABLED": "Enable the console REPL (true/false, default: true).",
    # Current user
    "TRACKR_USERNAME": "Name of the current user; created on first run (default: $USER).",
    # Behaviour
    "TRACKR_UNDO_WINDOW_MS": "How long a bulk unarchive can be undone, in ms (default: 5000).",
    "TRACKR_SEED_DEMO_DATA": "Fill an empty database with demo tasks (true/false).",
    # Paths (gitignored)
    "TRACKR_DATA_DIR": "Local data directory (default: .local/trackr).",
    "TRACKR_TASKS_DB_PATH": "TaskStore SQLite path (default: <data_dir>/tasks.sqlite3).",
}
