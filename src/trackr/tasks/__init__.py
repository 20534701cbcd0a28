"""
Task subsystem.

Components:
- task_models.py: data structures (TaskStatus, TaskSummary, TaskDetail, User, Tag)
- task_store.py: SQLite-backed storage + live summary queries
- task_api.py: small high-level helpers used by the rest of the app
"""
