"""
Screen view models.

- list_items.py: turns summaries + expanded states into headers and rows
- expansion.py, reorder.py, archive_undo.py: tasks screen controllers
- tasks_view.py: tasks screen view model
- archive.py: archive screen view model
"""
