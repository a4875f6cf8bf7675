"""
Task subsystem.

Components:
- task_models.py: data structures (Task, TaskDraft, enums, TaskStats)
- task_query.py: pure filter / search / sort / stats over an in-memory list
- task_adapter.py: UI <-> backend record mapping and CRUD against a RecordStore
"""
