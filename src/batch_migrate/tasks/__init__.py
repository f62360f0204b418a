"""
Task subsystem.

Components:
- task_models.py: data structures (Task, TaskStatus, ErrorRecord, MigrationResult)
- memory_store.py: in-memory TaskRepo (tests, small one-shot jobs)
- task_store.py: SQLite-backed TaskRepo
"""
