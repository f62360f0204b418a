"""
Migration subsystem.

Components:
- driver.py: MigrationDriver (batch take -> apply -> commit/rollback loop)
- progress.py: progress counter, periodic reporter, duration/error formatting
- hooks.py: CallableHooks (hooks assembled from plain functions)
- loader.py: resolve "module:attr" into a hooks object
"""
