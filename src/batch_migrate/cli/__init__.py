"""
Command line interface.

- bootstrap.py: composition root (settings -> store, hooks, driver)
- main.py: `batch-migrate` entrypoint
"""
