"""
Core contracts.

- ports.py: Protocols for the task store and the migration hooks
"""
