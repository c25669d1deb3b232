"""
Task subsystem.

Components:
- task_models.py: records (Task, Subtask, Label) and their JSON wire format
- task_layout.py: overlap counting + lane assignment for the calendar grid
- task_controller.py: in-memory session state reconciled with the remote API
"""
