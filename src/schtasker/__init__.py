"""
Windows Task Scheduler helper driving SCHTASKS.exe.

Public API:
- SchTask: create, delete, query, change, run, end and inspect scheduled tasks.
- TaskCreate: options for creating or changing a task.
- Task: one row of query output.
"""

from .core import DEBUG_MESSAGE, SchTask, Task, TaskCreate
from .errors import (
    SchtasksNotAvailableError,
    TaskAlreadyExistsError,
    TaskError,
    TaskNotFoundError,
)

__all__ = [
    "DEBUG_MESSAGE",
    "SchTask",
    "Task",
    "TaskCreate",
    "TaskError",
    "TaskAlreadyExistsError",
    "TaskNotFoundError",
    "SchtasksNotAvailableError",
]

__version__ = "0.1.0"
