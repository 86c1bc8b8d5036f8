"""Exceptions raised for caller misuse.

Document content never raises; these cover requests the caller made that
cannot be satisfied, such as asking for a task that does not exist.
"""

from __future__ import annotations


class SquadLensError(Exception):
    """Base class for squadlens errors."""


class TaskNotFoundError(SquadLensError):
    """No derived task has the requested id."""

    def __init__(self, task_id: str) -> None:
        super().__init__(f"Task not found: {task_id}")
        self.task_id = task_id
