"""Domain errors raised by services and translated to HTTP errors by routes."""
from __future__ import annotations


class StorageReadError(RuntimeError):
    """The storage backend could not answer a read."""


class AssignmentConflictError(Exception):
    """The task is already assigned, or cannot be assigned in its current state."""


class QuotaExceededError(Exception):
    """Today's assignments already fill the user's tasks-per-day quota."""


class TaskNotFoundError(LookupError):
    pass


class AssignmentNotFoundError(LookupError):
    pass


class ProjectNotFoundError(LookupError):
    pass
