# creator/core/exceptions.py
"""
Custom exceptions for the creation service.
"""
from typing import Optional, Dict, Any, List


class CreatorError(Exception):
    """Base exception for all creation errors."""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class RequestError(CreatorError):
    """Malformed creation request (missing or empty type)."""
    pass


class GraphError(CreatorError):
    """Dependency cycle or dangling dependency id in the task list."""
    def __init__(self, message: str, unplaced: List[str], missing: Optional[List[str]] = None):
        super().__init__(
            message,
            {"unplaced": list(unplaced), "missing": list(missing or [])}
        )
        self.unplaced = list(unplaced)
        self.missing = list(missing or [])


class EngineNotFoundError(CreatorError):
    """A task references an engine that is not registered."""
    def __init__(self, engine: str, task_id: Optional[str] = None):
        where = f" for task {task_id}" if task_id else ""
        super().__init__(
            f"Engine {engine} not found{where}",
            {"engine": engine, "task_id": task_id}
        )
        self.engine = engine
        self.task_id = task_id


class TaskExecutionError(CreatorError):
    """An engine failed while executing a task. Aborts the run."""
    def __init__(
        self,
        task_id: str,
        engine: str,
        message: str,
        partial_artifacts: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            f"Task {task_id} ({engine}) failed: {message}",
            {"task_id": task_id, "engine": engine}
        )
        self.task_id = task_id
        self.engine = engine
        self.partial_artifacts = dict(partial_artifacts or {})


class CreationCancelledError(CreatorError):
    """The run's cancellation token fired."""
    def __init__(self, creation_id: Optional[str] = None, partial_artifacts: Optional[Dict[str, Any]] = None):
        super().__init__(
            f"Creation {creation_id} cancelled" if creation_id else "Creation cancelled",
            {"creation_id": creation_id}
        )
        self.creation_id = creation_id
        self.partial_artifacts = dict(partial_artifacts or {})


class ValidationWarning(UserWarning):
    """Category for non-fatal validation findings. Recorded, never raised."""
    pass
