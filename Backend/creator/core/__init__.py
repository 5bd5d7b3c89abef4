# creator/core/__init__.py
"""
Core module - configuration, exceptions, logging and shared types.
"""
from .config import settings, Settings, OrchestratorSettings, ServerSettings, FAIL_FAST, COLLECT
from .exceptions import (
    CreatorError,
    RequestError,
    GraphError,
    EngineNotFoundError,
    TaskExecutionError,
    CreationCancelledError,
    ValidationWarning,
)
from .types import (
    CreationRequest,
    Plan,
    Strategy,
    Stage,
    Task,
    TaskValidation,
    TaskContext,
    ProgressEvent,
    OrchestrationOutput,
    CancellationToken,
    now_ms,
)

__all__ = [
    # Config
    "settings",
    "Settings",
    "OrchestratorSettings",
    "ServerSettings",
    "FAIL_FAST",
    "COLLECT",
    # Exceptions
    "CreatorError",
    "RequestError",
    "GraphError",
    "EngineNotFoundError",
    "TaskExecutionError",
    "CreationCancelledError",
    "ValidationWarning",
    # Types
    "CreationRequest",
    "Plan",
    "Strategy",
    "Stage",
    "Task",
    "TaskValidation",
    "TaskContext",
    "ProgressEvent",
    "OrchestrationOutput",
    "CancellationToken",
    "now_ms",
]
