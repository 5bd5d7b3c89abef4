# creator/core/types.py
"""
Shared types for the creation pipeline.

Request → Plan → [Task] → DependencyGraph → results → OrchestrationOutput
"""
import asyncio
import time
from enum import Enum
from dataclasses import dataclass, field, asdict
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional

from creator.core.exceptions import RequestError


def now_ms() -> int:
    """Wall-clock milliseconds, the unit used for every timestamp field."""
    return int(time.time() * 1000)


class Strategy(str, Enum):
    """Creation strategy chosen by the planner."""
    SINGLE_PHASE = "single-phase"
    FULL_STACK = "full-stack"
    MULTI_PHASE = "multi-phase"
    ITERATIVE = "iterative"


class Stage(str, Enum):
    """Progress stages, in emission order."""
    PLANNING = "planning"
    DECOMPOSING = "decomposing"
    SCHEDULING = "scheduling"
    EXECUTING = "executing"
    VALIDATING = "validating"
    ASSEMBLING = "assembling"
    COMPLETE = "complete"


@dataclass(frozen=True)
class CreationRequest:
    """Immutable creation input. `type` selects the decomposition strategy."""
    type: str
    spec: Dict[str, Any] = field(default_factory=dict)
    options: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CreationRequest":
        if not isinstance(data, dict):
            raise RequestError("Creation request must be an object", {"request": type(data).__name__})
        for key in ("spec", "options"):
            value = data.get(key)
            if value is not None and not isinstance(value, dict):
                raise RequestError(f"Creation request '{key}' must be an object", {key: type(value).__name__})
        return cls(
            type=data.get("type") or "",
            spec=dict(data.get("spec") or {}),
            options=dict(data.get("options") or {}),
        )


@dataclass(frozen=True)
class Plan:
    """Derived, read-only strategy metadata for one request."""
    type: str
    complexity: int
    requirements: Dict[str, Any]
    constraints: Dict[str, Any]
    optimizations: List[str]
    strategy: Strategy
    components: Optional[List[str]] = None
    phases: Optional[List[Dict[str, str]]] = None
    iterations: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["strategy"] = self.strategy.value
        return {k: v for k, v in data.items() if v is not None}


@dataclass
class Task:
    """One unit of generation work assigned to exactly one engine."""
    id: str
    name: str
    engine: str
    # Informational only. Scheduling order comes from dependencies.
    priority: int = 0
    dependencies: List[str] = field(default_factory=list)
    params: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class TaskValidation:
    """Validation record attached to every task result."""
    valid: bool = True
    warnings: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class ProgressEvent:
    """Single progress notification. Percentage is in [0, 100]."""
    stage: Stage
    percentage: float
    details: Dict[str, Any] = field(default_factory=dict)
    timestamp: int = field(default_factory=now_ms)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "stage": self.stage.value,
            "percentage": self.percentage,
            "details": dict(self.details),
            "timestamp": self.timestamp,
        }


@dataclass
class OrchestrationOutput:
    """Final assembled bundle for one run."""
    success: bool
    timestamp: int
    spec: Dict[str, Any]
    artifacts: Dict[str, Dict[str, Any]]
    project: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "success": self.success,
            "timestamp": self.timestamp,
            "spec": self.spec,
            "artifacts": self.artifacts,
        }
        if self.project is not None:
            data["project"] = self.project
        return data


class CancellationToken:
    """
    Cooperative cancellation flag shared by the executor and every engine call.
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self.reason: Optional[str] = None

    def cancel(self, reason: str = "cancelled") -> None:
        self.reason = reason
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    async def wait(self) -> None:
        await self._event.wait()


@dataclass
class TaskContext:
    """What an engine receives for one task."""
    task: Task
    dependencies: Mapping[str, Any]
    library: Any = None
    cancel_token: Optional[CancellationToken] = None

    @classmethod
    def build(
        cls,
        task: Task,
        dependencies: Dict[str, Any],
        library: Any = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> "TaskContext":
        # Dependents get a read-only view of prior results
        return cls(
            task=task,
            dependencies=MappingProxyType(dict(dependencies)),
            library=library,
            cancel_token=cancel_token,
        )
