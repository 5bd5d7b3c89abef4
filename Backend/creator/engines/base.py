# creator/engines/base.py
"""
Engine contract and registry.

Every engine implements `execute_task(ctx) -> dict`. The set of engine
kinds is closed; an unknown key or an unregistered kind resolves to
EngineNotFoundError.
"""
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Tuple

from creator.core.exceptions import EngineNotFoundError
from creator.core.logging import log
from creator.core.types import Task, TaskContext


class EngineKind(str, Enum):
    DESIGN = "design"
    APP = "app"
    BACKEND = "backend"
    CONTENT = "content"
    AI = "ai"
    ORCHESTRATOR = "orchestrator"

    @classmethod
    def parse(cls, key: str) -> Optional["EngineKind"]:
        try:
            return cls(key)
        except ValueError:
            return None


class Engine(ABC):
    """Base class for generator engines."""

    kind: EngineKind

    @abstractmethod
    async def execute_task(self, ctx: TaskContext) -> Dict[str, Any]:
        """Produce the result for one task. May raise."""

    async def execute(self, tool: str, params: Dict[str, Any], library: Any = None) -> Dict[str, Any]:
        """Direct invocation outside an orchestration run: one task, no dependencies."""
        task = Task(id="direct-0", name=tool, engine=self.kind.value, params=dict(params or {}))
        return await self.execute_task(TaskContext.build(task, {}, library))

    def describe(self) -> Dict[str, Any]:
        return {"name": self.kind.value, "type": type(self).__name__}


class EngineRegistry:
    """
    Explicit engine lookup, constructed per service / per test.
    """

    def __init__(self, engines: Optional[Dict[EngineKind, Engine]] = None):
        self._engines: Dict[EngineKind, Engine] = {}
        for kind, engine in (engines or {}).items():
            self.register(kind, engine)

    def register(self, kind: EngineKind, engine: Engine) -> "EngineRegistry":
        kind = EngineKind(kind)
        self._engines[kind] = engine
        log("ENGINE", f"Registered {kind.value} engine: {type(engine).__name__}")
        return self

    def resolve(self, key: str, task_id: Optional[str] = None) -> Engine:
        kind = key if isinstance(key, EngineKind) else EngineKind.parse(key)
        if kind is None or kind not in self._engines:
            raise EngineNotFoundError(str(key), task_id)
        return self._engines[kind]

    def __contains__(self, key: str) -> bool:
        kind = key if isinstance(key, EngineKind) else EngineKind.parse(key)
        return kind is not None and kind in self._engines

    def __iter__(self) -> Iterator[Tuple[EngineKind, Engine]]:
        return iter(self._engines.items())

    def __len__(self) -> int:
        return len(self._engines)

    def names(self) -> List[str]:
        return [kind.value for kind in self._engines]
