# tests/conftest.py
"""
Shared pytest fixtures for the creation orchestrator tests.

Provides:
- Scripted fake engines (recording, failing, slow)
- Engine registries built per test
- Sample creation requests
- An async HTTP client bound to the ASGI app
"""
import asyncio
import pytest
import pytest_asyncio
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from creator.core.config import OrchestratorSettings
from creator.core.types import CreationRequest, Task, TaskContext
from creator.engines import EngineKind, EngineRegistry, ResourceLibrary, default_registry
from creator.engines.base import Engine


# ═══════════════════════════════════════════════════════
# FAKE ENGINES
# ═══════════════════════════════════════════════════════

@dataclass
class CallRecord:
    """One execute_task call as seen by a fake engine."""
    task_id: str
    task_name: str
    dependencies: Dict[str, Any]
    event: str  # "start" | "end"


@dataclass
class EngineLog:
    """Shared, ordered log of start/end events across engines."""
    events: List[CallRecord] = field(default_factory=list)
    in_flight: int = 0
    max_in_flight: int = 0

    def started(self) -> List[str]:
        return [e.task_id for e in self.events if e.event == "start"]

    def index(self, task_id: str, event: str) -> int:
        for i, e in enumerate(self.events):
            if e.task_id == task_id and e.event == event:
                return i
        raise AssertionError(f"{task_id} never emitted {event}")


class RecordingEngine(Engine):
    """Returns {task, files} after a short sleep, logging start/end."""

    def __init__(self, kind: EngineKind, log: EngineLog, delay: float = 0.01, files: bool = True):
        self.kind = kind
        self.log = log
        self.delay = delay
        self.with_files = files

    async def execute_task(self, ctx: TaskContext) -> Dict[str, Any]:
        task = ctx.task
        self.log.events.append(CallRecord(task.id, task.name, dict(ctx.dependencies), "start"))
        self.log.in_flight += 1
        self.log.max_in_flight = max(self.log.max_in_flight, self.log.in_flight)
        try:
            await asyncio.sleep(self.delay)
        finally:
            self.log.in_flight -= 1
        self.log.events.append(CallRecord(task.id, task.name, dict(ctx.dependencies), "end"))
        result: Dict[str, Any] = {"task": task.name, "engine": self.kind.value}
        if self.with_files:
            result["files"] = [{"path": f"{task.name}.txt", "content": f"generated by {task.id}"}]
        return result


class FailingEngine(Engine):
    """Always raises."""

    def __init__(self, kind: EngineKind, message: str = "engine exploded", delay: float = 0.0):
        self.kind = kind
        self.message = message
        self.delay = delay
        self.calls: List[str] = []

    async def execute_task(self, ctx: TaskContext) -> Dict[str, Any]:
        self.calls.append(ctx.task.id)
        if self.delay:
            await asyncio.sleep(self.delay)
        raise RuntimeError(self.message)


class SelectiveEngine(Engine):
    """Fails for task names in `fail_on`, sleeps `delays[name]`, else succeeds."""

    def __init__(self, kind: EngineKind, fail_on=(), delays: Optional[Dict[str, float]] = None):
        self.kind = kind
        self.fail_on = set(fail_on)
        self.delays = delays or {}
        self.finished: List[str] = []
        self.cancelled: List[str] = []

    async def execute_task(self, ctx: TaskContext) -> Dict[str, Any]:
        name = ctx.task.name
        try:
            await asyncio.sleep(self.delays.get(name, 0))
        except asyncio.CancelledError:
            self.cancelled.append(name)
            raise
        if name in self.fail_on:
            raise RuntimeError(f"{name} failed")
        self.finished.append(name)
        return {"task": name, "files": []}


# ═══════════════════════════════════════════════════════
# FIXTURES - Engines & Registries
# ═══════════════════════════════════════════════════════

@pytest.fixture
def engine_log():
    return EngineLog()


@pytest.fixture
def recording_registry(engine_log):
    """Every engine kind backed by a RecordingEngine sharing one log."""
    registry = EngineRegistry()
    for kind in EngineKind:
        registry.register(kind, RecordingEngine(kind, engine_log))
    return registry


@pytest.fixture
def builtin_registry():
    return default_registry()


@pytest.fixture
def library():
    return ResourceLibrary()


@pytest.fixture
def config():
    """Explicit settings so tests never read the environment."""
    return OrchestratorSettings(
        task_timeout=5,
        failure_policy="fail_fast",
        placeholder_markers=["TODO"],
        history_limit=10,
    )


@pytest.fixture
def collect_config():
    return OrchestratorSettings(
        task_timeout=5,
        failure_policy="collect",
        placeholder_markers=["TODO"],
        history_limit=10,
    )


# ═══════════════════════════════════════════════════════
# FIXTURES - Requests & Tasks
# ═══════════════════════════════════════════════════════

@pytest.fixture
def app_request():
    """Full-stack app request."""
    return CreationRequest(type="app", spec={"name": "Demo"})


@pytest.fixture
def startup_request():
    """Startup workflow request."""
    return CreationRequest(type="workflow", spec={"workflow": "startup"})


@pytest.fixture
def make_task():
    def _make(index: int, deps=(), engine: str = "backend", name: Optional[str] = None) -> Task:
        return Task(
            id=f"task-{index}",
            name=name or f"step-{index}",
            engine=engine,
            dependencies=[f"task-{d}" for d in deps],
        )
    return _make


# ═══════════════════════════════════════════════════════
# FIXTURES - HTTP
# ═══════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def async_client():
    """httpx client over the ASGI app (no network)."""
    from httpx import ASGITransport, AsyncClient
    from creator.main import app

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
