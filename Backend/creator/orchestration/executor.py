# creator/orchestration/executor.py
"""
Layer Executor - runs a DependencyGraph layer by layer.

Rules:
- Layers run strictly in order. Layer i's results are committed to the
  result map before anything in layer i+1 is dispatched.
- Tasks within a layer run concurrently, in no particular order.
- Every engine is resolved before the first dispatch, so an unknown engine
  fails the run with no partial output.
- Failure policy:
    fail_fast: the first failing task cancels its running siblings.
    collect:   siblings finish, successful ones are committed, then the run
               aborts before the next layer.
  Either way a TaskExecutionError is raised for the first failing task,
  carrying every result committed so far.
- A task exceeding the per-task timeout is recorded as a timeout result and
  the run carries on. Its id lands in `timed_out`, which the validator reads.
- Whatever ends a layer early (failure, token, or the caller's own task
  being cancelled), units still running in that layer are cancelled and
  awaited before the exception leaves the executor.
- An engine that raises CancelledError on its own is a failed task, or a
  cancelled run if the token has fired.
"""
import asyncio
from typing import Any, Dict, List, Optional

from creator.core.config import OrchestratorSettings, FAIL_FAST, settings as default_settings
from creator.core.exceptions import CreationCancelledError, TaskExecutionError
from creator.core.logging import log
from creator.core.types import CancellationToken, Task, TaskContext
from creator.engines.base import Engine, EngineRegistry
from creator.orchestration.progress import ProgressReporter
from creator.orchestration.task_graph import DependencyGraph, task_sort_key


TIMEOUT_STATUS = "timeout"


def timeout_result(task: Task, seconds: float) -> Dict[str, Any]:
    return {
        "task": task.name,
        "status": TIMEOUT_STATUS,
        "error": f"Task {task.id} timed out after {seconds:g}s",
    }


class LayerExecutor:
    """Executes one graph. Not shared across runs."""

    def __init__(
        self,
        registry: EngineRegistry,
        library: Any = None,
        config: Optional[OrchestratorSettings] = None,
        cancel_token: Optional[CancellationToken] = None,
        creation_id: Optional[str] = None,
    ):
        self.registry = registry
        self.library = library
        self.config = config or default_settings.orchestrator
        self.cancel_token = cancel_token
        self.creation_id = creation_id
        self.results: Dict[str, Any] = {}
        self.timed_out: List[str] = []
        self._completed = 0

    async def execute(self, graph: DependencyGraph, progress: Optional[ProgressReporter] = None) -> Dict[str, Any]:
        """
        Run every layer and return task id -> result.

        Raises:
            EngineNotFoundError: a task names an engine the registry lacks.
            TaskExecutionError: an engine failed.
            CreationCancelledError: the cancellation token fired.
        """
        engines = {
            task_id: self.registry.resolve(task.engine, task_id)
            for task_id, task in graph.nodes.items()
        }
        total = len(graph.nodes)

        for index, layer in enumerate(graph.layers):
            self._check_cancelled()
            log(
                "EXECUTOR",
                f"Executing layer {index + 1}/{len(graph.layers)} with {len(layer)} tasks: {layer}",
                creation_id=self.creation_id,
            )
            snapshot = dict(self.results)
            units = {
                task_id: asyncio.ensure_future(
                    self._run_task(graph.nodes[task_id], engines[task_id], snapshot, total, progress)
                )
                for task_id in layer
            }
            await self._await_layer(units, graph.nodes)

        return dict(self.results)

    # ------------------------------------------------------------------
    # Per-task unit
    # ------------------------------------------------------------------

    async def _run_task(
        self,
        task: Task,
        engine: Engine,
        snapshot: Dict[str, Any],
        total: int,
        progress: Optional[ProgressReporter],
    ) -> Any:
        ctx = TaskContext.build(
            task=task,
            dependencies={dep: snapshot.get(dep) for dep in task.dependencies},
            library=self.library,
            cancel_token=self.cancel_token,
        )
        timeout = self.config.task_timeout

        try:
            if timeout and timeout > 0:
                result = await asyncio.wait_for(engine.execute_task(ctx), timeout)
            else:
                result = await engine.execute_task(ctx)
        except asyncio.TimeoutError:
            log("EXECUTOR", f"⏱️ {task.id} ({task.name}) timed out after {timeout:g}s", creation_id=self.creation_id)
            self.timed_out.append(task.id)
            result = timeout_result(task, timeout)
        except asyncio.CancelledError:
            raise
        except TaskExecutionError:
            raise
        except Exception as e:
            log("EXECUTOR", f"❌ {task.id} ({task.name}) failed on {task.engine}: {e}", creation_id=self.creation_id)
            raise TaskExecutionError(task.id, task.engine, str(e)) from e

        self._completed += 1
        if progress is not None:
            await progress.task_completed(self._completed, total, task.id)
        return result

    # ------------------------------------------------------------------
    # Layer barrier
    # ------------------------------------------------------------------

    async def _await_layer(self, units: Dict[str, "asyncio.Future"], nodes: Dict[str, Task]) -> None:
        task_ids = {unit: task_id for task_id, unit in units.items()}
        pending = set(units.values())
        finished: Dict[str, Any] = {}
        failures: Dict[str, BaseException] = {}

        cancel_waiter = None
        if self.cancel_token is not None:
            cancel_waiter = asyncio.ensure_future(self.cancel_token.wait())

        try:
            while pending:
                waiting = set(pending)
                if cancel_waiter is not None:
                    waiting.add(cancel_waiter)
                done, _ = await asyncio.wait(waiting, return_when=asyncio.FIRST_COMPLETED)

                if cancel_waiter is not None and cancel_waiter in done:
                    self._check_cancelled()

                for unit in done:
                    if unit is cancel_waiter:
                        continue
                    pending.discard(unit)
                    task_id = task_ids[unit]
                    if unit.cancelled():
                        # The engine raised CancelledError itself
                        self._check_cancelled()
                        engine = nodes[task_id].engine
                        log("EXECUTOR", f"❌ {task_id} cancelled by engine {engine}", creation_id=self.creation_id)
                        failures[task_id] = TaskExecutionError(task_id, engine, "cancelled")
                        continue
                    error = unit.exception()
                    if error is not None:
                        failures[task_id] = error
                    else:
                        finished[task_id] = unit.result()

                if failures and self.config.failure_policy == FAIL_FAST and pending:
                    log(
                        "EXECUTOR",
                        f"Fail-fast: cancelling {len(pending)} running sibling(s)",
                        creation_id=self.creation_id,
                    )
                    await self._cancel_all(pending)
                    pending = set()
        finally:
            if cancel_waiter is not None and not cancel_waiter.done():
                cancel_waiter.cancel()
            # No unit outlives its layer, whatever ended the wait
            if pending:
                await self._cancel_all(pending)

        if failures:
            if self.config.failure_policy != FAIL_FAST:
                for task_id in sorted(finished, key=task_sort_key):
                    self.results[task_id] = finished[task_id]
            first = min(failures, key=task_sort_key)
            error = failures[first]
            if not isinstance(error, TaskExecutionError):
                raise error
            error.partial_artifacts = dict(self.results)
            raise error

        # Single writer: commit the whole layer at the barrier
        for task_id in sorted(finished, key=task_sort_key):
            self.results[task_id] = finished[task_id]

    async def _cancel_all(self, pending) -> None:
        for unit in pending:
            unit.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

    def _check_cancelled(self) -> None:
        if self.cancel_token is not None and self.cancel_token.cancelled:
            log("EXECUTOR", "🛑 Cancellation requested - stopping", creation_id=self.creation_id)
            raise CreationCancelledError(self.creation_id, dict(self.results))


async def execute(
    graph: DependencyGraph,
    registry: EngineRegistry,
    library: Any = None,
    progress: Optional[ProgressReporter] = None,
    config: Optional[OrchestratorSettings] = None,
    cancel_token: Optional[CancellationToken] = None,
) -> Dict[str, Any]:
    """Run a graph with a fresh executor."""
    executor = LayerExecutor(registry, library=library, config=config, cancel_token=cancel_token)
    return await executor.execute(graph, progress)
