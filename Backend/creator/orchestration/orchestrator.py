# creator/orchestration/orchestrator.py
"""
Creation Orchestrator - main entry point.

    Planner → Task Decomposer → Dependency Graph Builder
            → Layer Executor → Result Validator → Output Assembler

The Plan, the graph and the result map are locals of one run; nothing
is shared between concurrent runs except the state manager's records.
"""
import asyncio
import uuid
from typing import Any, Dict, Optional, Union

from creator.core.config import OrchestratorSettings, settings as default_settings
from creator.core.exceptions import CreationCancelledError, CreatorError
from creator.core.logging import log, log_section
from creator.core.types import CancellationToken, CreationRequest, OrchestrationOutput, Stage
from creator.engines.base import EngineRegistry
from creator.orchestration.assembler import assemble
from creator.orchestration.decomposer import decompose
from creator.orchestration.executor import LayerExecutor
from creator.orchestration.planner import analyze_plan
from creator.orchestration.progress import ProgressCallback, ProgressReporter
from creator.orchestration.state import CreationStateManager
from creator.orchestration.task_graph import build_graph
from creator.orchestration.validator import validate


RequestLike = Union[CreationRequest, Dict[str, Any]]


def _coerce_request(request: RequestLike) -> CreationRequest:
    if isinstance(request, CreationRequest):
        return request
    return CreationRequest.from_dict(request or {})


class CreationOrchestrator:
    """
    Runs creation requests against an explicit engine registry.
    """

    def __init__(
        self,
        config: Optional[OrchestratorSettings] = None,
        state: Optional[CreationStateManager] = None,
    ):
        self.config = config or default_settings.orchestrator
        self.state = state or CreationStateManager(history_limit=self.config.history_limit)

    async def orchestrate(
        self,
        request: RequestLike,
        registry: EngineRegistry,
        library: Any = None,
        creation_id: Optional[str] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> OrchestrationOutput:
        """Run every phase and return the assembled output."""
        return await self._run(request, registry, library, None, creation_id, cancel_token)

    async def orchestrate_with_progress(
        self,
        request: RequestLike,
        registry: EngineRegistry,
        library: Any,
        on_progress: Optional[ProgressCallback],
        creation_id: Optional[str] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> OrchestrationOutput:
        """
        Same as orchestrate, but reports a ProgressEvent at each phase
        boundary and after each task completes. The last event is
        `complete` at 100%.
        """
        reporter = ProgressReporter(on_progress, creation_id)
        return await self._run(request, registry, library, reporter, creation_id, cancel_token)

    def cancel(self, creation_id: str) -> bool:
        """Abort an active run. Returns False if nothing was running under that id."""
        cancelled = self.state.cancel(creation_id)
        if cancelled:
            log("ORCHESTRATOR", "🛑 Cancellation requested", creation_id=creation_id)
        return cancelled

    async def _run(
        self,
        request: RequestLike,
        registry: EngineRegistry,
        library: Any,
        reporter: Optional[ProgressReporter],
        creation_id: Optional[str],
        cancel_token: Optional[CancellationToken],
    ) -> OrchestrationOutput:
        request = _coerce_request(request)
        creation_id = creation_id or uuid.uuid4().hex
        token = cancel_token or CancellationToken()
        if reporter is not None:
            reporter.creation_id = creation_id

        async def stage(name: Stage, message: str) -> None:
            if reporter is not None:
                await reporter.stage(name, message)

        log_section("ORCHESTRATOR", f"Starting {request.type or '?'} creation", creation_id=creation_id)
        await self.state.start(creation_id, request.type, token)

        try:
            await stage(Stage.PLANNING, "Analyzing requirements")
            plan = analyze_plan(request)

            await stage(Stage.DECOMPOSING, "Breaking down tasks")
            tasks = decompose(plan, request.spec)

            await stage(Stage.SCHEDULING, "Building execution plan")
            graph = build_graph(tasks)

            await stage(Stage.EXECUTING, "Starting parallel execution")
            executor = LayerExecutor(
                registry,
                library=library,
                config=self.config,
                cancel_token=token,
                creation_id=creation_id,
            )
            results = await executor.execute(graph, reporter)

            await stage(Stage.VALIDATING, "Validating quality")
            validated = validate(results, self.config.placeholder_markers, executor.timed_out)

            await stage(Stage.ASSEMBLING, "Assembling final output")
            output = assemble(validated, request, graph.nodes)

            await stage(Stage.COMPLETE, "Creation complete!")

        except CreationCancelledError as e:
            e.creation_id = creation_id
            await self.state.mark_cancelled(creation_id, e.message)
            raise
        except asyncio.CancelledError:
            # The caller's task went away (client disconnect, shutdown)
            token.cancel("caller cancelled")
            log("ORCHESTRATOR", "🛑 Caller cancelled the run", creation_id=creation_id)
            await self.state.mark_cancelled(creation_id, f"Creation {creation_id} cancelled by caller")
            raise
        except CreatorError as e:
            log("ORCHESTRATOR", f"❌ Creation failed: {e.message}", creation_id=creation_id)
            await self.state.fail(creation_id, e.message, e.details)
            raise
        except Exception as e:
            log("ORCHESTRATOR", f"❌ Unexpected error: {e}", creation_id=creation_id)
            await self.state.fail(creation_id, str(e))
            raise

        await self.state.complete(creation_id, output.to_dict())
        log(
            "ORCHESTRATOR",
            f"✅ Creation complete: {len(output.artifacts)} artifacts in {len(graph.layers)} layers",
            creation_id=creation_id,
        )
        return output
