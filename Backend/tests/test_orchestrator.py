# tests/test_orchestrator.py
"""
End-to-end tests for CreationOrchestrator: the full pipeline, progress
reporting, error propagation, cancellation and run state.
"""
import asyncio
from unittest.mock import AsyncMock

import pytest

from creator.core.exceptions import CreationCancelledError, RequestError, TaskExecutionError
from creator.core.types import CreationRequest, Stage
from creator.engines import EngineKind, EngineRegistry
from creator.orchestration import CreationOrchestrator
from creator.orchestration.state import CANCELLED, COMPLETE, FAILED, CreationStateManager

from conftest import FailingEngine, RecordingEngine


@pytest.fixture
def orchestrator(config):
    return CreationOrchestrator(config=config)


def _slow_registry(log, delay=0.5):
    registry = EngineRegistry()
    for kind in EngineKind:
        registry.register(kind, RecordingEngine(kind, log, delay=delay))
    return registry


class TestFullPipeline:

    @pytest.mark.asyncio
    async def test_app_with_builtin_engines(self, orchestrator, app_request, builtin_registry, library):
        output = await orchestrator.orchestrate(app_request, builtin_registry, library)

        assert output.success is True
        assert sorted(output.artifacts) == [f"task-{i}" for i in range(7)]
        assert all(a["validation"]["valid"] for a in output.artifacts.values())

        project = output.project
        assert project["name"] == "Demo"
        assert project["files"][0]["path"] == "src/styles/tokens.css"
        assert "tokens.css" in project["structure"]["src/"]["styles/"]
        assert "schema.sql" in project["structure"]["database/"]
        assert project["instructions"]["deployment"] == ["npm i -g vercel", "vercel link", "vercel --prod"]

    @pytest.mark.asyncio
    async def test_spec_drives_generated_output(self, orchestrator, builtin_registry, library):
        request = CreationRequest(type="app", spec={
            "name": "Shop",
            "routes": ["home", "cart"],
            "models": [{"name": "Order"}],
            "deployPlatform": "heroku",
        })
        output = await orchestrator.orchestrate(request, builtin_registry, library)

        structure = output.project["structure"]
        assert set(structure["src/"]["pages/"]) == {"Home.jsx", "Cart.jsx"}
        assert "CREATE TABLE orders" in structure["database/"]["schema.sql"]
        assert structure["config/"] == {"Procfile": "web: node src/index.js\n"}
        assert output.project["instructions"]["deployment"] == ["heroku create", "git push heroku main"]

    @pytest.mark.asyncio
    async def test_startup_workflow(self, orchestrator, startup_request, builtin_registry):
        output = await orchestrator.orchestrate(startup_request, builtin_registry)

        assert output.success is True
        names = [a["task"] for a in output.artifacts.values()]
        assert names == ["business-plan", "landing-page", "mvp", "marketing"]
        assert output.project is None

    @pytest.mark.asyncio
    async def test_accepts_plain_dict_request(self, orchestrator, recording_registry):
        output = await orchestrator.orchestrate({"type": "app", "spec": {"name": "Dict"}}, recording_registry)
        assert output.project["name"] == "Dict"

    @pytest.mark.asyncio
    async def test_unknown_type_is_empty_success(self, orchestrator, recording_registry, engine_log):
        output = await orchestrator.orchestrate(CreationRequest(type="video", spec={}), recording_registry)

        assert output.success is True
        assert output.artifacts == {}
        assert output.project is None
        assert engine_log.events == []

    @pytest.mark.asyncio
    async def test_missing_type_is_rejected(self, orchestrator, recording_registry):
        with pytest.raises(RequestError):
            await orchestrator.orchestrate({"spec": {"name": "x"}}, recording_registry)

    @pytest.mark.asyncio
    async def test_concurrent_runs_are_independent(self, orchestrator, recording_registry):
        first, second = await asyncio.gather(
            orchestrator.orchestrate(CreationRequest(type="app", spec={"name": "One"}), recording_registry),
            orchestrator.orchestrate(CreationRequest(type="app", spec={"name": "Two"}), recording_registry),
        )
        assert first.project["name"] == "One"
        assert second.project["name"] == "Two"
        assert len(first.artifacts) == len(second.artifacts) == 7


class TestFailures:

    @pytest.mark.asyncio
    async def test_engine_failure_propagates(self, orchestrator, app_request):
        registry = EngineRegistry({kind: FailingEngine(kind, "generator offline") for kind in EngineKind})

        with pytest.raises(TaskExecutionError) as exc:
            await orchestrator.orchestrate(app_request, registry, creation_id="run-fail")

        assert exc.value.task_id == "task-0"
        assert exc.value.engine == "design"
        record = orchestrator.state.get("run-fail")
        assert record.status == FAILED
        assert "generator offline" in record.error

    @pytest.mark.asyncio
    async def test_failure_after_first_layer_keeps_partials(self, orchestrator, app_request, engine_log):
        registry = _slow_registry(engine_log, delay=0.0)
        registry.register(EngineKind.APP, FailingEngine(EngineKind.APP))

        with pytest.raises(TaskExecutionError) as exc:
            await orchestrator.orchestrate(app_request, registry)

        assert exc.value.task_id == "task-1"
        assert set(exc.value.partial_artifacts) == {"task-0", "task-2"}


class TestProgress:

    @pytest.mark.asyncio
    async def test_event_sequence(self, orchestrator, app_request, recording_registry):
        events = []
        await orchestrator.orchestrate_with_progress(app_request, recording_registry, None, events.append)

        assert len(events) >= 14
        percentages = [e.percentage for e in events]
        assert percentages == sorted(percentages)
        assert events[0].stage == Stage.PLANNING
        assert events[0].percentage == 10
        assert events[-1].stage == Stage.COMPLETE
        assert events[-1].percentage == 100

        stages = [e.stage for e in events if e.stage != Stage.EXECUTING]
        assert stages == [
            Stage.PLANNING, Stage.DECOMPOSING, Stage.SCHEDULING,
            Stage.VALIDATING, Stage.ASSEMBLING, Stage.COMPLETE,
        ]

    @pytest.mark.asyncio
    async def test_async_callback(self, orchestrator, startup_request, recording_registry):
        on_progress = AsyncMock()

        await orchestrator.orchestrate_with_progress(startup_request, recording_registry, None, on_progress)

        # 7 stage boundaries plus one event per task
        assert on_progress.await_count == 7 + 4
        assert on_progress.await_args_list[-1].args[0].stage == Stage.COMPLETE

    @pytest.mark.asyncio
    async def test_broken_callback_does_not_abort(self, orchestrator, app_request, recording_registry):
        def on_progress(event):
            raise ValueError("sink closed")

        output = await orchestrator.orchestrate_with_progress(app_request, recording_registry, None, on_progress)
        assert output.success is True

    @pytest.mark.asyncio
    async def test_empty_run_still_completes(self, orchestrator, recording_registry):
        events = []
        await orchestrator.orchestrate_with_progress(
            CreationRequest(type="video", spec={}), recording_registry, None, events.append
        )
        assert events[-1].stage == Stage.COMPLETE
        assert events[-1].percentage == 100


class TestCancellation:

    @pytest.mark.asyncio
    async def test_cancel_active_run(self, orchestrator, app_request, engine_log):
        registry = _slow_registry(engine_log)
        run = asyncio.ensure_future(
            orchestrator.orchestrate(app_request, registry, creation_id="run-cancel")
        )
        await asyncio.sleep(0.05)

        assert orchestrator.cancel("run-cancel") is True
        with pytest.raises(CreationCancelledError) as exc:
            await asyncio.wait_for(run, timeout=1.0)

        assert exc.value.creation_id == "run-cancel"
        assert orchestrator.state.get("run-cancel").status == CANCELLED
        assert not orchestrator.state.is_active("run-cancel")

    @pytest.mark.asyncio
    async def test_caller_cancel_marks_run_cancelled(self, orchestrator, app_request, engine_log):
        registry = _slow_registry(engine_log, delay=0.3)
        run = asyncio.ensure_future(
            orchestrator.orchestrate(app_request, registry, creation_id="run-caller")
        )
        await asyncio.sleep(0.05)
        run.cancel()

        with pytest.raises(asyncio.CancelledError):
            await run

        record = orchestrator.state.get("run-caller")
        assert record.status == CANCELLED
        assert not orchestrator.state.is_active("run-caller")
        assert orchestrator.state.metrics()["activeCreations"] == 0

        # Nothing keeps running once the caller has gone
        await asyncio.sleep(0.4)
        assert [e for e in engine_log.events if e.event == "end"] == []
        assert engine_log.in_flight == 0

    @pytest.mark.asyncio
    async def test_engine_raising_cancelled_fails_the_run(self, orchestrator, app_request, engine_log):
        class Abandoning(RecordingEngine):
            async def execute_task(self, ctx):
                raise asyncio.CancelledError()

        registry = _slow_registry(engine_log, delay=0.0)
        registry.register(EngineKind.DESIGN, Abandoning(EngineKind.DESIGN, engine_log))

        with pytest.raises(TaskExecutionError) as exc:
            await orchestrator.orchestrate(app_request, registry, creation_id="run-abandoned")

        assert exc.value.task_id == "task-0"
        assert orchestrator.state.get("run-abandoned").status == FAILED
        assert orchestrator.state.metrics()["activeCreations"] == 0

    def test_cancel_unknown_run(self, orchestrator):
        assert orchestrator.cancel("nope") is False


class TestRunState:

    @pytest.mark.asyncio
    async def test_metrics(self, orchestrator, app_request, recording_registry):
        await orchestrator.orchestrate(app_request, recording_registry, creation_id="ok")
        with pytest.raises(RequestError):
            await orchestrator.orchestrate({"type": ""}, recording_registry, creation_id="bad")

        metrics = orchestrator.state.metrics()
        assert metrics["totalCreations"] == 2
        assert metrics["activeCreations"] == 0
        assert metrics["successRate"] == 50.0
        assert orchestrator.state.get("ok").status == COMPLETE
        assert orchestrator.state.get("ok").result["success"] is True

    @pytest.mark.asyncio
    async def test_history_is_bounded(self, config, recording_registry):
        orchestrator = CreationOrchestrator(config=config, state=CreationStateManager(history_limit=2))
        for i in range(3):
            await orchestrator.orchestrate(CreationRequest(type="video"), recording_registry, creation_id=f"r{i}")

        assert [r.id for r in orchestrator.state.list()] == ["r1", "r2"]
        assert orchestrator.state.metrics()["totalCreations"] == 3
