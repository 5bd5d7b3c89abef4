# creator/orchestration/progress.py
"""
Progress reporting for orchestrate_with_progress.

Fixed stage boundaries:
    planning=10, decomposing=20, scheduling=30,
    executing=40..80, validating=85, assembling=95, complete=100

Percentages never go backwards within one run.
"""
import inspect
from typing import Any, Callable, Dict, List, Optional

from creator.core.logging import log
from creator.core.types import ProgressEvent, Stage


STAGE_PERCENTAGES: Dict[Stage, float] = {
    Stage.PLANNING: 10,
    Stage.DECOMPOSING: 20,
    Stage.SCHEDULING: 30,
    Stage.EXECUTING: 40,
    Stage.VALIDATING: 85,
    Stage.ASSEMBLING: 95,
    Stage.COMPLETE: 100,
}

EXECUTION_BAND = (40.0, 80.0)

ProgressCallback = Callable[[ProgressEvent], Any]


class ProgressReporter:
    """
    Wraps a caller-supplied callback (sync or async).

    Every emitted event is also kept in `events` for inspection.
    """

    def __init__(self, on_progress: Optional[ProgressCallback] = None, creation_id: Optional[str] = None):
        self.on_progress = on_progress
        self.creation_id = creation_id
        self.events: List[ProgressEvent] = []
        self._last = 0.0

    @property
    def percentage(self) -> float:
        return self._last

    async def stage(self, stage: Stage, message: str, **details: Any) -> ProgressEvent:
        """Emit a fixed stage-boundary event."""
        return await self._emit(stage, STAGE_PERCENTAGES[stage], {"message": message, **details})

    async def task_completed(self, completed: int, total: int, task_id: Optional[str] = None) -> ProgressEvent:
        """Emit an executing event scaled into the execution band."""
        fraction = completed / total if total else 1.0
        low, high = EXECUTION_BAND
        details: Dict[str, Any] = {
            "message": f"Processing tasks: {round(fraction * 100)}%",
            "completed": completed,
            "total": total,
        }
        if task_id:
            details["task_id"] = task_id
        return await self._emit(Stage.EXECUTING, low + fraction * (high - low), details)

    async def _emit(self, stage: Stage, percentage: float, details: Dict[str, Any]) -> ProgressEvent:
        percentage = max(self._last, min(float(percentage), 100.0))
        self._last = percentage
        event = ProgressEvent(stage=stage, percentage=percentage, details=details)
        self.events.append(event)

        if self.on_progress is None:
            return event

        try:
            outcome = self.on_progress(event)
            if inspect.isawaitable(outcome):
                await outcome
        except Exception as e:
            # Progress sinks never abort a run
            log("ORCHESTRATOR", f"⚠️ Progress callback failed at {stage.value}: {e}", creation_id=self.creation_id)
        return event
