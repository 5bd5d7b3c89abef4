# creator/orchestration/state.py
"""
Creation run state - in-memory record of every run plus aggregate metrics.
"""
import asyncio
import time
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from creator.core.types import CancellationToken, now_ms
from creator.lib.monitoring import record_finished_creation, set_active_creations


STARTING = "starting"
RUNNING = "running"
COMPLETE = "complete"
FAILED = "failed"
CANCELLED = "cancelled"

FINISHED_STATES = {COMPLETE, FAILED, CANCELLED}


@dataclass
class CreationRecord:
    id: str
    type: str
    status: str = STARTING
    start_time: int = field(default_factory=now_ms)
    duration: Optional[int] = None
    result: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self, include_result: bool = True) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "type": self.type,
            "status": self.status,
            "startTime": self.start_time,
            "duration": self.duration,
        }
        if self.error is not None:
            data["error"] = self.error
            data["details"] = dict(self.details)
        if include_result and self.result is not None:
            data["result"] = self.result
        return data


class CreationStateManager:
    """
    Tracks creation runs for status queries and cancellation.

    Finished records beyond `history_limit` are evicted oldest first.
    """

    def __init__(self, history_limit: int = 100):
        self.history_limit = history_limit
        self._records: "OrderedDict[str, CreationRecord]" = OrderedDict()
        self._tokens: Dict[str, CancellationToken] = {}
        self._started_at: Dict[str, float] = {}
        self._lock = asyncio.Lock()
        self.total_creations = 0
        self.successful_creations = 0
        self.average_time = 0.0

    async def start(self, creation_id: str, creation_type: str, token: CancellationToken) -> CreationRecord:
        async with self._lock:
            record = CreationRecord(id=creation_id, type=creation_type, status=RUNNING)
            self._records[creation_id] = record
            self._tokens[creation_id] = token
            self._started_at[creation_id] = time.monotonic()
            set_active_creations(len(self._tokens))
            return record

    async def complete(self, creation_id: str, result: Dict[str, Any]) -> None:
        await self._finish(creation_id, COMPLETE, result=result)

    async def fail(self, creation_id: str, error: str, details: Optional[Dict[str, Any]] = None) -> None:
        await self._finish(creation_id, FAILED, error=error, details=details)

    async def mark_cancelled(self, creation_id: str, error: str) -> None:
        await self._finish(creation_id, CANCELLED, error=error)

    async def _finish(
        self,
        creation_id: str,
        status: str,
        result: Optional[Dict[str, Any]] = None,
        error: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        async with self._lock:
            record = self._records.get(creation_id)
            if record is None:
                return
            started = self._started_at.pop(creation_id, time.monotonic())
            self._tokens.pop(creation_id, None)

            record.status = status
            record.duration = int((time.monotonic() - started) * 1000)
            record.result = result
            record.error = error
            record.details = dict(details or {})

            self.total_creations += 1
            if status == COMPLETE:
                self.successful_creations += 1
            # Running mean over every finished run
            self.average_time += (record.duration - self.average_time) / self.total_creations

            set_active_creations(len(self._tokens))
            record_finished_creation(status)
            self._evict()

    def _evict(self) -> None:
        finished = [cid for cid, rec in self._records.items() if rec.status in FINISHED_STATES]
        while len(finished) > self.history_limit:
            self._records.pop(finished.pop(0), None)

    def cancel(self, creation_id: str, reason: str = "cancelled by request") -> bool:
        """Fire the token of an active run. False if the run is not active."""
        token = self._tokens.get(creation_id)
        if token is None:
            return False
        token.cancel(reason)
        return True

    def get(self, creation_id: str) -> Optional[CreationRecord]:
        return self._records.get(creation_id)

    def list(self) -> List[CreationRecord]:
        return list(self._records.values())

    def is_active(self, creation_id: str) -> bool:
        return creation_id in self._tokens

    def metrics(self) -> Dict[str, Any]:
        success_rate = 100.0
        if self.total_creations:
            success_rate = round(100.0 * self.successful_creations / self.total_creations, 2)
        return {
            "totalCreations": self.total_creations,
            "activeCreations": len(self._tokens),
            "successRate": success_rate,
            "averageTime": round(self.average_time, 2),
        }
