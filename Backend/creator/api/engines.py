# creator/api/engines.py
"""
Engine routes - list engines and invoke one engine directly, bypassing
the orchestrator.
"""
from typing import Any, Dict

from fastapi import APIRouter, Request
from pydantic import BaseModel, Field

from creator.api.errors import error_response
from creator.core.exceptions import CreatorError, EngineNotFoundError
from creator.core.logging import log

router = APIRouter(prefix="/api/engines", tags=["Engines"])


class DirectTaskRequest(BaseModel):
    task: str
    params: Dict[str, Any] = Field(default_factory=dict)


@router.get("")
async def list_engines(request: Request):
    """Registered engines."""
    return {"engines": [engine.describe() for _, engine in request.app.state.registry]}


@router.post("/{engine}/tasks")
async def execute_engine_task(request: Request, engine: str, data: DirectTaskRequest):
    """Run a single task on one engine."""
    state = request.app.state
    try:
        target = state.registry.resolve(engine)
    except EngineNotFoundError as e:
        return error_response(e)

    log("API", f"Direct task {data.task} on {engine}")
    try:
        result = await target.execute(data.task, data.params, state.library)
    except CreatorError as e:
        return error_response(e)
    except Exception as e:
        log("API", f"❌ Direct task {data.task} on {engine} failed: {e}")
        return error_response(CreatorError(str(e), {"engine": engine, "task": data.task}))

    return {"success": True, "engine": engine, "result": result}
