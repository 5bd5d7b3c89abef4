# creator/api/creations.py
"""
Creation routes - run the orchestrator over HTTP and query run state.
"""
import time
import uuid
from typing import Any, Dict, Optional

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel, Field

from creator.api.errors import error_response
from creator.core.exceptions import CreatorError
from creator.core.logging import log
from creator.core.types import CreationRequest
from creator.orchestration.decomposer import WORKFLOW_TASKS


router = APIRouter(prefix="/api", tags=["Creations"])


class CreateRequest(BaseModel):
    type: str
    spec: Dict[str, Any] = Field(default_factory=dict)
    options: Dict[str, Any] = Field(default_factory=dict)

    def to_request(self) -> CreationRequest:
        return CreationRequest(type=self.type, spec=dict(self.spec), options=dict(self.options))


async def run_creation(request: Request, creation: CreationRequest):
    state = request.app.state
    creation_id = uuid.uuid4().hex
    started = time.monotonic()
    log("API", f"POST create type={creation.type}", creation_id=creation_id)

    try:
        output = await state.orchestrator.orchestrate(
            creation,
            state.registry,
            state.library,
            creation_id=creation_id,
        )
    except CreatorError as e:
        return error_response(e, creation_id)

    return {
        "id": creation_id,
        "status": "success",
        "result": output.to_dict(),
        "duration": int((time.monotonic() - started) * 1000),
    }


@router.post("/create")
async def create(request: Request, data: CreateRequest):
    """Run a full creation and return the assembled output."""
    return await run_creation(request, data.to_request())


@router.get("/create/{creation_id}")
async def get_creation(request: Request, creation_id: str):
    """Status (and result, once complete) of one creation."""
    record = request.app.state.orchestrator.state.get(creation_id)
    if record is None:
        raise HTTPException(status_code=404, detail="Creation not found")
    return record.to_dict()


@router.post("/create/{creation_id}/cancel")
async def cancel_creation(request: Request, creation_id: str):
    """Cancel an in-flight creation."""
    if not request.app.state.orchestrator.cancel(creation_id):
        raise HTTPException(status_code=404, detail="No active creation with that id")
    return {"id": creation_id, "status": "cancelling"}


@router.get("/creations")
async def list_creations(request: Request):
    """All tracked creations (without results) plus aggregate metrics."""
    state = request.app.state.orchestrator.state
    return {
        "creations": [record.to_dict(include_result=False) for record in state.list()],
        "metrics": state.metrics(),
    }


@router.post("/workflow/{name}")
async def run_workflow(request: Request, name: str, body: Optional[Dict[str, Any]] = None):
    """Shortcut for {type: "workflow", spec: {workflow: name, ...body}}."""
    if name not in WORKFLOW_TASKS:
        raise HTTPException(status_code=404, detail="Workflow not found")
    spec = {**(body or {}), "workflow": name}
    return await run_creation(request, CreationRequest(type="workflow", spec=spec))
