# creator/api/errors.py
"""
Translate orchestrator failures into structured JSON error responses.
"""
from typing import Any, Dict, Optional

from starlette.responses import JSONResponse

from creator.core.exceptions import (
    CreationCancelledError,
    CreatorError,
    EngineNotFoundError,
    RequestError,
)


def status_for(error: CreatorError) -> int:
    if isinstance(error, RequestError):
        return 400
    if isinstance(error, EngineNotFoundError):
        return 404
    if isinstance(error, CreationCancelledError):
        return 409
    return 500


def error_body(error: CreatorError, creation_id: Optional[str] = None) -> Dict[str, Any]:
    body: Dict[str, Any] = {
        "status": "error",
        "error": error.message,
        "kind": type(error).__name__,
        "details": {k: v for k, v in error.details.items() if v is not None},
    }
    if creation_id:
        body["id"] = creation_id
    partial = getattr(error, "partial_artifacts", None)
    if partial:
        body["partialArtifacts"] = partial
    return body


def error_response(error: CreatorError, creation_id: Optional[str] = None) -> JSONResponse:
    return JSONResponse(status_code=status_for(error), content=error_body(error, creation_id))
