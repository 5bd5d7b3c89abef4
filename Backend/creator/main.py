# creator/main.py
"""
Create Styler Backend - creation orchestration service.
"""
import uuid
import uvicorn
from contextlib import asynccontextmanager

from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from starlette.middleware.cors import CORSMiddleware

from creator import __version__
from creator.core.config import settings
from creator.core.exceptions import CreatorError, RequestError
from creator.core.logging import log
from creator.core.types import CreationRequest, ProgressEvent
from creator.api.errors import error_body
from creator.engines import ResourceLibrary, default_registry
from creator.lib.monitoring import register_monitoring
from creator.lib.websocket import ConnectionManager
from creator.orchestration import CreationOrchestrator


manager = ConnectionManager()


# ---------------------------------------------------------------------------
# LIFESPAN
# ---------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown."""
    print("🚀 Create Styler starting...")
    await app.state.library.initialize()
    print(f"🎨 Engines: {', '.join(app.state.registry.names())}")

    yield

    print("🔌 Shutting down...")


# ---------------------------------------------------------------------------
# APP INITIALIZATION
# ---------------------------------------------------------------------------

app = FastAPI(
    title="Create Styler",
    version=__version__,
    lifespan=lifespan,
)
app.state.manager = manager
app.state.registry = default_registry()
app.state.library = ResourceLibrary()
app.state.orchestrator = CreationOrchestrator(settings.orchestrator)

register_monitoring(app)

cors_origins = settings.server.cors_origins
if cors_origins == ["*"] and not settings.debug:
    print("⚠️ [CORS] Warning: Using allow_origins=['*'] - consider setting CORS_ORIGINS in production")

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------------------------------------------------------
# WEBSOCKET
# ---------------------------------------------------------------------------

def request_from_frame(data: dict) -> CreationRequest:
    """`{type: "create", request: {...}}` or the flat creationType/spec/options form."""
    request = data.get("request") or {
        "type": data.get("creationType"),
        "spec": data.get("spec"),
        "options": data.get("options"),
    }
    return CreationRequest.from_dict(request)


async def stream_creation(websocket: WebSocket, creation: CreationRequest) -> None:
    """Run one creation, forwarding every progress event as a frame."""
    creation_id = uuid.uuid4().hex
    await manager.subscribe(websocket, creation_id)
    await manager.send_to_creation(creation_id, {"type": "creation.started", "id": creation_id})

    async def on_progress(event: ProgressEvent) -> None:
        await manager.send_to_creation(
            creation_id,
            {"type": "creation.progress", "id": creation_id, **event.to_dict()},
        )

    try:
        output = await app.state.orchestrator.orchestrate_with_progress(
            creation,
            app.state.registry,
            app.state.library,
            on_progress,
            creation_id=creation_id,
        )
        await manager.send_to_creation(
            creation_id,
            {"type": "creation.complete", "id": creation_id, "result": output.to_dict()},
        )
    except CreatorError as e:
        await manager.send_to_creation(creation_id, {"type": "error", **error_body(e, creation_id)})
    except Exception as e:
        log("WS", f"❌ Creation crashed: {e}", creation_id=creation_id)
        failure = CreatorError(str(e), {"kind": type(e).__name__})
        await manager.send_to_creation(creation_id, {"type": "error", **error_body(failure, creation_id)})
    finally:
        await manager.disconnect(websocket, creation_id)


@app.websocket("/ws/create")
async def creation_socket(websocket: WebSocket):
    await websocket.accept()
    try:
        while True:
            try:
                data = await websocket.receive_json()
                if not isinstance(data, dict):
                    raise RequestError("Frame must be a JSON object", {"frame": type(data).__name__})

                if data.get("type") == "create":
                    await stream_creation(websocket, request_from_frame(data))
                elif data.get("type") == "engines":
                    await websocket.send_json({"type": "engines", "engines": app.state.registry.names()})
                else:
                    await websocket.send_json({"type": "error", "error": f"Unknown message type: {data.get('type')}"})

            except WebSocketDisconnect:
                raise
            except CreatorError as e:
                await websocket.send_json({"type": "error", **error_body(e)})
            except Exception as e:
                # Malformed frames answer with an error and keep the socket open
                log("WS", f"❌ Bad frame: {e}")
                await websocket.send_json({"type": "error", "error": str(e), "kind": type(e).__name__})

    except WebSocketDisconnect:
        log("WS", "Client disconnected")


@app.websocket("/ws/creations/{creation_id}")
async def watch_creation(websocket: WebSocket, creation_id: str):
    """Follow the progress frames of a creation started elsewhere."""
    await manager.connect(websocket, creation_id)
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        await manager.disconnect(websocket, creation_id)


# ---------------------------------------------------------------------------
# API ROUTES
# ---------------------------------------------------------------------------

from creator.api import (
    health,
    creations,
    engines,
)

app.include_router(health.router)
app.include_router(creations.router)
app.include_router(engines.router)


# ---------------------------------------------------------------------------
# RUN
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    uvicorn.run(
        "creator.main:app",
        host="0.0.0.0",
        port=settings.server.port,
        reload=settings.debug,
    )
