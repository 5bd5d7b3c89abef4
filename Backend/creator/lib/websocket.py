from typing import Dict, List
import asyncio

from fastapi import WebSocket

from creator.core.logging import log


class ConnectionManager:
    """
    Per-creation WebSocket fan-out.

    - Each creation id has its own list of subscribed sockets.
    - The socket that started a creation is subscribed automatically;
      others can watch an existing creation by id.
    """

    def __init__(self) -> None:
        # creation_id -> list[WebSocket]
        self.active_connections: Dict[str, List[WebSocket]] = {}
        self._lock = asyncio.Lock()

    async def connect(self, websocket: WebSocket, creation_id: str) -> None:
        await websocket.accept()
        await self.subscribe(websocket, creation_id)

    async def subscribe(self, websocket: WebSocket, creation_id: str) -> None:
        async with self._lock:
            self.active_connections.setdefault(creation_id, []).append(websocket)

    async def disconnect(self, websocket: WebSocket, creation_id: str) -> None:
        async with self._lock:
            connections = self.active_connections.get(creation_id, [])
            if websocket in connections:
                connections.remove(websocket)
            if not connections and creation_id in self.active_connections:
                del self.active_connections[creation_id]

    async def send_to_creation(self, creation_id: str, message: dict) -> None:
        """
        Send a JSON frame to every socket watching a creation.
        Takes a snapshot under lock; dead sockets are dropped.
        """
        async with self._lock:
            connections = list(self.active_connections.get(creation_id, []))

        disconnected: List[WebSocket] = []

        for ws in connections:
            try:
                await ws.send_json(message)
            except Exception as e:
                log("WS", f"Dropping socket for {creation_id[:8]}: {e}")
                disconnected.append(ws)

        for ws in disconnected:
            await self.disconnect(ws, creation_id)
