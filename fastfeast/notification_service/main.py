import logging
from typing import Dict, List

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

logger = logging.getLogger(__name__)

router = APIRouter(tags=["notifications"])


class ConnectionManager:
    """Live websocket listeners, grouped by restaurant id."""

    def __init__(self):
        self.active_connections: Dict[int, List[WebSocket]] = {}

    async def connect(self, websocket: WebSocket, restaurant_id: int):
        await websocket.accept()
        self.active_connections.setdefault(restaurant_id, []).append(websocket)
        logger.info("Restaurant %s listener connected", restaurant_id)

    def disconnect(self, websocket: WebSocket, restaurant_id: int):
        connections = self.active_connections.get(restaurant_id, [])
        if websocket in connections:
            connections.remove(websocket)
            logger.info("Restaurant %s listener disconnected", restaurant_id)
        if not connections:
            self.active_connections.pop(restaurant_id, None)

    async def send_message(self, message: str, restaurant_id: int) -> int:
        """Push ``message`` to every listener of the restaurant; returns how many got it."""
        delivered = 0
        for connection in list(self.active_connections.get(restaurant_id, [])):
            try:
                await connection.send_text(message)
                delivered += 1
            except Exception as e:
                logger.warning("Dropping restaurant %s listener: %s", restaurant_id, e)
                self.disconnect(connection, restaurant_id)
        return delivered


manager = ConnectionManager()


@router.websocket("/ws/{restaurant_id}")
async def websocket_endpoint(websocket: WebSocket, restaurant_id: int):
    await manager.connect(websocket, restaurant_id)
    try:
        while True:
            await websocket.receive_text()  # keep-alive
    except WebSocketDisconnect:
        manager.disconnect(websocket, restaurant_id)
