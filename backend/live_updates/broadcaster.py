import logging
from typing import Any, Dict, Set

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class EventBroadcaster:
    """WebSocket connections for real-time updates"""

    def __init__(self):
        self.connections: Set[WebSocket] = set()

    async def connect(self, websocket: WebSocket):
        await websocket.accept()
        self.connections.add(websocket)
        logger.info(f"Live update client connected ({len(self.connections)} total)")

    def disconnect(self, websocket: WebSocket):
        self.connections.discard(websocket)

    async def broadcast(self, event: str, payload: Dict[str, Any]):
        """Send a change event to every connected client, dropping dead connections"""
        message = {"event": event, "payload": payload}
        disconnected = set()
        for ws in list(self.connections):
            try:
                await ws.send_json(message)
            except Exception as e:
                logger.debug(f"Dropping websocket after send error: {e}")
                disconnected.add(ws)
        self.connections -= disconnected
