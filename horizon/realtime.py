"""
Publish-only websocket channel for live chat
"""
import logging
from typing import List

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from fastapi.encoders import jsonable_encoder

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Realtime"])


class ChatBroadcaster:
    """Pushes events to every connected chat client"""

    def __init__(self):
        self.active_connections: List[WebSocket] = []

    async def connect(self, websocket: WebSocket):
        await websocket.accept()
        self.active_connections.append(websocket)
        logger.info("Chat client connected (%d open)", len(self.active_connections))

    def disconnect(self, websocket: WebSocket):
        if websocket in self.active_connections:
            self.active_connections.remove(websocket)
            logger.info("Chat client disconnected (%d open)", len(self.active_connections))

    async def broadcast(self, event: str, data) -> int:
        """Send {event, data} to all clients; returns how many received it"""
        payload = jsonable_encoder({"event": event, "data": data})
        delivered = 0
        for connection in list(self.active_connections):
            try:
                await connection.send_json(payload)
                delivered += 1
            except (WebSocketDisconnect, RuntimeError) as e:
                logger.warning("Dropping broken chat connection: %s", e)
                self.disconnect(connection)
        return delivered


@router.websocket("/ws/chat")
async def chat_socket(websocket: WebSocket):
    broadcaster: ChatBroadcaster = websocket.app.state.broadcaster
    await broadcaster.connect(websocket)
    try:
        # Client frames are ignored, the channel only carries server events
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        broadcaster.disconnect(websocket)
