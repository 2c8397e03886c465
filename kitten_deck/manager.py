import logging
from typing import List

from fastapi import WebSocket, WebSocketDisconnect


class ConnectionManager:
    def __init__(self):
        self.active_connections: List[WebSocket] = []

    async def connect(self, websocket: WebSocket):
        """Accept a websocket and register it for broadcasts

        Args:
            websocket (WebSocket): Push channel connection
        """
        await websocket.accept()
        self.active_connections.append(websocket)

    def disconnect(self, websocket: WebSocket):
        if websocket in self.active_connections:
            self.active_connections.remove(websocket)

    async def send_personal_message(self, message: list | dict, websocket: WebSocket):
        await websocket.send_json(message)

    async def broadcast(self, message: list | dict):
        """Send the message to every connection, dropping the ones that fail

        Args:
            message (list | dict): JSON-serializable payload
        """
        logging.info(f"Broadcasting message to {len(self.active_connections)} connections")
        for connection in list(self.active_connections):
            try:
                await connection.send_json(message)
            except (WebSocketDisconnect, RuntimeError) as e:
                logging.warning(f"Error sending users data through WebSocket: {e}")
                self.disconnect(connection)
