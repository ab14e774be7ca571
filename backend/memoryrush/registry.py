import logging
import threading
from typing import Dict, Optional


class ConnectionRegistry:
    """Live Socket.IO connections that receive game events.

    Each admitted connection is bound to the player name it was given. Every
    protocol line goes out as a ``message`` event on ``namespace``.
    Delivery is best-effort: a failing connection is logged and skipped.
    """

    def __init__(self, socketio, namespace: str = '/ws', event: str = 'message', logger=None):
        self._socketio = socketio
        self.namespace = namespace
        self.event = event
        self.logger = logger or logging.getLogger(__name__)
        self._connections: Dict[str, str] = {}
        self._lock = threading.Lock()

    def register(self, connection_id: str, player_name: str) -> None:
        with self._lock:
            self._connections[connection_id] = player_name

    def remove(self, connection_id: str) -> Optional[str]:
        with self._lock:
            return self._connections.pop(connection_id, None)

    def name_for(self, connection_id: str) -> Optional[str]:
        with self._lock:
            return self._connections.get(connection_id)

    def send(self, connection_id: str, message: str) -> None:
        try:
            self._socketio.emit(self.event, message, to=connection_id, namespace=self.namespace)
        except Exception as exc:
            self.logger.warning(f"[send-failed] sid={connection_id} message={message!r} error={exc}")

    def broadcast(self, message: str) -> None:
        with self._lock:
            targets = list(self._connections)
        self.logger.debug(f"[broadcast] connections={len(targets)} message={message!r}")
        for connection_id in targets:
            self.send(connection_id, message)

    def __contains__(self, connection_id) -> bool:
        with self._lock:
            return connection_id in self._connections

    def __len__(self) -> int:
        with self._lock:
            return len(self._connections)
