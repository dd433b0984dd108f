"""Live basket notifications over WebSocket."""

import asyncio
from enum import Enum
from typing import Dict, Iterable, List, Set, Tuple

from fastapi import WebSocket

from common.logging_config import get_logger

logger = get_logger(__name__)

BASKET_UPDATED_EVENT = "basket_updated"


class NotificationScope(str, Enum):
    """Who hears about a basket change."""
    SESSION = "session"
    GLOBAL = "global"

    @classmethod
    def parse(cls, value: str) -> "NotificationScope":
        try:
            return cls(value.strip().lower())
        except ValueError:
            logger.warning(f"Unknown basket notification scope '{value}', using 'session'")
            return cls.SESSION


class BasketNotifier:
    """
    Tracks WebSocket connections by session id and pushes basket snapshots.

    Under SESSION scope only the connections of the session whose basket
    changed receive the update. GLOBAL scope sends it to every connection.
    """

    def __init__(self, scope: NotificationScope = NotificationScope.SESSION):
        self.scope = scope
        self._connections: Dict[str, Set[WebSocket]] = {}
        self._lock = asyncio.Lock()

    async def connect(self, session_id: str, websocket: WebSocket) -> None:
        async with self._lock:
            self._connections.setdefault(session_id, set()).add(websocket)
        logger.info(f"Basket listener connected [connections={self.connection_count}]")

    async def disconnect(self, session_id: str, websocket: WebSocket) -> None:
        async with self._lock:
            self._discard(session_id, websocket)
        logger.info(f"Basket listener disconnected [connections={self.connection_count}]")

    @property
    def connection_count(self) -> int:
        return sum(len(sockets) for sockets in self._connections.values())

    def _discard(self, session_id: str, websocket: WebSocket) -> None:
        sockets = self._connections.get(session_id)
        if not sockets:
            return
        sockets.discard(websocket)
        if not sockets:
            del self._connections[session_id]

    async def _targets(self, session_id: str) -> List[Tuple[str, WebSocket]]:
        async with self._lock:
            if self.scope == NotificationScope.GLOBAL:
                return [
                    (sid, websocket)
                    for sid, sockets in self._connections.items()
                    for websocket in sockets
                ]
            return [(session_id, websocket) for websocket in self._connections.get(session_id, ())]

    async def publish(self, session_id: str, kbs: Iterable[int]) -> int:
        """
        Send the full basket of a session to its listeners.

        The message never names the session: under GLOBAL scope it reaches
        other sessions, and the session id is their basket credential.

        Args:
            session_id: Session whose basket changed
            kbs: Complete basket contents after the change

        Returns:
            Number of connections that received the message
        """
        message = {
            "event": BASKET_UPDATED_EVENT,
            "basket": sorted(kbs),
        }

        delivered = 0
        stale = []
        for target_sid, websocket in await self._targets(session_id):
            try:
                await websocket.send_json(message)
                delivered += 1
            except Exception as e:
                logger.warning(f"Dropping basket listener after send failure: {e}")
                stale.append((target_sid, websocket))

        if stale:
            async with self._lock:
                for target_sid, websocket in stale:
                    self._discard(target_sid, websocket)

        logger.debug(f"Published basket update to {delivered} listener(s) [scope={self.scope.value}]")
        return delivered
