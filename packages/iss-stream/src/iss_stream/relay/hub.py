from __future__ import annotations

import logging
from typing import Protocol

logger = logging.getLogger(__name__)

GOING_AWAY = 1001


class ViewerConnection(Protocol):
    async def send_text(self, data: str) -> None: ...

    async def close(self, code: int = 1000) -> None: ...


class ConnectionHub:
    """Registry of currently open viewer connections.

    Owned by the transport endpoint. Broadcasters only read snapshots.
    """

    def __init__(self) -> None:
        self._connections: set[ViewerConnection] = set()
        self._accepting = True

    @property
    def accepting(self) -> bool:
        return self._accepting

    def register(self, connection: ViewerConnection) -> bool:
        if not self._accepting:
            return False
        self._connections.add(connection)
        logger.info("viewer_connected", extra={"connections": len(self._connections)})
        return True

    def unregister(self, connection: ViewerConnection) -> None:
        if connection in self._connections:
            self._connections.discard(connection)
            logger.info("viewer_disconnected", extra={"connections": len(self._connections)})

    def snapshot(self) -> list[ViewerConnection]:
        return list(self._connections)

    async def close_all(self) -> None:
        self._accepting = False
        connections = self.snapshot()
        self._connections.clear()
        for connection in connections:
            try:
                await connection.close(code=GOING_AWAY)
            except Exception:
                logger.warning("viewer_close_failed", exc_info=True)
        logger.info("viewer_hub_closed", extra={"closed": len(connections)})

    def __len__(self) -> int:
        return len(self._connections)
