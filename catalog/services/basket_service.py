"""Basket session store."""

import asyncio
from typing import Dict, Iterable, Optional, Set

from common.logging_config import get_logger
from catalog.exceptions import PersistenceError
from catalog.notifier import BasketNotifier
from catalog.repositories.basket_repository import BasketRepository

logger = get_logger(__name__)


class BasketStore:
    """
    Per-session sets of KB numbers marked for download.

    The in-memory map is authoritative while the process runs. Every change
    is copied to the basket repository and pushed to the notifier in
    background tasks; their failures are logged and never reach the caller.
    Calls for the same session are serialized by a per-session lock.
    """

    def __init__(
        self,
        repository: Optional[BasketRepository] = None,
        notifier: Optional[BasketNotifier] = None,
    ):
        self.repository = repository or BasketRepository()
        self.notifier = notifier
        self._baskets: Dict[str, Set[int]] = {}
        self._session_locks: Dict[str, asyncio.Lock] = {}
        self._pending: Set[asyncio.Task] = set()

    def _lock_for(self, session_id: str) -> asyncio.Lock:
        lock = self._session_locks.get(session_id)
        if lock is None:
            lock = self._session_locks.setdefault(session_id, asyncio.Lock())
        return lock

    async def load_from_database(self) -> int:
        """
        Restore every persisted basket into memory.

        Returns:
            Number of baskets loaded (0 when the store is unreachable)
        """
        try:
            persisted = self.repository.load_all()
        except Exception as e:
            logger.error(f"Basket recovery failed, starting with empty baskets: {e}", exc_info=True)
            return 0

        for session_id, kbs in persisted.items():
            async with self._lock_for(session_id):
                self._baskets.setdefault(session_id, set()).update(kbs)

        logger.info(f"Loaded {len(persisted)} baskets from database")
        return len(persisted)

    async def get(self, session_id: str) -> Set[int]:
        """
        Return a copy of the session's basket, creating an empty one on first contact.

        A session missing from memory is looked up in the repository first, so
        baskets written after startup recovery (or missed by it) are not lost.
        """
        async with self._lock_for(session_id):
            return set(self._basket_for(session_id))

    def _basket_for(self, session_id: str) -> Set[int]:
        # caller holds the session lock
        basket = self._baskets.get(session_id)
        if basket is not None:
            return basket

        persisted = self._read_persisted(session_id)
        if persisted is not None:
            basket = self._baskets[session_id] = persisted
            return basket

        basket = self._baskets[session_id] = set()
        logger.debug("Created empty basket for new session")
        self._schedule_persist(session_id, basket)
        return basket

    def _read_persisted(self, session_id: str) -> Optional[Set[int]]:
        try:
            return self.repository.get(session_id)
        except PersistenceError as e:
            logger.error(f"Failed to read persisted basket, starting empty: {e}")
            return None

    async def add(self, session_id: str, kb: int) -> Set[int]:
        async with self._lock_for(session_id):
            basket = self._basket_for(session_id)
            if kb in basket:
                return set(basket)
            basket.add(kb)
            snapshot = set(basket)
            self._after_change(session_id, snapshot)
        logger.info(f"Added to basket [kb={kb}] [size={len(snapshot)}]")
        return snapshot

    async def remove(self, session_id: str, kb: int) -> Set[int]:
        async with self._lock_for(session_id):
            basket = self._basket_for(session_id)
            if kb not in basket:
                return set(basket)
            basket.discard(kb)
            snapshot = set(basket)
            self._after_change(session_id, snapshot)
        logger.info(f"Removed from basket [kb={kb}] [size={len(snapshot)}]")
        return snapshot

    async def reconcile(self, session_id: str, local_kbs: Iterable[int]) -> Set[int]:
        """
        Merge a client-held basket into the server copy.

        Every local member is re-asserted with add(), so the result is the
        union of the server basket and the local one.
        """
        await self.get(session_id)
        for kb in set(local_kbs):
            await self.add(session_id, kb)
        merged = await self.get(session_id)
        logger.info(f"Reconciled basket [size={len(merged)}]")
        return merged

    def _after_change(self, session_id: str, snapshot: Set[int]) -> None:
        self._schedule_persist(session_id, snapshot)
        if self.notifier is not None:
            self._schedule(self._notify(session_id, snapshot))

    def _schedule_persist(self, session_id: str, snapshot: Set[int]) -> None:
        self._schedule(self._persist(session_id, set(snapshot)))

    def _schedule(self, coro) -> None:
        task = asyncio.create_task(coro)
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _persist(self, session_id: str, snapshot: Set[int]) -> None:
        try:
            self.repository.upsert(session_id, snapshot)
        except Exception as e:
            logger.error(f"Failed to persist basket, keeping in-memory copy: {e}", exc_info=True)

    async def _notify(self, session_id: str, snapshot: Set[int]) -> None:
        try:
            await self.notifier.publish(session_id, snapshot)
        except Exception as e:
            logger.error(f"Failed to publish basket update: {e}", exc_info=True)

    async def drain(self) -> None:
        """
        Wait for outstanding persistence and notification tasks.
        """
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
