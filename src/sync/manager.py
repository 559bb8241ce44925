import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Type

from database.store import DocumentStore, Query
from sync.subscription import LiveQuery, T

LOGGER = logging.getLogger(__name__)


class SubscriptionManager:
    """
    Named subscription slots for one view. A slot holds at most one live
    query; rebinding a slot to a different query tears the old one down
    before the new one is opened.

    Binds and releases of a slot may overlap while a teardown is awaited.
    Every request takes a ticket and only the latest request for a slot is
    installed, so an overtaken bind never leaves a listener behind.
    """

    store: DocumentStore
    role: Optional[str]
    slots: Dict[str, LiveQuery]
    tickets: Dict[str, int]

    def __init__(self, store: DocumentStore, role: Optional[str] = None):
        self.store = store
        self.role = role
        self.slots = {}
        self.tickets = {}

    def _request(self, slot: str) -> int:
        self.tickets[slot] = self.tickets.get(slot, 0) + 1
        return self.tickets[slot]

    async def bind(
        self,
        slot: str,
        query: Query,
        schema: Type[T],
        on_change: Optional[Callable[[LiveQuery[T]], Awaitable[None]]] = None,
    ) -> Optional[LiveQuery[T]]:
        """
        Bind `slot` to `query`. Returns None when a later bind or release of
        the same slot overtook this one.
        """
        ticket = self._request(slot)
        while (current := self.slots.get(slot)) is not None:
            if current.active and current.key == (query, self.role):
                return current
            LOGGER.debug(f"Rebinding {slot}: {current.query} -> {query}")
            await self._drop(slot)
            if self.tickets[slot] != ticket:
                LOGGER.debug(f"Bind of {slot} to {query} was superseded")
                return None

        live = LiveQuery(self.store, query, schema, on_change, role=self.role)
        self.slots[slot] = live
        await live.open()
        return live

    async def _drop(self, slot: str):
        live = self.slots.pop(slot, None)
        if live is not None:
            await live.close()

    async def release(self, slot: str):
        self._request(slot)
        await self._drop(slot)

    async def close(self):
        for slot in list(self.tickets):
            self._request(slot)
        for slot in list(self.slots):
            await self._drop(slot)

    def items(self, slot: str) -> List[Any]:
        live = self.slots.get(slot)
        return list(live.items) if live is not None else []

    def __contains__(self, slot: str) -> bool:
        return slot in self.slots

    def __len__(self) -> int:
        return len(self.slots)
