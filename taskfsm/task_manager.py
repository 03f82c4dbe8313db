"""Task coordination against an external store.

The TaskManager never owns storage. It is handed two async callables:

- ``search(*, search_params)`` resolves to the matching objects
- ``update(obj)`` persists ``obj`` and resolves to ``{"object": persisted}``

Failures raised by either propagate unchanged. There is no retry, no
rollback and no per-entity locking; concurrent writes to the same entity
are last-write-wins at the store.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from taskfsm.machine import Machine

logger = logging.getLogger(__name__)


class SearchFn(Protocol):
    """Fetches objects matching ``search_params`` from the store."""

    async def __call__(self, *, search_params: Mapping[str, Any]) -> Sequence[Any]: ...


class UpdateFn(Protocol):
    """Persists a full object value and returns ``{"object": persisted}``."""

    async def __call__(self, obj: Any) -> Mapping[str, Any]: ...


class TaskManager:
    """Runs a Machine's transitions through the store's search/update.

    Args:
        machine: Transition engine for the managed objects
        search: Async lookup into the external store
        update: Async write into the external store
    """

    def __init__(self, machine: Machine, search: SearchFn, update: UpdateFn) -> None:
        self._machine = machine
        self._search = search
        self._update = update

    @property
    def machine(self) -> Machine:
        return self._machine

    async def find(self, search_params: Mapping[str, Any] | None = None) -> list[Any]:
        """Return the objects the store matches for ``search_params``."""
        params = dict(search_params or {})
        found = list(await self._search(search_params=params))
        logger.debug("search %s matched %d object(s)", params, len(found))
        return found

    async def find_one(self, search_params: Mapping[str, Any]) -> Any | None:
        """Return the first matching object, or None."""
        found = await self.find(search_params)
        return found[0] if found else None

    async def start(self, obj: Any) -> Any:
        """Put ``obj`` into the initial state.

        Unlike `send_event` this does not call ``update``: persisting the
        started object is left to the caller.
        """
        return await self._machine.start(obj)

    async def send_event(self, obj: Any, event: str, request: Any = None) -> Mapping[str, Any]:
        """Transition ``obj`` and persist the result.

        The caller's object is trusted as current; the store is not searched
        first.

        Returns:
            The value resolved by ``update``, i.e. the store's view of the
            object after the write.

        Raises:
            IllegalTransitionError: No transition for the event; nothing is
                written.
            GuardRejectedError: A guard declined; nothing is written.
            Exception: Whatever ``update`` raises, unchanged.
        """
        transitioned = await self._machine.send_event(obj, event, request)
        logger.debug(
            "persisting %s after event %r",
            self._machine.current_state(transitioned),
            event,
        )
        return await self._update(transitioned)
