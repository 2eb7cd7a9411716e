"""Single-writer client store with async thunks."""

from __future__ import annotations

import itertools
from types import MappingProxyType
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, TypeVar

from loguru import logger

from tourdesk.app.store.actions import INIT, Action
from tourdesk.app.store.reducer import Reducer

T = TypeVar("T")
RootState = Mapping[str, Any]
Listener = Callable[[RootState], None]
Thunk = Callable[["Store"], Awaitable[T]]


class Store:
    """Holds the root state and serializes every transition through reducers.

    Reducers run synchronously inside :meth:`dispatch`, so each action is
    applied atomically. Thunks are awaited through :meth:`run` and receive
    the store itself, giving them ``dispatch``, ``get_state`` and the
    injected HTTP ``client``.
    """

    def __init__(
        self,
        reducers: Mapping[str, Reducer],
        *,
        client: Any = None,
        fence_requests: bool = True,
    ):
        self._reducers: Dict[str, Reducer] = dict(reducers)
        self._listeners: List[Listener] = []
        self._request_ids = itertools.count(1)
        self._fence_requests = fence_requests
        self.client = client
        init = INIT()
        self._state: Dict[str, Any] = {
            key: reducer(None, init) for key, reducer in self._reducers.items()
        }

    @property
    def state(self) -> RootState:
        return MappingProxyType(self._state)

    def get_state(self) -> RootState:
        return self.state

    def dispatch(self, action: Action) -> Action:
        """Apply ``action`` to every slice and notify subscribers on change."""
        changed = False
        next_state: Dict[str, Any] = {}
        for key, reducer in self._reducers.items():
            previous = self._state[key]
            updated = reducer(previous, action)
            next_state[key] = updated
            changed = changed or updated is not previous
        logger.trace("Dispatched {type}", type=action.type)
        if changed:
            self._state = next_state
            snapshot = self.state
            for listener in list(self._listeners):
                listener(snapshot)
        return action

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def run(self, thunk: Thunk[T]) -> T:
        """Await an async action creator bound to this store."""
        return await thunk(self)

    def next_request_id(self) -> Optional[int]:
        """Monotonic id for fencing list responses; ``None`` when disabled."""
        if not self._fence_requests:
            return None
        return next(self._request_ids)
