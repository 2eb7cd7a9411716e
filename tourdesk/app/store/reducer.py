"""Generic list/item reducer wiring request lifecycles onto the entity cache."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Callable, Generic, List, Optional, TypeVar

from loguru import logger

from tourdesk.app.store.actions import Action, AsyncAction
from tourdesk.app.store.model import EntityCache, ItemT, Links, Meta, PageInfo

StateT = TypeVar("StateT")
Reducer = Callable[[Optional[StateT], Action], StateT]
ExtraReducer = Callable[[StateT, Action], StateT]


@dataclass(frozen=True)
class Page(Generic[ItemT]):
    """One page of a list response."""

    data: List[ItemT]
    meta: Optional[Meta] = None
    links: Optional[Links] = None

    @property
    def page_info(self) -> PageInfo:
        return PageInfo.from_meta(self.meta or Meta())


@dataclass(frozen=True)
class ModelState(Generic[ItemT]):
    """Reducer state of a resource: fetch flag plus its entity cache."""

    is_fetching: bool = True
    state: EntityCache[ItemT] = field(default_factory=EntityCache)
    list_request_id: int = 0


@dataclass(frozen=True)
class ResourceActions:
    list: Optional[AsyncAction] = None
    item: Optional[AsyncAction] = None


def _is_stale(state: ModelState, action: Action) -> bool:
    request_id = action.meta.get("request_id")
    return request_id is not None and request_id < state.list_request_id


def create_reducer(
    initial_state: StateT,
    actions: ResourceActions,
    extra_reducer: Optional[ExtraReducer] = None,
) -> Reducer:
    """Build a reducer for ``actions`` starting from ``initial_state``.

    A successful list fetch replaces the cache with a fresh one holding only
    the fetched page. A successful item fetch upserts into the existing
    cache. Failures only clear the fetching flag. List actions tagged with a
    ``request_id`` older than the latest list request are dropped.
    """
    list_actions = actions.list
    item_actions = actions.item

    def reducer(state: Optional[StateT], action: Action) -> StateT:
        current: Any = initial_state if state is None else state

        if list_actions is not None:
            if list_actions.request.matches(action):
                request_id = action.meta.get("request_id")
                if request_id is None:
                    return replace(current, is_fetching=True)
                return replace(current, is_fetching=True, list_request_id=request_id)
            if list_actions.success.matches(action):
                if _is_stale(current, action):
                    logger.debug(
                        "Dropping stale {type} (request {request_id})",
                        type=action.type,
                        request_id=action.meta.get("request_id"),
                    )
                    return current
                page: Page = action.payload
                fresh: EntityCache = EntityCache()
                return replace(
                    current,
                    is_fetching=False,
                    state=fresh.insert(page.data, page.meta, page.links),
                )
            if list_actions.failure.matches(action):
                if _is_stale(current, action):
                    return current
                return replace(current, is_fetching=False)

        if item_actions is not None:
            if item_actions.request.matches(action):
                return replace(current, is_fetching=True)
            if item_actions.success.matches(action):
                return replace(
                    current,
                    is_fetching=False,
                    state=current.state.insert([action.payload]),
                )
            if item_actions.failure.matches(action):
                return replace(current, is_fetching=False)

        if extra_reducer is not None:
            return extra_reducer(current, action)
        return current

    return reducer
