"""Declarative per-resource store: actions, reducer, selectors and thunks."""

from __future__ import annotations

from dataclasses import dataclass
from typing import (
    Any,
    Dict,
    Generic,
    List,
    Mapping,
    Optional,
    Type,
)

from loguru import logger

from tourdesk.app.store.actions import Action, AsyncAction, fetch_actions
from tourdesk.app.store.core import RootState, Store, Thunk
from tourdesk.app.store.model import EntityCache, ItemT, Links, Meta, PageInfo
from tourdesk.app.store.reducer import (
    ExtraReducer,
    ModelState,
    Page,
    ResourceActions,
    create_reducer,
)


@dataclass(frozen=True)
class ResourceView(Generic[ItemT]):
    """Selector output: eagerly computed, plain values."""

    items: List[ItemT]
    meta: PageInfo
    is_fetching: bool
    cache: EntityCache[ItemT]

    def get(self) -> List[ItemT]:
        return list(self.items)

    def get_item(self, item_id: Any) -> Optional[ItemT]:
        return self.cache.get_item(item_id)


class Resource(Generic[ItemT]):
    """A REST collection mirrored into the store under ``key``."""

    def __init__(
        self,
        key: str,
        *,
        prefix: str,
        endpoint: str,
        entity: Type[ItemT],
        item: bool = False,
        extra_reducer: Optional[ExtraReducer] = None,
    ):
        self.key = key
        self.prefix = prefix
        self.endpoint = endpoint
        self.entity = entity
        self.actions = ResourceActions(
            list=fetch_actions(prefix, "list"),
            item=fetch_actions(prefix, "item") if item else None,
        )
        self.initial_state = self.build_initial_state()
        self.reducer = create_reducer(
            self.initial_state, self.actions, extra_reducer or self.extra_reducer
        )

    def __repr__(self) -> str:
        return f"Resource({self.key!r}, endpoint={self.endpoint!r})"

    def build_initial_state(self) -> ModelState[ItemT]:
        return ModelState()

    def extra_reducer(self, state: Any, action: Action) -> Any:
        return state

    # --- Selectors ---

    def state_of(self, root: RootState) -> Any:
        return root[self.key]

    def selectors(self, root: RootState) -> ResourceView[ItemT]:
        my_state = self.state_of(root)
        return ResourceView(
            items=my_state.state.get(),
            meta=my_state.state.page_info,
            is_fetching=my_state.is_fetching,
            cache=my_state.state,
        )

    # --- Parsing ---

    def parse(self, raw: Any) -> ItemT:
        return self.entity.model_validate(raw)

    def parse_page(self, response: Mapping[str, Any]) -> Page[ItemT]:
        meta = response.get("meta")
        links = response.get("links")
        return Page(
            data=[self.parse(raw) for raw in response.get("data") or []],
            meta=Meta.model_validate(meta) if meta else None,
            links=Links.model_validate(links) if links else None,
        )

    # --- Thunks ---

    def fetch_list(self, params: Optional[Mapping[str, Any]] = None) -> Thunk[Page[ItemT]]:
        """Fetch one page; the page replaces whatever the cache held.

        The parsed page is returned as well, so a caller gets the page it asked
        for even when a newer request has since taken over the cache.
        """
        list_actions = self.actions.list

        async def thunk(store: Store) -> Page[ItemT]:
            request_id = store.next_request_id()
            fence: Dict[str, Any] = {} if request_id is None else {"request_id": request_id}
            store.dispatch(list_actions.request(**fence))
            try:
                response = await store.client.get(self.endpoint, params=dict(params or {}))
                page = self.parse_page(response)
            except Exception as exc:
                logger.warning(
                    "Fetching {endpoint} failed: {error}",
                    endpoint=self.endpoint,
                    error=exc,
                )
                store.dispatch(list_actions.failure(exc, **fence))
                raise
            store.dispatch(list_actions.success(page, **fence))
            return page

        return thunk

    def fetch_item(self, item_id: int) -> Thunk[ItemT]:
        """Fetch one record and upsert it next to the loaded page."""
        item_actions = self._require_item_actions()

        async def thunk(store: Store) -> ItemT:
            store.dispatch(item_actions.request())
            try:
                response = await store.client.get(f"{self.endpoint}/{item_id}")
                item = self.parse(response.get("data"))
            except Exception as exc:
                logger.warning(
                    "Fetching {endpoint}/{item_id} failed: {error}",
                    endpoint=self.endpoint,
                    item_id=item_id,
                    error=exc,
                )
                store.dispatch(item_actions.failure(exc))
                raise
            store.dispatch(item_actions.success(item))
            return item

        return thunk

    def create(self, payload: Mapping[str, Any]) -> Thunk[ItemT]:
        """POST a new record; upserts it when the resource tracks items."""

        async def thunk(store: Store) -> ItemT:
            response = await store.client.post(self.endpoint, dict(payload))
            item = self.parse(response.get("data"))
            if self.actions.item is not None:
                store.dispatch(self.actions.item.success(item))
            logger.info(
                "Created {entity} {id}", entity=self.entity.__name__, id=item.id
            )
            return item

        return thunk

    def _require_item_actions(self) -> AsyncAction:
        if self.actions.item is None:
            raise ValueError(f"{self.key} does not track single items")
        return self.actions.item
