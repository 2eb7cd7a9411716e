"""List and detail page controllers bound to a resource store."""

from __future__ import annotations

from typing import Any, Dict, Generic, Mapping, Optional

from loguru import logger

from tourdesk.app.services.api_client import ApiError
from tourdesk.app.store.core import Store
from tourdesk.app.store.model import ItemT
from tourdesk.app.store.resource import Resource, ResourceView


class ListPage(Generic[ItemT]):
    """Paginated, searchable listing of one resource.

    A failed fetch is logged and leaves whatever the view held before.
    """

    def __init__(self, store: Store, resource: Resource[ItemT]):
        self.store = store
        self.resource = resource
        self.params: Dict[str, Any] = {}

    @property
    def view(self) -> ResourceView[ItemT]:
        return self.resource.selectors(self.store.get_state())

    async def mount(self) -> ResourceView[ItemT]:
        return await self._fetch(self.view.meta.current_page)

    async def search(
        self, params: Optional[Mapping[str, Any]] = None, page: int = 1
    ) -> ResourceView[ItemT]:
        """Apply new filters; blank values are dropped."""
        self.params = {
            key: value for key, value in (params or {}).items() if value not in ("", None)
        }
        return await self._fetch(page)

    async def paginate(self, page: int) -> ResourceView[ItemT]:
        return await self._fetch(page)

    async def refresh(self) -> ResourceView[ItemT]:
        return await self._fetch(self.view.meta.current_page)

    async def _fetch(self, page: int) -> ResourceView[ItemT]:
        try:
            await self.store.run(self.resource.fetch_list({**self.params, "page": page}))
        except ApiError as exc:
            logger.warning(
                "Listing {key} page {page} failed: {message}",
                key=self.resource.key,
                page=page,
                message=exc.message,
            )
        return self.view


class DetailPage(Generic[ItemT]):
    def __init__(self, store: Store, resource: Resource[ItemT]):
        self.store = store
        self.resource = resource
        self.item_id: Optional[int] = None

    @property
    def item(self) -> Optional[ItemT]:
        return self.resource.selectors(self.store.get_state()).get_item(self.item_id)

    async def mount(self, item_id: int) -> Optional[ItemT]:
        self.item_id = item_id
        try:
            await self.store.run(self.resource.fetch_item(item_id))
        except ApiError as exc:
            logger.warning(
                "Loading {key} {item_id} failed: {message}",
                key=self.resource.key,
                item_id=item_id,
                message=exc.message,
            )
        return self.item
