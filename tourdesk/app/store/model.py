"""Normalized entity cache with pagination metadata.

Every resource keeps its records in an :class:`EntityCache`: an ordered tuple
of ids plus an id -> entity mapping. Inserting is idempotent per id, so a
record seen twice keeps its first position and only its value is replaced.
The cache is immutable; every insert returns a new instance.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import (
    Any,
    Dict,
    Generic,
    Iterable,
    List,
    Mapping,
    Optional,
    Tuple,
    TypeVar,
    Union,
)

from pydantic import BaseModel, ConfigDict, Field


class Entity(BaseModel):
    """Base shape of every cached record."""

    model_config = ConfigDict(extra="allow")

    id: int


ItemT = TypeVar("ItemT", bound=Entity)


class Meta(BaseModel):
    """Pagination descriptor returned with list responses."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    total: Optional[int] = None
    from_: Optional[int] = Field(default=None, alias="from")
    to: Optional[int] = None
    current_page: Optional[int] = None
    last_page: Optional[int] = None
    per_page: Optional[int] = None
    path: Optional[str] = None

    def merge(self, other: Optional[Union["Meta", Mapping[str, Any]]]) -> "Meta":
        """Shallow merge: keys present in ``other`` win, the rest is kept."""
        if other is None:
            return self
        if not isinstance(other, Meta):
            other = Meta.model_validate(other)
        merged = self.model_dump(by_alias=True, exclude_unset=True)
        merged.update(other.model_dump(by_alias=True, exclude_unset=True))
        return Meta.model_validate(merged)


class Links(BaseModel):
    """Pagination hrefs; stored alongside the meta but not used for paging."""

    first: Optional[str] = None
    last: Optional[str] = None
    prev: Optional[str] = None
    next: Optional[str] = None


@dataclass(frozen=True)
class PageInfo:
    """Pagination values with defaults applied."""

    total: int = 0
    current_page: int = 1
    last_page: int = 1
    from_: int = 0
    to: int = 0

    @property
    def has_previous(self) -> bool:
        return self.current_page > 1

    @property
    def has_next(self) -> bool:
        return self.last_page > self.current_page

    @classmethod
    def from_meta(cls, meta: Meta) -> "PageInfo":
        return cls(
            total=0 if meta.total is None else meta.total,
            current_page=1 if meta.current_page is None else meta.current_page,
            last_page=1 if meta.last_page is None else meta.last_page,
            from_=0 if meta.from_ is None else meta.from_,
            to=0 if meta.to is None else meta.to,
        )


@dataclass(frozen=True)
class EntityCache(Generic[ItemT]):
    """Immutable, id-normalized collection of entities."""

    items: Tuple[int, ...] = ()
    by_id: Mapping[int, ItemT] = field(default_factory=dict)
    meta: Meta = field(default_factory=Meta)
    links: Optional[Links] = None

    def insert(
        self,
        items: Optional[Iterable[ItemT]] = None,
        meta: Optional[Union[Meta, Mapping[str, Any]]] = None,
        links: Optional[Links] = None,
        *,
        prepend: bool = False,
    ) -> "EntityCache[ItemT]":
        """Return a new cache with ``items`` upserted and ``meta`` merged."""
        if items is None and meta is None and links is None:
            return self

        order: List[int] = list(self.items)
        by_id: Dict[int, ItemT] = dict(self.by_id)
        if items is not None:
            fresh: List[int] = []
            for item in items:
                if item.id not in by_id and item.id not in fresh:
                    fresh.append(item.id)
                by_id[item.id] = item
            order = fresh + order if prepend else order + fresh

        return EntityCache(
            items=tuple(order),
            by_id=by_id,
            meta=self.meta.merge(meta),
            links=links if links is not None else self.links,
        )

    def get(self) -> List[ItemT]:
        """Entities in first-seen order."""
        return [self.by_id[item_id] for item_id in self.items]

    def get_item(self, item_id: Optional[Union[int, str]]) -> Optional[ItemT]:
        if item_id is None:
            return None
        try:
            return self.by_id.get(int(item_id))
        except (TypeError, ValueError):
            return None

    def __len__(self) -> int:
        return len(self.items)

    @property
    def page_info(self) -> PageInfo:
        return PageInfo.from_meta(self.meta)

    @property
    def total(self) -> int:
        return self.page_info.total

    @property
    def current_page(self) -> int:
        return self.page_info.current_page

    @property
    def last_page(self) -> int:
        return self.page_info.last_page

    @property
    def from_(self) -> int:
        return self.page_info.from_

    @property
    def to(self) -> int:
        return self.page_info.to


def init(items: Optional[Iterable[ItemT]] = None) -> EntityCache[ItemT]:
    """Create an empty cache, optionally pre-populated with ``items``."""
    cache: EntityCache[ItemT] = EntityCache()
    return cache.insert(items)
