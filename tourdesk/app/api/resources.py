"""Generic list, detail and create endpoints over the resource stores."""

from dataclasses import asdict
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, Path, Query, Request, status

from tourdesk.app.api.activity import http_error, record_activity
from tourdesk.app.api.deps import get_activity_log, get_store
from tourdesk.app.pages.listing import DetailPage
from tourdesk.app.services.query import search_to_query
from tourdesk.app.store.core import Store
from tourdesk.app.store.reducer import Page
from tourdesk.app.store.resource import Resource
from tourdesk.app.store.resources import RESOURCES

router = APIRouter(prefix="/api/resources", tags=["resources"])


def _resource(name: str) -> Resource:
    resource = RESOURCES.get(name)
    if resource is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Unknown resource {name}")
    return resource


def serialize_page(page: Page) -> Dict[str, Any]:
    meta = page.page_info
    return {
        "data": [item.model_dump(by_alias=True) for item in page.data],
        "meta": {
            **asdict(meta),
            "has_previous": meta.has_previous,
            "has_next": meta.has_next,
        },
    }


@router.get("/{name}")
async def list_resource(
    request: Request,
    name: str = Path(...),
    page: int = Query(default=1, ge=1),
    store: Store = Depends(get_store),
    activity_log=Depends(get_activity_log),
) -> Dict[str, Any]:
    """List one page.

    Other query parameters, bracketed ones included, are passed on as
    filters; blank values are dropped.
    """
    resource = _resource(name)
    filters = {
        key: value
        for key, value in search_to_query(request.url.query).items()
        if key != "page" and value not in ("", None)
    }
    params = {**filters, "page": page}
    try:
        result = await store.run(resource.fetch_list(params))
    except Exception as exc:  # noqa: BLE001
        raise http_error(
            activity_log,
            exc,
            action=f"{name}.list",
            method="GET",
            endpoint=resource.endpoint,
            payload=params,
        ) from exc

    record_activity(
        activity_log,
        action=f"{name}.list",
        method="GET",
        endpoint=resource.endpoint,
        payload=params,
        response={"count": len(result.data), "total": result.page_info.total},
    )
    return serialize_page(result)


@router.get("/{name}/{item_id}")
async def show_resource(
    name: str = Path(...),
    item_id: int = Path(..., ge=1),
    store: Store = Depends(get_store),
    activity_log=Depends(get_activity_log),
) -> Dict[str, Any]:
    resource = _resource(name)
    if resource.actions.item is None:
        raise HTTPException(
            status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
            detail=f"{name} cannot be fetched one by one",
        )
    item = await DetailPage(store, resource).mount(item_id)
    if item is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{name} {item_id} not found")
    record_activity(
        activity_log,
        action=f"{name}.show",
        method="GET",
        endpoint=f"{resource.endpoint}/{item_id}",
    )
    return {"data": item.model_dump(by_alias=True)}


@router.post("/{name}")
async def create_resource(
    payload: Dict[str, Any],
    name: str = Path(...),
    store: Store = Depends(get_store),
    activity_log=Depends(get_activity_log),
) -> Dict[str, Any]:
    """Create a record through the API and keep it in the store."""
    resource = _resource(name)
    try:
        item = await store.run(resource.create(payload))
    except Exception as exc:  # noqa: BLE001
        raise http_error(
            activity_log,
            exc,
            action=f"{name}.create",
            method="POST",
            endpoint=resource.endpoint,
            payload=payload,
        ) from exc

    record_activity(
        activity_log,
        action=f"{name}.create",
        method="POST",
        endpoint=resource.endpoint,
        payload=payload,
        response={"id": item.id},
    )
    return {"data": item.model_dump(by_alias=True)}
