import asyncio

import pytest

from tourdesk.app.services.api_client import ApiError
from tourdesk.app.store.actions import create_action
from tourdesk.app.store.core import Store
from tourdesk.app.store.resources import (
    RESOURCES,
    cabs,
    configure_store,
    hotel_payment_preferences,
    hotels,
    notifications,
)


class SlowClient:
    """Answers list calls after a per-query delay."""

    def __init__(self, delays):
        self.delays = delays

    async def get(self, url, *, params=None):
        query = params["q"]
        await asyncio.sleep(self.delays[query])
        return {"data": [{"id": len(query), "name": query}], "meta": {"total": 1}}


class FailingClient:
    async def get(self, url, *, params=None):
        raise ApiError("Server unavailable", status_code=503)


def test_every_resource_has_a_slice(store):
    state = store.get_state()
    for resource in RESOURCES.values():
        assert resource.key in state
    assert "AUTHENTICATED_USER_STATE" in state
    assert "TRIP_LIST_STATE" in state


def test_subscribers_are_notified_on_change_only(store):
    calls = []
    unsubscribe = store.subscribe(lambda state: calls.append(state))
    store.dispatch(create_action("@TEST/UNHANDLED")())
    assert len(calls) == 0
    store.dispatch(cabs.actions.list.failure(RuntimeError()))
    assert len(calls) == 1
    unsubscribe()
    store.dispatch(cabs.actions.list.request())
    assert len(calls) == 1


@pytest.mark.asyncio
async def test_fetch_list_replaces_cache(store):
    await store.run(hotels.fetch_list({"page": 1}))
    view = hotels.selectors(store.get_state())
    assert [hotel.name for hotel in view.items] == ["Mayfair Spa Resort", "Windamere"]
    assert view.meta.total == 2
    assert view.is_fetching is False

    await store.run(hotels.fetch_list({"q": "wind"}))
    view = hotels.selectors(store.get_state())
    assert [hotel.id for hotel in view.get()] == [2]


@pytest.mark.asyncio
async def test_fetch_item_upserts_next_to_page(store):
    await store.run(hotels.fetch_list({"q": "wind"}))
    hotel = await store.run(hotels.fetch_item(1))
    view = hotels.selectors(store.get_state())
    assert hotel.name == "Mayfair Spa Resort"
    assert [item.id for item in view.items] == [2, 1]
    assert view.get_item(1).payment_preference.name == "50% advance"


def test_fetch_item_requires_item_actions():
    with pytest.raises(ValueError):
        notifications.fetch_item(1)


@pytest.mark.asyncio
async def test_failed_fetch_clears_flag_and_reraises():
    store = configure_store(FailingClient())
    with pytest.raises(ApiError):
        await store.run(hotels.fetch_list())
    view = hotels.selectors(store.get_state())
    assert view.is_fetching is False
    assert view.items == []


@pytest.mark.asyncio
async def test_stale_list_response_is_ignored():
    store = configure_store(SlowClient({"slow": 0.05, "fast": 0.0}))
    await asyncio.gather(
        store.run(hotels.fetch_list({"q": "slow"})),
        store.run(hotels.fetch_list({"q": "fast"})),
    )
    view = hotels.selectors(store.get_state())
    assert [hotel.name for hotel in view.items] == ["fast"]


@pytest.mark.asyncio
async def test_each_caller_gets_its_own_page_when_fenced():
    store = configure_store(SlowClient({"slow": 0.05, "fast": 0.0}))
    slow, fast = await asyncio.gather(
        store.run(hotels.fetch_list({"q": "slow"})),
        store.run(hotels.fetch_list({"q": "fast"})),
    )
    assert [hotel.name for hotel in slow.data] == ["slow"]
    assert [hotel.name for hotel in fast.data] == ["fast"]
    assert slow.page_info.total == 1
    view = hotels.selectors(store.get_state())
    assert [hotel.name for hotel in view.items] == ["fast"]


@pytest.mark.asyncio
async def test_without_fencing_last_response_wins():
    store = Store(
        {hotels.key: hotels.reducer},
        client=SlowClient({"slow": 0.05, "fast": 0.0}),
        fence_requests=False,
    )
    await asyncio.gather(
        store.run(hotels.fetch_list({"q": "slow"})),
        store.run(hotels.fetch_list({"q": "fast"})),
    )
    view = hotels.selectors(store.get_state())
    assert [hotel.name for hotel in view.items] == ["slow"]


@pytest.mark.asyncio
async def test_create_upserts_item(store):
    cab = await store.run(cabs.create({"name": "Innova", "number_plate": "SK02 9999"}))
    view = cabs.selectors(store.get_state())
    assert view.get_item(cab.id).number_plate == "SK02 9999"


@pytest.mark.asyncio
async def test_create_rejects_invalid_payload(store):
    with pytest.raises(ApiError) as info:
        await store.run(cabs.create({"name": "No plate"}))
    assert "number_plate" in info.value.formik_errors


@pytest.mark.asyncio
async def test_hotel_prices_selector(store):
    prices = await store.run(hotels.fetch_prices(1))
    view = hotels.selectors(store.get_state())
    assert {price.id for price in prices} == {1, 2}
    assert [price.id for price in view.get_hotel_prices(1)] == [1, 2]
    assert view.get_hotel_prices(2) == []


@pytest.mark.asyncio
async def test_payment_preference_breakdowns(store):
    await store.run(hotel_payment_preferences.fetch_list())
    view = hotel_payment_preferences.selectors(store.get_state())
    breakdowns = view.get_breakdowns(1)
    assert [breakdown.day_offset for breakdown in breakdowns] == [-30, 0]
    assert view.total_share(1) == 100
    assert view.get_breakdowns(99) == []


@pytest.mark.asyncio
async def test_notifications_push_and_mark_as_read(store, mock_api):
    await store.run(notifications.fetch_list())
    view = notifications.selectors(store.get_state())
    assert view.unread_count == 1

    store.dispatch(
        notifications.push({"id": 10, "type": "QuoteGiven", "data": '{"quote_id": 3}'})
    )
    view = notifications.selectors(store.get_state())
    assert view.items[0].id == 10
    assert view.items[0].data == {"quote_id": 3}
    assert view.unread_count == 2

    read = await store.run(notifications.mark_as_read([view.get_item(1)]))
    assert read[0].read_at is not None
    view = notifications.selectors(store.get_state())
    assert view.unread_count == 1
    assert [item.id for item in view.items] == [10, 1, 2]
