"""Store declarations for every REST resource of the admin console."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Sequence

from tourdesk.app.config import Settings
from tourdesk.app.models.accounts import Notification, Permission, Role, Tenant, User
from tourdesk.app.models.hotels import (
    ExtraService,
    Hotel,
    HotelBookingStage,
    HotelPaymentPreference,
    HotelPaymentPreferenceBreakdown,
    HotelPrice,
    MealPlan,
    RoomType,
)
from tourdesk.app.models.locations import CountryDialCode, Location
from tourdesk.app.models.transport import (
    Cab,
    CabType,
    TransportLocation,
    TransportService,
    TransportServicePrice,
)
from tourdesk.app.models.trips import (
    GivenQuote,
    Trip,
    TripPlanRequest,
    TripSource,
    TripStage,
)
from tourdesk.app.store import auth
from tourdesk.app.store.actions import Action, create_action, create_async_action, fetch_actions
from tourdesk.app.store.core import RootState, Store, Thunk
from tourdesk.app.store.model import EntityCache
from tourdesk.app.store.reducer import ModelState, Page
from tourdesk.app.store.resource import Resource, ResourceView


# --- Hotels: carries a second cache for hotel prices ---


@dataclass(frozen=True)
class HotelsState(ModelState[Hotel]):
    prices: EntityCache[HotelPrice] = field(default_factory=EntityCache)


@dataclass(frozen=True)
class HotelsView(ResourceView[Hotel]):
    prices: EntityCache[HotelPrice]

    def get_hotel_prices(self, hotel_id: int) -> List[HotelPrice]:
        return [price for price in self.prices.get() if price.hotel_id == hotel_id]


class HotelsResource(Resource[Hotel]):
    def __init__(self) -> None:
        self.price_actions = fetch_actions("HOTELS", "prices")
        super().__init__(
            "HOTELS_STATE", prefix="HOTELS", endpoint="/hotels", entity=Hotel, item=True
        )

    def build_initial_state(self) -> HotelsState:
        return HotelsState()

    def extra_reducer(self, state: HotelsState, action: Action) -> HotelsState:
        if self.price_actions.request.matches(action):
            return replace(state, is_fetching=True)
        if self.price_actions.success.matches(action):
            page: Page[HotelPrice] = action.payload
            return replace(
                state, is_fetching=False, prices=state.prices.insert(page.data)
            )
        if self.price_actions.failure.matches(action):
            return replace(state, is_fetching=False)
        return state

    def selectors(self, root: RootState) -> HotelsView:
        my_state: HotelsState = self.state_of(root)
        return HotelsView(
            items=my_state.state.get(),
            meta=my_state.state.page_info,
            is_fetching=my_state.is_fetching,
            cache=my_state.state,
            prices=my_state.prices,
        )

    def fetch_prices(
        self, hotel_id: int, params: Optional[Mapping[str, Any]] = None
    ) -> Thunk[List[HotelPrice]]:
        """Load prices of one hotel into the price cache."""

        async def thunk(store: Store) -> List[HotelPrice]:
            store.dispatch(self.price_actions.request())
            try:
                response = await store.client.get(
                    "/hotel-prices", params={**(params or {}), "hotel_id": hotel_id}
                )
                prices = [HotelPrice.model_validate(raw) for raw in response.get("data") or []]
            except Exception as exc:
                store.dispatch(self.price_actions.failure(exc))
                raise
            store.dispatch(self.price_actions.success(Page(data=prices)))
            return prices

        return thunk


# --- Notifications: single push channel plus mark-as-read ---


@dataclass(frozen=True)
class NotificationsView(ResourceView[Notification]):
    @property
    def unread_count(self) -> int:
        return sum(1 for item in self.items if item.read_at is None)


class NotificationsResource(Resource[Notification]):
    def __init__(self) -> None:
        self.mark_as_read_actions = create_async_action(
            "@NOTIFICATIONS/MARK_AS_READ_REQUEST",
            "@NOTIFICATIONS/MARK_AS_READ_SUCCESS",
            "@NOTIFICATIONS/MARK_AS_READ_FAILED",
        )
        self.push_new_notification = create_action("@NOTIFICATIONS/PUSH_NEW_NOTIFICATION")
        super().__init__(
            "NOTIFICATIONS_STATE",
            prefix="NOTIFICATIONS",
            endpoint="/notifications",
            entity=Notification,
        )

    def extra_reducer(self, state: ModelState, action: Action) -> ModelState:
        if self.mark_as_read_actions.success.matches(action):
            return replace(state, state=state.state.insert(action.payload))
        if self.push_new_notification.matches(action):
            return replace(state, state=state.state.insert([action.payload], prepend=True))
        return state

    def selectors(self, root: RootState) -> NotificationsView:
        my_state = self.state_of(root)
        return NotificationsView(
            items=my_state.state.get(),
            meta=my_state.state.page_info,
            is_fetching=my_state.is_fetching,
            cache=my_state.state,
        )

    def push(self, raw: Mapping[str, Any]) -> Action:
        """Action for a notification received on the user's channel."""
        return self.push_new_notification(self.parse(raw))

    def mark_as_read(self, notifications: Sequence[Notification]) -> Thunk[List[Notification]]:
        async def thunk(store: Store) -> List[Notification]:
            read_at = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")
            read = [item.model_copy(update={"read_at": read_at}) for item in notifications]
            store.dispatch(self.mark_as_read_actions.request())
            try:
                await store.client.patch(
                    "/notifications/mark-as-read", {"items": [item.id for item in notifications]}
                )
            except Exception as exc:
                store.dispatch(self.mark_as_read_actions.failure(exc))
                raise
            store.dispatch(self.mark_as_read_actions.success(read))
            return read

        return thunk


# --- Hotel payment preferences: breakdown helpers ---


@dataclass(frozen=True)
class HotelPaymentPreferencesView(ResourceView[HotelPaymentPreference]):
    def get_breakdowns(self, preference_id: int) -> List[HotelPaymentPreferenceBreakdown]:
        preference = self.get_item(preference_id)
        if preference is None:
            return []
        return sorted(preference.breakdowns, key=lambda breakdown: breakdown.day_offset)

    def total_share(self, preference_id: int) -> float:
        return sum(breakdown.amount_share for breakdown in self.get_breakdowns(preference_id))


class HotelPaymentPreferencesResource(Resource[HotelPaymentPreference]):
    def __init__(self) -> None:
        super().__init__(
            "HOTEL_PAYMENT_PREFERENCES_STATE",
            prefix="HOTEL_PAYMENT_PREFERENCES",
            endpoint="/hotel-payment-preferences",
            entity=HotelPaymentPreference,
        )

    def selectors(self, root: RootState) -> HotelPaymentPreferencesView:
        my_state = self.state_of(root)
        return HotelPaymentPreferencesView(
            items=my_state.state.get(),
            meta=my_state.state.page_info,
            is_fetching=my_state.is_fetching,
            cache=my_state.state,
        )


hotels = HotelsResource()
hotel_prices = Resource(
    "HOTEL_PRICES_STATE", prefix="HOTEL_PRICES", endpoint="/hotel-prices", entity=HotelPrice
)
room_types = Resource(
    "ROOM_TYPES_STATE", prefix="ROOM_TYPES", endpoint="/room-types", entity=RoomType
)
meal_plans = Resource(
    "MEAL_PLANS_STATE", prefix="MEAL_PLANS", endpoint="/meal-plans", entity=MealPlan
)
hotel_payment_preferences = HotelPaymentPreferencesResource()
hotel_booking_stages = Resource(
    "HOTEL_BOOKING_STAGES_STATE",
    prefix="HOTEL_BOOKING_STAGES",
    endpoint="/hotel-booking-stages",
    entity=HotelBookingStage,
)
locations = Resource(
    "LOCATIONS_STATE", prefix="LOCATIONS", endpoint="/locations", entity=Location
)
country_dial_codes = Resource(
    "COUNTRY_DIAL_CODES_STATE",
    prefix="COUNTRY_DIAL_CODES",
    endpoint="/country-dial-codes",
    entity=CountryDialCode,
)
cabs = Resource("CABS_STATE", prefix="CABS", endpoint="/cabs", entity=Cab, item=True)
cab_types = Resource(
    "CAB_TYPES_STATE", prefix="CAB_TYPES", endpoint="/cab-types", entity=CabType
)
transport_services = Resource(
    "TRANSPORT_SERVICES_STATE",
    prefix="TRANSPORT_SERVICES",
    endpoint="/transport-services",
    entity=TransportService,
)
transport_service_prices = Resource(
    "TRANSPORT_SERVICE_PRICES_STATE",
    prefix="TRANSPORT_SERVICE_PRICES",
    endpoint="/cab-prices",
    entity=TransportServicePrice,
)
transport_locations = Resource(
    "TRANSPORT_LOCATIONS_STATE",
    prefix="TRANSPORT_LOCATIONS",
    endpoint="/transport-locations",
    entity=TransportLocation,
)
trips = Resource("TRIP_LIST_STATE", prefix="TRIPS", endpoint="/trips", entity=Trip, item=True)
given_quotes = Resource(
    "GIVEN_QUOTES_STATE", prefix="GIVEN_QUOTES", endpoint="/given-quotes", entity=GivenQuote
)
trip_sources = Resource(
    "TRIP_SOURCES_STATE", prefix="TRIP_SOURCES", endpoint="/trip-sources", entity=TripSource
)
trip_stages = Resource(
    "TRIP_STAGES_STATE", prefix="TRIP_STAGES", endpoint="/trip-stages", entity=TripStage
)
trip_plan_requests = Resource(
    "TRIP_PLAN_REQUESTS_STATE",
    prefix="TRIP_PLAN_REQUESTS",
    endpoint="/trip-plan-requests",
    entity=TripPlanRequest,
    item=True,
)
tenants = Resource(
    "TENANTS_STATE", prefix="TENANTS", endpoint="/tenants", entity=Tenant, item=True
)
users = Resource("USERS_STATE", prefix="USERS", endpoint="/users", entity=User, item=True)
roles = Resource("ROLES_STATE", prefix="ROLES", endpoint="/roles", entity=Role, item=True)
permissions = Resource(
    "PERMISSIONS_STATE", prefix="PERMISSIONS", endpoint="/permissions", entity=Permission
)
extra_services = Resource(
    "EXTRA_SERVICES_STATE",
    prefix="EXTRA_SERVICES",
    endpoint="/extra-services",
    entity=ExtraService,
)
notifications = NotificationsResource()


RESOURCES: Dict[str, Resource] = {
    "hotels": hotels,
    "hotel-prices": hotel_prices,
    "room-types": room_types,
    "meal-plans": meal_plans,
    "hotel-payment-preferences": hotel_payment_preferences,
    "hotel-booking-stages": hotel_booking_stages,
    "locations": locations,
    "country-dial-codes": country_dial_codes,
    "cabs": cabs,
    "cab-types": cab_types,
    "transport-services": transport_services,
    "cab-prices": transport_service_prices,
    "transport-locations": transport_locations,
    "trips": trips,
    "given-quotes": given_quotes,
    "trip-sources": trip_sources,
    "trip-stages": trip_stages,
    "trip-plan-requests": trip_plan_requests,
    "tenants": tenants,
    "users": users,
    "roles": roles,
    "permissions": permissions,
    "extra-services": extra_services,
    "notifications": notifications,
}


def configure_store(client: Any, settings: Optional[Settings] = None) -> Store:
    """Build the root store with every resource slice and the auth slice."""
    reducers = {resource.key: resource.reducer for resource in RESOURCES.values()}
    reducers[auth.KEY] = auth.reducer
    fence = settings.fence_stale_responses if settings is not None else True
    return Store(reducers, client=client, fence_requests=fence)
