from datetime import date, time

import pytest
from pydantic import ValidationError

from tourdesk.app.pricing.forms import (
    CabPriceEntry,
    CabPriceQuery,
    DateInterval,
    HotelPriceEntry,
    HotelPriceQuery,
    NewCabPricesForm,
    NewHotelPricesForm,
    formik_errors,
    save_cab_prices,
    save_hotel_prices,
    to_utc_string,
)


def _hotel_form(**overrides):
    entry = {
        "intervals": [{"start_date": "2024-01-01", "end_date": "2024-01-03"}],
        "base_price": 1000,
        "location_ids": [1],
        "meal_plan_ids": [1],
        "room_type_ids": [1],
        **overrides,
    }
    return NewHotelPricesForm(prices=[HotelPriceEntry(**entry)])


def test_new_hotel_price_dates_are_normalized():
    payload = _hotel_form().to_payload()
    row = payload["prices"][0]
    assert row["start_date"] == "2024-01-01 00:00:00"
    assert row["end_date"] == "2024-01-03 23:59:59"
    assert row["base_price"] == 1000
    assert row["adult_with_extra_bed_price"] == 0


def test_new_hotel_prices_in_local_timezone():
    row = _hotel_form().to_payload("Asia/Kolkata")["prices"][0]
    assert row["start_date"] == "2023-12-31 18:30:00"
    assert row["end_date"] == "2024-01-03 18:29:59"


def test_new_hotel_prices_cartesian_product():
    form = _hotel_form(
        intervals=[
            {"start_date": "2024-01-01", "end_date": "2024-01-03"},
            {"start_date": "2024-02-01", "end_date": "2024-02-03"},
        ],
        location_ids=[1, 2],
        meal_plan_ids=[1, 2],
    )
    rows = form.to_payload()["prices"]
    assert len(rows) == 8
    assert {(row["location_id"], row["meal_plan_id"]) for row in rows} == {
        (1, 1),
        (1, 2),
        (2, 1),
        (2, 2),
    }


def test_interval_end_before_start_is_rejected():
    with pytest.raises(ValidationError):
        DateInterval(start_date="2024-01-03", end_date="2024-01-01")


def test_formik_errors_use_dotted_paths():
    with pytest.raises(ValidationError) as info:
        NewHotelPricesForm.model_validate({"prices": [{"base_price": -1}]})
    errors = formik_errors(info.value)
    assert "prices.0.base_price" in errors
    assert "prices.0.intervals" in errors


def test_cab_price_entry_payload():
    entry = CabPriceEntry(
        start_date="2024-01-01",
        end_date="2024-01-31",
        cab_type_id=1,
        transport_service_id=2,
        price=2500,
    )
    payload = NewCabPricesForm(prices=[entry]).to_payload()["prices"][0]
    assert payload["start_date"] == "2024-01-01 00:00:00"
    assert payload["end_date"] == "2024-01-31 23:59:59"
    assert payload["price"] == 2500
    assert "per_km_charges" not in payload


def test_hotel_price_query_stay():
    row = HotelPriceQuery(
        start_date="2024-01-01",
        no_of_nights=2,
        hotel_id=1,
        location_id=1,
        meal_plan_id=1,
        room_type_id=1,
        adults_with_extra_bed=1,
    )
    query = row.to_price_query()
    assert query["start_date"] == "2024-01-01 12:00:01"
    assert query["end_date"] == "2024-01-03 12:00:00"
    assert query["a_w_e_b"] == 1
    assert query["location_id"] == 1
    item = row.to_quote_item()
    assert item["checkin"] == query["start_date"]
    assert item["checkout"] == query["end_date"]
    assert item["location_id"] == 1
    assert item["given_price"] == 0


def test_cab_price_query_period():
    row = CabPriceQuery(
        start_date=date(2024, 1, 1), no_of_days=3, transport_service_id=1, cab_type_id=1
    )
    query = row.to_price_query()
    assert query["from_date"] == "2024-01-01 00:00:00"
    assert query["to_date"] == "2024-01-03 23:59:59"


def test_blank_row_reports_missing_fields():
    row = HotelPriceQuery(start_date="")
    errors = row.pricing_errors("hotels.0")
    assert errors["hotels.0.start_date"] == "Field required"
    assert "hotels.0.hotel_id" in errors
    assert not row.is_complete()


def test_comments_are_limited():
    with pytest.raises(ValidationError):
        HotelPriceQuery(comments="x" * 192)


def test_to_utc_string_default_is_utc():
    assert to_utc_string(date(2024, 5, 1), time(12, 0, 1)) == "2024-05-01 12:00:01"


@pytest.mark.asyncio
async def test_save_hotel_prices(mock_api):
    created = await save_hotel_prices(mock_api, 2, _hotel_form())
    assert len(created) == 1
    assert created[0].hotel_id == 2
    assert created[0].end_date == "2024-01-03 23:59:59"


@pytest.mark.asyncio
async def test_save_cab_prices(mock_api):
    form = NewCabPricesForm(
        prices=[
            CabPriceEntry(
                start_date="2024-01-01",
                end_date="2024-01-31",
                cab_type_id=2,
                transport_service_id=1,
                per_km_charges=18,
                minimum_km_per_day=80,
            )
        ]
    )
    created = await save_cab_prices(mock_api, form)
    assert created[0].transport_service_id == 1
    assert created[0].per_km_charges == 18
