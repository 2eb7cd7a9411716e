"""Price calculators reconciling calculator rows with server-computed prices.

A calculator owns a list of rows. Changing a date, selection or quantity
field schedules a debounced bulk price request for all rows; the response is
applied positionally. ``given_price`` follows ``calculated_price`` until the
user edits it, after which the override survives every recalculation. The
running total (sum of given prices) is pushed to ``on_change`` after every
mutation so a trip quote can aggregate several calculators.
"""

from __future__ import annotations

from typing import (
    Any,
    Callable,
    ClassVar,
    Dict,
    Generic,
    Iterable,
    List,
    Mapping,
    Optional,
    Type,
    TypeVar,
)

from loguru import logger

from tourdesk.app.pricing.debounce import Debouncer
from tourdesk.app.pricing.forms import CabPriceQuery, HotelPriceQuery, PriceQuoteLine
from tourdesk.app.services.api_client import ApiError

RowT = TypeVar("RowT", bound=PriceQuoteLine)
ChangeCallback = Callable[[float, List[Dict[str, Any]]], None]

# edits to these never reprice; they mark the row as manually quoted
OVERRIDE_FIELDS = frozenset({"given_price", "comments"})


class RowLimitError(ValueError):
    """Raised when removing a row would leave fewer than the minimum."""


class PriceCalculator(Generic[RowT]):
    group: ClassVar[str]
    row_model: ClassVar[Type[PriceQuoteLine]]

    def __init__(
        self,
        client: Any,
        *,
        rows: Optional[Iterable[RowT]] = None,
        on_change: Optional[ChangeCallback] = None,
        debounce_seconds: float = 0.3,
        tz_name: str = "UTC",
        min_rows: int = 1,
    ):
        self._client = client
        self._on_change = on_change
        self._tz_name = tz_name
        self.min_rows = min_rows
        self.rows: List[RowT] = list(rows or [])
        while len(self.rows) < min_rows:
            self.rows.append(self.row_model())
        self.errors: Dict[str, str] = {}
        self.status: Optional[str] = None
        self.is_submitting = False
        self._revision = 0
        self._sequence = 0
        self._debouncer = Debouncer(debounce_seconds, self.recalculate)

    @property
    def total(self) -> float:
        return sum(row.given_price or 0 for row in self.rows)

    @property
    def is_blank(self) -> bool:
        """True while every row still holds only default values."""
        blank = self.row_model()
        return all(row == blank for row in self.rows)

    def quote_items(self) -> List[Dict[str, Any]]:
        return [row.to_quote_item(self._tz_name) for row in self.rows if row.is_complete()]

    # --- Row bookkeeping ---

    def add_row(self, row: Optional[RowT] = None) -> RowT:
        added = row if row is not None else self.row_model()
        self.rows.append(added)
        self._revision += 1
        self._notify()
        return added

    def duplicate_row(self, index: int) -> RowT:
        """Append a full copy of a row, computed prices included."""
        return self.add_row(self.rows[index].model_copy(deep=True))

    def remove_row(self, index: int) -> RowT:
        if len(self.rows) <= self.min_rows:
            raise RowLimitError(f"At least {self.min_rows} {self.group} row is required")
        removed = self.rows.pop(index)
        self._revision += 1
        self._notify()
        return removed

    def update_row(self, index: int, **changes: Any) -> RowT:
        """Apply field edits to a row.

        Edits of pricing fields reprice after the debounce delay; edits of
        ``given_price`` or ``comments`` only mark the row as overridden.
        """
        current = self.rows[index]
        if changes.keys() & OVERRIDE_FIELDS:
            changes["edited_given_price"] = True
        updated = self.row_model.model_validate({**current.model_dump(), **changes})
        self.rows[index] = updated
        if changes.keys() & self.row_model.pricing_fields:
            self._revision += 1
            self._debouncer.trigger()
        self._notify()
        return updated

    # --- Pricing ---

    async def submit(self) -> bool:
        """Price all rows now, dropping any pending debounced run."""
        self._debouncer.cancel()
        return await self.recalculate()

    async def settle(self) -> None:
        """Wait for pending and running recalculations to finish."""
        await self._debouncer.wait_idle()

    def validate(self) -> Dict[str, str]:
        errors: Dict[str, str] = {}
        for index, row in enumerate(self.rows):
            errors.update(row.pricing_errors(f"{self.group}.{index}"))
        return errors

    async def recalculate(self) -> bool:
        errors = self.validate()
        if errors:
            self.errors = errors
            return False

        self._sequence += 1
        sequence, revision = self._sequence, self._revision
        queries = [row.to_price_query(self._tz_name) for row in self.rows]
        self.status = None
        self.is_submitting = True
        logger.debug(
            "Requesting {group} prices for {count} rows",
            group=self.group,
            count=len(queries),
        )
        try:
            response = await self._client.get_prices(self.group, queries)
        except ApiError as exc:
            if sequence == self._sequence:
                self.status = exc.message
                self.errors = dict(exc.formik_errors or {})
            logger.warning(
                "Pricing {group} failed: {message}", group=self.group, message=exc.message
            )
            return False
        finally:
            if sequence == self._sequence:
                self.is_submitting = False

        if sequence != self._sequence or revision != self._revision:
            logger.debug(
                "Discarding stale {group} prices (request {sequence})",
                group=self.group,
                sequence=sequence,
            )
            # rows were added or removed in flight and nothing else is queued
            if sequence == self._sequence and not self._debouncer.pending:
                self._debouncer.trigger()
            return False

        results = response.get(self.group) or []
        self.rows = [
            self._apply_price(row, results[index] if index < len(results) else None)
            for index, row in enumerate(self.rows)
        ]
        self.errors = {}
        self._notify()
        return True

    @staticmethod
    def _apply_price(row: RowT, result: Optional[Mapping[str, Any]]) -> RowT:
        if not result:
            return row
        price = result.get("price")
        updates: Dict[str, Any] = {
            "calculated_price": price,
            "no_price_for_dates": list(result.get("no_price_for_dates") or []),
        }
        if not row.edited_given_price:
            updates["given_price"] = price
        return row.model_copy(update=updates)

    def _notify(self) -> None:
        if self._on_change is not None:
            self._on_change(self.total, self.quote_items())


class HotelPriceCalculator(PriceCalculator[HotelPriceQuery]):
    group = "hotels"
    row_model = HotelPriceQuery


class CabPriceCalculator(PriceCalculator[CabPriceQuery]):
    group = "cabs"
    row_model = CabPriceQuery
