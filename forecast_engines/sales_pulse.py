"""
forecast_engines.sales_pulse -- Weekly confirmed vs. pipeline profit.

Responsibility:
    Spread the forecast profit of many offers over calendar weeks
    (Monday start) by the week of each offer's earliest showdate, split
    into confirmed and pipeline profit, and roll the weeks up per month.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Uses OfferProfitEngine for every offer; never re-implements profit.

Invariants enforced:
    - Confirmed: status ``accepted`` or a signed date, and not archived.
    - Pipeline: status draft / sent / under_review and not confirmed.
      An offer is counted in at most one of the two.
    - The window is passed in explicitly; the engine never reads the
      clock.  Offers without showdates, or whose showdate week lies
      outside the window, are ignored.
    - Month rollups are keyed ``YYYY-MM`` by the week's Monday.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, timedelta

from forecast_engines.aggregator import OfferProfitEngine
from forecast_kernel.domain.records import (
    CategorySetting,
    Offer,
    OfferStatus,
    Product,
)
from forecast_kernel.domain.values import Currency, Money
from forecast_kernel.logging_config import get_logger

logger = get_logger("engines.sales_pulse")

_PIPELINE_STATUSES = frozenset({
    OfferStatus.DRAFT,
    OfferStatus.SENT,
    OfferStatus.UNDER_REVIEW,
})

_ONE_WEEK = timedelta(days=7)


def week_start(day: date) -> date:
    """Monday of the week containing ``day``."""
    return day - timedelta(days=day.weekday())


def is_confirmed(offer: Offer) -> bool:
    if offer.status == OfferStatus.ARCHIVED:
        return False
    return offer.status == OfferStatus.ACCEPTED or offer.signed_date is not None


def is_pipeline(offer: Offer) -> bool:
    return offer.status in _PIPELINE_STATUSES and not is_confirmed(offer)


@dataclass
class WeekBucket:
    week_start: date
    confirmed_profit: Money
    pipeline_profit: Money

    @property
    def month(self) -> str:
        return self.week_start.strftime("%Y-%m")

    @property
    def total_profit(self) -> Money:
        return self.confirmed_profit + self.pipeline_profit


@dataclass
class MonthRollup:
    month: str
    confirmed_profit: Money
    pipeline_profit: Money
    confirmed_offers: set[str] = field(default_factory=set)
    pipeline_offers: set[str] = field(default_factory=set)

    @property
    def total_profit(self) -> Money:
        return self.confirmed_profit + self.pipeline_profit

    @property
    def confirmed_count(self) -> int:
        return len(self.confirmed_offers)

    @property
    def pipeline_count(self) -> int:
        return len(self.pipeline_offers)


@dataclass(frozen=True)
class SalesPulse:
    weeks: tuple[WeekBucket, ...]
    months: tuple[MonthRollup, ...]

    def week(self, day: date) -> WeekBucket | None:
        monday = week_start(day)
        for bucket in self.weeks:
            if bucket.week_start == monday:
                return bucket
        return None

    def month(self, key: str) -> MonthRollup | None:
        for rollup in self.months:
            if rollup.month == key:
                return rollup
        return None


def build_sales_pulse(
    offers: Iterable[Offer],
    products: Iterable[Product],
    category_settings: Iterable[CategorySetting],
    window_start: date,
    window_end: date,
    currency: Currency | str = "EUR",
) -> SalesPulse:
    """
    Weekly and monthly profit pulse over ``[window_start, window_end]``.

    Weeks run from the Monday on or before ``window_start`` through the
    last Monday not after ``window_end``.
    """
    engine = OfferProfitEngine(currency)
    zero = Money.zero(engine.currency)
    catalog = list(products)
    settings = list(category_settings)

    buckets: dict[date, WeekBucket] = {}
    monday = week_start(window_start)
    while monday <= window_end:
        buckets[monday] = WeekBucket(week_start=monday, confirmed_profit=zero, pipeline_profit=zero)
        monday += _ONE_WEEK

    months: dict[str, MonthRollup] = {}
    for bucket in buckets.values():
        if bucket.month not in months:
            months[bucket.month] = MonthRollup(
                month=bucket.month, confirmed_profit=zero, pipeline_profit=zero
            )

    ignored = 0
    for index, offer in enumerate(offers):
        confirmed = is_confirmed(offer)
        if not confirmed and not is_pipeline(offer):
            continue
        first = offer.first_showdate
        bucket = buckets.get(week_start(first)) if first is not None else None
        if bucket is None:
            ignored += 1
            continue

        profit = engine.calculate(
            offer=offer, products=catalog, category_settings=settings
        ).net_profit
        rollup = months[bucket.month]
        offer_key = offer.id if offer.id is not None else f"#{index}"
        if confirmed:
            bucket.confirmed_profit = bucket.confirmed_profit + profit
            rollup.confirmed_profit = rollup.confirmed_profit + profit
            rollup.confirmed_offers.add(offer_key)
        else:
            bucket.pipeline_profit = bucket.pipeline_profit + profit
            rollup.pipeline_profit = rollup.pipeline_profit + profit
            rollup.pipeline_offers.add(offer_key)

    logger.info("sales_pulse_built", extra={
        "window_start": window_start,
        "window_end": window_end,
        "weeks": len(buckets),
        "ignored_offers": ignored,
    })
    return SalesPulse(weeks=tuple(buckets.values()), months=tuple(months.values()))
