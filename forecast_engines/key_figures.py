"""
forecast_engines.key_figures -- Event metrics and key-figure base resolution.

Responsibility:
    Derive, once per offer, the event metrics that post-event products
    are priced on, and map a product's key figure to its base value.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Consumed by the line evaluator; also used directly by display code
    that shows the event cockpit figures.

Invariants enforced:
    - ``transaction_revenue`` is ALWAYS derived from the showdate visitor
      sum, never from ``total_visitors_override``: transaction-processing
      products must reflect actual attendance, not a sales override.
    - ``ticketing_visitors`` uses the override only when it is set and > 0.
    - The ``transaction_processing`` category resolves ``total_visitors``
      and ``expected_revenue`` from the showdate-derived values; every
      other category uses the ticketing-derived values.
    - Unrecognized key figures resolve to 0.
    - All offer inputs are clamped at zero before use.

Usage:
    metrics = derive_event_metrics(offer)
    base = resolve_base_value(product.key_figure, product.category, metrics)
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from forecast_engines.resolution import ZERO, non_negative
from forecast_kernel.domain.records import TRANSACTION_PROCESSING, KeyFigure, Offer


@dataclass(frozen=True)
class EventMetrics:
    """Precursor values shared by every line of one offer."""

    visitors_from_showdates: Decimal
    transaction_revenue: Decimal
    ticketing_visitors: Decimal
    ticketing_revenue: Decimal
    bar_meters: Decimal
    food_sales_positions: Decimal
    euro_spend_per_person: Decimal
    number_of_showdates: int


def derive_event_metrics(offer: Offer) -> EventMetrics:
    """Compute the once-per-offer event metrics."""
    visitors = sum(
        (non_negative(v) for v in offer.expected_visitors_per_showdate.values()),
        ZERO,
    )
    spend = non_negative(offer.euro_spend_per_person)

    override = non_negative(offer.total_visitors_override)
    ticketing_visitors = override if override > ZERO else visitors

    return EventMetrics(
        visitors_from_showdates=visitors,
        transaction_revenue=visitors * spend,
        ticketing_visitors=ticketing_visitors,
        ticketing_revenue=ticketing_visitors * spend,
        bar_meters=non_negative(offer.bar_meters),
        food_sales_positions=non_negative(offer.food_sales_positions),
        euro_spend_per_person=spend,
        number_of_showdates=len(offer.showdates),
    )


def _visitors(metrics: EventMetrics, is_transaction: bool) -> Decimal:
    return metrics.visitors_from_showdates if is_transaction else metrics.ticketing_visitors


def _revenue(metrics: EventMetrics, is_transaction: bool) -> Decimal:
    return metrics.transaction_revenue if is_transaction else metrics.ticketing_revenue


_BASE_RESOLVERS: dict[str, Callable[[EventMetrics, bool], Decimal]] = {
    KeyFigure.TOTAL_VISITORS.value: _visitors,
    KeyFigure.EXPECTED_REVENUE.value: _revenue,
    KeyFigure.BAR_METERS.value: lambda m, _: m.bar_meters,
    KeyFigure.FOOD_SALES_POSITIONS.value: lambda m, _: m.food_sales_positions,
    KeyFigure.EURO_SPEND_PER_PERSON.value: lambda m, _: m.euro_spend_per_person,
    KeyFigure.NUMBER_OF_SHOWDATES.value: lambda m, _: Decimal(m.number_of_showdates),
}


def resolve_base_value(
    key_figure: str | None,
    category: str,
    metrics: EventMetrics,
) -> Decimal:
    """
    Base value a post-event product is priced on.

    ``none``, missing and unrecognized key figures all resolve to 0.
    """
    if key_figure is None:
        return ZERO
    resolver = _BASE_RESOLVERS.get(key_figure)
    if resolver is None:
        return ZERO
    return resolver(metrics, category == TRANSACTION_PROCESSING)


def expected_transactions(
    metrics: EventMetrics,
    average_transaction_value: Decimal,
) -> int:
    """Estimated number of card transactions: revenue / average ticket, rounded."""
    if average_transaction_value <= ZERO:
        return 0
    estimate = metrics.transaction_revenue / average_transaction_value
    return int(estimate.quantize(Decimal("1"), rounding=ROUND_HALF_UP))
