"""
forecast_engines.line_evaluator -- Revenue, cost and profit of one offer line.

Responsibility:
    Evaluate a single OfferLine against its resolved Product under the
    line's calculation regime:

    Standard lines (fixed quantity and price):
        effective_qty = quantity * staffel_factor
        revenue       = effective_qty * (line.unit_price ?? 0)
        cost          = effective_qty * cost_basis

    Post-event, ``percentage_of_revenue`` (only when fee or cost % > 0):
        multiplied = base_value * (key_figure_multiplier ?? 1)
        revenue    = multiplied * fee / 100
        cost       = multiplied * cost % / 100

    Post-event, ``per_unit`` (flat price on a forecast quantity):
        forecast_qty = round(base_value * (key_figure_multiplier ?? 0))
                       or post_calc_forecasts[product.id] without key figure
        revenue      = forecast_qty * (line.unit_price ?? default_price ?? 0)
        cost         = forecast_qty * cost_basis

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Depends on classifier output, key_figures and resolution.

Invariants enforced:
    - profit == revenue - cost for every result.
    - Standard lines with quantity <= 0 contribute exactly zero.
    - Only the per-unit forecast quantity is rounded (ROUND_HALF_UP to a
      whole unit).  Percentage amounts stay continuous; display rounding
      happens once, on the final breakdown.
    - Negative quantities, percentages and cost bases are clamped to zero.
    - Nothing in this module raises for a structurally valid record.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from forecast_engines.key_figures import EventMetrics, resolve_base_value
from forecast_engines.resolution import (
    ZERO,
    has_key_figure,
    non_negative,
    resolve_cost_basis,
    resolve_percentage_cost_basis,
    resolve_percentage_fee,
    resolve_percentage_multiplier,
    resolve_post_event_unit_price,
    resolve_quantity,
    resolve_standard_unit_price,
    resolve_staffel_factor,
    resolve_unit_multiplier,
)
from forecast_kernel.domain.records import (
    CalculationType,
    Offer,
    OfferLine,
    Product,
    UnitType,
)
from forecast_kernel.domain.values import Currency, Money

_HUNDRED = Decimal("100")
_WHOLE_UNIT = Decimal("1")


class PricingModel:
    """How a line result was priced (string constants for display/logs)."""

    STANDARD = "standard"
    PERCENTAGE = "percentage_of_revenue"
    PER_UNIT = "per_unit"


@dataclass(frozen=True)
class LineResult:
    """
    Financial outcome of one offer line.

    ``quantity`` is the effective quantity the amounts were computed on:
    staffel-scaled for standard lines, the forecast quantity for per-unit
    post-event lines, and the multiplied base value for percentage lines.
    """

    product_id: str | None
    category: str
    calculation_type: CalculationType
    pricing_model: str
    quantity: Decimal
    revenue: Money
    cost: Money

    @property
    def profit(self) -> Money:
        return self.revenue - self.cost

    @property
    def is_zero(self) -> bool:
        return self.revenue.is_zero and self.cost.is_zero


class LineEvaluator:
    """
    Pure function evaluator for offer lines.

    Contract:
        No I/O, fully deterministic. The once-per-offer EventMetrics are
        passed in, never recomputed per line.
    Non-goals:
        - Does not look up products; the caller resolves them and skips
          lines whose product is unknown.
    """

    def __init__(self, currency: Currency | str = "EUR") -> None:
        self._currency = currency if isinstance(currency, Currency) else Currency(currency)

    @property
    def currency(self) -> Currency:
        return self._currency

    def evaluate(
        self,
        line: OfferLine,
        product: Product,
        offer: Offer,
        calculation_type: CalculationType,
        metrics: EventMetrics,
    ) -> LineResult:
        """Evaluate one line under the given calculation regime."""
        if calculation_type == CalculationType.POST_EVENT:
            if product.unit_type == UnitType.PERCENTAGE_OF_REVENUE:
                return self.evaluate_percentage(line, product, metrics)
            return self.evaluate_per_unit(line, product, offer, metrics)
        return self.evaluate_standard(line, product, offer)

    def evaluate_standard(self, line: OfferLine, product: Product, offer: Offer) -> LineResult:
        """Fixed quantity at an explicit unit price, scaled by staffel."""
        quantity = resolve_quantity(line)
        if quantity <= ZERO:
            return self._result(line, product, CalculationType.STANDARD, PricingModel.STANDARD, ZERO, ZERO, ZERO)

        effective_qty = quantity * resolve_staffel_factor(product, offer.staffel)
        revenue = effective_qty * resolve_standard_unit_price(line)
        cost = effective_qty * resolve_cost_basis(product)
        return self._result(
            line, product, CalculationType.STANDARD, PricingModel.STANDARD, effective_qty, revenue, cost
        )

    def evaluate_percentage(self, line: OfferLine, product: Product, metrics: EventMetrics) -> LineResult:
        """Fee and cost as percentages of a key-figure-derived value."""
        fee = resolve_percentage_fee(line, product)
        cost_pct = resolve_percentage_cost_basis(line, product)
        if fee <= ZERO and cost_pct <= ZERO:
            return self._result(
                line, product, CalculationType.POST_EVENT, PricingModel.PERCENTAGE, ZERO, ZERO, ZERO
            )

        base_value = ZERO
        if has_key_figure(product):
            base_value = resolve_base_value(product.key_figure, product.category, metrics)
        multiplied = non_negative(base_value * resolve_percentage_multiplier(product))

        revenue = multiplied * fee / _HUNDRED
        cost = multiplied * cost_pct / _HUNDRED
        return self._result(
            line, product, CalculationType.POST_EVENT, PricingModel.PERCENTAGE, multiplied, revenue, cost
        )

    def evaluate_per_unit(
        self,
        line: OfferLine,
        product: Product,
        offer: Offer,
        metrics: EventMetrics,
    ) -> LineResult:
        """Flat unit price on a forecast quantity."""
        forecast_qty = self.forecast_quantity(product, offer, metrics)
        if forecast_qty <= ZERO:
            return self._result(
                line, product, CalculationType.POST_EVENT, PricingModel.PER_UNIT, ZERO, ZERO, ZERO
            )

        revenue = forecast_qty * resolve_post_event_unit_price(line, product)
        cost = forecast_qty * resolve_cost_basis(product)
        return self._result(
            line, product, CalculationType.POST_EVENT, PricingModel.PER_UNIT, forecast_qty, revenue, cost
        )

    @staticmethod
    def forecast_quantity(product: Product, offer: Offer, metrics: EventMetrics) -> Decimal:
        """
        Whole-unit forecast for a per-unit post-event product.

        With a key figure the forecast is derived and rounded half-up;
        without one, the manual forecast recorded on the offer is used.
        """
        if has_key_figure(product):
            base_value = resolve_base_value(product.key_figure, product.category, metrics)
            raw = base_value * resolve_unit_multiplier(product)
            return non_negative(raw.quantize(_WHOLE_UNIT, rounding=ROUND_HALF_UP))
        return non_negative(offer.post_calc_forecasts.get(product.id))

    def _result(
        self,
        line: OfferLine,
        product: Product,
        calculation_type: CalculationType,
        pricing_model: str,
        quantity: Decimal,
        revenue: Decimal,
        cost: Decimal,
    ) -> LineResult:
        return LineResult(
            product_id=line.product_id,
            category=product.category,
            calculation_type=calculation_type,
            pricing_model=pricing_model,
            quantity=quantity,
            revenue=Money(amount=revenue, currency=self._currency),
            cost=Money(amount=cost, currency=self._currency),
        )
