"""
forecast_engines.aggregator -- Offer profit & revenue breakdown.

Responsibility:
    Fold every line result of an offer into the final ProfitBreakdown:

        standard_revenue / standard_profit    sum of standard lines
        post_calc_revenue / post_calc_profit  sum of post-event lines
        realization_correction                sum over categories with a
                                              recorded realized cost of
                                              (budgeted standard cost - realized)
        additional_costs                      sum of offer.additional_costs
        net_profit = standard_profit + post_calc_profit
                     + realization_correction - additional_costs

    The same fold grouped by product category produces the per-category
    display table; its totals equal the ungrouped sums.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    This is the single entry point every view, report and snapshot
    calls; nothing else re-implements the calculation.

Invariants enforced:
    - Purity: the result is a function of (offer, products,
      category_settings) only. No cache, no clock, no ambient state,
      no mutation of inputs.
    - MissingReference: a line whose product_id does not resolve is
      skipped, recorded in ``skipped_product_ids`` and logged at DEBUG.
    - ConfigurationGap: categories without a setting are standard.
    - Realization correction only applies to categories whose realized
      cost is recorded and > 0.  A category with budget but no recorded
      spend contributes nothing.
    - Additional costs are summed as given; rejecting negative entries
      is the editing layer's job.

Audit relevance:
    ``calculate`` is traced via ``@traced_engine``; callers that cache
    results must key them with ``breakdown_cache_key`` (full input
    tuple), never with the offer id alone.

Usage:
    from forecast_engines.aggregator import OfferProfitEngine

    engine = OfferProfitEngine()
    breakdown = engine.calculate(
        offer=offer,
        products=products,
        category_settings=category_settings,
    )
    print(breakdown.net_profit)
"""

from __future__ import annotations

import dataclasses
import hashlib
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from decimal import Decimal

from forecast_engines.classifier import CategoryIndex
from forecast_engines.key_figures import EventMetrics, derive_event_metrics
from forecast_engines.line_evaluator import LineEvaluator, LineResult
from forecast_engines.resolution import ZERO, finite_or_zero, non_negative
from forecast_engines.tracer import canonical_form, traced_engine
from forecast_kernel.domain.records import (
    CalculationType,
    CategorySetting,
    Offer,
    Product,
)
from forecast_kernel.domain.values import Currency, Money
from forecast_kernel.logging_config import get_logger

logger = get_logger("engines.aggregator")

ENGINE_NAME = "offer_profit"
ENGINE_VERSION = "1.0"


@dataclass(frozen=True)
class CategoryBreakdown:
    """Subtotals of one product category."""

    category: str
    calculation_type: CalculationType
    revenue: Money
    cost: Money
    line_count: int

    @property
    def profit(self) -> Money:
        return self.revenue - self.cost

    def rounded(self) -> CategoryBreakdown:
        return dataclasses.replace(self, revenue=self.revenue.round(), cost=self.cost.round())


@dataclass(frozen=True)
class ProfitBreakdown:
    """
    Financial breakdown of one offer.

    Ephemeral: never persisted as-is.  Amounts are unrounded; use
    ``rounded()`` for display.
    """

    currency: Currency
    standard_revenue: Money
    standard_cost: Money
    post_calc_revenue: Money
    post_calc_cost: Money
    realization_correction: Money
    additional_costs: Money
    metrics: EventMetrics
    categories: tuple[CategoryBreakdown, ...] = ()
    lines: tuple[LineResult, ...] = ()
    budget_by_category: Mapping[str, Money] = field(default_factory=dict)
    realization_by_category: Mapping[str, Money] = field(default_factory=dict)
    additional_costs_breakdown: Mapping[str, Money] = field(default_factory=dict)
    skipped_product_ids: tuple[str | None, ...] = ()

    @property
    def standard_profit(self) -> Money:
        return self.standard_revenue - self.standard_cost

    @property
    def post_calc_profit(self) -> Money:
        return self.post_calc_revenue - self.post_calc_cost

    @property
    def total_revenue(self) -> Money:
        return self.standard_revenue + self.post_calc_revenue

    @property
    def forecast_profit(self) -> Money:
        """Standard plus post-event profit, before corrections and extra costs."""
        return self.standard_profit + self.post_calc_profit

    @property
    def net_profit(self) -> Money:
        return (
            self.standard_profit
            + self.post_calc_profit
            + self.realization_correction
            - self.additional_costs
        )

    def category(self, name: str) -> CategoryBreakdown | None:
        for breakdown in self.categories:
            if breakdown.category == name:
                return breakdown
        return None

    def rounded(self) -> ProfitBreakdown:
        """Display copy with every amount rounded to currency precision."""
        return dataclasses.replace(
            self,
            standard_revenue=self.standard_revenue.round(),
            standard_cost=self.standard_cost.round(),
            post_calc_revenue=self.post_calc_revenue.round(),
            post_calc_cost=self.post_calc_cost.round(),
            realization_correction=self.realization_correction.round(),
            additional_costs=self.additional_costs.round(),
            categories=tuple(c.rounded() for c in self.categories),
            budget_by_category={k: v.round() for k, v in self.budget_by_category.items()},
            realization_by_category={k: v.round() for k, v in self.realization_by_category.items()},
            additional_costs_breakdown={
                k: v.round() for k, v in self.additional_costs_breakdown.items()
            },
        )

    def summary(self) -> dict[str, Decimal]:
        """Flat amount-only view, used by logs and the CLI."""
        return {
            "standard_revenue": self.standard_revenue.amount,
            "standard_profit": self.standard_profit.amount,
            "post_calc_revenue": self.post_calc_revenue.amount,
            "post_calc_profit": self.post_calc_profit.amount,
            "realization_correction": self.realization_correction.amount,
            "additional_costs": self.additional_costs.amount,
            "net_profit": self.net_profit.amount,
        }


class OfferProfitEngine:
    """
    Pure function calculator for offer profit forecasts.

    Contract:
        No I/O, no storage access, fully deterministic.
        All reference data (catalog, category settings) passed as
        parameters on every call.
    Guarantees:
        - Total over structurally valid input: never raises for unknown
          products, missing settings or malformed numbers.
        - Sum of per-category profit equals standard + post-event profit.
    Non-goals:
        - Does not memoize; callers re-invoke on every input change.
        - Does not round; see ``ProfitBreakdown.rounded``.
    """

    def __init__(self, currency: Currency | str = "EUR") -> None:
        self._currency = currency if isinstance(currency, Currency) else Currency(currency)
        self._evaluator = LineEvaluator(self._currency)

    @property
    def currency(self) -> Currency:
        return self._currency

    @traced_engine(ENGINE_NAME, ENGINE_VERSION, fingerprint_fields=("offer", "products", "category_settings"))
    def calculate(
        self,
        offer: Offer,
        products: Iterable[Product],
        category_settings: Iterable[CategorySetting],
    ) -> ProfitBreakdown:
        """
        Calculate the full profit breakdown of an offer.

        Preconditions:
            Records are structurally valid (mapped through
            ``forecast_kernel.domain.mapping`` or built directly).

        Postconditions:
            Returns an unrounded ProfitBreakdown in the engine currency.
        """
        catalog = {product.id: product for product in products}
        index = CategoryIndex(category_settings)
        metrics = derive_event_metrics(offer)

        results: list[LineResult] = []
        skipped: list[str | None] = []
        for line in offer.offer_lines:
            product = catalog.get(line.product_id) if line.product_id is not None else None
            if product is None:
                logger.debug("offer_line_product_missing", extra={
                    "offer_id": offer.id,
                    "product_id": line.product_id,
                })
                skipped.append(line.product_id)
                continue
            results.append(
                self._evaluator.evaluate(line, product, offer, index.classify(product), metrics)
            )

        standard = [r for r in results if r.calculation_type == CalculationType.STANDARD]
        post_event = [r for r in results if r.calculation_type == CalculationType.POST_EVENT]

        budget_by_category = self._budget_by_category(standard)
        realization_by_category = self._realization_corrections(offer, budget_by_category)
        additional_breakdown = {
            label: self._money(finite_or_zero(amount))
            for label, amount in offer.additional_costs.items()
        }

        breakdown = ProfitBreakdown(
            currency=self._currency,
            standard_revenue=self._sum(r.revenue for r in standard),
            standard_cost=self._sum(r.cost for r in standard),
            post_calc_revenue=self._sum(r.revenue for r in post_event),
            post_calc_cost=self._sum(r.cost for r in post_event),
            realization_correction=self._sum(realization_by_category.values()),
            additional_costs=self._sum(additional_breakdown.values()),
            metrics=metrics,
            categories=self._group_by_category(results),
            lines=tuple(results),
            budget_by_category=budget_by_category,
            realization_by_category=realization_by_category,
            additional_costs_breakdown=additional_breakdown,
            skipped_product_ids=tuple(skipped),
        )

        logger.info("offer_profit_calculated", extra={
            "offer_id": offer.id,
            "line_count": len(offer.offer_lines),
            "evaluated_lines": len(results),
            "skipped_lines": len(skipped),
            "currency": self._currency.code,
            **{k: str(v) for k, v in breakdown.summary().items()},
        })
        return breakdown

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _money(self, amount: Decimal) -> Money:
        return Money(amount=amount, currency=self._currency)

    def _sum(self, amounts: Iterable[Money]) -> Money:
        total = Money.zero(self._currency)
        for amount in amounts:
            total = total + amount
        return total

    def _budget_by_category(self, standard: list[LineResult]) -> dict[str, Money]:
        budget: dict[str, Money] = {}
        for result in standard:
            if result.quantity <= ZERO:
                continue
            budget[result.category] = budget.get(result.category, Money.zero(self._currency)) + result.cost
        return budget

    def _realization_corrections(
        self,
        offer: Offer,
        budget_by_category: Mapping[str, Money],
    ) -> dict[str, Money]:
        corrections: dict[str, Money] = {}
        for category, realized in offer.realization_costs.items():
            realized_amount = non_negative(realized)
            if realized_amount <= ZERO:
                continue
            budgeted = budget_by_category.get(category, Money.zero(self._currency))
            corrections[category] = budgeted - self._money(realized_amount)
        return corrections

    def _group_by_category(self, results: list[LineResult]) -> tuple[CategoryBreakdown, ...]:
        grouped: dict[str, list[LineResult]] = {}
        for result in results:
            grouped.setdefault(result.category, []).append(result)
        return tuple(
            CategoryBreakdown(
                category=category,
                calculation_type=members[0].calculation_type,
                revenue=self._sum(r.revenue for r in members),
                cost=self._sum(r.cost for r in members),
                line_count=len(members),
            )
            for category, members in grouped.items()
        )


def breakdown_cache_key(
    offer: Offer,
    products: Iterable[Product],
    category_settings: Iterable[CategorySetting],
) -> str:
    """
    Cache key over the full input tuple.

    Product and category edits change the breakdown of an unchanged
    offer, so the key covers the catalog and settings too. Catalog and
    settings order does not affect the key; offer line order does not
    affect the breakdown totals but is kept since it affects ``lines``.
    """
    catalog = sorted(products, key=lambda p: p.id)
    settings = sorted(category_settings, key=lambda s: s.category)
    canonical = "|".join((
        f"engine={ENGINE_NAME}:{ENGINE_VERSION}",
        f"offer={canonical_form(offer)}",
        f"products={canonical_form(catalog)}",
        f"category_settings={canonical_form(settings)}",
    ))
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()
