"""
forecast_engines.signing -- Budget snapshot taken when an offer is signed.

Responsibility:
    Freeze the figures the project layer keeps once the client signs:
    the estimated profit and the cost budget per category and per
    product.  The snapshot is derived from the same ProfitBreakdown the
    offer screens show, so the signed budget never drifts from the
    forecast the client saw.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Input: ProfitBreakdown from the aggregator.  Output is handed to the
    storage collaborator for persistence.

Invariants enforced:
    - Budgets come from standard lines only, staffel applied.
    - Products with zero budgeted cost are omitted; categories are kept
      as the breakdown reports them.
    - All amounts rounded to currency precision.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Mapping

from forecast_engines.aggregator import ProfitBreakdown
from forecast_kernel.domain.records import CalculationType
from forecast_kernel.domain.values import Money
from forecast_kernel.logging_config import get_logger

logger = get_logger("engines.signing")


@dataclass(frozen=True)
class SigningSnapshot:
    """Budget and profit frozen at signing time."""

    estimated_profit: Money
    budget_by_category: Mapping[str, Money]
    budget_by_product: Mapping[str, Money]
    signed_on: date

    @property
    def budget_total(self) -> Money:
        total = Money.zero(self.estimated_profit.currency)
        for amount in self.budget_by_product.values():
            total = total + amount
        return total


def create_signing_snapshot(breakdown: ProfitBreakdown, signed_on: date) -> SigningSnapshot:
    """Snapshot the budget of a signed offer."""
    by_product: dict[str, Money] = {}
    for line in breakdown.lines:
        if line.calculation_type != CalculationType.STANDARD or line.product_id is None:
            continue
        current = by_product.get(line.product_id, Money.zero(breakdown.currency))
        by_product[line.product_id] = current + line.cost

    snapshot = SigningSnapshot(
        estimated_profit=breakdown.net_profit.round(),
        budget_by_category={
            category: amount.round()
            for category, amount in breakdown.budget_by_category.items()
        },
        budget_by_product={
            product_id: amount.round()
            for product_id, amount in by_product.items()
            if not amount.round().is_zero
        },
        signed_on=signed_on,
    )

    logger.info("signing_snapshot_created", extra={
        "signed_on": signed_on,
        "estimated_profit": str(snapshot.estimated_profit.amount),
        "budget_products": len(snapshot.budget_by_product),
    })
    return snapshot
