"""
forecast_engines.project_financials -- Budget vs. realized costs of a signed project.

Responsibility:
    After the event, compare the cost budget frozen at signing (plus any
    custom cost lines added later) with the costs actually realized,
    and derive the project margin on the confirmed revenue.

        actual_costs      = sum(realized[id] if recorded else budget)
        margin            = confirmed_revenue - actual_costs
        margin_percentage = margin / confirmed_revenue * 100  (0 if revenue <= 0)
        budget_difference = budget_total - actual_costs

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Input: SigningSnapshot from ``forecast_engines.signing``.

Invariants enforced:
    - A cost line without a recorded realized amount counts its budget
      as the actual cost; ``realized_total`` only sums recorded amounts.
    - An explicit realized amount of zero is a recorded amount.
    - Custom lines without a budget count as a zero budget.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from decimal import Decimal

from forecast_engines.resolution import ZERO, finite_or_zero
from forecast_engines.signing import SigningSnapshot
from forecast_kernel.domain.values import Money

_HUNDRED = Decimal("100")


@dataclass(frozen=True)
class CustomCostLine:
    """Cost line added to a project after signing."""

    id: str
    name: str
    budget: Decimal | None = None


@dataclass(frozen=True)
class CostLineStatus:
    """One row of the budget vs. realized grid."""

    id: str
    name: str
    budget: Money
    realized: Money | None
    custom: bool = False

    @property
    def actual(self) -> Money:
        return self.realized if self.realized is not None else self.budget

    @property
    def difference(self) -> Money:
        return self.budget - self.actual


@dataclass(frozen=True)
class ProjectFinancials:
    confirmed_revenue: Money
    budget_total: Money
    realized_total: Money
    actual_costs: Money
    margin: Money
    margin_percentage: Decimal
    lines: tuple[CostLineStatus, ...] = ()

    @property
    def budget_difference(self) -> Money:
        return self.budget_total - self.actual_costs

    @property
    def within_budget(self) -> bool:
        return not self.budget_difference.is_negative


def calculate_project_financials(
    snapshot: SigningSnapshot,
    confirmed_revenue: Decimal,
    realized_costs: Mapping[str, Decimal | None],
    custom_lines: Iterable[CustomCostLine] = (),
    product_names: Mapping[str, str] | None = None,
) -> ProjectFinancials:
    """
    Build the budget vs. realized overview of a project.

    ``realized_costs`` is keyed by cost line id: the product id for
    snapshot lines, the custom line id for custom lines.
    """
    currency = snapshot.estimated_profit.currency
    names = product_names or {}

    def _realized(line_id: str) -> Money | None:
        value = realized_costs.get(line_id)
        if value is None:
            return None
        return Money(amount=finite_or_zero(value), currency=currency)

    lines = [
        CostLineStatus(
            id=product_id,
            name=names.get(product_id, product_id),
            budget=budget,
            realized=_realized(product_id),
        )
        for product_id, budget in snapshot.budget_by_product.items()
    ]
    lines.extend(
        CostLineStatus(
            id=custom.id,
            name=custom.name,
            budget=Money(amount=finite_or_zero(custom.budget), currency=currency),
            realized=_realized(custom.id),
            custom=True,
        )
        for custom in custom_lines
    )

    zero = Money.zero(currency)
    budget_total = zero
    realized_total = zero
    actual_costs = zero
    for line in lines:
        budget_total = budget_total + line.budget
        if line.realized is not None:
            realized_total = realized_total + line.realized
        actual_costs = actual_costs + line.actual

    revenue = Money(amount=finite_or_zero(confirmed_revenue), currency=currency)
    margin = revenue - actual_costs
    if revenue.amount > ZERO:
        margin_percentage = margin.amount / revenue.amount * _HUNDRED
    else:
        margin_percentage = ZERO

    return ProjectFinancials(
        confirmed_revenue=revenue,
        budget_total=budget_total,
        realized_total=realized_total,
        actual_costs=actual_costs,
        margin=margin,
        margin_percentage=margin_percentage,
        lines=tuple(lines),
    )
