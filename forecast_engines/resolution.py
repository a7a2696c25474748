"""
forecast_engines.resolution -- Default resolution for every overridable field.

Responsibility:
    One explicit function per field of the override-precedence chain
    (line override -> product default -> zero), plus the clamping rules
    that keep malformed numbers from producing negative revenue or cost.
    Each function is small enough to be tested in isolation, so the
    chain is auditable instead of being spread across ``or`` expressions.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Consumed by key_figures, line_evaluator, aggregator and offer_totals.

Invariants enforced:
    - ``None`` means "not set" and falls through to the next source.
      An explicit zero on a line is an override and does NOT fall
      through.
    - Non-finite values (NaN, +/-Infinity) resolve to zero.
    - Quantities, percentages and cost bases are clamped at zero.
      Unit prices and additional costs are NOT clamped.
"""

from __future__ import annotations

from decimal import Decimal

from forecast_kernel.domain.records import KeyFigure, OfferLine, Product

ZERO = Decimal("0")
ONE = Decimal("1")


def finite_or_zero(value: Decimal | int | float | None) -> Decimal:
    """Return value as Decimal, or 0 for None and non-finite values."""
    if value is None:
        return ZERO
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    if not value.is_finite():
        return ZERO
    return value


def non_negative(value: Decimal | int | float | None) -> Decimal:
    """finite_or_zero, clamped at zero."""
    resolved = finite_or_zero(value)
    return resolved if resolved > ZERO else ZERO


def _first_set(*values: Decimal | None) -> Decimal | None:
    for value in values:
        if value is not None:
            return value
    return None


def resolve_quantity(line: OfferLine) -> Decimal:
    """Line quantity, clamped at zero."""
    return non_negative(line.quantity)


def resolve_standard_unit_price(line: OfferLine) -> Decimal:
    """Standard lines require an explicit price: ``line.unit_price ?? 0``."""
    return finite_or_zero(line.unit_price)


def resolve_post_event_unit_price(line: OfferLine, product: Product) -> Decimal:
    """``line.unit_price ?? product.default_price ?? 0``."""
    return finite_or_zero(_first_set(line.unit_price, product.default_price))


def resolve_percentage_fee(line: OfferLine, product: Product) -> Decimal:
    """``line.percentage_fee ?? product.percentage_fee ?? 0``, clamped at zero."""
    return non_negative(_first_set(line.percentage_fee, product.percentage_fee))


def resolve_percentage_cost_basis(line: OfferLine, product: Product) -> Decimal:
    """``line.percentage_cost_basis ?? product.percentage_cost_basis ?? 0``, clamped."""
    return non_negative(
        _first_set(line.percentage_cost_basis, product.percentage_cost_basis)
    )


def resolve_cost_basis(product: Product) -> Decimal:
    """``product.cost_basis ?? 0``, clamped at zero."""
    return non_negative(product.cost_basis)


def resolve_percentage_multiplier(product: Product) -> Decimal:
    """Percentage products scale their base by ``key_figure_multiplier ?? 1``."""
    if product.key_figure_multiplier is None:
        return ONE
    return finite_or_zero(product.key_figure_multiplier)


def resolve_unit_multiplier(product: Product) -> Decimal:
    """Per-unit products forecast ``base * (key_figure_multiplier ?? 0)``."""
    return finite_or_zero(product.key_figure_multiplier)


def resolve_staffel_factor(product: Product, staffel: Decimal | None) -> Decimal:
    """
    Volume multiplier for a standard line.

    ``staffel`` applies only to products flagged ``has_staffel``.  A
    missing, zero, negative or non-finite staffel means "no scaling".
    """
    if not product.has_staffel:
        return ONE
    factor = finite_or_zero(staffel)
    return factor if factor > ZERO else ONE


def has_key_figure(product: Product) -> bool:
    """False for a missing, blank or ``none`` key figure."""
    return product.key_figure not in (None, "", KeyFigure.NONE.value)
