"""
Tests for field default resolution.

Covers:
- ``??`` precedence: line override -> product default -> zero
- Explicit zero overrides do not fall through
- Clamping of quantities, percentages and cost bases
- Staffel factor and key-figure presence
"""

from decimal import Decimal

import pytest

from forecast_engines.resolution import (
    finite_or_zero,
    has_key_figure,
    non_negative,
    resolve_cost_basis,
    resolve_percentage_cost_basis,
    resolve_percentage_fee,
    resolve_percentage_multiplier,
    resolve_post_event_unit_price,
    resolve_quantity,
    resolve_staffel_factor,
    resolve_standard_unit_price,
    resolve_unit_multiplier,
)
from tests.conftest import make_line, make_product


class TestFiniteOrZero:
    """Non-finite and missing numbers resolve to zero."""

    @pytest.mark.parametrize("value", [None, Decimal("NaN"), Decimal("Infinity"), Decimal("-Infinity")])
    def test_non_finite_is_zero(self, value):
        assert finite_or_zero(value) == Decimal("0")

    def test_negative_is_kept(self):
        assert finite_or_zero(Decimal("-3.5")) == Decimal("-3.5")

    def test_int_and_float_converted(self):
        assert finite_or_zero(7) == Decimal("7")
        assert finite_or_zero(0.5) == Decimal("0.5")

    def test_non_negative_clamps(self):
        assert non_negative(Decimal("-1")) == Decimal("0")
        assert non_negative(Decimal("2")) == Decimal("2")
        assert non_negative(Decimal("NaN")) == Decimal("0")


class TestUnitPrice:
    """Unit price precedence for standard and post-event lines."""

    def test_standard_uses_line_price(self):
        assert resolve_standard_unit_price(make_line(unit_price="12.5")) == Decimal("12.5")

    def test_standard_ignores_default_price(self):
        """Standard lines never fall back to the catalog price."""
        assert resolve_standard_unit_price(make_line()) == Decimal("0")

    def test_post_event_falls_back_to_default(self):
        product = make_product(default_price="4")
        assert resolve_post_event_unit_price(make_line(), product) == Decimal("4")

    def test_post_event_line_overrides_default(self):
        product = make_product(default_price="4")
        assert resolve_post_event_unit_price(make_line(unit_price="6"), product) == Decimal("6")

    def test_explicit_zero_override_does_not_fall_through(self):
        product = make_product(default_price="4")
        assert resolve_post_event_unit_price(make_line(unit_price="0"), product) == Decimal("0")

    def test_post_event_neither_set(self):
        assert resolve_post_event_unit_price(make_line(), make_product()) == Decimal("0")

    def test_negative_price_is_not_clamped(self):
        """Prices can be negative (credit lines)."""
        assert resolve_standard_unit_price(make_line(unit_price="-5")) == Decimal("-5")


class TestPercentages:
    """Percentage fee / cost basis precedence and clamping."""

    def test_fee_from_product(self):
        product = make_product(percentage_fee="2.5")
        assert resolve_percentage_fee(make_line(), product) == Decimal("2.5")

    def test_fee_line_override(self):
        product = make_product(percentage_fee="2.5")
        assert resolve_percentage_fee(make_line(percentage_fee="3"), product) == Decimal("3")

    def test_fee_zero_override(self):
        product = make_product(percentage_fee="2.5")
        assert resolve_percentage_fee(make_line(percentage_fee="0"), product) == Decimal("0")

    def test_negative_fee_clamped(self):
        product = make_product(percentage_fee="-2")
        assert resolve_percentage_fee(make_line(), product) == Decimal("0")

    def test_cost_basis_precedence(self):
        product = make_product(percentage_cost_basis="1")
        assert resolve_percentage_cost_basis(make_line(), product) == Decimal("1")
        line = make_line(percentage_cost_basis="1.2")
        assert resolve_percentage_cost_basis(line, product) == Decimal("1.2")


class TestQuantityAndCost:
    def test_quantity_clamped(self):
        assert resolve_quantity(make_line(quantity=-3)) == Decimal("0")

    def test_quantity_nan(self):
        assert resolve_quantity(make_line(quantity=Decimal("NaN"))) == Decimal("0")

    def test_cost_basis_default_zero(self):
        assert resolve_cost_basis(make_product()) == Decimal("0")

    def test_cost_basis_negative_clamped(self):
        assert resolve_cost_basis(make_product(cost_basis="-10")) == Decimal("0")


class TestMultipliers:
    """Multiplier defaults differ per pricing model."""

    def test_percentage_multiplier_defaults_to_one(self):
        assert resolve_percentage_multiplier(make_product()) == Decimal("1")

    def test_unit_multiplier_defaults_to_zero(self):
        assert resolve_unit_multiplier(make_product()) == Decimal("0")

    def test_explicit_multiplier(self):
        product = make_product(key_figure_multiplier="0.25")
        assert resolve_percentage_multiplier(product) == Decimal("0.25")
        assert resolve_unit_multiplier(product) == Decimal("0.25")


class TestStaffelFactor:
    def test_without_flag_is_one(self):
        assert resolve_staffel_factor(make_product(), Decimal("3")) == Decimal("1")

    def test_with_flag_uses_staffel(self):
        product = make_product(has_staffel=True)
        assert resolve_staffel_factor(product, Decimal("3")) == Decimal("3")

    @pytest.mark.parametrize("staffel", [None, Decimal("0"), Decimal("-2"), Decimal("NaN")])
    def test_unusable_staffel_is_one(self, staffel):
        product = make_product(has_staffel=True)
        assert resolve_staffel_factor(product, staffel) == Decimal("1")


class TestHasKeyFigure:
    @pytest.mark.parametrize("key_figure", [None, "", "none"])
    def test_absent(self, key_figure):
        assert not has_key_figure(make_product(key_figure=key_figure))

    def test_present(self):
        assert has_key_figure(make_product(key_figure="bar_meters"))

    def test_unknown_counts_as_present(self):
        """Unknown key figures are present but resolve to a zero base."""
        assert has_key_figure(make_product(key_figure="legacy_metric"))
