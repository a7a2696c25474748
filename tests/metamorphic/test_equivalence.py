"""
Metamorphic and equivalence tests.

These tests verify that equivalent inputs produce the same breakdown:
1. Splitting a standard line into parts preserves totals
2. Line order does not affect totals
3. Irrelevant additions (unknown product lines, zero-quantity lines,
   unused catalog entries) are no-ops
4. An override equal to the showdate visitor sum is a no-op
5. Price scaling scales revenue linearly
"""

from decimal import Decimal

from forecast_engines.aggregator import OfferProfitEngine
from tests.conftest import make_line, make_offer, make_product, post_event


def _catalog():
    return [
        make_product(id="terminal", category="hardware", cost_basis="40", has_staffel=True),
        make_product(id="crew", category="staffing", cost_basis="180"),
        make_product(
            id="txn", category="transaction_processing", unit_type="percentage_of_revenue",
            key_figure="expected_revenue", percentage_fee="1.5", percentage_cost_basis="0.9",
        ),
        make_product(
            id="wristband", category="ticketing", key_figure="total_visitors",
            key_figure_multiplier="1", default_price="0.80", cost_basis="0.35",
        ),
    ]


_SETTINGS = post_event("transaction_processing", "ticketing")

_EVENT = dict(
    expected_visitors_per_showdate={"d1": 4000, "d2": 2500},
    euro_spend_per_person="25",
    staffel="2",
    realization_costs={"staffing": 900},
    additional_costs={"transport": 120},
)


def _totals(offer, products=None):
    breakdown = OfferProfitEngine().calculate(
        offer=offer,
        products=products if products is not None else _catalog(),
        category_settings=_SETTINGS,
    )
    return breakdown.summary()


_BASE_LINES = (
    make_line("terminal", quantity=10, unit_price="75"),
    make_line("crew", quantity=4, unit_price="260"),
    make_line("txn"),
    make_line("wristband"),
)


class TestSplitMergeEquivalence:
    def test_split_standard_line(self):
        merged = make_offer(*_BASE_LINES, **_EVENT)
        split = make_offer(
            make_line("terminal", quantity=3, unit_price="75"),
            make_line("terminal", quantity=7, unit_price="75"),
            *_BASE_LINES[1:],
            **_EVENT,
        )
        assert _totals(merged) == _totals(split)


class TestOrderIndependence:
    def test_reversed_lines(self):
        forward = make_offer(*_BASE_LINES, **_EVENT)
        backward = make_offer(*reversed(_BASE_LINES), **_EVENT)
        assert _totals(forward) == _totals(backward)

    def test_reversed_catalog(self):
        offer = make_offer(*_BASE_LINES, **_EVENT)
        assert _totals(offer) == _totals(offer, list(reversed(_catalog())))


class TestNoOpAdditions:
    def test_unknown_product_line(self):
        base = make_offer(*_BASE_LINES, **_EVENT)
        extra = make_offer(*_BASE_LINES, make_line("ghost", quantity=99, unit_price="99"), **_EVENT)
        assert _totals(base) == _totals(extra)

    def test_zero_quantity_standard_line(self):
        base = make_offer(*_BASE_LINES, **_EVENT)
        extra = make_offer(*_BASE_LINES, make_line("crew", quantity=0, unit_price="260"), **_EVENT)
        assert _totals(base) == _totals(extra)

    def test_unused_catalog_entry(self):
        offer = make_offer(*_BASE_LINES, **_EVENT)
        catalog = _catalog() + [make_product(id="unused", cost_basis="1000")]
        assert _totals(offer) == _totals(offer, catalog)

    def test_override_equal_to_visitor_sum(self):
        base = make_offer(*_BASE_LINES, **_EVENT)
        same = make_offer(*_BASE_LINES, total_visitors_override=6500, **_EVENT)
        assert _totals(base) == _totals(same)


class TestLinearity:
    def test_price_scaling_scales_standard_revenue(self):
        base = make_offer(*_BASE_LINES[:2], **_EVENT)
        doubled = make_offer(
            make_line("terminal", quantity=10, unit_price="150"),
            make_line("crew", quantity=4, unit_price="520"),
            **_EVENT,
        )
        assert _totals(doubled)["standard_revenue"] == 2 * _totals(base)["standard_revenue"]
        assert _totals(doubled)["realization_correction"] == _totals(base)["realization_correction"]

    def test_spend_scaling_scales_percentage_revenue(self):
        lines = (make_line("txn"),)
        base = make_offer(*lines, **_EVENT)
        params = dict(_EVENT, euro_spend_per_person="50")
        doubled = make_offer(*lines, **params)
        assert _totals(doubled)["post_calc_revenue"] == Decimal(2) * _totals(base)["post_calc_revenue"]
