"""
Tests for the offer profit engine.

Covers:
- Worked scenarios (standard, percentage, realization, additional costs)
- Mixed offers and per-category grouping
- Missing product references
- Realization correction rules
- Rounding for display
- Cache key over the full input tuple
"""

import logging
from datetime import date
from decimal import Decimal

from forecast_engines.aggregator import OfferProfitEngine, breakdown_cache_key
from forecast_kernel.domain.records import CalculationType
from forecast_kernel.domain.values import Money
from tests.conftest import make_line, make_offer, make_product, post_event


def eur(amount: str) -> Money:
    return Money.of(amount, "EUR")


class TestWorkedScenarios:
    """End-to-end scenarios with hand-computed results."""

    def test_standard_only(self, engine):
        product = make_product(cost_basis="5")
        offer = make_offer(make_line("p1", quantity=10, unit_price="20"))
        result = engine.calculate(offer=offer, products=[product], category_settings=[])

        assert result.standard_revenue == eur("200")
        assert result.standard_profit == eur("150")
        assert result.post_calc_revenue == eur("0")
        assert result.net_profit == eur("150")

    def test_percentage_post_event(self, engine):
        product = make_product(
            id="txn",
            category="transaction_processing",
            unit_type="percentage_of_revenue",
            key_figure="expected_revenue",
            key_figure_multiplier="1",
            percentage_fee="3",
            percentage_cost_basis="1",
        )
        offer = make_offer(
            make_line("txn"),
            expected_visitors_per_showdate={"d1": 1000},
            euro_spend_per_person="10",
        )
        result = engine.calculate(
            offer=offer,
            products=[product],
            category_settings=post_event("transaction_processing"),
        )

        assert result.metrics.transaction_revenue == Decimal("10000")
        assert result.post_calc_revenue == eur("300")
        assert result.post_calc_profit == eur("200")
        assert result.net_profit == eur("200")

    def test_realization_correction(self, engine):
        product = make_product(id="meal", category="catering", cost_basis="5")
        offer = make_offer(
            make_line("meal", quantity=100),
            realization_costs={"catering": 350},
        )
        result = engine.calculate(offer=offer, products=[product], category_settings=[])

        assert result.budget_by_category["catering"] == eur("500")
        assert result.realization_correction == eur("150")
        # standard profit -500 (no price) + 150 correction
        assert result.net_profit == eur("-350")

    def test_additional_costs(self, engine):
        offer = make_offer(additional_costs={"travel": 80, "insurance": 20})
        result = engine.calculate(offer=offer, products=[], category_settings=[])

        assert result.additional_costs == eur("100")
        assert result.additional_costs_breakdown["travel"] == eur("80")
        assert result.net_profit == eur("-100")


class TestMixedOffer:
    """An offer with standard and post-event lines in several categories."""

    def setup_method(self):
        self.engine = OfferProfitEngine()
        self.products = [
            make_product(id="terminal", category="hardware", cost_basis="40", has_staffel=True),
            make_product(id="crew", category="staffing", cost_basis="180"),
            make_product(
                id="wristband", category="ticketing", key_figure="total_visitors",
                key_figure_multiplier="1", default_price="0.80", cost_basis="0.35",
            ),
        ]
        self.settings = post_event("ticketing")
        self.offer = make_offer(
            make_line("terminal", quantity=10, unit_price="75"),
            make_line("crew", quantity=2, unit_price="260"),
            make_line("wristband"),
            staffel="2",
            showdates=[date(2026, 7, 10)],
            expected_visitors_per_showdate={"2026-07-10": 1000},
            total_visitors_override=1200,
            additional_costs={"transport": "50"},
        )

    def _calculate(self):
        return self.engine.calculate(
            offer=self.offer, products=self.products, category_settings=self.settings
        )

    def test_totals(self):
        result = self._calculate()
        # terminal: 20 * 75 = 1500 / 20 * 40 = 800; crew: 520 / 360
        assert result.standard_revenue == eur("2020")
        assert result.standard_cost == eur("1160")
        # wristband: 1200 visitors (override) * 0.80 / * 0.35
        assert result.post_calc_revenue == eur("960")
        assert result.post_calc_cost == eur("420")
        assert result.net_profit == eur("1350")
        assert result.total_revenue == eur("2980")

    def test_categories_sum_to_totals(self):
        result = self._calculate()
        profit = sum((c.profit for c in result.categories), eur("0"))
        assert profit == result.standard_profit + result.post_calc_profit

    def test_category_breakdown(self):
        result = self._calculate()
        ticketing = result.category("ticketing")
        assert ticketing.calculation_type == CalculationType.POST_EVENT
        assert ticketing.revenue == eur("960")
        assert ticketing.line_count == 1
        assert result.category("hardware").calculation_type == CalculationType.STANDARD
        assert result.category("unknown") is None

    def test_lines_in_offer_order(self):
        result = self._calculate()
        assert [line.product_id for line in result.lines] == ["terminal", "crew", "wristband"]

    def test_budget_by_category_uses_staffel(self):
        result = self._calculate()
        assert result.budget_by_category == {"hardware": eur("800"), "staffing": eur("360")}


class TestMissingProducts:
    def test_unknown_product_skipped(self, engine):
        product = make_product(cost_basis="5")
        offer = make_offer(
            make_line("p1", quantity=1, unit_price="10"),
            make_line("ghost", quantity=5, unit_price="100"),
            make_line(None, quantity=5, unit_price="100"),
        )
        result = engine.calculate(offer=offer, products=[product], category_settings=[])
        assert result.standard_revenue == eur("10")
        assert result.skipped_product_ids == ("ghost", None)

    def test_unknown_product_logged_at_debug(self, engine, caplog):
        offer = make_offer(make_line("ghost", quantity=1, unit_price="1"))
        with caplog.at_level(logging.DEBUG, logger="forecast_kernel.engines.aggregator"):
            engine.calculate(offer=offer, products=[], category_settings=[])
        missing = [r for r in caplog.records if r.getMessage() == "offer_line_product_missing"]
        assert missing and missing[0].levelno == logging.DEBUG


class TestRealizationCorrection:
    def setup_method(self):
        self.engine = OfferProfitEngine()
        self.products = [make_product(id="meal", category="catering", cost_basis="5")]

    def _calculate(self, realization_costs):
        offer = make_offer(
            make_line("meal", quantity=100, unit_price="8"),
            realization_costs=realization_costs,
        )
        return self.engine.calculate(
            offer=offer, products=self.products, category_settings=[]
        )

    def test_overspend_is_negative(self):
        result = self._calculate({"catering": 620})
        assert result.realization_correction == eur("-120")

    def test_zero_realized_is_ignored(self):
        """A category with budget but no recorded spend contributes nothing."""
        result = self._calculate({"catering": 0})
        assert result.realization_correction == eur("0")
        assert result.realization_by_category == {}

    def test_category_without_budget(self):
        result = self._calculate({"security": 200})
        assert result.realization_correction == eur("-200")

    def test_negative_realized_is_clamped(self):
        result = self._calculate({"catering": -50})
        assert result.realization_correction == eur("0")


class TestRounding:
    def test_rounded_copy(self, engine):
        product = make_product(cost_basis="0.333")
        offer = make_offer(make_line("p1", quantity=1, unit_price="10.005"))
        result = engine.calculate(offer=offer, products=[product], category_settings=[])

        assert result.standard_revenue == eur("10.005")
        rounded = result.rounded()
        assert rounded.standard_revenue == eur("10.01")
        assert rounded.standard_cost == eur("0.33")
        assert rounded.categories[0].revenue == eur("10.01")

    def test_summary_keys(self, engine):
        result = engine.calculate(offer=make_offer(), products=[], category_settings=[])
        assert set(result.summary()) == {
            "standard_revenue",
            "standard_profit",
            "post_calc_revenue",
            "post_calc_profit",
            "realization_correction",
            "additional_costs",
            "net_profit",
        }


class TestEngineCurrency:
    def test_amounts_in_engine_currency(self):
        engine = OfferProfitEngine("usd")
        product = make_product(cost_basis="1")
        offer = make_offer(make_line("p1", quantity=1, unit_price="2"))
        result = engine.calculate(offer=offer, products=[product], category_settings=[])
        assert result.net_profit == Money.of("1", "USD")


class TestBreakdownCacheKey:
    """The cache key covers the offer, the catalog and the settings."""

    def setup_method(self):
        self.products = [make_product(id="a", cost_basis="1"), make_product(id="b", cost_basis="2")]
        self.settings = post_event("ticketing")
        self.offer = make_offer(make_line("a", quantity=1, unit_price="3"), id="o1")

    def test_stable(self):
        key1 = breakdown_cache_key(self.offer, self.products, self.settings)
        key2 = breakdown_cache_key(self.offer, self.products, self.settings)
        assert key1 == key2
        assert len(key1) == 64

    def test_catalog_order_irrelevant(self):
        key1 = breakdown_cache_key(self.offer, self.products, self.settings)
        key2 = breakdown_cache_key(self.offer, list(reversed(self.products)), self.settings)
        assert key1 == key2

    def test_product_edit_changes_key(self):
        edited = [make_product(id="a", cost_basis="1.5"), self.products[1]]
        assert breakdown_cache_key(self.offer, self.products, self.settings) != breakdown_cache_key(
            self.offer, edited, self.settings
        )

    def test_settings_edit_changes_key(self):
        assert breakdown_cache_key(self.offer, self.products, self.settings) != breakdown_cache_key(
            self.offer, self.products, post_event("hardware")
        )


class TestOverridePrecedence:
    def test_line_fee_beats_product_fee(self, engine):
        product = make_product(
            id="txn", category="ticketing", unit_type="percentage_of_revenue",
            key_figure="expected_revenue", percentage_fee="10",
        )
        offer = make_offer(
            make_line("txn", percentage_fee="5"),
            expected_visitors_per_showdate={"d1": 100},
            euro_spend_per_person="10",
        )
        result = engine.calculate(
            offer=offer, products=[product], category_settings=post_event("ticketing")
        )
        assert result.post_calc_revenue == eur("50")


class TestTransactionProcessingBase:
    """transaction_processing ignores the visitor override."""

    def test_uses_showdate_sum(self, engine):
        product = make_product(
            id="txn", category="transaction_processing", key_figure="total_visitors",
            key_figure_multiplier="1", default_price="1",
        )
        offer = make_offer(
            make_line("txn"),
            total_visitors_override=500,
            expected_visitors_per_showdate={"d1": 100, "d2": 100},
        )
        result = engine.calculate(
            offer=offer, products=[product],
            category_settings=post_event("transaction_processing"),
        )
        assert result.lines[0].quantity == Decimal("200")
        assert result.post_calc_revenue == eur("200")
