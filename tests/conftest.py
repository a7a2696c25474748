"""
Pytest fixtures and record builders for the forecast test suite.

Provides:
- Builders for Product, OfferLine, Offer and CategorySetting records
  that accept plain numbers/strings and convert them to Decimal
- A ready-made engine and the default post-event category settings
"""

from decimal import Decimal
from typing import Any

import pytest

from forecast_engines.aggregator import OfferProfitEngine
from forecast_kernel.domain.records import (
    CalculationType,
    CategorySetting,
    Offer,
    OfferLine,
    Product,
    UnitType,
)
from forecast_kernel.logging_config import LogContext, reset_logging

_PRODUCT_DECIMALS = (
    "cost_basis",
    "default_price",
    "percentage_fee",
    "percentage_cost_basis",
    "key_figure_multiplier",
)
_LINE_DECIMALS = ("quantity", "unit_price", "percentage_fee", "percentage_cost_basis")
_OFFER_DECIMALS = (
    "euro_spend_per_person",
    "bar_meters",
    "food_sales_positions",
    "staffel",
    "total_visitors_override",
    "total_discount_percentage",
    "total_discount_amount",
)
_OFFER_MAPS = (
    "expected_visitors_per_showdate",
    "post_calc_forecasts",
    "realization_costs",
    "additional_costs",
)


def _dec(value: Any) -> Decimal | None:
    if value is None or isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def make_product(id: str = "p1", category: str = "hardware", **kwargs: Any) -> Product:
    """Build a Product; numeric kwargs may be int, float-free str or Decimal."""
    for name in _PRODUCT_DECIMALS:
        if name in kwargs:
            kwargs[name] = _dec(kwargs[name])
    if isinstance(kwargs.get("unit_type"), str):
        kwargs["unit_type"] = UnitType(kwargs["unit_type"])
    return Product(id=id, category=category, **kwargs)


def make_line(product_id: str | None = "p1", quantity: Any = 0, **kwargs: Any) -> OfferLine:
    kwargs["quantity"] = quantity
    for name in _LINE_DECIMALS:
        if name in kwargs:
            kwargs[name] = _dec(kwargs[name])
    return OfferLine(product_id=product_id, **kwargs)


def make_offer(*lines: OfferLine, **kwargs: Any) -> Offer:
    """Build an Offer from lines plus keyword event parameters."""
    for name in _OFFER_DECIMALS:
        if name in kwargs:
            kwargs[name] = _dec(kwargs[name])
    for name in _OFFER_MAPS:
        if name in kwargs:
            kwargs[name] = {str(k): _dec(v) for k, v in kwargs[name].items()}
    if "showdates" in kwargs:
        kwargs["showdates"] = tuple(kwargs["showdates"])
    return Offer(offer_lines=tuple(lines), **kwargs)


def post_event(*categories: str) -> list[CategorySetting]:
    return [CategorySetting(c, CalculationType.POST_EVENT) for c in categories]


def standard(*categories: str) -> list[CategorySetting]:
    return [CategorySetting(c, CalculationType.STANDARD) for c in categories]


@pytest.fixture
def engine() -> OfferProfitEngine:
    return OfferProfitEngine()


@pytest.fixture
def default_settings() -> list[CategorySetting]:
    """Category settings shipped in forecast_config/sets/default.yaml."""
    return post_event("transaction_processing", "ticketing")


@pytest.fixture
def clean_logging():
    """Reset logging state around a test."""
    reset_logging()
    LogContext.clear()
    yield
    LogContext.clear()
    reset_logging()
