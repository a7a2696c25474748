"""
Pure domain layer.

This module contains immutable records and value objects with NO
dependencies on:
- Storage / database clients
- Time/clock
- I/O

All domain objects are immutable and deterministic.
"""

from forecast_kernel.domain.currency import CurrencyInfo, CurrencyRegistry
from forecast_kernel.domain.mapping import (
    category_setting_from_dict,
    offer_from_dict,
    offer_line_from_dict,
    product_from_dict,
)
from forecast_kernel.domain.records import (
    CalculationType,
    CategorySetting,
    KeyFigure,
    Offer,
    OfferLine,
    OfferStatus,
    Product,
    UnitType,
)
from forecast_kernel.domain.values import Currency, Money

__all__ = [
    "CalculationType",
    "CategorySetting",
    "Currency",
    "CurrencyInfo",
    "CurrencyRegistry",
    "KeyFigure",
    "Money",
    "Offer",
    "OfferLine",
    "OfferStatus",
    "Product",
    "UnitType",
    "category_setting_from_dict",
    "offer_from_dict",
    "offer_line_from_dict",
    "product_from_dict",
]
