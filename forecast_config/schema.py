"""
ForecastSettings schema.

The typed form of a forecast configuration set.  YAML documents are
parsed into these types by the loader and validated by
``forecast_config.get_active_settings``.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from forecast_kernel.domain.records import CategorySetting, Product


@dataclass(frozen=True)
class ForecastSettings:
    """Runtime settings shared by every forecast of one installation."""

    currency: str = "EUR"
    vat_rate: Decimal = Decimal("0.21")
    average_transaction_value: Decimal = Decimal("13.00")
    category_settings: tuple[CategorySetting, ...] = ()
    checksum: str = ""


@dataclass(frozen=True)
class Catalog:
    """Products and category settings loaded from one document."""

    products: tuple[Product, ...] = ()
    category_settings: tuple[CategorySetting, ...] = ()
