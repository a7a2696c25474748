"""
forecast_engines.classifier -- Standard vs. post-event classification.

Responsibility:
    Decide, per product, which calculation regime applies, based on the
    category configuration.

Architecture position:
    Engines -- pure calculation layer, zero I/O. Leaf module.

Invariants enforced:
    - A product is ``post_event`` only when a CategorySetting for its
      category exists AND says ``post_event``.  No setting, or any other
      calculation type, means ``standard``.  Products added before their
      category was configured rely on this default.
    - If the settings list holds more than one entry for a category, the
      first one wins.
"""

from __future__ import annotations

from collections.abc import Iterable

from forecast_kernel.domain.records import CalculationType, CategorySetting, Product
from forecast_kernel.logging_config import get_logger

logger = get_logger("engines.classifier")


class CategoryIndex:
    """Category -> calculation type lookup built once per calculation."""

    def __init__(self, category_settings: Iterable[CategorySetting]) -> None:
        self._types: dict[str, CalculationType] = {}
        for setting in category_settings:
            if setting.category in self._types:
                logger.warning("duplicate_category_setting", extra={
                    "category": setting.category,
                    "ignored_calculation_type": setting.calculation_type,
                })
                continue
            self._types[setting.category] = setting.calculation_type

    def calculation_type(self, category: str) -> CalculationType:
        if self._types.get(category) == CalculationType.POST_EVENT:
            return CalculationType.POST_EVENT
        return CalculationType.STANDARD

    def classify(self, product: Product) -> CalculationType:
        return self.calculation_type(product.category)


def classify(
    product: Product,
    category_settings: Iterable[CategorySetting],
) -> CalculationType:
    """Classify a single product against a settings list."""
    return CategoryIndex(category_settings).classify(product)
