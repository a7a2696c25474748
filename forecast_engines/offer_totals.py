"""
forecast_engines.offer_totals -- Client-facing offer price totals.

Responsibility:
    Compute what the client is quoted: the subtotal of the standard
    lines, the offer discount, VAT and the total including VAT.

        subtotal            = round(sum(qty * staffel_factor * unit_price))
        discount            = round(subtotal * pct / 100)   if pct > 0
                              round(discount_amount ?? 0)   otherwise
        discounted_subtotal = subtotal - discount
        vat                 = round(discounted_subtotal * vat_rate)
        total               = round(discounted_subtotal + vat)

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - Only standard lines are quoted; post-event lines are settled after
      the event and never appear in the client price.
    - Every step is rounded to currency precision before the next one,
      so the quote reproduces to the cent.
    - A percentage discount takes precedence over an amount discount.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal

from forecast_engines.classifier import CategoryIndex
from forecast_engines.resolution import (
    ZERO,
    finite_or_zero,
    non_negative,
    resolve_quantity,
    resolve_staffel_factor,
    resolve_standard_unit_price,
)
from forecast_engines.tracer import traced_engine
from forecast_kernel.domain.records import (
    CalculationType,
    CategorySetting,
    Offer,
    Product,
)
from forecast_kernel.domain.values import Currency, Money

DEFAULT_VAT_RATE = Decimal("0.21")

_HUNDRED = Decimal("100")


@dataclass(frozen=True)
class OfferTotals:
    """Quoted price of an offer, rounded to currency precision."""

    subtotal: Money
    discount: Money
    discounted_subtotal: Money
    vat: Money
    total: Money
    vat_rate: Decimal


@traced_engine("offer_totals", "1.0", fingerprint_fields=("offer", "vat_rate"))
def calculate_offer_totals(
    offer: Offer,
    products: Iterable[Product],
    category_settings: Iterable[CategorySetting],
    vat_rate: Decimal = DEFAULT_VAT_RATE,
    currency: Currency | str = "EUR",
) -> OfferTotals:
    """
    Quote an offer.

    Lines whose product is unknown, or whose category is post-event,
    are left out of the subtotal.
    """
    currency = currency if isinstance(currency, Currency) else Currency(currency)
    catalog = {product.id: product for product in products}
    index = CategoryIndex(category_settings)

    raw_subtotal = ZERO
    for line in offer.offer_lines:
        product = catalog.get(line.product_id) if line.product_id is not None else None
        if product is None or index.classify(product) != CalculationType.STANDARD:
            continue
        quantity = resolve_quantity(line)
        if quantity <= ZERO:
            continue
        factor = resolve_staffel_factor(product, offer.staffel)
        raw_subtotal += quantity * factor * resolve_standard_unit_price(line)

    subtotal = Money(amount=raw_subtotal, currency=currency).round()

    percentage = non_negative(offer.total_discount_percentage)
    if percentage > ZERO:
        discount = (subtotal * (percentage / _HUNDRED)).round()
    else:
        discount = Money(amount=finite_or_zero(offer.total_discount_amount), currency=currency).round()

    discounted = subtotal - discount
    vat = (discounted * vat_rate).round()
    return OfferTotals(
        subtotal=subtotal,
        discount=discount,
        discounted_subtotal=discounted,
        vat=vat,
        total=(discounted + vat).round(),
        vat_rate=vat_rate,
    )
