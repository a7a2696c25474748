"""
Records -- Immutable input records consumed by the forecast engines.

Responsibility:
    Typed, frozen representations of the catalog (Product), the category
    configuration (CategorySetting) and the sales offer (Offer / OfferLine)
    as supplied by the storage collaborator.

Architecture position:
    Kernel > Domain -- pure data, zero I/O.

Invariants enforced:
    - Optional numeric fields stay ``None`` when the source omits them.
      Default resolution (``??`` chains) is the job of
      ``forecast_engines.resolution``, never of the record.
    - Records are frozen; engines read them and never write back.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Mapping


class UnitType(str, Enum):
    """How a product is priced."""

    PERCENTAGE_OF_REVENUE = "percentage_of_revenue"
    PER_UNIT = "per_unit"


class KeyFigure(str, Enum):
    """Event metric a post-event product derives its base value from."""

    NONE = "none"
    TOTAL_VISITORS = "total_visitors"
    EXPECTED_REVENUE = "expected_revenue"
    BAR_METERS = "bar_meters"
    FOOD_SALES_POSITIONS = "food_sales_positions"
    EURO_SPEND_PER_PERSON = "euro_spend_per_person"
    NUMBER_OF_SHOWDATES = "number_of_showdates"


class CalculationType(str, Enum):
    """Calculation regime of a category."""

    STANDARD = "standard"
    POST_EVENT = "post_event"


class OfferStatus(str, Enum):
    """Lifecycle status of an offer in the sales pipeline."""

    DRAFT = "draft"
    SENT = "sent"
    UNDER_REVIEW = "under_review"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    ARCHIVED = "archived"


# Category whose key-figure base always comes from the showdate visitor sum.
TRANSACTION_PROCESSING = "transaction_processing"


@dataclass(frozen=True)
class Product:
    """
    Catalog entry.

    ``key_figure`` is kept as a plain string: unrecognized values coming
    from older catalog rows must survive mapping and resolve to a zero
    base value instead of failing.
    """

    id: str
    category: str
    unit_type: UnitType = UnitType.PER_UNIT
    cost_basis: Decimal | None = None
    default_price: Decimal | None = None
    percentage_fee: Decimal | None = None
    percentage_cost_basis: Decimal | None = None
    key_figure: str | None = None
    key_figure_multiplier: Decimal | None = None
    has_staffel: bool = False
    name: str = ""


@dataclass(frozen=True)
class CategorySetting:
    """Calculation regime for one category. At most one per category."""

    category: str
    calculation_type: CalculationType = CalculationType.STANDARD


@dataclass(frozen=True)
class OfferLine:
    """One priced line of an offer. All price fields are optional overrides."""

    product_id: str | None
    quantity: Decimal = Decimal("0")
    unit_price: Decimal | None = None
    percentage_fee: Decimal | None = None
    percentage_cost_basis: Decimal | None = None


@dataclass(frozen=True)
class Offer:
    """
    Aggregate root: line items plus the event parameters they are priced on.

    Mappings are treated as read-only by every engine.
    """

    offer_lines: tuple[OfferLine, ...] = ()
    showdates: tuple[date, ...] = ()
    expected_visitors_per_showdate: Mapping[str, int | Decimal | None] = field(default_factory=dict)
    euro_spend_per_person: Decimal | None = None
    bar_meters: Decimal | None = None
    food_sales_positions: Decimal | None = None
    staffel: Decimal | None = Decimal("1")
    total_visitors_override: int | Decimal | None = None
    post_calc_forecasts: Mapping[str, Decimal | None] = field(default_factory=dict)
    realization_costs: Mapping[str, Decimal | None] = field(default_factory=dict)
    additional_costs: Mapping[str, Decimal | None] = field(default_factory=dict)
    total_discount_percentage: Decimal | None = None
    total_discount_amount: Decimal | None = None
    id: str | None = None
    status: OfferStatus = OfferStatus.DRAFT
    signed_date: date | None = None

    @property
    def first_showdate(self) -> date | None:
        """Earliest showdate, or None when the offer has no dates yet."""
        return min(self.showdates) if self.showdates else None
