"""
Record mapping (``forecast_kernel.domain.mapping``).

Responsibility
--------------
Turns already-deserialized storage rows (JSON-shaped dicts, as returned
by the storage collaborator) into the typed records of
``forecast_kernel.domain.records``.

Invariants enforced
-------------------
* Numeric fields are converted through ``str`` to ``Decimal``; ``None``
  and empty strings stay ``None``.
* No clamping and no defaulting of optional numbers happens here. The
  engines own the default/override precedence chain.
* Structural problems raise ``InvalidRecordError`` naming the record
  type, the field and the offending value.

Failure modes
-------------
* Missing ``id`` / ``category`` on a product -> ``InvalidRecordError``.
* Unparseable number, unknown ``unit_type``, ``calculation_type`` or
  ``status`` -> ``InvalidRecordError``.
* Unparseable showdate -> ``InvalidRecordError``.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any

from forecast_kernel.domain.records import (
    CalculationType,
    CategorySetting,
    Offer,
    OfferLine,
    OfferStatus,
    Product,
    UnitType,
)
from forecast_kernel.exceptions import InvalidRecordError


def parse_decimal(record_type: str, field: str, value: Any) -> Decimal | None:
    """
    Convert a numeric-like value to Decimal.

    Postconditions:
        - Returns None for None and blank strings.
        - NaN / Infinity are passed through; the engines treat them as 0.
    Raises:
        InvalidRecordError: for booleans and unparseable values.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        raise InvalidRecordError(record_type, field, value, "boolean is not a number")
    if isinstance(value, Decimal):
        return value
    if isinstance(value, str):
        value = value.strip().replace(",", ".")
        if not value:
            return None
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise InvalidRecordError(record_type, field, value, "not a number") from e


def parse_date(record_type: str, field: str, value: Any) -> date:
    """Parse a date from an ISO string, date or datetime."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError as e:
            raise InvalidRecordError(record_type, field, value, "not an ISO date") from e
    raise InvalidRecordError(record_type, field, value, "not a date")


def _parse_enum(record_type: str, field: str, enum_cls: type, value: Any, default: Any) -> Any:
    if value is None or value == "":
        return default
    try:
        return enum_cls(value)
    except ValueError as e:
        allowed = ", ".join(m.value for m in enum_cls)
        raise InvalidRecordError(record_type, field, value, f"expected one of {allowed}") from e


def _enum_value(value: Any) -> str:
    return value.value if isinstance(value, Enum) else str(value)


def _require(record_type: str, data: dict[str, Any], field: str) -> Any:
    value = data.get(field)
    if value is None or (isinstance(value, str) and not value.strip()):
        raise InvalidRecordError(record_type, field, value, "required")
    return value


def _ensure_dict(record_type: str, data: Any) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise InvalidRecordError(record_type, "<row>", data, "expected a mapping")
    return data


def _decimal_map(record_type: str, field: str, data: Any) -> dict[str, Decimal | None]:
    if not data:
        return {}
    if not isinstance(data, dict):
        raise InvalidRecordError(record_type, field, data, "expected a mapping")
    return {
        str(key): parse_decimal(record_type, f"{field}.{key}", value)
        for key, value in data.items()
    }


def product_from_dict(data: dict[str, Any]) -> Product:
    """
    Map a catalog row to a ``Product``.

    Preconditions:
        - ``data`` contains ``id`` and ``category``.
    Raises:
        InvalidRecordError: on missing keys or unparseable values.
    """
    data = _ensure_dict("product", data)
    key_figure = data.get("key_figure")
    return Product(
        id=str(_require("product", data, "id")),
        category=str(_require("product", data, "category")),
        unit_type=_parse_enum("product", "unit_type", UnitType, data.get("unit_type"), UnitType.PER_UNIT),
        cost_basis=parse_decimal("product", "cost_basis", data.get("cost_basis")),
        default_price=parse_decimal("product", "default_price", data.get("default_price")),
        percentage_fee=parse_decimal("product", "percentage_fee", data.get("percentage_fee")),
        percentage_cost_basis=parse_decimal(
            "product", "percentage_cost_basis", data.get("percentage_cost_basis")
        ),
        key_figure=_enum_value(key_figure) if key_figure not in (None, "") else None,
        key_figure_multiplier=parse_decimal(
            "product", "key_figure_multiplier", data.get("key_figure_multiplier")
        ),
        has_staffel=bool(data.get("has_staffel", False)),
        name=str(data.get("name") or ""),
    )


def category_setting_from_dict(data: dict[str, Any]) -> CategorySetting:
    """Map a category-settings row to a ``CategorySetting``."""
    data = _ensure_dict("category_setting", data)
    return CategorySetting(
        category=str(_require("category_setting", data, "category")),
        calculation_type=_parse_enum(
            "category_setting",
            "calculation_type",
            CalculationType,
            data.get("calculation_type"),
            CalculationType.STANDARD,
        ),
    )


def offer_line_from_dict(data: dict[str, Any]) -> OfferLine:
    """
    Map an offer line to an ``OfferLine``.

    A missing ``product_id`` is not an error: the line maps with
    ``product_id=None`` and contributes nothing, like any other line
    whose product cannot be resolved.
    """
    data = _ensure_dict("offer_line", data)
    product_id = data.get("product_id")
    quantity = parse_decimal("offer_line", "quantity", data.get("quantity"))
    return OfferLine(
        product_id=str(product_id) if product_id not in (None, "") else None,
        quantity=quantity if quantity is not None else Decimal("0"),
        unit_price=parse_decimal("offer_line", "unit_price", data.get("unit_price")),
        percentage_fee=parse_decimal("offer_line", "percentage_fee", data.get("percentage_fee")),
        percentage_cost_basis=parse_decimal(
            "offer_line", "percentage_cost_basis", data.get("percentage_cost_basis")
        ),
    )


def offer_from_dict(data: dict[str, Any]) -> Offer:
    """
    Map an offer row (with nested ``offer_lines``) to an ``Offer``.

    Raises:
        InvalidRecordError: on unparseable values anywhere in the offer.
    """
    data = _ensure_dict("offer", data)

    lines_raw = data.get("offer_lines") or []
    if not isinstance(lines_raw, (list, tuple)):
        raise InvalidRecordError("offer", "offer_lines", lines_raw, "expected a list")

    showdates_raw = data.get("showdates") or []
    if not isinstance(showdates_raw, (list, tuple)):
        raise InvalidRecordError("offer", "showdates", showdates_raw, "expected a list")

    signed_raw = data.get("signed_date")
    offer_id = data.get("id")

    return Offer(
        offer_lines=tuple(offer_line_from_dict(line) for line in lines_raw),
        showdates=tuple(parse_date("offer", "showdates", d) for d in showdates_raw),
        expected_visitors_per_showdate=_decimal_map(
            "offer", "expected_visitors_per_showdate", data.get("expected_visitors_per_showdate")
        ),
        euro_spend_per_person=parse_decimal(
            "offer", "euro_spend_per_person", data.get("euro_spend_per_person")
        ),
        bar_meters=parse_decimal("offer", "bar_meters", data.get("bar_meters")),
        food_sales_positions=parse_decimal(
            "offer", "food_sales_positions", data.get("food_sales_positions")
        ),
        staffel=parse_decimal("offer", "staffel", data.get("staffel")),
        total_visitors_override=parse_decimal(
            "offer", "total_visitors_override", data.get("total_visitors_override")
        ),
        post_calc_forecasts=_decimal_map("offer", "post_calc_forecasts", data.get("post_calc_forecasts")),
        realization_costs=_decimal_map("offer", "realization_costs", data.get("realization_costs")),
        additional_costs=_decimal_map("offer", "additional_costs", data.get("additional_costs")),
        total_discount_percentage=parse_decimal(
            "offer", "total_discount_percentage", data.get("total_discount_percentage")
        ),
        total_discount_amount=parse_decimal(
            "offer", "total_discount_amount", data.get("total_discount_amount")
        ),
        id=str(offer_id) if offer_id not in (None, "") else None,
        status=_parse_enum("offer", "status", OfferStatus, data.get("status"), OfferStatus.DRAFT),
        signed_date=parse_date("offer", "signed_date", signed_raw) if signed_raw else None,
    )
