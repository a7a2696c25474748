"""
Configuration Loader (``forecast_config.loader``).

Responsibility
--------------
Loads YAML documents and parses them into the typed
``forecast_config.schema`` dataclasses.  Runtime callers go through
``forecast_config.get_active_settings()``; the loader is also used by
the developer CLI to read catalog and offer documents.

Invariants enforced
-------------------
* Every parsed object is a frozen dataclass from ``schema.py`` or a
  record from ``forecast_kernel.domain.records``.
* Numbers are read through ``str`` into ``Decimal``; YAML floats never
  reach the engines as floats.
* ``compute_checksum`` produces a deterministic SHA-256 hash for
  configuration identity and cache keys.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Unparseable setting value  -> ``InvalidSettingError``.
* Malformed product or category row  -> ``InvalidRecordError``.
"""

from __future__ import annotations

import hashlib
import json
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from forecast_config.schema import Catalog, ForecastSettings
from forecast_kernel.domain.mapping import (
    category_setting_from_dict,
    product_from_dict,
)
from forecast_kernel.domain.records import CategorySetting
from forecast_kernel.exceptions import InvalidSettingError


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def _decimal_setting(data: dict[str, Any], key: str, default: Decimal) -> Decimal:
    value = data.get(key)
    if value is None:
        return default
    if isinstance(value, bool):
        raise InvalidSettingError(key, value, "expected a number")
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise InvalidSettingError(key, value, "expected a number") from e


def parse_category_settings(rows: Any) -> tuple[CategorySetting, ...]:
    """Parse a list of ``{category, calculation_type}`` rows."""
    if not rows:
        return ()
    if not isinstance(rows, list):
        raise InvalidSettingError("category_settings", rows, "expected a list")
    return tuple(category_setting_from_dict(row) for row in rows)


def parse_settings(data: dict[str, Any]) -> ForecastSettings:
    """Parse ForecastSettings from a dict, filling omitted keys with defaults."""
    defaults = ForecastSettings()
    currency = data.get("currency", defaults.currency)
    if not isinstance(currency, str):
        raise InvalidSettingError("currency", currency, "expected a currency code")
    return ForecastSettings(
        currency=currency.upper().strip(),
        vat_rate=_decimal_setting(data, "vat_rate", defaults.vat_rate),
        average_transaction_value=_decimal_setting(
            data, "average_transaction_value", defaults.average_transaction_value
        ),
        category_settings=parse_category_settings(data.get("category_settings")),
        checksum=compute_checksum(data),
    )


def load_settings(path: Path) -> ForecastSettings:
    """Load and parse a settings document."""
    return parse_settings(load_yaml_file(Path(path)))


def parse_catalog(data: dict[str, Any]) -> Catalog:
    """Parse products and category settings from a document."""
    rows = data.get("products") or []
    if not isinstance(rows, list):
        raise InvalidSettingError("products", rows, "expected a list")
    return Catalog(
        products=tuple(product_from_dict(row) for row in rows),
        category_settings=parse_category_settings(data.get("category_settings")),
    )


def load_catalog(path: Path) -> Catalog:
    """Load products and category settings from a YAML (or JSON) document."""
    return parse_catalog(load_yaml_file(Path(path)))


def compute_checksum(data: dict[str, Any]) -> str:
    """
    Compute SHA-256 checksum of canonical JSON serialization.

    Postconditions:
        - Identical ``data`` always produces identical checksums,
          independent of key order.
    """
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
