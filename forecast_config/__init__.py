"""
forecast_config -- single public entrypoint for forecast configuration.

Responsibility:
    Provides the runtime settings of the forecast engines through
    ``get_active_settings()``: currency, VAT rate, average transaction
    value and the default category settings.  No engine reads files or
    environment variables; callers pass the returned settings in.

Architecture position:
    Configuration -- YAML-driven, validated on load.
    Sits above ``forecast_kernel``; the engines never import it.

Invariants enforced:
    - Single entrypoint: all runtime settings flow through
      ``get_active_settings()``.
    - Deterministic: the same YAML document always produces the same
      settings and the same checksum.

Failure modes:
    - ``FileNotFoundError`` -- the configuration file does not exist.
    - ``yaml.YAMLError`` -- the file is not valid YAML.
    - ``InvalidSettingError`` -- a value fails validation.

Audit relevance:
    Every successful ``get_active_settings()`` call emits a
    ``FORECAST_CONFIG_TRACE`` log entry with the config path and
    checksum, tying each forecast to the settings that produced it.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from pathlib import Path

from forecast_config.loader import (
    compute_checksum,
    load_catalog,
    load_settings,
    load_yaml_file,
    parse_catalog,
    parse_settings,
)
from forecast_config.schema import Catalog, ForecastSettings
from forecast_kernel.domain.currency import CurrencyRegistry
from forecast_kernel.exceptions import InvalidSettingError

_logger = logging.getLogger("forecast_kernel.config")

# Default configuration sets directory
_DEFAULT_CONFIG_DIR = Path(__file__).parent / "sets"
DEFAULT_CONFIG_PATH = _DEFAULT_CONFIG_DIR / "default.yaml"


def validate_settings(settings: ForecastSettings) -> None:
    """
    Reject settings the engines cannot work with.

    Raises:
        InvalidSettingError: on the first invalid value.
    """
    if not CurrencyRegistry.is_valid(settings.currency):
        raise InvalidSettingError("currency", settings.currency, "unknown ISO 4217 code")
    if not settings.vat_rate.is_finite() or not Decimal("0") <= settings.vat_rate < Decimal("1"):
        raise InvalidSettingError("vat_rate", settings.vat_rate, "must be in [0, 1)")
    if not settings.average_transaction_value.is_finite() or settings.average_transaction_value <= 0:
        raise InvalidSettingError(
            "average_transaction_value",
            settings.average_transaction_value,
            "must be positive",
        )


def get_active_settings(config_path: Path | None = None) -> ForecastSettings:
    """The ONLY public configuration entrypoint.

    Args:
        config_path: Override path to a settings document.
            Defaults to forecast_config/sets/default.yaml.

    Returns:
        Validated, frozen ForecastSettings.

    Raises:
        FileNotFoundError: If the configuration file does not exist.
        InvalidSettingError: If validation fails.
    """
    path = Path(config_path) if config_path is not None else DEFAULT_CONFIG_PATH
    settings = load_settings(path)
    validate_settings(settings)

    _logger.info(
        "FORECAST_CONFIG_TRACE",
        extra={
            "trace_type": "FORECAST_CONFIG_TRACE",
            "config_path": str(path),
            "checksum": settings.checksum,
            "currency": settings.currency,
            "category_setting_count": len(settings.category_settings),
        },
    )
    return settings


__all__ = [
    "Catalog",
    "DEFAULT_CONFIG_PATH",
    "ForecastSettings",
    "compute_checksum",
    "get_active_settings",
    "load_catalog",
    "load_settings",
    "load_yaml_file",
    "parse_catalog",
    "parse_settings",
    "validate_settings",
]
