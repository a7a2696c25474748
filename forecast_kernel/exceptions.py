"""
Typed Exception Hierarchy for the Forecast Kernel.

Every error has a typed exception class with a machine-readable ``code``
attribute and carries structured data, so callers catch by type instead
of parsing messages.

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    ForecastKernelError (base)
    |
    +-- RecordError
    |   +-- InvalidRecordError
    |
    +-- ConfigurationError
        +-- InvalidSettingError

===============================================================================
WHERE THEY ARE RAISED
===============================================================================

Record mapping (``forecast_kernel.domain.mapping``) and configuration
loading (``forecast_config``) only. The calculation engines are total
over structurally valid records: missing products, missing category
settings and malformed numbers are resolved by the default/override
rules, never raised.
"""

from typing import Any


class ForecastKernelError(Exception):
    """
    Base exception for all forecast kernel errors.

    All subclasses must have a ``code`` class attribute.
    """

    code: str = "FORECAST_KERNEL_ERROR"


# Record-related exceptions


class RecordError(ForecastKernelError):
    """Base exception for storage-record errors."""

    code: str = "RECORD_ERROR"


class InvalidRecordError(RecordError):
    """A storage row cannot be mapped to a typed record."""

    code: str = "INVALID_RECORD"

    def __init__(self, record_type: str, field: str, value: Any, reason: str = ""):
        self.record_type = record_type
        self.field = field
        self.value = value
        self.reason = reason
        detail = f": {reason}" if reason else ""
        super().__init__(
            f"Invalid {record_type}.{field} value {value!r}{detail}"
        )


# Configuration-related exceptions


class ConfigurationError(ForecastKernelError):
    """Base exception for configuration errors."""

    code: str = "CONFIGURATION_ERROR"


class InvalidSettingError(ConfigurationError):
    """A configuration value is missing or out of range."""

    code: str = "INVALID_SETTING"

    def __init__(self, setting: str, value: Any, reason: str):
        self.setting = setting
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid setting {setting}={value!r}: {reason}")
