"""
Forecast Kernel

Shared foundation for the offer profit & revenue forecasting engine:
- Immutable domain records (products, category settings, offers)
- Money / Currency value objects with explicit rounding
- Mapping from storage rows to typed records
- Typed exceptions and structured logging
"""

__version__ = "0.1.0"
