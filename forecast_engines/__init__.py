"""
Module: forecast_engines
Responsibility:
    Package entrypoint that re-exports all public symbols from the pure
    calculation engine sub-modules.  This is the canonical import surface
    for every consumer: offer editor, event cockpit, dashboards, project
    financials and reports.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import forecast_kernel (and sibling engine modules).
    MUST NOT import forecast_config; settings are passed in.

Invariants enforced:
    - Purity: engines NEVER call ``datetime.now()`` or ``date.today()``.
      Dates and windows must be passed in as explicit parameters.
    - Decimal-only arithmetic: all monetary amounts use ``Decimal``.
    - Determinism: identical inputs always produce identical outputs.
    - One calculation: every consumer derives profit through
      ``OfferProfitEngine``; nothing re-implements it.

Failure modes:
    - None for structurally valid records.  Malformed numbers are clamped
      or zeroed, unknown products are skipped.
    - ValueError on Money currency mismatch (programming error).

Audit relevance:
    Engine invocations are traced via the ``@traced_engine`` decorator
    (see ``forecast_engines.tracer``), emitting FORECAST_ENGINE_TRACE log
    records that include engine name, version, input fingerprint, and
    duration.

Usage:
    from forecast_engines import OfferProfitEngine, calculate_offer_totals
    from forecast_engines import create_signing_snapshot, build_sales_pulse
"""

from forecast_kernel.logging_config import get_logger

logger = get_logger("engines")

from forecast_engines.aggregator import (
    CategoryBreakdown,
    OfferProfitEngine,
    ProfitBreakdown,
    breakdown_cache_key,
)
from forecast_engines.classifier import CategoryIndex, classify
from forecast_engines.key_figures import (
    EventMetrics,
    derive_event_metrics,
    expected_transactions,
    resolve_base_value,
)
from forecast_engines.line_evaluator import LineEvaluator, LineResult, PricingModel
from forecast_engines.offer_totals import (
    DEFAULT_VAT_RATE,
    OfferTotals,
    calculate_offer_totals,
)
from forecast_engines.project_financials import (
    CostLineStatus,
    CustomCostLine,
    ProjectFinancials,
    calculate_project_financials,
)
from forecast_engines.sales_pulse import (
    MonthRollup,
    SalesPulse,
    WeekBucket,
    build_sales_pulse,
    is_confirmed,
    is_pipeline,
    week_start,
)
from forecast_engines.signing import SigningSnapshot, create_signing_snapshot
from forecast_engines.tracer import compute_input_fingerprint, traced_engine

__all__ = [
    # Aggregator
    "CategoryBreakdown",
    "OfferProfitEngine",
    "ProfitBreakdown",
    "breakdown_cache_key",
    # Classifier
    "CategoryIndex",
    "classify",
    # Key figures
    "EventMetrics",
    "derive_event_metrics",
    "expected_transactions",
    "resolve_base_value",
    # Line evaluation
    "LineEvaluator",
    "LineResult",
    "PricingModel",
    # Offer totals
    "DEFAULT_VAT_RATE",
    "OfferTotals",
    "calculate_offer_totals",
    # Project financials
    "CostLineStatus",
    "CustomCostLine",
    "ProjectFinancials",
    "calculate_project_financials",
    # Sales pulse
    "MonthRollup",
    "SalesPulse",
    "WeekBucket",
    "build_sales_pulse",
    "is_confirmed",
    "is_pipeline",
    "week_start",
    # Signing
    "SigningSnapshot",
    "create_signing_snapshot",
    # Tracer
    "compute_input_fingerprint",
    "traced_engine",
]
