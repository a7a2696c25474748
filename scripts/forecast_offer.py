#!/usr/bin/env python3
"""
Forecast the profit of one offer from a YAML or JSON document.

The document holds ``products``, optional ``category_settings`` (the
configured defaults are used when omitted) and an ``offer`` with its
``offer_lines``.

Usage:
    python3 scripts/forecast_offer.py scripts/sample_offer.yaml
    python3 scripts/forecast_offer.py offer.yaml --json
    python3 scripts/forecast_offer.py offer.yaml --config my_settings.yaml -v
"""

import argparse
import json
import logging
import sys
from decimal import Decimal
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from forecast_config import get_active_settings, load_yaml_file, parse_catalog
from forecast_engines import (
    OfferProfitEngine,
    calculate_offer_totals,
    expected_transactions,
)
from forecast_kernel.domain.mapping import offer_from_dict
from forecast_kernel.exceptions import ForecastKernelError
from forecast_kernel.logging_config import LogContext, configure_logging

W = 64


# =============================================================================
# Formatting
# =============================================================================

def hline(char: str = "=") -> str:
    return char * W


def banner(title: str) -> None:
    print()
    print(hline())
    print(f"  {title}")
    print(hline())


def amount_row(name: str, money) -> None:
    print(f"    {name:<28}{money.currency.code} {money.amount:>14,.2f}")


# =============================================================================
# Report
# =============================================================================

def build_report(document: dict, config_path: Path | None) -> dict:
    settings = get_active_settings(config_path)
    catalog = parse_catalog(document)
    category_settings = catalog.category_settings or settings.category_settings
    offer = offer_from_dict(document.get("offer") or {})

    engine = OfferProfitEngine(settings.currency)
    with LogContext.bind(offer_id=offer.id):
        breakdown = engine.calculate(
            offer=offer,
            products=catalog.products,
            category_settings=category_settings,
        )
        totals = calculate_offer_totals(
            offer=offer,
            products=catalog.products,
            category_settings=category_settings,
            vat_rate=settings.vat_rate,
            currency=settings.currency,
        )

    return {
        "offer": offer,
        "breakdown": breakdown.rounded(),
        "totals": totals,
        "transactions": expected_transactions(
            breakdown.metrics, settings.average_transaction_value
        ),
    }


def print_report(report: dict) -> None:
    offer = report["offer"]
    breakdown = report["breakdown"]
    totals = report["totals"]

    banner(f"Offer {offer.id or '(unsaved)'}")
    amount_row("Standard revenue", breakdown.standard_revenue)
    amount_row("Standard profit", breakdown.standard_profit)
    amount_row("Post-event revenue", breakdown.post_calc_revenue)
    amount_row("Post-event profit", breakdown.post_calc_profit)
    amount_row("Realization correction", breakdown.realization_correction)
    amount_row("Additional costs", breakdown.additional_costs)
    print(f"    {'-' * (W - 8)}")
    amount_row("Net profit", breakdown.net_profit)

    banner("Quote")
    amount_row("Subtotal", totals.subtotal)
    amount_row("Discount", totals.discount)
    amount_row(f"VAT ({totals.vat_rate * 100:.0f}%)", totals.vat)
    amount_row("Total incl. VAT", totals.total)

    banner("Per category")
    for category in breakdown.categories:
        print(
            f"    {category.category:<24}{category.calculation_type.value:<12}"
            f"{category.profit.amount:>14,.2f}  ({category.line_count} lines)"
        )
    print()
    print(f"    Expected transactions: {report['transactions']}")
    if breakdown.skipped_product_ids:
        print(f"    Skipped lines (unknown product): {list(breakdown.skipped_product_ids)}")
    print()


def report_as_json(report: dict) -> str:
    breakdown = report["breakdown"]
    totals = report["totals"]
    payload = {
        "offer_id": report["offer"].id,
        "currency": breakdown.currency.code,
        **breakdown.summary(),
        "totals": {
            "subtotal": totals.subtotal.amount,
            "discount": totals.discount.amount,
            "vat": totals.vat.amount,
            "total": totals.total.amount,
        },
        "categories": [
            {
                "category": c.category,
                "calculation_type": c.calculation_type.value,
                "revenue": c.revenue.amount,
                "cost": c.cost.amount,
                "profit": c.profit.amount,
                "line_count": c.line_count,
            }
            for c in breakdown.categories
        ],
        "expected_transactions": report["transactions"],
        "skipped_product_ids": list(breakdown.skipped_product_ids),
    }
    return json.dumps(payload, indent=2, default=lambda o: str(o) if isinstance(o, Decimal) else o)


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Forecast revenue and profit of an offer.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("offer_file", type=Path, help="YAML or JSON offer document")
    parser.add_argument(
        "--config", type=Path, default=None,
        help="Settings document (default: forecast_config/sets/default.yaml)",
    )
    parser.add_argument(
        "--json", action="store_true",
        help="Output the breakdown as JSON",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Emit structured engine logs to stderr",
    )
    args = parser.parse_args()

    configure_logging(level=logging.DEBUG if args.verbose else logging.WARNING)

    try:
        document = load_yaml_file(args.offer_file)
        report = build_report(document, args.config)
    except FileNotFoundError as e:
        print(f"Error: file not found: {e.filename}", file=sys.stderr)
        return 1
    except ForecastKernelError as e:
        print(f"Error [{e.code}]: {e}", file=sys.stderr)
        return 1

    if args.json:
        print(report_as_json(report))
    else:
        print_report(report)
    return 0


if __name__ == "__main__":
    sys.exit(main())
