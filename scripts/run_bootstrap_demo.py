#!/usr/bin/env python
"""
Curve Bootstrapping Demo Script

This script demonstrates the curve building workflow:
1. Load market quotes (deposits, FRAs, futures, swaps)
2. Bootstrap a piecewise zero curve
3. Print the pillar table and repricing errors
4. Print discount factors and forwards on a tenor grid

Usage:
    python run_bootstrap_demo.py [--quotes QUOTES_CSV] [--interpolation METHOD]
"""

import argparse
import logging
import sys
from datetime import date
from pathlib import Path

import pandas as pd

# Add src to path for development
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from ratecurves.conventions import Compounding, DayCount
from ratecurves.dates import DateUtils
from ratecurves.curves import (
    BootstrapSettings,
    bootstrap_from_quotes,
    repricing_errors,
)
from ratecurves.errors import BootstrapError


def load_quotes(path: Path) -> pd.DataFrame:
    """Load curve quotes from CSV."""
    return pd.read_csv(path, comment="#")


def print_section(title: str) -> None:
    print("\n" + "="*60)
    print(title)
    print("="*60)


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Curve Bootstrapping Demo")
    parser.add_argument(
        "--quotes",
        type=str,
        default=str(Path(__file__).parent.parent / "data" / "sample_quotes" / "usd_curve_quotes.csv"),
        help="CSV with instrument_type, tenor, quote and optional convention columns",
    )
    parser.add_argument(
        "--reference-date",
        type=date.fromisoformat,
        default=date(2024, 1, 15),
        help="Curve reference date (YYYY-MM-DD)",
    )
    parser.add_argument(
        "--interpolation",
        type=str,
        default="linear",
        help="linear, log_linear, cubic_spline or monotone_cubic",
    )
    parser.add_argument(
        "--wide-bounds",
        action="store_true",
        help="Search zero rates in [-50%%, 100%%] instead of [-10%%, 30%%]",
    )
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Optional CSV path for the pillar table",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    print("="*60)
    print("CURVE BOOTSTRAPPING DEMO")
    print(f"Reference Date: {args.reference_date}")
    print(f"Interpolation:  {args.interpolation}")
    print("="*60)

    quotes = load_quotes(Path(args.quotes))
    print(f"\nLoaded {len(quotes)} quotes from {args.quotes}")

    settings = BootstrapSettings.wide() if args.wide_bounds else BootstrapSettings.default()
    try:
        curve = bootstrap_from_quotes(
            args.reference_date, quotes, interpolation=args.interpolation, settings=settings
        )
    except BootstrapError as exc:
        print(f"\nBootstrap failed: {exc}")
        if not args.wide_bounds:
            print("Retry with --wide-bounds to widen the zero-rate search.")
        return 1

    print_section("Pillars")
    nodes = curve.nodes()
    print(nodes.to_string(index=False, float_format=lambda x: f"{x:.8f}"))

    print_section("Repricing Errors (bp)")
    errors = repricing_errors(curve)
    errors["error_bp"] = errors["error"] * 1e4
    print(errors[["pillar_date", "instrument", "quote", "implied", "error_bp"]].to_string(index=False))

    print_section("Tenor Grid")
    print(f"  {'Tenor':>5s} {'Date':>12s} {'DF':>12s} {'Zero (A/365)':>13s} {'3M Fwd':>9s}")
    for tenor in ["1M", "3M", "6M", "1Y", "2Y", "5Y", "10Y", "20Y", "30Y"]:
        d = DateUtils.add_tenor(args.reference_date, tenor)
        d_3m = DateUtils.add_tenor(d, "3M")
        zero = curve.zero_rate_date(d, DayCount.ACT_365, Compounding.CONTINUOUS)
        fwd = curve.forward_rate(d, d_3m, DayCount.ACT_360, Compounding.SIMPLE)
        print(f"  {tenor:>5s} {d.isoformat():>12s} {curve.discount_date(d):>12.8f} "
              f"{zero.rate*100:>12.4f}% {fwd.rate*100:>8.4f}%")

    if args.output:
        nodes.to_csv(args.output, index=False)
        print(f"\nPillar table written to {args.output}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
