#!/usr/bin/env python3
"""
Example: Load, validate, and quote a DCI.

Usage:
    python examples/run_quote.py [dci.json] [--target-coupon C] [--scenarios N] [--verbose]
"""

import sys
from pathlib import Path
import argparse
import traceback

# Add src to path for development
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from dci_pricer.core.errors import PricerError
from dci_pricer.pricers.dci import DciPricer
from dci_pricer.pricers.strike_solver import dci_strike_ladder, solve_dci_strike
from dci_pricer.products.schema import load_dci_input
from dci_pricer.risk.greeks import dci_greeks
from dci_pricer.risk.scenarios import format_report, pnl_distribution, quick_analyze


def main() -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Quote a Dual Currency Investment from a JSON input"
    )
    parser.add_argument(
        "dci_input",
        type=str,
        nargs="?",
        default=str(Path(__file__).parent / "dci_usd_twd_90d.json"),
        help="Path to JSON DCI input file"
    )
    parser.add_argument(
        "--target-coupon", "-c",
        type=float,
        default=None,
        help="Solve the strike for this annualized coupon (e.g. 0.08)"
    )
    parser.add_argument(
        "--scenarios", "-n",
        type=int,
        default=1_000,
        help="Number of simulated outcomes for the P&L distribution"
    )
    parser.add_argument(
        "--seed", "-s",
        type=int,
        default=42,
        help="Random seed for reproducibility"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Print scenario grid and strike ladder"
    )

    args = parser.parse_args()
    input_path = Path(args.dci_input)

    print("=" * 70)
    print("DCI PRICER")
    print("=" * 70)

    try:
        # 1. Load and validate input
        print(f"\n[1/4] Loading DCI input: {input_path.name}")
        dci = load_dci_input(input_path)
        print(f"      Pair: {dci.currency_pair or 'n/a'}")
        print(f"      Notional: {dci.notional_foreign:,.2f}")

        # 2. Quote
        pricer = DciPricer()
        if args.target_coupon is not None:
            print(f"\n[2/4] Solving strike for coupon {args.target_coupon:.2%}...")
            strike = solve_dci_strike(dci, args.target_coupon, pricer)
            dci = dci.with_strike(strike)
            print(f"      Strike: {strike}")
        else:
            print(f"\n[2/4] Quoting at strike {dci.strike}...")
        quote = pricer.quote(dci)
        print(pricer.format_summary(dci, quote))

        # 3. Greeks
        print(f"\n[3/4] Computing Greeks...")
        print(dci_greeks(dci).format_summary())

        # 4. Scenarios
        print(f"\n[4/4] Simulating {args.scenarios:,} outcomes (seed {args.seed})...")
        dist = pnl_distribution(dci, scenarios=args.scenarios, seed=args.seed, pricer=pricer)
        print(f"      Knock-in probability: {dist.knock_in_probability:.2%}")
        print(f"      P&L vs deposit mean:  {dist.mean:,.4f}")
        print(f"      P&L 5% / 95%:         {dist.percentile_5:,.4f} / {dist.percentile_95:,.4f}")

        if args.verbose:
            print("\nSpot / vol scenarios:")
            print(format_report(quick_analyze(dci, pricer)))
            print("\nStrike ladder:")
            for k, coupon in dci_strike_ladder(dci, pricer=pricer):
                print(f"      {k:>10}  {coupon:>8.4%}")

        return 0

    except FileNotFoundError as e:
        print(f"\nERROR: {e}")
        return 1

    except (PricerError, ValueError) as e:
        print(f"\nERROR: {type(e).__name__}: {e}")
        if args.verbose:
            traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
