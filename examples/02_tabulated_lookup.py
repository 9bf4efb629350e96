#!/usr/bin/env python3
"""
Tabulated vs direct log moments.

Builds a small lookup grid around one query region, then compares the
interpolated log M with direct quadrature for a few start states. A grid
this coarse is only meant for illustration; scripts/tabulate.py builds
production tables.

Usage:
    python examples/02_tabulated_lookup.py
    python examples/02_tabulated_lookup.py --workers 2
"""

import argparse
import logging
import sys

# Add src to path if running as script
sys.path.insert(0, "src")

from betaeta import MomentEngine, ProcessParameters, TabulationBuilder, TabulationSpec


def main() -> None:
    parser = argparse.ArgumentParser(description="Tabulated vs direct log moments")
    parser.add_argument("--eta", type=float, default=0.3, help="Model eta (default: 0.3)")
    parser.add_argument("--workers", type=int, default=None, help="Worker processes")
    args = parser.parse_args()
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")

    params = ProcessParameters(times=(), alpha=(0.2,), kappa=(0.01,), beta=1.0, eta=args.eta)
    spec = TabulationSpec(
        eta_min=args.eta,
        eta_max=1.0,
        u0_min=0.8,
        u0_max=1.4,
        v_min=0.0,
        v_max=0.08,
        usize=13,
        vsize=17,
        eta_steps=2,
    )
    grid = TabulationBuilder(spec, n_workers=args.workers).build()
    engine = MomentEngine(params, grid=grid)

    print("\n" + "=" * 60)
    print(f"TABULATED VS DIRECT LOG MOMENT (eta={args.eta})")
    print("=" * 60)
    print("\n     x0        direct     tabulated    rel diff")
    print("  " + "-" * 48)
    for x0 in [-0.1, 0.0, 0.1, 0.2]:
        direct = engine.log_moment(0.0, x0, 1.0)
        tabulated = engine.log_moment(0.0, x0, 1.0, use_tabulation=True)
        print(f"  {x0:5.2f}  {direct:12.6e}  {tabulated:12.6e}  {abs(tabulated / direct - 1):9.2e}")


if __name__ == "__main__":
    main()
