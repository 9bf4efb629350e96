#!/usr/bin/env python
"""
Build the beta-eta log-moment lookup table.

Usage:
    python scripts/tabulate.py -o betaeta_tabulation.py           # Python table module
    python scripts/tabulate.py --points euv -o grid.dat           # gnuplot points
    python scripts/tabulate.py --workers 4 --usize 60 --vsize 60  # finer grid, parallel rows
    python scripts/tabulate.py --verify betaeta_tabulation.py     # re-read an existing table

The table module is what MomentEngine loads for tabulated lookups
(point BETAETA_TABLE_PATH at it, or keep it in the working directory).
"""

import argparse
import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from betaeta.tabulation import (
    TabulationBuilder,
    TabulationLayout,
    TabulationSpec,
    load_grid,
    write_points,
    write_python_module,
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Tabulate log M(u0, Su) for the beta-eta model")
    parser.add_argument("-o", "--output", type=Path, help="Output file (default: stdout)")
    parser.add_argument(
        "--points",
        choices=[layout.value for layout in TabulationLayout],
        help="Write gnuplot points in this axis order instead of a Python module",
    )
    parser.add_argument("--verify", type=Path, help="Read and validate an existing table module")
    parser.add_argument("--workers", type=int, default=None, help="Worker processes")

    mesh = parser.add_argument_group("mesh")
    mesh.add_argument("--eta-min", type=float, default=0.0)
    mesh.add_argument("--eta-max", type=float, default=1.0)
    mesh.add_argument("--eta-steps", type=int, default=21)
    mesh.add_argument("--u0-min", type=float, default=0.001)
    mesh.add_argument("--u0-max", type=float, default=100.0)
    mesh.add_argument("--v-min", type=float, default=0.0)
    mesh.add_argument("--v-max", type=float, default=10.0)
    mesh.add_argument("--usize", type=int, default=40)
    mesh.add_argument("--vsize", type=int, default=40)
    mesh.add_argument("--cu", type=float, default=None, help="u0 concentration point")
    mesh.add_argument("--densityu", type=float, default=None)
    mesh.add_argument("--cv", type=float, default=None, help="v concentration point")
    mesh.add_argument("--densityv", type=float, default=None)
    mesh.add_argument("--ce", type=float, default=None, help="eta concentration point")
    mesh.add_argument("--densitye", type=float, default=None)
    return parser


def main():
    args = build_parser().parse_args()
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")

    if args.verify:
        grid = load_grid(args.verify)
        print(f"{args.verify}: OK, shape (eta, u, v) = {grid.shape}")
        return

    try:
        spec = TabulationSpec(
            eta_min=args.eta_min,
            eta_max=args.eta_max,
            u0_min=args.u0_min,
            u0_max=args.u0_max,
            v_min=args.v_min,
            v_max=args.v_max,
            usize=args.usize,
            vsize=args.vsize,
            eta_steps=args.eta_steps,
            cu=args.cu,
            densityu=args.densityu,
            cv=args.cv,
            densityv=args.densityv,
            ce=args.ce,
            densitye=args.densitye,
        )
    except ValueError as e:
        print(f"Invalid mesh: {e}", file=sys.stderr)
        sys.exit(2)

    grid = TabulationBuilder(spec, n_workers=args.workers).build()

    out = open(args.output, "w") if args.output else sys.stdout
    try:
        if args.points:
            write_points(grid, out, TabulationLayout(args.points))
        else:
            write_python_module(grid, out, spec=spec)
    finally:
        if out is not sys.stdout:
            out.close()

    if args.output:
        print(f"Written: {args.output}")


if __name__ == "__main__":
    main()
