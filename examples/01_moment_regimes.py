#!/usr/bin/env python3
"""
Log-moment regimes of the beta-eta model.

Sweeps eta over [0, 1] for a fixed (t0, x0, t) and shows which formula
MomentEngine uses in each regime:

- eta = 0.5: closed form (squared Bessel Laplace transform)
- eta = 1: Gauss-Hermite over the log-transformed Gaussian
- otherwise: quadrature of the transition density, plus the absorbed
  mass at the barrier for 0.5 < eta < 1

Usage:
    python examples/01_moment_regimes.py          # With plot
    python examples/01_moment_regimes.py --ci     # CI mode (no plots)
"""

import argparse
import sys
from dataclasses import dataclass

# Add src to path if running as script
sys.path.insert(0, "src")

from betaeta import MomentEngine, ProcessParameters


@dataclass
class RegimePoint:
    """log M at one eta."""

    eta: float
    log_m: float
    singular: float
    regime: str


def regime_name(eta: float) -> str:
    if eta == 0.5:
        return "closed form"
    if eta == 1.0:
        return "gauss-hermite"
    return "quadrature + singular" if eta > 0.5 else "quadrature"


def eta_sweep(
    etas: list[float],
    alpha: float = 0.2,
    kappa: float = 0.01,
    beta: float = 1.0,
    x0: float = 0.0,
    t: float = 1.0,
) -> list[RegimePoint]:
    """
    Evaluate log M(0, x0, t) across eta.

    Parameters
    ----------
    etas : list[float]
        eta values in [0, 1]
    alpha, kappa, beta : float
        Constant model parameters
    x0 : float
        Initial state
    t : float
        Horizon (years)

    Returns
    -------
    list[RegimePoint]
        One point per eta
    """
    base = ProcessParameters(times=(), alpha=(alpha,), kappa=(kappa,), beta=beta, eta=0.5)
    points = []
    for eta in etas:
        engine = MomentEngine(base.with_eta(eta))
        points.append(
            RegimePoint(
                eta=eta,
                log_m=engine.log_moment(0.0, x0, t),
                singular=engine.density.singular_term_y_0(0.0, x0, t),
                regime=regime_name(eta),
            )
        )
    return points


def print_table(points: list[RegimePoint]) -> None:
    print("\n" + "=" * 60)
    print("LOG MOMENT BY ETA")
    print("=" * 60)
    print("\n    eta        log M      absorbed   regime")
    print("  " + "-" * 52)
    for p in points:
        print(f"  {p.eta:5.2f}  {p.log_m:12.6e}  {p.singular:9.2e}   {p.regime}")


def plot_sweep(points: list[RegimePoint]) -> None:
    """Plot log M against eta (requires matplotlib)."""
    try:
        import matplotlib.pyplot as plt
    except ImportError:
        print("\nNote: matplotlib not installed, skipping plot")
        return

    fig, ax = plt.subplots(figsize=(8, 5))
    ax.plot([p.eta for p in points], [p.log_m for p in points], "b-o", linewidth=2)
    ax.axvline(0.5, color="grey", linestyle="--", alpha=0.5)
    ax.set_xlabel("eta")
    ax.set_ylabel("log M(0, x0, t)")
    ax.set_title("Beta-eta log moment across regimes")
    ax.grid(True, alpha=0.3)
    plt.tight_layout()
    plt.savefig("examples/moment_regimes.png", dpi=150)
    print("\nPlot saved to: examples/moment_regimes.png")
    plt.show()


def main() -> None:
    parser = argparse.ArgumentParser(description="Beta-eta log moment regimes")
    parser.add_argument("--ci", action="store_true", help="CI mode (no interactive plots)")
    parser.add_argument("--alpha", type=float, default=0.2, help="Volatility (default: 0.2)")
    parser.add_argument("--x0", type=float, default=0.0, help="Initial state (default: 0)")
    args = parser.parse_args()

    etas = [0.0, 0.1, 0.2, 0.3, 0.4, 0.5, 0.6, 0.7, 0.8, 0.9, 1.0]
    points = eta_sweep(etas, alpha=args.alpha, x0=args.x0)
    print_table(points)

    if not args.ci:
        plot_sweep(points)


if __name__ == "__main__":
    main()
