"""
Numerical integration strategies with explicit fallback chaining.

Each strategy returns an IntegrationResult (value or failure) instead of
raising, so callers can try an ordered list of strategies and report a single
structured error when all of them fail.

Strategies:
- AdaptiveQuadrature: scipy.integrate.quad (QUADPACK QAGS), high accuracy
- SegmentIntegral: composite trapezoid rule on equal segments, robust fallback
- GaussHermiteQuadrature: fixed-order rule for integrals against exp(-z^2)

References
----------
[T1] Piessens et al. (1983). QUADPACK. Springer Series in Computational Mathematics.
[T1] Golub, G. H., & Welsch, J. H. (1969). Calculation of Gauss quadrature rules.
     Mathematics of Computation, 23(106), 221-230.
"""

import logging
import math
import warnings
from dataclasses import dataclass
from typing import Callable, Optional, Protocol, Sequence

import numpy as np
from numpy.polynomial.hermite import hermgauss
from scipy import integrate

from betaeta.config.tolerances import (
    INTEGRATION_ABSOLUTE_TOLERANCE,
    INTEGRATION_RELATIVE_TOLERANCE,
)

logger = logging.getLogger(__name__)

Integrand = Callable[[float], float]


@dataclass(frozen=True)
class IntegrationResult:
    """
    Outcome of a single integration attempt.

    Attributes
    ----------
    value : float
        Integral estimate (nan on failure)
    converged : bool
        True if the strategy produced a usable estimate
    method : str
        Name of the strategy that produced the result
    error_estimate : float | None
        Absolute error estimate, if the strategy provides one
    message : str
        Failure reason (empty on success)
    """

    value: float
    converged: bool
    method: str
    error_estimate: Optional[float] = None
    message: str = ""

    @classmethod
    def failure(cls, method: str, message: str) -> "IntegrationResult":
        """Build a failed result."""
        return cls(value=float("nan"), converged=False, method=method, message=message)


class IntegrationError(RuntimeError):
    """
    Raised when every integration strategy failed.

    Signals a parameter regime outside the engine's operating range;
    it is not retried.
    """

    def __init__(
        self,
        label: str,
        lower: float,
        upper: float,
        attempts: Sequence[IntegrationResult] = (),
    ) -> None:
        self.label = label
        self.lower = lower
        self.upper = upper
        self.attempts = tuple(attempts)
        reasons = "; ".join(f"{a.method}: {a.message}" for a in self.attempts)
        super().__init__(
            f"could not compute {label}, tried integration over {lower}...{upper}"
            + (f" ({reasons})" if reasons else "")
        )


class IntegrationStrategy(Protocol):
    """Protocol for definite integration over [a, b]."""

    name: str

    def integrate(self, f: Integrand, a: float, b: float) -> IntegrationResult:
        """Integrate f over [a, b]."""
        ...


class AdaptiveQuadrature:
    """
    Adaptive Gauss-Kronrod quadrature via scipy.integrate.quad.

    Quadrature warnings (roundoff, subdivision limit, divergence) are
    turned into failed results rather than being printed.
    """

    name = "adaptive"

    def __init__(
        self,
        absolute_tolerance: float = INTEGRATION_ABSOLUTE_TOLERANCE,
        relative_tolerance: float = INTEGRATION_RELATIVE_TOLERANCE,
        max_subintervals: int = 500,
    ) -> None:
        self.absolute_tolerance = absolute_tolerance
        self.relative_tolerance = relative_tolerance
        self.max_subintervals = max_subintervals

    def integrate(self, f: Integrand, a: float, b: float) -> IntegrationResult:
        if a == b:
            return IntegrationResult(value=0.0, converged=True, method=self.name, error_estimate=0.0)
        try:
            with warnings.catch_warnings():
                warnings.simplefilter("error", integrate.IntegrationWarning)
                value, error = integrate.quad(
                    f,
                    a,
                    b,
                    epsabs=self.absolute_tolerance,
                    epsrel=self.relative_tolerance,
                    limit=self.max_subintervals,
                )
        except (integrate.IntegrationWarning, ArithmeticError, ValueError) as e:
            return IntegrationResult.failure(self.name, str(e).strip().splitlines()[0])
        if not math.isfinite(value):
            return IntegrationResult.failure(self.name, f"non-finite result {value}")
        return IntegrationResult(value=value, converged=True, method=self.name, error_estimate=error)


class SegmentIntegral:
    """
    Composite trapezoid rule on n equal segments.

    Coarser than the adaptive rule but insensitive to the roundoff and
    subdivision problems that make QUADPACK give up.
    """

    name = "segment"

    def __init__(self, intervals: int = 250) -> None:
        if intervals < 1:
            raise ValueError(f"CRITICAL: intervals must be >= 1. Got: intervals={intervals}")
        self.intervals = intervals

    def integrate(self, f: Integrand, a: float, b: float) -> IntegrationResult:
        if a == b:
            return IntegrationResult(value=0.0, converged=True, method=self.name, error_estimate=0.0)
        nodes = np.linspace(a, b, self.intervals + 1)
        try:
            values = np.array([f(float(x)) for x in nodes], dtype=float)
        except (ArithmeticError, ValueError) as e:
            return IntegrationResult.failure(self.name, str(e))
        value = float(integrate.trapezoid(values, nodes))
        if not math.isfinite(value):
            return IntegrationResult.failure(self.name, f"non-finite result {value}")
        return IntegrationResult(value=value, converged=True, method=self.name)


class GaussHermiteQuadrature:
    """
    n-point Gauss-Hermite rule.

    [T1] Approximates the integral of exp(-z^2) g(z) over the real line by
    sum_i w_i g(z_i); exact for g polynomial of degree <= 2n - 1.
    """

    name = "gauss_hermite"

    def __init__(self, points: int = 8) -> None:
        if points < 1:
            raise ValueError(f"CRITICAL: points must be >= 1. Got: points={points}")
        self.points = points
        self.nodes, self.weights = hermgauss(points)

    def __call__(self, g: Integrand) -> float:
        return float(sum(w * g(float(z)) for z, w in zip(self.nodes, self.weights)))


class FallbackIntegrator:
    """
    Ordered chain of integration strategies.

    Strategies are tried in sequence until one converges to a value the
    caller accepts. If none converges, IntegrationError is raised with the
    label and bounds. If some converged but none was accepted, the last
    converged value is returned.

    Parameters
    ----------
    strategies : Sequence[IntegrationStrategy]
        Strategies in order of preference

    Examples
    --------
    >>> chain = FallbackIntegrator([AdaptiveQuadrature(), SegmentIntegral(250)])
    >>> round(chain.integrate(lambda x: x * x, 0.0, 1.0, label="x^2").value, 8)
    0.33333333
    """

    def __init__(self, strategies: Sequence[IntegrationStrategy]) -> None:
        if not strategies:
            raise ValueError("CRITICAL: at least one integration strategy is required")
        self.strategies = tuple(strategies)

    def integrate(
        self,
        f: Integrand,
        a: float,
        b: float,
        label: str = "integral",
        accept: Optional[Callable[[float], bool]] = None,
    ) -> IntegrationResult:
        """
        Integrate f over [a, b] with the first strategy that succeeds.

        Parameters
        ----------
        f : Callable[[float], float]
            Integrand
        a, b : float
            Integration bounds
        label : str
            Name of the quantity, used in diagnostics
        accept : Callable[[float], bool], optional
            Predicate on the converged value; a rejected value moves on
            to the next strategy

        Returns
        -------
        IntegrationResult
            Result of the strategy that was used

        Raises
        ------
        IntegrationError
            If no strategy converged
        """
        attempts: list[IntegrationResult] = []
        last_converged: Optional[IntegrationResult] = None
        for strategy in self.strategies:
            result = strategy.integrate(f, a, b)
            attempts.append(result)
            if not result.converged:
                logger.debug(
                    f"{label}: {strategy.name} failed on [{a}, {b}]: {result.message}"
                )
                continue
            if accept is None or accept(result.value):
                return result
            logger.debug(
                f"{label}: {strategy.name} value {result.value} rejected on [{a}, {b}]"
            )
            last_converged = result
        if last_converged is not None:
            return last_converged
        raise IntegrationError(label, a, b, attempts)
