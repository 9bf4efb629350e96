"""
Centralized tolerance framework for the beta-eta engine.

All tolerances are derived from precision requirements, not ad hoc tuning.

Tolerance Tiers:
    Tier 1 (Analytical): Machine-precision comparisons, closed forms
    Tier 2 (Quadrature): Adaptive integration accuracy
    Tier 3 (Domain Search): Thresholds bounding the integration domain
    Tier 4 (Tabulation): Interpolated lookup vs direct quadrature

References:
    [T1] Higham (2002) "Accuracy and Stability of Numerical Algorithms"
    [T1] Piessens et al. (1983) "QUADPACK: A Subroutine Package for Automatic Integration"
"""

from typing import Final

import numpy as np

# =============================================================================
# Tier 1: Analytical Tolerances (Deterministic)
# =============================================================================

#: Machine epsilon for float64 (~2.2e-16)
MACHINE_EPSILON: Final[float] = float(np.finfo(np.float64).eps)

#: Number of ulps used by close(); 42 * eps ~ 9.3e-15
CLOSE_ULPS: Final[int] = 42

#: Singular barrier mass is only added when it exceeds eps * exp(result)
SINGULAR_TERM_SIGNIFICANCE: Final[float] = MACHINE_EPSILON


# =============================================================================
# Tier 2: Quadrature Tolerances
# =============================================================================

#: Absolute tolerance of the adaptive integrator
INTEGRATION_ABSOLUTE_TOLERANCE: Final[float] = 1e-8

#: Relative tolerance of the adaptive integrator
INTEGRATION_RELATIVE_TOLERANCE: Final[float] = 1e-8


# =============================================================================
# Tier 3: Domain Search Tolerances
# =============================================================================

#: Integrand values below this are treated as negligible
DOMAIN_THRESHOLD: Final[float] = 1e-10

#: Bisection keeps refining while the outer integrand value is below this
DOMAIN_REFINE_THRESHOLD: Final[float] = 1e-12

#: Bisection stops once the bracket is narrower than this
BISECTION_TOLERANCE: Final[float] = 1e-6


# =============================================================================
# Tier 4: Tabulation Tolerances
# =============================================================================

#: Relative agreement between tabulated lookup and direct quadrature
#: for a sufficiently dense grid
TABULATION_RELATIVE_TOLERANCE: Final[float] = 1e-3

#: Continuity across eta = 0.5 (direct quadrature vs closed form)
REGIME_CONTINUITY_TOLERANCE: Final[float] = 1e-2


# =============================================================================
# Tolerance Registry (For Dynamic Access)
# =============================================================================

TOLERANCE_REGISTRY: dict[str, float] = {
    # Tier 1: Analytical
    "machine_epsilon": MACHINE_EPSILON,
    "singular_term_significance": SINGULAR_TERM_SIGNIFICANCE,
    # Tier 2: Quadrature
    "integration_absolute": INTEGRATION_ABSOLUTE_TOLERANCE,
    "integration_relative": INTEGRATION_RELATIVE_TOLERANCE,
    # Tier 3: Domain Search
    "domain_threshold": DOMAIN_THRESHOLD,
    "domain_refine_threshold": DOMAIN_REFINE_THRESHOLD,
    "bisection": BISECTION_TOLERANCE,
    # Tier 4: Tabulation
    "tabulation_relative": TABULATION_RELATIVE_TOLERANCE,
    "regime_continuity": REGIME_CONTINUITY_TOLERANCE,
}


def get_tolerance(name: str) -> float:
    """
    Get tolerance by name from registry.

    Parameters
    ----------
    name : str
        Tolerance name (see TOLERANCE_REGISTRY keys)

    Returns
    -------
    float
        Tolerance value

    Raises
    ------
    KeyError
        If tolerance name not found
    """
    if name not in TOLERANCE_REGISTRY:
        available = ", ".join(sorted(TOLERANCE_REGISTRY.keys()))
        raise KeyError(f"Unknown tolerance '{name}'. Available: {available}")
    return TOLERANCE_REGISTRY[name]


def close(x: float, y: float, n: int = CLOSE_ULPS) -> bool:
    """
    Check whether two floats agree to within n ulps.

    [T1] Knuth-style strong closeness: the difference must be within n eps
    relative to both operands, with an absolute (n * eps)^2 floor when one
    of the values is exactly zero.

    Parameters
    ----------
    x, y : float
        Values to compare
    n : int
        Number of machine epsilons allowed (default 42)

    Returns
    -------
    bool
        True if x and y are numerically indistinguishable

    Examples
    --------
    >>> close(1.0, 1.0 + 1e-16)
    True
    >>> close(0.0, 1e-20)
    False
    """
    if x == y:
        return True
    diff = abs(x - y)
    tolerance = n * MACHINE_EPSILON
    if x * y == 0.0:
        return diff < tolerance * tolerance
    return diff <= tolerance * abs(x) and diff <= tolerance * abs(y)
