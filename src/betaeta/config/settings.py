"""
Frozen configuration settings for the beta-eta engine.

All configuration is immutable (frozen dataclasses) to ensure reproducibility.
Numerical thresholds come from config/tolerances.py.
"""

import os
from dataclasses import dataclass
from pathlib import Path

from betaeta.config.tolerances import (
    BISECTION_TOLERANCE,
    DOMAIN_REFINE_THRESHOLD,
    DOMAIN_THRESHOLD,
    INTEGRATION_ABSOLUTE_TOLERANCE,
    INTEGRATION_RELATIVE_TOLERANCE,
)

# =============================================================================
# Quadrature Configuration
# =============================================================================


@dataclass(frozen=True)
class IntegrationConfig:
    """
    Immutable quadrature configuration. [T1: QUADPACK defaults]

    Attributes
    ----------
    absolute_tolerance : float
        Absolute tolerance of the adaptive integrator
    relative_tolerance : float
        Relative tolerance of the adaptive integrator
    max_subintervals : int
        Subinterval limit of the adaptive integrator
    segment_intervals : int
        Number of trapezoid segments for the fallback integrator
    integrate_std_devs : float
        Half-width of the direct integration domain in standard deviations
    gauss_hermite_points : int
        Number of Gauss-Hermite nodes for the eta = 1 closed form
    """

    absolute_tolerance: float = INTEGRATION_ABSOLUTE_TOLERANCE
    relative_tolerance: float = INTEGRATION_RELATIVE_TOLERANCE
    max_subintervals: int = 500
    segment_intervals: int = 250
    integrate_std_devs: float = 8.0
    gauss_hermite_points: int = 8

    def __post_init__(self) -> None:
        if self.absolute_tolerance <= 0 or self.relative_tolerance <= 0:
            raise ValueError(
                f"CRITICAL: integration tolerances must be > 0. "
                f"Got: abs={self.absolute_tolerance}, rel={self.relative_tolerance}"
            )
        if self.segment_intervals < 1:
            raise ValueError(
                f"CRITICAL: segment_intervals must be >= 1. Got: {self.segment_intervals}"
            )
        if self.integrate_std_devs <= 0:
            raise ValueError(
                f"CRITICAL: integrate_std_devs must be > 0. Got: {self.integrate_std_devs}"
            )
        if self.gauss_hermite_points < 1:
            raise ValueError(
                f"CRITICAL: gauss_hermite_points must be >= 1. Got: {self.gauss_hermite_points}"
            )


# =============================================================================
# Domain Search Configuration
# =============================================================================


@dataclass(frozen=True)
class DomainSearchConfig:
    """
    Immutable configuration of the tabulation domain search.

    Attributes
    ----------
    threshold : float
        Integrand level treated as negligible
    refine_threshold : float
        Outer integrand level below which bisection keeps refining
    expansion_factor : float
        Initial geometric step (1 + multiplier) of the outward walk
    min_multiplier : float
        Smallest multiplier tried before giving up on separating the bounds
    lower_floor : float
        Lower bound is never walked below this level
    bisection_tolerance : float
        Bracket width at which bisection stops
    max_expansion_steps : int
        Guard against integrands that never decay
    """

    threshold: float = DOMAIN_THRESHOLD
    refine_threshold: float = DOMAIN_REFINE_THRESHOLD
    expansion_factor: float = 1.3
    min_multiplier: float = 1e-8
    lower_floor: float = 1e-8
    bisection_tolerance: float = BISECTION_TOLERANCE
    max_expansion_steps: int = 100_000

    def __post_init__(self) -> None:
        if self.expansion_factor <= 1.0:
            raise ValueError(
                f"CRITICAL: expansion_factor must be > 1. Got: {self.expansion_factor}"
            )


# =============================================================================
# Tabulation Configuration
# =============================================================================


def _resolve_table_path() -> Path:
    """
    Resolve the default tabulation file with environment variable override.

    Priority:
    1. BETAETA_TABLE_PATH environment variable (if set)
    2. Default: betaeta_tabulation.py in the current working directory

    Returns
    -------
    Path
        Resolved path to the tabulation module
    """
    env_path = os.environ.get("BETAETA_TABLE_PATH")
    if env_path:
        return Path(env_path)
    return Path.cwd() / "betaeta_tabulation.py"


@dataclass(frozen=True)
class TabulationConfig:
    """
    Immutable tabulation configuration.

    The grid is always built against the reference parametrization
    (beta = 1, constant alpha and kappa) and rescaled at query time.

    Attributes
    ----------
    table_path : Path
        Default tabulation file. Override with BETAETA_TABLE_PATH.
    output_precision : int
        Significant digits written to the table module
    log_floor : float
        log M reported when the tabulation integral is numerically zero
    reference_beta : float
        beta of the reference parametrization
    reference_alpha : float
        Constant alpha of the reference parametrization
    reference_kappa : float
        Constant kappa of the reference parametrization
    n_workers : int | None
        Worker processes for row-parallel tabulation (None = sequential)
    """

    table_path: Path = None  # type: ignore[assignment]  # Set in __post_init__
    output_precision: int = 8
    log_floor: float = -50.0
    reference_beta: float = 1.0
    reference_alpha: float = 0.01
    reference_kappa: float = 0.01
    n_workers: int | None = None

    def __post_init__(self) -> None:
        """Initialize table_path using resolver function."""
        # Frozen dataclass workaround: use object.__setattr__
        if self.table_path is None:
            object.__setattr__(self, "table_path", _resolve_table_path())


# =============================================================================
# Master Configuration
# =============================================================================


@dataclass(frozen=True)
class Settings:
    """
    Master frozen configuration combining all sub-configs.

    Usage
    -----
    >>> from betaeta.config.settings import SETTINGS
    >>> SETTINGS.integration.integrate_std_devs
    8.0
    """

    integration: IntegrationConfig = IntegrationConfig()
    domain: DomainSearchConfig = DomainSearchConfig()
    tabulation: TabulationConfig = TabulationConfig()


# Singleton instance - import this
SETTINGS = Settings()
