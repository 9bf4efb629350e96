"""
Centralized pytest fixtures for the betaeta-core test suite.

Fixture Categories:
1. Tolerance tiers - shared accuracy expectations per test type
2. Model parameters - reference parametrizations per eta regime
3. Grids - small synthetic and built tabulation grids
4. Settings - configurations pointing at temporary table files
"""

from dataclasses import dataclass

import numpy as np
import pytest

from betaeta.config.settings import Settings, TabulationConfig
from betaeta.models.parameters import ProcessParameters
from betaeta.tabulation.grid import TabulationGrid

# =============================================================================
# TOLERANCE TIERS
# =============================================================================


@dataclass(frozen=True)
class ToleranceTiers:
    """
    Tiered tolerance framework for different test types.

    Mirrors betaeta.config.tolerances; tests compare against these tiers
    instead of ad hoc literals.
    """

    # Closed forms and exact identities
    analytical: float = 1e-12

    # Adaptive quadrature vs closed form
    quadrature: float = 1e-6

    # Tabulated lookup vs direct quadrature
    tabulation: float = 1e-3

    # Direct quadrature just off a regime boundary vs the boundary formula
    regime_continuity: float = 1e-2


TOLERANCES = ToleranceTiers()


@pytest.fixture(scope="session")
def tolerances() -> ToleranceTiers:
    """Provide tiered tolerance settings for all tests."""
    return TOLERANCES


# =============================================================================
# MODEL PARAMETERS
# =============================================================================


@pytest.fixture
def reference_params() -> ProcessParameters:
    """beta=1, eta=0.5, alpha=0.01, kappa=0.01, no time grid."""
    return ProcessParameters(times=(), alpha=(0.01,), kappa=(0.01,), beta=1.0, eta=0.5)


@pytest.fixture
def piecewise_params() -> ProcessParameters:
    """Two-piece alpha and kappa on a one-year grid."""
    return ProcessParameters(
        times=(1.0,), alpha=(0.1, 0.2), kappa=(0.0, 0.5), beta=1.0, eta=0.3
    )


@pytest.fixture
def params_factory():
    """Build constant-coefficient parameters for a given eta."""

    def _make(eta: float, alpha: float = 0.2, kappa: float = 0.01, beta: float = 1.0):
        return ProcessParameters(times=(), alpha=(alpha,), kappa=(kappa,), beta=beta, eta=eta)

    return _make


# =============================================================================
# GRIDS
# =============================================================================


@pytest.fixture
def synthetic_grid() -> TabulationGrid:
    """
    Grid whose values are a known function of (eta, u, v).

    log M = eta + 2 u + 3 v, so bilinear interpolation is exact inside
    each eta column.
    """
    eta_pre = np.array([0.3, 0.6, 0.9])
    u_pre = np.array([0.5, 1.0, 1.5, 2.0])
    v_pre = np.array([0.0, 0.05, 0.1])
    e, u, v = np.meshgrid(eta_pre, u_pre, v_pre, indexing="ij")
    return TabulationGrid(eta_pre=eta_pre, u_pre=u_pre, v_pre=v_pre, m_pre=e + 2.0 * u + 3.0 * v)


# =============================================================================
# SETTINGS
# =============================================================================


@pytest.fixture
def settings_with_table(tmp_path):
    """Settings whose default table path lives in tmp_path (file not created)."""

    def _make(name: str = "betaeta_tabulation.py") -> Settings:
        return Settings(tabulation=TabulationConfig(table_path=tmp_path / name))

    return _make
