"""
betaeta-core: transition density and log-moment engine of the beta-eta model.

Quick Start
-----------
>>> from betaeta import MomentEngine, ProcessParameters
>>> params = ProcessParameters(times=(), alpha=(0.01,), kappa=(0.01,), beta=1.0, eta=0.5)
>>> engine = MomentEngine(params)
>>> logm = engine.log_moment(0.0, 0.0, 1.0)

See Also
--------
- scripts/tabulate.py to build a lookup table
- examples/ for regime walk-throughs

Version: 0.1.0
"""

__version__ = "0.1.0"

# =============================================================================
# Models - Primary API
# =============================================================================
from betaeta.models.parameters import ProcessParameters
from betaeta.models.density import DensityModel, RegimeError
from betaeta.models.moments import MomentEngine

# =============================================================================
# Numerics
# =============================================================================
from betaeta.math.integration import (
    AdaptiveQuadrature,
    FallbackIntegrator,
    GaussHermiteQuadrature,
    IntegrationError,
    IntegrationResult,
    SegmentIntegral,
)
from betaeta.math.interpolation import GridInterpolator
from betaeta.math.meshers import concentrating_mesh

# =============================================================================
# Tabulation
# =============================================================================
from betaeta.tabulation import (
    TabulationBuilder,
    TabulationGrid,
    TabulationLayout,
    TabulationSpec,
    load_grid,
    read_grid,
    write_points,
    write_python_module,
)

# =============================================================================
# Configuration
# =============================================================================
from betaeta.config.settings import SETTINGS

__all__ = [
    # Version
    "__version__",
    # Models
    "ProcessParameters",
    "DensityModel",
    "RegimeError",
    "MomentEngine",
    # Numerics
    "AdaptiveQuadrature",
    "FallbackIntegrator",
    "GaussHermiteQuadrature",
    "IntegrationError",
    "IntegrationResult",
    "SegmentIntegral",
    "GridInterpolator",
    "concentrating_mesh",
    # Tabulation
    "TabulationBuilder",
    "TabulationGrid",
    "TabulationLayout",
    "TabulationSpec",
    "load_grid",
    "read_grid",
    "write_points",
    "write_python_module",
    # Config
    "SETTINGS",
]
