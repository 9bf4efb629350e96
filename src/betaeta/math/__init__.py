"""
Numerical building blocks.

- special_functions: scaled Bessel I, regularized incomplete gamma
- integration: quadrature strategies with fallback chaining
- meshers: concentrating 1-D meshes
- interpolation: bilinear / eta-linear grid lookup
"""

from .integration import (
    AdaptiveQuadrature,
    FallbackIntegrator,
    GaussHermiteQuadrature,
    IntegrationError,
    IntegrationResult,
    SegmentIntegral,
)
from .interpolation import BilinearSurface, GridInterpolator, locate
from .meshers import concentrating_mesh
from .special_functions import bessel_i_scaled, upper_incomplete_gamma

__all__ = [
    # Integration
    "AdaptiveQuadrature",
    "FallbackIntegrator",
    "GaussHermiteQuadrature",
    "IntegrationError",
    "IntegrationResult",
    "SegmentIntegral",
    # Interpolation
    "BilinearSurface",
    "GridInterpolator",
    "locate",
    # Meshes
    "concentrating_mesh",
    # Special functions
    "bessel_i_scaled",
    "upper_incomplete_gamma",
]
