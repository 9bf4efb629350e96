"""
Beta-eta model.

- ProcessParameters: validated model inputs, tau(t) and lambda(t)
- DensityModel: transition density in x and y coordinates
- MomentEngine: log M by regime, direct or tabulated
"""

from .density import DensityModel, RegimeError
from .moments import MomentEngine
from .parameters import ProcessParameters

__all__ = [
    "DensityModel",
    "RegimeError",
    "MomentEngine",
    "ProcessParameters",
]
