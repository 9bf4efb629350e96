"""
Concentrating one-dimensional meshes.

[T1] Points are placed via a sinh transform so that spacing is smallest
around an anchor point c:

    x(z) = c + d * sinh(c1 * (1 - z) + c2 * z),   z in [0, 1]
    c1 = asinh((start - c) / d),  c2 = asinh((end - c) / d)

with d = density * (end - start). When the anchor must be a mesh node the
uniform coordinate is piecewise-linearly remapped so that the node nearest
to the anchor lands exactly on it.

References
----------
[T1] Tavella, D., & Randall, C. (2000). Pricing Financial Instruments:
     The Finite Difference Method. Wiley, Ch. 5.
"""

import math
from typing import Optional

import numpy as np

from betaeta.config.tolerances import close


def concentrating_mesh(
    start: float,
    end: float,
    size: int,
    anchor: Optional[float] = None,
    density: Optional[float] = None,
    require_anchor: bool = True,
) -> np.ndarray:
    """
    Build a mesh on [start, end] that is denser near an anchor point.

    Parameters
    ----------
    start, end : float
        Mesh bounds (end > start); both are always nodes
    size : int
        Number of nodes (>= 2)
    anchor : float, optional
        Concentration point in [start, end]; None gives a uniform mesh
    density : float, optional
        Concentration width relative to (end - start); smaller is denser
    require_anchor : bool
        Force the anchor to be a mesh node

    Returns
    -------
    np.ndarray
        Strictly increasing node locations

    Examples
    --------
    >>> concentrating_mesh(0.0, 1.0, 3).tolist()
    [0.0, 0.5, 1.0]
    """
    if end <= start:
        raise ValueError(f"CRITICAL: end must be larger than start. Got: start={start}, end={end}")
    if size < 2:
        raise ValueError(f"CRITICAL: mesh size must be >= 2. Got: size={size}")

    locations = np.empty(size, dtype=float)
    dz = 1.0 / (size - 1)

    if anchor is None:
        locations[1:-1] = start + np.arange(1, size - 1) * dz * (end - start)
    else:
        if not start <= anchor <= end:
            raise ValueError(
                f"CRITICAL: anchor must be between start and end. "
                f"Got: anchor={anchor}, start={start}, end={end}"
            )
        if density is None or density <= 0:
            raise ValueError(f"CRITICAL: density must be > 0. Got: density={density}")
        width = density * (end - start)
        c1 = math.asinh((start - anchor) / width)
        c2 = math.asinh((end - anchor) / width)

        z = np.arange(1, size - 1) * dz
        if require_anchor:
            knots_u = [0.0]
            knots_z = [0.0]
            if not close(anchor, start) and not close(anchor, end):
                z0 = -c1 / (c2 - c1)
                i0 = min(max(math.floor(z0 * (size - 1) + 0.5), 1), size - 2)
                knots_u.append(i0 / (size - 1))
                knots_z.append(z0)
            knots_u.append(1.0)
            knots_z.append(1.0)
            z = np.interp(z, knots_u, knots_z)

        locations[1:-1] = anchor + width * np.sinh(c1 * (1.0 - z) + c2 * z)

    locations[0] = start
    locations[-1] = end
    return locations
