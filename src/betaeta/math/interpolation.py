"""
Bilinear / eta-linear interpolation over the (eta, u, v) tabulation.

[T1] For each tabulated eta column the (u, v) surface is interpolated
bilinearly; the two eta columns bracketing the query are then blended
linearly. Above the last tabulated column the upper side is supplied by
the caller (the eta = 1 closed form) instead of being extrapolated.

Index location uses upper_bound semantics (first node strictly greater
than the query), clamped to the first / last interval, so queries outside
the grid are linearly extrapolated from the boundary cell.
"""

from typing import Callable, Optional, Sequence

import numpy as np


def locate(nodes: np.ndarray, x: float) -> int:
    """
    Index i of the interval [nodes[i], nodes[i+1]] used for x.

    Parameters
    ----------
    nodes : np.ndarray
        Strictly increasing nodes (at least two)
    x : float
        Query point

    Returns
    -------
    int
        Interval index in [0, len(nodes) - 2]

    Examples
    --------
    >>> locate(np.array([0.0, 1.0, 2.0]), 1.0)
    1
    >>> locate(np.array([0.0, 1.0, 2.0]), 5.0)
    1
    """
    i = int(np.searchsorted(nodes, x, side="right")) - 1
    return min(max(i, 0), len(nodes) - 2)


def _weight(nodes: np.ndarray, i: int, x: float) -> float:
    return (x - nodes[i]) / (nodes[i + 1] - nodes[i])


def _require_increasing(name: str, nodes: np.ndarray) -> None:
    if nodes.ndim != 1 or len(nodes) < 2:
        raise ValueError(f"CRITICAL: {name} must be 1-D with at least two nodes")
    if not np.all(np.diff(nodes) > 0):
        raise ValueError(f"CRITICAL: {name} must be strictly increasing")


class BilinearSurface:
    """
    Bilinear interpolation of z[i][j] = f(x[i], y[j]) with linear extrapolation.

    Parameters
    ----------
    x, y : Sequence[float]
        Strictly increasing axes
    z : array-like
        Values with shape (len(x), len(y))
    """

    def __init__(self, x: Sequence[float], y: Sequence[float], z) -> None:
        self.x = np.asarray(x, dtype=float)
        self.y = np.asarray(y, dtype=float)
        self.z = np.asarray(z, dtype=float)
        _require_increasing("x", self.x)
        _require_increasing("y", self.y)
        if self.z.shape != (len(self.x), len(self.y)):
            raise ValueError(
                f"CRITICAL: surface values have shape {self.z.shape}, "
                f"expected {(len(self.x), len(self.y))}"
            )

    def __call__(self, x: float, y: float) -> float:
        i = locate(self.x, x)
        j = locate(self.y, y)
        tx = _weight(self.x, i, x)
        ty = _weight(self.y, j, y)
        z = self.z
        return float(
            z[i, j] * (1.0 - tx) * (1.0 - ty)
            + z[i + 1, j] * tx * (1.0 - ty)
            + z[i, j + 1] * (1.0 - tx) * ty
            + z[i + 1, j + 1] * tx * ty
        )


class GridInterpolator:
    """
    Fast log M lookup over a precomputed (eta, u, v) grid.

    Parameters
    ----------
    eta_pre : Sequence[float]
        Tabulated eta columns (strictly increasing, below 1)
    u_pre : Sequence[float]
        Tabulated u0 nodes
    v_pre : Sequence[float]
        Tabulated normalized variance nodes
    m_pre : array-like
        log M values with shape (len(eta_pre), len(u_pre), len(v_pre))

    Examples
    --------
    >>> interp = GridInterpolator([0.2], [1.0, 2.0], [0.0, 1.0], [[[0.0, 1.0], [0.0, 2.0]]])
    >>> interp(0.2, 1.5, 0.5, eta_one=lambda: 0.0)
    0.75
    """

    def __init__(
        self,
        eta_pre: Sequence[float],
        u_pre: Sequence[float],
        v_pre: Sequence[float],
        m_pre,
    ) -> None:
        self.eta_pre = np.asarray(eta_pre, dtype=float)
        self.u_pre = np.asarray(u_pre, dtype=float)
        self.v_pre = np.asarray(v_pre, dtype=float)
        m = np.asarray(m_pre, dtype=float)
        if self.eta_pre.ndim != 1 or len(self.eta_pre) == 0:
            raise ValueError("CRITICAL: eta_pre must be 1-D and non-empty")
        if not np.all(np.diff(self.eta_pre) > 0):
            raise ValueError("CRITICAL: eta_pre must be strictly increasing")
        expected = (len(self.eta_pre), len(self.u_pre), len(self.v_pre))
        if m.shape != expected:
            raise ValueError(
                f"CRITICAL: M_pre has shape {m.shape}, expected {expected} "
                f"from (eta_pre, u_pre, v_pre)"
            )
        self.surfaces = [BilinearSurface(self.u_pre, self.v_pre, m[e]) for e in range(len(m))]

    @classmethod
    def from_grid(cls, grid) -> "GridInterpolator":
        """Build from any object exposing eta_pre, u_pre, v_pre and m_pre."""
        return cls(grid.eta_pre, grid.u_pre, grid.v_pre, grid.m_pre)

    def eta_bracket(self, eta: float) -> tuple[int, float, float]:
        """
        Upper eta index and blending weights for a query eta.

        Returns
        -------
        tuple[int, float, float]
            (idx, w_lower, w_higher); idx == len(eta_pre) means the upper
            side is eta = 1
        """
        etas = self.eta_pre
        idx = int(np.searchsorted(etas, eta, side="right"))
        idx = max(idx, 1)
        upper = etas[idx] if idx < len(etas) else 1.0
        width = upper - etas[idx - 1]
        w_lower = (upper - eta) / width
        w_higher = (eta - etas[idx - 1]) / width
        return idx, w_lower, w_higher

    def __call__(
        self,
        eta: float,
        u0: float,
        v: float,
        eta_one: Optional[Callable[[], float]] = None,
    ) -> float:
        """
        Interpolated log M at (eta, u0, v).

        Parameters
        ----------
        eta : float
            Query eta
        u0 : float
            Normalized initial state
        v : float
            Normalized variance
        eta_one : Callable[[], float], optional
            Supplies log M at eta = 1 when eta lies above the last column

        Returns
        -------
        float
            Interpolated log M
        """
        idx, w_lower, w_higher = self.eta_bracket(eta)
        lower = self.surfaces[idx - 1](u0, v)
        if idx < len(self.surfaces):
            higher = self.surfaces[idx](u0, v)
        else:
            if eta_one is None:
                raise ValueError(
                    f"CRITICAL: eta={eta} lies above the last tabulated column "
                    f"{self.eta_pre[-1]}; an eta = 1 value is required"
                )
            higher = eta_one()
        return lower * w_lower + higher * w_higher
