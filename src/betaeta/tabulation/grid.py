"""
Tabulated log-moment grid and its persisted form.

The grid is stored as a plain Python module holding four literal
assignments (eta_pre, u_pre, v_pre, M_pre). It is read back with ``ast``
so loading a table never executes code.
"""

import ast
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Union

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)

GRID_NAMES = ("eta_pre", "u_pre", "v_pre", "M_pre")


class TabulationLayout(Enum):
    """Axis ordering of the flat point output (outer, middle, inner)."""

    EUV = "euv"
    UEV = "uev"
    VEU = "veu"


@dataclass(frozen=True, eq=False)
class TabulationGrid:
    """
    Precomputed log M(u0, Su) values per eta column.

    Attributes
    ----------
    eta_pre : np.ndarray
        Tabulated eta columns, shape (E,)
    u_pre : np.ndarray
        u0 nodes, shape (U,)
    v_pre : np.ndarray
        Normalized variance nodes, shape (V,)
    m_pre : np.ndarray
        log M values, shape (E, U, V)
    """

    eta_pre: np.ndarray
    u_pre: np.ndarray
    v_pre: np.ndarray
    m_pre: np.ndarray

    def __post_init__(self) -> None:
        # Frozen dataclass workaround: use object.__setattr__
        for name in ("eta_pre", "u_pre", "v_pre", "m_pre"):
            object.__setattr__(self, name, np.asarray(getattr(self, name), dtype=float))

        for name in ("eta_pre", "u_pre", "v_pre"):
            axis = getattr(self, name)
            if axis.ndim != 1 or len(axis) == 0:
                raise ValueError(f"CRITICAL: {name} must be 1-D and non-empty")
            if not np.all(np.diff(axis) > 0):
                raise ValueError(f"CRITICAL: {name} must be strictly increasing")
        if self.eta_pre[-1] >= 1.0:
            raise ValueError(
                f"CRITICAL: eta_pre must lie below 1, got last column {self.eta_pre[-1]}"
            )
        if self.m_pre.shape != self.shape:
            raise ValueError(
                f"CRITICAL: M_pre has shape {self.m_pre.shape}, expected {self.shape} "
                f"from (eta_pre, u_pre, v_pre)"
            )

    @property
    def shape(self) -> tuple[int, int, int]:
        return (len(self.eta_pre), len(self.u_pre), len(self.v_pre))

    def points(self, layout: TabulationLayout = TabulationLayout.EUV):
        """
        Yield blocks of (a, b, c, log M) rows in the given axis order.

        Each block holds the innermost axis sweep, so blocks map to the
        blank-line separated curves of a gnuplot data file.
        """
        n_eta, n_u, n_v = self.shape
        if layout is TabulationLayout.EUV:
            for e in range(n_eta):
                for i in range(n_u):
                    yield [
                        (self.eta_pre[e], self.u_pre[i], self.v_pre[j], self.m_pre[e, i, j])
                        for j in range(n_v)
                    ]
        elif layout is TabulationLayout.UEV:
            for i in range(n_u):
                for e in range(n_eta):
                    yield [
                        (self.u_pre[i], self.eta_pre[e], self.v_pre[j], self.m_pre[e, i, j])
                        for j in range(n_v)
                    ]
        elif layout is TabulationLayout.VEU:
            for j in range(n_v):
                for e in range(n_eta):
                    yield [
                        (self.v_pre[j], self.eta_pre[e], self.u_pre[i], self.m_pre[e, i, j])
                        for i in range(n_u)
                    ]
        else:
            raise ValueError(f"CRITICAL: unknown layout {layout}")

    def to_frame(self, layout: TabulationLayout = TabulationLayout.EUV) -> pd.DataFrame:
        """
        Flatten the grid into a DataFrame.

        Columns follow the layout order, e.g. ["eta", "u", "v", "log_m"] for EUV.
        """
        axis_names = {"e": "eta", "u": "u", "v": "v"}
        columns = [axis_names[c] for c in layout.value] + ["log_m"]
        rows = [row for block in self.points(layout) for row in block]
        return pd.DataFrame(rows, columns=columns)


# =============================================================================
# Reading
# =============================================================================


def read_grid(text: str) -> TabulationGrid:
    """
    Parse a table module produced by write_python_module.

    Parameters
    ----------
    text : str
        Module source

    Returns
    -------
    TabulationGrid
        Parsed and validated grid

    Raises
    ------
    ValueError
        If an array is missing, is not a literal, or dimensions disagree
    """
    try:
        tree = ast.parse(text)
    except SyntaxError as e:
        raise ValueError(f"CRITICAL: tabulation module is not valid Python: {e}") from e

    found = {}
    for node in tree.body:
        if not isinstance(node, ast.Assign) or len(node.targets) != 1:
            continue
        target = node.targets[0]
        if isinstance(target, ast.Name) and target.id in GRID_NAMES:
            try:
                found[target.id] = ast.literal_eval(node.value)
            except ValueError as e:
                raise ValueError(
                    f"CRITICAL: {target.id} must be a literal list: {e}"
                ) from e

    missing = [name for name in GRID_NAMES if name not in found]
    if missing:
        raise ValueError(f"CRITICAL: tabulation module is missing {', '.join(missing)}")

    try:
        m_pre = np.array(found["M_pre"], dtype=float)
    except ValueError as e:
        raise ValueError(f"CRITICAL: M_pre is not a regular 3-D array: {e}") from e
    return TabulationGrid(
        eta_pre=found["eta_pre"],
        u_pre=found["u_pre"],
        v_pre=found["v_pre"],
        m_pre=m_pre,
    )


def load_grid(path: Union[str, Path]) -> TabulationGrid:
    """Read a table module from disk."""
    path = Path(path)
    logger.debug(f"Reading tabulation grid {path}")
    return read_grid(path.read_text())
