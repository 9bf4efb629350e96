"""
Text emitters for tabulation grids.

write_python_module produces the persisted table read back by
betaeta.tabulation.grid.read_grid; write_points produces whitespace
separated (a, b, c, log M) rows for plotting.
"""

from typing import Optional, Sequence, TextIO

from betaeta.config.settings import SETTINGS
from betaeta.tabulation.grid import TabulationGrid, TabulationLayout


def _fmt(x: float, precision: int) -> str:
    return f"{float(x):.{precision}g}"


def _join(values: Sequence[float], precision: int) -> str:
    return ",".join(_fmt(x, precision) for x in values)


def write_python_module(
    grid: TabulationGrid,
    out: TextIO,
    spec=None,
    precision: Optional[int] = None,
) -> None:
    """
    Write the grid as an importable Python module.

    Layout: a header comment with the generating parameters, the three axis
    lists, then M_pre nested [eta][u][v] with one "# eta=... u=..." comment
    per u row.

    Parameters
    ----------
    grid : TabulationGrid
        Grid to write
    out : TextIO
        Destination stream
    spec : TabulationSpec, optional
        Mesh specification recorded in the header
    precision : int, optional
        Significant digits (default settings.tabulation.output_precision)
    """
    if precision is None:
        precision = SETTINGS.tabulation.output_precision

    out.write('"""Beta-eta log-moment tabulation (generated, do not edit)."""\n\n')
    out.write("# this file was generated by betaeta.tabulation\n")
    if spec is not None:
        out.write("# using the following parameters:\n")
        out.write(f"# eta_min = {spec.eta_min} eta_max = {spec.eta_max}\n")
        out.write(f"# u0_min = {spec.u0_min} u0_max = {spec.u0_max}\n")
        out.write(f"# v_min = {spec.v_min} v_max = {spec.v_max}\n")
        out.write(f"# usize = {spec.usize} vsize = {spec.vsize} eta_steps = {spec.eta_steps}\n")
        out.write(f"# cu = {spec.cu} densityu = {spec.densityu}\n")
        out.write(f"# cv = {spec.cv} densityv = {spec.densityv}\n")
        out.write(f"# ce = {spec.ce} densitye = {spec.densitye}\n")
    out.write("\n")

    out.write(f"eta_pre = [{_join(grid.eta_pre, precision)}]\n\n")
    out.write(f"u_pre = [{_join(grid.u_pre, precision)}]\n\n")
    out.write(f"v_pre = [{_join(grid.v_pre, precision)}]\n\n")

    n_eta, n_u, _ = grid.shape
    out.write("M_pre = [\n")
    for e in range(n_eta):
        eta = _fmt(grid.eta_pre[e], precision)
        out.write(f"    # ========================  eta={eta}\n")
        out.write("    [\n")
        for i in range(n_u):
            out.write(f"        # eta={eta} u={_fmt(grid.u_pre[i], precision)}\n")
            out.write(f"        [{_join(grid.m_pre[e, i], precision)}]")
            out.write(",\n" if i < n_u - 1 else "\n")
        out.write("    ]" + (",\n" if e < n_eta - 1 else "\n"))
    out.write("]\n")


def write_points(
    grid: TabulationGrid,
    out: TextIO,
    layout: TabulationLayout = TabulationLayout.EUV,
    precision: Optional[int] = None,
) -> None:
    """Write gnuplot-style points, one blank line after each block."""
    if precision is None:
        precision = SETTINGS.tabulation.output_precision
    for block in grid.points(layout):
        for row in block:
            out.write(" ".join(_fmt(x, precision) for x in row) + "\n")
        out.write("\n")
