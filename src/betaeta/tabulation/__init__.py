"""
Offline tabulation of the normalized log moment.

- TabulationBuilder: fill the (eta, u, v) grid
- TabulationGrid: grid container, DataFrame export
- write_python_module / read_grid: persisted table format
"""

from betaeta.tabulation.builder import (
    TabulationBuilder,
    TabulationSpec,
    reference_parameters,
    tabulate_row,
)
from betaeta.tabulation.grid import (
    TabulationGrid,
    TabulationLayout,
    load_grid,
    read_grid,
)
from betaeta.tabulation.writers import write_points, write_python_module

__all__ = [
    "TabulationBuilder",
    "TabulationSpec",
    "reference_parameters",
    "tabulate_row",
    "TabulationGrid",
    "TabulationLayout",
    "load_grid",
    "read_grid",
    "write_points",
    "write_python_module",
]
