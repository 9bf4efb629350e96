"""
Offline construction of the (eta, u, v) log-moment grid.

Each eta row is computed against its own reference ProcessParameters
(beta = 1, constant alpha and kappa, no time grid), so rows are
independent and may run in separate processes. Rows are re-assembled in
eta order, which keeps the output identical to a sequential build.
"""

import logging
import time
from concurrent.futures import ProcessPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Callable, Optional

import numpy as np

from betaeta.config.settings import SETTINGS, Settings
from betaeta.math.meshers import concentrating_mesh
from betaeta.models.moments import MomentEngine
from betaeta.models.parameters import ProcessParameters
from betaeta.tabulation.grid import TabulationGrid

logger = logging.getLogger(__name__)

# (rows done, rows total, eta of the finished row)
ProgressCallback = Callable[[int, int, float], None]


@dataclass(frozen=True)
class TabulationSpec:
    """
    Mesh specification of a tabulation run.

    Each axis is a concentrating mesh on [min, max] anchored at c with
    relative density; leaving c/density as None gives a uniform axis.
    The eta mesh has eta_steps nodes of which the last one (eta_max) is
    not tabulated.

    Attributes
    ----------
    eta_min, eta_max : float
        eta axis bounds
    u0_min, u0_max : float
        u0 axis bounds (u0_min > 0)
    v_min, v_max : float
        Normalized variance axis bounds (v_min >= 0)
    usize, vsize : int
        Number of u0 / v nodes
    eta_steps : int
        Number of eta mesh nodes (>= 2)
    cu, densityu, cv, densityv, ce, densitye : float | None
        Concentration anchors and densities per axis
    """

    eta_min: float
    eta_max: float
    u0_min: float
    u0_max: float
    v_min: float
    v_max: float
    usize: int
    vsize: int
    eta_steps: int
    cu: Optional[float] = None
    densityu: Optional[float] = None
    cv: Optional[float] = None
    densityv: Optional[float] = None
    ce: Optional[float] = None
    densitye: Optional[float] = None

    def __post_init__(self) -> None:
        if not 0.0 <= self.eta_min < self.eta_max <= 1.0:
            raise ValueError(
                f"CRITICAL: need 0 <= eta_min < eta_max <= 1. "
                f"Got: eta_min={self.eta_min}, eta_max={self.eta_max}"
            )
        if not 0.0 < self.u0_min < self.u0_max:
            raise ValueError(
                f"CRITICAL: need 0 < u0_min < u0_max. "
                f"Got: u0_min={self.u0_min}, u0_max={self.u0_max}"
            )
        if not 0.0 <= self.v_min < self.v_max:
            raise ValueError(
                f"CRITICAL: need 0 <= v_min < v_max. Got: v_min={self.v_min}, v_max={self.v_max}"
            )
        if self.usize < 2 or self.vsize < 2 or self.eta_steps < 2:
            raise ValueError(
                f"CRITICAL: mesh sizes must be >= 2. Got: usize={self.usize}, "
                f"vsize={self.vsize}, eta_steps={self.eta_steps}"
            )

    def u_mesh(self) -> np.ndarray:
        return concentrating_mesh(self.u0_min, self.u0_max, self.usize, self.cu, self.densityu)

    def v_mesh(self) -> np.ndarray:
        return concentrating_mesh(self.v_min, self.v_max, self.vsize, self.cv, self.densityv)

    def eta_mesh(self) -> np.ndarray:
        """Full eta mesh including the untabulated top node."""
        return concentrating_mesh(
            self.eta_min, self.eta_max, self.eta_steps, self.ce, self.densitye
        )

    def tabulated_etas(self) -> np.ndarray:
        return self.eta_mesh()[:-1]


def reference_parameters(eta: float, settings: Settings = SETTINGS) -> ProcessParameters:
    """Reference parametrization the grid is built against."""
    cfg = settings.tabulation
    return ProcessParameters(
        times=(),
        alpha=(cfg.reference_alpha,),
        kappa=(cfg.reference_kappa,),
        beta=cfg.reference_beta,
        eta=eta,
    )


def tabulate_row(
    eta: float,
    u_pre: np.ndarray,
    v_pre: np.ndarray,
    settings: Settings = SETTINGS,
) -> np.ndarray:
    """
    log M(u0, Su) for one eta over the (u, v) mesh.

    Module-level so it can be shipped to worker processes.

    Returns
    -------
    np.ndarray
        Shape (len(u_pre), len(v_pre))
    """
    engine = MomentEngine(reference_parameters(eta, settings), settings=settings)
    row = np.empty((len(u_pre), len(v_pre)), dtype=float)
    for i, u0 in enumerate(u_pre):
        for j, v in enumerate(v_pre):
            row[i, j] = engine.log_moment_normalized(float(u0), float(v))
    return row


class TabulationBuilder:
    """
    Build a TabulationGrid from a TabulationSpec.

    Parameters
    ----------
    spec : TabulationSpec
        Mesh specification
    settings : Settings
        Numerical configuration (default SETTINGS)
    n_workers : int, optional
        Worker processes; defaults to settings.tabulation.n_workers,
        None or 1 runs sequentially
    progress : ProgressCallback, optional
        Called after each finished eta row

    Examples
    --------
    >>> spec = TabulationSpec(0.2, 1.0, 0.5, 1.5, 0.0, 0.05, 3, 3, 2)
    >>> TabulationBuilder(spec).build().shape
    (1, 3, 3)
    """

    def __init__(
        self,
        spec: TabulationSpec,
        settings: Settings = SETTINGS,
        n_workers: Optional[int] = None,
        progress: Optional[ProgressCallback] = None,
    ) -> None:
        self.spec = spec
        self.settings = settings
        self.n_workers = n_workers if n_workers is not None else settings.tabulation.n_workers
        self.progress = progress

    def build(self) -> TabulationGrid:
        """
        Compute every tabulated eta row.

        Raises
        ------
        IntegrationError
            If any grid point cannot be integrated
        """
        start_time = time.time()
        etas = self.spec.tabulated_etas()
        u_pre = self.spec.u_mesh()
        v_pre = self.spec.v_mesh()
        logger.info(
            f"Tabulating {len(etas)} eta rows on a {len(u_pre)}x{len(v_pre)} (u, v) mesh"
        )

        if self.n_workers is not None and self.n_workers > 1 and len(etas) > 1:
            rows = self._build_parallel(etas, u_pre, v_pre)
        else:
            rows = []
            for e, eta in enumerate(etas):
                rows.append(tabulate_row(float(eta), u_pre, v_pre, self.settings))
                self._report(e + 1, len(etas), float(eta))

        logger.info(f"Tabulation completed in {time.time() - start_time:.2f}s")
        return TabulationGrid(eta_pre=etas, u_pre=u_pre, v_pre=v_pre, m_pre=np.stack(rows))

    def _build_parallel(
        self, etas: np.ndarray, u_pre: np.ndarray, v_pre: np.ndarray
    ) -> list[np.ndarray]:
        """Compute rows in a ProcessPoolExecutor, returned in eta order."""
        rows: dict[int, np.ndarray] = {}
        with ProcessPoolExecutor(max_workers=self.n_workers) as executor:
            future_to_index = {
                executor.submit(tabulate_row, float(eta), u_pre, v_pre, self.settings): e
                for e, eta in enumerate(etas)
            }
            for future in as_completed(future_to_index):
                e = future_to_index[future]
                rows[e] = future.result()
                self._report(len(rows), len(etas), float(etas[e]))
        return [rows[e] for e in range(len(etas))]

    def _report(self, done: int, total: int, eta: float) -> None:
        logger.info(f"  [{done}/{total}] eta={eta:.6g}")
        if self.progress is not None:
            self.progress(done, total, eta)
