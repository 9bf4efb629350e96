"""
Log-moment engine for the beta-eta process.

[T1] Computes

    M(t0, x0, t) = log E[ exp(-lambda(t) (x(t) - x0)) | x(t0) = x0 ]

by regime:
- x0 at/below the barrier, or zero variance: M = 0
- eta = 0.5: closed form (1 + beta x0) lambda^2 v / (2 + beta lambda v)
- eta = 1: Gauss-Hermite quadrature over the shifted Gaussian in y
- otherwise: direct quadrature of p(t0, x0, t, x) exp(-lambda (x - x0)),
  or bilinear/linear lookup in a precomputed (eta, u, v) grid

plus, for 0.5 <= eta < 1, the mass absorbed at the barrier (singular term),
added only where it is numerically significant.

The grid is parametrized by

    u0 = lambda / beta * |1 + beta x0|
    Su = v beta^2 / (1 + beta x0)^(2 - 2 eta) * u0^(2 - eta / 2)

which removes beta, alpha and kappa from the tabulated function, so a
single grid built with beta = 1 serves every parametrization.

References
----------
[T1] Caspers, P. (2015). The beta-eta model, tabulation of the
     forward-measure adjustment M.
"""

import logging
import math
from typing import Callable, Optional

from betaeta.config.settings import SETTINGS, Settings
from betaeta.config.tolerances import SINGULAR_TERM_SIGNIFICANCE, close
from betaeta.math.integration import (
    AdaptiveQuadrature,
    FallbackIntegrator,
    GaussHermiteQuadrature,
    IntegrationError,
    SegmentIntegral,
)
from betaeta.math.interpolation import GridInterpolator
from betaeta.models.density import DensityModel, RegimeError
from betaeta.models.parameters import ProcessParameters

logger = logging.getLogger(__name__)


class MomentEngine:
    """
    Evaluate log M for a fixed parameter set.

    Parameters
    ----------
    params : ProcessParameters
        Model parameters
    grid : TabulationGrid, optional
        Precomputed (eta, u, v) grid for tabulated lookup; when omitted the
        grid is loaded from settings.tabulation.table_path on first use
    settings : Settings
        Numerical configuration (default SETTINGS)

    Examples
    --------
    >>> params = ProcessParameters(times=(), alpha=(0.2,), kappa=(0.01,), beta=1.0, eta=0.5)
    >>> engine = MomentEngine(params)
    >>> engine.log_moment(0.0, 0.0, 1.0) > 0.0
    True
    """

    def __init__(
        self,
        params: ProcessParameters,
        grid=None,
        settings: Settings = SETTINGS,
    ) -> None:
        self.params = params
        self.settings = settings
        self.density = DensityModel(params)

        cfg = settings.integration
        self._integrator = FallbackIntegrator(
            [
                AdaptiveQuadrature(
                    cfg.absolute_tolerance, cfg.relative_tolerance, cfg.max_subintervals
                ),
                SegmentIntegral(cfg.segment_intervals),
            ]
        )
        self._gauss_hermite = GaussHermiteQuadrature(cfg.gauss_hermite_points)
        self._interpolator: Optional[GridInterpolator] = (
            GridInterpolator.from_grid(grid) if grid is not None else None
        )

    @property
    def beta(self) -> float:
        return self.params.beta

    @property
    def eta(self) -> float:
        return self.params.eta

    # =========================================================================
    # Regime dispatch
    # =========================================================================

    def log_moment(self, t0: float, x0: float, t: float, use_tabulation: bool = False) -> float:
        """
        log M(t0, x0, t).

        Parameters
        ----------
        t0 : float
            Start time
        x0 : float
            Start state
        t : float
            End time (t >= t0)
        use_tabulation : bool
            Use the precomputed grid instead of direct quadrature

        Returns
        -------
        float
            log M

        Raises
        ------
        IntegrationError
            If direct quadrature fails with both integrators
        """
        # reflecting barrier: no mass to move
        if x0 <= self.params.barrier:
            return 0.0

        lam = self.params.lambda_(t)
        v = self.params.tau(t0, t)
        if close(v, 0.0):
            return 0.0

        if close(self.eta, 0.5):
            return self.log_moment_eta_05(t0, x0, t)
        if close(self.eta, 1.0):
            return self.log_moment_eta_1(t0, x0, t)

        if use_tabulation:
            result = self.log_moment_tabulated(t0, x0, t)
        else:
            result = self._log_moment_direct(t0, x0, t, lam, v)

        singular = self.density.singular_term_y_0(t0, x0, t) * math.exp(
            -lam * (self.params.barrier - x0)
        )
        if singular > math.exp(result) * SINGULAR_TERM_SIGNIFICANCE:
            result = math.log(math.exp(result) + singular)
        return result

    def _log_moment_direct(self, t0: float, x0: float, t: float, lam: float, v: float) -> float:
        k = self.settings.integration.integrate_std_devs
        s = math.sqrt(v)
        a = max(x0 - k * s, self.params.barrier)
        b = x0 + k * s

        def integrand(x: float) -> float:
            return self.density.p(t0, x0, t, x) * math.exp(-lam * (x - x0))

        result = self._integrator.integrate(integrand, a, b, label=f"M({t0},{x0},{t})")
        # continuous part can underflow when the barrier has absorbed the mass
        if result.value <= 0.0:
            return -math.inf
        return math.log(result.value)

    # =========================================================================
    # Closed forms
    # =========================================================================

    def log_moment_eta_1(self, t0: float, x0: float, t: float) -> float:
        """
        log M for eta = 1 by Gauss-Hermite quadrature.

        [T1] y = log(1 + beta x)/beta is Gaussian with mean y0 - beta v / 2 and
        variance v, so with y = sqrt(2v) z + y0 - beta v / 2

            M = 1/sqrt(pi) int exp(-z^2) exp(-lambda (e^(beta y) - e^(beta y0)) / beta) dz

        Evaluated with the log transform regardless of the model's eta, so it
        also serves as the eta = 1 side of the tabulated lookup.
        """
        if x0 <= self.params.barrier:
            return 0.0
        beta = self.beta
        lam = self.params.lambda_(t)
        v = self.params.tau(t0, t)
        y0 = math.log(1.0 + beta * x0) / beta

        def integrand(z: float) -> float:
            y = math.sqrt(2.0 * v) * z + y0 - beta * v / 2.0
            return math.exp(-lam * (math.exp(beta * y) - math.exp(beta * y0)) / beta)

        return math.log(self._gauss_hermite(integrand) / math.sqrt(math.pi))

    def log_moment_eta_05(self, t0: float, x0: float, t: float) -> float:
        """
        log M for eta = 0.5 in closed form.

        [T1] 1 + beta x is a squared Bessel process of dimension 0, whose
        Laplace transform gives (1 + beta x0) lambda^2 v / (2 + beta lambda v).
        """
        if x0 <= self.params.barrier:
            return 0.0
        lam = self.params.lambda_(t)
        v = self.params.tau(t0, t)
        return (1.0 + self.beta * x0) * lam * lam * v / (2.0 + self.beta * lam * v)

    # =========================================================================
    # Tabulated lookup
    # =========================================================================

    def normalized_coordinates(self, t0: float, x0: float, t: float) -> tuple[float, float]:
        """
        Grid coordinates (u0, Su) of a query (t0, x0, t).

        Returns
        -------
        tuple[float, float]
            u0 = lambda/beta |1 + beta x0| and
            Su = v beta^2 / (1 + beta x0)^(2-2eta) u0^(2-eta/2)

        Raises
        ------
        ValueError
            If x0 is at or below the barrier, where the grid is undefined
        """
        if x0 <= self.params.barrier:
            raise ValueError(
                f"CRITICAL: x0 ({x0}) must lie above the barrier {self.params.barrier}"
            )
        beta = self.beta
        eta = self.eta
        lam = self.params.lambda_(t)
        v = self.params.tau(t0, t)
        u0 = lam / beta * abs(1.0 + beta * x0)
        su = v * beta * beta / (1.0 + beta * x0) ** (2.0 - 2.0 * eta) * u0 ** (2.0 - 0.5 * eta)
        return u0, su

    def log_moment_tabulated(self, t0: float, x0: float, t: float) -> float:
        """
        log M from the precomputed grid (without the singular term).

        The two eta columns bracketing the model's eta are interpolated
        bilinearly at (u0, Su) and blended linearly in eta; above the last
        column the upper side is the eta = 1 closed form.
        """
        if x0 <= self.params.barrier:
            return 0.0
        if close(self.eta, 0.5) or close(self.eta, 1.0):
            return self.log_moment(t0, x0, t)
        u0, su = self.normalized_coordinates(t0, x0, t)
        return self.interpolator(
            self.eta, u0, su, eta_one=lambda: self.log_moment_eta_1(t0, x0, t)
        )

    @property
    def interpolator(self) -> GridInterpolator:
        """Grid interpolator, loading the default table on first use."""
        if self._interpolator is None:
            from betaeta.tabulation.grid import load_grid

            path = self.settings.tabulation.table_path
            if not path.exists():
                raise ValueError(
                    f"CRITICAL: tabulated lookup requested but no grid was supplied "
                    f"and {path} does not exist. Build one with scripts/tabulate.py "
                    f"or set BETAETA_TABLE_PATH."
                )
            logger.info(f"Loading tabulation grid from {path}")
            self._interpolator = GridInterpolator.from_grid(load_grid(path))
        return self._interpolator

    # =========================================================================
    # Tabulation primitive
    # =========================================================================

    def normalized_integrand(self, u0: float, su: float) -> Callable[[float], float]:
        """
        Integrand of exp(M(u0, Su)) in the normalized coordinate u.

        Uses the reference scaling beta = 1, in which y = u^(1-eta) (1-eta)^(eta-1)
        and the step variance is S (1-eta)^(2 eta) u0^(2-2eta), S = Su / u0^(2-eta/2).
        """
        eta = self.eta
        s = su / u0 ** (2.0 - 0.5 * eta)
        v = s * (1.0 - eta) ** (2.0 * eta) * u0 ** (2.0 - 2.0 * eta)
        scale = (1.0 - eta) ** (eta - 1.0)
        y0 = u0 ** (1.0 - eta) * scale

        def integrand(u: float) -> float:
            if close(u, 0.0):
                return 0.0
            return self.density.p_y_core(v, y0, u ** (1.0 - eta) * scale) * math.exp(-(u - u0))

        return integrand

    def integration_domain(self, f: Callable[[float], float], anchor: float) -> tuple[float, float]:
        """
        Bounds outside of which f is numerically negligible.

        Walks geometrically away from the anchor until f drops below the
        threshold (shrinking the step if both walks stall at the anchor),
        then tightens each side by bisection toward the threshold crossing.

        Raises
        ------
        IntegrationError
            If f does not decay within the configured number of steps
        """
        cfg = self.settings.domain
        threshold = cfg.threshold
        multiplier = cfg.expansion_factor - 1.0
        while True:
            lower = upper = anchor
            steps = 0
            while f(lower) > threshold and lower > cfg.lower_floor:
                lower /= 1.0 + multiplier
                steps += 1
            while f(upper) > threshold:
                upper *= 1.0 + multiplier
                steps += 1
                if steps > cfg.max_expansion_steps:
                    raise IntegrationError(
                        f"domain of M({anchor},.)", lower, upper
                    )
            multiplier /= 10.0
            if not (close(lower, upper) and multiplier > cfg.min_multiplier):
                break

        a = self._bisect_threshold(f, lower, anchor)
        b = self._bisect_threshold(f, upper, anchor)
        return a, b

    def _bisect_threshold(self, f: Callable[[float], float], outer: float, inner: float) -> float:
        cfg = self.settings.domain
        threshold = cfg.threshold
        result = outer
        if (f(outer) - threshold) * (f(inner) - threshold) >= 0.0:
            return result
        while abs(outer - inner) > cfg.bisection_tolerance and f(outer) < cfg.refine_threshold:
            result = 0.5 * (outer + inner)
            if (f(outer) - threshold) * (f(result) - threshold) < 0.0:
                inner = result
            else:
                outer = result
        return result

    def log_moment_normalized(self, u0: float, su: float) -> float:
        """
        log M(u0, Su) in the normalized parametrization (tabulation primitive).

        Parameters
        ----------
        u0 : float
            Normalized initial state (> 0)
        su : float
            Normalized variance (>= 0)

        Returns
        -------
        float
            log M; 0 for Su = 0 and settings.tabulation.log_floor when the
            integral underflows

        Raises
        ------
        RegimeError
            If eta = 1
        IntegrationError
            If both integrators fail
        """
        if close(su, 0.0):
            return 0.0
        if close(self.eta, 1.0):
            raise RegimeError("CRITICAL: M(u0,Su) is only defined for eta < 1")

        f = self.normalized_integrand(u0, su)
        a, b = self.integration_domain(f, u0)
        threshold = self.settings.domain.threshold
        result = self._integrator.integrate(
            f, a, b, label=f"M({u0},{su})", accept=lambda value: value >= threshold
        )
        if close(result.value, 0.0) or result.value <= 0.0:
            logger.warning(f"u0 {u0} Su {su} integration bounds are {a} and {b}")
            return self.settings.tabulation.log_floor
        return math.log(result.value)
