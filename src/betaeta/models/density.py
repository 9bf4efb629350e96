"""
Transition density of the beta-eta process.

[T1] With y = y(x) the process is a time-changed Bessel process in the
integrated variance clock v = tau(t) - tau(t0):

    eta = 1:  y(x) = log(1 + beta x) / beta               (shifted Gaussian)
    eta < 1:  y(x) = (1 + beta x)^(1-eta) / (beta (1-eta)) (Bessel, index -nu)

with nu = 1 / (2 - 2 eta). For eta < 0.5 the barrier y = 0 is reflecting and
the density uses I_{-nu}; for 0.5 <= eta < 1 the barrier absorbs and the
density uses I_{nu}, the absorbed mass being the singular term

    P(absorbed by t) = Q(nu, y0^2 / (2 v))

References
----------
[T1] Revuz, D., & Yor, M. (1999). Continuous Martingales and Brownian Motion,
     Ch. XI (Bessel processes).
[T1] Andersen, L., & Piterbarg, V. (2010). Interest Rate Modeling, Vol. II,
     Sec. 10.2 (CEV-type transition densities).
"""

import math

from betaeta.config.tolerances import close
from betaeta.math.special_functions import bessel_i_scaled, upper_incomplete_gamma
from betaeta.models.parameters import ProcessParameters


class RegimeError(ValueError):
    """Raised when a formula is evaluated outside the eta regime it is defined for."""

    pass


class DensityModel:
    """
    Transition density p(t0, x0, t, x) and its y-coordinate forms.

    All methods are pure functions of the parameters.

    Parameters
    ----------
    params : ProcessParameters
        Model parameters
    """

    def __init__(self, params: ProcessParameters) -> None:
        self.params = params
        self.beta = params.beta
        self.eta = params.eta

    @property
    def nu(self) -> float:
        """Bessel order 1 / (2 - 2 eta); undefined for eta = 1."""
        if close(self.eta, 1.0):
            raise RegimeError("CRITICAL: Bessel order is undefined for eta = 1")
        return 1.0 / (2.0 - 2.0 * self.eta)

    def y(self, x: float) -> float:
        """Transformed coordinate y(x), x > -1/beta."""
        if close(self.eta, 1.0):
            return math.log(1.0 + self.beta * x) / self.beta
        return (1.0 + self.beta * x) ** (1.0 - self.eta) / (self.beta * (1.0 - self.eta))

    def p_y_core(self, v: float, y0: float, y: float) -> float:
        """
        Bessel part of the density in y, including y^(eta/(eta-1)).

        Parameters
        ----------
        v : float
            Integrated variance over the step (v > 0)
        y0 : float
            Initial transformed state
        y : float
            Final transformed state

        Returns
        -------
        float
            Non-negative density kernel; 0 at the barrier

        Raises
        ------
        RegimeError
            If eta = 1
        """
        if close(self.eta, 1.0):
            raise RegimeError("CRITICAL: eta must not be one in p_y_core")
        if close(y, 0.0) or close(y0, 0.0):
            return 0.0
        return self._kernel(v, y0, y) * y ** (self.eta / (self.eta - 1.0))

    def _kernel(self, v: float, y0: float, y: float) -> float:
        nu = 1.0 / (2.0 - 2.0 * self.eta)
        order = -nu if self.eta < 0.5 else nu
        return (
            (y0 / y) ** nu
            * y
            / v
            * bessel_i_scaled(order, y0 * y / v)
            * math.exp(-(y - y0) * (y - y0) / (2.0 * v))
        )

    def p_y(self, v: float, y0: float, y: float) -> float:
        """
        Density of x expressed in the y coordinate.

        [T1] eta = 1: shifted Gaussian in y with drift -beta v / 2, times
        dy/dx = exp(-beta y). eta < 1: the Bessel kernel times
        dy/dx = (beta (1-eta) y)^(eta/(eta-1)), taken as one power so that
        eta near 1 neither overflows nor underflows.
        """
        eta = self.eta
        beta = self.beta
        if close(eta, 1.0):
            shifted = y - y0 + 0.5 * beta * v
            return (
                math.exp(-beta * y)
                / math.sqrt(2.0 * math.pi * v)
                * math.exp(-0.5 * shifted * shifted / v)
            )
        if close(y, 0.0) or close(y0, 0.0):
            return 0.0
        return self._kernel(v, y0, y) * (beta * (1.0 - eta) * y) ** (eta / (eta - 1.0))

    def p(self, t0: float, x0: float, t: float, x: float) -> float:
        """
        Transition density of x(t) = x given x(t0) = x0.

        Parameters
        ----------
        t0 : float
            Start time
        x0 : float
            Start state
        t : float
            End time (t >= t0)
        x : float
            End state

        Returns
        -------
        float
            Density value; 0 at and beyond the barrier -1/beta, and 0 when the
            step carries no variance (the law is then a point mass at x0)
        """
        barrier = self.params.barrier
        if x <= barrier or x0 <= barrier:
            return 0.0
        v = self.params.tau(t0, t)
        if close(v, 0.0):
            return 0.0
        return self.p_y(v, self.y(x0), self.y(x))

    def singular_term_y_0(self, t0: float, x0: float, t: float) -> float:
        """
        Probability mass absorbed at the barrier by time t.

        [T1] Zero unless 0.5 <= eta < 1, where it equals the regularized
        upper incomplete gamma Q(nu, y0^2 / (2 (tau(t) - tau(t0)))).
        """
        if self.eta < 0.5 or close(self.eta, 1.0):
            return 0.0
        if x0 <= self.params.barrier:
            return 1.0
        v = self.params.tau(t0, t)
        if close(v, 0.0):
            return 0.0
        y0 = self.y(x0)
        return upper_incomplete_gamma(self.nu, y0 * y0 / (2.0 * v))
