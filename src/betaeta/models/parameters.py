"""
Beta-eta process parameters.

[T1] The state variable follows, under the model measure,

    dx(t) = alpha(t) * (1 + beta * x(t))^eta dW(t),   x >= -1/beta

with piecewise constant alpha on the time grid, and the drift scaling

    lambda(t) = H(t) = int_0^t exp(-int_0^s kappa(u) du) ds

with piecewise constant (or constant) mean reversion kappa. The integrated
variance tau(t) = int_0^t alpha(s)^2 ds is the natural clock of the process.

References
----------
[T1] Caspers, P. (2015). The beta-eta model (Hagan/Woodward parametrization
     of a non-linear Gaussian-type short rate model).
"""

import math
from dataclasses import dataclass, replace
from typing import Optional, Sequence

from betaeta.config.tolerances import close


@dataclass(frozen=True)
class ProcessParameters:
    """
    Immutable beta-eta model inputs.

    Attributes
    ----------
    times : tuple[float, ...]
        Strictly increasing, positive step times
    alpha : tuple[float, ...]
        Piecewise volatility, len(times) + 1 values; alpha[i] applies on
        (times[i-1], times[i]] and alpha[-1] after the last time
    kappa : tuple[float, ...]
        Mean reversion, either a single constant or len(times) + 1 values
    beta : float
        Skew parameter (beta > 0); the barrier sits at x = -1/beta
    eta : float
        Elasticity in [0, 1]

    Examples
    --------
    >>> params = ProcessParameters(times=(), alpha=(0.01,), kappa=(0.01,), beta=1.0, eta=0.5)
    >>> params.tau(1.0)
    0.0001
    """

    times: Sequence[float]
    alpha: Sequence[float]
    kappa: Sequence[float]
    beta: float
    eta: float

    def __post_init__(self) -> None:
        """Normalize sequences to tuples and validate."""
        # Frozen dataclass workaround: use object.__setattr__
        object.__setattr__(self, "times", tuple(float(t) for t in self.times))
        object.__setattr__(self, "alpha", tuple(float(a) for a in self.alpha))
        object.__setattr__(self, "kappa", tuple(float(k) for k in self.kappa))
        object.__setattr__(self, "beta", float(self.beta))
        object.__setattr__(self, "eta", float(self.eta))

        if not self.beta > 0.0:
            raise ValueError(f"CRITICAL: beta ({self.beta}) must be positive")
        if not 0.0 <= self.eta <= 1.0:
            raise ValueError(f"CRITICAL: eta ({self.eta}) must be in [0,1]")
        n = len(self.times)
        if len(self.alpha) != n + 1:
            raise ValueError(
                f"CRITICAL: alpha size ({len(self.alpha)}) must be equal to "
                f"times size ({n}) plus one"
            )
        if len(self.kappa) not in (1, n + 1):
            raise ValueError(
                f"CRITICAL: kappa size ({len(self.kappa)}) must be equal to "
                f"times size ({n}) plus one or equal to one"
            )
        for i, t in enumerate(self.times):
            if not t > 0.0:
                raise ValueError(f"CRITICAL: time #{i} ({t}) must be positive")
            if i < n - 1 and not t < self.times[i + 1]:
                raise ValueError(
                    f"CRITICAL: times must be strictly increasing, #{i} and #{i + 1} "
                    f"are {t} and {self.times[i + 1]} respectively"
                )

    @property
    def barrier(self) -> float:
        """Reflecting barrier x = -1/beta."""
        return -1.0 / self.beta

    def with_eta(self, eta: float) -> "ProcessParameters":
        """Copy of these parameters with a different eta (validated)."""
        return replace(self, eta=eta)

    def _segments(self, t: float):
        """Yield (index, start, end) of the constant pieces covering [0, t]."""
        start = 0.0
        for i, ti in enumerate(self.times):
            if t <= ti:
                yield i, start, t
                return
            yield i, start, ti
            start = ti
        yield len(self.times), start, t

    def _kappa(self, i: int) -> float:
        return self.kappa[0] if len(self.kappa) == 1 else self.kappa[i]

    def tau(self, t0: float, t: Optional[float] = None) -> float:
        """
        Integrated variance.

        [T1] tau(t) = int_0^t alpha(s)^2 ds and tau(t0, t) = tau(t) - tau(t0).

        Parameters
        ----------
        t0 : float
            End time when called with one argument, start time otherwise
        t : float, optional
            End time

        Returns
        -------
        float
            Integrated variance (non-decreasing in the end time)
        """
        if t is None:
            if t0 <= 0.0:
                return 0.0
            return sum(self.alpha[i] ** 2 * (end - start) for i, start, end in self._segments(t0))
        if t < t0:
            raise ValueError(f"CRITICAL: t ({t}) must not be before t0 ({t0})")
        return self.tau(t) - self.tau(t0)

    def lambda_(self, t: float) -> float:
        """
        Drift scaling H(t) = int_0^t exp(-int_0^s kappa(u) du) ds.

        Parameters
        ----------
        t : float
            Time (years)

        Returns
        -------
        float
            lambda(t); equals t when kappa is zero
        """
        if t <= 0.0:
            return 0.0
        result = 0.0
        decay = 1.0
        for i, start, end in self._segments(t):
            k = self._kappa(i)
            dt = end - start
            if close(k, 0.0):
                result += decay * dt
            else:
                result += decay * (1.0 - math.exp(-k * dt)) / k
                decay *= math.exp(-k * dt)
        return result
