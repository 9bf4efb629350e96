"""
Special functions used by the beta-eta transition density.

[T1] Thin wrappers around scipy.special:
- Exponentially weighted modified Bessel function of the first kind,
  e^(-z) I_nu(z), which stays finite where I_nu(z) overflows
- Regularized upper incomplete gamma function Q(a, x) = Gamma(a, x) / Gamma(a)

Negative Bessel orders are supported (reflection through K_nu inside scipy),
which the density needs for eta < 0.5.

References
----------
[T1] Abramowitz & Stegun (1964), 9.6 (modified Bessel functions), 6.5 (incomplete gamma)
[T1] Amos, D. E. (1986). Algorithm 644. ACM TOMS 12(3), 265-273.
"""

import math

from scipy import special


def bessel_i_scaled(nu: float, z: float) -> float:
    """
    Exponentially weighted modified Bessel function e^(-z) I_nu(z).

    Parameters
    ----------
    nu : float
        Order (may be negative)
    z : float
        Argument (z >= 0)

    Returns
    -------
    float
        e^(-z) I_nu(z)

    Raises
    ------
    ValueError
        If z is negative or the result is not finite

    Examples
    --------
    >>> round(bessel_i_scaled(0.5, 1.0), 6)
    0.344951
    """
    if z < 0:
        raise ValueError(f"CRITICAL: Bessel argument must be >= 0. Got: z={z}")
    value = float(special.ive(nu, z))
    if not math.isfinite(value):
        raise ValueError(
            f"CRITICAL: e^(-z) I_nu(z) is not finite for nu={nu}, z={z}"
        )
    return value


def upper_incomplete_gamma(a: float, x: float) -> float:
    """
    Regularized upper incomplete gamma function Q(a, x).

    Parameters
    ----------
    a : float
        Shape (a > 0)
    x : float
        Lower integration limit (x >= 0)

    Returns
    -------
    float
        Gamma(a, x) / Gamma(a), in [0, 1]
    """
    if a <= 0:
        raise ValueError(f"CRITICAL: incomplete gamma shape must be > 0. Got: a={a}")
    if x < 0:
        raise ValueError(f"CRITICAL: incomplete gamma argument must be >= 0. Got: x={x}")
    return float(special.gammaincc(a, x))
