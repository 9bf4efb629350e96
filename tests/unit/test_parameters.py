"""
Unit tests for ProcessParameters.

Tests cover:
- Construction-time validation (sizes, ordering, ranges)
- Integrated variance tau(t) and tau(t0, t)
- Drift scaling lambda(t) = H(t) for constant and piecewise kappa
- Fresh instances via with_eta
"""

import dataclasses
import math

import pytest

from betaeta.models.parameters import ProcessParameters


# =============================================================================
# Validation
# =============================================================================


class TestValidation:
    """Malformed inputs fail at construction."""

    def test_alpha_size_mismatch(self):
        """alpha must have len(times) + 1 entries."""
        with pytest.raises(ValueError, match="alpha size"):
            ProcessParameters(times=(1.0,), alpha=(0.01,), kappa=(0.01,), beta=1.0, eta=0.5)

    def test_kappa_size_mismatch(self):
        """kappa must have one entry or len(times) + 1."""
        with pytest.raises(ValueError, match="kappa size"):
            ProcessParameters(
                times=(1.0, 2.0), alpha=(0.01, 0.01, 0.01), kappa=(0.01, 0.01), beta=1.0, eta=0.5
            )

    def test_single_kappa_with_time_grid(self):
        """A single kappa applies on every piece."""
        params = ProcessParameters(
            times=(1.0, 2.0), alpha=(0.01, 0.02, 0.03), kappa=(0.05,), beta=1.0, eta=0.5
        )
        assert params.kappa == (0.05,)

    @pytest.mark.parametrize("beta", [0.0, -1.0])
    def test_beta_must_be_positive(self, beta):
        with pytest.raises(ValueError, match="beta"):
            ProcessParameters(times=(), alpha=(0.01,), kappa=(0.01,), beta=beta, eta=0.5)

    @pytest.mark.parametrize("eta", [-0.01, 1.01])
    def test_eta_range(self, eta):
        with pytest.raises(ValueError, match="eta"):
            ProcessParameters(times=(), alpha=(0.01,), kappa=(0.01,), beta=1.0, eta=eta)

    @pytest.mark.parametrize("eta", [0.0, 1.0])
    def test_eta_bounds_inclusive(self, eta):
        params = ProcessParameters(times=(), alpha=(0.01,), kappa=(0.01,), beta=1.0, eta=eta)
        assert params.eta == eta

    def test_times_positive(self):
        with pytest.raises(ValueError, match="must be positive"):
            ProcessParameters(times=(0.0,), alpha=(0.01, 0.01), kappa=(0.01,), beta=1.0, eta=0.5)

    def test_times_strictly_increasing(self):
        with pytest.raises(ValueError, match="strictly increasing"):
            ProcessParameters(
                times=(1.0, 1.0), alpha=(0.01, 0.01, 0.01), kappa=(0.01,), beta=1.0, eta=0.5
            )

    def test_errors_are_critical(self):
        """Validation messages follow the CRITICAL: convention."""
        with pytest.raises(ValueError, match="^CRITICAL"):
            ProcessParameters(times=(), alpha=(), kappa=(0.01,), beta=1.0, eta=0.5)

    def test_immutable(self, reference_params):
        with pytest.raises(dataclasses.FrozenInstanceError):
            reference_params.eta = 0.3

    def test_sequences_normalized(self):
        params = ProcessParameters(times=[1], alpha=[1, 2], kappa=[0], beta=2, eta=0)
        assert params.times == (1.0,)
        assert params.alpha == (1.0, 2.0)
        assert isinstance(params.beta, float)


# =============================================================================
# tau
# =============================================================================


class TestTau:
    """[T1] tau(t) = int_0^t alpha^2."""

    def test_constant_alpha(self, reference_params):
        assert reference_params.tau(2.0) == pytest.approx(2.0 * 0.01**2)

    def test_non_positive_time(self, reference_params):
        assert reference_params.tau(0.0) == 0.0
        assert reference_params.tau(-1.0) == 0.0

    def test_piecewise_alpha(self, piecewise_params):
        """0.1^2 on [0, 1], 0.2^2 afterwards."""
        assert piecewise_params.tau(0.5) == pytest.approx(0.005)
        assert piecewise_params.tau(1.0) == pytest.approx(0.01)
        assert piecewise_params.tau(2.0) == pytest.approx(0.05)

    def test_two_argument_difference(self, piecewise_params):
        assert piecewise_params.tau(0.5, 2.0) == pytest.approx(0.045)

    def test_zero_length_step(self, piecewise_params):
        assert piecewise_params.tau(1.3, 1.3) == 0.0

    def test_end_before_start_rejected(self, piecewise_params):
        with pytest.raises(ValueError, match="must not be before"):
            piecewise_params.tau(2.0, 1.0)

    def test_non_decreasing(self, piecewise_params):
        values = [piecewise_params.tau(t) for t in (0.0, 0.3, 0.9, 1.0, 1.1, 3.0)]
        assert values == sorted(values)


# =============================================================================
# lambda
# =============================================================================


class TestLambda:
    """[T1] lambda(t) = H(t) = int_0^t exp(-int_0^s kappa)."""

    def test_constant_kappa(self, reference_params):
        expected = (1.0 - math.exp(-0.01)) / 0.01
        assert reference_params.lambda_(1.0) == pytest.approx(expected, rel=1e-14)

    def test_zero_kappa_is_time(self):
        params = ProcessParameters(times=(), alpha=(0.01,), kappa=(0.0,), beta=1.0, eta=0.5)
        assert params.lambda_(3.0) == pytest.approx(3.0)

    def test_piecewise_kappa(self, piecewise_params):
        """kappa = 0 on [0, 1], 0.5 afterwards."""
        expected = 1.0 + (1.0 - math.exp(-0.5)) / 0.5
        assert piecewise_params.lambda_(2.0) == pytest.approx(expected, rel=1e-14)

    def test_zero_time(self, reference_params):
        assert reference_params.lambda_(0.0) == 0.0

    def test_increasing(self, piecewise_params):
        values = [piecewise_params.lambda_(t) for t in (0.1, 0.5, 1.0, 1.5, 4.0)]
        assert all(b > a for a, b in zip(values, values[1:]))


class TestWithEta:
    def test_returns_fresh_instance(self, reference_params):
        other = reference_params.with_eta(0.3)
        assert other.eta == 0.3
        assert reference_params.eta == 0.5
        assert other.alpha == reference_params.alpha

    def test_validates(self, reference_params):
        with pytest.raises(ValueError):
            reference_params.with_eta(2.0)

    def test_barrier(self):
        params = ProcessParameters(times=(), alpha=(0.01,), kappa=(0.01,), beta=4.0, eta=0.5)
        assert params.barrier == -0.25
