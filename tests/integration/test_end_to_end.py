"""
End-to-end workflows: parameters -> moment engine -> tabulation -> lookup.

These tests exercise the public API the way a short-rate model would:
1. Build parameters and evaluate log M in each regime
2. Reject inconsistent parametrizations before any object exists
3. Build a grid, persist it as a Python module, reload it and query it
4. Check that tabulation is deterministic and independent of parallelism
"""

import math

import numpy as np
import pytest

import betaeta
from betaeta import (
    MomentEngine,
    ProcessParameters,
    TabulationBuilder,
    TabulationSpec,
    load_grid,
    write_python_module,
)
from betaeta.config.settings import Settings, TabulationConfig

# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def tiny_spec() -> TabulationSpec:
    """One eta column (0.3), 3x3 (u, v) mesh."""
    return TabulationSpec(
        eta_min=0.3,
        eta_max=1.0,
        u0_min=0.9,
        u0_max=1.1,
        v_min=0.0,
        v_max=0.04,
        usize=3,
        vsize=3,
        eta_steps=2,
    )


@pytest.fixture
def two_row_spec() -> TabulationSpec:
    """Two eta columns (0.2, 0.6) so rows can be farmed out to workers."""
    return TabulationSpec(
        eta_min=0.2,
        eta_max=1.0,
        u0_min=0.9,
        u0_max=1.1,
        v_min=0.0,
        v_max=0.04,
        usize=3,
        vsize=2,
        eta_steps=3,
    )


# =============================================================================
# Scenarios
# =============================================================================


class TestScenarios:
    def test_eta_half_closed_form(self, tolerances):
        """beta = 1, eta = 0.5, alpha = kappa = 0.01, (t0, x0, t) = (0, 0, 1)."""
        params = ProcessParameters(times=[], alpha=[0.01], kappa=[0.01], beta=1.0, eta=0.5)
        engine = MomentEngine(params)
        lam = params.lambda_(1.0)
        v = params.tau(0.0, 1.0)
        expected = (1.0 + 0.0) * lam * lam * v / (2.0 + 1.0 * lam * v)
        assert engine.log_moment(0.0, 0.0, 1.0) == pytest.approx(
            expected, rel=tolerances.analytical
        )

    def test_eta_one_beyond_barrier(self):
        params = ProcessParameters(times=[], alpha=[0.01], kappa=[0.01], beta=1.0, eta=1.0)
        engine = MomentEngine(params)
        assert engine.log_moment(0.0, -1.0 / params.beta - 0.01, 1.0) == 0.0

    def test_inconsistent_alpha_rejected(self):
        with pytest.raises(ValueError, match="alpha size"):
            ProcessParameters(times=[1.0], alpha=[0.01], kappa=[0.01], beta=1.0, eta=0.5)

    def test_piecewise_parameters_through_engine(self, piecewise_params):
        """Piecewise alpha and kappa flow through tau and lambda into log M."""
        engine = MomentEngine(piecewise_params)
        short = engine.log_moment(0.0, 0.0, 1.0)
        long = engine.log_moment(0.0, 0.0, 2.0)
        assert 0.0 < short < long


# =============================================================================
# Build -> write -> load -> lookup
# =============================================================================


class TestTabulationPipeline:
    def test_round_trip_through_engine(self, tmp_path, tiny_spec, params_factory):
        grid = TabulationBuilder(tiny_spec, n_workers=1).build()
        path = tmp_path / "betaeta_tabulation.py"
        with open(path, "w") as f:
            write_python_module(grid, f, spec=tiny_spec)

        reloaded = load_grid(path)
        np.testing.assert_allclose(reloaded.m_pre, grid.m_pre, rtol=1e-7)

        settings = Settings(tabulation=TabulationConfig(table_path=path))
        engine = MomentEngine(params_factory(0.3), settings=settings)
        u0, su = engine.normalized_coordinates(0.0, 0.0, 1.0)
        assert u0 == pytest.approx(1.0, abs=0.01)
        value = engine.log_moment(0.0, 0.0, 1.0, use_tabulation=True)
        assert math.isfinite(value)
        assert value > 0.0

    def test_env_table_path(self, monkeypatch, tmp_path, synthetic_grid, params_factory):
        """BETAETA_TABLE_PATH points fresh settings at a generated table."""
        path = tmp_path / "table.py"
        with open(path, "w") as f:
            write_python_module(synthetic_grid, f)
        monkeypatch.setenv("BETAETA_TABLE_PATH", str(path))

        engine = MomentEngine(params_factory(0.6), settings=Settings(tabulation=TabulationConfig()))
        u0, su = engine.normalized_coordinates(0.0, 0.0, 1.0)
        expected = 0.6 + 2.0 * u0 + 3.0 * su
        assert engine.log_moment_tabulated(0.0, 0.0, 1.0) == pytest.approx(expected, rel=1e-7)

    def test_frame_export(self, tiny_spec):
        df = TabulationBuilder(tiny_spec, n_workers=1).build().to_frame()
        assert list(df.columns) == ["eta", "u", "v", "log_m"]
        # zero variance column is exactly zero
        assert (df[df.v == 0.0].log_m == 0.0).all()
        assert (df[df.v > 0.0].log_m > 0.0).all()


# =============================================================================
# Determinism
# =============================================================================


class TestDeterminism:
    def test_rebuild_is_identical(self, tiny_spec):
        first = TabulationBuilder(tiny_spec, n_workers=1).build()
        second = TabulationBuilder(tiny_spec, n_workers=1).build()
        assert np.array_equal(first.m_pre, second.m_pre)

    @pytest.mark.slow
    def test_parallel_matches_sequential(self, two_row_spec):
        sequential = TabulationBuilder(two_row_spec, n_workers=1).build()
        parallel = TabulationBuilder(two_row_spec, n_workers=2).build()
        np.testing.assert_array_equal(parallel.eta_pre, sequential.eta_pre)
        np.testing.assert_array_equal(parallel.m_pre, sequential.m_pre)

    def test_progress_callback(self, two_row_spec):
        calls = []
        TabulationBuilder(
            two_row_spec, n_workers=1, progress=lambda done, total, eta: calls.append((done, total))
        ).build()
        assert calls == [(1, 2), (2, 2)]


def test_version():
    assert betaeta.__version__ == "0.1.0"
