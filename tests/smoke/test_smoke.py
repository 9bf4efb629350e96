"""
Smoke tests for quick CI validation.

These tests verify basic functionality without full coverage.
Run these first to catch obvious breakages before full test suite.

Usage:
    pytest tests/smoke/ -v
"""

import math

# =============================================================================
# Import Smoke Tests
# =============================================================================


class TestImportSmoke:
    """Verify core modules import successfully."""

    def test_import_core_packages(self):
        import betaeta
        import betaeta.math
        import betaeta.models
        import betaeta.tabulation

        assert betaeta.__version__

    def test_public_api(self):
        from betaeta import SETTINGS, MomentEngine, ProcessParameters, TabulationBuilder

        assert MomentEngine is not None
        assert ProcessParameters is not None
        assert TabulationBuilder is not None
        assert SETTINGS.integration.gauss_hermite_points == 8


# =============================================================================
# Evaluation Smoke Tests
# =============================================================================


class TestEvaluationSmoke:
    def test_each_regime_evaluates(self):
        from betaeta import MomentEngine, ProcessParameters

        for eta in (0.0, 0.3, 0.5, 0.7, 1.0):
            params = ProcessParameters(times=(), alpha=(0.1,), kappa=(0.01,), beta=1.0, eta=eta)
            value = MomentEngine(params).log_moment(0.0, 0.0, 1.0)
            assert math.isfinite(value), f"eta={eta} gave {value}"
            assert value > 0.0
