"""
Tests for configuration - config/settings.py and config/tolerances.py.

Verifies tolerance values, the tolerance registry, close(), frozen
settings and the table path environment override.
"""

import dataclasses
from pathlib import Path

import pytest

from betaeta.config.settings import (
    SETTINGS,
    DomainSearchConfig,
    IntegrationConfig,
    Settings,
    TabulationConfig,
)
from betaeta.config.tolerances import (
    BISECTION_TOLERANCE,
    CLOSE_ULPS,
    DOMAIN_REFINE_THRESHOLD,
    DOMAIN_THRESHOLD,
    MACHINE_EPSILON,
    TABULATION_RELATIVE_TOLERANCE,
    TOLERANCE_REGISTRY,
    close,
    get_tolerance,
)

# =============================================================================
# Tolerances
# =============================================================================


class TestTolerances:
    def test_machine_epsilon(self):
        assert MACHINE_EPSILON == pytest.approx(2.220446049250313e-16)

    def test_domain_thresholds_ordered(self):
        """Refinement only happens well below the negligibility threshold."""
        assert 0 < DOMAIN_REFINE_THRESHOLD < DOMAIN_THRESHOLD

    def test_bisection_tolerance(self):
        assert BISECTION_TOLERANCE == 1e-6

    def test_tabulation_tolerance(self):
        assert TABULATION_RELATIVE_TOLERANCE == 1e-3

    def test_registry_lookup(self):
        assert get_tolerance("domain_threshold") == DOMAIN_THRESHOLD

    def test_registry_unknown(self):
        with pytest.raises(KeyError, match="Available"):
            get_tolerance("nonexistent")

    def test_registry_values_positive(self):
        assert all(v > 0 for v in TOLERANCE_REGISTRY.values())


class TestClose:
    def test_identical(self):
        assert close(0.5, 0.5)

    def test_within_ulps(self):
        assert close(1.0, 1.0 + 10 * MACHINE_EPSILON)

    def test_outside_ulps(self):
        assert not close(1.0, 1.0 + 100 * MACHINE_EPSILON)

    def test_zero_uses_squared_tolerance(self):
        tol = CLOSE_ULPS * MACHINE_EPSILON
        assert close(0.0, 0.5 * tol * tol)
        assert not close(0.0, 1e-20)

    def test_custom_ulps(self):
        assert close(1.0, 1.0 + 100 * MACHINE_EPSILON, n=200)

    def test_relative_to_both_operands(self):
        """|1 - 2| = 1 is within 0.75 * |2| but not within 0.75 * |1|."""
        n = int(0.75 / MACHINE_EPSILON)
        assert not close(1.0, 2.0, n=n)
        assert not close(2.0, 1.0, n=n)
        assert close(1.0, 2.0, n=int(1.0 / MACHINE_EPSILON))

    def test_regime_boundaries(self):
        """eta values a rounding error away from 0.5 and 1 count as the boundary."""
        assert close(0.1 + 0.4, 0.5)
        assert not close(0.5 + 1e-6, 0.5)


# =============================================================================
# Settings
# =============================================================================


class TestSettings:
    def test_defaults(self):
        assert SETTINGS.integration.integrate_std_devs == 8.0
        assert SETTINGS.integration.gauss_hermite_points == 8
        assert SETTINGS.domain.expansion_factor == 1.3
        assert SETTINGS.tabulation.output_precision == 8
        assert SETTINGS.tabulation.log_floor == -50.0

    def test_frozen(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            SETTINGS.integration.integrate_std_devs = 4.0  # type: ignore[misc]

    def test_table_path_env_override(self, monkeypatch, tmp_path):
        target = tmp_path / "grid.py"
        monkeypatch.setenv("BETAETA_TABLE_PATH", str(target))
        assert TabulationConfig().table_path == target

    def test_table_path_default(self, monkeypatch):
        monkeypatch.delenv("BETAETA_TABLE_PATH", raising=False)
        assert TabulationConfig().table_path == Path.cwd() / "betaeta_tabulation.py"

    def test_explicit_table_path(self, tmp_path):
        assert TabulationConfig(table_path=tmp_path).table_path == tmp_path

    def test_compose(self):
        settings = Settings(integration=IntegrationConfig(segment_intervals=50))
        assert settings.integration.segment_intervals == 50
        assert settings.domain == DomainSearchConfig()

    @pytest.mark.parametrize(
        "kwargs",
        [
            dict(absolute_tolerance=0.0),
            dict(segment_intervals=0),
            dict(integrate_std_devs=-1.0),
            dict(gauss_hermite_points=0),
        ],
    )
    def test_integration_validation(self, kwargs):
        with pytest.raises(ValueError, match="CRITICAL"):
            IntegrationConfig(**kwargs)

    def test_domain_validation(self):
        with pytest.raises(ValueError, match="expansion_factor"):
            DomainSearchConfig(expansion_factor=1.0)
