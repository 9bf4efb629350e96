#!/usr/bin/env python3
"""
setup_check.py - Verify betaeta-core environment and dependencies.

Usage:
    python scripts/setup_check.py [--verbose]

Checks:
    1. Python version >= 3.10
    2. Core dependencies installed
    3. Optional dependencies status
    4. Directory structure
    5. Lookup table present and readable

Exit codes:
    0 = All checks passed
    1 = Critical issue (blocks development)
"""

import importlib
import sys
from pathlib import Path
from typing import NamedTuple

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


class CheckResult(NamedTuple):
    """Result of a single check."""
    name: str
    passed: bool
    message: str
    critical: bool = True


def check_python_version() -> CheckResult:
    """Verify Python version >= 3.10."""
    version = sys.version_info
    return CheckResult(
        name="Python Version",
        passed=version >= (3, 10),
        message=f"Python {version.major}.{version.minor}.{version.micro}",
    )


def _check_imports(deps: list[tuple[str, str]], label: str, critical: bool) -> list[CheckResult]:
    results = []
    for pkg_name, min_version in deps:
        try:
            module = importlib.import_module(pkg_name)
        except ImportError:
            results.append(CheckResult(
                name=f"{label}: {pkg_name}",
                passed=False,
                message=f"NOT INSTALLED (>= {min_version})",
                critical=critical,
            ))
            continue
        version = getattr(module, "__version__", "unknown")
        results.append(CheckResult(
            name=f"{label}: {pkg_name}", passed=True, message=f"v{version}", critical=critical
        ))
    return results


def check_core_dependencies() -> list[CheckResult]:
    """Check that core dependencies are installed."""
    return _check_imports([("numpy", "1.24"), ("pandas", "2.0"), ("scipy", "1.11")], "Core", True)


def check_optional_dependencies() -> list[CheckResult]:
    """Check optional dependencies (non-critical)."""
    results = []
    results.extend(_check_imports(
        [("pytest", "7.0"), ("hypothesis", "6.0"), ("mypy", "1.0"), ("ruff", "0.1")],
        "Optional[dev]",
        False,
    ))
    results.extend(_check_imports([("matplotlib", "3.5")], "Optional[viz]", False))
    return results


def check_directory_structure() -> list[CheckResult]:
    """Verify expected directory structure exists."""
    project_root = Path(__file__).parent.parent
    results = []
    for dir_path in ["src/betaeta", "tests", "scripts", "examples"]:
        full_path = project_root / dir_path
        results.append(CheckResult(
            name=f"Directory: {dir_path}",
            passed=full_path.exists(),
            message="exists" if full_path.exists() else "MISSING",
            critical=dir_path in ["src/betaeta", "tests"],
        ))
    return results


def check_lookup_table() -> CheckResult:
    """Check the lookup table used for tabulated moments."""
    from betaeta.config.settings import SETTINGS
    from betaeta.tabulation import load_grid

    path = SETTINGS.tabulation.table_path
    if not path.exists():
        return CheckResult(
            name="Lookup table",
            passed=False,
            message=f"{path} not found (run scripts/tabulate.py)",
            critical=False,
        )
    try:
        grid = load_grid(path)
    except ValueError as e:
        return CheckResult(name="Lookup table", passed=False, message=str(e), critical=True)
    return CheckResult(name="Lookup table", passed=True, message=f"{path} shape {grid.shape}")


def print_results(results: list[CheckResult], verbose: bool = False) -> None:
    for result in results:
        if result.passed:
            symbol, color = "✓", "\033[92m"
        elif result.critical:
            symbol, color = "✗", "\033[91m"
        else:
            symbol, color = "⚠", "\033[93m"
        if verbose or not result.passed:
            print(f"{color}{symbol}\033[0m {result.name}: {result.message}")


def main():
    """Run all checks and report results."""
    verbose = "--verbose" in sys.argv or "-v" in sys.argv

    print("=" * 60)
    print("  betaeta-core Environment Check")
    print("=" * 60)
    print()

    all_results: list[CheckResult] = []
    sections = [
        ("Python Version:", lambda: [check_python_version()]),
        ("Core Dependencies:", check_core_dependencies),
        ("Optional Dependencies:", check_optional_dependencies),
        ("Directory Structure:", check_directory_structure),
    ]
    for title, check in sections:
        print(title)
        results = check()
        all_results.extend(results)
        print_results(results, verbose=verbose)
        print()

    core_ok = all(r.passed for r in all_results if r.name.startswith("Core"))
    if core_ok:
        print("Lookup Table:")
        result = check_lookup_table()
        all_results.append(result)
        print_results([result], verbose=True)
        print()

    critical_failures = sum(1 for r in all_results if not r.passed and r.critical)
    warnings = sum(1 for r in all_results if not r.passed and not r.critical)

    print("=" * 60)
    if critical_failures > 0:
        print(f"\033[91m✗ {critical_failures} critical issue(s) found\033[0m")
        print("  Run: pip install -e '.[dev]'")
        sys.exit(1)
    elif warnings > 0:
        print(f"\033[93m⚠ {warnings} warning(s) (non-blocking)\033[0m")
    else:
        print("\033[92m✓ All checks passed!\033[0m")


if __name__ == "__main__":
    main()
