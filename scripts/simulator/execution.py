#!/usr/bin/env python3
"""
Synthetic Test Execution

"Runs" a generated test suite without a real test runner: test names are
extracted by naming convention and each one receives an independently drawn
status, duration and coverage from the language's ``SimulationProfile``.

Draws are non-deterministic by default. Pass ``seed`` (or an explicit
``random.Random``) when a reproducible run is wanted.
"""

import logging
import random
import time
from typing import List, Optional

from exceptions import SimulatedExecutionError, UnsupportedLanguageError
from simulator.models import SimulationProfile, TestResult, TestSuite

__all__ = ["TestExecutionSimulator", "extract_test_names", "error_suite"]

logger = logging.getLogger(__name__)

STATUS_PASSED = "passed"
STATUS_FAILED = "failed"
STATUS_SKIPPED = "skipped"


def extract_test_names(test_suite_text: str, language: str) -> List[str]:
    """Test-function names in the order they appear.

    Raises:
        SimulatedExecutionError: If *language* has no naming convention
    """
    from languages import get_bundle

    try:
        bundle = get_bundle(language)
    except UnsupportedLanguageError as e:
        raise SimulatedExecutionError(f"Unsupported language: {language}") from e
    return [match.group(1) for match in bundle.test_name_pattern.finditer(test_suite_text)]


def error_suite(language: str, message: str, elapsed_ms: float) -> TestSuite:
    """Degenerate one-entry failed suite standing in for a crashed run."""
    return TestSuite(
        name=f"{language} Test Suite (Error)",
        language=language,
        total_tests=0,
        passed_tests=0,
        failed_tests=1,
        skipped_tests=0,
        coverage=0,
        duration=round(elapsed_ms),
        results=[
            TestResult(
                test_name="Test Execution",
                status=STATUS_FAILED,
                duration=elapsed_ms,
                coverage=0.0,
                error=message,
            )
        ],
    )


class TestExecutionSimulator:
    """Fabricate per-test outcomes and aggregate metrics for a test suite.

    Args:
        seed: Seed for a private ``random.Random``; ``None`` means unseeded
        rng: Explicit random source, overrides ``seed``
    """

    __test__ = False  # not a pytest test class

    def __init__(self, seed: Optional[int] = None, rng: Optional[random.Random] = None):
        self.rng = rng if rng is not None else random.Random(seed)

    def execute(self, test_suite_text: str, language: str) -> TestSuite:
        """Simulate a run of *test_suite_text*.

        Never raises: any failure is converted into ``error_suite``.
        """
        start = time.perf_counter()
        try:
            return self._run(test_suite_text, language)
        except Exception as e:
            elapsed_ms = (time.perf_counter() - start) * 1000
            logger.warning("Simulated %s test execution failed: %s", language, e)
            return error_suite(language, str(e), elapsed_ms)

    def _run(self, test_suite_text: str, language: str) -> TestSuite:
        from languages import get_bundle

        names = extract_test_names(test_suite_text, language)
        profile = get_bundle(language).simulation_profile

        results = [self._draw(name, profile) for name in names]

        passed = sum(1 for r in results if r.status == STATUS_PASSED)
        failed = sum(1 for r in results if r.status == STATUS_FAILED)
        skipped = sum(1 for r in results if r.status == STATUS_SKIPPED)
        coverage = round(sum(r.coverage for r in results) / len(results)) if results else 0
        duration = round(sum(r.duration for r in results))

        logger.info(
            "Simulated %d %s test(s): %d passed, %d failed, coverage %d%%",
            len(results), language, passed, failed, coverage,
        )

        return TestSuite(
            name=f"{profile.display_name} Test Suite",
            language=language,
            total_tests=len(results),
            passed_tests=passed,
            failed_tests=failed,
            skipped_tests=skipped,
            coverage=coverage,
            duration=duration,
            results=results,
        )

    def _draw(self, name: str, profile: SimulationProfile) -> TestResult:
        passed = self.rng.random() < profile.pass_probability
        duration = self.rng.uniform(*profile.duration_range)
        coverage = self.rng.uniform(*profile.coverage_range)
        return TestResult(
            test_name=name,
            status=STATUS_PASSED if passed else STATUS_FAILED,
            duration=duration,
            coverage=coverage,
            error=None if passed else profile.error_template.format(name=name),
        )
