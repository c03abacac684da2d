"""
Synthetic Test Execution Data Models.

Classes:
    TestResult: Fabricated outcome of one scaffold test
    TestSuite: Aggregated outcome of one simulated run
    SimulationProfile: Per-language outcome distribution
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple


@dataclass(frozen=True)
class TestResult:
    """Outcome of one synthetic test"""

    __test__ = False  # not a pytest test class

    test_name: str
    status: str  # 'passed', 'failed', 'skipped'
    duration: float  # milliseconds
    coverage: float  # percent
    error: Optional[str] = None


@dataclass(frozen=True)
class TestSuite:
    """Aggregate of a simulated run"""

    __test__ = False

    name: str
    language: str
    total_tests: int
    passed_tests: int
    failed_tests: int
    skipped_tests: int
    coverage: int  # rounded mean of per-test coverage
    duration: int  # rounded sum of per-test durations (ms)
    results: List[TestResult] = field(default_factory=list)

    @property
    def success_rate(self) -> float:
        """Passed share in percent; 0 when the suite is empty."""
        if self.total_tests <= 0:
            return 0.0
        return self.passed_tests / self.total_tests * 100


@dataclass(frozen=True)
class SimulationProfile:
    """Outcome distribution used for one language"""

    display_name: str
    pass_probability: float
    duration_range: Tuple[float, float]  # ms
    coverage_range: Tuple[float, float]  # percent
    error_template: str  # formatted with ``name``


__all__ = ["TestResult", "TestSuite", "SimulationProfile"]
