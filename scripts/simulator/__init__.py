"""Synthetic test execution and test report rendering."""

from simulator.execution import TestExecutionSimulator, error_suite, extract_test_names
from simulator.models import SimulationProfile, TestResult, TestSuite
from simulator.report import build_test_recommendations, generate_test_report

__all__ = [
    "TestExecutionSimulator",
    "extract_test_names",
    "error_suite",
    "SimulationProfile",
    "TestResult",
    "TestSuite",
    "generate_test_report",
    "build_test_recommendations",
]
