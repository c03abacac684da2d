"""
Tests for the typed response envelopes (pydantic models).

Tests AnalysisResponse, RefactorMetadata, RefactorResponse,
GeneratedTestsMetadata and GeneratedTestsResponse.
"""

import json
import sys
from pathlib import Path

import pytest
from pydantic import ValidationError

sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "scripts"))

from crypto_scanner import Location, Vulnerability
from rewrite.models import Change
from schemas import (
    AnalysisResponse,
    GeneratedTestsMetadata,
    GeneratedTestsResponse,
    RefactorMetadata,
    RefactorResponse,
)
from security_report import summarize
from simulator.models import TestResult, TestSuite


def _vuln():
    return Vulnerability(
        type="quantum_vulnerable",
        severity="high",
        description="HASH algorithm detected: Grover's algorithm reduces security",
        recommendation="Replace with SPHINCS+ hash functions or SHAKE-256 for quantum resistance",
        location=Location(line=2, column=5),
        rule_id="QV-HASH",
    )


def _suite():
    results = [
        TestResult("test_a", "passed", 10.0, 90.0),
        TestResult("test_b", "failed", 20.0, 80.0, error="boom"),
    ]
    return TestSuite(
        name="Python Test Suite", language="python", total_tests=2, passed_tests=1,
        failed_tests=1, skipped_tests=0, coverage=85, duration=30, results=results,
    )


# ============================================================================
# Test AnalysisResponse
# ============================================================================


class TestAnalysisResponse:
    def test_construction(self):
        vulns = [_vuln()]
        response = AnalysisResponse(
            language="python",
            vulnerabilities=vulns,
            security_report="# report",
            summary=summarize(vulns),
            recommendations=["Immediate migration to post-quantum cryptography required"],
        )
        assert response.vulnerabilities[0] == vulns[0]
        assert response.summary.high_count == 1

    def test_unknown_language_rejected(self):
        with pytest.raises(ValidationError):
            AnalysisResponse(language="cobol", security_report="", summary=summarize([]))

    def test_json_serialization(self):
        response = AnalysisResponse(
            language="solidity", vulnerabilities=[_vuln()], security_report="r", summary=summarize([_vuln()]),
        )
        data = json.loads(response.model_dump_json())
        assert data["language"] == "solidity"
        assert data["vulnerabilities"][0]["location"] == {"line": 2, "column": 5}
        assert data["summary"]["quantum_ready"] is False


# ============================================================================
# Test RefactorResponse
# ============================================================================


class TestRefactorMetadata:
    def test_valid(self):
        meta = RefactorMetadata(
            original_lines=3, refactored_lines=9, security_issues=1, critical_issues=0, post_quantum_upgrades=2,
        )
        assert meta.post_quantum_upgrades == 2

    def test_line_counts_positive(self):
        with pytest.raises(ValidationError):
            RefactorMetadata(
                original_lines=0, refactored_lines=1, security_issues=0, critical_issues=0, post_quantum_upgrades=0,
            )


class TestRefactorResponse:
    def _response(self, **kwargs):
        defaults = dict(
            language="rust",
            refactored_code="fn main() -> Result<(), Box<dyn std::error::Error>> {}",
            changes=[Change(before="fn main() {", after="fn main() -> Result<...> {", reason="r")],
            summary="Refactored rust code",
            test_suite_text="#[cfg(test)]",
            security_report="# report",
            metadata=RefactorMetadata(
                original_lines=1, refactored_lines=1, security_issues=0, critical_issues=0, post_quantum_upgrades=0,
            ),
        )
        defaults.update(kwargs)
        return RefactorResponse(**defaults)

    def test_test_fields_default_to_none(self):
        response = self._response()
        assert response.test_results is None
        assert response.test_report is None

    def test_with_simulated_results(self):
        response = self._response(test_results=_suite(), test_report="# 🧪 Test Execution Report")
        data = response.model_dump()
        assert data["test_results"]["total_tests"] == 2
        assert data["changes"][0]["reason"] == "r"


# ============================================================================
# Test GeneratedTestsResponse
# ============================================================================


class TestGeneratedTestsMetadata:
    def test_zero_without_suite(self):
        meta = GeneratedTestsMetadata.from_suite(None)
        assert meta.test_count == 0
        assert meta.coverage == 0
        assert meta.success_rate == 0.0
        assert meta.duration == 0

    def test_from_suite(self):
        meta = GeneratedTestsMetadata.from_suite(_suite())
        assert meta.test_count == 2
        assert meta.coverage == 85
        assert meta.success_rate == 50.0
        assert meta.duration == 30

    def test_coverage_bounded(self):
        with pytest.raises(ValidationError):
            GeneratedTestsMetadata(coverage=101)


class TestGeneratedTestsResponse:
    def test_default_metadata(self):
        response = GeneratedTestsResponse(language="python", test_suite_text="def test_x(): pass")
        assert response.metadata == GeneratedTestsMetadata()
        assert response.test_results is None

    def test_roundtrip_json(self):
        response = GeneratedTestsResponse(
            language="python",
            test_suite_text="def test_a(): pass",
            test_results=_suite(),
            test_report="report",
            metadata=GeneratedTestsMetadata.from_suite(_suite()),
        )
        data = json.loads(response.model_dump_json())
        assert data["metadata"]["test_count"] == 2
        assert data["test_results"]["results"][1]["error"] == "boom"
