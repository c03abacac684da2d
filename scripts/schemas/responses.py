"""
Response Schemas - Typed envelopes returned by the three core operations.

The envelopes are pydantic models so callers (CLI, HTTP adapters) get
validation and ``model_dump``/``model_dump_json`` for free. Nested payloads
are the pipeline's own frozen dataclasses; pydantic validates and
serializes them without copying.

Hierarchy:
    AnalysisResponse          - analyze_code output
    RefactorMetadata          - line and issue counts of one refactor
    RefactorResponse          - refactor_code output
    GeneratedTestsMetadata    - aggregate numbers of a simulated run
    GeneratedTestsResponse    - generate_tests output
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from crypto_scanner import Vulnerability
from rewrite.models import Change
from security_report import AnalysisSummary
from simulator.models import TestSuite

_LANGUAGES = ("solidity", "python", "rust")


class _Envelope(BaseModel):
    language: str

    @field_validator("language")
    @classmethod
    def _known_language(cls, v: str) -> str:
        if v not in _LANGUAGES:
            raise ValueError(f"language must be one of {_LANGUAGES}, got {v!r}")
        return v


class AnalysisResponse(_Envelope):
    """Findings, rendered report and summary for one snippet."""

    vulnerabilities: List[Vulnerability] = Field(default_factory=list)
    security_report: str
    summary: AnalysisSummary
    recommendations: List[str] = Field(default_factory=list)


class RefactorMetadata(BaseModel):
    original_lines: int = Field(ge=1)
    refactored_lines: int = Field(ge=1)
    security_issues: int = Field(ge=0)
    critical_issues: int = Field(ge=0)
    post_quantum_upgrades: int = Field(ge=0, description="Stage B changes, import block included")


class RefactorResponse(_Envelope):
    """Rewritten code with its change ledger, scaffold and scan results.

    ``test_results`` / ``test_report`` are only set when simulated test
    execution was requested.
    """

    refactored_code: str
    changes: List[Change] = Field(default_factory=list)
    summary: str
    test_suite_text: str
    security_report: str
    vulnerabilities: List[Vulnerability] = Field(default_factory=list)
    metadata: RefactorMetadata
    test_results: Optional[TestSuite] = None
    test_report: Optional[str] = None


class GeneratedTestsMetadata(BaseModel):
    """All zero when tests were not executed."""

    test_count: int = Field(default=0, ge=0)
    coverage: int = Field(default=0, ge=0, le=100)
    success_rate: float = Field(default=0.0, ge=0.0, le=100.0)
    duration: int = Field(default=0, ge=0)

    @classmethod
    def from_suite(cls, suite: Optional[TestSuite]) -> "GeneratedTestsMetadata":
        if suite is None:
            return cls()
        return cls(
            test_count=suite.total_tests,
            coverage=suite.coverage,
            success_rate=suite.success_rate,
            duration=suite.duration,
        )


class GeneratedTestsResponse(_Envelope):
    """Scaffold text, plus simulated results and report when executed."""

    test_suite_text: str
    test_results: Optional[TestSuite] = None
    test_report: Optional[str] = None
    metadata: GeneratedTestsMetadata = Field(default_factory=GeneratedTestsMetadata)


__all__ = [
    "AnalysisResponse",
    "RefactorMetadata",
    "RefactorResponse",
    "GeneratedTestsMetadata",
    "GeneratedTestsResponse",
]
