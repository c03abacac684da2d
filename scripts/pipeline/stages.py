"""
Concrete Pipeline Stages - One stage per step of the migration pipeline.

Each stage wraps one component (detector, scanner, report builder, rewrite
passes, scaffold generator, simulator) into the ``PipelineStage`` protocol.

Stages are designed to be independently testable:
    - Each can be instantiated without the others
    - ``should_run`` checks config flags before executing
    - Any exception fails the stage; the orchestrator then aborts the run
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Any, Dict, List

from .base_stage import BaseStage
from .protocol import PipelineContext

logger = logging.getLogger(__name__)

# Ensure scripts dir is importable
_SCRIPT_DIR = Path(__file__).resolve().parent.parent
if str(_SCRIPT_DIR) not in sys.path:
    sys.path.insert(0, str(_SCRIPT_DIR))


# ============================================================================
# Phase 0: Language detection
# ============================================================================


class LanguageDetectionStage(BaseStage):
    """Phase 0: Infer the snippet's language."""

    name = "phase0_language_detection"
    display_name = "Phase 0: Language Detection"
    phase_number = 0.0
    outputs = ("language",)

    def _execute(self, ctx: PipelineContext) -> Dict[str, Any]:
        from language_detector import detect_language

        ctx.language = detect_language(ctx.code)
        logger.info("Detected language: %s", ctx.language)
        return {"language": ctx.language}


# ============================================================================
# Phase 1: Vulnerability scan and security report
# ============================================================================


class VulnerabilityScanStage(BaseStage):
    """Phase 1: Apply the pattern rule registry to the raw code."""

    name = "phase1_vulnerability_scan"
    display_name = "Phase 1: Vulnerability Scan"
    phase_number = 1.0
    required_stages = ["phase0_language_detection"]
    outputs = ("vulnerabilities",)

    def _execute(self, ctx: PipelineContext) -> Dict[str, Any]:
        from crypto_scanner import CryptoScanner

        ctx.vulnerabilities = CryptoScanner().analyze(ctx.code, ctx.language)
        return {"vulnerabilities": len(ctx.vulnerabilities)}


class SecurityReportStage(BaseStage):
    """Phase 1.5: Summarize findings and render the security report."""

    name = "phase1_5_security_report"
    display_name = "Phase 1.5: Security Report"
    phase_number = 1.5
    required_stages = ["phase1_vulnerability_scan"]
    outputs = ("summary", "security_report")

    def _execute(self, ctx: PipelineContext) -> Dict[str, Any]:
        from security_report import generate_security_report, summarize

        ctx.summary = summarize(ctx.vulnerabilities)
        ctx.security_report = generate_security_report(ctx.vulnerabilities)
        return {
            "quantum_ready": ctx.summary.quantum_ready,
            "risk_level": ctx.summary.risk_level,
        }


# ============================================================================
# Phase 2: Rewrite
# ============================================================================


class StructuralRefactorStage(BaseStage):
    """Phase 2: Stage A structural refactor of the raw code."""

    name = "phase2_structural_refactor"
    display_name = "Phase 2: Structural Refactor"
    phase_number = 2.0
    required_stages = ["phase0_language_detection"]
    outputs = ("structural_result",)

    def _execute(self, ctx: PipelineContext) -> Dict[str, Any]:
        from rewrite import RewriteEngine

        engine = RewriteEngine(enable_structural=ctx.config.get("enable_structural_refactor", True))
        ctx.structural_result = engine.structural_pass(ctx.code, ctx.language)
        return {"changes": len(ctx.structural_result.changes)}


class PostQuantumReplacementStage(BaseStage):
    """Phase 2.5: Stage B post-quantum replacement over Stage A's output."""

    name = "phase2_5_pq_replacement"
    display_name = "Phase 2.5: Post-Quantum Replacement"
    phase_number = 2.5
    required_stages = ["phase2_structural_refactor"]
    outputs = ("refactor_result",)

    def _execute(self, ctx: PipelineContext) -> Dict[str, Any]:
        from rewrite import RefactorResult, RewriteEngine

        engine = RewriteEngine(enable_replacement=ctx.config.get("enable_pq_replacement", True))
        stage_a = ctx.structural_result
        stage_b = engine.replacement_pass(stage_a.code, ctx.language)
        ctx.refactor_result = RefactorResult(
            code=stage_b.code,
            changes=list(stage_a.changes) + list(stage_b.changes),
        )
        return {"changes": len(stage_b.changes)}


# ============================================================================
# Phase 3-5: Scaffold, simulate, report
# ============================================================================


class TestScaffoldStage(BaseStage):
    """Phase 3: Generate the test scaffold for the rewritten (or raw) code."""

    __test__ = False  # not a pytest test class

    name = "phase3_test_scaffold"
    display_name = "Phase 3: Test Scaffold Generation"
    phase_number = 3.0
    required_stages = ["phase0_language_detection"]
    outputs = ("test_suite_text",)

    def _execute(self, ctx: PipelineContext) -> Dict[str, Any]:
        from testgen import TestScaffoldGenerator

        ctx.test_suite_text = TestScaffoldGenerator().generate(ctx.current_code, ctx.language)
        return {"scaffold_lines": ctx.test_suite_text.count("\n") + 1}


class TestExecutionStage(BaseStage):
    """Phase 4: Simulate running the scaffold.

    The simulator never raises; a crashed run yields an error suite.
    """

    __test__ = False

    name = "phase4_test_execution"
    display_name = "Phase 4: Simulated Test Execution"
    phase_number = 4.0
    required_stages = ["phase3_test_scaffold"]
    outputs = ("test_results",)

    def should_run(self, ctx: PipelineContext) -> bool:
        return bool(ctx.config.get("execute_tests", False))

    def _execute(self, ctx: PipelineContext) -> Dict[str, Any]:
        from simulator import TestExecutionSimulator

        simulator = TestExecutionSimulator(seed=ctx.config.get("simulation_seed"))
        ctx.test_results = simulator.execute(ctx.test_suite_text, ctx.language)
        return {
            "total_tests": ctx.test_results.total_tests,
            "failed_tests": ctx.test_results.failed_tests,
        }


class TestReportStage(BaseStage):
    """Phase 5: Render the simulated results."""

    __test__ = False

    name = "phase5_test_report"
    display_name = "Phase 5: Test Report"
    phase_number = 5.0
    required_stages = ["phase4_test_execution"]
    outputs = ("test_report",)

    def should_run(self, ctx: PipelineContext) -> bool:
        return ctx.test_results is not None and ctx.config.get("generate_test_report", True)

    def _execute(self, ctx: PipelineContext) -> Dict[str, Any]:
        from simulator import generate_test_report

        ctx.test_report = generate_test_report(ctx.test_results)
        return {"report_chars": len(ctx.test_report)}


# ============================================================================
# Stage sets per operation
# ============================================================================


def build_analysis_stages() -> List[BaseStage]:
    """Detect, scan and report."""
    return [
        LanguageDetectionStage(),
        VulnerabilityScanStage(),
        SecurityReportStage(),
    ]


def build_refactor_stages() -> List[BaseStage]:
    """The full chain: analysis, two-stage rewrite, scaffold, optional simulation."""
    return build_analysis_stages() + [
        StructuralRefactorStage(),
        PostQuantumReplacementStage(),
        TestScaffoldStage(),
        TestExecutionStage(),
        TestReportStage(),
    ]


def build_test_generation_stages() -> List[BaseStage]:
    """Scaffold the submitted code as-is, optionally simulate and report."""
    return [
        LanguageDetectionStage(),
        TestScaffoldStage(),
        TestExecutionStage(),
        TestReportStage(),
    ]
