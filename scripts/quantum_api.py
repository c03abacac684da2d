#!/usr/bin/env python3
"""
QShield Core Operations

The three operations exposed to callers (CLI, HTTP adapters, chat bots):

    analyze_code    - detect, scan, report
    refactor_code   - analyze, rewrite in two stages, scaffold tests,
                      optionally simulate their execution
    generate_tests  - scaffold tests for the code as submitted, optionally
                      simulate their execution

The language is always inferred from the code. Input problems raise
``InputError`` before any stage runs; any stage failure raises
``InternalError`` and no partial result is returned.
"""

import logging
from typing import Any, Dict, Optional

from config_loader import deep_merge, get_default_config
from exceptions import InputError
from pipeline import (
    PipelineContext,
    PipelineOrchestrator,
    build_analysis_stages,
    build_refactor_stages,
    build_test_generation_stages,
)
from schemas import (
    AnalysisResponse,
    GeneratedTestsMetadata,
    GeneratedTestsResponse,
    RefactorMetadata,
    RefactorResponse,
)
from security_report import build_recommendations

__all__ = ["analyze_code", "refactor_code", "generate_tests"]

logger = logging.getLogger(__name__)


def _resolve_config(config: Optional[Dict[str, Any]], **overrides: Any) -> Dict[str, Any]:
    resolved = get_default_config()
    if config:
        resolved = deep_merge(resolved, config)
    return deep_merge(resolved, overrides)


def _validate_code(code: Any, config: Dict[str, Any]) -> str:
    """Reject missing, non-text and oversize input.

    Raises:
        InputError: If *code* is unusable
    """
    if not isinstance(code, str) or not code:
        raise InputError("Code is required and must be a string")
    max_size = config.get("max_code_size")
    if max_size and len(code) > max_size:
        raise InputError(f"Code is too large: {len(code)} characters (limit {max_size})")
    return code


def _run(code: str, stages: list, config: Dict[str, Any]) -> PipelineContext:
    ctx, _results = PipelineOrchestrator(stages=stages, config=config).run(code)
    return ctx


def analyze_code(code: str, config: Optional[Dict[str, Any]] = None) -> AnalysisResponse:
    """Scan *code* for quantum-vulnerable, deprecated and misused cryptography.

    Raises:
        InputError: Missing, non-text or oversize code
        InternalError: A pipeline stage failed
    """
    config = _resolve_config(config)
    _validate_code(code, config)

    ctx = _run(code, build_analysis_stages(), config)
    return AnalysisResponse(
        language=ctx.language,
        vulnerabilities=ctx.vulnerabilities,
        security_report=ctx.security_report,
        summary=ctx.summary,
        recommendations=build_recommendations(ctx.summary),
    )


def refactor_code(
    code: str,
    config: Optional[Dict[str, Any]] = None,
    execute_tests: Optional[bool] = None,
) -> RefactorResponse:
    """Rewrite *code* toward post-quantum equivalents and scaffold its tests.

    Args:
        code: Source snippet
        config: Flat configuration overrides
        execute_tests: Attach simulated test results; ``None`` defers to config

    Raises:
        InputError: Missing, non-text or oversize code
        InternalError: A pipeline stage failed
    """
    config = _resolve_config(config, execute_tests=execute_tests)
    _validate_code(code, config)

    ctx = _run(code, build_refactor_stages(), config)
    result = ctx.refactor_result
    stage_b_changes = len(result.changes) - len(ctx.structural_result.changes)

    summary = (
        f"Refactored {ctx.language} code with {len(result.changes)} improvements including "
        f"post-quantum cryptography upgrades. Security analysis found "
        f"{len(ctx.vulnerabilities)} issues that have been addressed."
    )

    return RefactorResponse(
        language=ctx.language,
        refactored_code=result.code,
        changes=result.changes,
        summary=summary,
        test_suite_text=ctx.test_suite_text,
        security_report=ctx.security_report,
        vulnerabilities=ctx.vulnerabilities,
        metadata=RefactorMetadata(
            original_lines=len(code.split("\n")),
            refactored_lines=len(result.code.split("\n")),
            security_issues=len(ctx.vulnerabilities),
            critical_issues=ctx.summary.critical_count,
            post_quantum_upgrades=stage_b_changes,
        ),
        test_results=ctx.test_results,
        test_report=ctx.test_report,
    )


def generate_tests(
    code: str,
    execute: bool = False,
    config: Optional[Dict[str, Any]] = None,
) -> GeneratedTestsResponse:
    """Scaffold a test suite for *code*; with *execute*, simulate running it.

    Raises:
        InputError: Missing, non-text or oversize code
        InternalError: A pipeline stage failed
    """
    config = _resolve_config(config, execute_tests=execute)
    _validate_code(code, config)

    ctx = _run(code, build_test_generation_stages(), config)
    return GeneratedTestsResponse(
        language=ctx.language,
        test_suite_text=ctx.test_suite_text,
        test_results=ctx.test_results,
        test_report=ctx.test_report,
        metadata=GeneratedTestsMetadata.from_suite(ctx.test_results),
    )
