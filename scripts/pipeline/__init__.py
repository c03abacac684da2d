"""
Pipeline Stage Interface for QShield.

Composable pipeline that runs one snippet through detection, scanning,
reporting, the two-stage rewrite, scaffolding and simulated execution.

Key components:
- ``PipelineStage`` -- Protocol every stage implements
- ``PipelineContext`` -- Shared state flowing through stages
- ``StageResult`` -- Outcome returned by each stage
- ``PipelineOrchestrator`` -- Composes and runs stages in order
- ``BaseStage`` -- Convenience ABC for implementing stages
- ``build_*_stages`` -- Stage sets for the three core operations
"""

from .protocol import PipelineStage, PipelineContext, StageResult
from .orchestrator import PipelineOrchestrator
from .base_stage import BaseStage
from .stages import (
    LanguageDetectionStage,
    VulnerabilityScanStage,
    SecurityReportStage,
    StructuralRefactorStage,
    PostQuantumReplacementStage,
    TestScaffoldStage,
    TestExecutionStage,
    TestReportStage,
    build_analysis_stages,
    build_refactor_stages,
    build_test_generation_stages,
)

__all__ = [
    # Core protocol
    "PipelineStage",
    "PipelineContext",
    "StageResult",
    # Orchestrator
    "PipelineOrchestrator",
    # Base class
    "BaseStage",
    # Concrete stages
    "LanguageDetectionStage",
    "VulnerabilityScanStage",
    "SecurityReportStage",
    "StructuralRefactorStage",
    "PostQuantumReplacementStage",
    "TestScaffoldStage",
    "TestExecutionStage",
    "TestReportStage",
    # Factories
    "build_analysis_stages",
    "build_refactor_stages",
    "build_test_generation_stages",
]
