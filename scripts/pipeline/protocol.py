"""
Pipeline Protocol - Defines the stage interface and shared context.

Every pipeline stage implements the ``PipelineStage`` protocol. Stages are
composed into an ordered pipeline by ``PipelineOrchestrator``.

The ``PipelineContext`` dataclass holds all state that flows through one
run. Stages read what they need and write their contributions; upstream
outputs are never modified by downstream stages.

The ``StageResult`` dataclass captures the outcome of a single stage
execution for logging and error reporting.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, runtime_checkable


@dataclass
class PipelineContext:
    """Shared state flowing through the pipeline.

    Attributes
    ----------
    config : dict
        Flat configuration dict produced by ``config_loader.build_unified_config``.
    code : str
        The submitted source snippet. Never modified.
    language : str
        Detected language tag; set by the detection stage.
    vulnerabilities : list
        Scanner findings over the raw code.
    summary : AnalysisSummary | None
        Severity/type counts and quantum-readiness verdict.
    security_report : str
        Markdown security report.
    structural_result : RefactorResult | None
        Stage A output (structural refactor of the raw code).
    refactor_result : RefactorResult | None
        Final rewrite: Stage B code with the concatenated change ledger.
    test_suite_text : str
        Generated test scaffold.
    test_results : TestSuite | None
        Simulated execution of the scaffold, when requested.
    test_report : str | None
        Markdown rendering of ``test_results``.
    phase_timings : dict
        Wall-clock seconds per stage, keyed by ``stage.name``.
    errors : list
        Errors collected during the run.
    """

    # -- Immutable input --
    config: Dict[str, Any] = field(default_factory=dict)
    code: str = ""

    # -- Detection --
    language: str = ""

    # -- Scan --
    vulnerabilities: List[Any] = field(default_factory=list)
    summary: Any = None
    security_report: str = ""

    # -- Rewrite --
    structural_result: Any = None
    refactor_result: Any = None

    # -- Scaffold / simulation --
    test_suite_text: str = ""
    test_results: Any = None
    test_report: Optional[str] = None

    # -- Phase timings --
    phase_timings: Dict[str, float] = field(default_factory=dict)

    # -- Error collection --
    errors: List[str] = field(default_factory=list)

    @property
    def current_code(self) -> str:
        """Most recent rewrite of the code, or the raw input."""
        if self.refactor_result is not None:
            return self.refactor_result.code
        if self.structural_result is not None:
            return self.structural_result.code
        return self.code


@dataclass
class StageResult:
    """Outcome returned by each pipeline stage.

    Attributes
    ----------
    success : bool
        Whether the stage completed without errors.
    stage_name : str
        Identifier matching ``PipelineStage.name``.
    duration_seconds : float
        Wall-clock execution time.
    error : str | None
        Human-readable error message if the stage failed.
    exception : BaseException | None
        The exception behind ``error``, kept for chaining.
    skipped : bool
        ``True`` if the stage was intentionally skipped (preconditions not met).
    skip_reason : str
        Why the stage was skipped.
    metadata : dict
        Stage-specific metadata (e.g., finding or change counts).
    """

    success: bool
    stage_name: str
    duration_seconds: float = 0.0
    error: Optional[str] = None
    exception: Optional[BaseException] = None
    skipped: bool = False
    skip_reason: str = ""
    metadata: Dict[str, Any] = field(default_factory=dict)


@runtime_checkable
class PipelineStage(Protocol):
    """Protocol that every pipeline stage must implement.

    Stages are composable, independently testable units that:
    1. Declare their name and dependencies
    2. Check whether they should run (preconditions)
    3. Execute their logic, writing into ``PipelineContext``
    4. Return a ``StageResult`` with outcome metadata

    Example
    -------
    ::

        class MyStage:
            name = "my_stage"
            display_name = "My Custom Stage"
            phase_number = 2.5
            required_stages: list[str] = []

            def should_run(self, ctx: PipelineContext) -> bool:
                return True

            def execute(self, ctx: PipelineContext) -> StageResult:
                # do work, write to ctx
                return StageResult(success=True, stage_name=self.name)

            def rollback(self, ctx: PipelineContext) -> None:
                pass
    """

    @property
    def name(self) -> str:
        """Unique stage identifier, e.g. ``phase1_vulnerability_scan``."""
        ...

    @property
    def display_name(self) -> str:
        """Human-readable name, e.g. ``Phase 1: Vulnerability Scan``."""
        ...

    @property
    def phase_number(self) -> float:
        """Numeric phase for ordering; floats allow sub-phases (1.5, 2.5)."""
        ...

    @property
    def required_stages(self) -> List[str]:
        """Names of stages that must complete before this one."""
        ...

    def should_run(self, ctx: PipelineContext) -> bool:
        """Check preconditions.  Return ``False`` to skip this stage."""
        ...

    def execute(self, ctx: PipelineContext) -> StageResult:
        """Execute the stage logic and report the outcome."""
        ...

    def rollback(self, ctx: PipelineContext) -> None:
        """Undo partial context writes after a failure."""
        ...
