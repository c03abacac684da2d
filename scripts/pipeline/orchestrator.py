"""
Pipeline Orchestrator - Composes and runs pipeline stages.

Runs the detect -> scan -> report -> rewrite -> scaffold -> simulate ->
report chain for one snippet.

Features:
- Dependency resolution (validates ``required_stages`` graph)
- Conditional execution (``should_run`` checks)
- Fail-fast: the first failed stage aborts the run with ``InternalError``,
  so callers never see partial results
- Per-stage timing
"""

from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Optional, Tuple

from exceptions import InternalError

from .protocol import PipelineContext, PipelineStage, StageResult

logger = logging.getLogger(__name__)


class PipelineOrchestrator:
    """Compose and execute pipeline stages in dependency order.

    Parameters
    ----------
    stages : list[PipelineStage]
        Stages to run.  Automatically sorted by ``phase_number``.
    config : dict
        Flat configuration dict (from ``config_loader.build_unified_config``).

    Example
    -------
    ::

        pipeline = PipelineOrchestrator(
            stages=[LanguageDetectionStage(), VulnerabilityScanStage(), SecurityReportStage()],
            config=config,
        )
        ctx, results = pipeline.run(code)
    """

    def __init__(
        self,
        stages: List[PipelineStage],
        config: Optional[Dict[str, Any]] = None,
    ):
        self.stages = sorted(stages, key=lambda s: s.phase_number)
        self.config = config or {}
        self._validate_dependencies()

    def _validate_dependencies(self) -> None:
        """Verify that all ``required_stages`` references are satisfiable.

        Raises
        ------
        ValueError
            If a stage declares a dependency on a stage not in the pipeline.
        """
        stage_names = {s.name for s in self.stages}
        for stage in self.stages:
            for dep in stage.required_stages:
                if dep not in stage_names:
                    raise ValueError(
                        f"Stage '{stage.name}' requires '{dep}' which is "
                        f"not registered in the pipeline.  Available: "
                        f"{sorted(stage_names)}"
                    )

    def _build_context(self, code: str) -> PipelineContext:
        return PipelineContext(config=self.config, code=code)

    def run(
        self,
        code: str,
        ctx: Optional[PipelineContext] = None,
    ) -> Tuple[PipelineContext, List[StageResult]]:
        """Execute the full pipeline.

        Parameters
        ----------
        code : str
            Source snippet to process.
        ctx : PipelineContext | None
            Optional pre-built context.  If ``None``, one is created via
            ``_build_context``.

        Returns
        -------
        tuple[PipelineContext, list[StageResult]]
            The final context and the result of every attempted stage.

        Raises
        ------
        InternalError
            If any stage fails.  ``stage`` names the failing stage and the
            original exception is chained.
        """
        if ctx is None:
            ctx = self._build_context(code)

        results: List[StageResult] = []
        completed_stages: set[str] = set()
        pipeline_start = time.time()

        logger.info("Pipeline starting with %d stages (%d chars of input)", len(self.stages), len(code))

        for stage in self.stages:
            unmet = [dep for dep in stage.required_stages if dep not in completed_stages]
            if unmet:
                self._abort(ctx, stage, f"Unmet dependencies: {unmet}")

            try:
                run_stage = stage.should_run(ctx)
            except Exception as exc:
                self._abort(ctx, stage, f"should_run check failed: {exc}", exc)

            if not run_stage:
                results.append(StageResult(
                    success=True,
                    stage_name=stage.name,
                    skipped=True,
                    skip_reason="Preconditions not met (should_run=False)",
                ))
                completed_stages.add(stage.name)
                logger.info("Skipping %s: should_run returned False", stage.display_name)
                continue

            stage_start = time.time()
            logger.info("Starting %s ...", stage.display_name)

            try:
                result = stage.execute(ctx)
            except Exception as exc:
                result = StageResult(
                    success=False,
                    stage_name=stage.name,
                    error=f"{type(exc).__name__}: {exc}",
                    exception=exc,
                )

            result.duration_seconds = time.time() - stage_start
            ctx.phase_timings[stage.name] = result.duration_seconds
            results.append(result)

            if not result.success:
                message = str(result.exception) if result.exception is not None else (result.error or "")
                self._abort(ctx, stage, message, result.exception)

            completed_stages.add(stage.name)
            logger.info("Completed %s in %.3fs", stage.display_name, result.duration_seconds)

        pipeline_duration = time.time() - pipeline_start
        ctx.phase_timings["_total"] = pipeline_duration

        logger.info(
            "Pipeline completed in %.3fs: %d stages run, %d vulnerabilities",
            pipeline_duration,
            len([r for r in results if not r.skipped]),
            len(ctx.vulnerabilities),
        )

        return ctx, results

    def _abort(
        self,
        ctx: PipelineContext,
        stage: PipelineStage,
        message: str,
        cause: Optional[BaseException] = None,
    ) -> None:
        """Record the failure, roll the stage back and raise ``InternalError``."""
        ctx.errors.append(f"{stage.display_name}: {message}")
        logger.error("Pipeline stopping at %s: %s", stage.display_name, message)
        try:
            stage.rollback(ctx)
        except Exception as rb_exc:
            logger.warning("Rollback for %s failed: %s", stage.display_name, rb_exc)
        raise InternalError(message, stage=stage.name) from cause
