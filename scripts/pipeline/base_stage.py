"""
Base Stage - Shared behaviour for the migration pipeline stages.

A stage names the ``PipelineContext`` fields it produces in ``outputs``.
``execute`` snapshots those fields before running ``_execute`` and turns any
exception into a failed ``StageResult`` that keeps the exception for
chaining. ``rollback`` puts the snapshot back, so a failed stage never leaves
half-written scan results, rewrites or scaffolds in the context.
"""

from __future__ import annotations

import copy
import logging
from abc import ABC, abstractmethod
from dataclasses import MISSING, fields
from typing import Any, Dict, List, Optional, Tuple

from .protocol import PipelineContext, StageResult

logger = logging.getLogger(__name__)

_CONTEXT_FIELDS = {f.name: f for f in fields(PipelineContext)}


def _field_default(name: str) -> Any:
    spec = _CONTEXT_FIELDS[name]
    if spec.default_factory is not MISSING:
        return spec.default_factory()
    return spec.default


class BaseStage(ABC):
    """Satisfies ``PipelineStage`` for stages that write a fixed set of context fields.

    Subclasses set ``name``, ``display_name``, ``phase_number`` and
    ``outputs``, and implement ``_execute(ctx)``. ``required_stages`` and
    ``should_run`` may be overridden.
    """

    required_stages: List[str] = []
    outputs: Tuple[str, ...] = ()

    _snapshot: Optional[Dict[str, Any]] = None

    @property
    @abstractmethod
    def name(self) -> str:
        ...

    @property
    @abstractmethod
    def display_name(self) -> str:
        ...

    @property
    @abstractmethod
    def phase_number(self) -> float:
        ...

    def should_run(self, ctx: PipelineContext) -> bool:
        return True

    @abstractmethod
    def _execute(self, ctx: PipelineContext) -> Dict[str, Any]:
        """Write the stage's ``outputs`` into *ctx*; return result metadata."""
        ...

    def execute(self, ctx: PipelineContext) -> StageResult:
        self._snapshot = {attr: copy.copy(getattr(ctx, attr)) for attr in self.outputs}

        try:
            metadata = self._execute(ctx) or {}
        except Exception as exc:
            logger.error("%s failed on %s input: %s", self.display_name, ctx.language or "undetected", exc,
                         exc_info=True)
            return StageResult(
                success=False,
                stage_name=self.name,
                error=f"{type(exc).__name__}: {exc}",
                exception=exc,
            )
        return StageResult(success=True, stage_name=self.name, metadata=metadata)

    def rollback(self, ctx: PipelineContext) -> None:
        """Restore ``outputs`` to their pre-execute values (field defaults if never run)."""
        snapshot = self._snapshot or {}
        for attr in self.outputs:
            setattr(ctx, attr, snapshot[attr] if attr in snapshot else _field_default(attr))
        self._snapshot = None
