"""
Rewrite Engine.

Runs the structural refactor pass (Stage A) and then the post-quantum
replacement pass (Stage B) for a language, both looked up in the language
capability table. Stage B consumes Stage A's output; the final ledger is
Stage A's changes followed by Stage B's.

The rewrite is purely lexical: the output is not guaranteed to compile.
"""

import logging

from rewrite.models import RefactorResult
from rewrite.structural import structural_refactor

logger = logging.getLogger(__name__)


class RewriteEngine:
    """Two-stage rewrite toward post-quantum equivalents.

    Parameters
    ----------
    enable_structural : bool
        Run Stage A (structural refactor).  Disabled stages pass code through.
    enable_replacement : bool
        Run Stage B (post-quantum replacement).
    """

    def __init__(self, enable_structural: bool = True, enable_replacement: bool = True):
        self.enable_structural = enable_structural
        self.enable_replacement = enable_replacement

    def structural_pass(self, code: str, language: str) -> RefactorResult:
        """Stage A only."""
        if not self.enable_structural:
            logger.debug("Structural refactor disabled; passing %s code through", language)
            return RefactorResult(code=code, changes=[])
        return structural_refactor(code, language)

    def replacement_pass(self, code: str, language: str) -> RefactorResult:
        """Stage B only."""
        from languages import get_bundle

        if not self.enable_replacement:
            logger.debug("Post-quantum replacement disabled; passing %s code through", language)
            return RefactorResult(code=code, changes=[])
        return get_bundle(language).replacement_pass(code)

    def refactor(self, code: str, language: str) -> RefactorResult:
        """Run Stage A then Stage B and concatenate their ledgers."""
        stage_a = self.structural_pass(code, language)
        stage_b = self.replacement_pass(stage_a.code, language)
        logger.info(
            "Rewrote %s code: %d structural change(s), %d post-quantum change(s)",
            language,
            len(stage_a.changes),
            len(stage_b.changes),
        )
        return RefactorResult(code=stage_b.code, changes=list(stage_a.changes) + list(stage_b.changes))


__all__ = ["RewriteEngine"]
