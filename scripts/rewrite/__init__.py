"""Two-stage rewrite engine: structural refactor, then post-quantum replacement."""

from rewrite.models import Change, RefactorResult
from rewrite.engine import RewriteEngine
from rewrite.replacements import (
    PYTHON_SUITE,
    RUST_SUITE,
    SOLIDITY_SUITE,
    ReplacementRule,
    ReplacementSuite,
    replace_classical_crypto,
)
from rewrite.structural import refactor_python, refactor_rust, refactor_solidity, structural_refactor

__all__ = [
    "Change",
    "RefactorResult",
    "RewriteEngine",
    "ReplacementRule",
    "ReplacementSuite",
    "SOLIDITY_SUITE",
    "PYTHON_SUITE",
    "RUST_SUITE",
    "replace_classical_crypto",
    "refactor_solidity",
    "refactor_python",
    "refactor_rust",
    "structural_refactor",
]
