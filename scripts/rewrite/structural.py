"""
Structural Refactor Passes (Stage A).

Fixed, language-specific source transformations applied before any
cryptographic replacement. Each pass is a pure function
``code -> RefactorResult`` and records one ``Change`` for every edit that
actually fires.

Functions:
    refactor_solidity: SPDX header, explicit ``external`` visibility, ReentrancyGuard import
    refactor_python: ``-> None`` return hints, placeholder docstrings
    refactor_rust: ``Result`` return types, derive attributes on structs
"""

import logging
import re
from typing import List

from rewrite.models import Change, RefactorResult

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Solidity
# ---------------------------------------------------------------------------

SPDX_HEADER = "// SPDX-License-Identifier: MIT"
REENTRANCY_GUARD_IMPORT = 'import "@openzeppelin/contracts/security/ReentrancyGuard.sol";'

_SOL_FUNCTION = re.compile(r"\bfunction\s+(\w+)\s*\(([^)]*)\)([^{;]*)")
_SOL_VISIBILITY = re.compile(r"\b(public|private|internal|external)\b")
_SOL_EXTERNAL = re.compile(r"\bexternal\b")


def _insert_after_spdx(code: str, line: str) -> str:
    lines = code.split("\n")
    for index, existing in enumerate(lines):
        if "SPDX-License-Identifier" in existing:
            lines.insert(index + 1, line)
            return "\n".join(lines)
    return line + "\n" + code


def refactor_solidity(code: str) -> RefactorResult:
    changes: List[Change] = []
    refactored = code

    if "SPDX-License-Identifier" not in code:
        refactored = SPDX_HEADER + "\n" + refactored
        changes.append(Change(
            before=code.split("\n")[0],
            after=SPDX_HEADER,
            reason="Added SPDX license identifier for compliance",
        ))

    def _make_external(match: "re.Match[str]") -> str:
        name, params, modifiers = match.groups()
        if _SOL_VISIBILITY.search(modifiers):
            return match.group(0)
        replacement = f"function {name}({params}) external{modifiers}"
        changes.append(Change(
            before=match.group(0).strip(),
            after=replacement.strip(),
            reason="Added explicit visibility modifier for security",
        ))
        return replacement

    refactored = _SOL_FUNCTION.sub(_make_external, refactored)

    guarded = "nonReentrant" in refactored or "ReentrancyGuard" in refactored
    if _SOL_EXTERNAL.search(refactored) and not guarded:
        refactored = _insert_after_spdx(refactored, REENTRANCY_GUARD_IMPORT)
        changes.append(Change(
            before="contract without reentrancy protection",
            after="contract with ReentrancyGuard import",
            reason="Added reentrancy protection for security",
        ))

    return RefactorResult(code=refactored, changes=changes)

# ---------------------------------------------------------------------------
# Python
# ---------------------------------------------------------------------------

PLACEHOLDER_DOCSTRING = '"""Function docstring."""'

_PY_DEF = re.compile(r"^([ \t]*)((?:async\s+)?def\s+(\w+)\s*\(([^)]*)\))\s*:", re.MULTILINE)
_PY_DEF_LINE = re.compile(r"^([ \t]*)(?:async\s+)?def\s+\w+\s*\([^)]*\)[^:\n]*:[ \t]*(\r?\n)", re.MULTILINE)


def refactor_python(code: str) -> RefactorResult:
    changes: List[Change] = []

    def _add_return_hint(match: "re.Match[str]") -> str:
        indent, signature, _name, params = match.groups()
        if ":" in params:
            return match.group(0)
        replacement = f"{indent}{signature} -> None:"
        changes.append(Change(
            before=match.group(0).strip(),
            after=replacement.strip(),
            reason="Added type hints for better code clarity",
        ))
        return replacement

    refactored = _PY_DEF.sub(_add_return_hint, code)

    if '"""' not in code and "'''" not in code:
        def _add_docstring(match: "re.Match[str]") -> str:
            indent, newline = match.group(1), match.group(2)
            replacement = f"{match.group(0)}{indent}    {PLACEHOLDER_DOCSTRING}{newline}"
            changes.append(Change(
                before=match.group(0).strip(),
                after=replacement.strip(),
                reason="Added docstring for documentation",
            ))
            return replacement

        refactored = _PY_DEF_LINE.sub(_add_docstring, refactored)
    else:
        logger.debug("Docstrings already present; skipping placeholder docstrings")

    return RefactorResult(code=refactored, changes=changes)

# ---------------------------------------------------------------------------
# Rust
# ---------------------------------------------------------------------------

RESULT_RETURN = "-> Result<(), Box<dyn std::error::Error>>"
DERIVE_ATTRIBUTE = "#[derive(Debug, Clone)]"

# Only functions without a declared return type match (``)`` directly before ``{``)
_RS_FN = re.compile(r"\bfn\s+(\w+)\s*(<[^>{]*>)?\s*\(([^)]*)\)\s*\{")
_RS_STRUCT = re.compile(r"^([ \t]*)((?:pub(?:\([^)]*\))?\s+)?struct\s+(\w+))", re.MULTILINE)


def refactor_rust(code: str) -> RefactorResult:
    changes: List[Change] = []

    def _return_result(match: "re.Match[str]") -> str:
        head = match.group(0)[:-1].rstrip()
        replacement = f"{head} {RESULT_RETURN} {{"
        changes.append(Change(
            before=match.group(0),
            after=replacement,
            reason="Added Result type for proper error handling",
        ))
        return replacement

    refactored = _RS_FN.sub(_return_result, code)

    if "#[derive(" not in code:
        def _derive(match: "re.Match[str]") -> str:
            indent, declaration = match.group(1), match.group(2)
            replacement = f"{indent}{DERIVE_ATTRIBUTE}\n{indent}{declaration}"
            changes.append(Change(
                before=declaration,
                after=f"{DERIVE_ATTRIBUTE}\n{declaration}",
                reason="Added derive traits for better functionality",
            ))
            return replacement

        refactored = _RS_STRUCT.sub(_derive, refactored)

    return RefactorResult(code=refactored, changes=changes)


def structural_refactor(code: str, language: str) -> RefactorResult:
    """Run the Stage A pass registered for *language*."""
    from languages import get_bundle

    return get_bundle(language).refactor_pass(code)


__all__ = [
    "structural_refactor",
    "SPDX_HEADER",
    "REENTRANCY_GUARD_IMPORT",
    "PLACEHOLDER_DOCSTRING",
    "RESULT_RETURN",
    "DERIVE_ATTRIBUTE",
    "refactor_solidity",
    "refactor_python",
    "refactor_rust",
]
