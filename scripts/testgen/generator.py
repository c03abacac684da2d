#!/usr/bin/env python3
"""
Test Scaffold Generator

Turns (refactored) source code into the text of a test suite in the
framework idiom of its language: Foundry for Solidity, pytest for Python
and ``cargo test`` for Rust. Symbols are found by naming convention only;
no parsing is attempted.
"""

import logging
from typing import Iterable, List, Tuple

from pq_primitives import pq_markers
from testgen.models import CapabilityFlags, ScaffoldSymbols, SymbolConvention

__all__ = ["extract_symbols", "detect_capabilities", "TestScaffoldGenerator"]

logger = logging.getLogger(__name__)


def _unique(names: Iterable[str]) -> Tuple[str, ...]:
    seen: List[str] = []
    for name in names:
        if name not in seen:
            seen.append(name)
    return tuple(seen)


def extract_symbols(code: str, convention: SymbolConvention) -> ScaffoldSymbols:
    """Collect function and type names matching *convention*, deduplicated."""
    return ScaffoldSymbols(
        functions=_unique(m.group(1) for m in convention.function_pattern.finditer(code)),
        types=_unique(m.group(1) for m in convention.type_pattern.finditer(code)),
    )


def detect_capabilities(code: str, language: str,
                        reentrancy_markers: Iterable[str] = (),
                        async_markers: Iterable[str] = ()) -> CapabilityFlags:
    """Substring checks deciding the conditional scaffold blocks."""
    return CapabilityFlags(
        post_quantum=any(marker in code for marker in pq_markers(language)),
        reentrancy_guard=any(marker in code for marker in reentrancy_markers),
        async_code=any(marker in code for marker in async_markers),
    )


class TestScaffoldGenerator:
    """Generate a language-appropriate test-suite text for source code."""

    __test__ = False  # not a pytest test class

    def generate(self, code: str, language: str) -> str:
        """Return the scaffold text; never empty.

        Raises:
            UnsupportedLanguageError: If *language* has no capability bundle
        """
        from languages import get_bundle

        bundle = get_bundle(language)
        symbols = extract_symbols(code, bundle.symbol_convention)
        flags = detect_capabilities(
            code, language,
            reentrancy_markers=bundle.reentrancy_markers,
            async_markers=bundle.async_markers,
        )
        logger.info(
            "Generating %s scaffold: %d functions, %d %s symbols (pq=%s, reentrancy=%s, async=%s)",
            language, len(symbols.functions), len(symbols.types), bundle.symbol_convention.type_kind,
            flags.post_quantum, flags.reentrancy_guard, flags.async_code,
        )
        return bundle.scaffold_template(symbols, flags, code)
