"""
Language Capability Table

Maps each supported language tag to a ``LanguageBundle``: everything the
pipeline needs to know about one surface language. The scanner, rewrite
engine, scaffold generator and simulator look their language up here
instead of branching on the tag, so adding a language means adding one
bundle.

Bundles are consulted in insertion order by the language detector.
"""

import re
from dataclasses import dataclass
from functools import partial
from typing import Callable, Dict, Pattern, Tuple

from crypto_rules import VULN_IMPLEMENTATION_FLAW, PatternRule, rules_for
from exceptions import UnsupportedLanguageError
from language_detector import is_python, is_rust, is_solidity
from rewrite.models import RefactorResult
from rewrite.replacements import PYTHON_SUITE, RUST_SUITE, SOLIDITY_SUITE, replace_classical_crypto
from rewrite.structural import refactor_python, refactor_rust, refactor_solidity
from simulator.models import SimulationProfile
from testgen.models import CapabilityFlags, ScaffoldSymbols, SymbolConvention
from testgen.templates import render_python, render_rust, render_solidity

__all__ = ["LanguageBundle", "LANGUAGE_BUNDLES", "get_bundle", "supported_languages"]


@dataclass(frozen=True)
class LanguageBundle:
    """Per-language capabilities used across the pipeline"""

    name: str
    detect: Callable[[str], bool]
    flaw_rules: Tuple[PatternRule, ...]
    refactor_pass: Callable[[str], RefactorResult]
    replacement_pass: Callable[[str], RefactorResult]
    symbol_convention: SymbolConvention
    scaffold_template: Callable[[ScaffoldSymbols, CapabilityFlags, str], str]
    reentrancy_markers: Tuple[str, ...]
    async_markers: Tuple[str, ...]
    test_name_pattern: Pattern[str]
    simulation_profile: SimulationProfile


SOLIDITY = LanguageBundle(
    name="solidity",
    detect=is_solidity,
    flaw_rules=rules_for(VULN_IMPLEMENTATION_FLAW, "solidity"),
    refactor_pass=refactor_solidity,
    replacement_pass=partial(replace_classical_crypto, suite=SOLIDITY_SUITE),
    symbol_convention=SymbolConvention(
        function_pattern=re.compile(r"\bfunction\s+([a-zA-Z]\w*)\s*\("),
        type_pattern=re.compile(r"\bcontract\s+([a-zA-Z_]\w*)"),
        type_kind="contract",
    ),
    scaffold_template=render_solidity,
    reentrancy_markers=("ReentrancyGuard", "nonReentrant"),
    async_markers=(),
    test_name_pattern=re.compile(r"\bfunction\s+(test\w*)\s*\("),
    simulation_profile=SimulationProfile(
        display_name="Solidity",
        pass_probability=0.9,
        duration_range=(10.0, 110.0),
        coverage_range=(80.0, 100.0),
        error_template="Mock error in {name}: Assertion failed",
    ),
)

PYTHON = LanguageBundle(
    name="python",
    detect=is_python,
    flaw_rules=rules_for(VULN_IMPLEMENTATION_FLAW, "python"),
    refactor_pass=refactor_python,
    replacement_pass=partial(replace_classical_crypto, suite=PYTHON_SUITE),
    symbol_convention=SymbolConvention(
        # Leading-underscore names are private and get no tests
        function_pattern=re.compile(r"\bdef\s+([a-zA-Z]\w*)\s*\("),
        type_pattern=re.compile(r"\bclass\s+([A-Z]\w*)"),
        type_kind="class",
    ),
    scaffold_template=render_python,
    reentrancy_markers=(),
    async_markers=("async def", "await "),
    test_name_pattern=re.compile(r"\bdef\s+(test_\w*)\s*\("),
    simulation_profile=SimulationProfile(
        display_name="Python",
        pass_probability=0.95,
        duration_range=(5.0, 55.0),
        coverage_range=(85.0, 100.0),
        error_template="AssertionError in {name}: Expected value did not match actual",
    ),
)

RUST = LanguageBundle(
    name="rust",
    detect=is_rust,
    flaw_rules=rules_for(VULN_IMPLEMENTATION_FLAW, "rust"),
    refactor_pass=refactor_rust,
    replacement_pass=partial(replace_classical_crypto, suite=RUST_SUITE),
    symbol_convention=SymbolConvention(
        function_pattern=re.compile(r"\bfn\s+([a-z]\w*)\s*[<(]"),
        type_pattern=re.compile(r"\bstruct\s+([A-Z]\w*)"),
        type_kind="struct",
    ),
    scaffold_template=render_rust,
    reentrancy_markers=(),
    async_markers=("async fn", ".await"),
    test_name_pattern=re.compile(r"#\[test\]\s*fn\s+(\w+)\s*\("),
    simulation_profile=SimulationProfile(
        display_name="Rust",
        pass_probability=0.98,
        duration_range=(2.0, 32.0),
        coverage_range=(90.0, 100.0),
        error_template="panic in {name}: assertion failed",
    ),
)

# Detection order matters: the first matching predicate wins
LANGUAGE_BUNDLES: Dict[str, LanguageBundle] = {
    bundle.name: bundle for bundle in (SOLIDITY, PYTHON, RUST)
}


def get_bundle(language: str) -> LanguageBundle:
    """Return the bundle for *language*.

    Raises:
        UnsupportedLanguageError: For tags without a bundle
    """
    try:
        return LANGUAGE_BUNDLES[language]
    except KeyError:
        raise UnsupportedLanguageError(
            f"Unsupported language: {language!r}. Supported: {', '.join(LANGUAGE_BUNDLES)}"
        ) from None


def supported_languages() -> Tuple[str, ...]:
    return tuple(LANGUAGE_BUNDLES)
