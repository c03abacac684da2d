"""
Test scaffold generation: symbol extraction, capability flags and per-language templates.
"""

from testgen.generator import TestScaffoldGenerator, detect_capabilities, extract_symbols
from testgen.models import CapabilityFlags, ScaffoldSymbols, SymbolConvention
from testgen.templates import DEFAULT_CONTRACT_NAME, render_python, render_rust, render_solidity

__all__ = [
    "TestScaffoldGenerator",
    "extract_symbols",
    "detect_capabilities",
    "CapabilityFlags",
    "ScaffoldSymbols",
    "SymbolConvention",
    "DEFAULT_CONTRACT_NAME",
    "render_solidity",
    "render_python",
    "render_rust",
]
