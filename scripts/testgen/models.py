"""
Scaffold Generation Data Models.

Classes:
    SymbolConvention: Per-language naming-convention regexes
    ScaffoldSymbols: Function and type names extracted from source
    CapabilityFlags: Conditional blocks a scaffold should carry
"""

from dataclasses import dataclass
from typing import Pattern, Tuple


@dataclass(frozen=True)
class SymbolConvention:
    """Regexes whose first group captures a symbol name"""

    function_pattern: Pattern[str]
    type_pattern: Pattern[str]
    type_kind: str  # 'contract', 'class', 'struct'


@dataclass(frozen=True)
class ScaffoldSymbols:
    """Symbols a scaffold is generated for, in first-seen order"""

    functions: Tuple[str, ...] = ()
    types: Tuple[str, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.functions and not self.types


@dataclass(frozen=True)
class CapabilityFlags:
    """Which conditional test blocks to emit"""

    post_quantum: bool = False
    reentrancy_guard: bool = False
    async_code: bool = False


__all__ = ["SymbolConvention", "ScaffoldSymbols", "CapabilityFlags"]
