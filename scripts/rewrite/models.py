"""
Rewrite Data Models.

Classes:
    Change: One entry of the change ledger
    RefactorResult: Rewritten code plus its change ledger
"""

from dataclasses import dataclass, field
from typing import List


@dataclass(frozen=True)
class Change:
    """A before/after record produced by a rewrite pass"""

    before: str
    after: str
    reason: str


@dataclass(frozen=True)
class RefactorResult:
    """Output of a rewrite stage (or of both stages combined)"""

    code: str
    changes: List[Change] = field(default_factory=list)


__all__ = ["Change", "RefactorResult"]
