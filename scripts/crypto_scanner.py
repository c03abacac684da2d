#!/usr/bin/env python3
"""
Crypto Vulnerability Scanner Module

Lexical, line-by-line detection of quantum-vulnerable, deprecated and
misused cryptography in Solidity, Python and Rust snippets. Rules come from
``crypto_rules.RULE_REGISTRY``; language-specific flaw rules are selected
through the language capability table.

No syntax tree is built: a rule fires wherever its pattern matches, including
comments and string literals.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional

from crypto_rules import (
    CATEGORY_ORDER,
    PatternRule,
    VULN_IMPLEMENTATION_FLAW,
    rules_for,
    severity_rank,
)

__all__ = ["Location", "Vulnerability", "CryptoScanner"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Location:
    """1-indexed position of a finding"""

    line: int
    column: int


@dataclass(frozen=True)
class Vulnerability:
    """One rule match"""

    type: str  # 'quantum_vulnerable', 'deprecated', 'weak_parameters', 'implementation_flaw'
    severity: str  # 'critical', 'high', 'medium', 'low'
    description: str
    recommendation: str
    location: Location
    rule_id: Optional[str] = None


def _byte_column(line: str, index: int) -> int:
    """Convert a character index into a 1-based UTF-8 byte column."""
    return len(line[:index].encode("utf-8")) + 1


class CryptoScanner:
    """Apply the pattern rule registry to source code.

    Findings are produced one category at a time: every quantum-vulnerable
    match for the whole file, then deprecated matches, then implementation
    flaws. Inside a category slice findings are ordered by severity, then
    line, then column.
    """

    def analyze(self, code: str, language: str) -> List[Vulnerability]:
        """Scan *code* written in *language*.

        Args:
            code: Source text; split on ``\\n`` into 1-indexed lines
            language: Language tag from the detector

        Returns:
            Ordered list of vulnerabilities (may be empty)
        """
        from languages import get_bundle

        bundle = get_bundle(language)
        lines = code.split("\n")
        vulnerabilities: List[Vulnerability] = []

        for category in CATEGORY_ORDER:
            if category == VULN_IMPLEMENTATION_FLAW:
                rules = bundle.flaw_rules
            else:
                rules = rules_for(category)
            found = self._scan_category(lines, rules)
            found.sort(key=lambda v: (severity_rank(v.severity), v.location.line, v.location.column))
            logger.debug("%s: %d %s findings", language, len(found), category)
            vulnerabilities.extend(found)

        return vulnerabilities

    def _scan_category(self, lines: List[str], rules: Iterable[PatternRule]) -> List[Vulnerability]:
        rules = tuple(rules)
        found: List[Vulnerability] = []
        for line_no, line in enumerate(lines, 1):
            for rule in rules:
                found.extend(self._apply_rule(rule, line, line_no))
        return found

    def _apply_rule(self, rule: PatternRule, line: str, line_no: int) -> List[Vulnerability]:
        if rule.context is not None and not rule.context.search(line):
            return []

        if not rule.per_match:
            if not rule.pattern.search(line):
                return []
            return [self._make(rule, Location(line=line_no, column=1))]

        return [
            self._make(rule, Location(line=line_no, column=_byte_column(line, match.start())))
            for match in rule.pattern.finditer(line)
        ]

    @staticmethod
    def _make(rule: PatternRule, location: Location) -> Vulnerability:
        return Vulnerability(
            type=rule.category,
            severity=rule.severity,
            description=rule.description,
            recommendation=rule.recommendation,
            location=location,
            rule_id=rule.rule_id,
        )
