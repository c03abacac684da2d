"""
Pattern Rule Registry

Flat, process-wide table of lexical rules flagging quantum-vulnerable,
deprecated and flawed cryptographic usage. Every rule is a tagged record
(``PatternRule``) rather than a subclass; the scanner selects rules by
category and language.

Categories:
    quantum_vulnerable   - algorithms broken or weakened by Shor/Grover
    deprecated           - classically broken hashes, ciphers and protocols
    implementation_flaw  - language-specific misuse (one bundle per language)
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Pattern, Tuple

__all__ = [
    "SEVERITY_ORDER",
    "VULN_QUANTUM",
    "VULN_DEPRECATED",
    "VULN_WEAK_PARAMETERS",
    "VULN_IMPLEMENTATION_FLAW",
    "CATEGORY_ORDER",
    "PatternRule",
    "RULE_REGISTRY",
    "severity_for",
    "recommendation_for",
    "rules_for",
    "severity_rank",
]

# Total order: critical > high > medium > low
SEVERITY_ORDER: Tuple[str, ...] = ("critical", "high", "medium", "low")

VULN_QUANTUM = "quantum_vulnerable"
VULN_DEPRECATED = "deprecated"
VULN_WEAK_PARAMETERS = "weak_parameters"
VULN_IMPLEMENTATION_FLAW = "implementation_flaw"

# Scan order of the categories; findings are emitted one slice per category.
CATEGORY_ORDER: Tuple[str, ...] = (VULN_QUANTUM, VULN_DEPRECATED, VULN_IMPLEMENTATION_FLAW)

# Severity per quantum-vulnerable algorithm class
_CLASS_SEVERITY = {
    "signature": "critical",
    "key_exchange": "critical",
    "hash": "high",
    "symmetric": "medium",
}

_CLASS_RECOMMENDATION = {
    "hash": "Replace with SPHINCS+ hash functions or SHAKE-256 for quantum resistance",
    "signature": "Migrate to Dilithium or Falcon post-quantum signature schemes",
    "key_exchange": "Implement Kyber key encapsulation mechanism for quantum-safe key exchange",
    "symmetric": "Use AES-256 with post-quantum key derivation functions",
}


def severity_for(algorithm_class: str) -> str:
    """Severity assigned to a quantum-vulnerable algorithm class."""
    return _CLASS_SEVERITY.get(algorithm_class, "low")


def recommendation_for(algorithm_class: str) -> str:
    """Migration advice for a quantum-vulnerable algorithm class."""
    return _CLASS_RECOMMENDATION.get(algorithm_class, "Consider post-quantum alternatives")


def severity_rank(severity: str) -> int:
    """Sort key: 0 for critical up to 3 for low; unknown severities sort last."""
    try:
        return SEVERITY_ORDER.index(severity)
    except ValueError:
        return len(SEVERITY_ORDER)


@dataclass(frozen=True)
class PatternRule:
    """A single lexical rule.

    ``pattern`` is searched on each source line. When ``per_match`` is true
    every non-overlapping match yields a finding at the match column;
    otherwise the rule fires at most once per line, at column 1.
    ``context`` is an optional second pattern that must also occur on the
    line. ``language`` restricts the rule to one language bundle.
    """

    rule_id: str
    pattern: Pattern[str]
    category: str
    algorithm_class: str
    severity: str
    description: str
    recommendation: str
    language: Optional[str] = None
    context: Optional[Pattern[str]] = None
    per_match: bool = True

    def applies_to(self, language: str) -> bool:
        return self.language is None or self.language == language


def _quantum(rule_id: str, regex: str, algorithm_class: str, weakness: str) -> PatternRule:
    return PatternRule(
        rule_id=rule_id,
        pattern=re.compile(regex, re.IGNORECASE),
        category=VULN_QUANTUM,
        algorithm_class=algorithm_class,
        severity=severity_for(algorithm_class),
        description=f"{algorithm_class.upper()} algorithm detected: {weakness}",
        recommendation=recommendation_for(algorithm_class),
    )


def _deprecated(rule_id: str, regex: str, algorithm_class: str, reason: str) -> PatternRule:
    return PatternRule(
        rule_id=rule_id,
        pattern=re.compile(regex, re.IGNORECASE),
        category=VULN_DEPRECATED,
        algorithm_class=algorithm_class,
        severity="high",
        description=f"Deprecated cryptographic function detected: {reason}",
        recommendation="Replace with modern, quantum-resistant alternatives",
    )


def _flaw(
    rule_id: str,
    language: str,
    regex: str,
    severity: str,
    description: str,
    recommendation: str,
    context: Optional[str] = None,
    flags: int = 0,
) -> PatternRule:
    return PatternRule(
        rule_id=rule_id,
        pattern=re.compile(regex, flags),
        category=VULN_IMPLEMENTATION_FLAW,
        algorithm_class="implementation",
        severity=severity,
        description=description,
        recommendation=recommendation,
        language=language,
        context=re.compile(context, re.IGNORECASE) if context else None,
        per_match=False,
    )


_CRYPTO_CONTEXT = r"crypto|hash|sign"

RULE_REGISTRY: Tuple[PatternRule, ...] = (
    # -- Quantum-vulnerable algorithm families --
    _quantum("QV-HASH", r"keccak256|sha256|sha3", "hash", "Grover's algorithm reduces security"),
    _quantum("QV-SIG", r"ecrecover|ecdsa|secp256k1", "signature", "Shor's algorithm breaks ECDSA"),
    _quantum("QV-KEX", r"rsa|dh|ecdh", "key_exchange", "Shor's algorithm breaks RSA/DH"),
    _quantum("QV-SYM", r"aes(?!.*256)|des|3des", "symmetric", "Insufficient key length for quantum era"),

    # -- Deprecated algorithms and protocol versions --
    _deprecated("DEP-HASH", r"md5|sha1", "hash", "Cryptographically broken hash functions"),
    _deprecated("DEP-CIPHER", r"rc4|des(?!.*3)", "symmetric", "Deprecated symmetric encryption algorithms"),
    _deprecated("DEP-PROTO", r"ssl(?!.*3)|tls.*1\.[01]", "protocol", "Deprecated protocol versions"),

    # -- Solidity implementation flaws --
    _flaw(
        "SOL-RANDOMNESS", "solidity", r"block\.timestamp|block\.difficulty", "critical",
        "Weak randomness source detected - blockchain parameters are predictable",
        "Use commit-reveal schemes or oracle-based randomness with post-quantum signatures",
    ),
    _flaw(
        "SOL-PUBLIC-CRYPTO", "solidity", r"function.*public|public.*function", "medium",
        "Public cryptographic function without access controls",
        "Add proper access modifiers and consider post-quantum alternatives",
        context=r"keccak|sha|sign",
    ),

    # -- Python implementation flaws --
    _flaw(
        "PY-HARDCODED-SECRET", "python", r"""(secret|key|password)\w*\s*=\s*["'][^"']+["']""", "critical",
        "Hardcoded cryptographic secret detected",
        "Use environment variables or secure key management systems",
        flags=re.IGNORECASE,
    ),
    _flaw(
        "PY-WEAK-RNG", "python", r"random\.random\(\)|random\.randint", "high",
        "Weak random number generator for cryptographic use",
        "Use secrets module or post-quantum secure random number generation",
    ),

    # -- Rust implementation flaws --
    _flaw(
        "RS-UNSAFE-CRYPTO", "rust", r"unsafe", "high",
        "Unsafe block in cryptographic code",
        "Avoid unsafe operations in cryptographic contexts, use safe post-quantum libraries",
        context=_CRYPTO_CONTEXT,
    ),
    _flaw(
        "RS-UNWRAP-CRYPTO", "rust", r"\.unwrap\(\)", "medium",
        "Panic-prone error handling in cryptographic code",
        "Use proper error handling with Result types for cryptographic operations",
        context=_CRYPTO_CONTEXT,
    ),
)


def rules_for(category: str, language: Optional[str] = None) -> Tuple[PatternRule, ...]:
    """Return registry rules of *category* applicable to *language*, in table order."""
    return tuple(
        rule for rule in RULE_REGISTRY
        if rule.category == category and (language is None or rule.applies_to(language))
    )
