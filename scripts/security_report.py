"""
Security Report Module

Pure renderers over a list of ``Vulnerability`` findings: severity summary,
quantum-readiness verdict, recommendations, a markdown report and a SARIF
2.1.0 document for code-scanning integrations.

Functions:
    summarize: Counts, verdict and risk level
    build_recommendations: Follow-up actions derived from the finding types
    generate_security_report: Markdown report
    convert_to_sarif: SARIF-formatted results
    severity_to_sarif_level: Map a severity to a SARIF level
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Sequence

from crypto_rules import (
    RULE_REGISTRY,
    SEVERITY_ORDER,
    VULN_DEPRECATED,
    VULN_IMPLEMENTATION_FLAW,
    VULN_QUANTUM,
)
from crypto_scanner import Vulnerability

__all__ = [
    "AnalysisSummary",
    "MIGRATION_PRIORITY",
    "summarize",
    "risk_level",
    "build_recommendations",
    "generate_security_report",
    "convert_to_sarif",
    "severity_to_sarif_level",
    "severities_at_or_above",
]

# Emitted in every report, regardless of what was found
MIGRATION_PRIORITY = (
    "**Immediate**: Replace quantum-vulnerable signatures (ECDSA → Dilithium)",
    "**High**: Upgrade key exchange mechanisms (DH/ECDH → Kyber)",
    "**Medium**: Enhance hash functions (SHA-256 → SPHINCS+/SHAKE-256)",
    "**Low**: Update symmetric encryption key lengths",
)


@dataclass(frozen=True)
class AnalysisSummary:
    """Aggregate view of one scan"""

    total_issues: int
    critical_count: int
    high_count: int
    medium_count: int
    low_count: int
    quantum_vulnerable: int
    deprecated: int
    implementation_flaws: int
    quantum_ready: bool
    risk_level: str  # 'critical', 'high', 'medium', 'low'


def _count(vulnerabilities: Sequence[Vulnerability], **criteria: str) -> int:
    return sum(
        1 for v in vulnerabilities
        if all(getattr(v, attr) == value for attr, value in criteria.items())
    )


def risk_level(critical: int, high: int, medium: int) -> str:
    if critical > 0:
        return "critical"
    if high > 0:
        return "high"
    if medium > 0:
        return "medium"
    return "low"


def summarize(vulnerabilities: Sequence[Vulnerability]) -> AnalysisSummary:
    """Per-severity and per-type counts plus the quantum-readiness verdict.

    Quantum-ready means no critical and no high finding.
    """
    critical = _count(vulnerabilities, severity="critical")
    high = _count(vulnerabilities, severity="high")
    medium = _count(vulnerabilities, severity="medium")
    low = _count(vulnerabilities, severity="low")
    return AnalysisSummary(
        total_issues=len(vulnerabilities),
        critical_count=critical,
        high_count=high,
        medium_count=medium,
        low_count=low,
        quantum_vulnerable=_count(vulnerabilities, type=VULN_QUANTUM),
        deprecated=_count(vulnerabilities, type=VULN_DEPRECATED),
        implementation_flaws=_count(vulnerabilities, type=VULN_IMPLEMENTATION_FLAW),
        quantum_ready=critical == 0 and high == 0,
        risk_level=risk_level(critical, high, medium),
    )


def build_recommendations(summary: AnalysisSummary) -> List[str]:
    recommendations = []
    if summary.quantum_vulnerable > 0:
        recommendations.append("Immediate migration to post-quantum cryptography required")
    if summary.deprecated > 0:
        recommendations.append("Replace deprecated cryptographic functions")
    if summary.implementation_flaws > 0:
        recommendations.append("Fix implementation security flaws")
    if summary.total_issues == 0:
        recommendations.append("Code appears to be quantum-ready")
    return recommendations


def generate_security_report(vulnerabilities: Sequence[Vulnerability]) -> str:
    """Render *vulnerabilities* as a markdown report.

    Detail blocks follow the input order.
    """
    summary = summarize(vulnerabilities)

    report = []
    report.append("# Cryptographic Security Analysis Report\n\n")

    report.append("## Summary\n")
    report.append(f"- **Critical Issues**: {summary.critical_count}\n")
    report.append(f"- **High Severity**: {summary.high_count}\n")
    report.append(f"- **Medium Severity**: {summary.medium_count}\n")
    report.append(f"- **Low Severity**: {summary.low_count}\n\n")

    report.append("## Quantum Readiness Assessment\n")
    if summary.quantum_ready:
        report.append("✅ **QUANTUM READY** - No critical vulnerabilities found\n\n")
    else:
        report.append("❌ **NOT QUANTUM READY** - Critical vulnerabilities detected\n\n")

    report.append("## Post-Quantum Migration Priority\n")
    for step, text in enumerate(MIGRATION_PRIORITY, 1):
        report.append(f"{step}. {text}\n")
    report.append("\n")

    report.append("## Detailed Findings\n")
    for i, v in enumerate(vulnerabilities, 1):
        report.append(f"\n### Issue {i}: {v.description}\n")
        report.append(f"- **Severity**: {v.severity.upper()}\n")
        report.append(f"- **Type**: {v.type.replace('_', ' ').upper()}\n")
        report.append(f"- **Location**: Line {v.location.line}, Column {v.location.column}\n")
        report.append(f"- **Recommendation**: {v.recommendation}\n")

    return "".join(report)


def convert_to_sarif(vulnerabilities: Sequence[Vulnerability], target_path: str = "stdin") -> Dict[str, Any]:
    """Convert findings to SARIF format for GitHub Code Scanning.

    Args:
        vulnerabilities: Scanner output
        target_path: Artifact URI reported for every result

    Returns:
        Dictionary containing SARIF-formatted results
    """
    used_rules = {v.rule_id for v in vulnerabilities if v.rule_id}
    rules = [
        {
            "id": rule.rule_id,
            "shortDescription": {"text": rule.description},
            "help": {"text": rule.recommendation},
            "properties": {"category": rule.category, "severity": rule.severity},
        }
        for rule in RULE_REGISTRY
        if rule.rule_id in used_rules
    ]

    sarif: Dict[str, Any] = {
        "version": "2.1.0",
        "$schema": "https://raw.githubusercontent.com/oasis-tcs/sarif-spec/master/Schemata/sarif-schema-2.1.0.json",
        "runs": [
            {
                "tool": {
                    "driver": {
                        "name": "QShield Post-Quantum Scanner",
                        "version": "1.0.0",
                        "rules": rules,
                    }
                },
                "results": [],
            }
        ],
    }

    for v in vulnerabilities:
        sarif_result = {
            "ruleId": v.rule_id or v.type,
            "level": severity_to_sarif_level(v.severity),
            "message": {"text": f"{v.description}. {v.recommendation}"},
            "locations": [
                {
                    "physicalLocation": {
                        "artifactLocation": {"uri": target_path},
                        "region": {"startLine": v.location.line, "startColumn": v.location.column},
                    }
                }
            ],
            "properties": {"type": v.type, "severity": v.severity},
        }
        sarif["runs"][0]["results"].append(sarif_result)

    return sarif


def severity_to_sarif_level(severity: str) -> str:
    """Convert severity to SARIF level (error, warning, note)."""
    mapping = {"critical": "error", "high": "error", "medium": "warning", "low": "note"}
    return mapping.get(severity.lower(), "warning")


def severities_at_or_above(threshold: str) -> List[str]:
    """Severities ranked at least as high as *threshold*."""
    if threshold not in SEVERITY_ORDER:
        raise ValueError(f"Unknown severity '{threshold}'. Must be one of: {', '.join(SEVERITY_ORDER)}")
    return list(SEVERITY_ORDER[: SEVERITY_ORDER.index(threshold) + 1])
