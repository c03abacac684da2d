"""
Tests for the security report renderers: summary counts, readiness verdict,
recommendations, markdown layout and SARIF output.
"""

import json
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "scripts"))

from crypto_rules import VULN_DEPRECATED, VULN_IMPLEMENTATION_FLAW, VULN_QUANTUM
from crypto_scanner import CryptoScanner, Location, Vulnerability
from security_report import (
    MIGRATION_PRIORITY,
    build_recommendations,
    convert_to_sarif,
    generate_security_report,
    risk_level,
    severities_at_or_above,
    severity_to_sarif_level,
    summarize,
)


def _vuln(type_=VULN_QUANTUM, severity="high", line=1, column=1, rule_id="QV-HASH", description="desc"):
    return Vulnerability(
        type=type_,
        severity=severity,
        description=description,
        recommendation="Fix it",
        location=Location(line=line, column=column),
        rule_id=rule_id,
    )


# ============================================================================
# summarize / risk_level
# ============================================================================


class TestSummarize:
    def test_empty(self):
        summary = summarize([])
        assert summary.total_issues == 0
        assert summary.quantum_ready is True
        assert summary.risk_level == "low"

    def test_counts_by_severity_and_type(self):
        vulns = [
            _vuln(severity="critical", rule_id="QV-SIG"),
            _vuln(severity="high"),
            _vuln(type_=VULN_DEPRECATED, severity="high", rule_id="DEP-HASH"),
            _vuln(type_=VULN_IMPLEMENTATION_FLAW, severity="medium", rule_id="RS-UNWRAP-CRYPTO"),
        ]
        summary = summarize(vulns)
        assert summary.total_issues == 4
        assert summary.critical_count == 1
        assert summary.high_count == 2
        assert summary.medium_count == 1
        assert summary.low_count == 0
        assert summary.quantum_vulnerable == 2
        assert summary.deprecated == 1
        assert summary.implementation_flaws == 1
        assert summary.quantum_ready is False
        assert summary.risk_level == "critical"

    def test_high_only_is_not_quantum_ready(self):
        summary = summarize([_vuln(severity="high")])
        assert summary.quantum_ready is False
        assert summary.risk_level == "high"

    def test_medium_only_is_quantum_ready(self):
        summary = summarize([_vuln(severity="medium", rule_id="QV-SYM")])
        assert summary.quantum_ready is True
        assert summary.risk_level == "medium"

    @pytest.mark.parametrize("counts,expected", [
        ((1, 5, 5), "critical"),
        ((0, 1, 5), "high"),
        ((0, 0, 1), "medium"),
        ((0, 0, 0), "low"),
    ])
    def test_risk_level(self, counts, expected):
        assert risk_level(*counts) == expected


class TestBuildRecommendations:
    def test_clean_code(self):
        assert build_recommendations(summarize([])) == ["Code appears to be quantum-ready"]

    def test_all_categories(self):
        vulns = [
            _vuln(),
            _vuln(type_=VULN_DEPRECATED, rule_id="DEP-HASH"),
            _vuln(type_=VULN_IMPLEMENTATION_FLAW, rule_id="PY-WEAK-RNG"),
        ]
        assert build_recommendations(summarize(vulns)) == [
            "Immediate migration to post-quantum cryptography required",
            "Replace deprecated cryptographic functions",
            "Fix implementation security flaws",
        ]

    def test_deprecated_only(self):
        recs = build_recommendations(summarize([_vuln(type_=VULN_DEPRECATED, rule_id="DEP-HASH")]))
        assert recs == ["Replace deprecated cryptographic functions"]


# ============================================================================
# Markdown report
# ============================================================================


class TestGenerateSecurityReport:
    def test_empty_report_sections(self):
        report = generate_security_report([])
        assert report.startswith("# Cryptographic Security Analysis Report\n\n")
        assert "- **Critical Issues**: 0\n" in report
        assert "- **Low Severity**: 0\n" in report
        assert "✅ **QUANTUM READY** - No critical vulnerabilities found" in report
        assert report.rstrip().endswith("## Detailed Findings")
        assert "### Issue" not in report

    def test_migration_priority_always_present(self):
        report = generate_security_report([])
        for step, text in enumerate(MIGRATION_PRIORITY, 1):
            assert f"{step}. {text}\n" in report

    def test_not_ready_verdict(self):
        report = generate_security_report([_vuln(severity="critical", rule_id="QV-SIG")])
        assert "❌ **NOT QUANTUM READY** - Critical vulnerabilities detected" in report

    def test_detail_block(self):
        vuln = _vuln(
            type_=VULN_IMPLEMENTATION_FLAW, severity="critical", line=4, column=1,
            rule_id="SOL-RANDOMNESS", description="Weak randomness",
        )
        report = generate_security_report([vuln])
        assert "### Issue 1: Weak randomness\n" in report
        assert "- **Severity**: CRITICAL\n" in report
        assert "- **Type**: IMPLEMENTATION FLAW\n" in report
        assert "- **Location**: Line 4, Column 1\n" in report
        assert "- **Recommendation**: Fix it\n" in report

    def test_detail_blocks_follow_input_order(self):
        vulns = [_vuln(description="first"), _vuln(description="second")]
        report = generate_security_report(vulns)
        assert report.index("### Issue 1: first") < report.index("### Issue 2: second")

    def test_from_scanner_output(self):
        vulns = CryptoScanner().analyze("bytes32 h = keccak256(data);", "solidity")
        report = generate_security_report(vulns)
        assert "- **High Severity**: 1\n" in report
        assert "- **Location**: Line 1, Column 13\n" in report


# ============================================================================
# SARIF
# ============================================================================


class TestSarif:
    def test_empty_document(self):
        sarif = convert_to_sarif([])
        assert sarif["version"] == "2.1.0"
        run = sarif["runs"][0]
        assert run["tool"]["driver"]["name"] == "QShield Post-Quantum Scanner"
        assert run["tool"]["driver"]["rules"] == []
        assert run["results"] == []

    def test_result_fields(self):
        sarif = convert_to_sarif([_vuln(severity="medium", line=3, column=9, rule_id="QV-SYM")], target_path="Vault.sol")
        result = sarif["runs"][0]["results"][0]
        assert result["ruleId"] == "QV-SYM"
        assert result["level"] == "warning"
        location = result["locations"][0]["physicalLocation"]
        assert location["artifactLocation"]["uri"] == "Vault.sol"
        assert location["region"] == {"startLine": 3, "startColumn": 9}

    def test_only_used_rules_listed(self):
        sarif = convert_to_sarif([_vuln(rule_id="QV-HASH"), _vuln(rule_id="QV-HASH")])
        rule_ids = [rule["id"] for rule in sarif["runs"][0]["tool"]["driver"]["rules"]]
        assert rule_ids == ["QV-HASH"]

    def test_missing_rule_id_falls_back_to_type(self):
        sarif = convert_to_sarif([_vuln(rule_id=None)])
        assert sarif["runs"][0]["results"][0]["ruleId"] == VULN_QUANTUM

    def test_json_serializable(self):
        sarif = convert_to_sarif([_vuln()])
        assert json.loads(json.dumps(sarif)) == sarif

    @pytest.mark.parametrize("severity,level", [
        ("critical", "error"),
        ("high", "error"),
        ("medium", "warning"),
        ("low", "note"),
        ("CRITICAL", "error"),
        ("unknown", "warning"),
    ])
    def test_severity_to_sarif_level(self, severity, level):
        assert severity_to_sarif_level(severity) == level


class TestSeveritiesAtOrAbove:
    def test_thresholds(self):
        assert severities_at_or_above("critical") == ["critical"]
        assert severities_at_or_above("medium") == ["critical", "high", "medium"]
        assert severities_at_or_above("low") == ["critical", "high", "medium", "low"]

    def test_unknown(self):
        with pytest.raises(ValueError, match="Unknown severity"):
            severities_at_or_above("urgent")
