#!/usr/bin/env python3
"""CLI entry point for QShield.

Runs one of the three core operations on a source file (or stdin) and
prints the result as markdown, JSON or SARIF.

Exit codes:
    0  success
    1  a finding matched ``--fail-on``
    2  invalid input or configuration
    3  internal pipeline failure
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from config_loader import build_unified_config, list_available_profiles, parse_fail_on, validate_config
from exceptions import ConfigError, InputError, InternalError
from quantum_api import analyze_code, generate_tests, refactor_code
from security_report import convert_to_sarif

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FINDINGS = 1
EXIT_INPUT_ERROR = 2
EXIT_INTERNAL_ERROR = 3

_EXTENSIONS = {"json": "json", "markdown": "md", "sarif": "sarif"}


def _read_source(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    path = Path(source)
    if not path.is_file():
        raise InputError(f"No such file: {source}")
    try:
        return path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise InputError(f"Not a UTF-8 text file: {source}") from e
    except OSError as e:
        raise InputError(f"Cannot read {source}: {e.strerror or e}") from e


def _render_markdown(command: str, response) -> str:
    if command == "analyze":
        lines = [response.security_report, "\n## Recommendations\n"]
        lines.extend(f"- {item}\n" for item in response.recommendations)
        return "".join(lines)

    if command == "refactor":
        lines = [f"# Refactored {response.language} code\n\n", f"{response.summary}\n\n"]
        lines.append(f"```{response.language}\n{response.refactored_code}\n```\n\n")
        lines.append("## Changes\n\n")
        for change in response.changes:
            lines.append(f"- **{change.reason}**: `{change.before}` → `{change.after}`\n")
        lines.append("\n")
        lines.append(response.security_report)
        lines.append(f"\n## Generated Tests\n\n```{response.language}\n{response.test_suite_text}\n```\n")
        if response.test_report:
            lines.append("\n" + response.test_report)
        return "".join(lines)

    lines = [f"```{response.language}\n{response.test_suite_text}\n```\n"]
    if response.test_report:
        lines.append("\n" + response.test_report)
    return "".join(lines)


def _render(command: str, response, output_format: str, source: str) -> str:
    if output_format == "sarif":
        if command == "test":
            logger.warning("SARIF output has no findings for the test command; writing JSON instead")
            return response.model_dump_json(indent=2)
        return json.dumps(convert_to_sarif(response.vulnerabilities, source), indent=2)
    if output_format == "json":
        return response.model_dump_json(indent=2)
    return _render_markdown(command, response)


def _write_output(text: str, command: str, output_format: str, output_dir: str) -> None:
    if not output_dir:
        sys.stdout.write(text)
        if not text.endswith("\n"):
            sys.stdout.write("\n")
        return
    directory = Path(output_dir)
    directory.mkdir(parents=True, exist_ok=True)
    target = directory / f"qshield-{command}.{_EXTENSIONS.get(output_format, 'txt')}"
    target.write_text(text, encoding="utf-8")
    logger.info("💾 Results written to %s", target)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="qshield",
        description="QShield - Detect quantum-vulnerable cryptography and migrate it to post-quantum primitives",
    )
    parser.add_argument("--profile", default=None, help="Configuration profile (see --list-profiles)")
    parser.add_argument("--list-profiles", action="store_true", help="List available profiles and exit")
    parser.add_argument(
        "--format", choices=sorted(_EXTENSIONS), default=None,
        help="Output format (default: markdown)",
    )
    parser.add_argument("--output-dir", default=None, help="Write results to this directory instead of stdout")
    parser.add_argument("--fail-on", default=None, help="Comma-separated severities that cause exit status 1")
    parser.add_argument("--log-level", default=None, help="Logging level (default: INFO)")
    parser.add_argument("--max-code-size", type=int, default=None, help="Maximum input size in characters")

    subparsers = parser.add_subparsers(dest="command")

    analyze = subparsers.add_parser("analyze", help="Scan code for quantum-vulnerable cryptography")
    analyze.add_argument("source", help="Source file, or - for stdin")

    refactor = subparsers.add_parser("refactor", help="Rewrite code toward post-quantum primitives")
    refactor.add_argument("source", help="Source file, or - for stdin")
    refactor.add_argument("--execute", action="store_true", default=None, help="Simulate running the generated tests")
    refactor.add_argument("--seed", type=int, default=None, help="Seed for reproducible simulated test runs")
    refactor.add_argument(
        "--no-structural-refactor", dest="structural_refactor", action="store_false", default=None,
        help="Skip the structural refactor stage",
    )
    refactor.add_argument(
        "--no-pq-replacement", dest="pq_replacement", action="store_false", default=None,
        help="Skip the post-quantum replacement stage",
    )
    refactor.add_argument(
        "--no-test-report", dest="test_report", action="store_false", default=None,
        help="Do not render a report for simulated test runs",
    )

    test = subparsers.add_parser("test", help="Generate (and optionally simulate) a test suite")
    test.add_argument("source", help="Source file, or - for stdin")
    test.add_argument("--execute", action="store_true", default=None, help="Simulate running the generated tests")
    test.add_argument("--seed", type=int, default=None, help="Seed for reproducible simulated test runs")
    test.add_argument(
        "--no-test-report", dest="test_report", action="store_false", default=None,
        help="Do not render a report for simulated test runs",
    )

    return parser


def main(argv=None) -> int:
    """CLI entry point for QShield"""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.list_profiles:
        for name in list_available_profiles():
            print(name)
        return EXIT_OK

    if not args.command:
        parser.print_help()
        return EXIT_INPUT_ERROR

    try:
        config = build_unified_config(cli_args=args)
    except ConfigError as e:
        print(f"❌ Configuration error: {e}", file=sys.stderr)
        return EXIT_INPUT_ERROR

    logging.basicConfig(
        level=getattr(logging, str(config["log_level"]).upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    issues = validate_config(config)
    for issue in issues:
        logger.warning(issue)
    if any(issue.startswith("ERROR") for issue in issues):
        return EXIT_INPUT_ERROR

    try:
        code = _read_source(args.source)
        if args.command == "analyze":
            response = analyze_code(code, config=config)
        elif args.command == "refactor":
            response = refactor_code(code, config=config)
        else:
            response = generate_tests(code, execute=bool(config["execute_tests"]), config=config)
    except InputError as e:
        print(f"❌ Invalid input: {e}", file=sys.stderr)
        return EXIT_INPUT_ERROR
    except InternalError as e:
        print(f"❌ Internal error in {e.stage or 'pipeline'}: {e}", file=sys.stderr)
        return EXIT_INTERNAL_ERROR

    output_format = config["output_format"]
    _write_output(_render(args.command, response, output_format, args.source), args.command, output_format,
                  config["output_dir"])

    fail_on = set(parse_fail_on(config["fail_on"]))
    vulnerabilities = getattr(response, "vulnerabilities", [])
    if fail_on and any(v.severity in fail_on for v in vulnerabilities):
        logger.warning("Findings at severity %s present; failing", ", ".join(sorted(fail_on)))
        return EXIT_FINDINGS

    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
