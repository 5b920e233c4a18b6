"""CLI entrypoints for modcheck commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .checkers import default_registry
from .errors import ModcheckError
from .logging import configure_logging
from .orchestrator import Orchestrator

EXIT_ISSUES = 1
EXIT_FATAL = 2


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=argparse.SUPPRESS if suppress_default else False,
        help="Increase log verbosity for troubleshooting.",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="modcheck",
        description="Audit multi-module workspaces for layout and dependency hygiene.",
    )
    _add_verbose_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    check_parser = subparsers.add_parser(
        "check",
        help="Run the selected checkers and write the report.",
    )
    _add_verbose_option(check_parser, suppress_default=True)
    check_parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Path to the workspace root (defaults to current directory).",
    )
    check_parser.add_argument(
        "--checkers",
        help="Comma-separated checker ids to run (defaults to all).",
    )
    check_parser.add_argument(
        "--properties",
        help="Comma-separated property names the workspace root must declare.",
    )
    check_parser.add_argument(
        "--format",
        dest="formats",
        action="append",
        help="Report format: html, markdown/md or text. Repeat for several formats.",
    )
    check_parser.add_argument(
        "--output-dir",
        help="Directory for report files (defaults to target/checker-reports).",
    )
    check_parser.add_argument(
        "--timeout",
        type=float,
        help="Per-checker timeout in seconds (defaults to 30).",
    )
    check_parser.add_argument(
        "--fail-on-issue",
        action="store_true",
        default=None,
        help="Exit with status 1 when any issue is detected.",
    )

    list_parser = subparsers.add_parser(
        "list-checkers",
        help="List the available checker ids.",
    )
    _add_verbose_option(list_parser, suppress_default=True)

    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the HTTP service.",
    )
    _add_verbose_option(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="127.0.0.1", help="Interface to bind.")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to listen on.")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for modcheck commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose))

    if args.command == "check":
        orchestrator = Orchestrator()
        try:
            outcome = orchestrator.run(
                args.path,
                checkers=[args.checkers] if args.checkers else None,
                properties=[args.properties] if args.properties else None,
                formats=args.formats,
                fail_on_issue=args.fail_on_issue,
                output_dir=args.output_dir,
                timeout=args.timeout,
                verbose=bool(args.verbose) or None,
            )
        except ModcheckError as exc:
            parser.exit(EXIT_FATAL, f"modcheck check failed: {exc}\n")
        except Exception as exc:  # pragma: no cover - defensive guard
            parser.exit(EXIT_FATAL, f"modcheck check failed: {exc}\nRun with --verbose for more details.\n")

        for warning in outcome.warnings:
            print(f"warning: {warning}")
        for format_name, report_path in outcome.report_paths.items():
            print(f"{format_name} report written to {_relativize(report_path)}")
        if outcome.issue_count:
            print(f"{outcome.issue_count} issue(s) detected")
        else:
            print("No issues detected")
        if outcome.failed:
            parser.exit(EXIT_ISSUES, "Failing because issues were detected (--fail-on-issue).\n")
    elif args.command == "list-checkers":
        for checker_id in default_registry().list_checkers():
            print(checker_id)
    elif args.command == "serve":
        from .service.app import run_service

        run_service(host=args.host, port=args.port)
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(EXIT_FATAL, "Unknown command\n")


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
