"""CLI entry point: ``sourcemap-doctor EVENT_ID``."""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from sourcemap_doctor import __version__
from sourcemap_doctor.config import Settings
from sourcemap_doctor.constants import CONTEXT_RULE, StepProgress
from sourcemap_doctor.diagnosis.pipeline import PipelineOutcome, run_diagnosis
from sourcemap_doctor.diagnosis.result import Diagnostic
from sourcemap_doctor.logging_config import setup_logging
from sourcemap_doctor.services.events import StepEvent

EXIT_OK = 0
EXIT_DIAGNOSTIC = 1
EXIT_USAGE = 2

_MARKS = {
    StepProgress.DONE: "✔",
    StepProgress.WARNING: "⚠",
    StepProgress.ERROR: "✖",
}


def main() -> None:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args()

    if args.version:
        print(f"sourcemap-doctor {__version__}")
        return

    sys.exit(_run_diagnose(args))


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="sourcemap-doctor",
        description=(
            "Explain why an error event's stack trace does not "
            "resolve through uploaded source maps."
        ),
    )
    parser.add_argument(
        "--version",
        action="store_true",
        help="Print version and exit",
    )
    parser.add_argument(
        "event_id",
        nargs="?",
        default=None,
        help="Event to diagnose (default: EVENT_ID from environment)",
    )
    parser.add_argument(
        "--org",
        "-o",
        default=None,
        help="Organization slug (default: ORGANIZATION)",
    )
    parser.add_argument(
        "--project",
        "-p",
        default=None,
        help="Project slug (default: PROJECT)",
    )
    parser.add_argument(
        "--base-url",
        default=None,
        help="API base URL (default: https://sentry.io/api/0/)",
    )
    parser.add_argument(
        "--check-already-mapped",
        action="store_true",
        default=None,
        help="Stop if the event was already source mapped",
    )
    parser.add_argument(
        "--step-delay",
        type=float,
        default=None,
        help="Pause between steps in seconds (default: 0)",
    )
    parser.add_argument(
        "--log-dir",
        default=None,
        help="Write a JSON-lines run log to this directory",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose output",
    )
    return parser


def _settings_from_args(args: argparse.Namespace) -> Settings:
    """Settings with CLI flags taking precedence over the environment."""
    overrides: dict[str, Any] = {
        "organization": args.org,
        "project": args.project,
        "api_base_url": args.base_url,
        "check_already_mapped": args.check_already_mapped,
        "step_delay_seconds": args.step_delay,
        "log_dir": Path(args.log_dir) if args.log_dir else None,
        "event_id": args.event_id,
    }
    return Settings(**{k: v for k, v in overrides.items() if v is not None})


def _run_diagnose(args: argparse.Namespace) -> int:
    """Execute a diagnosis and return the process exit code."""
    try:
        settings = _settings_from_args(args)
    except ValidationError as exc:
        for error in exc.errors():
            field = ".".join(str(part) for part in error["loc"])
            print(
                f"Error: invalid setting {field}: {error['msg']}",
                file=sys.stderr,
            )
        return EXIT_USAGE
    setup_logging("DEBUG" if args.verbose else settings.log_level)

    if not settings.event_id:
        print(
            "Error: an event id is required (argument or EVENT_ID)",
            file=sys.stderr,
        )
        return EXIT_USAGE
    missing = settings.missing_remote_settings()
    if missing:
        print(
            f"Error: missing required settings: {', '.join(missing)}",
            file=sys.stderr,
        )
        return EXIT_USAGE

    outcome = asyncio.run(_diagnose(settings, verbose=args.verbose))
    return _report(outcome)


async def _diagnose(settings: Settings, *, verbose: bool) -> PipelineOutcome:
    from sourcemap_doctor.client.sentry import SentryClient
    from sourcemap_doctor.logger import RunLogger

    run_logger = (
        RunLogger(settings.log_dir, level="INFO")
        if settings.log_dir
        else None
    )

    def on_progress(event: StepEvent) -> None:
        if event.status == StepProgress.RUNNING:
            if verbose:
                print(f"  {event.label}...")
            return
        print(f"{_MARKS[event.status]} {event.message or event.label}")

    print("")
    async with SentryClient(settings) as client:
        return await run_diagnosis(
            settings.event_id,
            client,
            check_already_mapped=settings.check_already_mapped,
            step_delay_seconds=settings.step_delay_seconds,
            on_progress=on_progress,
            run_logger=run_logger,
        )


def _report(outcome: PipelineOutcome) -> int:
    """Print the snippet or diagnostic; return the exit code."""
    if outcome.diagnostic is not None:
        _print_diagnostic(outcome.diagnostic)
        return EXIT_DIAGNOSTIC

    print(f"\n{CONTEXT_RULE}")
    print(outcome.context)
    print(CONTEXT_RULE)
    print(
        "\nSource Maps should be working fine. "
        "Have you tried turning it off and on again?\n"
    )
    return EXIT_OK


def _print_diagnostic(diagnostic: Diagnostic) -> None:
    for tip in diagnostic.tips:
        for line in tip.splitlines():
            print(f"  {line}")
    print(
        f"\nDiagnosis stopped: {diagnostic.kind} ({diagnostic.severity})"
    )


if __name__ == "__main__":
    main()
