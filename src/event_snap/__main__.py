"""Entry point for ``python -m event_snap``.

Provides a CLI that reads event text from an argument, a file or stdin,
runs the extraction pipeline, prints the result and optionally writes an
``.ics`` file.  Uses stdlib :mod:`argparse` for argument parsing.

Exit codes:
    0 -- Extraction succeeded (including zero events in multi-event mode).
    1 -- An error occurred, or no valid event could be produced.
    2 -- Argument parsing error (handled by argparse).
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
import time
from pathlib import Path

from event_snap.clock import capture_reference_context
from event_snap.config import load_settings
from event_snap.demo_output import ExtractionReport, print_extraction_report
from event_snap.exceptions import ExtractionError
from event_snap.ics import fill_default_end, write_ics_file
from event_snap.log import setup_logging
from event_snap.models.extraction import BatchExtraction, ValidatedCandidate
from event_snap.pipeline import extract_event_batch, extract_single_event
from event_snap.validation import check_candidate

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build and return the CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="event-snap",
        description="Turn a natural-language event description into calendar events.",
    )
    parser.add_argument(
        "text",
        nargs="?",
        default=None,
        help="Event text. Read from --file or stdin when omitted.",
    )
    parser.add_argument(
        "-f",
        "--file",
        type=str,
        default=None,
        help="Read the event text from this file.",
    )
    parser.add_argument(
        "-m",
        "--multiple",
        action="store_true",
        default=False,
        help="Extract every event in the text instead of exactly one.",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        default=False,
        help="With --multiple, export nothing unless every event is valid.",
    )
    parser.add_argument(
        "--fill-missing-end",
        action="store_true",
        default=False,
        help="Give events without an end time a 1-hour duration before export.",
    )
    parser.add_argument(
        "-o",
        "--output",
        type=str,
        default=None,
        help="Write the valid events to this .ics file.",
    )
    parser.add_argument(
        "--timezone",
        type=str,
        default=None,
        help="IANA timezone for resolving dates (defaults to TIMEZONE from config).",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Enable debug-level logging.",
    )
    return parser


def _read_text(args: argparse.Namespace) -> str | None:
    """Return the event text from the argument, ``--file`` or stdin."""
    if args.text is not None:
        return args.text
    if args.file is not None:
        path = Path(args.file)
        if not path.is_file():
            print(f"Error: File not found: {path}", file=sys.stderr)
            return None
        return path.read_text(encoding="utf-8")
    if not sys.stdin.isatty():
        return sys.stdin.read()
    print("Error: No event text given (pass TEXT, --file, or pipe it on stdin).", file=sys.stderr)
    return None


def _apply_default_end(results: list[ValidatedCandidate]) -> list[ValidatedCandidate]:
    """Re-check rejected candidates after giving them a 1-hour duration."""
    return [
        result if result.is_valid else check_candidate(fill_default_end(result.candidate))
        for result in results
    ]


def main(argv: list[str] | None = None) -> int:
    """Run the event-snap CLI.

    Args:
        argv: Command-line arguments.  Defaults to ``sys.argv[1:]``.

    Returns:
        Exit code: ``0`` on success, ``1`` on error.
    """
    args = build_parser().parse_args(argv)

    text = _read_text(args)
    if text is None:
        return 1

    started = time.monotonic()
    try:
        settings = load_settings()
        setup_logging("DEBUG" if args.verbose else settings.log_level)
        if args.timezone:
            settings = settings.with_changes(timezone=args.timezone)
        context = capture_reference_context(settings.timezone)

        if args.multiple:
            batch = asyncio.run(
                extract_event_batch(text, settings, context=context, strict=args.strict)
            )
            results = list(batch.results)
        else:
            results = [asyncio.run(extract_single_event(text, settings, context=context))]
    except ExtractionError as exc:
        logger.debug("Extraction failed: %r", exc)
        print(f"Error: {exc.user_message}", file=sys.stderr)
        return 1

    if args.fill_missing_end:
        results = _apply_default_end(results)

    report = ExtractionReport(
        context=context,
        results=results,
        multiple=args.multiple,
        strict=args.strict,
    )

    records = BatchExtraction(results=tuple(results), strict=args.strict).records

    if args.output and records:
        report.ics_path = write_ics_file(records, args.output)
    elif args.output:
        report.warnings.append("No valid events, calendar file not written")

    report.duration_seconds = time.monotonic() - started
    print_extraction_report(report)

    if not args.multiple and not records:
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
