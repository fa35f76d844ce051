"""CLI entry point that serves the progress report over HTTP."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

import uvicorn

from apps.result_server.main import app, use_settings
from stepcheck.core.config import ProgressMode, ProgressSettings
from stepcheck.pipeline import load_settings

LOGGER = logging.getLogger("stepcheck.serve")
DEFAULT_PORT = 3000


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Serve step progress for a numbered test series.")
    parser.add_argument(
        "--project-root",
        default=None,
        help="Directory holding test/ and .mocharc.json (default: STEPCHECK_PROJECT_ROOT or cwd)",
    )
    parser.add_argument(
        "--mode",
        choices=ProgressMode.choices(),
        default=None,
        help="declared: read the current step from the pointer file; executed: run the first test.",
    )
    parser.add_argument(
        "--test",
        dest="force_all_passed",
        action="store_true",
        default=None,
        help="Report every step as passed without reading config or running tests.",
    )
    parser.add_argument("--test-dir", default=None, help="Directory of numbered tests (default: <root>/test)")
    parser.add_argument(
        "--pointer-file",
        default=None,
        help="Run-config file whose first 'spec' entry is the current step (default: <root>/.mocharc.json)",
    )
    parser.add_argument("--runner", default=None, help="Test runner command (default: 'npx mocha').")
    parser.add_argument("--timeout", type=float, default=None, help="Seconds before a test run is killed (<=0 disables).")
    parser.add_argument("--host", default="0.0.0.0", help="Interface to bind (default: 0.0.0.0)")
    parser.add_argument(
        "--port",
        type=int,
        default=int(os.getenv("PORT", DEFAULT_PORT)),
        help=f"Port to bind (default: PORT or {DEFAULT_PORT})",
    )
    parser.add_argument("--log-level", default="INFO", help="Logging level (default: INFO)")
    return parser


def settings_from_args(args: argparse.Namespace) -> ProgressSettings:
    return load_settings(
        Path(args.project_root) if args.project_root else None,
        mode=args.mode,
        force_all_passed=args.force_all_passed,
        test_dir=args.test_dir,
        pointer_file=args.pointer_file,
        runner=args.runner,
        timeout_seconds=args.timeout,
    )


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        settings = settings_from_args(args)
    except ValueError as exc:
        parser.error(str(exc))

    use_settings(settings)
    if settings.force_all_passed:
        LOGGER.info("Test mode enabled: all steps will be reported as passed")
    LOGGER.info(
        "Result server running on %s:%s (mode=%s, tests=%s)",
        args.host,
        args.port,
        settings.mode.value,
        settings.resolved_test_dir,
    )
    uvicorn.run(app, host=args.host, port=args.port, log_level=str(args.log_level).lower())
    return 0


if __name__ == "__main__":
    sys.exit(main())
