from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from patchform import __version__
from patchform.app import render_files
from patchform.config import ConfigurationError, configure_logging, get_engine_config
from patchform.domain.state import Severity

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="patchform", description="Render patch-and-transform compositions"
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command", required=True)

    render = subparsers.add_parser("render", help="Run a function request and print the response")
    render.add_argument(
        "request",
        type=Path,
        help="Path to a JSON function request",
    )
    render.add_argument(
        "--input",
        type=Path,
        help="JSON input document replacing the input embedded in the request",
    )
    render.add_argument(
        "--debug",
        action="store_true",
        help="Log at DEBUG level regardless of PATCHFORM_LOG_LEVEL",
    )

    return parser.parse_args(list(argv))


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)

    try:
        config = get_engine_config()
    except ConfigurationError:
        configure_logging()
        log.exception("Configuration error")
        sys.exit(2)
    configure_logging(level=logging.DEBUG if parsed_args.debug else config.log_level)

    try:
        response = render_files(parsed_args.request, input_path=parsed_args.input, config=config)
    except (OSError, ValueError):
        log.exception("Cannot read function request")
        sys.exit(2)
    except Exception:
        log.exception("Fatal error during render")
        sys.exit(1)

    sys.stdout.write(response.model_dump_json(by_alias=True, exclude_none=True, indent=2) + "\n")
    if any(result.severity == Severity.FATAL for result in response.results):
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
