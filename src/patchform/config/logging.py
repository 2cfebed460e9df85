"""Logging setup shared by the CLI and embedding applications."""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from typing import TextIO


def configure_logging(
    *, level: int = logging.INFO, force: bool = False, stream: TextIO | None = None
) -> None:
    """Initialise the root logger once.

    Records go to ``stream`` (stderr by default) so that stdout stays reserved
    for the rendered response. Pass ``force=True`` to replace handlers that
    are already installed.
    """

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        stream=stream or sys.stderr,
        force=force,
    )
