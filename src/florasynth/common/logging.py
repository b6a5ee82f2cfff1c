"""Shared logging helpers for florasynth."""

from __future__ import annotations

import logging


def configure_logging(*, level: int = logging.INFO, force: bool = False) -> None:
    """Initialise the root logger once with the CLI defaults.

    Module loggers are created with ``getLogger(__name__)`` and inherit this
    configuration. Pass ``force=True`` to reconfigure from tests or a second entry
    point; ``--verbose`` on the CLI maps to ``level=logging.DEBUG``.
    """

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        force=force,
    )
    # httpx logs every request at INFO, which drowns out the per-module outcome lines
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))
