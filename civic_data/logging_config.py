"""Shared logging configuration for acquisition runs.

Call ``configure_logging()`` once at a CLI entry point. Repeated calls are
no-ops while the root logger already has handlers.
"""

import logging
import os
from typing import Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DEFAULT_LOG_FILE = "logs/pipeline.log"


def configure_logging(level: int = logging.INFO, log_file: Optional[str] = DEFAULT_LOG_FILE) -> None:
    """Attach a console handler and, when log_file is set, an appending file handler."""
    root = logging.getLogger()
    if root.handlers:
        return

    formatter = logging.Formatter(LOG_FORMAT)

    console = logging.StreamHandler()
    console.setFormatter(formatter)
    root.addHandler(console)

    if log_file:
        try:
            os.makedirs(os.path.dirname(log_file) or ".", exist_ok=True)
            fh = logging.FileHandler(log_file, mode="a")
            fh.setFormatter(formatter)
            root.addHandler(fh)
        except OSError as e:
            root.warning(f"File logging disabled ({log_file}): {e}")

    root.setLevel(level)
    # Per-request connection chatter drowns out per-source results
    logging.getLogger("urllib3").setLevel(logging.WARNING)
