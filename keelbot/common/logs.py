"""
Logging setup shared by the server and the CLI entry point.
"""

import logging
from pathlib import Path
from typing import Optional

from .config import LOGS_DIR

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_configured = False


def setup_logging(level: str = "INFO", log_dir: Optional[Path] = None) -> None:
    """
    Configure the ``keelbot`` logger tree.

    Logs go to stderr and to ``<log_dir>/keelbot.log``. Calling this more
    than once only updates the level.
    """
    global _configured

    root = logging.getLogger("keelbot")
    root.setLevel(level.upper())

    if _configured:
        return

    formatter = logging.Formatter(LOG_FORMAT)

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)
    root.addHandler(stream_handler)

    log_dir = log_dir or LOGS_DIR
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_dir / "keelbot.log")
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)
    except OSError as e:
        root.warning("File logging disabled (%s): %s", log_dir, e)

    # slack_sdk is chatty at INFO
    logging.getLogger("slack_sdk").setLevel(logging.WARNING)

    _configured = True
