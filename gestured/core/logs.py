from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

from gestured.core.paths import log_path as default_log_path

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def init_logging(debug: bool = False, log_path: Optional[Path] = None) -> Path:
    """
    Always log to a file (INFO). --debug drops to DEBUG and mirrors
    everything to the terminal.
    """
    path = log_path or default_log_path()
    path.parent.mkdir(parents=True, exist_ok=True)

    level = logging.DEBUG if debug else logging.INFO
    handlers: list[logging.Handler] = [logging.FileHandler(path, mode="w")]
    if debug:
        handlers.append(logging.StreamHandler(sys.stderr))

    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers, force=True)
    return path
