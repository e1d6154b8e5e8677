from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

XDOTOOL_TIMEOUT_S = 1.0


def active_pid() -> int:
    out = subprocess.run(
        ["xdotool", "getactivewindow", "getwindowpid"],
        capture_output=True, text=True, timeout=XDOTOOL_TIMEOUT_S, check=True,
    )
    return int(out.stdout.strip())


def process_name(pid: int, proc_root: Path = Path("/proc")) -> str:
    return (proc_root / str(pid) / "comm").read_text().rstrip()


def active_app() -> Optional[str]:
    """
    Name of the process owning the focused X11 window, e.g. "firefox".
    None when it can't be found; global settings apply then.
    """
    try:
        return process_name(active_pid())
    except (OSError, ValueError, subprocess.SubprocessError) as e:
        logger.error("could not detect current window: %s", e)
        return None
