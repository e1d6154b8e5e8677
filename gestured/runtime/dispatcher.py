from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Protocol

from gestured.core.errors import DispatchFailure
from gestured.core.settings import GestureActions
from gestured.core.types import GestureType

logger = logging.getLogger(__name__)


class KeySender(Protocol):
    def send(self, sequence: str) -> None: ...


class Dispatch(str, Enum):
    SENT = "SENT"
    UNCONFIGURED = "UNCONFIGURED"
    DISABLED = "DISABLED"
    FAILED = "FAILED"


@dataclass
class Dispatcher:
    """
    Last stop before the OS.
    Resolves a gesture for the focused app and hands the action to the
    sender. Never raises: a bad action must not stop the gesture loop.
    """
    actions: GestureActions
    sender: KeySender

    def handle(self, gesture: GestureType, app: Optional[str] = None) -> Dispatch:
        setting = gesture.setting_key()
        action = self.actions.resolve(setting, app)
        logger.debug("getting setting: %s (app=%s) = %r", setting, app, action)

        if action is None:
            logger.warning("gesture not configured: %r", gesture)
            return Dispatch.UNCONFIGURED
        if action == "":
            logger.info("skipping gesture due to no action: %r (app=%s)", gesture, app)
            return Dispatch.DISABLED

        try:
            self.sender.send(action)
        except DispatchFailure as e:
            logger.error("failed to run %r for %r: %s", action, gesture, e)
            return Dispatch.FAILED
        except Exception:
            logger.exception("failed to run %r for %r", action, gesture)
            return Dispatch.FAILED

        logger.info("%r -> %s", gesture, action)
        return Dispatch.SENT


class DryRunSender:
    """Logs instead of typing; for trying a configuration out."""

    def send(self, sequence: str) -> None:
        logger.info("would send: %s", sequence)
        print(f"[gestured] would send: {sequence}")
