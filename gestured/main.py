from __future__ import annotations

import argparse
import errno
import logging
import sys
from importlib.metadata import PackageNotFoundError, version
from typing import Optional, Sequence

from evdev.uinput import UInputError

from gestured.core.config import DEFAULT_TUNING
from gestured.core.errors import (
    ConfigInvalid, ConfigMissing, DaemonNotRunning, EventSourceUnavailable, ReloadRequestError,
)
from gestured.core.ipc import ReloadServer, request_reload
from gestured.core.logs import init_logging
from gestured.core.settings import GestureActions
from gestured.injector.uinput_keyboard import UInputKeyboard
from gestured.interpreter.state_machine import Classifier
from gestured.runtime.dispatcher import Dispatcher, DryRunSender
from gestured.runtime.run_loop import GestureLoop
from gestured.sensor.active_window import active_app
from gestured.sensor.libinput_events import LibinputEventSource

logger = logging.getLogger("gestured")


def _version() -> str:
    try:
        return version("gestured")
    except PackageNotFoundError:
        return "unknown"


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="gestured", description="Configurable libinput gesture handling")
    p.add_argument("--version", action="version", version=f"%(prog)s {_version()}")
    p.add_argument("-d", "--debug", action="store_true", help="print debug information")
    p.add_argument("-c", "--config", metavar="FILE.toml", help="use specific configuration file")
    p.add_argument("--dry-run", action="store_true", help="log actions instead of sending keys")
    return p


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    log_file = init_logging(args.debug)

    try:
        actions = GestureActions.from_file(args.config)
    except (ConfigMissing, ConfigInvalid) as e:
        logger.critical("cannot start: %s", e)
        print(f"[gestured] {e}", file=sys.stderr)
        return 1

    server = ReloadServer(actions)
    try:
        server.start()
    except OSError as e:
        if e.errno == errno.EADDRINUSE:
            # a second daemon would send every action twice
            logger.critical("cannot start: %s", e.strerror)
            print(f"[gestured] {e.strerror}", file=sys.stderr)
            return 1
        # keep handling gestures; only live reload is lost
        logger.error("reload endpoint unavailable at %s: %s", server.path, e)

    if args.dry_run:
        sender = DryRunSender()
    else:
        try:
            sender = UInputKeyboard.create()
        except (OSError, UInputError) as e:
            logger.critical("cannot create virtual keyboard: %s", e)
            print(f"[gestured] cannot open /dev/uinput: {e}", file=sys.stderr)
            server.stop()
            return 1

    classifier = Classifier(DEFAULT_TUNING, triggers=actions.pinch_triggers)
    loop = GestureLoop(LibinputEventSource(), classifier, Dispatcher(actions, sender), active_app)

    print(f"[gestured] started with {actions.path}, logging to {log_file}. Ctrl+C to stop.")
    try:
        loop.run()
    except EventSourceUnavailable as e:
        logger.critical("%s", e)
        print(f"[gestured] {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\n[gestured] exiting")
    finally:
        server.stop()
        close = getattr(sender, "close", None)
        if close:
            close()
    return 0


def reload_main(argv: Optional[Sequence[str]] = None) -> int:
    p = argparse.ArgumentParser(prog="gestured-reload", description="Ask gestured to re-read its configuration")
    p.add_argument("--timeout", type=float, default=5.0, help="seconds to wait for the daemon (default 5)")
    args = p.parse_args(argv)

    try:
        request_reload(timeout=args.timeout)
    except DaemonNotRunning as e:
        print(f"[gestured] {e}", file=sys.stderr)
        return 2
    except ReloadRequestError as e:
        print(f"[gestured] reload failed: {e}", file=sys.stderr)
        return 1
    print("[gestured] configuration reloaded")
    return 0


if __name__ == "__main__":
    sys.exit(main())
