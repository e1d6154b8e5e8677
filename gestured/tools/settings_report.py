from __future__ import annotations

import argparse
import sys
from typing import Optional, Sequence

from gestured.core.errors import ConfigInvalid, ConfigMissing
from gestured.core.settings import STANDARD_GESTURES, GestureActions, GestureSetting

"""
gestured settings report
Shows, per standard gesture, what runs globally and what an app overrides.
"""


def rows(actions: GestureActions, app: Optional[str] = None) -> list[GestureSetting]:
    return [GestureSetting.describe(g, app, actions) for g in STANDARD_GESTURES]


def format_row(s: GestureSetting) -> str:
    if not s.enabled:
        action = "(disabled)"
    elif s.action is not None:
        action = s.action
    else:
        action = f"{s.inherited or '-'} (inherited)" if s.app else (s.inherited or "-")
    return f"{s.config:<32} {action}"


def main(argv: Optional[Sequence[str]] = None) -> int:
    p = argparse.ArgumentParser(prog="gestured-settings")
    p.add_argument("-c", "--config", metavar="FILE.toml")
    p.add_argument("-a", "--app", help="show the view for one application")
    p.add_argument("--apps", action="store_true", help="list configured applications")
    args = p.parse_args(argv)

    try:
        actions = GestureActions.from_file(args.config)
    except (ConfigMissing, ConfigInvalid) as e:
        print(f"[gestured] {e}", file=sys.stderr)
        return 1

    if args.apps:
        for app in sorted(actions.apps()):
            print(app)
        return 0

    category = None
    for s in rows(actions, args.app):
        if s.category != category:
            category = s.category
            print(f"\n{category}")
        print("  " + format_row(s))
    return 0


if __name__ == "__main__":
    sys.exit(main())
