"""
gestured: gesture → action configuration

The document is a tree of tables flattened into dotted keys:

    swipe.up.3 = "ctrl+t"            global
    firefox.swipe.up.3 = "ctrl+y"    override for the firefox app
    chrome.swipe.up.3 = ""           explicitly disabled in chrome

Top-level keys other than swipe/rotation/pinch/gesture are app namespaces.
Keys are case-insensitive; everything is stored lowercased.
"""

from __future__ import annotations

import json
import logging
import tomllib
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any, FrozenSet, Mapping, Optional

import yaml

from gestured.core.config import (
    CONFIGURATION_PREFIXES, PINCH_IN_TRIGGER_KEY, PINCH_OUT_TRIGGER_KEY, PinchTriggers,
)
from gestured.core.control import SharedSnapshot
from gestured.core.errors import ConfigInvalid, ConfigMissing, ReloadFailure
from gestured.core.paths import config_file_path
from gestured.core.types import (
    GestureType, Swipe, Rotation, Pinch,
    SwipeDirection, RotationDirection, PinchDirection, key_for_app,
)

logger = logging.getLogger(__name__)


def _scalar(value: Any) -> Optional[str]:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int, float)):
        return str(value)
    return None


def _flatten(prefix: str, node: Mapping[Any, Any], out: dict[str, str]) -> None:
    for k, v in node.items():
        path = f"{prefix}.{k}".lower() if prefix else str(k).lower()
        if isinstance(v, Mapping):
            _flatten(path, v, out)
            continue
        s = _scalar(v)
        if s is None:
            logger.warning("ignoring non-scalar setting %s = %r", path, v)
            continue
        out[path] = s


@dataclass(frozen=True)
class ConfigDocument:
    """Immutable snapshot of one configuration file."""
    values: Mapping[str, str]
    top_level: FrozenSet[str]
    source: Optional[Path] = None

    @classmethod
    def from_mapping(cls, data: Mapping[Any, Any], source: Optional[Path] = None) -> "ConfigDocument":
        flat: dict[str, str] = {}
        _flatten("", data, flat)
        top = frozenset(str(k).lower().split(".", 1)[0] for k in data)
        return cls(values=MappingProxyType(flat), top_level=top, source=source)

    def get(self, key: str) -> Optional[str]:
        return self.values.get(key.lower())

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and key.lower() in self.values

    def __len__(self) -> int:
        return len(self.values)


def read_document(path: Path) -> ConfigDocument:
    """Parse by extension: .yml/.yaml, .json, anything else as TOML."""
    suffix = path.suffix.lower()
    try:
        text = path.read_text()
        if suffix in (".yml", ".yaml"):
            data = yaml.safe_load(text) or {}
        elif suffix == ".json":
            data = json.loads(text)
        else:
            data = tomllib.loads(text)
    except FileNotFoundError as e:
        raise ConfigMissing(f"config file not found: {path}") from e
    except (OSError, UnicodeDecodeError, tomllib.TOMLDecodeError, yaml.YAMLError, json.JSONDecodeError) as e:
        raise ConfigInvalid(f"cannot read {path}: {e}") from e

    if not isinstance(data, Mapping):
        raise ConfigInvalid(f"{path}: top level must be a table, got {type(data).__name__}")
    return ConfigDocument.from_mapping(data, source=path)


class GestureActions:
    """
    Resolves gesture settings with per-app inheritance.

    Every public lookup reads a single snapshot, so a reload running on
    another thread is seen either entirely or not at all.
    """

    def __init__(self, document: ConfigDocument, path: Optional[Path] = None) -> None:
        self.path = path if path is not None else document.source
        self._doc = SharedSnapshot(document)

    @classmethod
    def from_file(cls, override: Optional[str | Path] = None) -> "GestureActions":
        path = config_file_path(override)
        logger.info("creating handler from configuration: %s", path)
        return cls(read_document(path), path)

    @classmethod
    def from_mapping(cls, data: Mapping[Any, Any]) -> "GestureActions":
        return cls(ConfigDocument.from_mapping(data))

    def snapshot(self) -> ConfigDocument:
        return self._doc.get()

    def get(self, setting: str) -> Optional[str]:
        return self.snapshot().get(setting)

    def resolve(self, setting: str, app: Optional[str] = None) -> Optional[str]:
        """
        App override if the key exists (even as ""), else the global value,
        else None. An empty result means the gesture is disabled.
        """
        doc = self.snapshot()
        if app is not None:
            value = doc.get(key_for_app(setting, app))
            if value is not None:
                return value
        return doc.get(setting)

    def action_for(self, setting: str, app: Optional[str] = None) -> Optional[str]:
        """resolve() with the disabled sentinel folded into None."""
        return self.resolve(setting, app) or None

    def is_specified(self, setting: str, app: Optional[str] = None) -> bool:
        return key_for_app(setting, app) in self.snapshot()

    def is_disabled(self, setting: str, app: Optional[str] = None) -> bool:
        return self.snapshot().get(key_for_app(setting, app)) == ""

    def apps(self) -> set[str]:
        return {k for k in self.snapshot().top_level if k not in CONFIGURATION_PREFIXES}

    def get_float(self, key: str) -> Optional[float]:
        value = self.get(key)
        if value is None:
            return None
        try:
            return float(value)
        except ValueError:
            logger.warning("setting %s is not a number: %r", key, value)
            return None

    def pinch_triggers(self) -> PinchTriggers:
        return PinchTriggers(
            pinch_in=self.get_float(PINCH_IN_TRIGGER_KEY) or 0.0,
            pinch_out=self.get_float(PINCH_OUT_TRIGGER_KEY) or 0.0,
        )

    def reload(self) -> ConfigDocument:
        """
        Re-read the backing file and swap it in whole.
        On failure the previous document stays live and ReloadFailure is raised.
        """
        if self.path is None:
            raise ReloadFailure("configuration was not loaded from a file")
        try:
            doc = read_document(self.path)
        except (ConfigMissing, ConfigInvalid) as e:
            raise ReloadFailure(str(e)) from e
        self._doc.swap(doc)
        logger.info("configuration reloaded from %s (%d settings)", self.path, len(doc))
        return doc

    def __repr__(self) -> str:
        return f"GestureActions(path={self.path!r}, settings={len(self.snapshot())})"


# ============================================================
# Read-only view of one setting (what a settings editor shows)
# ============================================================

STANDARD_GESTURES: tuple[GestureType, ...] = (
    *(Swipe(d, f) for f in (3, 4) for d in SwipeDirection),
    Pinch(PinchDirection.IN),
    Pinch(PinchDirection.OUT),
    Rotation(RotationDirection.LEFT),
    Rotation(RotationDirection.RIGHT),
)


@dataclass(frozen=True)
class GestureSetting:
    config: str
    direction: str
    category: str
    app: Optional[str]
    action: Optional[str]       # explicitly set at this layer
    inherited: Optional[str]    # what the global layer would run
    enabled: bool

    @classmethod
    def describe(cls, gesture: GestureType, app: Optional[str], actions: GestureActions) -> "GestureSetting":
        setting = gesture.setting_key()
        action = actions.action_for(setting, app) if actions.is_specified(setting, app) else None
        return cls(
            config=key_for_app(setting, app),
            direction=gesture.direction.value,
            category=category_label(gesture, app),
            app=app,
            action=action,
            inherited=actions.action_for(setting, None),
            enabled=not actions.is_disabled(setting, app),
        )


def category_label(gesture: GestureType, app: Optional[str] = None) -> str:
    if isinstance(gesture, Swipe):
        label = f"{gesture.fingers} fingers Swipes"
    elif isinstance(gesture, Rotation):
        label = "Rotations"
    else:
        label = "Pinches"
    if app:
        label += f" in {app}"
    return label
