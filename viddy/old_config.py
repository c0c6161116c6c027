"""The legacy TOML configuration file."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, fields
from typing import Any

from viddy.utils import get_old_config_dir

OLD_CONFIG_FILE = "viddy.toml"


@dataclass
class OldGeneral:
    no_shell: bool | None = None
    shell: str | None = None
    shell_options: str | None = None
    skip_empty_diffs: bool | None = None


@dataclass
class OldKeymap:
    toggle_timemachine: str | None = None
    timemachine_go_to_past: str | None = None
    timemachine_go_to_future: str | None = None
    timemachine_go_to_more_past: str | None = None
    timemachine_go_to_more_future: str | None = None
    timemachine_go_to_now: str | None = None
    timemachine_go_to_oldest: str | None = None
    scroll_left: str | None = None
    scroll_right: str | None = None
    scroll_up: str | None = None
    scroll_down: str | None = None
    scroll_half_page_up: str | None = None
    scroll_half_page_down: str | None = None
    scroll_page_up: str | None = None
    scroll_page_down: str | None = None
    scroll_bottom_of_page: str | None = None
    scroll_top_of_page: str | None = None


@dataclass
class OldColor:
    background: str | None = None


@dataclass
class OldConfig:
    general: OldGeneral | None = None
    keymap: OldKeymap | None = None
    color: OldColor | None = None


_BOOL_FIELDS = frozenset({"no_shell", "skip_empty_diffs"})


def _section(data: dict[str, Any], name: str, cls: type) -> Any:
    raw = data.get(name)
    if raw is None:
        return None
    if not isinstance(raw, dict):
        raise ValueError(f"[{name}] must be a table")
    values = {}
    for f in fields(cls):
        value = raw.get(f.name)
        if value is None:
            continue
        expected = bool if f.name in _BOOL_FIELDS else str
        if not isinstance(value, expected):
            raise ValueError(f"{name}.{f.name} must be a {expected.__name__}")
        values[f.name] = value
    return cls(**values)


def parse_old_config(text: str) -> OldConfig:
    """Parse legacy configuration from TOML text."""
    data = tomllib.loads(text)
    return OldConfig(
        general=_section(data, "general", OldGeneral),
        keymap=_section(data, "keymap", OldKeymap),
        color=_section(data, "color", OldColor),
    )


def load_old_config() -> OldConfig:
    """Read the legacy configuration file from the user's configuration directory."""
    path = get_old_config_dir() / OLD_CONFIG_FILE
    return parse_old_config(path.read_text(encoding="utf-8"))