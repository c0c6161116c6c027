"""User configuration: key bindings, styles and general settings."""

from __future__ import annotations

import configparser
import enum
import json
import logging
import re
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Union

import yaml

from viddy.keys import KeyEvent, parse_key_sequence
from viddy.old_config import OldConfig, OldGeneral
from viddy.termtext import Ansi256Color, RgbColor, Style
from viddy.utils import get_config_dir, get_data_dir

logger = logging.getLogger("viddy")

KeySequence = tuple[KeyEvent, ...]
CellColor = Union[int, RgbColor]


class Mode(enum.Enum):
    """The screen mode a binding or style applies to."""

    ALL = "All"
    SEARCH = "Search"
    HELP = "Help"

    @classmethod
    def parse(cls, name: str) -> Mode:
        for mode in cls:
            if mode.value.lower() == str(name).lower():
                return mode
        raise ValueError(f"unknown mode: {name!r}")


class Modifier(enum.Flag):
    """Text modifiers of a cell style."""

    BOLD = enum.auto()
    DIM = enum.auto()
    ITALIC = enum.auto()
    UNDERLINED = enum.auto()
    SLOW_BLINK = enum.auto()
    RAPID_BLINK = enum.auto()
    REVERSED = enum.auto()
    HIDDEN = enum.auto()
    CROSSED_OUT = enum.auto()


NO_MODIFIER = Modifier(0)


@dataclass(frozen=True)
class CellStyle:
    """Style of screen cells; colours are palette indices or RGB colours."""

    fg: CellColor | None = None
    bg: CellColor | None = None
    modifiers: Modifier = NO_MODIFIER


@dataclass
class General:
    no_shell: bool | None = None
    shell: str | None = None
    shell_options: str | None = None
    skip_empty_diffs: bool | None = None

    @classmethod
    def from_old(cls, old: OldGeneral) -> General:
        return cls(
            no_shell=old.no_shell,
            shell=old.shell,
            shell_options=old.shell_options,
            skip_empty_diffs=old.skip_empty_diffs,
        )


# --- styles -------------------------------------------------------------------

_NAMED_COLORS = {
    "bold black": 8,
    "bold red": 9,
    "bold green": 10,
    "bold yellow": 11,
    "bold blue": 12,
    "bold magenta": 13,
    "bold cyan": 14,
    "bold white": 15,
    "black": 0,
    "red": 1,
    "green": 2,
    "yellow": 3,
    "blue": 4,
    "magenta": 5,
    "cyan": 6,
    "white": 7,
}


def _trim_prefixes(s: str, prefix: str) -> str:
    while prefix and s.startswith(prefix):
        s = s[len(prefix):]
    return s


def _parse_u8(s: str) -> int:
    body = s[1:] if s.startswith("+") else s
    if not body or not body.isascii() or not body.isdigit():
        return 0
    value = int(body)
    return value if value <= 255 else 0


def _digit(byte: int) -> int:
    return byte - 0x30 if 0x30 <= byte <= 0x39 else 0


def parse_color(s: str) -> int | None:
    """Palette index named by a colour word such as "red", "color42", "gray3" or "rgb123"."""
    s = s.strip()
    if "bright color" in s:
        s = _trim_prefixes(s, "bright ")
        return _parse_u8(_trim_prefixes(s, "color"))
    if "color" in s:
        return _parse_u8(_trim_prefixes(s, "color"))
    if "gray" in s:
        return (232 + _parse_u8(_trim_prefixes(s, "gray"))) % 256
    if "rgb" in s:
        raw = s.encode("utf-8")
        if len(raw) < 6:
            raise ValueError(f"incomplete rgb colour: {s!r}")
        red, green, blue = (_digit(b) for b in raw[3:6])
        return (16 + red * 36 + green * 6 + blue) % 256
    return _NAMED_COLORS.get(s)


def process_color_string(color_str: str) -> tuple[str, Modifier]:
    """Strip modifier words from a colour description and return them as flags."""
    color = (
        color_str.replace("grey", "gray")
        .replace("bright ", "")
        .replace("bold ", "")
        .replace("underline ", "")
        .replace("inverse ", "")
    )
    modifiers = NO_MODIFIER
    if "underline" in color_str:
        modifiers |= Modifier.UNDERLINED
    if "bold" in color_str:
        modifiers |= Modifier.BOLD
    if "inverse" in color_str:
        modifiers |= Modifier.REVERSED
    return color, modifiers


def parse_style(line: str) -> CellStyle:
    """Parse a description such as "bold red on blue"."""
    split = line.lower().find("on ")
    if split < 0:
        split = len(line)
    foreground, background = line[:split], line[split:]
    fg_color, fg_modifiers = process_color_string(foreground)
    bg_color, bg_modifiers = process_color_string(background.replace("on ", ""))
    return CellStyle(
        fg=parse_color(fg_color),
        bg=parse_color(bg_color),
        modifiers=fg_modifiers | bg_modifiers,
    )


def convert_to_anstyle_color(color: CellColor) -> Ansi256Color | RgbColor:
    """The terminal-text colour for a cell colour."""
    if isinstance(color, RgbColor):
        return color
    if isinstance(color, int) and not isinstance(color, bool):
        return Ansi256Color(color)
    raise TypeError(f"Unsupported color: {color!r}")


def convert_to_anstyle(style: CellStyle) -> Style:
    """The terminal-text style with the colours of a cell style."""
    result = Style()
    if style.bg is not None:
        result = result.with_bg(convert_to_anstyle_color(style.bg))
    if style.fg is not None:
        result = result.with_fg(convert_to_anstyle_color(style.fg))
    return result


# --- reading configuration files -----------------------------------------------

_JSON5_NUMBER = re.compile(
    r"[+-]?(?:Infinity|NaN|0[xX][0-9a-fA-F]+|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)"
)
_JSON5_IDENT = re.compile(r"[A-Za-z_$][\w$]*")
_JSON5_ESCAPES = {
    "n": "\n", "t": "\t", "r": "\r", "b": "\b", "f": "\f",
    "v": "\v", "0": "\0", "\\": "\\", "'": "'", '"': '"', "/": "/",
}


class _Json5Reader:
    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0

    def error(self, message: str) -> ValueError:
        return ValueError(f"JSON5: {message} at offset {self.pos}")

    def parse(self) -> Any:
        value = self.value()
        self.skip()
        if self.pos != len(self.text):
            raise self.error("trailing data")
        return value

    def skip(self) -> None:
        text = self.text
        while self.pos < len(text):
            if text[self.pos].isspace():
                self.pos += 1
            elif text.startswith("//", self.pos):
                end = text.find("\n", self.pos)
                self.pos = len(text) if end < 0 else end + 1
            elif text.startswith("/*", self.pos):
                end = text.find("*/", self.pos + 2)
                if end < 0:
                    raise self.error("unterminated comment")
                self.pos = end + 2
            else:
                return

    def peek(self) -> str:
        self.skip()
        if self.pos >= len(self.text):
            raise self.error("unexpected end")
        return self.text[self.pos]

    def value(self) -> Any:
        c = self.peek()
        if c == "{":
            return self.obj()
        if c == "[":
            return self.array()
        if c in "\"'":
            return self.string()
        for word, result in (("true", True), ("false", False), ("null", None)):
            if self.text.startswith(word, self.pos):
                self.pos += len(word)
                return result
        match = _JSON5_NUMBER.match(self.text, self.pos)
        if not match:
            raise self.error("unexpected character")
        self.pos = match.end()
        token = match.group()
        sign = -1 if token.startswith("-") else 1
        body = token.lstrip("+-")
        if body == "Infinity":
            return sign * float("inf")
        if body == "NaN":
            return float("nan")
        if body[:2].lower() == "0x":
            return sign * int(body, 16)
        if any(ch in body for ch in ".eE"):
            return sign * float(body)
        return sign * int(body)

    def string(self) -> str:
        quote = self.text[self.pos]
        self.pos += 1
        parts: list[str] = []
        text = self.text
        while True:
            if self.pos >= len(text):
                raise self.error("unterminated string")
            c = text[self.pos]
            self.pos += 1
            if c == quote:
                return "".join(parts)
            if c != "\\":
                parts.append(c)
                continue
            if self.pos >= len(text):
                raise self.error("unterminated string")
            e = text[self.pos]
            self.pos += 1
            if e in _JSON5_ESCAPES:
                parts.append(_JSON5_ESCAPES[e])
            elif e in "ux":
                size = 4 if e == "u" else 2
                digits = text[self.pos:self.pos + size]
                if len(digits) != size:
                    raise self.error("bad escape")
                try:
                    parts.append(chr(int(digits, 16)))
                except ValueError:
                    raise self.error("bad escape") from None
                self.pos += size
            elif e == "\r":
                if text.startswith("\n", self.pos):
                    self.pos += 1
            elif e in "\n\u2028\u2029":
                pass
            else:
                parts.append(e)

    def key(self) -> str:
        c = self.peek()
        if c in "\"'":
            return self.string()
        match = _JSON5_IDENT.match(self.text, self.pos)
        if not match:
            raise self.error("expected a key")
        self.pos = match.end()
        return match.group()

    def obj(self) -> dict[str, Any]:
        self.pos += 1
        result: dict[str, Any] = {}
        while self.peek() != "}":
            name = self.key()
            if self.peek() != ":":
                raise self.error("expected ':'")
            self.pos += 1
            result[name] = self.value()
            if self.peek() == ",":
                self.pos += 1
            elif self.peek() != "}":
                raise self.error("expected ',' or '}'")
        self.pos += 1
        return result

    def array(self) -> list[Any]:
        self.pos += 1
        result: list[Any] = []
        while self.peek() != "]":
            result.append(self.value())
            if self.peek() == ",":
                self.pos += 1
            elif self.peek() != "]":
                raise self.error("expected ',' or ']'")
        self.pos += 1
        return result


def _read_ini(text: str) -> dict[str, Any]:
    top = "\x00top"
    parser = configparser.ConfigParser(interpolation=None, default_section="\x00default")
    parser.optionxform = str  # type: ignore[assignment,method-assign]
    parser.read_string(f"[{top}]\n{text}")
    result: dict[str, Any] = dict(parser[top])
    for section in parser.sections():
        if section != top:
            result[section] = dict(parser[section])
    return result


_READERS = (
    ("config.json5", lambda text: _Json5Reader(text).parse()),
    ("config.json", json.loads),
    ("config.yaml", lambda text: yaml.safe_load(text) or {}),
    ("config.toml", tomllib.loads),
    ("config.ini", _read_ini),
)


def _merge(base: dict[str, Any], overlay: Mapping[str, Any]) -> None:
    for key, value in overlay.items():
        if isinstance(value, Mapping) and isinstance(base.get(key), dict):
            _merge(base[key], value)
        elif isinstance(value, Mapping):
            base[key] = {}
            _merge(base[key], value)
        else:
            base[key] = value


_TRUE_WORDS = {"true", "1", "yes", "on", "y"}
_FALSE_WORDS = {"false", "0", "no", "off", "n", ""}


def _as_bool(name: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_WORDS:
            return True
        if lowered in _FALSE_WORDS:
            return False
    raise ValueError(f"general.{name} must be a boolean")


def _as_mapping(name: str, value: Any) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise ValueError(f"{name} must be a table")
    return value


# --- the configuration ------------------------------------------------------------

_OLD_KEYMAP_ACTIONS = (
    ("timemachine_go_to_future", "GoToFuture"),
    ("timemachine_go_to_more_future", "GoToMoreFuture"),
    ("timemachine_go_to_past", "GoToPast"),
    ("timemachine_go_to_more_past", "GoToMorePast"),
    ("timemachine_go_to_now", "GoToCurrent"),
    ("timemachine_go_to_oldest", "GoToOldest"),
    ("toggle_timemachine", "SwitchTimemachineMode"),
    ("scroll_left", "ScrollLeft"),
    ("scroll_right", "ScrollRight"),
    ("scroll_up", "ResultScrollUp"),
    ("scroll_down", "ResultScrollDown"),
    ("scroll_half_page_up", "ResultHalfPageUp"),
    ("scroll_half_page_down", "ResultHalfPageDown"),
    ("scroll_page_up", "ResultPageUp"),
    ("scroll_page_down", "ResultPageDown"),
    ("scroll_top_of_page", "TopOfPage"),
    ("scroll_bottom_of_page", "BottomOfPage"),
)


def _wrap_old_keys(keys: str) -> str:
    return "".join(f"<{part}>" for part in keys.strip().split(" "))


@dataclass
class Config:
    """Key bindings and styles per mode, and general settings."""

    data_dir: Path | None = None
    config_dir: Path | None = None
    keybindings: dict[Mode, dict[KeySequence, str]] = field(default_factory=dict)
    styles: dict[Mode, dict[str, CellStyle]] = field(default_factory=dict)
    general: General = field(default_factory=General)

    @classmethod
    def from_old_config(cls, old_config: OldConfig) -> Config:
        """Build a configuration from the legacy TOML settings."""
        general = old_config.general or OldGeneral()
        keymap = old_config.keymap
        color = old_config.color

        bindings: dict[KeySequence, str] = {}
        if keymap is not None:
            for attribute, action in _OLD_KEYMAP_ACTIONS:
                keys = getattr(keymap, attribute)
                if keys is not None:
                    bindings[parse_key_sequence(_wrap_old_keys(keys))] = action

        styles: dict[str, CellStyle] = {}
        if color is not None and color.background:
            styles["background"] = parse_style(f"on {color.background}")

        return cls(
            keybindings={Mode.ALL: bindings},
            styles={Mode.ALL: styles},
            general=General.from_old(general),
        )

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> Config:
        """Build a configuration from already-parsed configuration data."""
        config = cls()
        if data.get("_data_dir") is not None:
            config.data_dir = Path(data["_data_dir"])
        if data.get("_config_dir") is not None:
            config.config_dir = Path(data["_config_dir"])

        for mode_name, bindings in _as_mapping("keybindings", data.get("keybindings") or {}).items():
            mode = Mode.parse(mode_name)
            parsed: dict[KeySequence, str] = {}
            for keys, action in _as_mapping(f"keybindings.{mode_name}", bindings).items():
                if not isinstance(action, str):
                    raise ValueError(f"action for {keys!r} must be a string")
                parsed[parse_key_sequence(keys)] = action
            config.keybindings[mode] = parsed

        for mode_name, styles in _as_mapping("styles", data.get("styles") or {}).items():
            mode = Mode.parse(mode_name)
            parsed_styles: dict[str, CellStyle] = {}
            for name, description in _as_mapping(f"styles.{mode_name}", styles).items():
                if not isinstance(description, str):
                    raise ValueError(f"style {name!r} must be a string")
                parsed_styles[name] = parse_style(description)
            config.styles[mode] = parsed_styles

        general = _as_mapping("general", data.get("general") or {})
        for name in ("no_shell", "skip_empty_diffs"):
            if general.get(name) is not None:
                setattr(config.general, name, _as_bool(name, general[name]))
        for name in ("shell", "shell_options"):
            value = general.get(name)
            if value is not None:
                if not isinstance(value, str):
                    raise ValueError(f"general.{name} must be a string")
                setattr(config.general, name, value)
        return config

    @classmethod
    def load(cls, config_dir: str | Path | None = None) -> Config:
        """Read and merge config.json5, .json, .yaml, .toml and .ini from the directory."""
        directory = Path(config_dir) if config_dir is not None else get_config_dir()
        data: dict[str, Any] = {
            "_data_dir": str(get_data_dir()),
            "_config_dir": str(directory),
        }
        found = False
        for name, reader in _READERS:
            path = directory / name
            if not path.is_file():
                continue
            found = True
            parsed = reader(path.read_text(encoding="utf-8"))
            if not isinstance(parsed, Mapping):
                raise ValueError(f"{path}: top level must be a table")
            _merge(data, parsed)
        if not found:
            logger.error("No configuration file found. Application may not behave as expected")
        return cls.from_mapping(data)

    def apply_defaults(self, defaults: Config) -> None:
        """Fill in what the user left unset from defaults.

        A default binding is skipped when the user already bound its action in that mode.
        """
        bound_actions = {
            (mode, action)
            for mode, bindings in self.keybindings.items()
            for action in bindings.values()
        }
        for mode, default_bindings in defaults.keybindings.items():
            user_bindings = self.keybindings.setdefault(mode, {})
            for keys, action in default_bindings.items():
                if (mode, action) in bound_actions:
                    continue
                user_bindings.setdefault(keys, action)

        for mode, default_styles in defaults.styles.items():
            user_styles = self.styles.setdefault(mode, {})
            for name, style in default_styles.items():
                user_styles.setdefault(name, style)

        for f in fields(General):
            if getattr(self.general, f.name) is None:
                setattr(self.general, f.name, getattr(defaults.general, f.name))

    def get_style(self, style: str) -> CellStyle:
        """The named style of mode All, or the plain style."""
        return self.styles.get(Mode.ALL, {}).get(style, CellStyle())