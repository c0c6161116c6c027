"""Key events and the textual notation used for key bindings."""

from __future__ import annotations

import enum
from dataclasses import dataclass


@dataclass(frozen=True)
class KeyCode:
    """A key on the keyboard: a named key, a character or a function key."""

    name: str
    char: str | None = None
    number: int | None = None

    @classmethod
    def of_char(cls, c: str) -> KeyCode:
        return cls("char", char=c)

    @classmethod
    def function(cls, number: int) -> KeyCode:
        return cls("f", number=number)

    def __str__(self) -> str:
        if self.name == "char":
            return f"char({self.char!r})"
        if self.name == "f":
            return f"f({self.number})"
        return self.name


_NAMED_KEYS = (
    "backspace",
    "enter",
    "left",
    "right",
    "up",
    "down",
    "home",
    "end",
    "pageup",
    "pagedown",
    "tab",
    "backtab",
    "delete",
    "insert",
    "esc",
)

for _name in _NAMED_KEYS:
    setattr(KeyCode, _name.upper(), KeyCode(_name))
del _name


class KeyModifiers(enum.Flag):
    """Modifier keys held with a key press."""

    SHIFT = enum.auto()
    CONTROL = enum.auto()
    ALT = enum.auto()


NO_MODIFIERS = KeyModifiers(0)


@dataclass(frozen=True)
class KeyEvent:
    """A key press with its modifiers."""

    code: KeyCode
    modifiers: KeyModifiers = NO_MODIFIERS


_MODIFIER_PREFIXES = (
    ("ctrl-", KeyModifiers.CONTROL),
    ("alt-", KeyModifiers.ALT),
    ("shift-", KeyModifiers.SHIFT),
)

_KEY_NAMES: dict[str, KeyCode] = {
    "esc": KeyCode("esc"),
    "enter": KeyCode("enter"),
    "left": KeyCode("left"),
    "right": KeyCode("right"),
    "up": KeyCode("up"),
    "down": KeyCode("down"),
    "home": KeyCode("home"),
    "end": KeyCode("end"),
    "pageup": KeyCode("pageup"),
    "pagedown": KeyCode("pagedown"),
    "backspace": KeyCode("backspace"),
    "delete": KeyCode("delete"),
    "insert": KeyCode("insert"),
    "space": KeyCode.of_char(" "),
    "hyphen": KeyCode.of_char("-"),
    "minus": KeyCode.of_char("-"),
    "tab": KeyCode("tab"),
    **{f"f{n}": KeyCode.function(n) for n in range(1, 13)},
}


def _extract_modifiers(raw: str) -> tuple[str, KeyModifiers]:
    modifiers = NO_MODIFIERS
    current = raw
    while True:
        for prefix, flag in _MODIFIER_PREFIXES:
            if current.startswith(prefix):
                modifiers |= flag
                current = current[len(prefix):]
                break
        else:
            return current, modifiers


def _parse_key_code(raw: str, modifiers: KeyModifiers) -> KeyEvent:
    if raw == "backtab":
        return KeyEvent(KeyCode("backtab"), modifiers | KeyModifiers.SHIFT)
    code = _KEY_NAMES.get(raw)
    if code is not None:
        return KeyEvent(code, modifiers)
    if len(raw.encode("utf-8")) == 1:
        c = raw.upper() if KeyModifiers.SHIFT in modifiers else raw
        return KeyEvent(KeyCode.of_char(c), modifiers)
    raise ValueError(f"Unable to parse {raw}")


def parse_key_event(raw: str) -> KeyEvent:
    """Parse a single key such as "ctrl-a" or "Shift-Down", ignoring case."""
    remaining, modifiers = _extract_modifiers(raw.lower())
    return _parse_key_code(remaining, modifiers)


def key_event_to_string(key_event: KeyEvent) -> str:
    """Render a key event in the notation parse_key_event reads."""
    code = key_event.code
    if code.name == "f":
        key = f"f({code.number})"
    elif code.name == "char":
        key = "space" if code.char == " " else (code.char or "")
    elif code.name in _NAMED_KEYS:
        key = code.name
    else:
        key = ""

    names = [
        name
        for flag, name in (
            (KeyModifiers.CONTROL, "ctrl"),
            (KeyModifiers.SHIFT, "shift"),
            (KeyModifiers.ALT, "alt"),
        )
        if flag in key_event.modifiers
    ]
    prefix = "-".join(names)
    return f"{prefix}-{key}" if prefix else key


def parse_key_sequence(raw: str) -> tuple[KeyEvent, ...]:
    """Parse a sequence of keys written as "<g><g>" or "<ctrl-d>"."""
    if raw.count(">") != raw.count("<"):
        raise ValueError(f"Unable to parse `{raw}`")
    if "><" not in raw:
        raw = raw.removeprefix("<").removeprefix(">")
    keys = []
    for part in raw.split("><"):
        if part.startswith("<"):
            part = part[1:]
        elif part.endswith(">"):
            part = part[:-1]
        keys.append(part)
    return tuple(parse_key_event(key) for key in keys)