"""Styled terminal text and conversion of ANSI-escaped output into it."""

from __future__ import annotations

import enum
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field, replace
from typing import Union

from wcwidth import wcwidth

RESET = "\x1b[0m"


class AnsiColor(enum.Enum):
    """The sixteen basic terminal colours, valued by palette index."""

    BLACK = 0
    RED = 1
    GREEN = 2
    YELLOW = 3
    BLUE = 4
    MAGENTA = 5
    CYAN = 6
    WHITE = 7
    BRIGHT_BLACK = 8
    BRIGHT_RED = 9
    BRIGHT_GREEN = 10
    BRIGHT_YELLOW = 11
    BRIGHT_BLUE = 12
    BRIGHT_MAGENTA = 13
    BRIGHT_CYAN = 14
    BRIGHT_WHITE = 15


@dataclass(frozen=True)
class Ansi256Color:
    """A colour from the 256-colour palette."""

    index: int

    def __post_init__(self) -> None:
        if not 0 <= self.index <= 255:
            raise ValueError(f"palette index out of range: {self.index}")


@dataclass(frozen=True)
class RgbColor:
    """A 24-bit colour."""

    r: int
    g: int
    b: int

    def __post_init__(self) -> None:
        for channel in (self.r, self.g, self.b):
            if not 0 <= channel <= 255:
                raise ValueError(f"colour channel out of range: {channel}")


Color = Union[AnsiColor, Ansi256Color, RgbColor]


class Effects(enum.Flag):
    """Text effects that can be combined on a style."""

    BOLD = enum.auto()
    DIMMED = enum.auto()
    ITALIC = enum.auto()
    UNDERLINE = enum.auto()
    DOUBLE_UNDERLINE = enum.auto()
    CURLY_UNDERLINE = enum.auto()
    DOTTED_UNDERLINE = enum.auto()
    DASHED_UNDERLINE = enum.auto()
    BLINK = enum.auto()
    INVERT = enum.auto()
    HIDDEN = enum.auto()
    STRIKETHROUGH = enum.auto()


_EFFECT_CODES = (
    (Effects.BOLD, "1"),
    (Effects.DIMMED, "2"),
    (Effects.ITALIC, "3"),
    (Effects.UNDERLINE, "4"),
    (Effects.DOUBLE_UNDERLINE, "21"),
    (Effects.CURLY_UNDERLINE, "4:3"),
    (Effects.DOTTED_UNDERLINE, "4:4"),
    (Effects.DASHED_UNDERLINE, "4:5"),
    (Effects.BLINK, "5"),
    (Effects.INVERT, "7"),
    (Effects.HIDDEN, "8"),
    (Effects.STRIKETHROUGH, "9"),
)

NO_EFFECTS = Effects(0)


def _color_sequence(color: Color, background: bool) -> str:
    match color:
        case AnsiColor():
            index = color.value
            base = (40 if background else 30) if index < 8 else (100 if background else 90)
            return f"\x1b[{base + index % 8}m"
        case Ansi256Color(index=index):
            return f"\x1b[{48 if background else 38};5;{index}m"
        case RgbColor(r=r, g=g, b=b):
            return f"\x1b[{48 if background else 38};2;{r};{g};{b}m"
    raise TypeError(f"not a colour: {color!r}")


@dataclass(frozen=True)
class Style:
    """Foreground, background and effects of a piece of text."""

    fg: Color | None = None
    bg: Color | None = None
    effects: Effects = NO_EFFECTS

    def with_fg(self, color: Color | None) -> Style:
        return replace(self, fg=color)

    def with_bg(self, color: Color | None) -> Style:
        return replace(self, bg=color)

    def with_effects(self, effects: Effects) -> Style:
        return replace(self, effects=effects)

    def render(self) -> str:
        """Escape sequences that switch a terminal to this style."""
        parts = [f"\x1b[{code}m" for flag, code in _EFFECT_CODES if flag in self.effects]
        if self.fg is not None:
            parts.append(_color_sequence(self.fg, background=False))
        if self.bg is not None:
            parts.append(_color_sequence(self.bg, background=True))
        return "".join(parts)


@dataclass(frozen=True)
class Char:
    """A single character with its style."""

    c: str
    style: Style = Style()

    def width(self) -> int | None:
        """Display width in terminal columns, or None for control characters."""
        columns = wcwidth(self.c)
        return None if columns < 0 else columns

    def __str__(self) -> str:
        return self.c


class Text:
    """A sequence of styled characters."""

    __slots__ = ("chars",)

    def __init__(self, text: str = "") -> None:
        self.chars: list[Char] = [Char(c) for c in text]

    @classmethod
    def from_chars(cls, chars: Iterable[Char]) -> Text:
        text = cls()
        text.chars = list(chars)
        return text

    def mark_text(self, start: int, end: int, style: Style) -> None:
        """Give the characters in [start, end) the style; out-of-range positions are ignored."""
        for i in range(max(start, 0), min(end, len(self.chars))):
            self.chars[i] = replace(self.chars[i], style=style)

    def lines(self) -> list[Text]:
        result = [Text()]
        for char in self.chars:
            if char.c == "\n":
                result.append(Text())
            else:
                result[-1].chars.append(char)
        return result

    def plain_text(self) -> str:
        return "".join(char.c for char in self.chars)

    def width(self) -> int:
        return sum(char.width() or 0 for char in self.chars)

    def __str__(self) -> str:
        parts: list[str] = []
        last_style: Style | None = None
        for char in self.chars:
            if char.style != last_style:
                if last_style is not None:
                    parts.append(RESET)
                parts.append(char.style.render())
                last_style = char.style
            parts.append(char.c)
        return "".join(parts)

    def __getitem__(self, index):
        if isinstance(index, slice):
            return Text.from_chars(self.chars[index])
        return self.chars[index]

    def __len__(self) -> int:
        return len(self.chars)

    def __iter__(self) -> Iterator[Char]:
        return iter(self.chars)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Text):
            return NotImplemented
        return self.chars == other.chars

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Text({self.chars!r})"


# --- escape sequence scanning -------------------------------------------------

_MAX_PARAMS = 32
_MAX_INTERMEDIATES = 2
_PARAM_MAX = 0xFFFF


@dataclass(frozen=True)
class _Print:
    c: str


@dataclass(frozen=True)
class _Execute:
    code: int


@dataclass(frozen=True)
class _CsiDispatch:
    params: tuple[tuple[int, ...], ...]
    intermediates: bytes
    ignore: bool
    final: str


@dataclass
class _CsiCollector:
    params: list[tuple[int, ...]] = field(default_factory=list)
    group: list[int] = field(default_factory=list)
    value: int = 0
    count: int = 0
    intermediates: bytearray = field(default_factory=bytearray)
    ignoring: bool = False

    def digit(self, digit: int) -> None:
        self.value = min(self.value * 10 + digit, _PARAM_MAX)

    def _push(self) -> None:
        if self.count >= _MAX_PARAMS:
            self.ignoring = True
        else:
            self.group.append(self.value)
            self.count += 1
        self.value = 0

    def end_subparam(self) -> None:
        self._push()

    def end_param(self) -> None:
        self._push()
        if self.group:
            self.params.append(tuple(self.group))
            self.group = []

    def intermediate(self, code: int) -> None:
        if len(self.intermediates) >= _MAX_INTERMEDIATES:
            self.ignoring = True
        else:
            self.intermediates.append(code)

    def dispatch(self, final: str) -> _CsiDispatch:
        self.end_param()
        return _CsiDispatch(tuple(self.params), bytes(self.intermediates), self.ignoring, final)


class _State(enum.Enum):
    GROUND = enum.auto()
    ESCAPE = enum.auto()
    ESCAPE_INTERMEDIATE = enum.auto()
    CSI_ENTRY = enum.auto()
    CSI_PARAM = enum.auto()
    CSI_INTERMEDIATE = enum.auto()
    CSI_IGNORE = enum.auto()
    OSC = enum.auto()
    STRING = enum.auto()


def _scan(data: bytes) -> Iterator[_Print | _Execute | _CsiDispatch]:
    state = _State.GROUND
    csi = _CsiCollector()
    for ch in data.decode("utf-8", errors="replace"):
        code = ord(ch)
        if code in (0x18, 0x1A):
            yield _Execute(code)
            state = _State.GROUND
        elif code == 0x1B:
            state = _State.ESCAPE
        elif state is _State.GROUND:
            if code < 0x20:
                yield _Execute(code)
            elif code != 0x7F:
                yield _Print(ch)
        elif state in (_State.OSC, _State.STRING):
            if state is _State.OSC and code == 0x07:
                state = _State.GROUND
        elif code < 0x20:
            yield _Execute(code)
        elif code > 0x7E:
            continue
        elif state is _State.ESCAPE:
            if ch == "[":
                csi = _CsiCollector()
                state = _State.CSI_ENTRY
            elif ch == "]":
                state = _State.OSC
            elif ch in "PX^_":
                state = _State.STRING
            elif code <= 0x2F:
                state = _State.ESCAPE_INTERMEDIATE
            else:
                state = _State.GROUND
        elif state is _State.ESCAPE_INTERMEDIATE:
            if code >= 0x30:
                state = _State.GROUND
        elif state is _State.CSI_IGNORE:
            if code >= 0x40:
                state = _State.GROUND
        elif code >= 0x40:
            yield csi.dispatch(ch)
            state = _State.GROUND
        elif code <= 0x2F:
            csi.intermediate(code)
            state = _State.CSI_INTERMEDIATE
        elif state is _State.CSI_INTERMEDIATE:
            state = _State.CSI_IGNORE
        elif "0" <= ch <= "9":
            csi.digit(code - 0x30)
            state = _State.CSI_PARAM
        elif ch == ";":
            csi.end_param()
            state = _State.CSI_PARAM
        elif ch == ":":
            csi.end_subparam()
            state = _State.CSI_PARAM
        elif state is _State.CSI_ENTRY:
            csi.intermediate(code)
            state = _State.CSI_PARAM
        else:
            state = _State.CSI_IGNORE


# --- SGR interpretation --------------------------------------------------------

_SGR_EFFECTS = {
    1: Effects.BOLD,
    2: Effects.DIMMED,
    3: Effects.ITALIC,
    5: Effects.BLINK,
    8: Effects.HIDDEN,
    9: Effects.STRIKETHROUGH,
}

_CANCEL_EFFECTS = {
    21: Effects.BOLD,
    22: Effects.DIMMED,
    23: Effects.ITALIC,
    24: Effects.UNDERLINE,
    25: Effects.BLINK,
    28: Effects.HIDDEN,
    29: Effects.STRIKETHROUGH,
}


def _parse_sgr_color(values: Iterator[int]) -> Color | None:
    kind = next(values, None)
    if kind == 2:
        channels = []
        for _ in range(3):
            value = next(values, None)
            if value is None or value > 255:
                return None
            channels.append(value)
        return RgbColor(*channels)
    if kind == 5:
        value = next(values, None)
        if value is None or value > 255:
            return None
        return Ansi256Color(value)
    return None


def _style_from_sgr(params: tuple[tuple[int, ...], ...]) -> Style:
    style = Style()
    groups = iter(params)
    for group in groups:
        head, rest = group[0], group[1:]
        if head == 4:
            style = style.with_effects(style.effects | Effects.UNDERLINE)
        elif head in (38, 48):
            if rest:
                start = 2 if len(rest) > 4 else 1
                color = _parse_sgr_color(iter((rest[0], *rest[start:])))
            else:
                color = _parse_sgr_color(g[0] for g in groups)
            style = style.with_fg(color) if head == 38 else style.with_bg(color)
        elif rest:
            continue
        elif head in _SGR_EFFECTS:
            style = style.with_effects(style.effects | _SGR_EFFECTS[head])
        elif 30 <= head <= 37:
            style = style.with_fg(AnsiColor(head - 30))
        elif 40 <= head <= 47:
            style = style.with_bg(AnsiColor(head - 40))
        elif 90 <= head <= 97:
            style = style.with_fg(AnsiColor(head - 90 + 8))
        elif 100 <= head <= 107:
            style = style.with_bg(AnsiColor(head - 100 + 8))
    return style


class _Performer:
    def __init__(self, original_style: Style) -> None:
        self.original_style = original_style
        self.style = original_style
        self.text = Text()

    def print(self, c: str) -> None:
        self.text.chars.append(Char(c, self.style))

    def execute(self, code: int) -> None:
        if code in (0x0A, 0x09):
            self.text.chars.append(Char(chr(code), self.style))

    def csi_dispatch(self, event: _CsiDispatch) -> None:
        if event.ignore or len(event.intermediates) > 1:
            return
        params = event.params
        if event.final == "m" and not event.intermediates:
            if not params:
                self.style = self.original_style
                return
            sgr = _style_from_sgr(params)
            if sgr.fg is not None:
                self.style = self.style.with_fg(sgr.fg)
            if sgr.bg is not None:
                self.style = self.style.with_bg(sgr.bg)
            self.style = self.style.with_effects(self.style.effects | sgr.effects)

        first = params[0] if params else None
        if first is None or len(first) != 1:
            return
        code = first[0]
        if code == 0:
            self.style = self.original_style
        elif code in _CANCEL_EFFECTS:
            self.style = self.style.with_effects(self.style.effects & ~_CANCEL_EFFECTS[code])
        elif code == 39:
            self.style = self.style.with_fg(None)
        elif code == 49:
            self.style = self.style.with_bg(None)


class Converter:
    """Turns raw command output with ANSI escapes into styled Text."""

    def __init__(self, original_style: Style = Style()) -> None:
        self.original_style = original_style

    def convert(self, data: bytes) -> Text:
        performer = _Performer(self.original_style)
        for event in _scan(bytes(data)):
            match event:
                case _Print(c=c):
                    performer.print(c)
                case _Execute(code=code):
                    performer.execute(code)
                case _CsiDispatch():
                    performer.csi_dispatch(event)
        return performer.text