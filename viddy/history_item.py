"""An entry in the execution history list."""

from __future__ import annotations

from datetime import datetime, timedelta

from viddy.termtext import AnsiColor, Style

Span = tuple[str, Style]


class HistoryItem:
    """One execution shown in the history pane."""

    def __init__(
        self,
        id: int,
        start_time: datetime,
        interval: timedelta,
        selector_style: Style,
        secondary_text_style: Style,
    ) -> None:
        self.id = id
        self.start_time = start_time
        self.diff: tuple[int, int] | None = None
        self.exit_code: int | None = None
        self.is_running = True
        self.style = Style()
        self.interval = interval
        self.count = 1
        self.selector_style = selector_style
        self.secondary_text_style = secondary_text_style

    def update_diff(self, diff: tuple[int, int] | None, exit_code: int) -> None:
        """Record the outcome of the finished execution."""
        self.diff = diff
        self.exit_code = exit_code
        self.is_running = False

    def update_same_count(self) -> None:
        """Note one more execution with the same output."""
        self.count += 1

    def pre_render(self, is_selected: bool) -> int:
        """Prepare for drawing; return the height in rows."""
        if is_selected:
            self.style = self.selector_style
        return 1

    def _time_label(self) -> str:
        if self.interval >= timedelta(seconds=1):
            return self.start_time.strftime("%H:%M:%S")
        millis = self.start_time.microsecond // 1000
        return f"{self.start_time:%M:%S}.{millis:03d}"

    def spans(self) -> list[Span]:
        """The pieces of text of this entry's line, each with its style."""
        time_style = self.secondary_text_style if self.is_running else Style(fg=AnsiColor.WHITE)
        result: list[Span] = [(self._time_label(), time_style)]

        if self.is_running:
            result.append((" Running", self.secondary_text_style))
            return result

        exit_code = self.exit_code or 0
        if exit_code > 0:
            result.append((f" E({exit_code})", Style(fg=AnsiColor.RED)))
        elif self.diff == (0, 0):
            result.append((" ±0", self.secondary_text_style))
        elif self.diff is not None:
            added, deleted = self.diff
            result.append((f" +{added}", Style(fg=AnsiColor.GREEN)))
            result.append((f" -{deleted}", Style(fg=AnsiColor.RED)))

        if self.count > 1:
            result.append((f" *{self.count}", self.secondary_text_style))
        return result