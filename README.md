# viddy

Building blocks for a command watcher: run a command at a fixed interval,
keep every result in a history store, and show how the output changed
from one run to the next.

## What it offers

- **Terminal text** (`viddy.termtext`): `Converter` turns raw command output
  with ANSI escape sequences into a `Text` of styled `Char`s. A `Text` can
  be indexed, split into `lines()`, measured with `width()`, restyled with
  `mark_text()`, flattened with `plain_text()` and rendered back to escape
  sequences with `str()`. Styles are `Style` values with a foreground,
  background (`AnsiColor`, `Ansi256Color`, `RgbColor`) and `Effects`.
- **Search and diff marking** (`viddy.search`, `viddy.diff`):
  `search_and_mark` highlights every match of a query; `diff_chunks`
  gives a character-level diff as `Chunk`s; `diff_and_mark` highlights
  inserted characters in green and `diff_and_mark_delete` deleted ones in
  red (whitespace is left unmarked).
- **Running commands** (`viddy.execute`, `viddy.runner`): `prepare_command`
  decides the program and arguments (directly, or through a shell with
  `-c`); the coroutine `exec_command` runs it once with `COLUMNS` and
  `LINES` set to the terminal size and returns stdout, stderr and exit
  code. `run_executor` and `run_executor_precise` repeat it forever on an
  `ExecutionSettings` interval, storing a `Record` per run and putting
  `StartExecution`, `DiffDetected` and `FinishExecution` on a queue (any
  object with `put_nowait`); they pause while the `is_suspend` flag (any
  object with `is_set`, such as `asyncio.Event`) is set. `count_diff`
  reports how many characters were added and deleted.
- **History stores** (`viddy.store`): `viddy.store.records` defines
  `Record`, `RuntimeConfig` and the abstract `Store`. `MemoryStore` keeps
  records in memory; `SQLiteStore(path, init)` keeps them in an SQLite
  file (with `init=True` any existing file is replaced by a fresh
  database) and can be used as a context manager.
- **History entries** (`viddy.history_item`): `HistoryItem` describes one
  execution in a history list; `spans()` returns its line as
  `(text, Style)` pieces such as the start time, ` Running`, ` E(2)`,
  ` +3 -1`, ` ±0` and a repeat count ` *4`.
- **Configuration** (`viddy.config`, `viddy.keys`, `viddy.old_config`):
  key bindings such as `<ctrl-d>` or `<g><g>` (`parse_key_sequence`,
  `parse_key_event`, `key_event_to_string`), colour styles such as
  `"underline red on blue"` (`parse_style`), general settings, and
  conversion from the older TOML configuration (`parse_old_config`,
  `load_old_config`, `Config.from_old_config`).
- **Utilities** (`viddy.utils`): data and configuration directories,
  file logging with `initialize_logging`, `version()` text and
  `is_in_area` for a `Rect`.

## Examples

Parse coloured output and inspect it:

```python
from viddy.termtext import Converter, Style

text = Converter(Style()).convert(b"\x1b[31mr\x1b[32mg\x1b[0m\n")
print(text.plain_text())   # "rg\n"
print(len(text.lines()))   # 2
```

Count the change between two outputs:

```python
from viddy.runner import count_diff

count_diff("hello world", "hello world!")   # (1, 0)
```

Keep a history of runs:

```python
from viddy.store.memory import MemoryStore

store = MemoryStore()
print(store.get_latest_id())   # None until a record is added
```

Read key bindings and styles:

```python
from viddy.keys import parse_key_sequence
from viddy.config import parse_style

parse_key_sequence("<g><g>")          # two presses of "g"
parse_style("underline red on blue")  # red on blue, underlined
```

## Configuration files

`Config.load` reads and merges `config.json5`, `config.json`,
`config.yaml`, `config.toml` and `config.ini` from the given directory,
or from the configuration directory (`viddy.utils.get_config_dir`) when
none is given; it logs an error if none of them exists. The directory can
be overridden with the `VIDDY_CONFIG` environment variable, and the data
directory with `VIDDY_DATA`. `Config.apply_defaults(defaults)` fills in
whatever the user left unset from another `Config`, skipping a default
binding whose action the user already bound in that mode.

## What this package does not do

There is no command-line program and no interactive terminal screen:
nothing here draws the output or history panes, reads key presses or
dispatches the bound actions. No default configuration is bundled; pass
your own `Config` to `apply_defaults`.