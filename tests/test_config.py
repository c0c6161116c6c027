import json
from pathlib import Path

import pytest

from viddy.config import (
    CellStyle,
    Config,
    General,
    Mode,
    Modifier,
    convert_to_anstyle,
    convert_to_anstyle_color,
    parse_color,
    parse_style,
    process_color_string,
)
from viddy.keys import parse_key_sequence
from viddy.old_config import parse_old_config
from viddy.termtext import Ansi256Color, RgbColor, Style


def _defaults() -> Config:
    return Config.from_mapping(
        {
            "keybindings": {"All": {"<q>": "Quit", "<j>": "ResultScrollDown"}},
            "styles": {"All": {"background": "on black", "timestamp": "gray5"}},
            "general": {
                "no_shell": False,
                "shell": "sh",
                "shell_options": "",
                "skip_empty_diffs": False,
            },
        }
    )


def test_parse_style_default():
    assert parse_style("") == CellStyle()


def test_parse_style_foreground():
    assert parse_style("red").fg == 1


def test_parse_style_background():
    assert parse_style("on blue").bg == 4


def test_parse_style_modifiers():
    style = parse_style("underline red on blue")
    assert style.fg == 1
    assert style.bg == 4
    assert Modifier.UNDERLINED in style.modifiers


def test_parse_style_bold_word_becomes_modifier():
    style = parse_style("bold red")
    assert style.fg == 1
    assert style.modifiers == Modifier.BOLD


def test_process_color_string():
    color, modifiers = process_color_string("underline bold inverse gray")
    assert color == "gray"
    assert Modifier.UNDERLINED in modifiers
    assert Modifier.BOLD in modifiers
    assert Modifier.REVERSED in modifiers


def test_process_color_string_grey_spelling():
    assert process_color_string("grey3") == ("gray3", Modifier(0))


def test_parse_color_rgb():
    assert parse_color("rgb123") == 67


def test_parse_color_unknown():
    assert parse_color("unknown") is None


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("color123", 123),
        ("color", 0),
        ("gray5", 237),
        ("bright color5", 5),
        ("bold magenta", 13),
        ("  white  ", 7),
        ("black", 0),
    ],
)
def test_parse_color_values(name, expected):
    assert parse_color(name) == expected


def test_parse_color_short_rgb_raises():
    with pytest.raises(ValueError):
        parse_color("rgb1")


def test_convert_to_anstyle():
    style = convert_to_anstyle(CellStyle(fg=1, bg=RgbColor(1, 2, 3), modifiers=Modifier.BOLD))
    assert style == Style(fg=Ansi256Color(1), bg=RgbColor(1, 2, 3))


def test_convert_to_anstyle_color_unsupported():
    with pytest.raises(TypeError):
        convert_to_anstyle_color("red")


def test_mode_parse_is_case_insensitive():
    assert Mode.parse("search") is Mode.SEARCH
    with pytest.raises(ValueError):
        Mode.parse("Other")


def test_config(tmp_path: Path):
    (tmp_path / "config.json").write_text(
        json.dumps({"keybindings": {"All": {"<q>": "Quit"}}}), encoding="utf-8"
    )
    config = Config.load(tmp_path)
    assert config.keybindings[Mode.ALL][parse_key_sequence("<q>")] == "Quit"
    assert config.config_dir == tmp_path


def test_load_json5_and_later_files_override(tmp_path: Path):
    (tmp_path / "config.json5").write_text(
        """{
  // bindings
  keybindings: { All: { '<ctrl-d>': 'ResultHalfPageDown', }, },
  /* general settings */
  general: { shell: "zsh", no_shell: true, },
}""",
        encoding="utf-8",
    )
    (tmp_path / "config.toml").write_text('[general]\nshell = "bash"\n', encoding="utf-8")
    config = Config.load(tmp_path)
    assert config.keybindings[Mode.ALL][parse_key_sequence("<ctrl-d>")] == "ResultHalfPageDown"
    assert config.general.shell == "bash"
    assert config.general.no_shell is True


def test_load_ini_booleans(tmp_path: Path):
    (tmp_path / "config.ini").write_text("[general]\nskip_empty_diffs = true\n", encoding="utf-8")
    assert Config.load(tmp_path).general.skip_empty_diffs is True


def test_load_without_files(tmp_path: Path):
    config = Config.load(tmp_path)
    assert config.keybindings == {}
    assert config.general == General()


def test_from_mapping_bad_key_raises():
    with pytest.raises(ValueError):
        Config.from_mapping({"keybindings": {"All": {"<q": "Quit"}}})


def test_old_config_defaulting():
    old = parse_old_config("\n[general]\nskip_empty_diffs = true\n")
    config = Config.from_old_config(old)
    config.apply_defaults(_defaults())
    assert config.general.skip_empty_diffs is True
    assert config.general.shell == "sh"


def test_old_config_keymap():
    old = parse_old_config(
        """
[keymap]
timemachine_go_to_past = "Down"
timemachine_go_to_more_past = "Shift-Down"
timemachine_go_to_future = "Up"
timemachine_go_to_more_future = "Shift-Up"
timemachine_go_to_now = "Ctrl-Shift-Up"
timemachine_go_to_oldest = "Ctrl-Shift-Down"
scroll_left = "h"
scroll_right = "l"
scroll_up = "k"
scroll_down = "j"
scroll_half_page_up = "Ctrl-u"
scroll_half_page_down = "Ctrl-d"
scroll_page_up = "Ctrl-b"
scroll_page_down = "Ctrl-f"
scroll_bottom_of_page = "Shift-g"
scroll_top_of_page = "g g"
"""
    )
    config = Config.from_old_config(old)
    config.apply_defaults(_defaults())
    bindings = config.keybindings[Mode.ALL]
    expected = {
        "<Down>": "GoToPast",
        "<Shift-Down>": "GoToMorePast",
        "<Up>": "GoToFuture",
        "<Shift-Up>": "GoToMoreFuture",
        "<Ctrl-Shift-Up>": "GoToCurrent",
        "<Ctrl-Shift-Down>": "GoToOldest",
        "<h>": "ScrollLeft",
        "<l>": "ScrollRight",
        "<k>": "ResultScrollUp",
        "<j>": "ResultScrollDown",
        "<Ctrl-u>": "ResultHalfPageUp",
        "<Ctrl-d>": "ResultHalfPageDown",
        "<Ctrl-b>": "ResultPageUp",
        "<Ctrl-f>": "ResultPageDown",
        "<Shift-g>": "BottomOfPage",
        "<g><g>": "TopOfPage",
    }
    for keys, action in expected.items():
        assert bindings[parse_key_sequence(keys)] == action


def test_old_config_background_style():
    old = parse_old_config('[color]\nbackground = "white"\n')
    config = Config.from_old_config(old)
    assert config.get_style("background").bg == 7


def test_apply_defaults_skips_actions_already_bound():
    config = Config.from_mapping({"keybindings": {"All": {"<k>": "ResultScrollDown"}}})
    config.apply_defaults(_defaults())
    bindings = config.keybindings[Mode.ALL]
    assert parse_key_sequence("<j>") not in bindings
    assert bindings[parse_key_sequence("<q>")] == "Quit"
    assert bindings[parse_key_sequence("<k>")] == "ResultScrollDown"


def test_apply_defaults_keeps_user_styles():
    config = Config.from_mapping({"styles": {"All": {"background": "on blue"}}})
    config.apply_defaults(_defaults())
    assert config.get_style("background").bg == 4
    assert config.get_style("timestamp").fg == 237


def test_get_style_missing_is_plain():
    assert Config().get_style("nothing") == CellStyle()