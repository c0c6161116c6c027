import pytest

from viddy.keys import (
    KeyCode,
    KeyEvent,
    KeyModifiers,
    key_event_to_string,
    parse_key_event,
    parse_key_sequence,
)

NONE = KeyModifiers(0)


def test_simple_keys():
    assert parse_key_event("a") == KeyEvent(KeyCode.of_char("a"), NONE)
    assert parse_key_event("enter") == KeyEvent(KeyCode("enter"), NONE)
    assert parse_key_event("esc") == KeyEvent(KeyCode("esc"), NONE)


def test_with_modifiers():
    assert parse_key_event("ctrl-a") == KeyEvent(KeyCode.of_char("a"), KeyModifiers.CONTROL)
    assert parse_key_event("alt-enter") == KeyEvent(KeyCode("enter"), KeyModifiers.ALT)
    assert parse_key_event("shift-esc") == KeyEvent(KeyCode("esc"), KeyModifiers.SHIFT)


def test_multiple_modifiers():
    assert parse_key_event("ctrl-alt-a") == KeyEvent(
        KeyCode.of_char("a"), KeyModifiers.CONTROL | KeyModifiers.ALT
    )
    assert parse_key_event("ctrl-shift-enter") == KeyEvent(
        KeyCode("enter"), KeyModifiers.CONTROL | KeyModifiers.SHIFT
    )


def test_reverse_multiple_modifiers():
    event = KeyEvent(KeyCode.of_char("a"), KeyModifiers.CONTROL | KeyModifiers.ALT)
    assert key_event_to_string(event) == "ctrl-alt-a"


@pytest.mark.parametrize("raw", ["invalid-key", "ctrl-invalid-key", "", "ctrl-é"])
def test_invalid_keys(raw):
    with pytest.raises(ValueError):
        parse_key_event(raw)


def test_case_insensitivity():
    assert parse_key_event("CTRL-a") == KeyEvent(KeyCode.of_char("a"), KeyModifiers.CONTROL)
    assert parse_key_event("AlT-eNtEr") == KeyEvent(KeyCode("enter"), KeyModifiers.ALT)


def test_shift_uppercases_character():
    assert parse_key_event("Shift-g") == KeyEvent(KeyCode.of_char("G"), KeyModifiers.SHIFT)


def test_backtab_implies_shift():
    assert parse_key_event("backtab") == KeyEvent(KeyCode("backtab"), KeyModifiers.SHIFT)


@pytest.mark.parametrize(
    "raw, code",
    [
        ("space", KeyCode.of_char(" ")),
        ("hyphen", KeyCode.of_char("-")),
        ("minus", KeyCode.of_char("-")),
        ("f5", KeyCode.function(5)),
        ("f12", KeyCode.function(12)),
        ("pagedown", KeyCode("pagedown")),
        ("tab", KeyCode("tab")),
    ],
)
def test_named_keys(raw, code):
    assert parse_key_event(raw).code == code


def test_key_event_to_string_special_keys():
    assert key_event_to_string(KeyEvent(KeyCode.of_char(" "))) == "space"
    assert key_event_to_string(KeyEvent(KeyCode.function(3))) == "f(3)"
    assert key_event_to_string(KeyEvent(KeyCode("up"), KeyModifiers.SHIFT)) == "shift-up"


def test_key_event_to_string_modifier_order():
    event = KeyEvent(
        KeyCode("down"), KeyModifiers.ALT | KeyModifiers.SHIFT | KeyModifiers.CONTROL
    )
    assert key_event_to_string(event) == "ctrl-shift-alt-down"


@pytest.mark.parametrize("raw", ["ctrl-alt-a", "shift-A", "enter", "ctrl-shift-up", "space"])
def test_string_round_trip(raw):
    event = parse_key_event(raw)
    assert parse_key_event(key_event_to_string(event)) == event


def test_parse_single_key_sequence():
    assert parse_key_sequence("<q>") == (KeyEvent(KeyCode.of_char("q")),)


def test_parse_repeated_key_sequence():
    g = KeyEvent(KeyCode.of_char("g"))
    assert parse_key_sequence("<g><g>") == (g, g)


def test_parse_long_key_sequence():
    assert parse_key_sequence("<Ctrl-Shift-Up><a><Down>") == (
        KeyEvent(KeyCode("up"), KeyModifiers.CONTROL | KeyModifiers.SHIFT),
        KeyEvent(KeyCode.of_char("a")),
        KeyEvent(KeyCode("down")),
    )


def test_parse_sequence_without_brackets():
    assert parse_key_sequence("ctrl-d") == (
        KeyEvent(KeyCode.of_char("d"), KeyModifiers.CONTROL),
    )


@pytest.mark.parametrize("raw", ["<q", "q>", "<<q>"])
def test_unbalanced_sequence(raw):
    with pytest.raises(ValueError, match="Unable to parse"):
        parse_key_sequence(raw)


def test_sequence_with_invalid_key():
    with pytest.raises(ValueError):
        parse_key_sequence("<a><nokey>")


def test_sequences_usable_as_dict_keys():
    bindings = {parse_key_sequence("<g><g>"): "top"}
    assert bindings[parse_key_sequence("<G><G>")] == "top"