import pytest

from global_monitor.commands import Command, command_for_key, decode_key


@pytest.mark.parametrize(
    "key, command",
    [
        ("q", Command.QUIT),
        ("Q", Command.QUIT),
        ("ESC", Command.QUIT),
        ("QUIT", Command.QUIT),
        (" ", Command.TOGGLE_PLAY),
        ("n", Command.NEXT),
        ("p", Command.PREVIOUS),
        ("r", Command.REFRESH),
        ("?", Command.TOGGLE_HELP),
    ],
)
def test_key_bindings(key, command):
    assert command_for_key(key) is command


@pytest.mark.parametrize("key", ["x", "UP", "ENTER", "1", ""])
def test_unbound_keys_map_to_nothing(key):
    assert command_for_key(key) is None


def test_decode_key_names_control_bytes():
    assert decode_key("\x03") == "QUIT"
    assert decode_key("\x7f") == "BACKSPACE"
    assert decode_key("\t") == "TAB"
    assert decode_key("\x1b[6~") == "PGDN"
    assert decode_key("\x1b[99~") == "UNKNOWN"
    assert decode_key("\x1bOA") == "UP"
    assert decode_key("a") == "a"
