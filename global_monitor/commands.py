from __future__ import annotations

from enum import Enum


class Command(str, Enum):
    QUIT = "quit"
    TOGGLE_PLAY = "toggle_play"
    NEXT = "next"
    PREVIOUS = "previous"
    REFRESH = "refresh"
    TOGGLE_HELP = "toggle_help"


KEY_BINDINGS: dict[str, Command] = {
    "q": Command.QUIT,
    "ESC": Command.QUIT,
    "QUIT": Command.QUIT,
    " ": Command.TOGGLE_PLAY,
    "n": Command.NEXT,
    "p": Command.PREVIOUS,
    "r": Command.REFRESH,
    "?": Command.TOGGLE_HELP,
}

ESCAPE_SEQUENCES: dict[str, str] = {
    "[A": "UP",
    "[B": "DOWN",
    "[C": "RIGHT",
    "[D": "LEFT",
    "OA": "UP",
    "OB": "DOWN",
    "OC": "RIGHT",
    "OD": "LEFT",
    "[Z": "SHTAB",
    "[5~": "PGUP",
    "[6~": "PGDN",
}

HELP_LINES: tuple[tuple[str, str], ...] = (
    ("q / Esc", "quit"),
    ("space", "play / pause media"),
    ("n", "next track"),
    ("p", "previous track"),
    ("r", "refresh every feed now"),
    ("?", "toggle this help"),
)


def decode_key(raw: str) -> str:
    """Name a single keypress read in cbreak mode.

    Printable characters name themselves; control bytes and escape
    sequences map to upper-case names (``ENTER``, ``ESC``, ``UP`` ...).
    """
    if raw in {"\r", "\n"}:
        return "ENTER"
    if raw == "\t":
        return "TAB"
    if raw in {"\x7f", "\b"}:
        return "BACKSPACE"
    if raw == "\x03":
        return "QUIT"
    if raw == "\x1b":
        return "ESC"
    if raw.startswith("\x1b"):
        return ESCAPE_SEQUENCES.get(raw[1:], "UNKNOWN")
    return raw


def command_for_key(key: str) -> Command | None:
    if len(key) == 1:
        key = key.lower() if key.isalpha() else key
    return KEY_BINDINGS.get(key)
