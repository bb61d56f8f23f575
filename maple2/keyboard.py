"""Translation of host key presses into Apple ][ keyboard codes."""

from __future__ import annotations

import string
from dataclasses import dataclass
from enum import Enum


class Key(Enum):
    """Keys of the host keyboard."""

    ARROW_LEFT = "ArrowLeft"
    ARROW_RIGHT = "ArrowRight"
    ARROW_DOWN = "ArrowDown"
    ARROW_UP = "ArrowUp"
    BACKSPACE = "Backspace"
    ESCAPE = "Escape"
    TAB = "Tab"
    ENTER = "Enter"
    SPACE = "Space"
    COLON = "Colon"
    COMMA = "Comma"
    BACKSLASH = "Backslash"
    OPEN_BRACKET = "OpenBracket"
    CLOSE_BRACKET = "CloseBracket"
    MINUS = "Minus"
    PERIOD = "Period"
    PLUS = "Plus"
    EQUALS = "Equals"
    SEMICOLON = "Semicolon"
    DELETE = "Delete"
    INSERT = "Insert"
    HOME = "Home"
    END = "End"
    PAGE_UP = "PageUp"
    PAGE_DOWN = "PageDown"
    F1 = "F1"
    NUM0 = "0"
    NUM1 = "1"
    NUM2 = "2"
    NUM3 = "3"
    NUM4 = "4"
    NUM5 = "5"
    NUM6 = "6"
    NUM7 = "7"
    NUM8 = "8"
    NUM9 = "9"
    A = "A"
    B = "B"
    C = "C"
    D = "D"
    E = "E"
    F = "F"
    G = "G"
    H = "H"
    I = "I"  # noqa: E741
    J = "J"
    K = "K"
    L = "L"
    M = "M"
    N = "N"
    O = "O"  # noqa: E741
    P = "P"
    Q = "Q"
    R = "R"
    S = "S"
    T = "T"
    U = "U"
    V = "V"
    W = "W"
    X = "X"
    Y = "Y"
    Z = "Z"


@dataclass(frozen=True)
class Modifiers:
    """Modifier keys held during a key press."""

    shift: bool = False
    ctrl: bool = False


_DIGITS = [Key(d) for d in string.digits]
_LETTERS = [Key(c) for c in string.ascii_uppercase]

_PLAIN: dict[Key, int] = {
    Key.ARROW_LEFT: 0x88,
    Key.BACKSPACE: 0x88,
    Key.ARROW_RIGHT: 0x95,
    Key.ARROW_DOWN: 0x8A,
    Key.ARROW_UP: 0x8B,
    Key.ESCAPE: 0x9B,
    Key.TAB: 0x89,
    Key.ENTER: 0x8D,
    Key.SPACE: 0xA0,
    Key.COLON: 0xBA,
    Key.COMMA: 0xAC,
    Key.BACKSLASH: 0xDC,
    Key.OPEN_BRACKET: 0xDB,
    Key.CLOSE_BRACKET: 0xDD,
    Key.MINUS: 0xAD,
    Key.PERIOD: 0xAE,
    Key.PLUS: 0xAB,
    Key.EQUALS: 0xBD,
    Key.SEMICOLON: 0xBB,
    Key.DELETE: 0xFF,
    **{key: 0xB0 + i for i, key in enumerate(_DIGITS)},
    **{key: 0xC1 + i for i, key in enumerate(_LETTERS)},
}

_SHIFTED: dict[Key, int] = {
    Key.NUM0: 0xA9,
    Key.NUM1: 0xA1,
    Key.NUM2: 0xA2,
    Key.NUM3: 0xA3,
    Key.NUM4: 0xA4,
    Key.NUM5: 0xA5,
    Key.NUM6: 0xBF,
    Key.NUM7: 0xA6,
    Key.NUM8: 0xA7,
    Key.NUM9: 0xA8,
    Key.MINUS: 0xDF,
}

_CONTROL: dict[Key, int] = {key: 0x81 + i for i, key in enumerate(_LETTERS)}

_UNKNOWN = 0xBF


def key_to_char(key: Key, modifiers: Modifiers) -> int:
    """Return the Apple ][ code (high bit set) for ``key`` under ``modifiers``."""
    if modifiers.shift and key in _SHIFTED:
        return _SHIFTED[key]
    if not modifiers.shift and modifiers.ctrl and key in _CONTROL:
        return _CONTROL[key]
    return _PLAIN.get(key, _UNKNOWN)