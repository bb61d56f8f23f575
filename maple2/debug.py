"""Hex dump helpers used when inspecting memory and disk tracks."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any


def _hex_byte(value: int) -> str:
    return f"{value:02X}"


def format_hex_dump(
    items: Sequence[Any],
    address: int = 0,
    length: int | None = None,
    formatter: Callable[[Any], str] = _hex_byte,
) -> str:
    """Return a dump of ``items`` starting at ``address``, 16 entries per line."""
    if length is None:
        length = len(items)
    parts: list[str] = []
    for i in range(length + 1):
        if i > 0 and i % 16 == 0:
            parts.append("\n")
        offset = (address + i) & 0xFFFF
        if i % 16 == 0:
            parts.append(f"{offset:04X} | ")
        if offset < len(items):
            parts.append(f"{formatter(items[offset])} ")
    parts.append("\n====\n")
    return "".join(parts)


def hex_dump(items: Sequence[Any], formatter: Callable[[Any], str] = _hex_byte) -> None:
    """Print a dump of the whole of ``items`` to standard output."""
    print(format_hex_dump(items, 0, len(items), formatter), end="")