"""Player commands parsed from console lines."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class UseAction:
    """Request to use the action at a 1-based index. Range is checked later."""

    index: int


@dataclass(frozen=True)
class InvalidInput:
    text: str


Command = Union[UseAction, InvalidInput]


def parse_line(line: str) -> Command:
    """One non-negative integer per line; anything else is InvalidInput.

    >>> parse_line(" 2 ")
    UseAction(index=2)
    >>> parse_line("-1")
    InvalidInput(text='-1')
    """
    text = line.strip()
    if text.isascii() and text.isdigit():
        try:
            return UseAction(int(text))
        except ValueError:
            # longer than the interpreter allows for str -> int
            return InvalidInput(text)
    return InvalidInput(text)
