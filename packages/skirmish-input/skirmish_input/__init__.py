"""skirmish-input — Non-blocking console input for the round engine."""
from skirmish_input.commands import Command, InvalidInput, UseAction, parse_line
from skirmish_input.queue import LineQueue
from skirmish_input.reader import InputReader

__all__ = [
    "Command",
    "InputReader",
    "InvalidInput",
    "LineQueue",
    "UseAction",
    "parse_line",
]
