"""Console helpers: byte-size formatting and yes/no confirmation."""

from __future__ import annotations

import math
import sys
from typing import TextIO

_SUFFIXES = ("B", "KB", "MB", "GB")
_BASE = 1024.0


def format_bytes(size: int) -> str:
    """Format a byte count with a binary unit suffix."""
    value = float(size)
    if value < _BASE:
        return f"{value:.0f} {_SUFFIXES[0]}"
    exp = 0
    while value >= _BASE and exp < len(_SUFFIXES) - 1:
        value /= _BASE
        exp += 1
    rounded = math.floor(value * 10 + 0.5) / 10
    return f"{rounded:.1f} {_SUFFIXES[exp]}"


def confirm_yes_no(
    prompt: str,
    default_answer: str,
    input_stream: TextIO | None = None,
    output: TextIO | None = None,
) -> str:
    """Ask until the user types y or n; end of input gives the default answer."""
    input_stream = sys.stdin if input_stream is None else input_stream
    output = sys.stdout if output is None else output
    default_answer = default_answer.lower()
    other = "y" if default_answer == "n" else "n"
    while True:
        output.write(f"{prompt} [{default_answer}]/{other}: ")
        output.flush()
        char = input_stream.read(1)
        if char == "":
            return default_answer
        answer = char.lower()
        if answer in ("y", "n"):
            return answer