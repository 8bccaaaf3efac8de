"""Boolean command-line options that turn on when given without a value."""

from __future__ import annotations

_TRUE = {"1", "t", "T", "TRUE", "true", "True"}
_FALSE = {"0", "f", "F", "FALSE", "false", "False"}


def parse_bool(value: str) -> bool:
    """Parse a boolean the way strict command-line parsers do."""
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ValueError(f"parsing {value!r}: invalid syntax")


class BoolFlag:
    """Callable that sets a boolean option; an empty value means True."""

    def __init__(self, default: bool = False) -> None:
        self.value = default

    def __call__(self, value: str) -> bool:
        if value == "":
            self.value = True
            return self.value
        try:
            self.value = parse_bool(value)
        except ValueError as exc:
            self.value = False
            raise ValueError(f"can't parse the parameter value: {exc}") from exc
        return self.value

    def __bool__(self) -> bool:
        return self.value