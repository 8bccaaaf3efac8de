"""Capture-date ranges given as a year, a month, a day or two days."""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone

_YEAR = re.compile(r"\d{4}", re.ASCII)
_MONTH = re.compile(r"\d{4}-\d{2}", re.ASCII)
_DAY = re.compile(r"\d{4}-\d{2}-\d{2}", re.ASCII)


def _parse(text: str, pattern: re.Pattern[str], fmt: str) -> datetime:
    if not pattern.fullmatch(text):
        raise ValueError(f"cannot parse {text!r}")
    return datetime.strptime(text, fmt).replace(tzinfo=timezone.utc)


def _next_month(moment: datetime) -> datetime:
    if moment.month == 12:
        return moment.replace(year=moment.year + 1, month=1)
    return moment.replace(month=moment.month + 1)


class DateRange:
    """Half-open interval [after, before) of capture dates, in UTC."""

    def __init__(self, value: str | None = None) -> None:
        self.after: datetime | None = None
        self.before: datetime | None = None
        self._day = False
        self._month = False
        self._year = False
        self._set = False
        if value is not None:
            self.set(value)

    def set(self, value: str) -> None:
        """Set the range from YYYY, YYYY-MM, YYYY-MM-DD or YYYY-MM-DD,YYYY-MM-DD.

        Raises ValueError when the text is not one of these forms.
        """
        self._day = self._month = self._year = False
        self._set = False
        try:
            after, before = self._parse_range(value)
        except ValueError as exc:
            raise ValueError(f"invalid date range:{exc}") from exc
        self.after, self.before = after, before
        self._set = True

    def _parse_range(self, value: str) -> tuple[datetime, datetime]:
        length = len(value)
        if length == 4:
            after = _parse(value, _YEAR, "%Y")
            before = after.replace(year=after.year + 1)
            self._year = True
        elif length == 7:
            after = _parse(value, _MONTH, "%Y-%m")
            before = _next_month(after)
            self._month = True
        elif length == 10:
            after = _parse(value, _DAY, "%Y-%m-%d")
            before = after + timedelta(days=1)
            self._day = True
        elif length == 21:
            after = _parse(value[:10], _DAY, "%Y-%m-%d")
            before = _parse(value[11:], _DAY, "%Y-%m-%d") + timedelta(days=1)
        else:
            raise ValueError(f"unexpected length {length}")
        return after, before

    def is_set(self) -> bool:
        return self._set

    def in_range(self, moment: datetime | None) -> bool:
        """Tell whether the moment falls in the range; always true when unset or no moment."""
        if not self._set or moment is None:
            return True
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=timezone.utc)
        assert self.after is not None and self.before is not None
        return self.after <= moment < self.before

    def __str__(self) -> str:
        if self.after is None or self.before is None:
            return ""
        if self._day:
            return self.after.strftime("%Y-%m-%d")
        if self._month:
            return self.after.strftime("%Y-%m")
        if self._year:
            return self.after.strftime("%Y")
        last = self.before - timedelta(days=1)
        return self.after.strftime("%Y-%m-%d") + "," + last.strftime("%Y-%m-%d")