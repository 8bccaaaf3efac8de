"""Grouping of assets into stacks: raw+jpeg pairs and bursts."""

from __future__ import annotations

import dataclasses
import posixpath
import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import IntEnum
from typing import Callable, Optional

from immichgo.immich.daterange import DateRange
from immichgo.immich.media import TYPE_IMAGE, TYPE_VIDEO, SupportedMedia


class StackType(IntEnum):
    RAW_JPG = 0
    BURST = 1


@dataclass
class Stack:
    cover_id: str = ""
    stack_type: StackType = StackType.RAW_JPG
    ids: list[str] = field(default_factory=list)
    date: datetime | None = None
    names: list[str] = field(default_factory=list)


def _ext(name: str) -> str:
    base = name.rsplit("/", 1)[-1]
    index = base.rfind(".")
    return base[index:] if index >= 0 else ""


def _base(name: str) -> str:
    stripped = name.rstrip("/")
    if not stripped:
        return "/" if name else "."
    return posixpath.basename(stripped)


def _round_minute(moment: datetime | None) -> datetime | None:
    if moment is None:
        return None
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    floor = moment.replace(second=0, microsecond=0)
    if moment - floor >= timedelta(seconds=30):
        floor += timedelta(minutes=1)
    return floor


# A matcher returns (base name of the burst, is the cover) or None.
_Matcher = Callable[[str], Optional[tuple[str, bool]]]

_HUAWEI = re.compile(r"^(.*)(_BURST\d+)(_COVER)?(\..*)$", re.ASCII)
_PIXEL = re.compile(r"^(.*)(.RAW-\d+)(\.MP)?(\.COVER)?(\..*)$", re.ASCII)
_SAMSUNG = re.compile(r"^(\d{8}_\d{6})_(\d{3})\..{3}$", re.ASCII)
_NEXUS = re.compile(r"^\d{5}IMG_\d{5}_(BURST\d{14})(_COVER)?\..{3}$", re.ASCII)


def _huawei_burst(name: str) -> tuple[str, bool] | None:
    m = _HUAWEI.match(name)
    return (m.group(1), bool(m.group(3))) if m else None


def _pixel_burst(name: str) -> tuple[str, bool] | None:
    m = _PIXEL.match(name)
    return (m.group(1), bool(m.group(4))) if m else None


def _samsung_burst(name: str) -> tuple[str, bool] | None:
    m = _SAMSUNG.match(name)
    return (m.group(1), m.group(2) == "001") if m else None


def _nexus_burst(name: str) -> tuple[str, bool] | None:
    m = _NEXUS.match(name)
    return (m.group(1), m.group(2) == "001") if m else None


_MATCHERS: tuple[_Matcher, ...] = (_nexus_burst, _huawei_burst, _pixel_burst, _samsung_burst)
_JPEG_EXTS = (".jpeg", ".jpg", ".jpe")


class StackBuilder:
    """Collects assets and groups those sharing a base name and capture minute."""

    def __init__(self, supported_media: SupportedMedia) -> None:
        self.supported_media = supported_media
        self._date_range = DateRange("1850-01-04,2030-01-01")
        self._stacks: dict[tuple[datetime | None, str], Stack] = {}

    def process_asset(self, asset_id: str, file_name: str, capture_date: datetime | None) -> None:
        if not self._date_range.in_range(capture_date):
            return
        ext = _ext(file_name)
        base_name = _base(file_name)
        base = base_name[: len(base_name) - len(ext)] if ext and base_name.endswith(ext) else base_name
        ext = ext.lower()

        burst = False
        cover = False
        for matcher in _MATCHERS:
            found = matcher(base_name)
            if found is not None:
                base, cover = found
                burst = True
                break

        if not burst and _ext(base) == ".MP":
            base = base[: -len(".MP")]

        key = (_round_minute(capture_date), base)
        stack = self._stacks.get(key)
        if stack is None:
            stack = Stack(cover_id=asset_id, date=capture_date)
            self._stacks[key] = stack
        stack.ids.append(asset_id)
        stack.names.append(base_name)
        if burst:
            stack.stack_type = StackType.BURST
        if cover or (not burst and ext in _JPEG_EXTS):
            stack.cover_id = asset_id

    def stacks(self) -> list[Stack]:
        """Return the stacks of more than one asset, live photos excluded, by date then name."""
        result: list[Stack] = []
        for stack in self._stacks.values():
            if len(stack.ids) <= 1:
                continue
            kinds = [self.supported_media.type_from_ext(_ext(n)) for n in stack.names]
            if kinds.count(TYPE_IMAGE) == 1 and kinds.count(TYPE_VIDEO) == 1:
                continue
            result.append(
                dataclasses.replace(
                    stack,
                    ids=[i for i in stack.ids if i != stack.cover_id],
                    names=list(stack.names),
                )
            )
        result.sort(
            key=lambda s: (
                s.date is not None,
                s.date.timestamp() if s.date is not None else 0.0,
                s.names[0],
            )
        )
        return result