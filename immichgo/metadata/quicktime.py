"""Decoding of the QuickTime/MP4 movie header (mvhd) atom."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone

from immichgo.metadata.search import SliceReader

_EPOCH_OFFSET = 2082844800  # seconds from 1904-01-01 to 1970-01-01


@dataclass
class MvhdAtom:
    marker: bytes
    version: int
    flags: bytes
    creation_time: datetime
    modification_time: datetime


def convert_time32(timestamp: int) -> datetime:
    """Convert a 32-bit QuickTime timestamp to a UTC datetime."""
    return datetime.fromtimestamp(timestamp - _EPOCH_OFFSET, timezone.utc)


def convert_time64(timestamp: int) -> datetime:
    """Convert a 64-bit QuickTime timestamp (seconds in the high word) to a UTC datetime."""
    return datetime.fromtimestamp((timestamp >> 32) - _EPOCH_OFFSET, timezone.utc)


def decode_mvhd_atom(reader: SliceReader) -> MvhdAtom:
    """Decode an mvhd atom starting at its marker."""
    marker = reader.read_slice(4)
    version = reader.read_byte()
    flags = reader.read_slice(3)
    if version == 0:
        modification = convert_time32(int.from_bytes(reader.read_slice(4), "big"))
        creation = convert_time32(int.from_bytes(reader.read_slice(4), "big"))
    else:
        modification = convert_time64(int.from_bytes(reader.read_slice(8), "big"))
        creation = convert_time64(int.from_bytes(reader.read_slice(8), "big"))
    return MvhdAtom(marker, version, flags, creation, modification)