"""Capture date read directly from file contents."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import BinaryIO

from immichgo.metadata.exif import exif_date_taken
from immichgo.metadata.quicktime import decode_mvhd_atom
from immichgo.metadata.search import SliceReader, search_pattern


@dataclass
class MetaData:
    date_taken: datetime | None = None
    latitude: float = 0.0
    longitude: float = 0.0
    altitude: float = 0.0


def _heif_date(stream: BinaryIO) -> datetime | None:
    reader = search_pattern(stream, b"Exif\x00\x00MM")
    reader.read_slice(6)
    return exif_date_taken(reader)


def _mp4_date(stream: BinaryIO) -> datetime | None:
    reader = search_pattern(stream, b"mvhd")
    return decode_mvhd_atom(reader).creation_time


def _cr3_date(stream: BinaryIO) -> datetime | None:
    reader = search_pattern(stream, b"CMT1")
    reader.read_slice(4)
    return exif_date_taken(reader)


_READERS = {
    ".heic": _heif_date,
    ".heif": _heif_date,
    ".jpg": exif_date_taken,
    ".jpeg": exif_date_taken,
    ".dng": exif_date_taken,
    ".cr2": exif_date_taken,
    ".mp4": _mp4_date,
    ".mov": _mp4_date,
    ".cr3": _cr3_date,
}


def get_from_reader(stream: BinaryIO, ext: str) -> MetaData:
    """Read the capture date from a stream whose file has the given extension."""
    reader = _READERS.get(ext.lower())
    if reader is None:
        raise ValueError(f"can't determine the taken date from metadata ({ext})")
    return MetaData(date_taken=reader(SliceReader(stream)))


def get_file_metadata(path: str | Path) -> MetaData:
    """Read the capture date from a file."""
    path = Path(path)
    with path.open("rb") as handle:
        return get_from_reader(handle, path.suffix)