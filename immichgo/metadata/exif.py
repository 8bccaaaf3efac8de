"""Extraction of the capture date from EXIF data in JPEG or TIFF streams."""

from __future__ import annotations

import struct
from datetime import datetime
from typing import BinaryIO

from immichgo.tzone import local_zone

_TAG_DATETIME = 0x0132
_TAG_EXIF_IFD = 0x8769
_TAG_GPS_IFD = 0x8825
_TAG_DATETIME_ORIGINAL = 0x9003
_TAG_GPS_DATESTAMP = 0x001D

_TYPE_SIZES = {1: 1, 2: 1, 3: 2, 4: 4, 5: 8, 6: 1, 7: 1, 8: 2, 9: 4, 10: 8, 11: 4, 12: 8}


class ExifError(Exception):
    """Raised when EXIF data is malformed or carries no date."""


class _Truncated(Exception):
    pass


def _find_tiff(data: bytes) -> bytes:
    if data[:4] in (b"II*\x00", b"MM\x00*"):
        return data
    if data[:2] != b"\xff\xd8":
        raise ExifError("can't get DateTaken: exif: failed to find exif intro marker")
    pos = 2
    while True:
        if pos + 4 > len(data):
            raise _Truncated
        if data[pos] != 0xFF:
            raise ExifError("can't get DateTaken: invalid JPEG segment")
        marker = data[pos + 1]
        if marker == 0xFF:
            pos += 1
            continue
        if marker in (0xD9, 0xDA):
            raise ExifError("can't get DateTaken: no exif segment")
        length = int.from_bytes(data[pos + 2:pos + 4], "big")
        end = pos + 2 + length
        if end > len(data):
            raise _Truncated
        segment = data[pos + 4:end]
        if marker == 0xE1 and segment.startswith(b"Exif\x00\x00"):
            return segment[6:]
        pos = end


def _read_ifd(tiff: bytes, offset: int, order: str) -> dict[int, tuple[int, int, bytes]]:
    (count,) = struct.unpack_from(order + "H", tiff, offset)
    entries = {}
    for n in range(count):
        tag, typ, num = struct.unpack_from(order + "HHI", tiff, offset + 2 + 12 * n)
        raw = tiff[offset + 10 + 12 * n:offset + 14 + 12 * n]
        size = _TYPE_SIZES.get(typ, 1) * num
        if size > 4:
            (value_offset,) = struct.unpack(order + "I", raw)
            raw = tiff[value_offset:value_offset + size]
            if len(raw) < size:
                raise ExifError("can't get DateTaken: value out of bounds")
        entries[tag] = (typ, num, raw[:size])
    return entries


def _ascii(entry: tuple[int, int, bytes] | None) -> str | None:
    if entry is None:
        return None
    text = entry[2].split(b"\x00", 1)[0].decode("ascii", errors="replace")
    return text.lstrip('"').rstrip('"')


def _long(entry: tuple[int, int, bytes], order: str) -> int:
    return struct.unpack(order + "I", entry[2][:4])[0]


def _collect(tiff: bytes) -> dict[int, str | None]:
    order = "<" if tiff[:2] == b"II" else ">"
    try:
        (ifd0_offset,) = struct.unpack_from(order + "I", tiff, 4)
        ifd0 = _read_ifd(tiff, ifd0_offset, order)
        exif_ifd = _read_ifd(tiff, _long(ifd0[_TAG_EXIF_IFD], order), order) if _TAG_EXIF_IFD in ifd0 else {}
        gps_ifd = _read_ifd(tiff, _long(ifd0[_TAG_GPS_IFD], order), order) if _TAG_GPS_IFD in ifd0 else {}
    except struct.error as exc:
        raise ExifError(f"can't get DateTaken: {exc}") from exc
    return {
        _TAG_GPS_DATESTAMP: _ascii(gps_ifd.get(_TAG_GPS_DATESTAMP)),
        _TAG_DATETIME_ORIGINAL: _ascii(exif_ifd.get(_TAG_DATETIME_ORIGINAL)),
        _TAG_DATETIME: _ascii(ifd0.get(_TAG_DATETIME)),
    }


def exif_date_taken(stream: BinaryIO) -> datetime | None:
    """Return the capture date in the local zone, or None when the data ends early.

    Raises ExifError when the data is not EXIF or holds no usable date.
    """
    local = local_zone()
    data = stream.read()
    try:
        tiff = _find_tiff(data)
    except _Truncated:
        return None
    if not data:
        return None
    tags = _collect(tiff)
    attempts = (
        (_TAG_GPS_DATESTAMP, "%Y:%m:%d %H:%M:%SZ"),
        (_TAG_DATETIME_ORIGINAL, "%Y:%m:%d %H:%M:%S"),
        (_TAG_DATETIME, "%Y:%m:%d %H:%M:%S"),
    )
    for tag, fmt in attempts:
        text = tags.get(tag)
        if text is None:
            continue
        try:
            return datetime.strptime(text, fmt).replace(tzinfo=local)
        except ValueError:
            continue
    raise ExifError("can't get DateTaken: no date tag found")