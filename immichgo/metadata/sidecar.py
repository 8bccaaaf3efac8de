"""XMP sidecar files, read from disk or generated from known values."""

from __future__ import annotations

import io
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import BinaryIO

from immichgo.tzone import local_zone

_TEMPLATE = """<x:xmpmeta xmlns:x='adobe:ns:meta/' x:xmptk='Image::ExifTool 12.56'>
<rdf:RDF xmlns:rdf='http://www.w3.org/1999/02/22-rdf-syntax-ns#'>
 <rdf:Description rdf:about=''
  xmlns:exif='http://ns.adobe.com/exif/1.0/'>
  <exif:ExifVersion>0232</exif:ExifVersion>
  <exif:DateTimeOriginal>{local}</exif:DateTimeOriginal>
  <exif:GPSAltitude>{elevation}</exif:GPSAltitude>
  <exif:GPSLatitude>{latitude}</exif:GPSLatitude>
  <exif:GPSLongitude>{longitude}</exif:GPSLongitude>  
  <exif:GPSTimeStamp>{utc}</exif:GPSTimeStamp>
 </rdf:Description>
</rdf:RDF>
</x:xmpmeta>"""

_ZERO_TIME = "0001-01-01T00:00:00"


def _number(value: float) -> str:
    if float(value).is_integer() and abs(value) < 1e21:
        return str(int(value))
    return repr(float(value))


@dataclass
class SideCar:
    file_name: str = ""
    on_fsys: bool = False
    date_taken: datetime | None = None
    latitude: float = 0.0
    longitude: float = 0.0
    elevation: float = 0.0

    def open(self, base_dir: str | Path = ".") -> BinaryIO:
        """Open the sidecar file on disk, or a generated one."""
        if self.on_fsys:
            return open(Path(base_dir) / self.file_name, "rb")
        return io.BytesIO(self.to_bytes())

    def to_bytes(self) -> bytes:
        """Render the XMP document."""
        if self.date_taken is None:
            local_text = _ZERO_TIME
            utc_text = _ZERO_TIME + "+0000"
        else:
            moment = self.date_taken
            if moment.tzinfo is None:
                moment = moment.replace(tzinfo=timezone.utc)
            local_text = moment.astimezone(local_zone()).strftime("%Y-%m-%dT%H:%M:%S")
            utc_text = moment.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S") + "+0000"
        text = _TEMPLATE.format(
            local=local_text,
            utc=utc_text,
            elevation=_number(self.elevation),
            latitude=_number(self.latitude),
            longitude=_number(self.longitude),
        )
        return text.encode("utf-8")