"""Guessing the capture date from a file name."""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone

from immichgo.tzone import local_zone

_GUESS_TIME = re.compile(r"(\d{4})\D?(\d\d)\D?(\d\d)\D?(\d\d)?\D?(\d\d)?\D?(\d\d)?")
_NEXUS_BURST = re.compile(r"^\d{5}IMG_\d{5}_BURST(\d{14})(_COVER)?\..{3}$")


def take_time_from_name(name: str) -> datetime | None:
    """Return the UTC time found in the name, in the local zone, or None.

    Invalid dates and dates more than a day in the future give None.
    """
    local = local_zone()
    nexus = _NEXUS_BURST.search(name)
    if nexus:
        name = nexus.group(1)
    match = _GUESS_TIME.search(name)
    if match is None:
        return None
    parts = [int(g) if g else 0 for g in match.groups()]
    try:
        moment = datetime(*parts, tzinfo=timezone.utc)
    except ValueError:
        return None
    if moment - datetime.now(timezone.utc) > timedelta(hours=24):
        return None
    return moment.astimezone(local)