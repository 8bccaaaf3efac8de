"""Determination of the local time zone, resolved once per process."""

from __future__ import annotations

import os
import threading
from datetime import datetime, tzinfo
from pathlib import Path
from zoneinfo import ZoneInfo

_lock = threading.Lock()
_resolved: tuple[tzinfo | None, Exception | None] | None = None


def _runtime_tz() -> str | None:
    env = os.environ.get("TZ")
    if env:
        return env.removeprefix(":")
    timezone_file = Path("/etc/timezone")
    try:
        name = timezone_file.read_text(encoding="utf-8").strip()
        if name:
            return name
    except OSError:
        pass
    localtime = Path("/etc/localtime")
    try:
        target = str(localtime.resolve())
    except OSError:
        return None
    marker = "zoneinfo/"
    if marker in target:
        return target.split(marker, 1)[1]
    return None


def _load(tz: str) -> tzinfo:
    if not tz:
        tz = _runtime_tz() or ""
        if not tz:
            system = datetime.now().astimezone().tzinfo
            return system if system is not None else ZoneInfo("UTC")
    tz = tz.removesuffix("\n")
    if os.path.isabs(tz):
        with open(tz, "rb") as handle:
            return ZoneInfo.from_file(handle, key=tz)
    return ZoneInfo(tz)


def set_local(tz: str = "") -> tzinfo:
    """Resolve the local zone on first call; later calls return the same result."""
    global _resolved
    with _lock:
        if _resolved is None:
            try:
                _resolved = (_load(tz), None)
            except Exception as exc:  # remembered and raised on every call
                _resolved = (None, exc)
        zone, error = _resolved
    if error is not None:
        raise error
    assert zone is not None
    return zone


def local_zone() -> tzinfo:
    """Return the local time zone."""
    return set_local("")


def _reset() -> None:
    """Forget the resolved zone so that it is determined again."""
    global _resolved
    with _lock:
        _resolved = None