"""Exec file naming policy.

Written execs are named::

    <Instrument>_<YYYYMMDD><HHMMSS>[<mmm>]<NNN>.exec

with a UTC timestamp and a three-digit counter ``NNN``; writers take the lowest
counter for which no file exists yet. Michelle is spelled in mixed case and
drops the milliseconds to keep its names short.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterator


EXEC_SUFFIX = "exec"
MAX_COUNTER = 1000

# Instruments whose name is not written in upper case.
_DISPLAY_NAMES = {
    "MICHELLE": "Michelle",
}
_NO_MILLIS = {"MICHELLE"}


def instrument_file_label(instrument: str) -> str:
    inst = (instrument or "").strip().upper()
    return _DISPLAY_NAMES.get(inst, inst)


def exec_stem(instrument: str, timestamp: datetime | None = None) -> str:
    """Return the name prefix up to (not including) the counter."""

    ts = timestamp or datetime.now(timezone.utc)
    if ts.tzinfo is not None:
        ts = ts.astimezone(timezone.utc)
    stamp = ts.strftime("%Y%m%d%H%M%S")
    inst = (instrument or "").strip().upper()
    if inst not in _NO_MILLIS:
        stamp += f"{ts.microsecond // 1000:03d}"
    return f"{instrument_file_label(inst)}_{stamp}"


def exec_names(stem: str) -> Iterator[str]:
    for n in range(MAX_COUNTER):
        yield f"{stem}{n:03d}.{EXEC_SUFFIX}"

