from __future__ import annotations

"""AIM ``.aim`` config files.

AIM files put the value first and the key second (``VALUE KEY``), the reverse
of ORAC. Lines with a colon are headers/comments.
"""

from pathlib import Path
from typing import Iterable

from .base import ConfigDocument


def parse_aim_line(line: str) -> tuple[str, str | None] | None:
    """Return ``(key, value)`` for an AIM line or ``None`` if it has no item.

    >>> parse_aim_line("  2.2   central wavelength ")
    ('central wavelength', '2.2')
    """

    if ":" in line:
        return None
    s = line.strip()
    if not s:
        return None
    fields = s.split(None, 1)
    value = fields[0]
    key = fields[1] if len(fields) == 2 else None
    if key is None:
        # single token: nothing to key it by
        return None
    return key, value


class AimConfig(ConfigDocument):
    """Config parsed with :func:`parse_aim_line`."""

    format_name = "AIM"

    def __init__(
        self,
        *,
        lines: Iterable[str] | None = None,
        file: str | Path | None = None,
        encoding: str = "utf-8",
    ):
        super().__init__(parse_aim_line, lines=lines, file=file, encoding=encoding)
