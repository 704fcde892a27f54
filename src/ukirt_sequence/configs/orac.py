from __future__ import annotations

"""ORAC ``.conf`` config files: ``KEY = VALUE`` per line."""

from pathlib import Path
from typing import Iterable

from .base import ConfigDocument


def parse_orac_line(line: str) -> tuple[str, str | None] | None:
    """Split a line into key and value.

    The line is split on whitespace into at most three fields
    ``key separator value``. The separator is conventionally ``=`` but is not
    checked. A line without a key yields ``None``.
    """

    fields = line.split(None, 2)
    if not fields:
        return None
    key = fields[0]
    value = fields[2] if len(fields) == 3 else None
    return key, value


class OracConfig(ConfigDocument):
    """Config parsed with :func:`parse_orac_line`."""

    format_name = "ORAC"

    def __init__(
        self,
        *,
        lines: Iterable[str] | None = None,
        file: str | Path | None = None,
        encoding: str = "utf-8",
    ):
        super().__init__(parse_orac_line, lines=lines, file=file, encoding=encoding)
