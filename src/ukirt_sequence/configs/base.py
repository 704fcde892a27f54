"""Generic view of an instrument configuration file.

A config is a flat ``key -> value`` mapping extracted from text. The two
on-disk families (ORAC ``.conf`` and AIM ``.aim``) differ only in how a single
line is tokenized, so :class:`ConfigDocument` takes the line grammar as a plain
function instead of being subclassed per format.

The raw lines are kept alongside the parsed items. Configs are never written
back to disk; :meth:`ConfigDocument.set_item` only updates the mapping.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Iterable, Optional, Tuple

from ukirt_sequence.errors import BadArgumentError, FileAccessError


log = logging.getLogger(__name__)

#: A line grammar returns ``(key, value)`` or ``None`` when the line holds no item.
LineGrammar = Callable[[str], Optional[Tuple[str, Optional[str]]]]


def split_lines(text: str) -> list[str]:
    """Split text on line breaks only (``\\n``, ``\\r\\n`` or ``\\r``).

    Unlike :meth:`str.splitlines`, form feeds and other Unicode separators stay
    inside their line. A trailing newline does not add an empty line.
    """

    text = text.replace("\r\n", "\n").replace("\r", "\n")
    if not text:
        return []
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return lines


def read_text_lines(path: str | Path, *, encoding: str = "utf-8") -> list[str]:
    """Read a text file into a list of lines without line terminators.

    Any failure to open, read or close the file is reported as
    :class:`~ukirt_sequence.errors.FileAccessError`.
    """

    p = Path(path)
    try:
        fh = p.open("r", encoding=encoding)
    except OSError as e:
        raise FileAccessError(f"Unable to open file: {e.strerror or e}", path=p) from e
    try:
        with fh:
            text = fh.read()
    except (OSError, UnicodeDecodeError) as e:
        raise FileAccessError(f"Error reading file: {e}", path=p) from e
    return split_lines(text)


class ConfigDocument:
    """Parsed configuration: raw lines plus extracted items.

    Construct from either ``lines`` or ``file``::

        cfg = ConfigDocument(parse_orac_line, file="uist_im.conf")
        cfg.get_item("filter")
    """

    format_name = "generic"

    def __init__(
        self,
        grammar: LineGrammar,
        *,
        lines: Iterable[str] | None = None,
        file: str | Path | None = None,
        encoding: str = "utf-8",
    ):
        self.grammar = grammar
        self.filename: str | None = None
        self._lines: list[str] = []
        self._items: dict[str, str | None] = {}

        if file is not None:
            self._parse_from_file(file, encoding=encoding)
        elif lines is not None:
            self.parse(lines)
        else:
            raise BadArgumentError(
                "Must supply either lines or a file name to a config constructor",
                context={"format": self.format_name},
            )

    def __repr__(self) -> str:
        return f"{type(self).__name__}(filename={self.filename!r}, items={len(self._items)})"

    # ------------------------------------------------------------------
    # accessors
    # ------------------------------------------------------------------

    @property
    def lines(self) -> list[str]:
        """The unparsed contents of the config."""
        return list(self._lines)

    @property
    def items(self) -> dict[str, str | None]:
        return dict(self._items)

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str | None) -> None:
        # Lines stay as read; configs are never written back.
        self._items[key] = value

    def __contains__(self, key: object) -> bool:
        return key in self._items

    # ------------------------------------------------------------------
    # parsing
    # ------------------------------------------------------------------

    def parse(self, lines: Iterable[str]) -> None:
        """Replace contents and items from ``lines``.

        Later occurrences of a key overwrite earlier ones.
        """

        raw = [str(line).rstrip("\r\n") for line in lines]
        items: dict[str, str | None] = {}
        for line in raw:
            pair = self.grammar(line)
            if pair is None:
                continue
            key, value = pair
            items[key] = value
        self._lines = raw
        self._items = items

    def _parse_from_file(self, file: str | Path, *, encoding: str) -> None:
        lines = read_text_lines(file, encoding=encoding)
        self.parse(lines)
        self.filename = str(file)
        log.debug("Parsed %s config %s (%d items)", self.format_name, file, len(self._items))
