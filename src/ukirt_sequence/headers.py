from __future__ import annotations

"""``setHeader`` directives embedded in an exec.

Header values are not stored separately: they are read from and written to
the exec lines directly, so the exec text stays the single source of truth.

Line form::

    setHeader NAME VALUE
    -setHeader NAME VALUE      (disabled directive, still reported)

The directive starts in the first column, as the other exec directives do.

Quoting
-------
On write, ``"`` is replaced by ``?`` (the exec format has no escaping) and a
value containing whitespace is wrapped in double quotes. On read, one enclosing
pair of double quotes is removed. Embedded quotes therefore do not survive a
round trip. Values may not span lines and names may not contain whitespace.
"""

import re
from dataclasses import dataclass
from typing import Pattern, Sequence

from ukirt_sequence.errors import BadArgumentError

# Directive + name + separating whitespace, then the raw value.
_HEADER_RE = re.compile(
    r"^(?P<lead>(?P<disabled>-?)setHeader\s+(?P<name>\S+)\s+)(?P<value>.*)$",
    re.IGNORECASE,
)

DEFAULT_INSERT_AFTER = re.compile(r"setHeader|startGroup", re.IGNORECASE)


@dataclass(frozen=True)
class HeaderLine:
    """A parsed ``setHeader`` line."""

    index: int
    lead: str  # directive and name exactly as written, plus trailing space
    name: str
    raw_value: str
    disabled: bool

    @property
    def value(self) -> str:
        return unquote_header_value(self.raw_value)


def quote_header_value(value: object) -> str:
    s = str(value).replace('"', "?")
    if any(c.isspace() for c in s):
        s = f'"{s}"'
    return s


def unquote_header_value(value: str) -> str:
    if len(value) >= 2 and value.startswith('"') and value.endswith('"'):
        return value[1:-1]
    return value


def parse_header_line(line: str, index: int = 0) -> HeaderLine | None:
    m = _HEADER_RE.match(line)
    if m is None:
        return None
    return HeaderLine(
        index=index,
        lead=m.group("lead"),
        name=m.group("name"),
        raw_value=m.group("value").rstrip(),
        disabled=bool(m.group("disabled")),
    )


def iter_header_lines(lines: Sequence[str], name: str) -> list[HeaderLine]:
    """Return every ``setHeader`` line for ``name`` in exec order.

    ``name`` is compared as literal text, case-insensitively.
    """

    want = str(name).lower()
    out: list[HeaderLine] = []
    for i, line in enumerate(lines):
        h = parse_header_line(line, i)
        if h is not None and h.name.lower() == want:
            out.append(h)
    return out


def get_header_values(lines: Sequence[str], name: str | None) -> list[str]:
    if name is None:
        return []
    return [h.value for h in iter_header_lines(lines, name)]


def _find_anchor(lines: Sequence[str], insert_after: str | Pattern[str] | None) -> int | None:
    if insert_after is None:
        pattern = DEFAULT_INSERT_AFTER
    elif isinstance(insert_after, str):
        pattern = re.compile(insert_after)
    else:
        pattern = insert_after
    for i, line in enumerate(lines):
        if pattern.search(line):
            return i
    return None


def set_header_value(
    lines: list[str],
    name: str,
    value: object,
    *,
    insert_after: str | Pattern[str] | None = None,
) -> list[int]:
    """Set header ``name`` to ``value`` in ``lines`` (modified in place).

    Every existing line for the header is rewritten, keeping its leading ``-``
    and the spelling of the directive and name. If there is none, a new
    ``setHeader NAME VALUE`` line is inserted after the first line matching
    ``insert_after`` (default: first ``setHeader``/``startGroup`` line), or at
    the top of the exec.

    Returns the indices of the lines that were written.
    """

    name = str(name)
    if not name or any(c.isspace() for c in name):
        raise BadArgumentError("Header name must be a single word", context={"name": name})
    text = str(value)
    if "\n" in text or "\r" in text:
        raise BadArgumentError("Header value must not contain line breaks", context={"name": name})

    quoted = quote_header_value(text)
    existing = iter_header_lines(lines, name)
    if existing:
        for h in existing:
            lines[h.index] = f"{h.lead}{quoted}"
        return [h.index for h in existing]

    anchor = _find_anchor(lines, insert_after)
    pos = 0 if anchor is None else anchor + 1
    lines.insert(pos, f"setHeader {name.upper()} {quoted}")
    return [pos]
