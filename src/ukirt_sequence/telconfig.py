from __future__ import annotations

"""Telescope configuration XML (``telConfig``): tagged target coordinates.

Only the part of the OCS ``TCS_CONFIG`` document needed to answer "what is the
coordinate for tag X" is read::

    <TCS_CONFIG TELESCOPE="UKIRT">
      <BASE TYPE="Base">
        <target>
          <targetName>NGC 1068</targetName>
          <spherSystem SYSTEM="J2000">
            <c1>02:42:40.71</c1>
            <c2>-00:00:47.8</c2>
          </spherSystem>
        </target>
      </BASE>
      <BASE TYPE="GUIDE"> ... </BASE>
    </TCS_CONFIG>

The same :class:`TelConfig` shape is synthesized for execs that still carry
legacy ``SET_<TAG>`` lines.
"""

import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping

from ukirt_sequence.coords import Coords, make_coords
from ukirt_sequence.errors import BadArgumentError, FileAccessError


log = logging.getLogger(__name__)

# Tag spellings that all mean "the science target".
TAG_ALIASES = {
    "TARGET": "BASE",
    "SCIENCE": "BASE",
}


def normalize_tag(tag: str) -> str:
    t = str(tag).strip().upper()
    return TAG_ALIASES.get(t, t)


@dataclass(frozen=True)
class TcsConfig:
    """Coordinates keyed by tag (``BASE``, ``GUIDE``, ``SKY``...)."""

    coords: Mapping[str, Coords] = field(default_factory=dict)
    telescope: str | None = None

    @property
    def tags(self) -> tuple[str, ...]:
        return tuple(self.coords)

    def get_coords(self, tag: str) -> Coords | None:
        return self.coords.get(normalize_tag(tag))


@dataclass(frozen=True)
class TelConfig:
    tcs: TcsConfig
    filename: str | None = None


def _text(el: ET.Element | None) -> str | None:
    if el is None or el.text is None:
        return None
    s = el.text.strip()
    return s or None


def _parse_base(base: ET.Element) -> tuple[str, Coords] | None:
    tag = normalize_tag(base.get("TYPE") or "")
    target = base.find("target")
    if not tag or target is None:
        return None
    name = _text(target.find("targetName")) or ""
    spher = target.find("spherSystem")
    if spher is None:
        log.warning("Ignoring %s target %r: only spherSystem coordinates are supported", tag, name)
        return None
    c1 = _text(spher.find("c1"))
    c2 = _text(spher.find("c2"))
    if c1 is None or c2 is None:
        raise BadArgumentError("Incomplete spherSystem coordinates", context={"tag": tag, "name": name})
    return tag, make_coords(name, spher.get("SYSTEM", "J2000"), c1, c2, units="s")


def parse_tel_config(root: ET.Element) -> TcsConfig:
    """Extract tagged coordinates from an already parsed XML tree."""

    tcs = root if root.tag == "TCS_CONFIG" else root.find(".//TCS_CONFIG")
    if tcs is None:
        return TcsConfig()
    coords: dict[str, Coords] = {}
    for base in tcs.findall("BASE"):
        parsed = _parse_base(base)
        if parsed is None:
            continue
        tag, c = parsed
        coords.setdefault(tag, c)
    return TcsConfig(coords=coords, telescope=tcs.get("TELESCOPE"))


def read_tel_config(path: str | Path) -> TelConfig:
    p = Path(path)
    try:
        tree = ET.parse(str(p))
    except OSError as e:
        raise FileAccessError(f"Unable to open telescope config: {e.strerror or e}", path=p) from e
    except ET.ParseError as e:
        raise FileAccessError(f"Malformed telescope config XML: {e}", path=p) from e
    tcs = parse_tel_config(tree.getroot())
    log.debug("Read telescope config %s: tags=%s", p, list(tcs.tags))
    return TelConfig(tcs=tcs, filename=str(p))
