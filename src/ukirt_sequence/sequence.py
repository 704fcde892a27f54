from __future__ import annotations

"""Parse and manipulate a UKIRT sequence.

A sequence is one exec (an ordered list of instruction lines) plus the
instrument configs it loads and, optionally, a telescope config XML holding
target coordinates::

    seq = SequenceDocument.from_file("UIST_20050101_001.exec")
    seq.get_target_name()
    seq.set_header_item("MSBID", "abc123")
    seq.write_sequence("/tmp/execs")

The exec lines are authoritative. Configs and coordinates are derived from
them once, at construction; header edits change the lines only.
"""

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Iterable, Mapping, Pattern

from ukirt_sequence.configs import ConfigDocument, create_config, read_text_lines, split_lines
from ukirt_sequence.coords import Coords, make_coords
from ukirt_sequence.errors import (
    BadArgumentError,
    ExhaustedNamesError,
    FileAccessError,
    StateError,
)
from ukirt_sequence.headers import get_header_values, set_header_value
from ukirt_sequence.instruments import InstrumentResolution, InstrumentResolver, resolve_instrument
from ukirt_sequence.naming import MAX_COUNTER, exec_names, exec_stem
from ukirt_sequence.paths import find_config_file, find_tel_config_file
from ukirt_sequence.settings import SequenceSettings
from ukirt_sequence.telconfig import TcsConfig, TelConfig, normalize_tag, read_tel_config
from ukirt_sequence.waveband import WaveBand


log = logging.getLogger(__name__)

NO_TARGET_NAME = "NONE"

# Legacy coordinate lines: SET_<TAG> name type ra dec x y
_LEGACY_PREFIX = "SET_"
_LEGACY_NTOKENS = 7

_FILE_DIRECTIVE_RE = re.compile(r"^(?P<directive>loadConfig|telConfig)\s+(?P<arg>\S.*?)\s*$")


@dataclass
class ExecParser:
    """Single pass over exec lines collecting configs and coordinates.

    Feed every line, then call :meth:`build` once to get the frozen result.
    """

    input_dir: str
    settings: SequenceSettings = field(default_factory=SequenceSettings)

    configs: dict[str, ConfigDocument] = field(default_factory=dict)
    config_order: list[str] = field(default_factory=list)
    tel_config: TelConfig | None = None
    legacy_coords: dict[str, Coords] = field(default_factory=dict)

    def feed(self, line: str) -> None:
        # Directives start in the first column; indented lines are not parsed.
        m = _FILE_DIRECTIVE_RE.match(line)
        if m is not None:
            if m.group("directive") == "loadConfig":
                self._load_config(m.group("arg"))
            else:
                self._load_tel_config(m.group("arg"))
            return
        if line.startswith(_LEGACY_PREFIX):
            tokens = line.split()
            if len(tokens) == _LEGACY_NTOKENS:
                self._add_legacy_coords(tokens)

    def _load_config(self, name: str) -> None:
        if name in self.configs:
            return
        path = find_config_file(
            name,
            self.input_dir,
            suffixes=self.settings.config_suffixes,
            configs_dirname=self.settings.configs_dirname,
            trace=self.settings.trace_search,
        )
        cfg = create_config(path, encoding=self.settings.encoding)
        self.configs[name] = cfg
        self.config_order.append(name)
        log.debug("loadConfig %s -> %s", name, path)

    def _load_tel_config(self, name: str) -> None:
        path = find_tel_config_file(
            name,
            self.input_dir,
            configs_dirname=self.settings.configs_dirname,
            trace=self.settings.trace_search,
        )
        self.tel_config = read_tel_config(path)
        log.debug("telConfig %s -> %s", name, path)

    def _add_legacy_coords(self, tokens: list[str]) -> None:
        tag = normalize_tag(tokens[0][len(_LEGACY_PREFIX):])
        if not tag or tag in self.legacy_coords:
            return
        _, name, ctype, ra, dec = tokens[:5]
        self.legacy_coords[tag] = make_coords(name, ctype, ra, dec, units="s")

    def build(self) -> "ParsedExec":
        coords = self.tel_config
        legacy = False
        if coords is None and self.legacy_coords:
            coords = TelConfig(tcs=TcsConfig(coords=dict(self.legacy_coords)))
            legacy = True
        return ParsedExec(
            configs=dict(self.configs),
            config_order=tuple(self.config_order),
            coordinates=coords,
            uses_legacy_coordinates=legacy,
        )


@dataclass(frozen=True)
class ParsedExec:
    configs: Mapping[str, ConfigDocument]
    config_order: tuple[str, ...]
    coordinates: TelConfig | None
    uses_legacy_coordinates: bool


def _as_lines(lines: Iterable[str] | str) -> list[str]:
    if isinstance(lines, str):
        return split_lines(lines)
    return [str(line).rstrip("\r\n") for line in lines]


class SequenceDocument:
    """One exec plus the configs and coordinates it references."""

    def __init__(
        self,
        lines: Iterable[str] | str | None = None,
        *,
        file: str | Path | None = None,
        input_dir: str | Path | None = None,
        settings: SequenceSettings | None = None,
    ):
        self.settings = settings or SequenceSettings()
        self._lines: list[str] = []
        self._configs: dict[str, ConfigDocument] = {}
        self._config_order: tuple[str, ...] = ()
        self.coordinates: TelConfig | None = None
        self.uses_legacy_coordinates = False
        self.modified = False
        self._input_file: str | None = None
        self._input_dir = str(input_dir) if input_dir is not None else "."

        if file is not None:
            self.input_file = file
            self._parse_lines(read_text_lines(file, encoding=self.settings.encoding))
        elif lines is not None:
            self._parse_lines(_as_lines(lines))

    @classmethod
    def from_file(cls, path: str | Path, *, settings: SequenceSettings | None = None) -> "SequenceDocument":
        return cls(file=path, settings=settings)

    def __repr__(self) -> str:
        return (
            f"SequenceDocument(input_file={self._input_file!r}, lines={len(self._lines)}, "
            f"configs={list(self._config_order)})"
        )

    # ------------------------------------------------------------------
    # parsing
    # ------------------------------------------------------------------

    def _parse_lines(self, lines: list[str]) -> None:
        parser = ExecParser(input_dir=self._input_dir, settings=self.settings)
        for line in lines:
            parser.feed(line)
        parsed = parser.build()

        self._lines = list(lines)
        self._configs = dict(parsed.configs)
        self.set_config_order(parsed.config_order)
        self.coordinates = parsed.coordinates
        self.uses_legacy_coordinates = parsed.uses_legacy_coordinates
        log.debug(
            "Parsed exec %s: %d lines, configs=%s, legacy_coords=%s",
            self._input_file or "<lines>",
            len(self._lines),
            list(self._config_order),
            self.uses_legacy_coordinates,
        )

    # ------------------------------------------------------------------
    # accessors
    # ------------------------------------------------------------------

    @property
    def input_file(self) -> str | None:
        return self._input_file

    @input_file.setter
    def input_file(self, path: str | Path) -> None:
        p = Path(str(path))
        self._input_file = str(p)
        self._input_dir = str(p.parent)

    @property
    def input_dir(self) -> str:
        return self._input_dir

    @property
    def lines(self) -> list[str]:
        """A copy of the exec lines."""
        return list(self._lines)

    def set_lines(self, lines: Iterable[str] | str) -> None:
        """Replace the exec lines. Configs and coordinates are not re-derived."""
        self._lines = _as_lines(lines)

    @property
    def configs(self) -> dict[str, ConfigDocument]:
        return dict(self._configs)

    def get_config(self, name: str) -> ConfigDocument | None:
        return self._configs.get(name)

    @property
    def config_order(self) -> tuple[str, ...]:
        return self._config_order

    def set_config_order(self, names: Iterable[str]) -> None:
        """Fix the execution order of configs. Allowed once."""

        if self._config_order:
            raise StateError(
                "Config order has already been set",
                context={"order": list(self._config_order)},
            )
        order = tuple(names)
        if len(set(order)) != len(order) or set(order) != set(self._configs):
            raise BadArgumentError(
                "Config order must list every config exactly once",
                context={"order": list(order), "configs": sorted(self._configs)},
            )
        self._config_order = order

    # ------------------------------------------------------------------
    # instrument
    # ------------------------------------------------------------------

    def resolve_instrument(self) -> InstrumentResolution:
        return resolve_instrument(
            self._lines,
            self.get_config_item("instrument"),
            self._input_file,
        )

    def get_instrument(self) -> str:
        return self.resolve_instrument().instrument

    def _resolver(self) -> InstrumentResolver:
        return InstrumentResolver(self.get_instrument(), self.get_config_item)

    def get_camera_modes(self) -> list[str]:
        return self._resolver().camera_modes()

    def get_wavebands(self) -> list[WaveBand]:
        return self._resolver().wavebands()

    def get_waveband(self) -> str:
        """Wavebands joined with ``/``."""
        return "/".join(str(wb) for wb in self.get_wavebands())

    # ------------------------------------------------------------------
    # coordinates
    # ------------------------------------------------------------------

    def get_coords(self, tag: str) -> Coords | None:
        if self.coordinates is None:
            return None
        return self.coordinates.tcs.get_coords(tag)

    def get_target(self) -> Coords | None:
        return self.get_coords("BASE")

    def get_guide(self) -> Coords | None:
        return self.get_coords("GUIDE")

    def get_target_name(self) -> str:
        c = self.get_target()
        return c.name if c is not None else NO_TARGET_NAME

    def get_guide_name(self) -> str | None:
        c = self.get_guide()
        return c.name if c is not None else None

    # ------------------------------------------------------------------
    # headers
    # ------------------------------------------------------------------

    def get_header_items(self, name: str | None) -> list[str]:
        """All values of header ``name`` in exec order (empty if absent)."""
        return get_header_values(self._lines, name)

    def get_header_item(self, name: str | None) -> str | None:
        """Last value of header ``name`` or ``None``."""
        values = self.get_header_items(name)
        return values[-1] if values else None

    def set_header_item(
        self,
        name: str,
        value: object,
        insert_after: str | Pattern[str] | None = None,
    ) -> None:
        written = set_header_value(self._lines, name, value, insert_after=insert_after)
        self.modified = True
        log.debug("setHeader %s=%r at lines %s", name, value, written)

    def get_project_id(self) -> str | None:
        return self.get_header_item("PROJECT")

    def get_msb_id(self) -> str | None:
        return self.get_header_item("MSBID")

    def get_msb_transaction_id(self) -> str | None:
        return self.get_header_item("MSBTID")

    def get_msb_title(self) -> str | None:
        return self.get_header_item("MSBTITLE")

    def get_shift_type(self) -> str | None:
        return self.get_header_item("OPER_SFT")

    # ------------------------------------------------------------------
    # configs
    # ------------------------------------------------------------------

    def get_config_item(self, key: str) -> list[str | None]:
        """Value of ``key`` in every config, in execution order.

        The list always has one entry per config; configs without the key
        contribute ``None``.
        """
        return [self._configs[name].get_item(key) for name in self._config_order]

    # ------------------------------------------------------------------
    # output
    # ------------------------------------------------------------------

    def summary(self) -> str:
        """One-line fixed-width summary: instrument, target, waveband, mode."""

        inst = self.get_instrument()
        resolver = self._resolver()
        waveband = "/".join(str(wb) for wb in resolver.wavebands())
        mode = resolver.mode_string()
        target = self.get_target_name()[:15]
        return f"{inst:<10s} {target:<15s} {waveband:<12s} {mode:<15s}"

    def write_sequence(self, output_dir: str | Path, *, timestamp: datetime | None = None) -> Path:
        """Write the exec to a new uniquely named file in ``output_dir``.

        Returns the path written.
        """

        out = Path(output_dir)
        stem = exec_stem(self.get_instrument(), timestamp)
        text = "\n".join(self._lines) + "\n"
        for name in exec_names(stem):
            path = out / name
            try:
                with path.open("x", encoding=self.settings.encoding, newline="\n") as fh:
                    fh.write(text)
            except FileExistsError:
                continue
            except OSError as e:
                raise FileAccessError(f"Unable to write exec: {e.strerror or e}", path=path) from e
            log.info("Wrote exec %s (%d lines)", path, len(self._lines))
            return path
        raise ExhaustedNamesError(
            f"All {MAX_COUNTER} exec names are taken",
            path=out,
            context={"stem": stem},
        )

    def fixup(self) -> None:
        """Hook for queue integration; nothing to fix for UKIRT execs."""

    def verify(self) -> None:
        """Hook for queue integration; UKIRT execs are not verified here."""
