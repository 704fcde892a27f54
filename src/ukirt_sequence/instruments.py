from __future__ import annotations

"""Instrument identity and instrument-dependent views of a sequence.

Instrument resolution
---------------------
The instrument is taken from the first source that has it:

1. a ``set_inst NAME`` (or disabled ``-set_inst NAME``) line in the exec
2. the ``instrument`` item of the first config (in execution order) that has one
3. the exec file name, up to its first underscore (``UFTI_20040101...``)
4. ``UNKNOWN``

The result is always upper case and the source is recorded.

Camera modes and wavebands
--------------------------
Imagers (UFTI, WFCAM) and CGS4 have a fixed camera mode. UIST and MICHELLE
switch between imaging and spectroscopy per config, so their waveband key
depends on the first camera mode found in the configs.
"""

import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Iterable, Sequence

from ukirt_sequence.errors import AmbiguousModeError, UnknownInstrumentError
from ukirt_sequence.waveband import KIND_FILTER, KIND_WAVELENGTH, WaveBand


UNKNOWN_INSTRUMENT = "UNKNOWN"

IMAGERS = frozenset({"UFTI", "WFCAM"})
SPECTROMETERS = frozenset({"CGS4"})
DUAL_MODE = frozenset({"UIST", "MICHELLE"})
KNOWN_INSTRUMENTS = IMAGERS | SPECTROMETERS | DUAL_MODE

MODE_IMAGING = "imaging"
MODE_SPECTROSCOPY = "spectroscopy"

_SET_INST_RE = re.compile(r"^-?set_inst\s+(?P<inst>.*?)\s*$", re.IGNORECASE)


class InstrumentSource(str, Enum):
    EXEC = "exec"
    CONFIG = "config"
    FILENAME = "filename"
    DEFAULT = "default"


@dataclass(frozen=True)
class InstrumentResolution:
    instrument: str
    source: InstrumentSource


def collapse_consecutive(values: Iterable[Any]) -> list[Any]:
    """Drop undefined entries and collapse runs of identical values.

    Non-adjacent repeats are kept: ``[a, a, b, a] -> [a, b, a]``.
    """

    out: list[Any] = []
    for v in values:
        if v is None:
            continue
        if out and out[-1] == v:
            continue
        out.append(v)
    return out


def instrument_from_exec(lines: Sequence[str]) -> str | None:
    for line in lines:
        m = _SET_INST_RE.match(line)
        if m and m.group("inst"):
            return m.group("inst")
    return None


def instrument_from_filename(filename: str | Path | None) -> str | None:
    if not filename:
        return None
    base = Path(str(filename)).name
    if "_" not in base:
        return None
    prefix = base.split("_", 1)[0]
    return prefix or None


def resolve_instrument(
    lines: Sequence[str],
    config_instruments: Iterable[str | None] = (),
    filename: str | Path | None = None,
) -> InstrumentResolution:
    """Resolve the instrument from exec, configs and file name, in that order."""

    inst = instrument_from_exec(lines)
    if inst:
        return InstrumentResolution(inst.upper(), InstrumentSource.EXEC)

    for v in config_instruments:
        if v is not None and str(v).strip():
            return InstrumentResolution(str(v).strip().upper(), InstrumentSource.CONFIG)

    inst = instrument_from_filename(filename)
    if inst:
        return InstrumentResolution(inst.upper(), InstrumentSource.FILENAME)

    return InstrumentResolution(UNKNOWN_INSTRUMENT, InstrumentSource.DEFAULT)


class InstrumentResolver:
    """Instrument-dependent queries over the configs of one sequence.

    ``config_item`` returns one value per config (``None`` where a config
    lacks the key), in execution order.
    """

    def __init__(self, instrument: str, config_item: Callable[[str], list[str | None]]):
        self.instrument = str(instrument).upper()
        self._config_item = config_item

    def _unknown(self, what: str) -> UnknownInstrumentError:
        return UnknownInstrumentError(
            f"Unknown instrument {self.instrument!r} (cannot determine {what})",
            instrument=self.instrument,
            context={"known": sorted(KNOWN_INSTRUMENTS)},
        )

    def camera_modes(self) -> list[str]:
        if self.instrument in IMAGERS:
            return [MODE_IMAGING]
        if self.instrument in SPECTROMETERS:
            return [MODE_SPECTROSCOPY]
        if self.instrument in DUAL_MODE:
            return collapse_consecutive(self._config_item("camera"))
        raise self._unknown("camera mode")

    def _first_camera_mode(self) -> str:
        modes = self.camera_modes()
        if not modes:
            raise AmbiguousModeError(
                f"Unable to determine camera mode for {self.instrument}",
                context={"camera": self._config_item("camera")},
            )
        return modes[0]

    def waveband_key(self) -> tuple[str, str]:
        """Return ``(config key, waveband kind)`` for this instrument."""

        if self.instrument in IMAGERS:
            return "filter", KIND_FILTER
        if self.instrument in DUAL_MODE:
            if self._first_camera_mode() == MODE_SPECTROSCOPY:
                return "centralWavelength", KIND_WAVELENGTH
            return "filter", KIND_FILTER
        if self.instrument in SPECTROMETERS:
            return "wavelength", KIND_WAVELENGTH
        raise self._unknown("waveband")

    def wavebands(self) -> list[WaveBand]:
        key, kind = self.waveband_key()
        values = collapse_consecutive(self._config_item(key))
        return [WaveBand.from_config(self.instrument, kind, v) for v in values]

    def mode_string(self) -> str:
        """Short optical-setup description used in summaries."""

        if self.instrument in SPECTROMETERS:
            return "/".join(collapse_consecutive(self._config_item("grating")))
        if self.instrument in IMAGERS:
            return MODE_IMAGING
        if self.instrument in DUAL_MODE:
            if self._first_camera_mode() == MODE_IMAGING:
                return MODE_IMAGING
            return "/".join(collapse_consecutive(self._config_item("disperser")))
        raise self._unknown("mode")
