from __future__ import annotations

"""Waveband descriptors: a named filter or a central wavelength."""

from dataclasses import dataclass

import astropy.units as u

from ukirt_sequence.errors import BadArgumentError


KIND_FILTER = "Filter"
KIND_WAVELENGTH = "Wavelength"


@dataclass(frozen=True)
class WaveBand:
    """Filter or wavelength of an instrument setup.

    Wavelengths in UKIRT configs are in microns. ``str()`` gives the filter
    name or the wavelength exactly as written in the config (``raw``), which
    is what summaries print.
    """

    instrument: str
    filter: str | None = None
    wavelength: u.Quantity | None = None
    raw: str | None = None

    def __post_init__(self) -> None:
        if (self.filter is None) == (self.wavelength is None):
            raise BadArgumentError(
                "WaveBand needs exactly one of filter or wavelength",
                context={"instrument": self.instrument},
            )

    @classmethod
    def from_config(cls, instrument: str, kind: str, value: str) -> "WaveBand":
        """Build a waveband from a raw config value of the given kind."""

        if kind == KIND_FILTER:
            return cls(instrument=instrument, filter=str(value))
        if kind == KIND_WAVELENGTH:
            try:
                wl = float(value) * u.micron
            except (TypeError, ValueError) as e:
                raise BadArgumentError(
                    "Wavelength is not a number",
                    context={"instrument": instrument, "value": value},
                ) from e
            return cls(instrument=instrument, wavelength=wl, raw=str(value).strip())
        raise BadArgumentError(f"Unknown waveband kind {kind!r}", context={"instrument": instrument})

    @property
    def kind(self) -> str:
        return KIND_FILTER if self.filter is not None else KIND_WAVELENGTH

    def __str__(self) -> str:
        if self.filter is not None:
            return self.filter
        if self.raw:
            return self.raw
        return repr(float(self.wavelength.to_value(u.micron)))
