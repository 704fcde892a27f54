from __future__ import annotations

"""Named sky coordinates used for targets and guide stars.

Coordinates are built from the loose fields found in execs and telescope
configs (``name type ra dec``) and wrap an :class:`astropy.coordinates.SkyCoord`.
"""

from dataclasses import dataclass

import astropy.units as u
from astropy.coordinates import SkyCoord

from ukirt_sequence.errors import BadArgumentError


# coordinate "type" as written in execs -> (astropy frame, equinox)
_SYSTEMS: dict[str, tuple[str, str | None]] = {
    "J2000": ("fk5", "J2000"),
    "RJ": ("fk5", "J2000"),
    "FK5": ("fk5", "J2000"),
    "B1950": ("fk4", "B1950"),
    "RB": ("fk4", "B1950"),
    "FK4": ("fk4", "B1950"),
    "ICRS": ("icrs", None),
}

_UNITS = {
    "s": (u.hourangle, u.deg),  # sexagesimal: RA in hours, Dec in degrees
    "sexagesimal": (u.hourangle, u.deg),
    "deg": (u.deg, u.deg),
    "degrees": (u.deg, u.deg),
    "rad": (u.rad, u.rad),
    "radians": (u.rad, u.rad),
}


@dataclass(frozen=True)
class Coords:
    name: str
    system: str
    skycoord: SkyCoord

    @property
    def ra(self):
        return self.skycoord.ra

    @property
    def dec(self):
        return self.skycoord.dec

    def __str__(self) -> str:
        return f"{self.name} {self.system} {self.skycoord.to_string('hmsdms', sep=':')}"


def make_coords(name: str, type: str, ra: str, dec: str, units: str = "s") -> Coords:
    """Construct :class:`Coords` from exec-style fields.

    Parameters
    ----------
    name
        Target name.
    type
        Coordinate system, e.g. ``J2000`` or ``B1950``.
    ra, dec
        Angles in ``units``.
    units
        ``s`` (sexagesimal), ``deg`` or ``rad``.
    """

    system = str(type).strip().upper()
    if system not in _SYSTEMS:
        raise BadArgumentError(
            "Unsupported coordinate system",
            context={"name": name, "type": type, "known": sorted(_SYSTEMS)},
        )
    unit_key = str(units).strip().lower()
    if unit_key not in _UNITS:
        raise BadArgumentError("Unsupported coordinate units", context={"name": name, "units": units})

    frame, equinox = _SYSTEMS[system]
    kwargs = {"frame": frame, "unit": _UNITS[unit_key]}
    if equinox is not None:
        kwargs["equinox"] = equinox
    try:
        sc = SkyCoord(str(ra), str(dec), **kwargs)
    except (ValueError, TypeError) as e:
        raise BadArgumentError(
            "Unable to parse coordinates",
            context={"name": name, "ra": ra, "dec": dec, "type": type},
        ) from e
    return Coords(name=str(name), system=system, skycoord=sc)
