"""Instrument configuration files referenced by ``loadConfig``.

Main entrypoint: :func:`ukirt_sequence.configs.create_config`, which picks the
line grammar from the file suffix.
"""

from __future__ import annotations

from pathlib import Path

from ukirt_sequence.errors import UnrecognizedConfigFormatError

from .aim import AimConfig, parse_aim_line
from .base import ConfigDocument, LineGrammar, read_text_lines, split_lines
from .orac import OracConfig, parse_orac_line


_SUFFIX_FORMATS = {
    ".conf": OracConfig,
    ".aim": AimConfig,
}


def config_class_for(path: str | Path) -> type[ConfigDocument]:
    """Return the config class for ``path`` based on its suffix (case-insensitive)."""

    suffix = Path(str(path)).suffix.lower()
    cls = _SUFFIX_FORMATS.get(suffix)
    if cls is None:
        raise UnrecognizedConfigFormatError(
            "Unable to determine config type from suffix",
            path=path,
            context={"suffix": suffix, "known": sorted(_SUFFIX_FORMATS)},
        )
    return cls


def create_config(path: str | Path, *, encoding: str = "utf-8") -> ConfigDocument:
    """Parse the config file at ``path`` with the grammar implied by its suffix.

    No directory search is done here; see :mod:`ukirt_sequence.paths`.
    """

    cls = config_class_for(path)
    return cls(file=path, encoding=encoding)


__all__ = [
    "AimConfig",
    "ConfigDocument",
    "LineGrammar",
    "OracConfig",
    "config_class_for",
    "create_config",
    "parse_aim_line",
    "parse_orac_line",
    "read_text_lines",
    "split_lines",
]
