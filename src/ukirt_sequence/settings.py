"""Library settings (``settings.yaml``).

Settings only affect where configs are searched for, how files are decoded and
how much is logged. They never change what a sequence parses to.

Resolution (first match wins):
  1) explicit path passed to :func:`load_settings`
  2) env var ``UKIRT_SEQ_SETTINGS``
  3) built-in defaults
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError

from ukirt_sequence.errors import BadArgumentError, FileAccessError


log = logging.getLogger(__name__)

SETTINGS_ENV = "UKIRT_SEQ_SETTINGS"


class SequenceSettings(BaseModel):
    """Search and I/O options for :class:`~ukirt_sequence.sequence.SequenceDocument`.

    trace_search: log every candidate path tried while locating configs at
        INFO instead of DEBUG.
    """

    # Unknown keys are kept and reported by find_unknown_keys().
    model_config = ConfigDict(extra="allow", frozen=True)

    configs_dirname: str = "configs"
    config_suffixes: Tuple[str, ...] = ("", ".conf", ".aim")
    encoding: str = "utf-8"
    trace_search: bool = False
    log_level: Optional[str] = None
    output_dir: Optional[str] = None


_KNOWN_KEYS = set(SequenceSettings.model_fields)


def find_unknown_keys(raw: Dict[str, Any]) -> List[str]:
    """Return settings keys that the model does not know (likely typos)."""
    return sorted(str(k) for k in raw if str(k) not in _KNOWN_KEYS)


def settings_from_dict(raw: Dict[str, Any] | None, *, source: str | None = None) -> SequenceSettings:
    raw = dict(raw or {})
    unknown = find_unknown_keys(raw)
    if unknown:
        log.warning("Unknown settings keys in %s: %s", source or "<dict>", ", ".join(unknown))
    try:
        return SequenceSettings.model_validate(raw)
    except ValidationError as e:
        msg = str(e)
        if len(msg) > 2000:
            msg = msg[:2000] + "…"
        raise BadArgumentError(f"Invalid settings: {msg}", path=source) from e


def load_settings(path: str | Path | None = None) -> SequenceSettings:
    """Load settings from YAML, falling back to the env var and then defaults."""

    if path is None:
        env = os.environ.get(SETTINGS_ENV)
        if not env:
            return SequenceSettings()
        path = env

    p = Path(str(path)).expanduser()
    try:
        text = p.read_text(encoding="utf-8")
    except OSError as e:
        raise FileAccessError(f"Unable to read settings: {e.strerror or e}", path=p) from e
    try:
        raw = yaml.safe_load(text) or {}
    except yaml.YAMLError as e:
        raise BadArgumentError(f"Settings file is not valid YAML: {e}", path=p) from e
    if not isinstance(raw, dict):
        raise BadArgumentError("Settings file must contain a mapping", path=p)
    return settings_from_dict(raw, source=str(p))
