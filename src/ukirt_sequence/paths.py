from __future__ import annotations

"""Where ``loadConfig`` and ``telConfig`` files are looked for.

Configs referenced from an exec are searched, stopping at the first hit, in:

1. ``<exec dir>/<name>`` (or ``<name>`` as given if it has a directory part)
2. the same with the file name lower-cased
3. ``<exec dir>/../configs/<name>``
4. the same with the file name lower-cased

each tried with the suffixes ``""``, ``.conf`` and ``.aim``. Telescope configs
use only locations 1 and 3, without suffixes or case folding.
"""

import logging
from pathlib import Path
from typing import Sequence

from ukirt_sequence.errors import ConfigNotFoundError


log = logging.getLogger(__name__)

DEFAULT_SUFFIXES: tuple[str, ...] = ("", ".conf", ".aim")
DEFAULT_CONFIGS_DIRNAME = "configs"


def _has_dir_component(name: str) -> bool:
    p = Path(name)
    return p.is_absolute() or len(p.parts) > 1


def _lower_name(p: Path) -> Path:
    return p.with_name(p.name.lower())


def base_locations(
    name: str,
    input_dir: str | Path,
    *,
    configs_dirname: str = DEFAULT_CONFIGS_DIRNAME,
    fold_case: bool = True,
) -> list[Path]:
    """Return the base paths (without suffix) in search order."""

    name = str(name).strip()
    idir = Path(str(input_dir or "."))
    primary = Path(name) if _has_dir_component(name) else idir / name
    fallback = idir / ".." / configs_dirname / name

    bases = [primary]
    if fold_case:
        bases.append(_lower_name(primary))
    bases.append(fallback)
    if fold_case:
        bases.append(_lower_name(fallback))
    return bases


def config_candidates(
    name: str,
    input_dir: str | Path,
    *,
    suffixes: Sequence[str] = DEFAULT_SUFFIXES,
    configs_dirname: str = DEFAULT_CONFIGS_DIRNAME,
) -> list[Path]:
    """Every candidate path for config ``name``, duplicates removed, in order."""

    seen: set[str] = set()
    out: list[Path] = []
    for base in base_locations(name, input_dir, configs_dirname=configs_dirname):
        for suf in suffixes:
            cand = base.with_name(base.name + suf) if suf else base
            key = str(cand)
            if key in seen:
                continue
            seen.add(key)
            out.append(cand)
    return out


def _first_existing(candidates: list[Path], *, what: str, name: str, trace: bool) -> Path:
    level = logging.INFO if trace else logging.DEBUG
    for cand in candidates:
        log.log(level, "Looking for %s %r at %s", what, name, cand)
        if cand.is_file():
            log.log(level, "Found %s %r at %s", what, name, cand)
            return cand
    raise ConfigNotFoundError(
        f"Unable to locate {what} {name!r}",
        candidates=[str(c) for c in candidates],
        context={"tried": len(candidates)},
    )


def find_config_file(
    name: str,
    input_dir: str | Path,
    *,
    suffixes: Sequence[str] = DEFAULT_SUFFIXES,
    configs_dirname: str = DEFAULT_CONFIGS_DIRNAME,
    trace: bool = False,
) -> Path:
    cands = config_candidates(name, input_dir, suffixes=suffixes, configs_dirname=configs_dirname)
    return _first_existing(cands, what="config", name=name, trace=trace)


def find_tel_config_file(
    name: str,
    input_dir: str | Path,
    *,
    configs_dirname: str = DEFAULT_CONFIGS_DIRNAME,
    trace: bool = False,
) -> Path:
    cands = base_locations(name, input_dir, configs_dirname=configs_dirname, fold_case=False)
    return _first_existing(cands, what="telescope config", name=name, trace=trace)
