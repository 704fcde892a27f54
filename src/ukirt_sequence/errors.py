from __future__ import annotations

"""Exceptions raised while reading, querying and writing a sequence.

Every error here is fatal to the operation that raised it. "Not found" is
never reported with an exception: lookups such as
:meth:`ukirt_sequence.sequence.SequenceDocument.get_header_item` return
``None`` or an empty list instead.
"""

from pathlib import Path
from typing import Any


class SequenceError(RuntimeError):
    """Base class for all sequence errors.

    The message is extended with the offending path and a short context
    summary so that a failure in a batch of execs is actionable.
    """

    def __init__(
        self,
        message: str,
        *,
        path: str | Path | None = None,
        context: dict[str, Any] | None = None,
    ):
        self.path = str(path) if path is not None else None
        self.context = context or {}
        base = message
        if self.path:
            base += f" | path={self.path}"
        if self.context:
            ctx = ", ".join(f"{k}={v!r}" for k, v in list(self.context.items())[:8])
            base += f" | ctx: {ctx}"
        super().__init__(base)


class FileAccessError(SequenceError):
    """An exec, config or telescope config file could not be opened, read,
    written or closed."""


class ConfigNotFoundError(SequenceError):
    """None of the candidate locations for a referenced config exists."""

    def __init__(self, message: str, *, candidates: list[str] | None = None, **kwargs: Any):
        self.candidates = list(candidates or [])
        super().__init__(message, **kwargs)


class UnrecognizedConfigFormatError(SequenceError):
    """Config file suffix is neither ``.conf`` nor ``.aim``."""


class UnknownInstrumentError(SequenceError):
    """Instrument-dependent logic met an instrument outside the known set."""

    def __init__(self, message: str, *, instrument: str | None = None, **kwargs: Any):
        self.instrument = instrument
        super().__init__(message, **kwargs)


class AmbiguousModeError(SequenceError):
    """Camera mode needed for a waveband lookup could not be determined."""


class StateError(SequenceError):
    """A one-time field was set a second time."""


class BadArgumentError(SequenceError):
    """Malformed arguments supplied to a constructor."""


class ExhaustedNamesError(SequenceError):
    """All 1000 numbered output file names are already taken."""
