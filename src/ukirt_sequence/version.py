"""Package version (PEP 440), single source for pyproject and the CLI."""

from __future__ import annotations

import platform
import sys


__version__ = "0.80.0"


def version_string() -> str:
    return f"ukirt-sequence {__version__} (Python {sys.version.split()[0]}, {platform.system()})"
