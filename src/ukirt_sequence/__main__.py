"""Module entry-point.

    python -m ukirt_sequence summary UFTI_20050101_001.exec

Without arguments the version is printed instead of an argparse error.
"""

from __future__ import annotations

import sys

from ukirt_sequence.cli import main


def _run() -> int:
    argv = sys.argv[1:] or ["version"]
    return main(argv)


if __name__ == "__main__":
    raise SystemExit(_run())
