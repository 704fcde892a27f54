"""ukirt-sequence: parse and manipulate UKIRT observation sequences.

Main entrypoint: :class:`ukirt_sequence.sequence.SequenceDocument`.
"""

from .version import __version__
from .sequence import SequenceDocument

__all__ = ["__version__", "SequenceDocument"]
