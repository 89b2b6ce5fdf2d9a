"""
nu2vgap - Nu to VGA Planets converter

Turns the game state served by the Nu host into the binary files read by
classic VGA Planets clients: result file, spec tables and status file.
"""

__version__ = "0.1.0"
__author__ = "nu2vgap contributors"

from nu2vgap.document import GameDocument
from nu2vgap.errors import Nu2VgapError, ParseError, SchemaError

__all__ = [
    "GameDocument",
    "Nu2VgapError",
    "ParseError",
    "SchemaError",
]
