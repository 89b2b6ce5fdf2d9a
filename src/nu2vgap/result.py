"""
Result File Assembler

Writes ``player<race>.rst``: a 52-byte header of section offsets followed
by the sections in fixed order. Offsets are only known once the sections
are written, so the header is reserved first and rewritten at the end.

The file is assembled under a temporary name and moved into place by
``finish()``; an aborted run never leaves a half-written result behind.
"""

import enum
import logging
import os
from pathlib import Path
from typing import BinaryIO, List, Optional, Union

from nu2vgap.binfmt import pack
from nu2vgap.errors import Nu2VgapError

logger = logging.getLogger(__name__)

RESULT_SIGNATURE = b"VER3.501"
HEADER_SIZE = 52


class SectionSlot(enum.IntEnum):
    """Header slots, in the order the sections appear in the file."""
    SHIPS = 0
    TARGETS = 1
    PLANETS = 2
    BASES = 3
    MESSAGES = 4
    SHIPXY = 5
    GEN = 6
    VCR = 7
    # Never written by the converter; kept at 0
    KORE = 8
    SKORE = 9


class AssemblerState(enum.Enum):
    EMPTY = "empty"
    HEADER_RESERVED = "header_reserved"
    FINALIZED = "finalized"


class AssemblerStateError(Nu2VgapError):
    """Sections written out of order, omitted, or outside begin()/finish()."""


def pack_header(offsets: List[int]) -> bytes:
    """Header: 8 offsets, signature, then KORE, a zero word and SKORE."""
    return (
        pack("<8I", *offsets[:8])
        + RESULT_SIGNATURE
        + pack("<3I", offsets[SectionSlot.KORE], 0, offsets[SectionSlot.SKORE])
    )


class ResultFileAssembler:
    """
    Sequential writer for a result file.

    Usage:
        with ResultFileAssembler("player3.rst") as rst:
            rst.write_section(SectionSlot.SHIPS, ships)
            ...
        # finish() is called on normal exit, abort() on an exception
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self.temp_path = self.path.with_name(self.path.name + ".tmp")
        self.offsets: List[int] = [0] * len(SectionSlot)
        self.state = AssemblerState.EMPTY
        self._file: Optional[BinaryIO] = None
        self._next_slot = SectionSlot.SHIPS

    @property
    def position(self) -> int:
        """Current 0-based write position."""
        if self._file is None:
            raise AssemblerStateError("result file is not open")
        return self._file.tell()

    def begin(self) -> None:
        if self.state is not AssemblerState.EMPTY:
            raise AssemblerStateError(f"begin() in state {self.state.value}")
        self._file = open(self.temp_path, "wb")
        self._file.write(pack_header(self.offsets))
        self.state = AssemblerState.HEADER_RESERVED

    def write_section(self, slot: SectionSlot, data: bytes) -> int:
        """Append a section; returns its 1-based offset."""
        if self.state is not AssemblerState.HEADER_RESERVED:
            raise AssemblerStateError(f"cannot write {slot.name} in state {self.state.value}")
        if slot != self._next_slot or slot > SectionSlot.VCR:
            raise AssemblerStateError(
                f"section {slot.name} written out of order, expected {self._next_slot.name}"
            )
        offset = self.position + 1
        self.offsets[slot] = offset
        self._file.write(data)
        self._next_slot = SectionSlot(slot + 1)
        logger.debug("%s: %d bytes at %d", slot.name, len(data), offset)
        return offset

    def finish(self) -> Path:
        if self.state is not AssemblerState.HEADER_RESERVED:
            raise AssemblerStateError(f"finish() in state {self.state.value}")
        if self._next_slot != SectionSlot.KORE:
            raise AssemblerStateError(f"finish() before section {self._next_slot.name}")
        self._file.seek(0)
        self._file.write(pack_header(self.offsets))
        self._file.close()
        self._file = None
        os.replace(self.temp_path, self.path)
        self.state = AssemblerState.FINALIZED
        return self.path

    def abort(self) -> None:
        """Discard the temporary file; the target file is left untouched."""
        if self._file is not None:
            self._file.close()
            self._file = None
        try:
            self.temp_path.unlink()
        except FileNotFoundError:
            pass
        self.state = AssemblerState.FINALIZED

    def __enter__(self) -> "ResultFileAssembler":
        self.begin()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is not None:
            self.abort()
            return
        try:
            self.finish()
        except AssemblerStateError:
            self.abort()
            raise
