"""
Binary Format Helpers

Little-endian record packing for the legacy VGA Planets file layouts.

The legacy formats are described with ``struct`` format strings restricted
to the codes the files actually use:

- ``<n>s``  fixed-width text, padded with blanks (not NULs) and truncated
- ``H``     16-bit unsigned word
- ``I``     32-bit unsigned word
- ``B``     8-bit unsigned byte

Values coming from the document are loosely typed, so every value is coerced
before packing: missing values become 0, numbers wrap around to the field
width (a -1 stored in a 16-bit field becomes 0xFFFF), and text is stored in
the 8-bit charset one byte per code point.
"""

import re
import struct
from functools import lru_cache
from typing import Any, Iterable, List, Sequence, Tuple

TEXT_ENCODING = "latin-1"

_CODE_RE = re.compile(r"(\d*)([sHIB])")
_LEADING_NUMBER_RE = re.compile(r"\s*([-+]?(?:\d+\.?\d*|\.\d+))")

_MASKS = {
    "B": 0xFF,
    "H": 0xFFFF,
    "I": 0xFFFFFFFF,
}


def to_int(value: Any) -> int:
    """Coerce a document value to an integer the way the legacy tools did."""
    if value is None:
        return 0
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    if isinstance(value, str):
        match = _LEADING_NUMBER_RE.match(value)
        if match:
            return int(float(match.group(1)))
        return 0
    return 0


def to_text(value: Any) -> str:
    """Coerce a document value to text."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def encode_text(value: Any, width: int) -> bytes:
    """Encode text into a blank-padded field of exactly ``width`` bytes."""
    raw = to_text(value).encode(TEXT_ENCODING, errors="replace")
    return raw[:width].ljust(width, b" ")


def decode_text(raw: bytes) -> str:
    """Decode a blank-padded text field, dropping trailing blanks and NULs."""
    return raw.rstrip(b" \0").decode(TEXT_ENCODING)


class RecordFormat:
    """
    A compiled fixed-width record layout.

    Usage:
        fmt = RecordFormat("<20s8H")
        data = fmt.pack("Laser", 1, 0, 1, 0, 1, 1, 1, 10)
        values = fmt.unpack(data)
    """

    def __init__(self, fmt: str):
        if not fmt.startswith("<"):
            raise ValueError(f"Record format must be little-endian: {fmt!r}")
        self.fmt = fmt
        self._struct = struct.Struct(fmt)
        # One entry per packed value: (code, width)
        self.codes: List[Tuple[str, int]] = []
        pos = 1
        for match in _CODE_RE.finditer(fmt, 1):
            if match.start() != pos:
                raise ValueError(f"Unsupported record format: {fmt!r}")
            pos = match.end()
            count = int(match.group(1)) if match.group(1) else 1
            code = match.group(2)
            if code == "s":
                self.codes.append((code, count))
            else:
                self.codes.extend((code, 1) for _ in range(count))
        if pos != len(fmt):
            raise ValueError(f"Unsupported record format: {fmt!r}")

    @property
    def size(self) -> int:
        return self._struct.size

    def __len__(self) -> int:
        return len(self.codes)

    def pack(self, *values: Any) -> bytes:
        if len(values) != len(self.codes):
            raise ValueError(
                f"{self.fmt} expects {len(self.codes)} values, got {len(values)}"
            )
        coerced = []
        for (code, width), value in zip(self.codes, values):
            if code == "s":
                coerced.append(encode_text(value, width))
            else:
                coerced.append(to_int(value) & _MASKS[code])
        return self._struct.pack(*coerced)

    def unpack(self, data: bytes) -> List[Any]:
        """Unpack one record; short input is padded with zero bytes."""
        data = data[:self.size].ljust(self.size, b"\0")
        values = []
        for (code, _), value in zip(self.codes, self._struct.unpack(data)):
            values.append(decode_text(value) if code == "s" else value)
        return values

    def __repr__(self):
        return f"RecordFormat({self.fmt!r}, {self.size} bytes)"


@lru_cache(maxsize=None)
def record_format(fmt: str) -> RecordFormat:
    """Get a cached compiled record format."""
    return RecordFormat(fmt)


def pack(fmt: str, *values: Any) -> bytes:
    """Pack values with coercion, e.g. ``pack("<3H", x, y, -1)``."""
    return record_format(fmt).pack(*values)


def pack_words(values: Iterable[Any]) -> bytes:
    """Pack a flat sequence of 16-bit words."""
    values = list(values)
    return pack(f"<{len(values)}H", *values) if values else b""


def pack_counted(records: Sequence[bytes]) -> bytes:
    """Prefix a list of packed records with their 16-bit count."""
    return pack("<H", len(records)) + b"".join(records)


def checksum(data: bytes) -> int:
    """Plain byte sum used by the legacy reader as an integrity tag."""
    return sum(data)
