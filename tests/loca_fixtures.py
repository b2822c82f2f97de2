"""Builders for synthetic .loca buffers used across the test suite."""
from __future__ import annotations

import struct
from typing import List, Optional, Sequence, Tuple

ID_LENGTH = 37
ID_GAP = 29
RECORD_WIDTH = ID_LENGTH + ID_GAP + 4


def make_id(char: str = "A", prefix: str = "h") -> bytes:
    """Return a 37-byte ASCII id, e.g. b'hAAAA...'."""
    return (prefix + char * ID_LENGTH)[:ID_LENGTH].encode("ascii")


def pack_record(identifier: bytes, length: int, suffix: bytes = b"") -> bytes:
    """Pack one index record.

    ``suffix`` includes the leading ``_``; its bytes come out of the gap, and
    the first gap byte after it is the NUL terminator.
    """
    assert len(identifier) == ID_LENGTH
    gap = ID_GAP - len(suffix)
    return identifier + suffix + b"\x00" * gap + struct.pack("<i", length)


def build_loca(
    entries: Sequence[Tuple[bytes, bytes, bytes]],
    *,
    magic: bytes = b"LOCA",
    base: Optional[int] = None,
    lengths: Optional[List[int]] = None,
) -> bytes:
    """Build a .loca buffer from (id, suffix, text) tuples.

    ``lengths`` overrides the stored text lengths (NUL included) to produce
    malformed tables; ``base`` overrides the text block address.
    """
    index = b""
    block = b""
    for i, (identifier, suffix, text) in enumerate(entries):
        length = len(text) + 1 if lengths is None else lengths[i]
        index += pack_record(identifier, length, suffix)
        block += text + b"\x00"
    if base is None:
        base = 12 + len(index)
    return magic + b"\x01\x00\x00\x00" + struct.pack("<i", base) + index + block
