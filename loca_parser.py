#!/usr/bin/env python3
"""
Loca Localization Table Parser

Decodes binary .loca localization tables into an ordered mapping of
string identifiers to localized text.

File layout (all integers little-endian signed 32-bit):

    0x00  4 bytes   magic "LOCA"
    0x04  4 bytes   version/flags (not interpreted)
    0x08  4 bytes   base address of the text block
    0x0C  ...       index records, back to back, up to the text block
    base  ...       NUL-terminated UTF-8 strings, back to back

Each index record is a 37-byte ASCII id, an optional "_<suffix>" that
borrows its bytes from the 29-byte gap that follows, and a 4-byte length
of the record's text including its NUL terminator.

Usage:
    >>> from loca_parser import decode
    >>> table = decode(Path('english.loca').read_bytes())

Author: agentical
License: MIT
"""

import struct
from typing import Dict, Tuple


# =============================================================================
# ERRORS
# =============================================================================

class LocaError(ValueError):
    """Base class for every error raised while decoding a .loca buffer."""

    def __init__(self, message: str, position: int):
        super().__init__(f"{message} at 0x{position:X}")
        self.position = position


class InvalidMagicError(LocaError):
    """The buffer does not start with the 'LOCA' magic."""


class UnexpectedEndOfBufferError(LocaError, EOFError):
    """A fixed-size read ran past the end of the buffer."""


class SuffixTooLongError(UnexpectedEndOfBufferError):
    """An id suffix is longer than the gap it borrows from."""


class InvalidTextLengthError(LocaError):
    """A record's text span is negative or falls outside the text block."""


class InvalidUtf8Error(LocaError):
    """A record's text span is not valid UTF-8."""


class DuplicateIdentifierError(LocaError):
    """The same identifier appears in more than one index record."""

    def __init__(self, identifier: str, position: int):
        super().__init__(f"Duplicate identifier {identifier!r}", position)
        self.identifier = identifier


# =============================================================================
# PARSER CLASS
# =============================================================================

class LocaParser:
    """
    Parser for .loca localization tables.

    The index region is scanned with a single cursor. Reading a record's
    text seeks into the text block and the cursor is put back right after,
    so the scan resumes at the next index record.

    Attributes:
        data (bytes): The raw file contents.
        pos (int): Current read position in the data.

    Example:
        >>> parser = LocaParser(Path('english.loca').read_bytes())
        >>> table = parser.parse()
        >>> print(f"{len(table)} strings")
    """

    MAGIC = b'LOCA'
    HEADER_LENGTH = 8     # magic + version/flags
    INDEX_START = 12      # header + base text address
    ID_LENGTH = 37        # 'h' + 36-char GUID
    ID_GAP = 29           # bytes between the id and the offset field
    SUFFIX_MARKER = 0x5F  # '_'

    def __init__(self, data: bytes):
        self.data = bytes(data)
        self.pos = 0

    # =========================================================================
    # PRIMITIVE READ OPERATIONS
    # =========================================================================

    def read(self, n: int) -> bytes:
        """
        Read n bytes from the current position.

        Raises:
            UnexpectedEndOfBufferError: If there aren't enough bytes remaining.
        """
        if n < 0 or self.pos + n > len(self.data):
            raise UnexpectedEndOfBufferError(f"EOF, need {n} bytes", self.pos)
        result = self.data[self.pos:self.pos + n]
        self.pos += n
        return result

    def peek(self, n: int = 1) -> bytes:
        """Peek at the next n bytes without advancing position."""
        return self.data[self.pos:self.pos + n]

    def skip(self, n: int) -> None:
        """Skip n bytes (advance position without reading)."""
        self.pos += n

    def seek(self, pos: int) -> None:
        """Move the cursor to an absolute position."""
        self.pos = pos

    def remaining(self) -> int:
        """Return number of bytes remaining to be read."""
        return len(self.data) - self.pos

    def i32(self) -> int:
        """Read signed 32-bit integer."""
        return struct.unpack('<i', self.read(4))[0]

    # =========================================================================
    # RECORD STAGES
    # =========================================================================

    def parse_header(self) -> int:
        """
        Validate the magic and read the base address of the text block.

        Returns:
            Absolute offset of the text block. The cursor is left at the
            first index record.

        Raises:
            InvalidMagicError: If the data doesn't start with 'LOCA'.
        """
        if self.data[:len(self.MAGIC)] != self.MAGIC:
            raise InvalidMagicError(
                f"Invalid magic: {self.data[:4]!r} (expected {self.MAGIC!r})", 0)

        self.seek(0)
        self.read(self.HEADER_LENGTH)  # magic + version (unused)
        return self.i32()

    def read_id(self) -> Tuple[str, int]:
        """
        Read a record identifier and its optional suffix.

        The id is a fixed 37-byte ASCII field. If it is followed by '_',
        the marker and every byte up to the next NUL belong to the id too.
        The NUL itself is left unread; it is part of the gap.

        Returns:
            Tuple of (identifier, number of suffix bytes consumed).
        """
        raw = self.read(self.ID_LENGTH)
        # Non-ASCII bytes in the fixed field read as '?'
        identifier = bytes(b if b < 0x80 else 0x3F for b in raw).decode('ascii')

        if self.peek(1) != bytes([self.SUFFIX_MARKER]):
            return identifier, 0

        suffix_start = self.pos
        while True:
            if self.remaining() < 1:
                raise UnexpectedEndOfBufferError(
                    "Unterminated id suffix", suffix_start)
            if self.data[self.pos] == 0:
                break
            self.skip(1)

        suffix = self.data[suffix_start:self.pos]
        return identifier + suffix.decode('latin-1'), len(suffix)

    def read_next_offset(self, extra_len: int) -> int:
        """
        Skip the gap after an id and read the record's text length.

        The gap shrinks by however many suffix bytes were already consumed,
        so every record has the same total width.

        Returns:
            The text length including its NUL terminator.
        """
        gap = self.ID_GAP - extra_len
        if gap < 0:
            raise SuffixTooLongError(
                f"Id suffix of {extra_len} bytes exceeds the {self.ID_GAP}-byte gap",
                self.pos)
        self.skip(gap)
        return self.i32()

    def read_text(self, base_text_addr: int, prev_offset: int, next_offset: int) -> str:
        """
        Read a record's text from the text block.

        Moves the cursor; callers restore it before continuing the scan.

        Args:
            base_text_addr: Absolute start of the text block.
            prev_offset: Text block bytes taken by all previous records.
            next_offset: This record's length including its NUL terminator.

        Raises:
            InvalidTextLengthError: If the span is negative or out of range.
            InvalidUtf8Error: If the span is not valid UTF-8.
        """
        start = base_text_addr + prev_offset
        length = next_offset - 1
        if length < 0:
            raise InvalidTextLengthError(
                f"Negative text length {length} (offset {next_offset})", self.pos)
        if start < base_text_addr or start < 0 or start + length > len(self.data):
            raise InvalidTextLengthError(
                f"Text span 0x{start:X}+{length} outside text block "
                f"0x{base_text_addr:X}-0x{len(self.data):X}", self.pos)

        self.seek(start)
        raw = self.read(length)
        try:
            return raw.decode('utf-8')
        except UnicodeDecodeError as e:
            raise InvalidUtf8Error(
                f"Invalid UTF-8 in text ({e.reason})", start + e.start) from e

    # =========================================================================
    # MAIN PARSE METHOD
    # =========================================================================

    def parse(self) -> Dict[str, str]:
        """
        Parse the entire table.

        Returns:
            Dictionary of identifier -> text, in index order.

        Raises:
            LocaError: On any malformed input. No partial table is returned.
        """
        table: Dict[str, str] = {}
        prev_offset = 0
        base_text_addr = self.parse_header()
        if base_text_addr > len(self.data):
            raise UnexpectedEndOfBufferError(
                f"Text block at 0x{base_text_addr:X} starts past end of data "
                f"(0x{len(self.data):X})", self.pos)

        while self.pos < base_text_addr:
            record_pos = self.pos
            identifier, extra_len = self.read_id()
            next_offset = self.read_next_offset(extra_len)
            resume_pos = self.pos

            text = self.read_text(base_text_addr, prev_offset, next_offset)
            if identifier in table:
                raise DuplicateIdentifierError(identifier, record_pos)
            table[identifier] = text

            self.seek(resume_pos)
            prev_offset += next_offset

        return table


def decode(data: bytes) -> Dict[str, str]:
    """Decode a .loca buffer into a dictionary of identifier -> text."""
    return LocaParser(data).parse()
