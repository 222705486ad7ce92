from __future__ import annotations

import enum
import mmap
import os
from pathlib import Path
from typing import Iterator, NamedTuple, Union
from warnings import warn

from pkz_core.names import is_valid_name, is_word_byte, wem_name
from pkz_core.protocol import (
    DEFAULT_NAME,
    MAGIC_LEN,
    MAGIC_WEM_REC,
    MIN_PAYLOAD_LEN,
    PAD_STRIDE,
    PAD_WORD,
)


class ByteStream:
    """Read-only, randomly addressable view over an archive's bytes.

    Backed by a memory map for files on disk, or by a plain bytes object.
    """

    def __init__(self, data: bytes | mmap.mmap):
        self._buf = data

    @classmethod
    def open(cls, path: Path) -> "ByteStream":
        with open(path, "rb") as f:
            size = os.fstat(f.fileno()).st_size
            # mmap refuses empty files
            if size == 0:
                return cls(b"")
            # The map holds its own reference to the file.
            return cls(mmap.mmap(f.fileno(), 0, access=mmap.ACCESS_READ))

    def __len__(self) -> int:
        return len(self._buf)

    def __getitem__(self, offset: int) -> int:
        return self._buf[offset]

    def read(self, offset: int, size: int) -> bytes:
        return bytes(self._buf[offset:offset + size])

    def find(self, sub: bytes, start: int, end: int) -> int:
        return self._buf.find(sub, start, end)

    def close(self) -> None:
        if isinstance(self._buf, mmap.mmap):
            self._buf.close()
        self._buf = b""

    def __enter__(self) -> "ByteStream":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


class Record(NamedTuple):
    start_offset: int  # first byte of the magic
    end_offset: int  # first byte of the trailing padding
    name: str

    @property
    def length(self) -> int:
        return self.end_offset - self.start_offset


class Skip(NamedTuple):
    marker_offset: int
    name: str


Outcome = Union[Record, Skip]


def find_marker(stream: ByteStream, start_offset: int = 0) -> int | None:
    """Scan forward for the next record magic.

    Anchors on the first magic byte and compares the remaining three.
    Candidate positions stop short of the final four bytes of the stream.
    """
    limit = len(stream) - MAGIC_LEN
    anchor = MAGIC_WEM_REC[:1]
    rest = MAGIC_WEM_REC[1:]

    pos = max(start_offset, 0)
    while pos < limit:
        pos = stream.find(anchor, pos, limit)
        if pos == -1:
            return None
        if stream.read(pos + 1, MAGIC_LEN - 1) == rest:
            return pos
        pos += 1

    return None


def recover_name(stream: ByteStream, marker_offset: int) -> str:
    """Recover the record name from the text tokens preceding its magic.

    Walks backward from the byte before the magic, rebuilding each run of
    word bytes. The nearest run containing an underscore wins. A run still
    open when offset 0 is passed is never considered.
    """
    token = bytearray()
    pos = marker_offset - 1
    while pos >= 0:
        b = stream[pos]
        if is_word_byte(b):
            token.insert(0, b)
        elif token:
            candidate = token.decode("ascii")
            if is_valid_name(candidate):
                return wem_name(candidate)
            token.clear()
        pos -= 1

    return DEFAULT_NAME


def find_end(stream: ByteStream, marker_offset: int) -> int | None:
    """Find the trailing zero padding that closes the record at marker_offset.

    Reads non-overlapping 4-byte words from the magic onward. Zero words
    closer than MIN_PAYLOAD_LEN to the magic belong to the record header
    and are ignored. Returns the offset of the accepted zero word.
    """
    limit = len(stream) - PAD_STRIDE
    min_end = marker_offset + MIN_PAYLOAD_LEN

    pos = marker_offset
    while pos < limit:
        if pos >= min_end and stream.read(pos, PAD_STRIDE) == PAD_WORD:
            return pos
        pos += PAD_STRIDE

    return None


class ScanState(enum.Enum):
    SCANNING = "scanning"
    MARKER_FOUND = "marker_found"
    END_OF_STREAM = "end_of_stream"


class RecordScanner:
    """Drives scan -> name -> bound cycles over a stream.

    - The cursor only moves forward: to a record's end, or just past the
      magic of a record whose end could not be found.
    - Iteration stops when no further magic exists.
    """

    def __init__(self, stream: ByteStream, start_offset: int = 0):
        self.stream = stream
        self.cursor = start_offset
        self.state = ScanState.SCANNING
        self._marker: int | None = None
        self.scan_stats = {
            "markers": 0,
            "records": 0,
            "skipped": 0,
        }

    def step(self) -> Outcome | None:
        """Advance until the next outcome. Returns None once the stream is exhausted."""
        while self.state is not ScanState.END_OF_STREAM:
            if self.state is ScanState.SCANNING:
                marker = find_marker(self.stream, self.cursor)
                if marker is None:
                    self.state = ScanState.END_OF_STREAM
                    break
                self._marker = marker
                self.scan_stats["markers"] += 1
                self.state = ScanState.MARKER_FOUND
                continue

            marker = self._marker
            name = recover_name(self.stream, marker)
            end = find_end(self.stream, marker)
            self.state = ScanState.SCANNING

            if end is None:
                self.scan_stats["skipped"] += 1
                warn(f"No padding found after record magic at offset 0x{marker:X}. Skipping.")
                self.cursor = marker + MAGIC_LEN
                return Skip(marker, name)

            self.scan_stats["records"] += 1
            self.cursor = end
            return Record(marker, end, name)

        return None

    def __iter__(self) -> Iterator[Outcome]:
        while True:
            outcome = self.step()
            if outcome is None:
                return
            yield outcome

    def get_scan_stats(self) -> dict:
        return dict(self.scan_stats)
