"""Redump record codec: [Type(4) | Length(4) | Payload(Length)]."""
from __future__ import annotations

import struct
from dataclasses import dataclass
from functools import cached_property
from typing import BinaryIO
from warnings import warn

from rd_core.errors import MalformedRecordError, ProtocolError
from rd_core.protocol import (
    DEFAULT_MAX_RECORD_SIZE,
    REC_HEADER_FMT,
    REC_HEADER_LEN,
    RecordKind,
)


@dataclass(frozen=True)
class Record:
    kind: RecordKind
    payload: bytes

    @property
    def length(self) -> int:
        return len(self.payload)

    @property
    def word_count(self) -> int:
        return len(self.payload) // 4

    @cached_property
    def words(self) -> tuple[int, ...]:
        n = self.word_count
        return struct.unpack(f"<{n}I", self.payload[: n * 4])

    def word(self, i: int) -> int | None:
        """Bounds-checked word read; None outside the payload."""
        if 0 <= i < self.word_count:
            return self.words[i]
        return None

    def require_words(self, n: int) -> tuple[int, ...]:
        if self.length != n * 4:
            raise MalformedRecordError(
                f"{self.kind.name} record needs exactly {n} words, has {self.length} bytes"
            )
        return self.words

    @property
    def text(self) -> str:
        # Text records are NUL-terminated; the payload length is an upper bound.
        raw = self.payload.split(b"\x00", 1)[0]
        return raw.decode("latin-1")


def read_record(f: BinaryIO, max_size: int = DEFAULT_MAX_RECORD_SIZE) -> Record | None:
    """Read one record, or None at end of input."""
    start_off = f.tell() if f.seekable() else -1
    header = f.read(REC_HEADER_LEN)

    # Clean EOF
    if len(header) == 0:
        return None

    if len(header) < REC_HEADER_LEN:
        warn(f"Truncated record header at offset {start_off}; treating as end of input")
        return None

    rtype, length = struct.unpack(REC_HEADER_FMT, header)

    try:
        kind = RecordKind(rtype)
    except ValueError:
        raise ProtocolError(f"unknown record type {rtype} at offset {start_off}") from None
    if kind == RecordKind.NONE:
        raise ProtocolError(f"record type 0 at offset {start_off}")

    if length > max_size:
        raise MalformedRecordError(
            f"record length {length} at offset {start_off} exceeds limit {max_size}"
        )

    payload = f.read(length)
    if len(payload) != length:
        warn(
            f"Torn {kind.name} payload at offset {start_off} "
            f"({len(payload)} of {length} bytes); treating as end of input"
        )
        return None

    return Record(kind, payload)


def pack_words(*words: int) -> bytes:
    return struct.pack(f"<{len(words)}I", *words)


def write_record(f: BinaryIO, kind: RecordKind, payload: bytes) -> None:
    f.write(struct.pack(REC_HEADER_FMT, int(kind), len(payload)))
    f.write(payload)
