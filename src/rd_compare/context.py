from __future__ import annotations

from dataclasses import dataclass, field
from typing import BinaryIO

from rd_core.errors import CapacityError, MalformedRecordError
from rd_core.protocol import (
    MAX_GPUADDRS,
    MAX_PARAM_BITLEN,
    MAX_PARAMS,
    PARAM_COLORS,
    PARAM_NAMES,
    ParamKind,
)
from rd_core.records import Record, read_record


@dataclass(frozen=True)
class Parameter:
    kind: ParamKind
    value: int
    bitlen: int

    @classmethod
    def from_record(cls, record: Record) -> "Parameter":
        ptype, value, bitlen = record.require_words(3)
        try:
            kind = ParamKind(ptype)
        except ValueError:
            raise MalformedRecordError(f"unknown parameter type {ptype}") from None
        if bitlen > MAX_PARAM_BITLEN:
            raise MalformedRecordError(f"parameter bit length {bitlen} exceeds {MAX_PARAM_BITLEN}")
        return cls(kind, value, bitlen)

    @property
    def name(self) -> str:
        return PARAM_NAMES[self.kind]

    @property
    def color(self) -> int:
        return PARAM_COLORS[self.kind]


@dataclass
class StreamContext:
    """Per-input state: current record plus what the stream has announced so far.

    `gpuaddrs` only ever grows within a session. `params` is cleared by a
    flush record.
    """

    name: str
    handle: BinaryIO | None = None
    record: Record | None = None
    gpuaddrs: list[int] = field(default_factory=list)
    params: list[Parameter] = field(default_factory=list)

    def advance(self) -> Record | None:
        # Drop the previous record before reading the next one.
        self.record = None
        self.record = read_record(self.handle)
        return self.record

    def load(self, record: Record | None) -> None:
        self.record = record

    @property
    def words(self) -> tuple[int, ...]:
        return self.record.words if self.record is not None else ()

    @property
    def word_count(self) -> int:
        return self.record.word_count if self.record is not None else 0

    def word_at(self, i: int) -> int | None:
        if self.record is None:
            return None
        return self.record.word(i)

    def add_gpuaddr(self, addr: int) -> int:
        if len(self.gpuaddrs) >= MAX_GPUADDRS:
            raise CapacityError(f"{self.name}: more than {MAX_GPUADDRS} gpu addresses")
        self.gpuaddrs.append(addr)
        return len(self.gpuaddrs) - 1

    def find_gpuaddr(self, word: int | None) -> int | None:
        if word is None:
            return None
        for i, addr in enumerate(self.gpuaddrs):
            if addr == word:
                return i
        return None

    def add_param(self, param: Parameter) -> None:
        if len(self.params) >= MAX_PARAMS:
            raise CapacityError(f"{self.name}: more than {MAX_PARAMS} active parameters")
        self.params.append(param)

    def flush(self) -> None:
        self.params.clear()

    def close(self) -> None:
        if self.handle is not None:
            self.handle.close()
