from pathlib import Path

import pytest

from rd_core.protocol import RecordKind
from rd_core.records import Record, pack_words, write_record
from rd_compare.context import StreamContext


@pytest.fixture
def make_dump(tmp_path):
    """Write a dump file from (kind, payload) pairs."""

    def _make(name: str, records: list[tuple[RecordKind, bytes]]) -> Path:
        p = tmp_path / name
        with open(p, "wb") as f:
            for kind, payload in records:
                write_record(f, kind, payload)
        return p

    return _make


@pytest.fixture
def cmdstream_ctx():
    """Build a StreamContext holding one cmdstream record."""

    def _ctx(name: str, words: list[int], gpuaddrs: tuple[int, ...] = ()) -> StreamContext:
        ctx = StreamContext(name)
        for addr in gpuaddrs:
            ctx.add_gpuaddr(addr)
        ctx.load(Record(RecordKind.CMDSTREAM, pack_words(*words)))
        return ctx

    return _ctx
