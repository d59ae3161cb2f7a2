import pytest

from rd_core.errors import CapacityError, MalformedRecordError, OpenError, ProtocolError
from rd_core.protocol import MAX_GPUADDRS, MAX_PARAMS, MAX_STREAMS, ParamKind, RecordKind
from rd_core.records import pack_words
from rd_compare.session import (
    CmdstreamCell,
    CompareSession,
    FlushCell,
    GpuaddrCell,
    ParamCell,
    TextCell,
)

GPUADDR = 0x7C000275


def run(paths):
    with CompareSession(paths) as session:
        rows = list(session.rows())
    return session, rows


def test_gpuaddr_then_cmdstream(make_dump):
    records = [
        (RecordKind.GPUADDR, pack_words(GPUADDR, 0x100)),
        (RecordKind.CMDSTREAM, pack_words(GPUADDR)),
    ]
    _, rows = run([make_dump("a.rd", records), make_dump("b.rd", records)])

    assert [r.kind for r in rows] == [RecordKind.GPUADDR, RecordKind.CMDSTREAM]
    assert rows[0].cells == [GpuaddrCell(0, GPUADDR, 0x100)] * 2
    for cell in rows[1].cells:
        assert isinstance(cell, CmdstreamCell)
        (sw,) = cell.words
        assert sw.kind == "gpuaddr"
        assert sw.gpuaddr == 0


def test_param_labels_cmdstream_word(make_dump):
    records = [
        (RecordKind.PARAM, pack_words(ParamKind.SURFACE_WIDTH, 1920, 16)),
        (RecordKind.CMDSTREAM, pack_words(1920)),
    ]
    _, rows = run([make_dump("a.rd", records), make_dump("b.rd", records)])

    assert isinstance(rows[0].cells[0], ParamCell)
    assert rows[0].cells[0].param.name == "surface width"
    (sw,) = rows[1].cells[1].words
    assert sw.wordclass.labels == ["surface width"]


def test_text_rows(make_dump):
    a = make_dump("a.rd", [(RecordKind.TEST, b"fill<1>\0"), (RecordKind.CMD, b"draw\0pad")])
    b = make_dump("b.rd", [(RecordKind.TEST, b"fill<2>\0"), (RecordKind.CMD, b"draw\0")])
    _, rows = run([a, b])
    assert rows[0].cells == [TextCell("fill<1>"), TextCell("fill<2>")]
    assert rows[1].cells == [TextCell("draw"), TextCell("draw")]


def test_flush_only_clears_receiving_stream(make_dump):
    param = (RecordKind.PARAM, pack_words(ParamKind.COLOR, 0xFF, 8))
    a = make_dump("a.rd", [param, (RecordKind.FLUSH, b"")])
    b = make_dump("b.rd", [param])

    with pytest.warns(UserWarning, match="reached end of input"):
        session, rows = run([a, b])

    assert rows[1].kind == RecordKind.FLUSH
    assert rows[1].cells == [FlushCell(), None]
    assert session.contexts[0].params == []
    assert len(session.contexts[1].params) == 1


def test_mismatched_types_abort(make_dump):
    a = make_dump("a.rd", [(RecordKind.TEST, b"x\0"), (RecordKind.FLUSH, b"")])
    b = make_dump("b.rd", [(RecordKind.TEST, b"x\0"), (RecordKind.CMDSTREAM, pack_words(1))])
    with CompareSession([a, b]) as session:
        rows = session.rows()
        assert next(rows).kind == RecordKind.TEST
        with pytest.raises(ProtocolError, match="unexpected type '5'.*expected '7'"):
            next(rows)


def test_missing_file_fails_before_output(tmp_path, make_dump):
    a = make_dump("a.rd", [(RecordKind.FLUSH, b"")])
    with pytest.raises(OpenError, match="could not open"):
        CompareSession([a, tmp_path / "missing.rd"])


def test_stream_capacity(make_dump):
    p = make_dump("a.rd", [])
    with pytest.raises(CapacityError):
        CompareSession([p] * (MAX_STREAMS + 1))


def test_gpuaddr_capacity(make_dump):
    records = [(RecordKind.GPUADDR, pack_words(0x1000 + i, 4)) for i in range(MAX_GPUADDRS + 1)]
    with pytest.raises(CapacityError, match="gpu addresses"):
        run([make_dump("a.rd", records)])


def test_short_param_record(make_dump):
    a = make_dump("a.rd", [(RecordKind.PARAM, pack_words(0, 1))])
    with pytest.raises(MalformedRecordError):
        run([a])


def test_unknown_param_type(make_dump):
    a = make_dump("a.rd", [(RecordKind.PARAM, pack_words(42, 1, 8))])
    with pytest.raises(MalformedRecordError, match="unknown parameter type"):
        run([a])


def test_empty_records_do_not_end_the_session(make_dump):
    records = [(RecordKind.CONTEXT, b""), (RecordKind.TEST, b"after\0")]
    _, rows = run([make_dump("a.rd", records), make_dump("b.rd", records)])
    assert [r.kind for r in rows] == [RecordKind.CONTEXT, RecordKind.TEST]


def test_param_capacity(make_dump):
    records = [(RecordKind.PARAM, pack_words(ParamKind.COLOR, i + 1, 8)) for i in range(MAX_PARAMS + 1)]
    with pytest.raises(CapacityError, match="active parameters"):
        run([make_dump("a.rd", records)])


def test_flush_resets_param_capacity(make_dump):
    batch = [(RecordKind.PARAM, pack_words(ParamKind.COLOR, i + 1, 8)) for i in range(MAX_PARAMS)]
    session, _ = run([make_dump("a.rd", batch + [(RecordKind.FLUSH, b"")] + batch)])
    assert len(session.contexts[0].params) == MAX_PARAMS


def test_param_bitlen_above_word(make_dump):
    a = make_dump("a.rd", [(RecordKind.PARAM, pack_words(0, 1, 33))])
    with pytest.raises(MalformedRecordError, match="bit length 33"):
        run([a])


@pytest.mark.parametrize(
    "kind, payload",
    [
        (RecordKind.GPUADDR, pack_words(GPUADDR, 0x100, 0)),
        (RecordKind.PARAM, pack_words(ParamKind.COLOR, 1, 8, 0)),
    ],
)
def test_oversized_fixed_records(make_dump, kind, payload):
    with pytest.raises(MalformedRecordError, match="exactly"):
        run([make_dump("a.rd", [(kind, payload)])])
