"""Lockstep reading of N dump files and per-record-kind dispatch."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, Union
from warnings import warn

from rd_core.errors import CapacityError, OpenError, ProtocolError
from rd_core.protocol import MAX_STREAMS, RecordKind

from .align import AlignmentEngine, ScannedWord
from .context import Parameter, StreamContext


@dataclass(frozen=True)
class TextCell:
    text: str


@dataclass(frozen=True)
class GpuaddrCell:
    index: int
    addr: int
    length: int


@dataclass(frozen=True)
class ContextCell:
    length: int


@dataclass(frozen=True)
class CmdstreamCell:
    words: list[ScannedWord]


@dataclass(frozen=True)
class ParamCell:
    param: Parameter


@dataclass(frozen=True)
class FlushCell:
    pass


Cell = Union[TextCell, GpuaddrCell, ContextCell, CmdstreamCell, ParamCell, FlushCell]


@dataclass(frozen=True)
class Row:
    iteration: int
    kind: RecordKind
    cells: list[Cell | None]


class CompareSession:
    """Owns one StreamContext per input and advances them together.

    All inputs are opened up front so an unreadable path fails before any
    output is produced.
    """

    def __init__(self, paths: Iterable[str | Path]):
        paths = [Path(p) for p in paths]
        if not paths:
            raise OpenError("no input dumps given")
        if len(paths) > MAX_STREAMS:
            raise CapacityError(f"{len(paths)} inputs given, at most {MAX_STREAMS} supported")

        self.contexts: list[StreamContext] = []
        for p in paths:
            try:
                f = open(p, "rb")
            except OSError as e:
                self.close()
                raise OpenError(f"could not open: {p} ({e.strerror})") from e
            self.contexts.append(StreamContext(str(p), f))

        self.iteration = 0
        self._ended: set[int] = set()
        self._warned_uneven = False

    def __enter__(self) -> "CompareSession":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def close(self) -> None:
        for ctx in self.contexts:
            ctx.close()

    def _read_row(self) -> RecordKind | None:
        row_kind: RecordKind | None = None
        row_owner = ""
        for k, ctx in enumerate(self.contexts):
            if k in self._ended:
                ctx.load(None)
                continue
            record = ctx.advance()
            if record is None:
                self._ended.add(k)
                continue
            if row_kind is None:
                row_kind, row_owner = record.kind, ctx.name
            elif record.kind != row_kind:
                raise ProtocolError(
                    f"unexpected type '{int(record.kind)}' in {ctx.name}, "
                    f"expected '{int(row_kind)}' (from {row_owner}) at row {self.iteration}"
                )

        if row_kind is not None and self._ended and not self._warned_uneven:
            names = ", ".join(self.contexts[k].name for k in sorted(self._ended))
            warn(f"{names} reached end of input at row {self.iteration} while other dumps continue")
            self._warned_uneven = True
        return row_kind

    def rows(self) -> Iterator[Row]:
        while True:
            kind = self._read_row()
            if kind is None:
                break
            yield Row(self.iteration, kind, self.dispatch(kind))
            self.iteration += 1

    def dispatch(self, kind: RecordKind) -> list[Cell | None]:
        """Run the handler for `kind` over every stream holding a record this row."""
        active = [ctx for ctx in self.contexts if ctx.record is not None]

        if kind in (RecordKind.TEST, RecordKind.CMD):
            handled = self._handle_text(active)
        elif kind == RecordKind.GPUADDR:
            handled = self._handle_gpuaddr(active)
        elif kind == RecordKind.CONTEXT:
            handled = self._handle_context(active)
        elif kind == RecordKind.CMDSTREAM:
            handled = self._handle_cmdstream(active)
        elif kind == RecordKind.PARAM:
            handled = self._handle_param(active)
        elif kind == RecordKind.FLUSH:
            handled = self._handle_flush(active)
        else:
            raise ProtocolError(f"no handler for record type '{int(kind)}'")

        by_ctx = dict(zip((id(c) for c in active), handled))
        return [by_ctx.get(id(ctx)) for ctx in self.contexts]

    def _handle_text(self, active: list[StreamContext]) -> list[Cell]:
        return [TextCell(ctx.record.text) for ctx in active]

    def _handle_gpuaddr(self, active: list[StreamContext]) -> list[Cell]:
        cells: list[Cell] = []
        for ctx in active:
            addr, length = ctx.record.require_words(2)
            cells.append(GpuaddrCell(ctx.add_gpuaddr(addr), addr, length))
        return cells

    def _handle_context(self, active: list[StreamContext]) -> list[Cell]:
        # reserved, nothing tracked yet
        return [ContextCell(ctx.record.length) for ctx in active]

    def _handle_cmdstream(self, active: list[StreamContext]) -> list[Cell]:
        engine = AlignmentEngine(active)
        return [CmdstreamCell(engine.scan(k)) for k in range(len(active))]

    def _handle_param(self, active: list[StreamContext]) -> list[Cell]:
        cells: list[Cell] = []
        for ctx in active:
            param = Parameter.from_record(ctx.record)
            ctx.add_param(param)
            cells.append(ParamCell(param))
        return cells

    def _handle_flush(self, active: list[StreamContext]) -> list[Cell]:
        for ctx in active:
            ctx.flush()
        return [FlushCell() for _ in active]
