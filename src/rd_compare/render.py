"""HTML table rendering of comparison rows."""
from __future__ import annotations

import html
from typing import TextIO

from rd_core.protocol import GPUADDR_COLORS, RECORD_NAMES

from .align import ScannedWord
from .session import (
    Cell,
    CmdstreamCell,
    ContextCell,
    FlushCell,
    GpuaddrCell,
    ParamCell,
    Row,
    TextCell,
)

FILLER = '<font face="monospace" color="#000000">........</font><br>'


def gpuaddr_color(index: int) -> int:
    return GPUADDR_COLORS[index % len(GPUADDR_COLORS)]


def render_word(sw: ScannedWord) -> str:
    if sw.gpuaddr is not None:
        return (
            f'<font face="monospace"><font color="#{gpuaddr_color(sw.gpuaddr):06x}">'
            f"<b>{sw.word:08x}</b></font> (gpuaddr)</font><br>"
        )

    wc = sw.wordclass
    if wc is None:
        return f'<font face="monospace" color="#000000">{sw.word:08x}</font><br>'

    parts = ['<font face="monospace">']
    for cell in wc.cells:
        byte = f'<font color="#{cell.color:06x}">{cell.value:02x}</font>'
        parts.append(f"<b>{byte}</b>" if cell.bold else byte)
    if wc.labels:
        parts.append(" (" + html.escape(", ".join(wc.labels)) + "?)")
    parts.append("</font><br>")
    return "".join(parts)


def render_cell(cell: Cell) -> str:
    if isinstance(cell, TextCell):
        return html.escape(cell.text)
    if isinstance(cell, GpuaddrCell):
        return (
            f'<font color="#{gpuaddr_color(cell.index):06x}"><b>{cell.addr:08x}</b></font><br>'
            f"(len: {cell.length:x})"
        )
    if isinstance(cell, ContextCell):
        return ""
    if isinstance(cell, CmdstreamCell):
        out = []
        for sw in cell.words:
            out.append(FILLER * sw.fillers)
            out.append(render_word(sw))
        return "".join(out)
    if isinstance(cell, ParamCell):
        p = cell.param
        return (
            f"{html.escape(p.name)}<br>"
            f'<font color="#{p.color:06x}"><b>{p.value:08x}</b></font><br>'
            f"(bitlen: {p.bitlen})"
        )
    if isinstance(cell, FlushCell):
        return ""
    raise TypeError(f"cannot render {type(cell).__name__}")


class HtmlRenderer:
    def __init__(self, out: TextIO):
        self.out = out

    def begin(self) -> None:
        self.out.write('<html><body><table border="1">\n')

    def row(self, row: Row) -> None:
        tds = "".join(
            f"<td>{render_cell(c) if c is not None else ''}</td>" for c in row.cells
        )
        self.out.write(f"<tr><th>{RECORD_NAMES[row.kind]}</th>{tds}</tr>\n")

    def end(self) -> None:
        self.out.write("</table></body></html>\n")
