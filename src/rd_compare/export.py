from __future__ import annotations

from pathlib import Path
from typing import Iterable

import pandas as pd
import pyarrow as pa
import pyarrow.parquet as pq

from .session import CmdstreamCell, Row

WORD_SCHEMA = pa.schema(
    [
        ("iteration", pa.int32()),
        ("stream_index", pa.int32()),
        ("stream", pa.string()),
        ("word_index", pa.int32()),
        ("global_index", pa.int32()),
        ("fillers", pa.int32()),
        ("value", pa.int64()),
        ("classification", pa.string()),
        ("gpuaddr_index", pa.int64()),
        ("mask", pa.int64()),
        ("known_pattern", pa.int64()),
        ("labels", pa.string()),
    ]
)

NULLABLE_COLUMNS = ("gpuaddr_index", "mask", "known_pattern")


class WordTable:
    """Collects scanned command-stream words, one table row per word."""

    def __init__(self, stream_names: list[str]):
        self.stream_names = stream_names
        self.rows: list[dict] = []

    def add(self, row: Row) -> None:
        for k, cell in enumerate(row.cells):
            if not isinstance(cell, CmdstreamCell):
                continue
            for sw in cell.words:
                wc = sw.wordclass
                self.rows.append(
                    {
                        "iteration": row.iteration,
                        "stream_index": k,
                        "stream": self.stream_names[k],
                        "word_index": sw.index,
                        "global_index": sw.global_index,
                        "fillers": sw.fillers,
                        "value": sw.word,
                        "classification": sw.kind,
                        "gpuaddr_index": sw.gpuaddr,
                        "mask": wc.mask if wc is not None else None,
                        "known_pattern": wc.known.value if wc is not None and wc.known is not None else None,
                        "labels": ", ".join(wc.labels) if wc is not None else "",
                    }
                )

    def extend(self, rows: Iterable[Row]) -> None:
        for row in rows:
            self.add(row)

    def to_frame(self) -> pd.DataFrame:
        df = pd.DataFrame(self.rows, columns=WORD_SCHEMA.names)
        for col in NULLABLE_COLUMNS:
            df[col] = df[col].astype("Int64")
        return df.sort_values(["iteration", "stream_index", "word_index"], kind="stable")

    def write(self, out_path: Path) -> bool:
        """Write the table as parquet; False when there was nothing to write."""
        df = self.to_frame()
        if df.empty:
            return False
        out_path = Path(out_path)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        table = pa.Table.from_pandas(df, schema=WORD_SCHEMA, preserve_index=False)
        pq.write_table(table, out_path)
        return True
