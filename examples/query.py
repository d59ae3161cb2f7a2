"""Query a word table - list cmdstream words the streams disagree on."""
from __future__ import annotations

import sys
from pathlib import Path

import duckdb


def main() -> None:
    if len(sys.argv) < 2:
        print("Usage: python query.py <words.parquet> [iteration]")
        print("Example: rd-compare a.rd b.rd --table words.parquet > out.html")
        print("         python query.py words.parquet 4")
        sys.exit(1)

    table = Path(sys.argv[1])
    iteration = int(sys.argv[2]) if len(sys.argv) > 2 else None

    con = duckdb.connect(":memory:")
    con.execute(f"CREATE VIEW words AS SELECT * FROM '{table}'")

    where = "classification = 'raw' OR fillers > 0"
    if iteration is not None:
        where = f"({where}) AND iteration = {iteration}"

    sql = f"""
    SELECT
        iteration,
        stream,
        word_index,
        global_index,
        fillers,
        printf('%08x', value) AS word
    FROM words
    WHERE {where}
    ORDER BY iteration, global_index, stream_index
    """

    print("--- Unmatched or realigned cmdstream words ---\n")

    df = con.execute(sql).fetchdf()
    if df.empty:
        print("All cmdstream words share a pattern across streams.")
    else:
        for _, row in df.iterrows():
            skipped = f" (after {row['fillers']} skipped)" if row["fillers"] else ""
            print(f"ROW {row['iteration']} @{row['global_index']}: {row['stream']}[{row['word_index']}] = {row['word']}{skipped}")


if __name__ == "__main__":
    main()
