import subprocess
import sys
from pathlib import Path

import pyarrow.parquet as pq

REPO = Path(__file__).resolve().parents[1]


def run(args, cwd=REPO):
    return subprocess.run([sys.executable, *args], cwd=cwd, check=False, capture_output=True, text=True)


def make_dumps(out_dir, scenario):
    r = run(["tools/make_dumps.py", str(out_dir), "--scenario", scenario])
    assert r.returncode == 0, r.stderr + r.stdout
    return sorted(out_dir.glob(f"{scenario}-*.rd"))


def test_basic_report_and_table(tmp_path):
    dumps = make_dumps(tmp_path / "dumps", "basic")
    assert len(dumps) == 2
    table = tmp_path / "words.parquet"

    r = run(["-m", "rd_compare.cli", *map(str, dumps), "--table", str(table)])
    assert r.returncode == 0, r.stderr + r.stdout

    html = r.stdout
    assert html.startswith('<html><body><table border="1">')
    assert html.rstrip().endswith("</table></body></html>")
    assert html.count("<tr>") == 7
    assert "<tr><th>cmdstream</th>" in html
    assert "(gpuaddr)" in html
    assert "(surface width?)" in html
    assert "........" not in html

    df = pq.read_table(table).to_pandas()
    assert len(df) == 8
    assert list(df["stream_index"]) == [0, 0, 0, 0, 1, 1, 1, 1]
    assert list(df["classification"][:4]) == ["pattern", "gpuaddr", "pattern", "pattern"]
    assert list(df["known_pattern"][:1]) == [0x7C000100]
    assert list(df["labels"][:4]) == ["", "", "surface width", ""]
    assert (df["fillers"] == 0).all()


def test_inserted_word_gets_one_filler(tmp_path):
    dumps = make_dumps(tmp_path / "dumps", "inserted")
    r = run(["-m", "rd_compare.cli", *map(str, dumps)])
    assert r.returncode == 0, r.stderr + r.stdout
    assert r.stdout.count("........") == 1


def test_desync_fails_closed(tmp_path):
    dumps = make_dumps(tmp_path / "dumps", "desync")
    r = run(["-m", "rd_compare.cli", *map(str, dumps)])
    assert r.returncode == 1
    assert r.stderr.startswith("FATAL: ")
    assert "unexpected type" in r.stderr


def test_missing_input_produces_no_output(tmp_path):
    dumps = make_dumps(tmp_path / "dumps", "basic")
    r = run(["-m", "rd_compare.cli", str(dumps[0]), str(tmp_path / "nope.rd")])
    assert r.returncode == 1
    assert r.stdout == ""
    assert "could not open" in r.stderr


def test_missing_input_leaves_no_report_file(tmp_path):
    dumps = make_dumps(tmp_path / "dumps", "basic")
    out = tmp_path / "report.html"
    r = run(["-m", "rd_compare.cli", str(dumps[0]), str(tmp_path / "nope.rd"), "-o", str(out)])
    assert r.returncode == 1
    assert "could not open" in r.stderr
    assert not out.exists()


def test_output_option_writes_file(tmp_path):
    dumps = make_dumps(tmp_path / "dumps", "inserted")
    out = tmp_path / "report.html"
    r = run(["-m", "rd_compare.cli", *map(str, dumps), "-o", str(out)])
    assert r.returncode == 0, r.stderr + r.stdout
    assert r.stdout == ""
    assert "<tr><th>test</th>" in out.read_text(encoding="utf-8")


def test_retyped_record_fails_at_that_row(tmp_path):
    dumps = make_dumps(tmp_path / "dumps", "basic")
    r = run(["scripts/retype_record.py", str(dumps[1]), "4", "test"])
    assert r.returncode == 0, r.stderr + r.stdout

    r = run(["-m", "rd_compare.cli", *map(str, dumps)])
    assert r.returncode == 1
    assert "unexpected type '1'" in r.stderr
    assert "expected '2'" in r.stderr
    # rows before the corrupted record were already emitted
    assert r.stdout.count("<tr>") == 4
