"""Write synthetic redump captures for demos and tests.

    python tools/make_dumps.py OUT_DIR [--scenario NAME] [--streams N]

Scenarios:
    basic     text, gpuaddr, context, param and cmdstream rows, identical streams
    inserted  stream 1 carries one optional cmdstream word the others lack
    desync    stream 1 has a different record type on the second row
"""
import sys
from pathlib import Path

from rd_core.protocol import ParamKind, RecordKind
from rd_core.records import pack_words, write_record

GPUADDR = 0x7C000275
SURFACE_WIDTH = 1920


def write_basic(f, stream: int) -> None:
    write_record(f, RecordKind.TEST, f"test-{stream}: fill 1920x1080\0".encode())
    write_record(f, RecordKind.GPUADDR, pack_words(GPUADDR, 0x1000))
    write_record(f, RecordKind.CONTEXT, pack_words(0, 0, 0, 0))
    write_record(f, RecordKind.PARAM, pack_words(ParamKind.SURFACE_WIDTH, SURFACE_WIDTH, 16))
    write_record(f, RecordKind.CMD, b"glClear\0")
    write_record(
        f,
        RecordKind.CMDSTREAM,
        pack_words(0x7C000100 | stream, GPUADDR, SURFACE_WIDTH, 0x12340000 | stream),
    )
    write_record(f, RecordKind.FLUSH, b"")


def write_inserted(f, stream: int) -> None:
    words = [0x11111111, 0x22222222, 0x33333333]
    if stream == 1:
        words.insert(1, 0x99999999)
    write_record(f, RecordKind.TEST, b"inserted\0")
    write_record(f, RecordKind.CMDSTREAM, pack_words(*words))


def write_desync(f, stream: int) -> None:
    write_record(f, RecordKind.TEST, b"desync\0")
    if stream == 1:
        write_record(f, RecordKind.FLUSH, b"")
    else:
        write_record(f, RecordKind.CMDSTREAM, pack_words(0x11111111))


SCENARIOS = {
    "basic": write_basic,
    "inserted": write_inserted,
    "desync": write_desync,
}


def generate(out_dir, scenario: str = "basic", streams: int = 2) -> list[Path]:
    writer = SCENARIOS[scenario]
    out = Path(out_dir)
    out.mkdir(parents=True, exist_ok=True)

    paths = []
    for k in range(streams):
        p = out / f"{scenario}-{k}.rd"
        with open(p, "wb") as f:
            writer(f, k)
        paths.append(p)
        print(f"GENERATED: {p}")
    return paths


if __name__ == "__main__":
    args = [a for a in sys.argv[1:] if a]

    def pop_option(arg_list: list[str], name: str, default: str) -> tuple[str, list[str]]:
        """Remove `name VALUE` from an argv-style list."""
        if name not in arg_list:
            return default, arg_list
        i = arg_list.index(name)
        if i + 1 >= len(arg_list):
            raise SystemExit(f"{name} requires a value")
        return arg_list[i + 1], arg_list[:i] + arg_list[i + 2:]

    scenario, args = pop_option(args, "--scenario", "basic")
    streams, args = pop_option(args, "--streams", "2")

    if scenario not in SCENARIOS:
        raise SystemExit(f"unknown scenario {scenario!r}, expected one of {', '.join(SCENARIOS)}")

    out = args[0] if args else "dumps"
    generate(out, scenario, int(streams))
