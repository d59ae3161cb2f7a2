import struct
import sys
from pathlib import Path

from rd_core.protocol import REC_HEADER_FMT, REC_HEADER_LEN, RecordKind


def main():
    if len(sys.argv) != 4:
        print("Usage: retype_record.py <dump> <record_index> <type>")
        raise SystemExit(2)

    p = Path(sys.argv[1])
    target = int(sys.argv[2])
    new_type = RecordKind[sys.argv[3].upper()]

    b = bytearray(p.read_bytes())
    off = 0
    for _ in range(target):
        if off + REC_HEADER_LEN > len(b):
            print(f"{p} has fewer than {target + 1} records.")
            raise SystemExit(2)
        _, length = struct.unpack_from(REC_HEADER_FMT, b, off)
        off += REC_HEADER_LEN + length

    if off + REC_HEADER_LEN > len(b):
        print(f"{p} has fewer than {target + 1} records.")
        raise SystemExit(2)

    # Only the type tag changes; the length still frames the payload, so the
    # file stays readable and the streams desync at this record.
    old_type, length = struct.unpack_from(REC_HEADER_FMT, b, off)
    struct.pack_into(REC_HEADER_FMT, b, off, int(new_type), length)
    p.write_bytes(bytes(b))
    print(f"Retyped record {target} at offset {off} in {p}: {old_type} -> {int(new_type)}")

if __name__ == "__main__":
    main()
