"""Redump capture protocol constants.

Single source of truth for the on-disk record layout and the fixed
annotation tables. The capture side writes these values; keep them stable.
"""
from enum import IntEnum


class RecordKind(IntEnum):
    NONE = 0       # never valid on disk
    TEST = 1       # ascii text
    CMD = 2        # ascii text
    GPUADDR = 3    # u32 gpuaddr, u32 size
    CONTEXT = 4    # raw dump
    CMDSTREAM = 5  # raw dump
    PARAM = 6      # u32 param_type, u32 value, u32 bitlen
    FLUSH = 7


RECORD_NAMES = {
    RecordKind.TEST: "test",
    RecordKind.CMD: "cmd",
    RecordKind.GPUADDR: "gpuaddr",
    RecordKind.CONTEXT: "context",
    RecordKind.CMDSTREAM: "cmdstream",
    RecordKind.PARAM: "param",
    RecordKind.FLUSH: "flush",
}


class ParamKind(IntEnum):
    SURFACE_WIDTH = 0
    SURFACE_HEIGHT = 1
    COLOR = 2
    BLIT_X = 3
    BLIT_Y = 4
    BLIT_WIDTH = 5
    BLIT_HEIGHT = 6
    RESERVED_7 = 7
    RESERVED_8 = 8
    RESERVED_9 = 9
    RESERVED_10 = 10


# Header: [Type(4) | Length(4)], payload follows with no padding
REC_HEADER_FMT = "<II"
REC_HEADER_LEN = 8

# Payload sanity bound
DEFAULT_MAX_RECORD_SIZE = 64 * 1024 * 1024  # 64 MiB

# Session capacities
MAX_STREAMS = 32
MAX_GPUADDRS = 32
MAX_PARAMS = 32
MAX_PARAM_BITLEN = 32

WORD_MASK = 0xFFFFFFFF

# Ordered by most inclusive pattern, ie. most 'f's
PATTERNS = (
    0xFFFFFFFF,
    0xFFFFFF00,
    0xFFFF00FF,
    0xFF00FFFF,
    0x00FFFFFF,
    0xFFFF0000,
    0x0000FFFF,
    0xFF000000,
    0x00FF0000,
    0x0000FF00,
    0x000000FF,
)

# (value, mask, color) of recognized command signatures
KNOWN_PATTERNS = (
    (0x7C000275, 0xFFFFFFFF, 0xDD0000),
    (0x7C000100, 0xFFFFFF00, 0x990099),
)

GPUADDR_COLORS = (
    0xFF0000,
    0x00FF00,
    0x0000FF,
    0xCC0000,
    0x00CC00,
    0x0000CC,
)

PARAM_COLORS = {
    ParamKind.SURFACE_WIDTH: 0xFF1111,
    ParamKind.SURFACE_HEIGHT: 0x11FF11,
    ParamKind.COLOR: 0x1111FF,
    ParamKind.BLIT_X: 0xAA11AA,
    ParamKind.BLIT_Y: 0xAAAA11,
    ParamKind.BLIT_WIDTH: 0x11AAAA,
    ParamKind.BLIT_HEIGHT: 0x111111,
    ParamKind.RESERVED_7: 0xFFFFFF,
    ParamKind.RESERVED_8: 0xFFFFFF,
    ParamKind.RESERVED_9: 0xFFFFFF,
    ParamKind.RESERVED_10: 0xFFFFFF,
}

PARAM_NAMES = {
    ParamKind.SURFACE_WIDTH: "surface width",
    ParamKind.SURFACE_HEIGHT: "surface height",
    ParamKind.COLOR: "color",
    ParamKind.BLIT_X: "blit x",
    ParamKind.BLIT_Y: "blit y",
    ParamKind.BLIT_WIDTH: "blit width",
    ParamKind.BLIT_HEIGHT: "blit height",
    ParamKind.RESERVED_7: "",
    ParamKind.RESERVED_8: "",
    ParamKind.RESERVED_9: "",
    ParamKind.RESERVED_10: "",
}

# Base byte colors for shared-pattern words
PATTERN_COLOR = 0x0000FF
PLAIN_COLOR = 0x000000
