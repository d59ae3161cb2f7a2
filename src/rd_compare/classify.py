"""Word classification: shared bit-patterns, known signatures, parameter sub-fields."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Sequence

from rd_core.protocol import (
    KNOWN_PATTERNS,
    PATTERN_COLOR,
    PATTERNS,
    PLAIN_COLOR,
    WORD_MASK,
)

from .context import Parameter


@dataclass(frozen=True)
class KnownPattern:
    value: int
    mask: int
    color: int


@dataclass(frozen=True)
class ParamMatch:
    param: Parameter
    mask: int
    shift: int

    @property
    def label(self) -> str:
        return self.param.name


@dataclass(frozen=True)
class ByteCell:
    value: int
    color: int
    bold: bool = False


@dataclass
class WordClass:
    word: int
    mask_index: int
    known: KnownPattern | None = None
    matches: list[ParamMatch] = field(default_factory=list)
    cells: list[ByteCell] = field(default_factory=list)

    @property
    def mask(self) -> int:
        return PATTERNS[self.mask_index]

    @property
    def labels(self) -> list[str]:
        return [m.label for m in self.matches]


def find_shared_mask(word: int, others: Iterable[int | None]) -> int | None:
    """Index of the most specific mask under which `word` agrees with every other word.

    A missing word (stream exhausted at this position) never agrees.
    """
    others = list(others)
    if any(o is None for o in others):
        return None
    for j, pattern in enumerate(PATTERNS):
        if all((word & pattern) == (o & pattern) for o in others):
            return j
    return None


def match_known_pattern(word: int) -> KnownPattern | None:
    for value, mask, color in KNOWN_PATTERNS:
        if (word & mask) == value:
            return KnownPattern(value, mask, color)
    return None


def match_params(word: int, params: Sequence[Parameter]) -> list[ParamMatch]:
    """Candidate parameter sub-fields of `word`.

    Each parameter is tried at byte-aligned shifts 0/8/16/24 while its
    shifted mask still fits the word; the lowest matching shift wins.
    Several parameters may match the same bytes, all are reported.
    """
    matches: list[ParamMatch] = []
    for param in params:
        # zero is too easy a false match
        if not param.value:
            continue
        base = (1 << param.bitlen) - 1
        for shift in range(0, 32, 8):
            mask = base << shift
            if mask & ~WORD_MASK:
                break
            if (word & mask) == (param.value << shift):
                matches.append(ParamMatch(param, mask, shift))
                break
    return matches


def classify_word(word: int, mask_index: int, params: Sequence[Parameter] = ()) -> WordClass:
    """Per-byte coloring for a word that shares PATTERNS[mask_index] with its peers.

    Byte color precedence: parameter match (bold), then known signature,
    then blue inside the shared mask, black outside.
    """
    pattern = PATTERNS[mask_index]
    known = match_known_pattern(word)
    matches = match_params(word, params)

    cells = []
    for k in range(4):
        shift = 24 - 8 * k
        bmask = 0xFF << shift
        color = PATTERN_COLOR if pattern & bmask else PLAIN_COLOR
        if known is not None and known.mask & bmask:
            color = known.color
        bold = False
        for m in matches:
            if m.mask & bmask:
                color = m.param.color
                bold = True
                break
        cells.append(ByteCell((word & bmask) >> shift, color, bold))

    return WordClass(word, mask_index, known, matches, cells)
