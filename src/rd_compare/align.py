"""Fuzzy lockstep alignment of command-stream records.

Each participating stream gets an offset: how many words it is behind the
common (global) index because its peers carry optional words it lacks.
Stream k's word at global index g is `words[g - offsets[k]]`.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from rd_core.protocol import PATTERNS

from .classify import WordClass, classify_word, find_shared_mask
from .context import StreamContext

# All streams reference the same announced gpu address. One above the best
# shared-mask rank.
MAX_RANK = len(PATTERNS)


@dataclass(frozen=True)
class ScannedWord:
    index: int
    global_index: int
    fillers: int
    word: int
    gpuaddr: int | None = None
    wordclass: WordClass | None = None

    @property
    def kind(self) -> str:
        if self.gpuaddr is not None:
            return "gpuaddr"
        if self.wordclass is not None:
            return "pattern"
        return "raw"


class AlignmentEngine:
    """Greedy bounded-lookahead aligner over one group of command-stream records."""

    def __init__(self, contexts: Sequence[StreamContext]):
        self.contexts = list(contexts)
        self._scores: dict[tuple[int, ...], list[int]] = {}

    def word_at(self, k: int, g: int, offsets: Sequence[int]) -> int | None:
        return self.contexts[k].word_at(g - offsets[k])

    def rank_at(self, g: int, offsets: Sequence[int]) -> int:
        """Agreement rank of the single position g (no lookahead)."""
        ref = self.contexts[0]
        word = self.word_at(0, g, offsets)
        if word is None:
            return 0

        j = ref.find_gpuaddr(word)
        if j is not None:
            # highest rank, only if every stream references the same address
            for k, ctx in enumerate(self.contexts):
                if ctx.find_gpuaddr(self.word_at(k, g, offsets)) != j:
                    return 0
            return MAX_RANK

        m = find_shared_mask(word, (self.word_at(k, g, offsets) for k in range(len(self.contexts))))
        if m is None:
            return 0
        return len(PATTERNS) - 1 - m

    def score(self, g: int, offsets: Sequence[int]) -> int:
        """Lookahead-weighted rank from g to the end of the shortest stream.

        score(g) = rank(g) + score(g + 1) // 2, evaluated back to front.
        """
        suffix = self._suffix_scores(offsets)
        if g < 0 or g >= len(suffix):
            return 0
        return suffix[g]

    def _suffix_scores(self, offsets: Sequence[int]) -> list[int]:
        # Ranks only depend on the offsets vector while this engine's records
        # are loaded, so every score for one vector comes from one pass.
        key = tuple(offsets)
        suffix = self._scores.get(key)
        if suffix is None:
            end = min((ctx.word_count + key[k] for k, ctx in enumerate(self.contexts)), default=0)
            suffix = [0] * max(end, 0)
            acc = 0
            for g in range(len(suffix) - 1, -1, -1):
                acc = self.rank_at(g, key) + acc // 2
                suffix[g] = acc
            self._scores[key] = suffix
        return suffix

    def adjust(self, g: int, offsets: list[int]) -> list[int]:
        """Try skipping one word per short stream; keep a skip only if it strictly helps.

        Streams are tried one at a time in order, each building on the
        skips already kept. `offsets` is updated in place and returned.
        """
        if not self.contexts:
            return offsets
        max_len = max(ctx.word_count for ctx in self.contexts)
        rank = self.score(g, offsets)

        for k, ctx in enumerate(self.contexts):
            if ctx.word_count + offsets[k] >= max_len:
                continue
            offsets[k] += 1
            new_rank = self.score(g, offsets)
            if new_rank > rank:
                rank = new_rank
            else:
                offsets[k] -= 1
        return offsets

    def scan(self, idx: int) -> list[ScannedWord]:
        """Walk stream idx word by word, realigning before each word."""
        ctx = self.contexts[idx]
        offsets = [0] * len(self.contexts)
        offset = 0
        out: list[ScannedWord] = []

        for i, word in enumerate(ctx.words):
            self.adjust(i + offset, offsets)
            fillers = offsets[idx] - offset
            offset = offsets[idx]
            g = i + offset

            j = ctx.find_gpuaddr(word)
            if j is not None:
                out.append(ScannedWord(i, g, fillers, word, gpuaddr=j))
                continue

            peers = [self.word_at(k, g, offsets) for k in range(len(self.contexts))]
            m = find_shared_mask(word, peers)
            if m is not None:
                wc = classify_word(word, m, ctx.params)
                out.append(ScannedWord(i, g, fillers, word, wordclass=wc))
                continue

            out.append(ScannedWord(i, g, fillers, word))
        return out
