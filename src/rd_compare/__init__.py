"""rd-compare - multi-stream redump comparison."""
from .align import AlignmentEngine, ScannedWord
from .classify import classify_word, find_shared_mask, match_known_pattern, match_params
from .context import Parameter, StreamContext
from .session import CompareSession, Row

__all__ = [
    "AlignmentEngine",
    "ScannedWord",
    "classify_word",
    "find_shared_mask",
    "match_known_pattern",
    "match_params",
    "Parameter",
    "StreamContext",
    "CompareSession",
    "Row",
]
