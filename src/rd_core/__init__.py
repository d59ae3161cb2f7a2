"""Redump core - capture protocol and record codec."""
from .protocol import ParamKind, RecordKind
from .records import Record, pack_words, read_record, write_record

__all__ = ["ParamKind", "RecordKind", "Record", "pack_words", "read_record", "write_record"]
