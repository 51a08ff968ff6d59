"""Lexical SQL normalization."""

from querydigest.sql.fingerprint import fingerprint, fingerprint_checksum
from querydigest.sql.union import collapse_union, collapse_union_branches

__all__ = [
    "collapse_union",
    "collapse_union_branches",
    "fingerprint",
    "fingerprint_checksum",
]
