"""Error taxonomy for query fingerprinting."""

from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    """Bounded error codes surfaced to fingerprint callers."""

    STRUCTURAL_ERROR = "STRUCTURAL_ERROR"
    QUERY_TOO_LARGE = "QUERY_TOO_LARGE"


class FingerprintError(RuntimeError):
    """Base class for errors raised while fingerprinting a single query."""

    code: ErrorCode


class StructuralError(FingerprintError):
    """Raised when union branch and separator accounting disagree.

    Signals a defect in the normalizer rather than bad input, so callers
    should flag the record and move on instead of retrying.
    """

    code = ErrorCode.STRUCTURAL_ERROR

    def __init__(self, *, branches: int, separators: int) -> None:
        """Capture the mismatched counts for callers."""
        self.branches = branches
        self.separators = separators
        super().__init__(f"found {branches} union branches but {separators} separators")


class QueryTooLargeError(FingerprintError):
    """Raised when a query exceeds the configured maximum length."""

    code = ErrorCode.QUERY_TOO_LARGE

    def __init__(self, *, length: int, limit: int) -> None:
        """Capture the measured length and the configured limit."""
        self.length = length
        self.limit = limit
        super().__init__(f"query length {length} exceeds limit {limit}")
