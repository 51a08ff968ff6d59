"""Batch classification of query text into fingerprint classes."""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field

from querydigest.config.limits import FingerprintLimits, get_fingerprint_limits
from querydigest.errors import ErrorCode, FingerprintError
from querydigest.observability import get_tracer
from querydigest.sql.fingerprint import fingerprint, fingerprint_checksum

logger = logging.getLogger(__name__)
tracer = get_tracer(__name__)


class QueryClass(BaseModel):
    """All queries sharing one fingerprint."""

    model_config = ConfigDict(extra="forbid")

    fingerprint: str = Field(..., description="Normalized query shape")
    checksum: str = Field(..., description="16-digit hex checksum of the fingerprint")
    count: int = Field(..., ge=1, description="Number of queries in the class")
    sample: str = Field(..., description="First raw query seen for this class")
    first_seen_index: int = Field(..., ge=0, description="Input position of the sample")


class SkippedQuery(BaseModel):
    """A query that could not be fingerprinted."""

    model_config = ConfigDict(extra="forbid")

    index: int = Field(..., ge=0)
    error_code: ErrorCode
    message: str


class DigestReport(BaseModel):
    """Fingerprint classes for a batch of queries."""

    model_config = ConfigDict(extra="forbid")

    total_queries: int = 0
    classes: list[QueryClass] = Field(default_factory=list)
    skipped: list[SkippedQuery] = Field(default_factory=list)

    @property
    def distinct_fingerprints(self) -> int:
        return len(self.classes)

    def top(self, limit: int) -> DigestReport:
        """Return a copy keeping only the ``limit`` largest classes."""
        return self.model_copy(update={"classes": self.classes[: max(0, limit)]})


def split_statements(text: str, *, delimiter: Optional[str] = None) -> list[str]:
    """Split raw log text into individual queries.

    Without a delimiter every non-blank line is one query.
    """
    if delimiter:
        chunks = text.split(delimiter)
    else:
        chunks = text.splitlines()
    return [chunk.strip() for chunk in chunks if chunk.strip()]


def digest_queries(
    queries: Iterable[str], *, limits: FingerprintLimits | None = None
) -> DigestReport:
    """Group queries by fingerprint.

    A query that fails to fingerprint is recorded in ``skipped`` and the
    rest of the batch is still processed.
    """
    resolved = limits or get_fingerprint_limits()
    classes: dict[str, QueryClass] = {}
    skipped: list[SkippedQuery] = []
    total = 0

    with tracer.start_as_current_span("querydigest.digest") as span:
        for index, query in enumerate(queries):
            if not query or not query.strip():
                continue
            total += 1
            try:
                fp = fingerprint(query, limits=resolved)
            except FingerprintError as exc:
                logger.error("Skipping query %d: %s", index, exc)
                skipped.append(SkippedQuery(index=index, error_code=exc.code, message=str(exc)))
                continue

            existing = classes.get(fp)
            if existing is None:
                classes[fp] = QueryClass(
                    fingerprint=fp,
                    checksum=fingerprint_checksum(fp),
                    count=1,
                    sample=query,
                    first_seen_index=index,
                )
            else:
                existing.count += 1

        ordered = sorted(classes.values(), key=lambda c: (-c.count, c.first_seen_index))
        span.set_attribute("digest.queries_total", total)
        span.set_attribute("digest.classes_total", len(ordered))
        span.set_attribute("digest.skipped_total", len(skipped))

    logger.info(
        "Digested %d queries into %d fingerprints (%d skipped).",
        total,
        len(ordered),
        len(skipped),
    )
    return DigestReport(total_queries=total, classes=ordered, skipped=skipped)
