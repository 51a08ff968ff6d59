"""MySQL query fingerprinting.

Follows the normalization rules of pt-query-digest: literals, whitespace,
case, IN-list arity, batched INSERT rows and repeated UNION branches do not
affect the result.
"""

from __future__ import annotations

import hashlib
import re

from querydigest.config.limits import FingerprintLimits, get_fingerprint_limits
from querydigest.errors import QueryTooLargeError
from querydigest.sql.stages import build_pipeline, run_pipeline

MYSQLDUMP_FINGERPRINT = "mysqldump"
PERCONA_TOOLKIT_FINGERPRINT = "percona-toolkit"
ADMINISTRATOR_COMMAND_PREFIX = "administrator command: "

_MYSQLDUMP_RE = re.compile(r"\ASELECT /\*!40001 SQL_NO_CACHE \*/ \* FROM ")
_PERCONA_TOOLKIT_RE = re.compile(r"/\*\w+\.\w+:[0-9]+/[0-9]+\*/")
_CALL_RE = re.compile(r"\A\s*(call\s+\S+)\(", re.IGNORECASE)


def _short_circuit(query: str) -> str | None:
    if _MYSQLDUMP_RE.search(query):
        return MYSQLDUMP_FINGERPRINT
    if _PERCONA_TOOLKIT_RE.search(query):
        return PERCONA_TOOLKIT_FINGERPRINT
    if query.startswith(ADMINISTRATOR_COMMAND_PREFIX):
        return query
    match = _CALL_RE.search(query)
    if match:
        return match.group(1).lower()
    return None


def fingerprint(query: str, *, limits: FingerprintLimits | None = None) -> str:
    """Return the canonical fingerprint of ``query``.

    Tool-generated queries map to fixed labels, administrator commands pass
    through verbatim and stored procedure calls reduce to ``call <name>``.
    Anything else goes through the normalization pipeline.

    Raises:
        StructuralError: union branch/separator accounting is inconsistent.
        QueryTooLargeError: ``limits.max_query_length`` is set and exceeded.
    """
    resolved = limits or get_fingerprint_limits()
    if resolved.max_query_length is not None and len(query) > resolved.max_query_length:
        raise QueryTooLargeError(length=len(query), limit=resolved.max_query_length)

    short = _short_circuit(query)
    if short is not None:
        return short
    return run_pipeline(query, build_pipeline(resolved))


def fingerprint_checksum(fingerprint_text: str) -> str:
    """Return the 16-digit upper-case hex class checksum of a fingerprint."""
    digest = hashlib.md5(fingerprint_text.encode("utf-8")).hexdigest()
    return digest[-16:].upper()
