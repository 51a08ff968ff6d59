"""Hardening limits for fingerprinting untrusted query text."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from querydigest.config.env import get_env_int

logger = logging.getLogger(__name__)

DEFAULT_MAX_UNION_BRANCHES = 10_000
DEFAULT_MAX_ORDER_BY_PASSES = 1_000


@dataclass(frozen=True)
class FingerprintLimits:
    """Configurable bounds on input size and iteration counts."""

    max_query_length: int | None = None
    max_union_branches: int = DEFAULT_MAX_UNION_BRANCHES
    max_order_by_passes: int = DEFAULT_MAX_ORDER_BY_PASSES


def _safe_env_int(name: str, default: int, minimum: int = 0) -> int:
    try:
        value = get_env_int(name, default)
    except ValueError:
        logger.warning("Invalid %s value; using default %s.", name, default)
        value = default
    if value is None:
        value = default
    return max(minimum, int(value))


def _safe_env_optional_int(name: str) -> Optional[int]:
    try:
        value = get_env_int(name, None)
    except ValueError:
        logger.warning("Invalid %s value; treating as unbounded.", name)
        return None
    if value is None:
        return None
    parsed = int(value)
    return parsed if parsed > 0 else None


def get_fingerprint_limits() -> FingerprintLimits:
    """Resolve fingerprint limits from environment variables."""
    return FingerprintLimits(
        max_query_length=_safe_env_optional_int("QUERYDIGEST_MAX_QUERY_LENGTH"),
        max_union_branches=_safe_env_int(
            "QUERYDIGEST_MAX_UNION_BRANCHES", DEFAULT_MAX_UNION_BRANCHES, minimum=1
        ),
        max_order_by_passes=_safe_env_int(
            "QUERYDIGEST_MAX_ORDER_BY_PASSES", DEFAULT_MAX_ORDER_BY_PASSES, minimum=1
        ),
    )
