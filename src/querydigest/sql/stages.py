"""Ordered text transformations that turn query text into a fingerprint.

Every stage is a pure ``str -> str`` function. Order matters: later stages
assume earlier ones already ran (NULL masking relies on lower-casing,
IN/VALUES collapsing relies on literal masking).
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from functools import partial
from typing import Callable

from querydigest.config.limits import DEFAULT_MAX_ORDER_BY_PASSES, FingerprintLimits
from querydigest.sql.union import collapse_union

logger = logging.getLogger(__name__)

_INSERT_ROWS_RE = re.compile(
    r"((?:INSERT|REPLACE)(?: IGNORE)?\s+INTO.+?VALUES\s*\(.*?\))\s*,\s*\(", re.IGNORECASE
)
_BLOCK_COMMENT_RE = re.compile(r"/\*.*?\*/", re.DOTALL)
_LINE_COMMENT_RE = re.compile(r"--.*$", re.MULTILINE)
_USE_RE = re.compile(r"\Ause \S+\Z", re.IGNORECASE)

_ESCAPED_SINGLE_QUOTE_RE = re.compile(r"([^\\])(\\')")
_ESCAPED_DOUBLE_QUOTE_RE = re.compile(r'([^\\])(\\")')
_DOUBLE_BACKSLASH_RE = re.compile(r"\\\\")
_BARE_SINGLE_QUOTE_ESCAPE_RE = re.compile(r"\\'")
_BARE_DOUBLE_QUOTE_ESCAPE_RE = re.compile(r'\\"')
_DOUBLE_QUOTED_RE = re.compile(r'([^\\])(".*?[^\\]?")')
_SINGLE_QUOTED_RE = re.compile(r"([^\\])('.*?[^\\]?')")

_BOOLEAN_RE = re.compile(r"\bfalse\b|\btrue\b", re.IGNORECASE)
_MD5_RE = re.compile(r"([._-])[a-f0-9]{32}", re.IGNORECASE)
_NUMBER_RE = re.compile(r"\b[0-9+-][0-9a-f.xb+-]*", re.IGNORECASE)
_GLUED_PREFIX_RE = re.compile(r"[xb+-]\?", re.IGNORECASE)
_GLUED_PREFIX_WITH_DOT_RE = re.compile(r"[xb.+-]\?", re.IGNORECASE)

_WHITESPACE_RE = re.compile(r"\s+")
_NULL_RE = re.compile(r"\bnull\b")
_VALUE_LIST_RE = re.compile(r"\b(in|values?)(?:[\s,]*\([\s?,]*\))+")
_LIMIT_RE = re.compile(r"\blimit \?(?:, ?\?| offset \?)?")
_ORDER_BY_RE = re.compile(r"\border by ")
_TRAILING_ASC_RE = re.compile(r"\s+asc\b")


def collapse_insert_rows(query: str) -> str:
    """Keep only the first value tuple of a multi-row INSERT or REPLACE."""
    match = _INSERT_ROWS_RE.search(query)
    if match:
        return match.group(1)
    return query


def strip_comments(query: str) -> str:
    """Remove block and line comments."""
    query = _BLOCK_COMMENT_RE.sub("", query)
    return _LINE_COMMENT_RE.sub("", query)


def mask_use_statement(query: str) -> str:
    """Replace the database name of a bare USE statement."""
    return _USE_RE.sub("use ?", query)


def mask_string_literals(query: str) -> str:
    """Collapse quoted literals into ``?``.

    This is a line-oriented heuristic, not a tokenizer. Escape sequences are
    dropped first so they cannot end a literal early; a literal that starts
    at offset 0 has no preceding character and is left as is.
    """
    query = _ESCAPED_SINGLE_QUOTE_RE.sub(r"\1", query)
    query = _ESCAPED_DOUBLE_QUOTE_RE.sub(r"\1", query)
    query = _DOUBLE_BACKSLASH_RE.sub("", query)
    query = _BARE_SINGLE_QUOTE_ESCAPE_RE.sub("", query)
    query = _BARE_DOUBLE_QUOTE_ESCAPE_RE.sub("", query)
    query = _DOUBLE_QUOTED_RE.sub(r"\1?", query)
    return _SINGLE_QUOTED_RE.sub(r"\1?", query)


def mask_literals(query: str) -> str:
    """Mask booleans, MD5-like suffixes and numeric tokens."""
    query = _BOOLEAN_RE.sub("?", query)
    query = _MD5_RE.sub(r"\1?", query)
    return _NUMBER_RE.sub("?", query)


def merge_glued_placeholders(query: str) -> str:
    """Fold a prefix character left attached to a placeholder into it."""
    if _GLUED_PREFIX_RE.search(query):
        return _GLUED_PREFIX_RE.sub("?", query)
    return _GLUED_PREFIX_WITH_DOT_RE.sub("?", query)


def normalize_whitespace(query: str) -> str:
    """Trim, collapse whitespace runs and lower-case."""
    query = query.strip().rstrip("\n\r\f ")
    return _WHITESPACE_RE.sub(" ", query).lower()


def mask_null(query: str) -> str:
    return _NULL_RE.sub("?", query)


def collapse_value_lists(query: str) -> str:
    """Rewrite any-length IN/VALUES lists as ``<keyword>(?+)``."""
    return _VALUE_LIST_RE.sub(r"\1(?+)", query)


def normalize_limit(query: str) -> str:
    return _LIMIT_RE.sub("limit ?", query)


def strip_order_by_asc(query: str, *, max_passes: int = DEFAULT_MAX_ORDER_BY_PASSES) -> str:
    """Drop explicit ASC qualifiers after ``order by``.

    Each pass strips the last remaining ASC, exposing the one before it, and
    repeats until none is left or ``max_passes`` is reached.
    """
    match = _ORDER_BY_RE.search(query)
    if not match:
        return query

    head, tail = query[: match.end()], query[match.end() :]
    for _ in range(max_passes):
        found = list(_TRAILING_ASC_RE.finditer(tail))
        if not found:
            break
        last = found[-1]
        tail = tail[: last.start()] + tail[last.end() :]
    if _TRAILING_ASC_RE.search(tail):
        logger.warning("ORDER BY ASC stripping stopped after %d passes.", max_passes)
    return head + tail


@dataclass(frozen=True)
class PipelineStage:
    """A named pipeline step."""

    name: str
    apply: Callable[[str], str]


def build_pipeline(limits: FingerprintLimits) -> tuple[PipelineStage, ...]:
    """Return the fixed, ordered stage list for the given limits."""
    return (
        PipelineStage("collapse_insert_rows", collapse_insert_rows),
        PipelineStage("strip_comments", strip_comments),
        PipelineStage("mask_use_statement", mask_use_statement),
        PipelineStage("mask_string_literals", mask_string_literals),
        PipelineStage("mask_literals", mask_literals),
        PipelineStage("merge_glued_placeholders", merge_glued_placeholders),
        PipelineStage("normalize_whitespace", normalize_whitespace),
        PipelineStage("mask_null", mask_null),
        PipelineStage("collapse_value_lists", collapse_value_lists),
        PipelineStage(
            "collapse_union", partial(collapse_union, max_branches=limits.max_union_branches)
        ),
        PipelineStage("normalize_limit", normalize_limit),
        PipelineStage(
            "strip_order_by_asc",
            partial(strip_order_by_asc, max_passes=limits.max_order_by_passes),
        ),
    )


def run_pipeline(query: str, stages: tuple[PipelineStage, ...]) -> str:
    for stage in stages:
        query = stage.apply(query)
    return query
