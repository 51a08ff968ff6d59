"""Run-length collapsing of repeated UNION branches."""

from __future__ import annotations

import logging
import re
from typing import Sequence

from querydigest.config.limits import DEFAULT_MAX_UNION_BRANCHES
from querydigest.errors import StructuralError

logger = logging.getLogger(__name__)

UNION_SEPARATOR_RE = re.compile(r"\s(?:union all|union)\s")

# Compares unequal to every branch string, so it flushes the final run.
_SENTINEL = object()


def collapse_union_branches(branches: Sequence[str], separators: Sequence[str]) -> str:
    """Join branches back together, folding runs of identical branches.

    ``separators[i]`` is the text between ``branches[i]`` and
    ``branches[i + 1]``. A run of two or more equal branches is written once,
    followed by a ``/*repeat<keyword>*/`` marker naming the separator that
    preceded the last branch of the run. Separators between differing
    branches are kept verbatim, including the one after a marker, so
    ``a union a union b`` becomes ``a /*repeatunion*/ union b`` rather than
    dropping the separator owned by ``b``.
    """
    if len(branches) != len(separators) + 1:
        raise StructuralError(branches=len(branches), separators=len(separators))

    parts: list[object] = [*branches, _SENTINEL]
    out: list[str] = [branches[0]]
    start = 0
    for i in range(1, len(parts)):
        part = parts[i]
        if part == parts[start]:
            continue
        if i - start > 1:
            out.append(f" /*repeat{separators[i - 2].strip()}*/")
        if part is _SENTINEL:
            break
        out.append(separators[i - 1])
        out.append(branches[i])
        start = i
    return "".join(out)


def collapse_union(query: str, *, max_branches: int = DEFAULT_MAX_UNION_BRANCHES) -> str:
    """Collapse consecutive identical UNION branches in a normalized query."""
    separators = [match.group(0) for match in UNION_SEPARATOR_RE.finditer(query)]
    if not separators:
        return query

    branches = UNION_SEPARATOR_RE.split(query)
    if len(branches) > max_branches:
        logger.warning(
            "Skipping union collapse: %d branches exceeds limit %d.", len(branches), max_branches
        )
        return query
    return collapse_union_branches(branches, separators)
