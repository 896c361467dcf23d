"""
Pick one resource out of an office's resource list from what the user typed.

Strategy (first tier with a hit wins):
1) exact id
2) exact name, case-insensitive
3) name contains the token, case-insensitive

When tier 3 matches several resources the first one in the API's order is
used. That can pick the wrong desk ("desk 1" vs "desk 12"), so the other
candidates are logged at WARNING to make the choice visible.
"""

from __future__ import annotations

import logging
from typing import List, Sequence

from booker.errors import ResourceNotFound
from booker.models import Resource

logger = logging.getLogger(__name__)


def resolve(token: str, candidates: Sequence[Resource]) -> Resource:
    """
    token     : id or (partial) name typed by the user
    candidates: resources already scoped to the relevant office

    returns: the matching Resource.
    raises : ResourceNotFound (carrying `candidates`) when no tier matches.
    """
    needle = token.strip()
    lowered = needle.lower()

    for r in candidates:
        if r.id == needle:
            return r

    for r in candidates:
        if r.name.lower() == lowered:
            return r

    partial: List[Resource] = [r for r in candidates if lowered and lowered in r.name.lower()]
    if partial:
        chosen = partial[0]
        if len(partial) > 1:
            logger.warning(
                'Resource "%s" is ambiguous; using "%s" (also matched: %s)',
                token,
                chosen.name,
                ", ".join(r.name for r in partial[1:]),
            )
        return chosen

    raise ResourceNotFound(token, candidates)
