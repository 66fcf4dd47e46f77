"""Keyword matching against CV text.

Matching is plain case-insensitive substring containment; the result keeps
the keyword's stored casing, drops duplicates and preserves first-seen order
so repeated runs produce identical output.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Protocol, Sequence

from cv_scanner.services.keyword_cache import ACTIVE_KEYWORDS_KEY, KeywordCache

logger = logging.getLogger(__name__)


class ActiveKeywordSource(Protocol):
    def get_active_names(self) -> List[str]: ...


def match_keywords(raw_text: Optional[str], keywords: Iterable[str]) -> List[str]:
    """Return the keywords contained in ``raw_text``, de-duplicated."""
    lower_text = (raw_text or "").lower()
    matched: List[str] = []
    seen = set()
    for keyword in keywords:
        if not keyword or not keyword.strip() or keyword in seen:
            continue
        if keyword.lower() in lower_text:
            seen.add(keyword)
            matched.append(keyword)
    return matched


def get_active_keywords(
    cache: KeywordCache, keyword_store: ActiveKeywordSource
) -> List[str]:
    """Active keyword names from the cache, refreshed from the store on a miss."""
    cached = cache.get(ACTIVE_KEYWORDS_KEY)
    if isinstance(cached, list):
        return list(cached)

    names: Sequence[str] = keyword_store.get_active_names()
    active = list(names)
    cache.set(ACTIVE_KEYWORDS_KEY, active)
    logger.info("Refreshed active keyword cache (%d keywords)", len(active))
    return list(active)
