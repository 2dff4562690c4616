"""Pagination cursor extraction from GitHub ``Link`` headers.

GitHub paginates the branch listing with a header such as::

    <https://api.github.com/repositories/1296269/branches?per_page=100&page=2>; rel="next",
    <https://api.github.com/repositories/1296269/branches?per_page=100&page=5>; rel="last"

Only the ``next`` and ``last`` relations matter. When either is missing or
unusable the listing is treated as a single page.
"""

from __future__ import annotations

import logging
import re
from typing import Dict, Optional
from urllib.parse import parse_qs, urlparse

from requests.utils import parse_header_links

from .models import PaginationCursor

logger = logging.getLogger(__name__)

# numeric collection id immediately before the /branches path segment
_COLLECTION_PATH = re.compile(r"/(?P<collection_id>[0-9]+)/branches/?$")


def _relations(header: str) -> Dict[str, str]:
    """Map each ``rel`` value to its URL; the first occurrence wins."""
    relations: Dict[str, str] = {}
    for link in parse_header_links(header):
        url = link.get("url", "").strip()
        for rel in link.get("rel", "").split():
            relations.setdefault(rel.lower(), url)
    return relations


def _page_of(url: str) -> Optional[int]:
    values = parse_qs(urlparse(url).query).get("page")
    if not values or not values[0].isdigit():
        return None
    return int(values[0])


def _collection_of(url: str) -> Optional[str]:
    match = _COLLECTION_PATH.search(urlparse(url).path)
    return match.group("collection_id") if match else None


def parse_link_header(header: Optional[str]) -> Optional[PaginationCursor]:
    """Extract the branch pagination cursor from a ``Link`` header.

    Relations may appear in any order and extra relations (``first``,
    ``prev``) are ignored.

    Args:
        header: Raw ``Link`` header value, possibly empty or None

    Returns:
        The cursor, or None when no usable ``next`` + ``last`` pair exists,
        meaning there are no further pages.
    """
    if not header or not header.strip():
        return None

    relations = _relations(header)
    next_url = relations.get("next")
    last_url = relations.get("last")
    if not next_url or not last_url:
        logger.debug(f"Link header has no next/last pair, assuming one page: {header!r}")
        return None

    collection_id = _collection_of(next_url)
    next_page = _page_of(next_url)
    last_page = _page_of(last_url)
    if collection_id is None or next_page is None or last_page is None:
        logger.debug(f"Unrecognised Link header, assuming one page: {header!r}")
        return None

    return PaginationCursor(
        collection_id=collection_id,
        next_page=next_page,
        last_page=last_page,
    )
