"""Page range resolution.

A page range expression is a comma separated list of terms. A term is a
single token or two tokens joined by a hyphen. Tokens are ``first``,
``last``, ``r<N>`` (``page_count - N``) or a 1-based page number::

    >>> resolve_page_range(5, "1-3,first-last,2,3")
    [1, 2, 3, 4, 5]
    >>> resolve_page_range(5, "1-r2")
    [1, 2, 3]
    >>> resolve_page_range(5, "3-10,6,2", tolerant=True)
    [3, 4, 5, 2]
"""

from __future__ import annotations

import logging
import re
from typing import Iterable, List

from .exceptions import (
    EmptyResultError,
    InvalidTokenError,
    InvertedRangeError,
    MalformedTermError,
    OutOfBoundsPageError,
    PageRangeError,
)

LOGGER = logging.getLogger(__name__)

DEFAULT_PAGE_RANGE = "first-last"

PageList = List[int]

_NUMBER_RE = re.compile(r"\+?\d+", re.ASCII)


def _parse_number(text: str) -> int:
    if not _NUMBER_RE.fullmatch(text):
        raise InvalidTokenError(f"{text} is not a valid page number")
    return int(text)


def resolve_token(token: str, page_count: int) -> int:
    """Resolve a single token to a page number without bounds checking."""

    token = token.strip()
    if token == "first":
        return 1
    if token == "last":
        return page_count
    if token.startswith("r"):
        return page_count - _parse_number(token[1:])
    return _parse_number(token)


def resolve_page_range(page_count: int, expression: str, tolerant: bool = False) -> PageList:
    """Resolve ``expression`` into an ordered list of unique page numbers.

    Args:
        page_count: Number of pages in the document.
        expression: Page range expression, e.g. ``"1-3,5,last"``.
        tolerant: Skip out-of-range pages and inverted intervals instead of
            failing. Syntax errors and an empty result fail in both modes.

    Raises:
        PageRangeError: If the expression cannot be resolved.
    """

    if page_count < 1:
        raise PageRangeError(f"the document has {page_count} page(s), nothing to select")

    def in_bounds(page: int) -> bool:
        return 1 <= page <= page_count

    pages: PageList = []
    seen: set[int] = set()

    def add(page: int) -> None:
        if page not in seen:
            seen.add(page)
            pages.append(page)

    for term in expression.split(","):
        tokens = term.split("-")
        if len(tokens) > 2:
            raise MalformedTermError(
                f"a page range must contain 1 or 2 components, got '{term.strip()}'"
            )

        values = [resolve_token(token, page_count) for token in tokens]

        if len(values) == 1:
            page = values[0]
            if not in_bounds(page):
                if tolerant:
                    LOGGER.debug("Skipping page %d outside 1-%d", page, page_count)
                    continue
                raise OutOfBoundsPageError(page, page_count)
            add(page)
            continue

        start, end = values
        if not tolerant:
            for page in (start, end):
                if not in_bounds(page):
                    raise OutOfBoundsPageError(page, page_count)
        if end < start:
            if tolerant:
                LOGGER.debug("Skipping inverted range %d-%d", start, end)
                continue
            raise InvertedRangeError(start, end)

        # Strict mode has already validated both endpoints.
        for page in range(max(start, 1), min(end, page_count) + 1):
            add(page)

    if not pages:
        raise EmptyResultError()

    return pages


def format_page_range(pages: Iterable[int]) -> str:
    """Render resolved pages as a comma separated string."""

    return ",".join(str(page) for page in pages)


__all__ = [
    "DEFAULT_PAGE_RANGE",
    "resolve_token",
    "resolve_page_range",
    "format_page_range",
]
