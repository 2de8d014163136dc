"""
RecipeBox Backend — Abstract Storage Adapter Interface
========================================================

What:  Abstract base class defining the contract every storage variant honours.
Why:   Routers depend on this interface only. Swapping MongoDB for the SQL or
       in-memory variant (or a fake in tests) never touches a route handler.
How:   Concrete implementations inherit from Storage and implement the six
       record operations against ONE collection.
Who:   Called by the API and HTML routers, one call per request.

Record shape:
    Records are plain dicts. The store's own identifier is translated into a
    public string `id` on the way out and never leaks to callers. Write
    payloads are stripped of `id`/`_id` so a client cannot pick or overwrite
    the identifier.

Pagination:
    The page token is the stringified offset of the next page. A full page
    (exactly `limit` items) produces a token; anything shorter ends the
    listing. An exactly-divisible result set therefore yields one extra,
    empty page. That heuristic is kept on purpose; search's `has_more`
    follows the same rule.
"""

import re
from abc import ABC, abstractmethod
from typing import Any, Dict, List, NamedTuple, Optional

from recipebox.exceptions import ValidationError

Record = Dict[str, Any]

# Keys a client may not set directly; the store owns the identifier
RESERVED_KEYS = frozenset({"id", "_id"})


class Page(NamedTuple):
    """One page of a listing."""

    items: List[Record]
    next_page_token: Optional[str]
    search_term: Optional[str]


class SearchResult(NamedTuple):
    """Search hits plus the "maybe more" flag."""

    items: List[Record]
    has_more: bool


def clean_payload(data: Record) -> Record:
    """Copy of a write payload without identifier keys."""
    return {key: value for key, value in data.items() if key not in RESERVED_KEYS}


def parse_page_token(page_token: Optional[str]) -> int:
    """
    Decode a page token into an offset.

    None or "" means the first page. Anything else must be a non-negative
    integer, otherwise ValidationError.
    """
    if page_token is None or page_token == "":
        return 0
    try:
        offset = int(page_token)
    except (TypeError, ValueError):
        raise ValidationError(message="invalid page token", field="pageToken")
    if offset < 0:
        raise ValidationError(message="invalid page token", field="pageToken")
    return offset


def next_page_token(offset: int, count: int, limit: int) -> Optional[str]:
    """Token for the page after [offset, offset + count), or None."""
    return str(offset + count) if count == limit else None


def check_limit(limit: int) -> None:
    if limit < 1:
        raise ValidationError(message="limit must be at least 1", field="limit")


def normalize_term(term: Optional[str]) -> Optional[str]:
    """Strip a search term; blank terms become None."""
    if term is None:
        return None
    term = term.strip()
    return term or None


def require_term(term: Optional[str]) -> str:
    """Search needs something to look for."""
    normalized = normalize_term(term)
    if normalized is None:
        raise ValidationError(message="invalid search term", field="term")
    return normalized


def term_pattern(term: str) -> "re.Pattern[str]":
    """Case-insensitive literal substring matcher for `term`."""
    return re.compile(re.escape(term), re.IGNORECASE)


class Storage(ABC):
    """
    Abstract interface for record persistence over a single collection.

    Contract:
        - read/update raise NotFoundError for unknown (or malformed) ids
        - driver failures surface as StorageError, never as NotFoundError
        - search raises ValidationError for an empty term, whatever the limit
        - delete of an absent id is not an error
        - returned records carry `id` and never the store-internal identifier
    """

    def __init__(self, collection: str):
        self.collection = collection

    @abstractmethod
    async def read(self, record_id: str) -> Record:
        """Fetch one record by its public id."""
        ...

    @abstractmethod
    async def list(
        self,
        limit: int,
        page_token: Optional[str] = None,
        search_term: Optional[str] = None,
    ) -> Page:
        """
        Return at most `limit` records starting at the offset in `page_token`.

        Args:
            limit: Page size (>= 1).
            page_token: Token from a previous Page, or None for the first page.
            search_term: Optional name filter, matched like search(); echoed back.

        Raises:
            ValidationError: limit < 1 or malformed page token.
            StorageError: The store could not be queried.
        """
        ...

    @abstractmethod
    async def search(self, limit: int, term: str) -> SearchResult:
        """
        Case-insensitive substring match on `name`, ordered by name.

        Raises:
            ValidationError: Empty term (checked before anything else) or limit < 1.
        """
        ...

    @abstractmethod
    async def create(self, data: Record) -> Record:
        """Insert `data` and return it with its assigned id."""
        ...

    @abstractmethod
    async def update(self, record_id: str, data: Record) -> Record:
        """Merge `data` into an existing record and return the result."""
        ...

    @abstractmethod
    async def delete(self, record_id: str) -> None:
        """Remove a record. Absent ids are ignored."""
        ...
