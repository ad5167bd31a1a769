"""
Offset pagination for Duo Admin API listings

The service offers no continuation token, only a positional offset, so a
listing is assembled by issuing pages strictly one after another. A short
page (fewer items than the page size, including zero) ends the listing; a
failed page invalidates the whole listing.
"""

import logging
from typing import Any, Callable, Dict, Iterator, List, Optional

from .exceptions import ApiError, InvalidRequestError
from .response import ApiResult

logger = logging.getLogger(__name__)

# Issues one page request for the given offset
PageSource = Callable[[int], ApiResult]


def validate_page_size(page_size) -> int:
    if isinstance(page_size, bool) or not isinstance(page_size, int) or page_size <= 0:
        raise InvalidRequestError(
            f"Page size must be a positive integer, got {page_size!r}",
            {"page_size": page_size}
        )
    return page_size


class PaginatedFetcher:
    """
    Drives a single-page list operation until the listing is exhausted
    
    The fetcher is page-size agnostic; each call site passes the page size
    its endpoint uses. Iterating or calling ``fetch_all`` always starts over
    from offset 0.
    """
    
    def __init__(self, issue_one: PageSource, page_size: int,
                 request: Optional[Dict[str, Any]] = None):
        """
        Args:
            issue_one: Callable issuing the page request for an offset
            page_size: Number of items requested per page
            request: Request description used in error diagnostics
        """
        self.issue_one = issue_one
        self.page_size = validate_page_size(page_size)
        self.request = request or {}
    
    def _page_items(self, page: ApiResult, offset: int) -> List[Any]:
        items = page.payload
        if not isinstance(items, list):
            raise ApiError(
                ApiError.MALFORMED_RESPONSE,
                detail=f"page at offset {offset} is not a list",
                request=self.request,
            )
        return items
    
    def iter_pages(self) -> Iterator[List[Any]]:
        """
        Yield pages lazily, starting from offset 0.
        
        Raises:
            ApiError: When a page fails; pages already yielded are part of an
                incomplete listing and must be discarded
        """
        offset = 0
        while True:
            logger.debug(f"Fetching page at offset {offset} (page size {self.page_size})")
            page = self.issue_one(offset)
            if not page.ok:
                logger.warning(f"Listing aborted at offset {offset}: {page.error}")
                raise page.error
            
            items = self._page_items(page, offset)
            yield items
            
            if len(items) < self.page_size:
                return
            offset += self.page_size
    
    def __iter__(self) -> Iterator[Any]:
        for items in self.iter_pages():
            yield from items
    
    def fetch_all(self) -> ApiResult:
        """
        Fetch the complete listing.
        
        Returns:
            ApiResult: All items, or the error of the first failed page (items
                from earlier pages are dropped)
        """
        items: List[Any] = []
        try:
            for page in self.iter_pages():
                items.extend(page)
        except ApiError as e:
            if items:
                logger.warning(f"Discarding {len(items)} items from incomplete listing")
            return ApiResult.failure(e)
        
        logger.debug(f"Listing complete with {len(items)} items")
        return ApiResult.success(items)


def fetch_all(issue_one: PageSource, page_size: int,
              request: Optional[Dict[str, Any]] = None) -> ApiResult:
    """
    Fetch every item of an offset-paginated listing.
    
    Args:
        issue_one: Callable issuing the page request for an offset
        page_size: Number of items requested per page
        request: Request description used in error diagnostics
        
    Returns:
        ApiResult: Complete list of items, or the classified failure
    """
    return PaginatedFetcher(issue_one, page_size, request).fetch_all()
