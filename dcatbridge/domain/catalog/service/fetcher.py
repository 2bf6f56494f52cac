"""Pull-driven pagination over the resource search endpoint."""

import logging
from collections import deque

from dcatbridge.domain.catalog.model.resource import Resource
from dcatbridge.domain.catalog.port.credential import CredentialProvider
from dcatbridge.domain.catalog.port.resource_search import ResourceSearch
from dcatbridge.domain.shared.service import Service

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 20


class ResourceSequence:
    """Async iterator over every resource of a share, in creation order.

    A page is requested only when the previous one has been fully consumed,
    so at most one page is buffered and one request is in flight. The
    sequence is single-use.
    """

    def __init__(
        self,
        search: ResourceSearch,
        credentials: CredentialProvider,
        share_id: str,
        page_size: int,
    ) -> None:
        self._search = search
        self._credentials = credentials
        self._share_id = share_id
        self._page_size = page_size
        self._buffer: deque[Resource] = deque()
        self._last_page = False
        self.offset = 0
        self.total: int | None = None
        self.pages_fetched = 0

    @property
    def draining(self) -> bool:
        """True once the final page has been fetched."""
        return self._last_page

    def __aiter__(self) -> "ResourceSequence":
        return self

    async def __anext__(self) -> Resource:
        while not self._buffer:
            if self._last_page:
                raise StopAsyncIteration
            await self._fetch_page()
        return self._buffer.popleft()

    async def _fetch_page(self) -> None:
        credential = await self._credentials.get_valid_credential()
        page = await self._search.search_page(
            self._share_id,
            offset=self.offset,
            limit=self._page_size,
            credential=credential,
        )
        self.pages_fetched += 1
        self.total = page.total
        self._buffer.extend(page.results)

        # offset >= total would miss the end when total is a multiple of the page size
        if page.offset + self._page_size >= page.total:
            self._last_page = True
        else:
            self.offset += self._page_size

        logger.debug(
            "Fetched page %d for share %s: offset=%d, total=%d, results=%d",
            self.pages_fetched,
            self._share_id,
            page.offset,
            page.total,
            len(page.results),
        )


class PaginatedFetcher(Service):
    search: ResourceSearch
    credentials: CredentialProvider
    page_size: int = DEFAULT_PAGE_SIZE

    def open_sequence(self, share_id: str) -> ResourceSequence:
        """Open an independent offset walk over a share's resources."""
        return ResourceSequence(
            search=self.search,
            credentials=self.credentials,
            share_id=share_id,
            page_size=self.page_size,
        )
