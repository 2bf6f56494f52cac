"""Unit tests for PaginatedFetcher."""

from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock

import pytest

from dcatbridge.domain.catalog.model.resource import Page, Resource
from dcatbridge.domain.catalog.model.value import Credential
from dcatbridge.domain.catalog.service.fetcher import PaginatedFetcher
from dcatbridge.domain.shared.error import UpstreamFetchError

CREDENTIAL = Credential(value="token", expires_at=datetime.now(UTC) + timedelta(hours=1))


def _make_search(total: int) -> AsyncMock:
    """Search double serving ``total`` resources named res-0, res-1, ..."""

    async def search_page(share_id, *, offset, limit, credential):
        ids = range(offset, min(offset + limit, total))
        return Page(
            offset=offset,
            total=total,
            results=[Resource.model_validate({"_id": f"res-{i}"}) for i in ids],
        )

    search = AsyncMock()
    search.search_page.side_effect = search_page
    return search


def _make_credentials() -> AsyncMock:
    credentials = AsyncMock()
    credentials.get_valid_credential.return_value = CREDENTIAL
    return credentials


def _offsets(search: AsyncMock) -> list[int]:
    return [c.kwargs["offset"] for c in search.search_page.await_args_list]


async def _collect(sequence) -> list[str]:
    return [resource.id async for resource in sequence]


class TestPaginatedFetcher:
    @pytest.mark.asyncio
    async def test_walks_pages_until_total(self):
        search = _make_search(total=47)
        fetcher = PaginatedFetcher(search=search, credentials=_make_credentials(), page_size=20)

        ids = await _collect(fetcher.open_sequence("share-1"))

        assert ids == [f"res-{i}" for i in range(47)]
        assert _offsets(search) == [0, 20, 40]

    @pytest.mark.asyncio
    async def test_request_parameters(self):
        search = _make_search(total=3)
        fetcher = PaginatedFetcher(search=search, credentials=_make_credentials())

        await _collect(fetcher.open_sequence("share-1"))

        search.search_page.assert_awaited_once_with(
            "share-1", offset=0, limit=20, credential=CREDENTIAL
        )

    @pytest.mark.asyncio
    async def test_empty_share_issues_single_probe(self):
        search = _make_search(total=0)
        fetcher = PaginatedFetcher(search=search, credentials=_make_credentials())

        assert await _collect(fetcher.open_sequence("share-1")) == []
        assert _offsets(search) == [0]

    @pytest.mark.asyncio
    async def test_total_multiple_of_page_size_terminates(self):
        search = _make_search(total=40)
        fetcher = PaginatedFetcher(search=search, credentials=_make_credentials(), page_size=20)

        ids = await _collect(fetcher.open_sequence("share-1"))

        assert len(ids) == 40
        assert _offsets(search) == [0, 20]

    @pytest.mark.asyncio
    async def test_pages_are_fetched_lazily(self):
        search = _make_search(total=47)
        fetcher = PaginatedFetcher(search=search, credentials=_make_credentials(), page_size=20)
        sequence = fetcher.open_sequence("share-1")

        for _ in range(20):
            await anext(sequence)
        assert _offsets(search) == [0]
        assert not sequence.draining

        await anext(sequence)
        assert _offsets(search) == [0, 20]

    @pytest.mark.asyncio
    async def test_draining_after_last_page_fetched(self):
        search = _make_search(total=25)
        fetcher = PaginatedFetcher(search=search, credentials=_make_credentials(), page_size=20)
        sequence = fetcher.open_sequence("share-1")

        ids = []
        async for resource in sequence:
            ids.append(resource.id)
            if len(ids) == 20:
                assert not sequence.draining
        assert sequence.draining
        assert sequence.pages_fetched == 2
        assert sequence.total == 25

    @pytest.mark.asyncio
    async def test_credential_requested_per_page(self):
        credentials = _make_credentials()
        fetcher = PaginatedFetcher(
            search=_make_search(total=47), credentials=credentials, page_size=20
        )

        await _collect(fetcher.open_sequence("share-1"))

        assert credentials.get_valid_credential.await_count == 3

    @pytest.mark.asyncio
    async def test_each_sequence_walks_independently(self):
        search = _make_search(total=25)
        fetcher = PaginatedFetcher(search=search, credentials=_make_credentials(), page_size=20)

        first = await _collect(fetcher.open_sequence("share-1"))
        second = await _collect(fetcher.open_sequence("share-1"))

        assert first == second
        assert _offsets(search) == [0, 20, 0, 20]

    @pytest.mark.asyncio
    async def test_fetch_error_fails_sequence_without_retry(self):
        search = _make_search(total=47)
        pages = search.search_page.side_effect

        async def failing_second_page(share_id, *, offset, limit, credential):
            if offset == 20:
                raise UpstreamFetchError("Metadata API returned 502")
            return await pages(share_id, offset=offset, limit=limit, credential=credential)

        search.search_page.side_effect = failing_second_page
        fetcher = PaginatedFetcher(search=search, credentials=_make_credentials(), page_size=20)
        sequence = fetcher.open_sequence("share-1")

        received = []
        with pytest.raises(UpstreamFetchError):
            async for resource in sequence:
                received.append(resource.id)

        assert len(received) == 20
        assert _offsets(search) == [0, 20]
