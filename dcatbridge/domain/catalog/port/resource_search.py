"""Port for the paginated resource search endpoint."""

from abc import abstractmethod
from typing import Protocol

from dcatbridge.domain.catalog.model.resource import Page
from dcatbridge.domain.catalog.model.value import Credential
from dcatbridge.domain.shared.port import Port


class ResourceSearch(Port, Protocol):
    @abstractmethod
    async def search_page(
        self,
        share_id: str,
        *,
        offset: int,
        limit: int,
        credential: Credential,
    ) -> Page:
        """Fetch one page of a share's resources, oldest first.

        Raises:
            UpstreamFetchError: On a non-success response or malformed payload.
        """
        ...
