"""Port for reading share descriptors."""

from abc import abstractmethod
from typing import Protocol

from dcatbridge.domain.catalog.model.resource import Share
from dcatbridge.domain.catalog.model.value import Credential
from dcatbridge.domain.shared.port import Port


class ShareReader(Port, Protocol):
    @abstractmethod
    async def get_share(self, share_id: str, credential: Credential) -> Share | None:
        """Return the share, or None if it does not exist."""
        ...
