"""Port for reading the content type served at a download URL."""

from abc import abstractmethod
from typing import Protocol

from dcatbridge.domain.shared.port import Port


class FormatProber(Port, Protocol):
    @abstractmethod
    async def content_type(self, url: str) -> str | None:
        """Return the Content-Type header served at ``url``.

        Raises:
            FormatProbeError: If the URL cannot be reached.
        """
        ...
