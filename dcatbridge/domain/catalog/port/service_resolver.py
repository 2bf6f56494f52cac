"""Port for resolving web-service layers into queryable URLs."""

from abc import abstractmethod
from typing import Protocol

from dcatbridge.domain.catalog.model.resource import ServiceLayer
from dcatbridge.domain.catalog.model.value import ServiceQuery
from dcatbridge.domain.shared.port import Port


class ServiceResolver(Port, Protocol):
    @abstractmethod
    async def resolve(self, layers: list[ServiceLayer]) -> list[ServiceQuery]:
        """Resolve all layers of a resource in one call.

        Raises:
            ServiceLookupError: If the resolution service fails.
        """
        ...
