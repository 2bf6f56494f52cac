"""Port for obtaining a bearer credential for the metadata API."""

from abc import abstractmethod
from typing import Protocol

from dcatbridge.domain.catalog.model.value import Credential
from dcatbridge.domain.shared.port import Port


class CredentialProvider(Port, Protocol):
    @abstractmethod
    async def get_valid_credential(self) -> Credential:
        """Return a credential that will not expire within the refresh margin.

        Raises:
            AuthError: If a new credential is needed and the grant fails.
        """
        ...
