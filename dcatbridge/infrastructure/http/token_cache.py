"""OAuth2 client-credentials adapter for the CredentialProvider port."""

import asyncio
import logging
from collections.abc import Callable
from datetime import UTC, datetime, timedelta

import httpx

from dcatbridge.config import UpstreamConfig
from dcatbridge.domain.catalog.model.value import Credential
from dcatbridge.domain.catalog.port.credential import CredentialProvider
from dcatbridge.domain.shared.error import AuthError

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class OAuthTokenCache(CredentialProvider):
    """Caches one bearer credential per process and refreshes it lazily.

    Nothing is refreshed in the background: a read finding the credential
    within the refresh margin of its expiry performs the grant exchange.
    Concurrent reads during expiry wait on a lock so only one exchange is
    in flight.
    """

    def __init__(
        self,
        config: UpstreamConfig,
        http_client: httpx.AsyncClient,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._config = config
        self._http = http_client
        self._clock = clock
        self._margin = timedelta(seconds=config.refresh_margin_seconds)
        self._credential: Credential | None = None
        self._lock = asyncio.Lock()

    async def get_valid_credential(self) -> Credential:
        credential = self._credential
        if credential is not None and not credential.expires_within(self._margin, self._clock()):
            return credential

        async with self._lock:
            # Another caller may have refreshed while we waited
            credential = self._credential
            if credential is not None and not credential.expires_within(
                self._margin, self._clock()
            ):
                return credential

            self._credential = await self._grant()
            return self._credential

    async def _grant(self) -> Credential:
        try:
            response = await self._http.post(
                self._config.token_url,
                auth=(self._config.client_id, self._config.client_secret),
                data={"grant_type": "client_credentials"},
                headers={"Accept": "application/json"},
            )
        except httpx.RequestError as e:
            logger.exception("Token request failed: %s", e)
            raise AuthError("Failed to connect to the token endpoint", code="auth_unavailable") from e

        if response.status_code != 200:
            logger.error(
                "Client credentials grant failed: status=%d, body=%s",
                response.status_code,
                response.text,
            )
            raise AuthError(
                f"Client credentials grant failed: {response.status_code}",
                code="auth_failed",
            )

        try:
            token_data = response.json()
            value = token_data["access_token"]
            expires_in = int(token_data["expires_in"])
        except (ValueError, KeyError, TypeError) as e:
            raise AuthError("Malformed token response", code="auth_failed") from e

        expires_at = self._clock() + timedelta(seconds=expires_in)
        logger.info("Obtained new API credential, expires at %s", expires_at.isoformat())
        return Credential(value=value, expires_at=expires_at)
