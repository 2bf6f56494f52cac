"""DI provider for HTTP infrastructure."""

from collections.abc import AsyncIterator

import httpx
from dishka import provide

from dcatbridge.config import Config
from dcatbridge.domain.catalog.port.credential import CredentialProvider
from dcatbridge.domain.catalog.port.format_prober import FormatProber
from dcatbridge.domain.catalog.port.resource_search import ResourceSearch
from dcatbridge.domain.catalog.port.service_resolver import ServiceResolver
from dcatbridge.domain.catalog.port.share_reader import ShareReader
from dcatbridge.domain.shared.error import ConfigurationError
from dcatbridge.infrastructure.http.api_client import UpstreamApiClient
from dcatbridge.infrastructure.http.format_prober import HttpFormatProber
from dcatbridge.infrastructure.http.service_resolver import HttpServiceResolver
from dcatbridge.infrastructure.http.token_cache import OAuthTokenCache
from dcatbridge.util.di.base import Provider
from dcatbridge.util.di.scope import Scope


class HttpProvider(Provider):
    """DI provider for HTTP adapters.

    Everything here lives for the whole process: one pooled client and one
    token cache shared by all catalog exports.
    """

    @provide(scope=Scope.APP)
    async def get_http_client(self, config: Config) -> AsyncIterator[httpx.AsyncClient]:
        """Shared HTTP client for all upstream calls (connection pooling)."""
        timeout = httpx.Timeout(
            connect=config.http.connect_timeout,
            read=config.http.read_timeout,
            write=config.http.write_timeout,
            pool=config.http.pool_timeout,
        )
        async with httpx.AsyncClient(timeout=timeout) as client:
            yield client

    @provide(scope=Scope.APP)
    def get_credential_provider(
        self, config: Config, client: httpx.AsyncClient
    ) -> CredentialProvider:
        if not (config.upstream.client_id and config.upstream.client_secret):
            raise ConfigurationError(
                "DCAT_UPSTREAM__CLIENT_ID and DCAT_UPSTREAM__CLIENT_SECRET must be set",
                code="missing_client_credentials",
            )
        return OAuthTokenCache(config=config.upstream, http_client=client)

    @provide(scope=Scope.APP)
    def get_api_client(self, config: Config, client: httpx.AsyncClient) -> UpstreamApiClient:
        return UpstreamApiClient(config=config.upstream, http_client=client)

    @provide(scope=Scope.APP)
    def get_resource_search(self, api_client: UpstreamApiClient) -> ResourceSearch:
        return api_client

    @provide(scope=Scope.APP)
    def get_share_reader(self, api_client: UpstreamApiClient) -> ShareReader:
        return api_client

    @provide(scope=Scope.APP)
    def get_format_prober(self, client: httpx.AsyncClient) -> FormatProber:
        return HttpFormatProber(client=client)

    @provide(scope=Scope.APP)
    def get_service_resolver(self, config: Config, client: httpx.AsyncClient) -> ServiceResolver:
        return HttpServiceResolver(config=config.services, client=client)
