from dishka import provide

from dcatbridge.config import Config
from dcatbridge.domain.catalog.port.credential import CredentialProvider
from dcatbridge.domain.catalog.port.format_prober import FormatProber
from dcatbridge.domain.catalog.port.resource_search import ResourceSearch
from dcatbridge.domain.catalog.port.service_resolver import ServiceResolver
from dcatbridge.domain.catalog.port.share_reader import ShareReader
from dcatbridge.domain.catalog.service.fetcher import PaginatedFetcher
from dcatbridge.domain.catalog.service.pipeline import CatalogPipeline
from dcatbridge.domain.catalog.service.share import ShareService
from dcatbridge.domain.catalog.service.transform import RecordTransformer
from dcatbridge.util.di.base import Provider
from dcatbridge.util.di.scope import Scope


class CatalogProvider(Provider):
    @provide(scope=Scope.UOW)
    def get_fetcher(
        self,
        search: ResourceSearch,
        credentials: CredentialProvider,
        config: Config,
    ) -> PaginatedFetcher:
        return PaginatedFetcher(
            search=search,
            credentials=credentials,
            page_size=config.upstream.page_size,
        )

    @provide(scope=Scope.UOW)
    def get_transformer(
        self,
        format_prober: FormatProber,
        service_resolver: ServiceResolver,
        config: Config,
    ) -> RecordTransformer:
        return RecordTransformer(
            format_prober=format_prober,
            service_resolver=service_resolver,
            server_url=config.catalog.server_url,
            open_catalog_url=config.catalog.open_catalog_url,
        )

    @provide(scope=Scope.UOW)
    def get_pipeline(
        self, fetcher: PaginatedFetcher, transformer: RecordTransformer
    ) -> CatalogPipeline:
        return CatalogPipeline(fetcher=fetcher, transformer=transformer)

    @provide(scope=Scope.UOW)
    def get_share_service(
        self, share_reader: ShareReader, credentials: CredentialProvider
    ) -> ShareService:
        return ShareService(share_reader=share_reader, credentials=credentials)
