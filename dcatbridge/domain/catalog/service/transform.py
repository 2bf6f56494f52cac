"""Transformation of upstream resources into DCAT datasets."""

import logging

from dcatbridge.domain.catalog.model.resource import Link, Resource, ServiceLayer
from dcatbridge.domain.catalog.model.value import (
    Dataset,
    Diagnostic,
    Distribution,
    ShareContext,
    TransformOutcome,
)
from dcatbridge.domain.catalog.port.format_prober import FormatProber
from dcatbridge.domain.catalog.port.service_resolver import ServiceResolver
from dcatbridge.domain.catalog.service import mapping
from dcatbridge.domain.shared.error import FormatProbeError, ServiceLookupError
from dcatbridge.domain.shared.service import Service

logger = logging.getLogger(__name__)

# Feature services (wfs, efs, ...) are the only layers that can be queried for data
SERVICE_FORMAT_SUFFIX = "fs"


class RecordTransformer(Service):
    """Maps one upstream resource to a DCAT dataset plus diagnostics.

    The mapping is deterministic apart from two lookups: the content-type
    probe for first-party downloads and the batched service-layer
    resolution. Both degrade to "no information" on failure and never fail
    the record.
    """

    format_prober: FormatProber
    service_resolver: ServiceResolver
    server_url: str
    open_catalog_url: str

    async def transform(self, resource: Resource, share: ShareContext) -> TransformOutcome:
        distribution = await self.get_distributions(resource, share)

        dataset = Dataset(
            identifier=resource.id,
            license=mapping.get_license(resource),
            title=resource.title,
            description=mapping.get_description(resource, share, self.open_catalog_url),
            keyword=mapping.get_keywords(resource.tags),
            temporal=mapping.get_temporal(resource.valid_from, resource.valid_to),
            frequency=mapping.get_periodicity(resource.update_frequency),
            distribution=distribution,
        )

        diagnostics: list[Diagnostic] = []

        if resource.type in mapping.UNSUPPORTED_RESOURCE_TYPES:
            diagnostics.append(Diagnostic.error(f"Unsupported resource type ({resource.type})"))

        if dataset.license is None:
            diagnostics.append(Diagnostic.warning("No recognized license"))

        if not (resource.title and resource.title.strip()):
            diagnostics.append(Diagnostic.error("Missing title"))

        if not dataset.distribution:
            diagnostics.append(Diagnostic.error("No downloadable distribution could be built"))

        return TransformOutcome(source_id=resource.id, dataset=dataset, diagnostics=diagnostics)

    async def get_distributions(
        self, resource: Resource, share: ShareContext
    ) -> list[Distribution]:
        """Link distributions first, then service-layer distributions."""
        distributions: list[Distribution] = []

        for link in resource.links:
            if not link.is_downloadable_data:
                continue
            download_url = self.get_download_url(resource, link, share)
            if download_url is None:
                continue
            distributions.append(
                Distribution(
                    identifier=link.id,
                    title=link.title,
                    format=await self.get_format(link, download_url),
                    download_url=download_url,
                    modified=resource.modified,
                )
            )

        distributions.extend(await self._get_service_distributions(resource))
        return distributions

    def get_download_url(self, resource: Resource, link: Link, share: ShareContext) -> str | None:
        if not link.url:
            return None
        if mapping.is_absolute_url(link.url):
            return link.url
        # Hosted files are served through this server's download proxy
        if link.url.startswith("/resources/"):
            return mapping.proxied_download_url(self.server_url, share, resource.id, link.id)
        return None

    async def get_format(self, link: Link, download_url: str) -> str | None:
        if not download_url.startswith(self.server_url):
            return mapping.format_from_url(download_url)

        fmt = mapping.format_from_filename(link.filename)
        if fmt is not None:
            return fmt

        try:
            content_type = await self.format_prober.content_type(download_url)
        except FormatProbeError as e:
            logger.warning("Format probe failed for link %s: %s", link.id, e.message)
            return None
        return mapping.format_from_content_type(content_type)

    async def _get_service_distributions(self, resource: Resource) -> list[Distribution]:
        layers = [layer for layer in resource.service_layers if _is_feature_service(layer)]
        if not layers:
            return []

        try:
            queries = await self.service_resolver.resolve(layers)
        except ServiceLookupError as e:
            logger.warning(
                "Service layer lookup failed for resource %s (%d layers), "
                "continuing without service distributions: %s",
                resource.id,
                len(layers),
                e.message,
            )
            return []

        return [
            Distribution(
                identifier=query.service_id,
                title=query.title,
                format=query.format,
                download_url=query.query_url,
                modified=resource.modified,
            )
            for query in queries
        ]


def _is_feature_service(layer: ServiceLayer) -> bool:
    return bool(
        layer.service and layer.service.format and layer.service.format.endswith(SERVICE_FORMAT_SUFFIX)
    )
