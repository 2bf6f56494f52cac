"""HTTP adapter for the ServiceResolver port."""

import logging
from typing import Any

import httpx
from pydantic import ValidationError as PydanticValidationError

from dcatbridge.config import ServicesConfig
from dcatbridge.domain.catalog.model.resource import ServiceLayer
from dcatbridge.domain.catalog.model.value import ServiceQuery
from dcatbridge.domain.catalog.port.service_resolver import ServiceResolver
from dcatbridge.domain.shared.error import ServiceLookupError

logger = logging.getLogger(__name__)

AVAILABLE_SERVICES_PATH = "/api/servicesParser/getAvailableServices"

# Query URLs returned by the resolution service serve GeoJSON
QUERY_URL_FORMAT = "geojson"


class HttpServiceResolver(ServiceResolver):
    """Resolves all feature-service layers of a resource in one POST."""

    def __init__(self, config: ServicesConfig, client: httpx.AsyncClient) -> None:
        self._config = config
        self._client = client

    async def resolve(self, layers: list[ServiceLayer]) -> list[ServiceQuery]:
        url = f"{self._config.url}{AVAILABLE_SERVICES_PATH}"
        body = {"jsonData": {"serviceLayers": [layer.to_payload() for layer in layers]}}

        try:
            response = await self._client.post(url, json=body)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as e:
            raise ServiceLookupError(f"Service resolution failed: {e}", code="service_lookup_failed") from e
        except ValueError as e:
            raise ServiceLookupError(
                "Service resolution returned invalid JSON", code="service_lookup_failed"
            ) from e

        if not isinstance(payload, dict):
            raise ServiceLookupError(
                "Service resolution returned an unexpected payload", code="service_lookup_failed"
            )

        items = payload.get("servicelayers") or []
        if not isinstance(items, list):
            raise ServiceLookupError(
                "Service resolution returned a non-list servicelayers", code="service_lookup_failed"
            )

        return [query for item in items if (query := _to_query(item))]


def _to_query(item: Any) -> ServiceQuery | None:
    if not isinstance(item, dict):
        return None
    query_url = item.get("DCATqueryURL")
    service_id = item.get("serviceId")
    if not query_url or not service_id:
        return None
    try:
        return ServiceQuery(
            service_id=str(service_id),
            title=item.get("layerTitle"),
            format=QUERY_URL_FORMAT,
            query_url=query_url,
        )
    except PydanticValidationError as e:
        logger.warning("Skipping malformed service layer %s: %s", service_id, e)
        return None
