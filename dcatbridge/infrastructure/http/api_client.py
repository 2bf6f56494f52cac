"""HTTP adapter for the metadata API (shares and resource search)."""

import logging
from typing import Any

import httpx
from pydantic import ValidationError as PydanticValidationError

from dcatbridge.config import UpstreamConfig
from dcatbridge.domain.catalog.model.resource import Page, Resource, Share, UpstreamModel
from dcatbridge.domain.catalog.model.value import Credential, DiagnosticLevel
from dcatbridge.domain.catalog.port.resource_search import ResourceSearch
from dcatbridge.domain.catalog.port.share_reader import ShareReader
from dcatbridge.domain.shared.error import UpstreamFetchError

logger = logging.getLogger(__name__)

SEARCH_INCLUDES = "links,serviceLayers,conditions"


class UpstreamApiClient(ResourceSearch, ShareReader):
    """Reads shares and paginated resources with a bearer credential."""

    def __init__(self, config: UpstreamConfig, http_client: httpx.AsyncClient) -> None:
        self._config = config
        self._http = http_client

    async def get_share(self, share_id: str, credential: Credential) -> Share | None:
        response = await self._get(f"/shares/{share_id}", credential)
        if response.status_code == 404:
            return None
        payload = self._json(response)
        try:
            return Share.model_validate(payload)
        except PydanticValidationError as e:
            raise UpstreamFetchError(f"Malformed share payload: {e}", code="malformed_payload") from e

    async def search_page(
        self,
        share_id: str,
        *,
        offset: int,
        limit: int,
        credential: Credential,
    ) -> Page:
        params = {
            "s": share_id,
            "ob": "_created",
            "_limit": str(limit),
            "_offset": str(offset),
            "_include": SEARCH_INCLUDES,
        }
        response = await self._get("/resources/search", credential, params=params)
        payload = self._json(response)
        try:
            envelope = SearchEnvelope.model_validate(payload)
        except PydanticValidationError as e:
            raise UpstreamFetchError(
                f"Malformed search page at offset {offset}: {e}",
                code="malformed_payload",
            ) from e

        # A malformed record is dropped on its own; the rest of the page survives
        results = [r for raw in envelope.results if (r := _validate_resource(raw)) is not None]
        return Page(offset=envelope.offset, total=envelope.total, results=results)

    async def _get(
        self,
        path: str,
        credential: Credential,
        params: dict[str, str] | None = None,
    ) -> httpx.Response:
        url = f"{self._config.api_url}{path}"
        try:
            return await self._http.get(
                url,
                params=params,
                headers={"Authorization": f"Bearer {credential.value}"},
            )
        except httpx.RequestError as e:
            logger.error("Metadata API request failed: %s %s", url, e)
            raise UpstreamFetchError(
                f"Failed to reach metadata API: {path}",
                code="upstream_unavailable",
            ) from e

    def _json(self, response: httpx.Response) -> Any:
        if not response.is_success:
            logger.error(
                "Metadata API error: %s %s -> status=%d, body=%s",
                response.request.method,
                response.request.url,
                response.status_code,
                response.text[:500],
            )
            raise UpstreamFetchError(
                f"Metadata API returned {response.status_code}",
                code="upstream_error",
            )
        try:
            return response.json()
        except ValueError as e:
            raise UpstreamFetchError("Metadata API returned invalid JSON", code="malformed_payload") from e


class SearchEnvelope(UpstreamModel):
    """Search page with records left unparsed."""

    offset: int
    total: int
    results: list[Any]


def _validate_resource(raw: Any) -> Resource | None:
    try:
        return Resource.model_validate(raw)
    except PydanticValidationError as e:
        source_id = raw.get("_id", "?") if isinstance(raw, dict) else "?"
        logger.error(
            "%s | %s | Malformed record dropped: %s",
            source_id,
            DiagnosticLevel.ERROR,
            e,
        )
        return None
