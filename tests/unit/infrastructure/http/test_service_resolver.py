"""Unit tests for HttpServiceResolver adapter."""

import json
from unittest.mock import AsyncMock

import httpx
import pytest

from dcatbridge.config import ServicesConfig
from dcatbridge.domain.catalog.model.resource import ServiceLayer
from dcatbridge.domain.catalog.model.value import ServiceQuery
from dcatbridge.domain.shared.error import ServiceLookupError
from dcatbridge.infrastructure.http.service_resolver import (
    AVAILABLE_SERVICES_PATH,
    HttpServiceResolver,
)

SERVICES_URL = "https://services.example.org"
RESOLVE_URL = f"{SERVICES_URL}{AVAILABLE_SERVICES_PATH}"

LAYERS = [
    ServiceLayer.model_validate(
        {"_id": "layer-1", "name": "roads", "service": {"format": "wfs", "path": "https://x/wfs"}}
    )
]


def _make_resolver(response: httpx.Response | Exception) -> tuple[HttpServiceResolver, AsyncMock]:
    client = AsyncMock(spec=httpx.AsyncClient)
    if isinstance(response, Exception):
        client.post.side_effect = response
    else:
        client.post.return_value = response
    return HttpServiceResolver(config=ServicesConfig(url=SERVICES_URL), client=client), client


def _response(status: int, **kwargs) -> httpx.Response:
    return httpx.Response(status, request=httpx.Request("POST", RESOLVE_URL), **kwargs)


class TestHttpServiceResolver:
    @pytest.mark.asyncio
    async def test_posts_layers_and_parses_query_urls(self):
        payload = {
            "servicelayers": [
                {
                    "serviceId": "svc-1",
                    "layerTitle": "Roads",
                    "DCATqueryURL": "https://x/wfs?typeName=roads&outputFormat=geojson",
                },
                {"serviceId": "svc-2", "layerTitle": "No query URL"},
            ]
        }
        resolver, client = _make_resolver(_response(200, json=payload))

        queries = await resolver.resolve(LAYERS)

        assert queries == [
            ServiceQuery(
                service_id="svc-1",
                title="Roads",
                format="geojson",
                query_url="https://x/wfs?typeName=roads&outputFormat=geojson",
            )
        ]
        body = client.post.await_args.kwargs["json"]
        assert client.post.await_args.args == (RESOLVE_URL,)
        assert body == {
            "jsonData": {
                "serviceLayers": [
                    {
                        "_id": "layer-1",
                        "name": "roads",
                        "service": {"format": "wfs", "path": "https://x/wfs"},
                    }
                ]
            }
        }
        # Forwarded payload must be JSON-serializable as-is
        json.dumps(body)

    @pytest.mark.asyncio
    async def test_missing_servicelayers_key_yields_nothing(self):
        resolver, _ = _make_resolver(_response(200, json={}))

        assert await resolver.resolve(LAYERS) == []

    @pytest.mark.asyncio
    async def test_error_status_raises(self):
        resolver, _ = _make_resolver(_response(500, text="boom"))

        with pytest.raises(ServiceLookupError):
            await resolver.resolve(LAYERS)

    @pytest.mark.asyncio
    async def test_network_error_raises(self):
        resolver, _ = _make_resolver(httpx.ConnectError("refused"))

        with pytest.raises(ServiceLookupError):
            await resolver.resolve(LAYERS)

    @pytest.mark.asyncio
    async def test_invalid_json_raises(self):
        resolver, _ = _make_resolver(_response(200, text="not json"))

        with pytest.raises(ServiceLookupError):
            await resolver.resolve(LAYERS)

    @pytest.mark.asyncio
    async def test_malformed_items_are_skipped(self):
        payload = {
            "servicelayers": [
                {"serviceId": "svc-1", "layerTitle": 42, "DCATqueryURL": "https://x/q1"},
                {"serviceId": "svc-2", "layerTitle": "Rivers", "DCATqueryURL": ["https://x/q2"]},
                "not an object",
                {"serviceId": "svc-3", "layerTitle": "Roads", "DCATqueryURL": "https://x/q3"},
            ]
        }
        resolver, _ = _make_resolver(_response(200, json=payload))

        queries = await resolver.resolve(LAYERS)

        assert [q.service_id for q in queries] == ["svc-3"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("servicelayers", [42, "svc-1", {"serviceId": "svc-1"}])
    async def test_non_list_servicelayers_raises(self, servicelayers):
        resolver, _ = _make_resolver(_response(200, json={"servicelayers": servicelayers}))

        with pytest.raises(ServiceLookupError):
            await resolver.resolve(LAYERS)
