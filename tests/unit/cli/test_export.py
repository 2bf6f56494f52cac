"""Tests for the export command."""

import json
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock

import pytest
from dishka import make_async_container, provide

from dcatbridge.application.di import ConfigProvider
from dcatbridge.cli.commands import export as export_module
from dcatbridge.config import Config
from dcatbridge.domain.catalog.model.resource import Page, Resource, Share
from dcatbridge.domain.catalog.model.value import Credential
from dcatbridge.domain.catalog.port.credential import CredentialProvider
from dcatbridge.domain.catalog.port.format_prober import FormatProber
from dcatbridge.domain.catalog.port.resource_search import ResourceSearch
from dcatbridge.domain.catalog.port.service_resolver import ServiceResolver
from dcatbridge.domain.catalog.port.share_reader import ShareReader
from dcatbridge.domain.catalog.util.di import CatalogProvider
from dcatbridge.util.di.base import Provider
from dcatbridge.util.di.scope import Scope


class InMemoryUpstreamProvider(Provider):
    scope = Scope.APP

    def __init__(self, resources: list[Resource]) -> None:
        super().__init__()
        self._resources = resources

    @provide
    def get_search(self) -> ResourceSearch:
        resources = self._resources

        async def search_page(share_id, *, offset, limit, credential):
            return Page(offset=offset, total=len(resources), results=resources[offset : offset + limit])

        search = AsyncMock()
        search.search_page.side_effect = search_page
        return search

    @provide
    def get_share_reader(self) -> ShareReader:
        reader = AsyncMock()
        reader.get_share.return_value = Share.model_validate({"_id": "share-1", "urlToken": "secret"})
        return reader

    @provide
    def get_credentials(self) -> CredentialProvider:
        credentials = AsyncMock()
        credentials.get_valid_credential.return_value = Credential(
            value="token", expires_at=datetime.now(UTC) + timedelta(hours=1)
        )
        return credentials

    @provide
    def get_format_prober(self) -> FormatProber:
        return AsyncMock()

    @provide
    def get_service_resolver(self) -> ServiceResolver:
        return AsyncMock()


@pytest.fixture
def fake_container(monkeypatch: pytest.MonkeyPatch) -> None:
    resources = [
        Resource.model_validate(
            {
                "_id": f"res-{i}",
                "type": "vectorDataset",
                "title": f"Dataset {i}",
                "links": [
                    {
                        "_id": f"link-{i}",
                        "kind": "data",
                        "actions": ["download"],
                        "url": f"https://data.example.org/{i}.csv",
                    }
                ],
            }
        )
        for i in range(3)
    ]

    def create_container(config: Config):
        return make_async_container(
            ConfigProvider(),
            InMemoryUpstreamProvider(resources),
            CatalogProvider(),
            context={Config: config},
            scopes=Scope,  # type: ignore[arg-type]
        )

    monkeypatch.setattr(export_module, "create_container", create_container)


class TestExport:
    def test_writes_catalog_to_file(self, fake_container, tmp_path) -> None:
        output = tmp_path / "catalog.json"

        export_module.export("share-1", "secret", output=output)

        document = json.loads(output.read_bytes())
        assert [d["identifier"] for d in document["dataset"]] == ["res-0", "res-1", "res-2"]

    def test_wrong_token_exits_with_error(self, fake_container, tmp_path) -> None:
        with pytest.raises(SystemExit) as exc_info:
            export_module.export("share-1", "wrong", output=tmp_path / "catalog.json")

        assert exc_info.value.code == 1
