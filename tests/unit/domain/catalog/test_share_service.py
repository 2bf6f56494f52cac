"""Unit tests for ShareService."""

from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock

import pytest

from dcatbridge.domain.catalog.model.resource import Share
from dcatbridge.domain.catalog.model.value import Credential
from dcatbridge.domain.catalog.service.share import ShareService
from dcatbridge.domain.shared.error import AuthError, NotFoundError

CREDENTIAL = Credential(value="token", expires_at=datetime.now(UTC) + timedelta(hours=1))


def _make_service(share: Share | None) -> tuple[ShareService, AsyncMock]:
    reader = AsyncMock()
    reader.get_share.return_value = share
    credentials = AsyncMock()
    credentials.get_valid_credential.return_value = CREDENTIAL
    return ShareService(share_reader=reader, credentials=credentials), reader


class TestVerifyShare:
    @pytest.mark.asyncio
    async def test_matching_token_returns_share(self):
        share = Share.model_validate({"_id": "share-1", "urlToken": "secret", "name": "Open data"})
        service, reader = _make_service(share)

        result = await service.verify_share("share-1", "secret")

        assert result == share
        reader.get_share.assert_awaited_once_with("share-1", CREDENTIAL)

    @pytest.mark.asyncio
    async def test_wrong_token_is_not_found(self):
        share = Share.model_validate({"_id": "share-1", "urlToken": "secret"})
        service, _ = _make_service(share)

        with pytest.raises(NotFoundError):
            await service.verify_share("share-1", "guess")

    @pytest.mark.asyncio
    async def test_unknown_share_is_not_found(self):
        service, _ = _make_service(None)

        with pytest.raises(NotFoundError):
            await service.verify_share("missing", "secret")

    @pytest.mark.asyncio
    async def test_share_without_token_is_not_found(self):
        service, _ = _make_service(Share.model_validate({"_id": "share-1"}))

        with pytest.raises(NotFoundError):
            await service.verify_share("share-1", "")

    @pytest.mark.asyncio
    async def test_auth_failure_propagates(self):
        service, reader = _make_service(None)
        service.credentials.get_valid_credential.side_effect = AuthError("denied")

        with pytest.raises(AuthError):
            await service.verify_share("share-1", "secret")
        reader.get_share.assert_not_awaited()
