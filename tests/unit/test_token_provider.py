"""Unit tests for StoredTokenProvider."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from google.auth.exceptions import RefreshError

from gtasks_mcp.auth.models import OAuthToken, TokenMetadata
from gtasks_mcp.auth.token_provider import StoredTokenProvider
from gtasks_mcp.auth.token_storage import TokenStorage
from gtasks_mcp.exceptions import ConfigurationError


@pytest.mark.unit
class TestStoredTokenProvider:
    @pytest.mark.asyncio
    async def test_should_return_stored_access_token(
        self,
        token_storage: TokenStorage,
        valid_token: OAuthToken,
        token_metadata: TokenMetadata,
    ) -> None:
        token_storage.save(valid_token, token_metadata)
        provider = StoredTokenProvider(storage=token_storage)

        assert await provider() == "test_access_token_abc123"

    @pytest.mark.asyncio
    async def test_should_raise_configuration_error_when_missing(
        self, token_storage: TokenStorage
    ) -> None:
        provider = StoredTokenProvider(storage=token_storage)

        with pytest.raises(ConfigurationError, match="No OAuth token found"):
            await provider()

    @pytest.mark.asyncio
    async def test_should_raise_configuration_error_when_corrupted(
        self, token_storage: TokenStorage
    ) -> None:
        token_storage.token_path.write_text('{"bad": "data"}')
        provider = StoredTokenProvider(storage=token_storage)

        with pytest.raises(ConfigurationError, match="invalid or corrupted"):
            await provider()

    @pytest.mark.asyncio
    async def test_should_refresh_expired_token(
        self,
        token_storage: TokenStorage,
        expired_token: OAuthToken,
        valid_token: OAuthToken,
        token_metadata: TokenMetadata,
    ) -> None:
        token_storage.save(expired_token, token_metadata)
        manager = MagicMock()
        manager.refresh_if_needed = AsyncMock(return_value=valid_token)
        provider = StoredTokenProvider(storage=token_storage, manager=manager)

        assert await provider() == valid_token.access_token
        manager.refresh_if_needed.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_should_raise_when_refresh_not_possible(
        self,
        token_storage: TokenStorage,
        expired_token: OAuthToken,
        token_metadata: TokenMetadata,
    ) -> None:
        token_storage.save(expired_token, token_metadata)
        manager = MagicMock()
        manager.refresh_if_needed = AsyncMock(return_value=None)
        provider = StoredTokenProvider(storage=token_storage, manager=manager)

        with pytest.raises(ConfigurationError, match="Token refresh failed"):
            await provider()

    @pytest.mark.asyncio
    async def test_should_wrap_refresh_errors(
        self,
        token_storage: TokenStorage,
        expired_token: OAuthToken,
        token_metadata: TokenMetadata,
    ) -> None:
        token_storage.save(expired_token, token_metadata)
        manager = MagicMock()
        manager.refresh_if_needed = AsyncMock(side_effect=RefreshError("invalid_grant"))
        provider = StoredTokenProvider(storage=token_storage, manager=manager)

        with pytest.raises(ConfigurationError, match="invalid_grant"):
            await provider()

    def test_should_share_storage_with_manager(self, oauth_manager) -> None:
        provider = StoredTokenProvider(manager=oauth_manager)

        assert provider.storage is oauth_manager.storage
