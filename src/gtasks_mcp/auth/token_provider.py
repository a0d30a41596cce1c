"""Access-token provider backed by the persisted token store."""

import logging

from google.auth.exceptions import RefreshError

from gtasks_mcp.auth.models import TokenStatus
from gtasks_mcp.auth.oauth_manager import OAuthManager
from gtasks_mcp.auth.token_storage import TokenStorage
from gtasks_mcp.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class StoredTokenProvider:
    """Yields a usable bearer token, refreshing it when expired.

    Instances are awaitable callables so TasksClient can depend on any
    ``async () -> str`` in tests.

    Raises:
        ConfigurationError: If no token is stored, the stored token is
            corrupt, or it cannot be refreshed.
    """

    def __init__(
        self,
        storage: TokenStorage | None = None,
        manager: OAuthManager | None = None,
    ) -> None:
        if storage is None:
            storage = manager.storage if manager is not None else TokenStorage()
        self.storage = storage
        self.manager = manager or OAuthManager(storage=self.storage)

    async def __call__(self) -> str:
        status = self.storage.status()

        if status == TokenStatus.MISSING:
            raise ConfigurationError(
                f"No OAuth token found at {self.storage.token_path}. "
                "Please authenticate first using: gtasks-mcp setup"
            )

        if status == TokenStatus.INVALID:
            raise ConfigurationError(
                f"OAuth token at {self.storage.token_path} is invalid or corrupted. "
                "Please re-authenticate using: gtasks-mcp setup"
            )

        if status == TokenStatus.EXPIRED:
            logger.info("Token expired, attempting refresh...")
            try:
                token = await self.manager.refresh_if_needed()
            except RefreshError as e:
                raise ConfigurationError(
                    f"Token refresh failed: {e}. Please re-authenticate using: gtasks-mcp setup"
                ) from e
            if token is None:
                raise ConfigurationError(
                    "Token refresh failed. Please re-authenticate using: gtasks-mcp setup"
                )
            return token.access_token

        stored = self.storage.load()
        if stored is None:
            raise ConfigurationError("Token retrieval failed. Please re-run: gtasks-mcp setup")

        return stored.token.access_token
