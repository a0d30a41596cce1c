"""OAuth authentication for gtasks-mcp.

Quick Start:
    ```python
    from gtasks_mcp.auth import OAuthManager, StoredTokenProvider

    manager = OAuthManager()
    await manager.authenticate(
        client_id="your-client-id",
        client_secret="your-client-secret"  # pragma: allowlist secret
    )

    # Bearer token for API calls, refreshed when expired
    provider = StoredTokenProvider(manager=manager)
    access_token = await provider()
    ```
"""

from gtasks_mcp.auth.models import (
    OAuthToken,
    StoredToken,
    TokenMetadata,
    TokenStatus,
)
from gtasks_mcp.auth.oauth_manager import OAuthManager
from gtasks_mcp.auth.token_provider import StoredTokenProvider
from gtasks_mcp.auth.token_storage import TokenStorage

__all__ = [
    "OAuthManager",
    "StoredTokenProvider",
    "TokenStorage",
    "OAuthToken",
    "StoredToken",
    "TokenMetadata",
    "TokenStatus",
]
