"""OAuth manager for Google Tasks authentication.

Runs the browser-based OAuth2 consent flow with google-auth-oauthlib,
persists the resulting token through TokenStorage, and refreshes it with
google-auth when it expires.
"""

import asyncio
import logging
import secrets
import webbrowser
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from http.server import BaseHTTPRequestHandler, HTTPServer
from pathlib import Path
from urllib.parse import parse_qs, urlparse

from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import Flow

from gtasks_mcp.auth.models import OAuthToken, StoredToken, TokenMetadata, TokenStatus
from gtasks_mcp.auth.token_storage import TokenStorage
from gtasks_mcp.config import SERVICE_NAME, TASKS_SCOPES, get_redirect_uri

logger = logging.getLogger(__name__)

GOOGLE_AUTH_URI = "https://accounts.google.com/o/oauth2/auth"
GOOGLE_TOKEN_URI = "https://oauth2.googleapis.com/token"  # nosec B105

DEFAULT_OAUTH_HOST = "127.0.0.1"
DEFAULT_OAUTH_PORT = 8789
CALLBACK_TIMEOUT_SECONDS = 300

_SUCCESS_PAGE = (
    b"<html><body><h1>Authorization successful!</h1>"
    b"<p>You can close this tab and return to the terminal.</p></body></html>"
)
_FAILURE_PAGE = (
    b"<html><body><h1>Authorization failed</h1>"
    b"<p>Please close this tab and run setup again.</p></body></html>"
)


@dataclass
class _CallbackResult:
    code: str | None = None
    error: str | None = None


def _make_callback_handler(
    callback_path: str, result: _CallbackResult
) -> type[BaseHTTPRequestHandler]:
    """Build a request handler that captures the OAuth redirect into result."""

    class OAuthCallbackHandler(BaseHTTPRequestHandler):
        def log_message(self, format: str, *args) -> None:
            """Keep the terminal quiet."""

        def _reply(self, status: int, body: bytes) -> None:
            self.send_response(status)
            self.send_header("Content-type", "text/html")
            self.end_headers()
            self.wfile.write(body)

        def do_GET(self) -> None:
            parsed = urlparse(self.path)
            if parsed.path != callback_path:
                self._reply(404, b"Not Found")
                return

            query = parse_qs(parsed.query)
            if "error" in query:
                result.error = query["error"][0]
                self._reply(400, _FAILURE_PAGE)
            elif "code" in query:
                result.code = query["code"][0]
                self._reply(200, _SUCCESS_PAGE)
            else:
                result.error = "no authorization code in callback"
                self._reply(400, _FAILURE_PAGE)

    return OAuthCallbackHandler


class OAuthManager:
    """OAuth authentication manager for Google Tasks.

    Attributes:
        storage: Token storage instance for persisting credentials.

    Example:
        ```python
        manager = OAuthManager()
        token = await manager.authenticate(client_id="...", client_secret="...")

        status, stored = manager.get_status()
        if status == TokenStatus.EXPIRED:
            token = await manager.refresh_if_needed()
        ```
    """

    def __init__(self, storage: TokenStorage | None = None) -> None:
        """Initialize OAuth manager.

        Args:
            storage: Token storage instance. Creates default if not provided.
        """
        self.storage = storage or TokenStorage()

    @property
    def token_path(self) -> Path:
        return self.storage.token_path

    def has_valid_tokens(self) -> bool:
        return self.storage.status() == TokenStatus.VALID

    def _credentials_to_token(self, credentials: Credentials, scopes: list[str]) -> OAuthToken:
        """Convert google-auth Credentials to an OAuthToken.

        google-auth reports naive UTC expiry; it is made timezone-aware here.
        Credentials without an expiry are assumed to last one hour.
        """
        if credentials.expiry:
            expires_at = credentials.expiry
            if expires_at.tzinfo is None:
                expires_at = expires_at.replace(tzinfo=timezone.utc)
        else:
            expires_at = datetime.now(timezone.utc) + timedelta(hours=1)

        return OAuthToken(  # nosec B106 - "Bearer" is the OAuth token type
            access_token=credentials.token,
            refresh_token=credentials.refresh_token,
            expires_at=expires_at,
            scopes=scopes,
            token_type="Bearer",
        )

    def _token_to_credentials(self, token: OAuthToken) -> Credentials:
        return Credentials(
            token=token.access_token,
            refresh_token=token.refresh_token,
            token_uri=GOOGLE_TOKEN_URI,
            scopes=token.scopes,
        )

    async def authenticate(
        self,
        client_id: str | None = None,
        client_secret: str | None = None,
        scopes: list[str] | None = None,
    ) -> OAuthToken:
        """Run the OAuth2 consent flow and store the resulting token.

        Args:
            client_id: Google OAuth client ID.
            client_secret: Google OAuth client secret.
            scopes: OAuth scopes to request. Defaults to the Tasks scope.

        Returns:
            OAuthToken containing access and refresh tokens.

        Raises:
            ValueError: If client ID or secret is missing.
            RuntimeError: If the user denies consent or no code is received.
        """
        if not client_id or not client_secret:
            raise ValueError(
                "Client ID and secret required. "
                "Pass as arguments or set GOOGLE_OAUTH_CLIENT_ID and "
                "GOOGLE_OAUTH_CLIENT_SECRET environment variables."
            )

        scopes = scopes or TASKS_SCOPES
        redirect_uri = get_redirect_uri()
        client_config = {
            "web": {
                "client_id": client_id,
                "client_secret": client_secret,
                "auth_uri": GOOGLE_AUTH_URI,
                "token_uri": GOOGLE_TOKEN_URI,
                "redirect_uris": [redirect_uri],
            }
        }

        # The flow blocks on the local callback server
        loop = asyncio.get_running_loop()
        credentials = await loop.run_in_executor(
            None, self._run_oauth_flow, client_config, scopes, redirect_uri
        )

        token = self._credentials_to_token(credentials, scopes)
        self.storage.save(token, TokenMetadata(service_name=SERVICE_NAME, provider="google"))
        logger.info(f"Stored OAuth token at {self.token_path}")

        return token

    def _run_oauth_flow(
        self, client_config: dict, scopes: list[str], redirect_uri: str
    ) -> Credentials:
        """Open the consent page and wait for a single redirect (blocking)."""
        flow = Flow.from_client_config(client_config, scopes=scopes, redirect_uri=redirect_uri)
        auth_url, _ = flow.authorization_url(
            access_type="offline",
            prompt="consent",
            state=secrets.token_urlsafe(32),
        )

        parsed = urlparse(redirect_uri)
        host = parsed.hostname or DEFAULT_OAUTH_HOST
        port = parsed.port or DEFAULT_OAUTH_PORT
        result = _CallbackResult()

        handler_class = _make_callback_handler(parsed.path or "/callback", result)
        server = HTTPServer((host, port), handler_class)
        server.timeout = CALLBACK_TIMEOUT_SECONDS

        print("Opening browser for Google authorization...")
        print(f"If the browser doesn't open, visit: {auth_url}")
        webbrowser.open(auth_url)

        try:
            server.handle_request()
        finally:
            server.server_close()

        if result.error:
            raise RuntimeError(f"OAuth authentication failed: {result.error}")
        if not result.code:
            raise RuntimeError("No authorization code received from Google")

        flow.fetch_token(code=result.code)
        return flow.credentials

    async def refresh_if_needed(self) -> OAuthToken | None:
        """Refresh the stored token if it is expired.

        Returns:
            The refreshed token, the existing token if still valid, or None
            if no token is stored or it cannot be refreshed.
        """
        stored = self.storage.load()
        if stored is None:
            return None

        if not stored.token.is_expired():
            return stored.token

        if stored.token.refresh_token is None:
            return None

        credentials = self._token_to_credentials(stored.token)

        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, credentials.refresh, Request())

        new_token = self._credentials_to_token(credentials, stored.token.scopes)
        if new_token.refresh_token is None:
            # Google omits the refresh token on refresh responses
            new_token.refresh_token = stored.token.refresh_token

        stored.metadata.last_refreshed = datetime.now(timezone.utc)
        self.storage.save(new_token, stored.metadata)

        return new_token

    def get_status(self) -> tuple[TokenStatus, StoredToken | None]:
        """Get the status of the stored token.

        Returns:
            Tuple of (TokenStatus, StoredToken or None).
        """
        status = self.storage.status()
        stored = None
        if status in (TokenStatus.VALID, TokenStatus.EXPIRED):
            stored = self.storage.load()
        return (status, stored)
