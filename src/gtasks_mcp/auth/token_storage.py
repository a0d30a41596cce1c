"""Token file for the single Google account gtasks-mcp acts as.

Storage Location: ./.gtasks-mcp/tokens.json (override with GTASKS_MCP_TOKEN_PATH)

The file holds one StoredToken as JSON. Tokens live at project level so
different projects can point at different Google accounts; run
`gtasks-mcp setup` from the project directory to create it.
"""

import logging
import os
from pathlib import Path

from gtasks_mcp.auth.models import OAuthToken, StoredToken, TokenMetadata, TokenStatus
from gtasks_mcp.config import SERVICE_NAME, get_token_path

logger = logging.getLogger(__name__)


class TokenStorage:
    """Reads and writes the stored OAuth token.

    The directory is created on first save with mode 0700 and the file is
    written with mode 0600.

    Attributes:
        token_path: Path to the tokens.json file.
    """

    def __init__(self, token_path: Path | None = None) -> None:
        self.token_path = token_path or get_token_path()

    def _read(self) -> StoredToken:
        """Parse the token file.

        Raises:
            FileNotFoundError: If no token has been saved.
            ValueError: If the file is not a valid StoredToken.
        """
        return StoredToken.model_validate_json(self.token_path.read_text())

    def load(self) -> StoredToken | None:
        """Return the stored token, or None if absent or unreadable."""
        try:
            return self._read()
        except FileNotFoundError:
            return None
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable token file {self.token_path}: {e}")
            return None

    def save(self, token: OAuthToken, metadata: TokenMetadata | None = None) -> StoredToken:
        """Replace the stored token.

        Args:
            token: Token to persist.
            metadata: Provenance for the token. A fresh record is created if omitted.

        Returns:
            The StoredToken as written.
        """
        stored = StoredToken(
            metadata=metadata or TokenMetadata(service_name=SERVICE_NAME),
            token=token,
        )

        token_dir = self.token_path.parent
        token_dir.mkdir(parents=True, mode=0o700, exist_ok=True)
        token_dir.chmod(0o700)

        fd = os.open(self.token_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w") as f:
            f.write(stored.model_dump_json(indent=2))
        # O_CREAT mode is ignored for files that already exist
        self.token_path.chmod(0o600)

        return stored

    def status(self) -> TokenStatus:
        try:
            stored = self._read()
        except FileNotFoundError:
            return TokenStatus.MISSING
        except (OSError, ValueError):
            return TokenStatus.INVALID

        if stored.token.is_expired():
            return TokenStatus.EXPIRED
        return TokenStatus.VALID

    def clear(self) -> bool:
        """Remove the token file.

        Returns:
            True if a file was removed, False if there was nothing to remove.
        """
        try:
            self.token_path.unlink()
        except FileNotFoundError:
            return False
        return True
