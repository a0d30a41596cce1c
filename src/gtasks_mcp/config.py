"""Environment-derived settings for gtasks-mcp.

Environment Variables:
    GOOGLE_OAUTH_CLIENT_ID: Google OAuth client ID (used by `gtasks-mcp setup`)
    GOOGLE_OAUTH_CLIENT_SECRET: Google OAuth client secret
    GOOGLE_OAUTH_REDIRECT_URI: Redirect URI (default: http://127.0.0.1:8789/callback)
    GTASKS_MCP_TOKEN_PATH: Override for the tokens.json location
    GTASKS_MCP_LOG_LEVEL: Logging level for the server (default: INFO)
"""

import os
from pathlib import Path

# Service name for token storage
SERVICE_NAME = "gtasks-mcp"

# Google Tasks REST API
TASKS_API_BASE = "https://tasks.googleapis.com/tasks/v1"
TASKS_SCOPES = ["https://www.googleapis.com/auth/tasks"]

# Reserved task list id resolved by Google to the user's primary list
DEFAULT_TASKLIST = "@default"

# Page size for list operations; no pagination beyond this
MAX_RESULTS = 100

DEFAULT_REDIRECT_URI = "http://127.0.0.1:8789/callback"


def get_token_path() -> Path:
    """Get the token storage path.

    Returns:
        GTASKS_MCP_TOKEN_PATH if set, otherwise ./.gtasks-mcp/tokens.json
    """
    override = os.environ.get("GTASKS_MCP_TOKEN_PATH")
    if override:
        return Path(override).expanduser()
    return Path.cwd() / ".gtasks-mcp" / "tokens.json"


def get_redirect_uri() -> str:
    return os.environ.get("GOOGLE_OAUTH_REDIRECT_URI", DEFAULT_REDIRECT_URI)


def get_log_level() -> str:
    return os.environ.get("GTASKS_MCP_LOG_LEVEL", "INFO").upper()
