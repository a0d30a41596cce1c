"""Version information for gtasks-mcp."""

from importlib.metadata import PackageNotFoundError, version


def _get_version() -> str:
    """Get the installed distribution version, falling back for source checkouts."""
    try:
        return version("gtasks-mcp")
    except PackageNotFoundError:
        return "0.1.0"


__version__ = _get_version()
