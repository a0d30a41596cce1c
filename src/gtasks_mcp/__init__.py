"""Google Tasks tools for AI agents over the Model Context Protocol."""

from gtasks_mcp.__version__ import __version__

__all__ = ["__version__"]
