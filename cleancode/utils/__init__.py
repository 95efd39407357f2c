"""
Utilities package for the MCP server.
"""
from .helpers import to_json_text, preview

__all__ = [
    "to_json_text",
    "preview",
]
