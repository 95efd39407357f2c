"""
Utility functions for the MCP server.
"""
import json
import logging
from typing import Any, Dict

from ..config import LOG_PREVIEW_CHARS

logger = logging.getLogger(__name__)


def to_json_text(payload: Dict[str, Any]) -> str:
    """Serialize a tool payload the way every response is rendered: 2-space indented JSON."""
    return json.dumps(payload, indent=2)


def preview(text: str, limit: int = LOG_PREVIEW_CHARS) -> str:
    """Shorten ``text`` for a log line, marking the cut with an ellipsis."""
    if len(text) > limit:
        return f"{text[:limit]}..."
    return text
