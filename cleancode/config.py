"""
Configuration module for the MCP server.
"""
import os
from dotenv import load_dotenv
from . import __version__

# Load environment variables
load_dotenv()

# Server identity
SERVER_NAME = "clean-code-server"
SERVER_VERSION = __version__
TOOL_NAME = "cleancode"

# Transport settings
SUPPORTED_TRANSPORTS = ("stdio", "streamable-http", "sse")
TRANSPORT = os.getenv("CLEANCODE_TRANSPORT", "stdio").strip().lower()
HOST = os.getenv("CLEANCODE_HOST", "0.0.0.0")
PORT = int(os.getenv("CLEANCODE_PORT", "8085"))

# Logging settings
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
DISABLE_STEP_LOGGING = os.getenv("DISABLE_STEP_LOGGING", "false").lower() == "true"
LOG_PREVIEW_CHARS = 200
