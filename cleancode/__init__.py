"""
Clean code planning MCP server.
"""
__version__ = "0.1.0"
