"""
Main MCP server implementation with modular architecture.
"""
from typing import Optional
from fastmcp import FastMCP
from .config import HOST, PORT, SERVER_NAME, SERVER_VERSION, SUPPORTED_TRANSPORTS, TRANSPORT
from .models.base import ToolRegistry
from .services.planning_service import CodePlanningEngine, CodePlanningService
import logging

logger = logging.getLogger(__name__)


class MCPServer:
    """Main MCP server class with modular tool registration."""

    def __init__(
        self,
        name: str = SERVER_NAME,
        version: str = SERVER_VERSION,
        engine: Optional[CodePlanningEngine] = None,
    ):
        logger.info(f"Initializing MCPServer with name={name}, version={version}")
        self.name = name
        self.mcp = FastMCP(name, version=version)
        self.registry = ToolRegistry()
        self.engine = engine or CodePlanningEngine()
        self._setup_services()
        self._register_all_tools()

    def _setup_services(self):
        """Setup all tool services."""
        logger.info("Setting up services...")
        self.registry.register_service(CodePlanningService(self.engine))
        logger.info("Services setup complete in MCPServer")

    def _register_all_tools(self):
        """Register all available tools with the MCP server."""
        logger.info("Registering all tools...")
        self.registry.register_all_tools(self.mcp)
        logger.info(f"All tools registered successfully: {', '.join(self.registry.tool_names())}")

    async def run(self, transport: str = TRANSPORT, host: str = HOST, port: int = PORT):
        """Run the MCP server on the configured transport."""
        if transport not in SUPPORTED_TRANSPORTS:
            raise ValueError(
                f"CLEANCODE_TRANSPORT must be one of {', '.join(SUPPORTED_TRANSPORTS)}, got {transport!r}"
            )
        if transport == "stdio":
            logger.info("Clean Code MCP Server running on stdio")
            await self.mcp.run_async("stdio")
        else:
            logger.info(f"Clean Code MCP Server running on {transport} at {host}:{port}")
            await self.mcp.run_async(transport, host=host, port=port)

    def get_mcp_instance(self) -> FastMCP:
        """Get the underlying FastMCP instance."""
        return self.mcp

    def get_registry(self) -> ToolRegistry:
        """Get the tool registry."""
        return self.registry
