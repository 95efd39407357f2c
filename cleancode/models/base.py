"""
Base models and service plumbing shared by the planning server.
"""
from typing import Optional, Dict, List
from abc import ABC, abstractmethod
import openai
import logging

logger = logging.getLogger(__name__)


class RichToolDescription(openai.BaseModel):
    """Rich tool description model for MCP server compatibility."""
    description: str
    use_when: str
    side_effects: Optional[str] = None


class ToolService(ABC):
    """Base class for services that contribute tools to the server."""

    def __init__(self, name: str):
        self.name = name
        self.logger = logging.getLogger(f"ToolService.{name}")

    @abstractmethod
    def get_tool_descriptions(self) -> Dict[str, RichToolDescription]:
        """Get tool descriptions for this service, keyed by tool name."""
        pass

    @abstractmethod
    def register_tools(self, mcp):
        """Register tools with the MCP server."""
        pass

    def describe(self, tool_name: str) -> str:
        """Serialized description advertised to remote callers for ``tool_name``."""
        descriptions = self.get_tool_descriptions()
        if tool_name not in descriptions:
            raise KeyError(f"Service {self.name} has no tool named {tool_name}")
        return descriptions[tool_name].model_dump_json()


class ToolRegistry:
    """Central registry for the server's tool services."""

    def __init__(self):
        self.services: Dict[str, ToolService] = {}
        self.logger = logging.getLogger("ToolRegistry")

    def register_service(self, service: ToolService):
        """Register a tool service. A later service replaces one with the same name."""
        if service.name in self.services:
            self.logger.warning(f"Replacing already registered service: {service.name}")
        self.services[service.name] = service
        self.logger.info(f"Registered service: {service.name}")

    def get_all_services(self) -> List[ToolService]:
        return list(self.services.values())

    def tool_names(self) -> List[str]:
        """Names of every tool the registered services advertise."""
        names: List[str] = []
        for service in self.get_all_services():
            names.extend(service.get_tool_descriptions().keys())
        return names

    def register_all_tools(self, mcp):
        """Register all tools from all services; the first failure aborts startup."""
        for service in self.get_all_services():
            try:
                service.register_tools(mcp)
                self.logger.info(f"Successfully registered tools for service: {service.name}")
            except Exception as e:
                self.logger.error(f"Failed to register tools for service {service.name}: {e}")
                raise
