"""
Services package for the MCP server.
"""
from .planning_service import CodePlanningEngine, CodePlanningService

__all__ = [
    "CodePlanningEngine",
    "CodePlanningService",
]
