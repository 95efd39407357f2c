"""
Models package for the MCP server.
"""
from .base import (
    RichToolDescription,
    ToolService,
    ToolRegistry,
)
from .planning import (
    PlanningStep,
    RecordResult,
    StepFailed,
    StepRecorded,
    ValidationError,
)

__all__ = [
    "RichToolDescription",
    "ToolService",
    "ToolRegistry",
    "PlanningStep",
    "RecordResult",
    "StepFailed",
    "StepRecorded",
    "ValidationError",
]
