"""
Code Planning Service for step-by-step, revisable, and branchable design sessions.
Records planning steps, keeps the session history and named alternatives, and
reports a running summary back to the caller.
"""
import math
import threading
from collections.abc import Mapping
from typing import Any, Dict, List, Optional, Tuple
import logging
from fastmcp.exceptions import ToolError
from fastmcp.tools import Tool
from mcp.types import TextContent
from ..config import DISABLE_STEP_LOGGING, TOOL_NAME
from ..models.base import RichToolDescription, ToolService
from ..models.planning import PlanningStep, RecordResult, StepFailed, StepRecorded, ValidationError
from ..utils.helpers import preview, to_json_text

logger = logging.getLogger(__name__)

# Advertised to clients only. Arguments reach the engine unchanged, so its
# checks decide what is rejected and with which message.
PLANNING_INPUT_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "thought": {"type": "string", "description": "Your current code planning step"},
        "nextThoughtNeeded": {"type": "boolean", "description": "Whether another code planning step is needed"},
        "thoughtNumber": {"type": "integer", "description": "Current step number", "minimum": 1},
        "totalThoughts": {"type": "integer", "description": "Estimated total steps needed", "minimum": 1},
        "isRevision": {"type": "boolean", "description": "Whether this revises a previous planning step"},
        "revisesThought": {"type": "integer", "description": "Which step is being reconsidered", "minimum": 1},
        "branchFromThought": {
            "type": "integer",
            "description": "Branching point step number for alternative approach",
            "minimum": 1,
        },
        "branchId": {"type": "string", "description": "Alternative implementation identifier"},
        "needsMoreThoughts": {"type": "boolean", "description": "If more planning steps are needed"},
    },
    "required": ["thought", "nextThoughtNeeded", "thoughtNumber", "totalThoughts"],
}


def _is_present_number(value: Any) -> bool:
    # Zero and NaN count as missing, like any other falsy value.
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    if isinstance(value, float) and math.isnan(value):
        return False
    return value != 0


class CodePlanningEngine:
    """Session tracker for code planning steps, revisions and alternative branches."""

    def __init__(self, log_steps: Optional[bool] = None):
        self._history: List[PlanningStep] = []
        self._branches: Dict[str, List[PlanningStep]] = {}
        self._lock = threading.Lock()
        self.log_steps = (not DISABLE_STEP_LOGGING) if log_steps is None else log_steps

    @property
    def history(self) -> Tuple[PlanningStep, ...]:
        return tuple(self._history)

    @property
    def branches(self) -> Dict[str, Tuple[PlanningStep, ...]]:
        return {branch_id: tuple(steps) for branch_id, steps in self._branches.items()}

    def reset(self):
        """Forget every recorded step and branch."""
        with self._lock:
            self._history.clear()
            self._branches.clear()

    def validate_input(self, data: Any) -> PlanningStep:
        """
        Turn an unstructured request into a ``PlanningStep``.

        Only the four required fields are checked. Optional fields are copied
        through as-is, which is why the model is built with ``model_construct``.
        """
        if not isinstance(data, Mapping):
            data = {}
        reflection = data.get("codeReflection")
        if not reflection or not isinstance(reflection, str):
            raise ValidationError("Invalid codeReflection: must be a string")
        if not _is_present_number(data.get("stepNumber")):
            raise ValidationError("Invalid stepNumber: must be a number")
        if not _is_present_number(data.get("totalSteps")):
            raise ValidationError("Invalid totalSteps: must be a number")
        if not isinstance(data.get("nextStepNeeded"), bool):
            raise ValidationError("Invalid nextStepNeeded: must be a boolean")

        return PlanningStep.model_construct(
            code_reflection=reflection,
            step_number=data["stepNumber"],
            total_steps=data["totalSteps"],
            next_step_needed=data["nextStepNeeded"],
            is_revision=data.get("isRevision"),
            revises_step=data.get("revisesStep"),
            branch_from_step=data.get("branchFromStep"),
            branch_id=data.get("branchId"),
            needs_more_steps=data.get("needsMoreSteps"),
        )

    def format_step(self, step: PlanningStep) -> str:
        if step.is_revision:
            prefix = "Revision"
            context = f" (revising step {step.revises_step})"
        elif step.branch_from_step:
            prefix = "Alternative"
            context = f" (from step {step.branch_from_step}, ID: {step.branch_id})"
        else:
            prefix = "Code Step"
            context = ""
        header = f"{prefix} {step.step_number}/{step.total_steps}{context}"
        border_len = max(len(header), len(step.code_reflection)) + 4
        border = "─" * border_len
        header_line = header.ljust(border_len - 2)
        reflection_line = step.code_reflection.ljust(border_len - 2)
        return f"""
┌{border}┐
│ {header_line} │
├{border}┤
│ {reflection_line} │
└{border}┘"""

    def _emit(self, step: PlanningStep):
        if not self.log_steps:
            return
        try:
            logger.info(self.format_step(step))
        except Exception:
            logger.exception(f"Could not render planning step {step.step_number}")

    def record_step(self, data: Any) -> RecordResult:
        """
        Validate and record one planning step.

        Never raises: validation problems and unexpected errors both come back
        as ``StepFailed``. A step whose number overtakes the estimate raises
        the estimate to match before it is stored.
        """
        try:
            step = self.validate_input(data)
            with self._lock:
                if step.step_number > step.total_steps:
                    step.total_steps = step.step_number
                self._history.append(step)
                if step.registers_branch:
                    self._branches.setdefault(step.branch_id, []).append(step)
                branch_ids = list(self._branches.keys())
                history_length = len(self._history)
            self._emit(step)
            return StepRecorded.model_construct(
                step_number=step.step_number,
                total_steps=step.total_steps,
                next_step_needed=step.next_step_needed,
                branches=branch_ids,
                history_length=history_length,
            )
        except ValidationError as e:
            logger.warning(f"Rejected planning step: {e}")
            return StepFailed(message=str(e))
        except Exception as e:
            logger.exception("Unexpected error while recording planning step")
            return StepFailed(message=str(e))


class CodePlanningService(ToolService):
    """Tool service exposing the code planning session to MCP clients."""

    def __init__(self, engine: Optional[CodePlanningEngine] = None):
        super().__init__(TOOL_NAME)
        self.engine = engine or CodePlanningEngine()

    def get_tool_descriptions(self) -> Dict[str, RichToolDescription]:
        """Get tool descriptions for the code planning service."""
        return {
            TOOL_NAME: RichToolDescription(
                description=(
                    "A detailed tool for planning and creating clean, well-structured code with comprehensive English comments.\n"
                    "This tool helps analyze coding problems through a flexible planning process that focuses on code quality and readability.\n"
                    "Each step can address different aspects of clean code principles and best practices.\n\n"
                    "Key features:\n"
                    "- Plan your code architecture step by step\n"
                    "- Revise previous design decisions as requirements become clearer\n"
                    "- Branch into alternative implementation strategies\n"
                    "- Focus on a different aspect of clean code in each step\n"
                    "- Adjust totalThoughts up or down as you progress\n\n"
                    "Parameters explained:\n"
                    "- thought: Your current code planning step, which can include architecture and design considerations, "
                    "module and component organization, function signatures, documentation strategy, error handling, "
                    "performance, testing strategy, revisions of earlier decisions, or alternative approaches\n"
                    "- nextThoughtNeeded: True if you need more planning steps before finalizing\n"
                    "- thoughtNumber: Current step number in sequence\n"
                    "- totalThoughts: Current estimate of steps needed\n"
                    "- isRevision: If this step revises previous thinking\n"
                    "- revisesThought: If isRevision is true, which step number is being reconsidered\n"
                    "- branchFromThought: If branching, which step number is the branching point\n"
                    "- branchId: Identifier for the current implementation alternative\n"
                    "- needsMoreThoughts: If reaching the end but realizing more planning is needed\n\n"
                    "You should:\n"
                    "1. Start with high-level architecture and design considerations\n"
                    "2. Break down complex functionality into smaller, modular components\n"
                    "3. Plan function signatures, interfaces, and data structures\n"
                    "4. Consider error handling and edge cases\n"
                    "5. Draft comments that explain the reasoning behind the code\n"
                    "6. Follow SOLID principles and other clean code practices\n"
                    "7. Prioritize readability and maintainability over cleverness\n"
                    "8. Plan for testability from the beginning\n"
                    "9. Only set nextThoughtNeeded to false when the code planning is complete\n"
                    "10. Produce code that is clear, concise, and well-documented in English"
                ),
                use_when=(
                    "Before writing complex code that needs careful planning, when designing a new feature or refactoring "
                    "existing code, when code structure and organization are critical, or when breaking complex "
                    "functionality into modular, testable components."
                ),
                side_effects=(
                    "Keeps an in-memory history of planning steps and named alternatives for the life of the server "
                    "process, and logs each step as a framed block unless DISABLE_STEP_LOGGING is set."
                )
            )
        }

    def register_tools(self, mcp):
        """Register the code planning tool with the MCP server."""
        self.logger.info("Registering code planning tools...")

        async def cleancode(
            thought: Any = None,
            nextThoughtNeeded: Any = None,
            thoughtNumber: Any = None,
            totalThoughts: Any = None,
            isRevision: Any = None,
            revisesThought: Any = None,
            branchFromThought: Any = None,
            branchId: Any = None,
            needsMoreThoughts: Any = None,
        ) -> List[TextContent]:
            logger.info(f"cleancode called (planning_service) with thought_number={thoughtNumber}, total_thoughts={totalThoughts}")
            result = self.engine.record_step({
                "codeReflection": thought,
                "stepNumber": thoughtNumber,
                "totalSteps": totalThoughts,
                "nextStepNeeded": nextThoughtNeeded,
                "isRevision": isRevision,
                "revisesStep": revisesThought,
                "branchFromStep": branchFromThought,
                "branchId": branchId,
                "needsMoreSteps": needsMoreThoughts,
            })
            text = to_json_text(result.to_payload())
            if result.is_error:
                logger.error(f"cleancode error (planning_service): {result.message}")
                raise ToolError(text)
            logger.info(f"cleancode output (planning_service): {preview(text)}")
            return [TextContent(type="text", text=text)]

        tool = Tool.from_function(cleancode, name=TOOL_NAME, description=self.describe(TOOL_NAME))
        mcp.add_tool(tool.model_copy(update={"parameters": PLANNING_INPUT_SCHEMA}))
        self.logger.info("Code planning tools registered successfully")
