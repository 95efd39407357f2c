"""
Data model for code planning sessions: the recorded step and the outcome
of recording one.
"""
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field


class ValidationError(ValueError):
    """A required planning field is missing or has the wrong type."""


class PlanningStep(BaseModel):
    """
    One recorded unit of a planning session.

    Only ``code_reflection``, ``step_number``, ``total_steps`` and
    ``next_step_needed`` are checked before a step is stored, and only
    loosely: ``step_number`` and ``total_steps`` may hold any non-zero number,
    floats and negatives included. The remaining fields are advisory: they are
    kept exactly as the caller sent them, whatever their type, and nothing
    verifies that ``revises_step`` or ``branch_from_step`` point at a step
    that exists.

    Steps are built with ``model_construct``, so the annotations below describe
    the expected shape and are not enforced.
    """
    code_reflection: str
    step_number: int
    total_steps: int
    next_step_needed: bool
    is_revision: Optional[bool] = None
    revises_step: Optional[int] = None
    branch_from_step: Optional[int] = None
    branch_id: Optional[str] = None
    needs_more_steps: Optional[bool] = None

    @property
    def registers_branch(self) -> bool:
        """Both branch fields are set, so the step belongs to ``branch_id``."""
        return bool(self.branch_from_step and self.branch_id)


class StepRecorded(BaseModel):
    """Successful outcome of recording a step."""
    step_number: int
    total_steps: int
    next_step_needed: bool
    branches: List[str] = Field(default_factory=list)
    history_length: int

    @property
    def is_error(self) -> bool:
        return False

    def to_payload(self) -> Dict[str, Any]:
        return {
            "stepNumber": self.step_number,
            "totalSteps": self.total_steps,
            "nextStepNeeded": self.next_step_needed,
            "branches": list(self.branches),
            "historyLength": self.history_length,
        }


class StepFailed(BaseModel):
    """Failed outcome; session state was left untouched by validation failures."""
    message: str

    @property
    def is_error(self) -> bool:
        return True

    def to_payload(self) -> Dict[str, Any]:
        return {"error": self.message, "status": "failed"}


RecordResult = Union[StepRecorded, StepFailed]
