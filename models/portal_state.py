"""
Pydantic models for portal session state and solve-cycle bookkeeping.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional
from enum import Enum


class PortalState(BaseModel):
    """
    Normalized view of one portal page.
    Replaced wholesale after every round trip, never mutated.
    """
    model_config = ConfigDict(frozen=True)

    challenge_present: bool
    session_id: str = Field(min_length=1)
    status_message: Optional[str] = None


class SolveAttempt(BaseModel):
    """One fetch-and-decode try. Either a solution or a failure reason is set."""
    model_config = ConfigDict(frozen=True)

    attempt_index: int = Field(ge=1)
    solution: Optional[str] = None
    reason: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.solution is not None


class CycleOutcome(str, Enum):
    """Terminal result of one polling cycle."""
    NOT_REQUIRED = "not_required"
    SOLVED = "solved"


class CycleReport(BaseModel):
    """What a polling cycle did, reported upward to the runner."""
    outcome: CycleOutcome
    final_state: PortalState
    attempts: List[SolveAttempt] = Field(default_factory=list)
    submissions: int = 0
