"""
Healing session models: steps, assessments and the terminal result.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, computed_field

from codeheal.schema.defect import Defect
from codeheal.schema.fix import CandidateFix


class StopReason(StrEnum):
    converged = "converged"
    no_progress = "no_progress"
    max_iterations = "max_iterations"
    oracle_failure = "oracle_failure"
    cancelled = "cancelled"
    error = "error"


class Assessment(BaseModel):
    """Before/after defect-count comparison for one candidate fix."""

    improved: bool
    defect_delta: int
    defects_before: int
    defects_after: int
    remaining: list[Defect] = Field(default_factory=list)


class HealingStep(BaseModel):
    """Snapshot of one orchestrator iteration."""

    model_config = ConfigDict(frozen=True)

    iteration: int
    defects_found: int
    fixes_applied: int
    text_changed: bool
    defects: list[Defect] = Field(default_factory=list)
    applied_fixes: list[CandidateFix] = Field(default_factory=list)


class OracleResult(BaseModel):
    """Oracle verdict on a final text."""

    model_config = ConfigDict(frozen=True)

    defects: list[Defect] = Field(default_factory=list)

    @computed_field
    @property
    def success(self) -> bool:
        return not self.defects


class HealingResult(BaseModel):
    """Terminal artifact of one healing session."""

    model_config = ConfigDict(frozen=True)

    session_id: str
    success: bool
    original_text: str
    healed_text: str
    iterations: int
    total_defects: int = 0
    total_fixes_applied: int = 0
    steps: list[HealingStep] = Field(default_factory=list)
    final_oracle_result: OracleResult | None = None
    confidence: float = Field(ge=0.0, le=1.0)
    stop_reason: StopReason
    duration_seconds: float = 0.0
    error: str | None = None
