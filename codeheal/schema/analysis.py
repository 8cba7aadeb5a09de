"""
Defect taxonomy and healing report models.
"""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, Field

from codeheal.schema.healing import HealingResult


class DefectAnalysis(BaseModel):
    """Read-only statistics derived from one defect list."""

    total_defects: int = 0
    by_category: dict[str, int] = Field(default_factory=dict)
    by_severity: dict[str, int] = Field(default_factory=dict)
    by_fixability: dict[str, int] = Field(default_factory=dict)
    repeated_patterns: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)


class HealingReport(BaseModel):
    """Serializable summary of a healing session for external reporting."""

    session_id: str
    generated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    result: HealingResult
    initial_analysis: DefectAnalysis
    final_analysis: DefectAnalysis
    diff: str = ""
