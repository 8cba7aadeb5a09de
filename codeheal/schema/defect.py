"""
Defect models reported by oracles.
"""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class Severity(StrEnum):
    error = "error"
    warning = "warning"
    info = "info"


class Position(BaseModel):
    """A 1-based line/column location in one snapshot of a text buffer."""

    model_config = ConfigDict(frozen=True)

    line: int = Field(ge=1)
    column: int = Field(ge=1, default=1)


class Defect(BaseModel):
    """A single reported problem. Identified only by structural equality."""

    model_config = ConfigDict(frozen=True)

    message: str
    severity: Severity = Severity.error
    position: Position | None = None
    rule: str | None = None
    fixable: bool | None = None

    @property
    def line(self) -> int | None:
        return self.position.line if self.position else None

    @property
    def column(self) -> int | None:
        return self.position.column if self.position else None
