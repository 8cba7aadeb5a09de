"""
Text edit and candidate fix models.
"""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field
from ulid import ULID

from codeheal.schema.defect import Position


class EditKind(StrEnum):
    insert = "insert"
    delete = "delete"
    replace = "replace"


class GeneratorKind(StrEnum):
    rule_based = "rule_based"
    schema_based = "schema_based"
    external_ai = "external_ai"


class TextEdit(BaseModel):
    """
    One edit against a specific text snapshot.

    ``end`` is exclusive. Without ``end``, delete removes the whole
    ``start.line`` and replace rewrites its content.
    """

    model_config = ConfigDict(frozen=True)

    kind: EditKind
    start: Position
    end: Position | None = None
    text: str | None = None


class CandidateFix(BaseModel):
    """A proposed, not-yet-applied set of edits addressing one defect."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(ULID()))
    title: str
    description: str = ""
    edits: list[TextEdit] = Field(default_factory=list)
    confidence: float = Field(ge=0.0, le=1.0)
    source: GeneratorKind


class AIFixSuggestion(BaseModel):
    title: str = Field(description="Brief fix title.")
    description: str = Field(default="", description="What the fix changes.")
    confidence: float = Field(ge=0.0, le=1.0, description="Model-reported confidence.")
    edits: list[TextEdit] = Field(default_factory=list, description="Ordered edits.")


class AIFixResponse(BaseModel):
    suggestions: list[AIFixSuggestion] = Field(default_factory=list, description="Ranked fix suggestions.")
