"""
Schema-based fix generator: proposes known names for unknown identifiers.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Protocol, runtime_checkable

import yaml

from codeheal.core.log import logger
from codeheal.fixes.base import FixGenerator
from codeheal.schema.defect import Defect, Position
from codeheal.schema.fix import CandidateFix, EditKind, GeneratorKind, TextEdit
from codeheal.util.text import extract_quoted_name, similarity, split_lines

__all__ = ("SchemaBasedGenerator", "SchemaRegistry", "StaticSchemaRegistry")

_TRIGGERS = ("not allowed", "not found", "unknown", "does not exist")


@runtime_checkable
class SchemaRegistry(Protocol):
    def valid_names(self) -> list[str]: ...


class StaticSchemaRegistry:
    """Fixed list of valid names, optionally loaded from a YAML manifest."""

    def __init__(self, names: Iterable[str] = ()):
        self._names = list(dict.fromkeys(names))

    def valid_names(self) -> list[str]:
        return list(self._names)

    @classmethod
    def from_yaml(cls, path: str | Path) -> StaticSchemaRegistry:
        """
        Load a manifest that is either a plain list of names or a mapping
        with a ``names`` list.
        """
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or []
        if isinstance(data, dict):
            data = data.get("names", [])
        if not isinstance(data, list):
            raise ValueError(f"Schema manifest {path} must hold a list of names")
        return cls(str(name) for name in data)


def _identifier_span(line: str, name: str, column: int | None) -> tuple[int, int] | None:
    """1-based [start, end) columns of ``name`` on ``line``, preferring the reported column."""
    if column is not None and line[column - 1 :].startswith(name):
        return column, column + len(name)
    idx = line.find(name)
    if idx < 0:
        return None
    return idx + 1, idx + 1 + len(name)


class SchemaBasedGenerator(FixGenerator):
    kind = GeneratorKind.schema_based

    def __init__(self, registry: SchemaRegistry | None, threshold: float = 0.5, max_suggestions: int = 3):
        self.registry = registry
        self.threshold = threshold
        self.max_suggestions = max_suggestions

    @staticmethod
    def applies_to(defect: Defect) -> bool:
        message = defect.message.lower()
        return any(trigger in message for trigger in _TRIGGERS)

    def suggest_names(self, identifier: str) -> list[tuple[str, float]]:
        """Names scoring strictly above the threshold, best first."""
        if self.registry is None:
            return []
        scored = [
            (name, similarity(identifier, name))
            for name in self.registry.valid_names()
            if name != identifier
        ]
        kept = [item for item in scored if item[1] > self.threshold]
        kept.sort(key=lambda item: item[1], reverse=True)
        return kept[: self.max_suggestions]

    async def generate(self, defect: Defect, text: str) -> list[CandidateFix]:
        if self.registry is None or defect.line is None or not self.applies_to(defect):
            return []
        identifier = extract_quoted_name(defect.message)
        if not identifier:
            return []

        lines = split_lines(text)
        if defect.line > len(lines):
            return []
        span = _identifier_span(lines[defect.line - 1], identifier, defect.column)
        if span is None:
            logger.debug(f"Identifier '{identifier}' not found on line {defect.line}")
            return []

        start, end = span
        return [
            CandidateFix(
                title=f"Replace '{identifier}' with '{name}'",
                description=f"'{name}' is a known name {score:.0%} similar to '{identifier}'",
                edits=[
                    TextEdit(
                        kind=EditKind.replace,
                        start=Position(line=defect.line, column=start),
                        end=Position(line=defect.line, column=end),
                        text=name,
                    )
                ],
                confidence=score,
                source=self.kind,
            )
            for name, score in self.suggest_names(identifier)
        ]
