"""
Pytest configuration for codeheal.

Ensures the repository root is importable without an editable install and
provides small deterministic oracles for driving healing sessions.
"""

from __future__ import annotations

import re
import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parent.parent

if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from codeheal.core.tuning import HealingConfig  # noqa: E402
from codeheal.schema.defect import Defect, Position, Severity  # noqa: E402


class LineOracle:
    """One defect per non-blank line; deleting any line removes one defect."""

    def __init__(self, rule: str = "unused-binding", severity: Severity = Severity.error):
        self.rule = rule
        self.severity = severity
        self.calls = 0

    def validate(self, text: str) -> list[Defect]:
        self.calls += 1
        return [
            Defect(
                message=f"'{line.strip()}' is declared but never used",
                severity=self.severity,
                position=Position(line=n, column=1),
                rule=self.rule,
                fixable=True,
            )
            for n, line in enumerate(text.split("\n"), 1)
            if line.strip()
        ]


class PatternOracle:
    """A defect for every line matching ``pattern``."""

    def __init__(self, pattern: str, rule: str | None, message: str = "defect", severity: Severity = Severity.error):
        self.pattern = re.compile(pattern)
        self.rule = rule
        self.message = message
        self.severity = severity
        self.calls = 0

    def validate(self, text: str) -> list[Defect]:
        self.calls += 1
        return [
            Defect(
                message=self.message,
                severity=self.severity,
                position=Position(line=n, column=1),
                rule=self.rule,
            )
            for n, line in enumerate(text.split("\n"), 1)
            if self.pattern.search(line)
        ]


class DepthOracle(LineOracle):
    """
    Like LineOracle, but every message carries the current line count, so
    each accepted fix replaces all remaining defects with different ones.
    """

    def validate(self, text: str) -> list[Defect]:
        depth = len([line for line in text.split("\n") if line.strip()])
        return [
            defect.model_copy(update={"message": f"{defect.message} (depth {depth})"})
            for defect in super().validate(text)
        ]


@pytest.fixture
def config() -> HealingConfig:
    """Offline tuning: no AI generator, short timeouts."""
    return HealingConfig(use_ai=False, oracle_timeout_seconds=2.0, generator_timeout_seconds=2.0)
