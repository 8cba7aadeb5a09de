"""Abstract base class for fix generators."""

from __future__ import annotations

from abc import ABC, abstractmethod

from codeheal.schema.defect import Defect
from codeheal.schema.fix import CandidateFix, GeneratorKind


class FixGenerator(ABC):
    """Strategy interface: propose candidate fixes for one defect."""

    kind: GeneratorKind

    @property
    def name(self) -> str:
        return self.kind.value

    @abstractmethod
    async def generate(self, defect: Defect, text: str) -> list[CandidateFix]:
        """Return zero or more candidates against the current ``text`` snapshot."""
