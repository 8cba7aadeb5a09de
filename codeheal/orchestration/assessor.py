"""
Improvement assessment: keep a fix only if it lowers the defect count.
"""

from __future__ import annotations

from codeheal.diagnosis.oracle import DefectOracle, MemoizedOracle, run_oracle
from codeheal.schema.healing import Assessment

__all__ = ("ImprovementAssessor",)


class ImprovementAssessor:
    """
    Compares oracle verdicts on two texts.

    Results are memoized per text for the assessor's lifetime, which is
    one healing session.
    """

    def __init__(self, oracle: DefectOracle, timeout: float | None = None):
        self.oracle = oracle if isinstance(oracle, MemoizedOracle) else MemoizedOracle(oracle)
        self.timeout = timeout

    async def defects(self, text: str):
        return await run_oracle(self.oracle, text, self.timeout)

    async def assess(self, before: str, after: str) -> Assessment:
        defects_before = await self.defects(before)
        defects_after = await self.defects(after)
        return Assessment(
            improved=len(defects_after) < len(defects_before),
            defect_delta=len(defects_before) - len(defects_after),
            defects_before=len(defects_before),
            defects_after=len(defects_after),
            remaining=defects_after,
        )
