"""
Convergence detection: decides when the healing loop should stop and
how much to trust its result.
"""

from __future__ import annotations

from codeheal.schema.healing import HealingStep, StopReason

__all__ = ("healing_confidence", "should_stop")


def should_stop(
    steps: list[HealingStep],
    max_iterations: int,
    defects_remaining: int,
) -> tuple[bool, StopReason | None]:
    """
    Decide whether to stop after the latest recorded step.

    Returns (should_stop, reason).
    """
    if not steps:
        return False, None

    current = steps[-1]

    # 1. Nothing could be applied
    if current.fixes_applied == 0:
        return True, StopReason.no_progress

    # 2. The accepted fix cleaned the text
    if defects_remaining == 0:
        return True, StopReason.converged

    # 3. Out of iterations
    if current.iteration >= max_iterations:
        return True, StopReason.max_iterations

    return False, None


def healing_confidence(success: bool, total_defects: int, total_fixes: int, steps: int) -> float:
    """
    0.3 for a result that is not clean, 1.0 for input that was never broken,
    otherwise the fix/defect ratio minus 0.1 per extra step, floored at 0.5.
    """
    if not success:
        return 0.3
    if total_defects == 0:
        return 1.0
    ratio = total_fixes / total_defects - 0.1 * (steps - 1)
    return max(0.5, min(1.0, ratio))
