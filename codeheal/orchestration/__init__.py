"""Healing orchestration package: analyze→generate→apply→assess loop."""

from codeheal.orchestration.assessor import ImprovementAssessor
from codeheal.orchestration.convergence import healing_confidence, should_stop
from codeheal.orchestration.mutator import EditError, apply_edits, apply_fix
from codeheal.orchestration.orchestrator import apply_fixes, auto_heal, get_fix_suggestions, heal_batch
from codeheal.orchestration.ranker import rank_fixes

__all__ = (
    "EditError",
    "ImprovementAssessor",
    "apply_edits",
    "apply_fix",
    "apply_fixes",
    "auto_heal",
    "get_fix_suggestions",
    "heal_batch",
    "healing_confidence",
    "rank_fixes",
    "should_stop",
)
