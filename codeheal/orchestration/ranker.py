"""
Fix aggregation: merge, de-duplicate and rank candidate fixes.
"""

from __future__ import annotations

from typing import Iterable

from codeheal.schema.fix import CandidateFix

__all__ = ("rank_fixes",)


def _edit_signature(fix: CandidateFix) -> tuple:
    return tuple(edit.model_dump_json() for edit in fix.edits)


def rank_fixes(*batches: Iterable[CandidateFix]) -> list[CandidateFix]:
    """
    Concatenate candidate batches in emission order and rank them.

    Fixes without edits are dropped. Ordering is by descending confidence;
    the sort is stable so ties keep emission order. Of several fixes with
    the same edit sequence only the highest-ranked survives.
    """
    merged = [fix for batch in batches for fix in batch if fix.edits]
    merged.sort(key=lambda fix: fix.confidence, reverse=True)

    seen: set[tuple] = set()
    ranked: list[CandidateFix] = []
    for fix in merged:
        signature = _edit_signature(fix)
        if signature in seen:
            continue
        seen.add(signature)
        ranked.append(fix)
    return ranked
