"""
Healing reports: analysis before/after, unified diff, JSON persistence.
"""

from __future__ import annotations

import os
from difflib import unified_diff
from pathlib import Path

import aiofiles

from codeheal.core.config import settings
from codeheal.core.log import logger
from codeheal.core.tuning import HealingConfig, get_healing_config
from codeheal.diagnosis.analyzer import analyze_defects
from codeheal.schema.analysis import HealingReport
from codeheal.schema.healing import HealingResult

__all__ = ("build_report", "save_report", "text_diff")


def text_diff(original: str, modified: str, name: str = "source") -> str:
    diff = unified_diff(
        original.splitlines(keepends=True),
        modified.splitlines(keepends=True),
        fromfile=f"a/{name}",
        tofile=f"b/{name}",
    )
    return "".join(diff)


def build_report(result: HealingResult, name: str = "source", config: HealingConfig | None = None) -> HealingReport:
    config = config or get_healing_config()
    final_defects = result.final_oracle_result.defects if result.final_oracle_result else []
    initial_defects = result.steps[0].defects if result.steps else final_defects

    def _analyze(defects):
        return analyze_defects(
            defects,
            repeated_threshold=config.repeated_pattern_threshold,
            many_errors_threshold=config.many_errors_threshold,
        )

    return HealingReport(
        session_id=result.session_id,
        result=result,
        initial_analysis=_analyze(initial_defects),
        final_analysis=_analyze(final_defects),
        diff=text_diff(result.original_text, result.healed_text, name),
    )


async def save_report(report: HealingReport, directory: str | Path | None = None) -> Path:
    """Persist ``report`` as ``<directory>/<session_id>.json`` and return the path."""
    report_path = Path(directory or settings.REPORT_DIR) / f"{report.session_id}.json"
    os.makedirs(report_path.parent, exist_ok=True)

    async with aiofiles.open(report_path, "w") as f:
        await f.write(report.model_dump_json(indent=2))

    logger.info(f"Session {report.session_id}: report written to {report_path}")
    return report_path
