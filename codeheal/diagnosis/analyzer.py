"""
Defect analysis: taxonomy statistics, repeated patterns and recommendations.

Pure functions. Output feeds reporting and defect prioritization, never
the stopping decisions of the healing loop.
"""

from __future__ import annotations

import re
from collections import Counter
from typing import Iterable

from codeheal.schema.analysis import DefectAnalysis
from codeheal.schema.defect import Defect, Severity

__all__ = ("analyze_defects", "categorize", "prioritize_defects")

_TS_CODE_RE = re.compile(r"^TS\d+$")
_LINT_CODE_RE = re.compile(r"^[A-Z]+\d+$")

_SEVERITY_ORDER = {Severity.error: 0, Severity.warning: 1, Severity.info: 2}


def categorize(defect: Defect) -> str:
    rule = defect.rule
    if not rule:
        return "general"
    if "/" in rule:
        return rule.split("/", 1)[0]
    if _TS_CODE_RE.match(rule):
        return "typescript"
    lowered = rule.lower()
    if "react" in lowered:
        return "react"
    if "hook" in lowered:
        return "hooks"
    if _LINT_CODE_RE.match(rule):
        return "lint"
    return "general"


def prioritize_defects(defects: Iterable[Defect]) -> list[Defect]:
    """Errors first, then warnings, then info; report order within a severity."""
    return sorted(defects, key=lambda d: _SEVERITY_ORDER[d.severity])


def analyze_defects(
    defects: list[Defect],
    repeated_threshold: int = 3,
    many_errors_threshold: int = 5,
) -> DefectAnalysis:
    by_category = Counter(categorize(d) for d in defects)
    by_severity = {s.value: 0 for s in Severity}
    for d in defects:
        by_severity[d.severity.value] += 1
    fixable = sum(1 for d in defects if d.fixable)
    by_fixability = {"fixable": fixable, "unfixable": len(defects) - fixable}

    rule_counts = Counter(d.rule for d in defects if d.rule)
    repeated = [
        f"Repeated {rule} defects ({count} occurrences)"
        for rule, count in rule_counts.most_common()
        if count > repeated_threshold
    ]

    recommendations: list[str] = []
    if by_severity[Severity.error.value] > many_errors_threshold:
        recommendations.append("Many errors reported: review the overall code structure before fixing individual defects")
    if len(defects) >= 2:
        category, count = by_category.most_common(1)[0]
        if count > len(defects) / 2:
            recommendations.append(f"Most defects are {category} issues: focus on {category} fixes first")
    if fixable > by_fixability["unfixable"]:
        recommendations.append("Most defects are automatically fixable: run auto-heal")
    for rule, count in rule_counts.most_common():
        if count > repeated_threshold:
            recommendations.append(f"Fix all {rule} defects in bulk")

    return DefectAnalysis(
        total_defects=len(defects),
        by_category=dict(by_category),
        by_severity=by_severity,
        by_fixability=by_fixability,
        repeated_patterns=repeated,
        recommendations=recommendations,
    )
