"""
Tests for the defect analyzer and convergence helpers.
"""

import pytest

from codeheal.diagnosis.analyzer import analyze_defects, categorize, prioritize_defects
from codeheal.orchestration.convergence import healing_confidence, should_stop
from codeheal.schema.defect import Defect, Severity
from codeheal.schema.healing import HealingStep, StopReason


def _d(rule=None, severity=Severity.error, fixable=None, message="m"):
    return Defect(message=message, rule=rule, severity=severity, fixable=fixable)


class TestCategorize:
    @pytest.mark.parametrize(
        "rule,category",
        [
            ("@typescript-eslint/no-unused-vars", "@typescript-eslint"),
            ("react-hooks/exhaustive-deps", "react-hooks"),
            ("TS2304", "typescript"),
            ("jsx-react-scope", "react"),
            ("use-hook-rules", "hooks"),
            ("F401", "lint"),
            ("W291", "lint"),
            ("no-unused-vars", "general"),
            (None, "general"),
        ],
    )
    def test_categories(self, rule, category):
        assert categorize(_d(rule)) == category


class TestAnalyzeDefects:
    def test_empty(self):
        analysis = analyze_defects([])
        assert analysis.total_defects == 0
        assert analysis.by_severity == {"error": 0, "warning": 0, "info": 0}
        assert analysis.by_fixability == {"fixable": 0, "unfixable": 0}
        assert analysis.recommendations == []

    def test_counts(self):
        defects = [
            _d("F401", Severity.warning, fixable=True),
            _d("TS2304", Severity.error, fixable=True),
            _d(None, Severity.info),
        ]
        analysis = analyze_defects(defects)
        assert analysis.total_defects == 3
        assert analysis.by_category == {"lint": 1, "typescript": 1, "general": 1}
        assert analysis.by_severity == {"error": 1, "warning": 1, "info": 1}
        assert analysis.by_fixability == {"fixable": 2, "unfixable": 1}

    def test_repeated_pattern_above_threshold(self):
        analysis = analyze_defects([_d("F401")] * 4 + [_d("W291")] * 3)
        assert analysis.repeated_patterns == ["Repeated F401 defects (4 occurrences)"]
        assert "Fix all F401 defects in bulk" in analysis.recommendations

    def test_recommendations(self):
        defects = [_d("TS2304", fixable=True) for _ in range(6)]
        recommendations = analyze_defects(defects).recommendations
        assert any("review the overall code structure" in r for r in recommendations)
        assert any("focus on typescript" in r for r in recommendations)
        assert any("run auto-heal" in r for r in recommendations)

    def test_single_defect_has_no_category_focus(self):
        recommendations = analyze_defects([_d("TS2304")]).recommendations
        assert not any("focus" in r for r in recommendations)

    def test_prioritize_is_stable_by_severity(self):
        defects = [
            _d(severity=Severity.info, message="i"),
            _d(severity=Severity.error, message="e1"),
            _d(severity=Severity.warning, message="w"),
            _d(severity=Severity.error, message="e2"),
        ]
        assert [d.message for d in prioritize_defects(defects)] == ["e1", "e2", "w", "i"]


class TestConvergence:
    @staticmethod
    def _step(iteration, applied):
        return HealingStep(iteration=iteration, defects_found=3, fixes_applied=applied, text_changed=bool(applied))

    def test_no_steps(self):
        assert should_stop([], 5, 3) == (False, None)

    def test_no_progress(self):
        assert should_stop([self._step(1, 0)], 5, 3) == (True, StopReason.no_progress)

    def test_converged(self):
        assert should_stop([self._step(1, 1)], 5, 0) == (True, StopReason.converged)

    def test_max_iterations(self):
        assert should_stop([self._step(5, 1)], 5, 2) == (True, StopReason.max_iterations)

    def test_continue(self):
        assert should_stop([self._step(2, 1)], 5, 2) == (False, None)

    @pytest.mark.parametrize(
        "args,expected",
        [
            ((False, 4, 2, 2), 0.3),
            ((True, 0, 0, 0), 1.0),
            ((True, 1, 1, 1), 1.0),
            ((True, 4, 2, 2), 0.5),
            ((True, 3, 3, 3), 0.8),
        ],
    )
    def test_confidence(self, args, expected):
        assert healing_confidence(*args) == pytest.approx(expected)
