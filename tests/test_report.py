"""
Tests for healing report building and persistence.
"""

import pytest

from codeheal.orchestration import auto_heal
from codeheal.report import build_report, save_report, text_diff
from codeheal.schema.analysis import HealingReport

from conftest import PatternOracle


class TestReport:
    def test_text_diff(self):
        diff = text_diff("a\nb\n", "a\n", name="module.py")
        assert "--- a/module.py" in diff
        assert "-b" in diff

    def test_identical_texts_have_empty_diff(self):
        assert text_diff("same\n", "same\n") == ""

    @pytest.mark.asyncio
    async def test_build_report(self, config):
        oracle = PatternOracle("^unused", "F401", "'x' imported but unused")
        result = await auto_heal("unused x\nkeep\n", oracle, config=config)

        report = build_report(result, name="app.py", config=config)

        assert report.session_id == result.session_id
        assert report.initial_analysis.total_defects == 1
        assert report.initial_analysis.by_category == {"lint": 1}
        assert report.final_analysis.total_defects == 0
        assert "-unused x" in report.diff

    @pytest.mark.asyncio
    async def test_save_report(self, config, tmp_path):
        result = await auto_heal("keep\n", lambda text: [], config=config)
        report = build_report(result, config=config)

        path = await save_report(report, tmp_path / "reports")

        assert path == tmp_path / "reports" / f"{result.session_id}.json"
        loaded = HealingReport.model_validate_json(path.read_text())
        assert loaded.result.healed_text == "keep\n"
        assert loaded.result.success
