"""
Tests for the code mutator's edit semantics.
"""

import pytest

from codeheal.orchestration.mutator import EditError, apply_edits, apply_fix
from codeheal.schema.defect import Position
from codeheal.schema.fix import CandidateFix, EditKind, GeneratorKind, TextEdit


def _pos(line, column=1):
    return Position(line=line, column=column)


class TestInsert:
    def test_insert_inside_line(self):
        edit = TextEdit(kind=EditKind.insert, start=_pos(1, 4), text="XY")
        assert apply_edits("abcdef", [edit]) == "abcXYdef"

    def test_insert_new_line_at_top(self):
        edit = TextEdit(kind=EditKind.insert, start=_pos(1), text="import os\n")
        assert apply_edits("print(os.sep)\n", [edit]) == "import os\nprint(os.sep)\n"

    def test_insert_one_past_last_line_appends(self):
        edit = TextEdit(kind=EditKind.insert, start=_pos(3), text="c")
        assert apply_edits("a\nb", [edit]) == "a\nb\nc"

    def test_insert_column_is_clamped(self):
        edit = TextEdit(kind=EditKind.insert, start=_pos(1, 99), text="!")
        assert apply_edits("abc", [edit]) == "abc!"

    def test_insert_beyond_append_position_raises(self):
        edit = TextEdit(kind=EditKind.insert, start=_pos(4), text="x")
        with pytest.raises(EditError):
            apply_edits("a\nb", [edit])


class TestDelete:
    def test_delete_whole_line(self):
        edit = TextEdit(kind=EditKind.delete, start=_pos(2))
        assert apply_edits("a\nb\nc", [edit]) == "a\nc"

    def test_delete_only_line_leaves_empty_text(self):
        edit = TextEdit(kind=EditKind.delete, start=_pos(1))
        assert apply_edits("solo", [edit]) == ""

    def test_delete_span_half_open(self):
        edit = TextEdit(kind=EditKind.delete, start=_pos(1, 2), end=_pos(1, 4))
        assert apply_edits("abcdef", [edit]) == "adef"

    def test_delete_span_across_lines(self):
        edit = TextEdit(kind=EditKind.delete, start=_pos(1, 3), end=_pos(3, 2))
        assert apply_edits("abc\ndef\nghi", [edit]) == "abhi"

    def test_delete_out_of_range_raises(self):
        edit = TextEdit(kind=EditKind.delete, start=_pos(5))
        with pytest.raises(EditError):
            apply_edits("a\nb", [edit])

    def test_end_before_start_raises(self):
        edit = TextEdit(kind=EditKind.delete, start=_pos(2, 1), end=_pos(1, 1))
        with pytest.raises(EditError):
            apply_edits("a\nb", [edit])


class TestReplace:
    def test_replace_line_content(self):
        edit = TextEdit(kind=EditKind.replace, start=_pos(2), text="B")
        assert apply_edits("a\nb\nc", [edit]) == "a\nB\nc"

    def test_replace_span(self):
        edit = TextEdit(kind=EditKind.replace, start=_pos(1, 2), end=_pos(1, 7), text="Button")
        assert apply_edits("<Buton />", [edit]) == "<Button />"

    def test_replace_with_multiline_text(self):
        edit = TextEdit(kind=EditKind.replace, start=_pos(1), text="x\ny")
        assert apply_edits("a\nb", [edit]) == "x\ny\nb"


class TestSequencing:
    def test_edits_see_previous_results(self):
        edits = [
            TextEdit(kind=EditKind.insert, start=_pos(1), text="header\n"),
            # line 2 now holds what used to be line 1
            TextEdit(kind=EditKind.replace, start=_pos(2), text="body"),
        ]
        assert apply_edits("old", edits) == "header\nbody"

    def test_input_is_untouched_and_fix_applies(self):
        text = "a\nb"
        fix = CandidateFix(
            title="drop b",
            edits=[TextEdit(kind=EditKind.delete, start=_pos(2))],
            confidence=0.9,
            source=GeneratorKind.rule_based,
        )
        assert apply_fix(text, fix) == "a"
        assert text == "a\nb"

    def test_no_edits_is_identity(self):
        assert apply_edits("same\n", []) == "same\n"
