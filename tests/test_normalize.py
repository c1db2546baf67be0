"""Tests for line normalization helpers."""

from mise.tools.normalize import normalize_lines, strip_leading_step_number


class TestNormalizeLines:
    def test_none(self):
        assert normalize_lines(None) == []

    def test_list_trimmed_and_blanks_dropped(self):
        assert normalize_lines(["  a  ", "", "b", "   ", None]) == ["a", "b"]

    def test_non_string_items_stringified(self):
        assert normalize_lines([1, " 2 "]) == ["1", "2"]

    def test_blob_any_line_endings(self):
        assert normalize_lines("a\r\nb\n\nc\rd") == ["a", "b", "c", "d"]

    def test_blob_whitespace_only(self):
        assert normalize_lines("  \n\t\n") == []

    def test_order_preserved(self):
        assert normalize_lines(["3", "1", "2"]) == ["3", "1", "2"]


class TestStripLeadingStepNumber:
    def test_numbered_markers(self):
        assert strip_leading_step_number("1. Preheat oven") == "Preheat oven"
        assert strip_leading_step_number("3) Stir") == "Stir"
        assert strip_leading_step_number("4 - Serve") == "Serve"
        assert strip_leading_step_number("  12: Rest") == "Rest"

    def test_step_prefix(self):
        assert strip_leading_step_number("Step 2: Mix") == "Mix"
        assert strip_leading_step_number("STEP 5. Bake") == "Bake"

    def test_decimal_is_not_a_step_number(self):
        assert strip_leading_step_number("1.5 cups water") == "1.5 cups water"

    def test_plain_quantity_untouched(self):
        assert strip_leading_step_number("2 eggs") == "2 eggs"

    def test_unnumbered_untouched(self):
        assert strip_leading_step_number("Preheat oven") == "Preheat oven"

    def test_number_only_kept(self):
        assert strip_leading_step_number("1.") == "1."
