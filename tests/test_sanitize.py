# /tests/test_sanitize.py
"""
Unit tests for query-parameter sanitizers

Every sanitizer must be total: malformed or hostile input falls back to a
default instead of raising.
"""

import pytest

from src.utils.sanitize import (
    MAX_LABEL_LENGTH,
    sanitize_color,
    sanitize_font,
    sanitize_int,
    sanitize_label,
)

FALLBACK_COLOR = "#000000"


class TestSanitizeColor:
    """Test cases for hex color sanitization"""

    @pytest.mark.parametrize("bad_value", ["notacolor", "#12", "", "   ", "#12345", "#GGGGGG", "#1234567", None, 123, ["#fff"]])
    def test_malformed_colors_return_fallback(self, bad_value):
        """Test that malformed or non-string colors use the fallback"""
        assert sanitize_color(bad_value, FALLBACK_COLOR) == FALLBACK_COLOR

    def test_missing_hash_is_added(self):
        """Test that a bare hex value gets a leading '#'"""
        assert sanitize_color("abc123", FALLBACK_COLOR) == "#abc123"

    def test_short_form_kept_unchanged(self):
        """Test that #RGB is accepted with its case preserved"""
        assert sanitize_color("#ABC", FALLBACK_COLOR) == "#ABC"

    def test_whitespace_is_trimmed(self):
        """Test that surrounding whitespace is ignored"""
        assert sanitize_color("  facc15 ", FALLBACK_COLOR) == "#facc15"


class TestSanitizeFont:
    """Test cases for font stack sanitization"""

    def test_injection_characters_are_removed(self):
        """Test that quotes, semicolons and parentheses are stripped"""
        result = sanitize_font('Arial"; onload="alert(1)', "sans-serif")
        assert '"' not in result
        assert ';' not in result
        assert '(' not in result
        assert result.startswith("Arial")

    def test_quotes_stripped_from_stack(self):
        """Test that quoted family names keep their text"""
        assert sanitize_font("'Outfit', sans-serif", "x") == "Outfit, sans-serif"

    def test_empty_after_cleaning_returns_fallback(self):
        """Test that a font made only of disallowed characters uses the fallback"""
        assert sanitize_font("\"';()", "sans-serif") == "sans-serif"

    def test_non_string_returns_fallback(self):
        """Test that a missing font uses the fallback"""
        assert sanitize_font(None, "sans-serif") == "sans-serif"

    def test_xml_control_characters_are_removed(self):
        """Test that whitespace-class control characters are not kept"""
        assert sanitize_font("Arial\x0b,\x1c sans-serif", "x") == "Arial, sans-serif"


class TestSanitizeLabel:
    """Test cases for header label sanitization"""

    def test_missing_label_uses_default(self):
        """Test that None resolves to the default label"""
        assert sanitize_label(None, "Default") == "Default"

    def test_empty_label_is_preserved(self):
        """Test that an explicit empty label stays empty"""
        assert sanitize_label("", "Default") == ""

    def test_whitespace_only_label_becomes_empty(self):
        """Test that a blank label is trimmed to empty"""
        assert sanitize_label("    ", "Default") == ""

    def test_label_is_trimmed_and_truncated(self):
        """Test that labels are trimmed then cut to the maximum length"""
        result = sanitize_label("  " + "x" * 100 + "  ", "Default")
        assert result == "x" * MAX_LABEL_LENGTH

    def test_non_string_returns_fallback(self):
        """Test that a non-string label uses the fallback"""
        assert sanitize_label(42, "Default") == "Default"

    @pytest.mark.parametrize("raw, expected", [
        ("Sale\x01", "Sale"),
        ("\x00Big\x08 Sale\x1f", "Big Sale"),
        ("Sale\ufffe", "Sale"),
        ("\x0b\x0c", ""),
    ])
    def test_xml_illegal_characters_are_removed(self, raw, expected):
        """Test that characters XML cannot carry are dropped before trimming"""
        assert sanitize_label(raw, "Default") == expected

    def test_tabs_are_kept_inside(self):
        """Test that XML-legal whitespace inside a label survives"""
        assert sanitize_label("Big\tSale", "Default") == "Big\tSale"


class TestSanitizeInt:
    """Test cases for bounded integer parameters"""

    def test_plain_integer_string(self):
        """Test parsing a plain integer string"""
        assert sanitize_int("24", 16, 0, 50) == 24

    def test_leading_integer_is_used(self):
        """Test that trailing text after the leading integer is ignored"""
        assert sanitize_int("12px", 16, 0, 50) == 12
        assert sanitize_int("1.9", 16, 0, 50) == 1

    @pytest.mark.parametrize("bad_value", ["51", "-1", "abc", "", None, True, 3.5])
    def test_out_of_range_or_invalid_returns_fallback(self, bad_value):
        """Test that out-of-range or unparseable values use the fallback"""
        assert sanitize_int(bad_value, 16, 0, 50) == 16

    def test_bounds_are_inclusive(self):
        """Test that both range ends are accepted"""
        assert sanitize_int("100", 700, 100, 900) == 100
        assert sanitize_int("900", 700, 100, 900) == 900
