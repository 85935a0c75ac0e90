"""
Tests for profile sanitization.

These tests verify:
    - Rejected keys never survive, at any depth
    - Scalars are stringified and capped at 100 characters
    - Empty values and empty composites collapse to the placeholder
"""

from rules.sanitizer import (
    MAX_VALUE_LENGTH,
    describe_fields,
    format_string,
    prepare_profile_data,
)


class TestScalars:
    """Scalar values become short strings."""

    def test_long_string_is_truncated(self):
        result = prepare_profile_data({"bio": "x" * 250})
        assert result["bio"] == "x" * MAX_VALUE_LENGTH

    def test_scalar_input_is_stringified(self):
        assert prepare_profile_data(42) == "42"

    def test_booleans_render_as_words(self):
        result = prepare_profile_data({"active": True, "suspended": False})
        assert result == {"active": "true", "suspended": "false"}

    def test_empty_values_use_placeholder(self):
        result = prepare_profile_data({"a": "", "b": " ", "c": None}, "n/a")
        assert result == {"a": "n/a", "b": "n/a", "c": "n/a"}

    def test_value_that_formats_to_nothing_uses_placeholder(self):
        result = prepare_profile_data({"city": "   ", "dept": "<br>"}, "n/a")
        assert result == {"city": "n/a", "dept": "n/a"}

    def test_zero_is_not_empty(self):
        assert prepare_profile_data({"count": 0}) == {"count": "0"}

    def test_markup_is_stripped(self):
        assert prepare_profile_data({"dept": " <b>Sales</b> "}) == {"dept": "Sales"}

    def test_custom_formatter(self):
        result = prepare_profile_data({"dept": "sales"}, formatter=str.upper)
        assert result == {"dept": "SALES"}

    def test_format_string_keeps_plain_text(self):
        assert format_string("R&D Team") == "R&D Team"


class TestComposites:
    """Nested mappings and lists are sanitized recursively."""

    def test_rejected_keys_are_dropped_at_every_depth(self):
        data = {
            "sesskey": "abc",
            "username": "alex",
            "prefs": {"preference": {"x": 1}, "theme": "dark", "inner": {"access": "all", "k": "v"}},
            "enrol": ["course1"],
        }
        result = prepare_profile_data(data)
        assert result == {"username": "alex", "prefs": {"theme": "dark", "inner": {"k": "v"}}}

    def test_lists_are_keyed_by_index(self):
        assert prepare_profile_data({"tags": ["a", "b"]}) == {"tags": {"0": "a", "1": "b"}}

    def test_empty_composite_becomes_placeholder(self):
        assert prepare_profile_data({}, "n/a") == "n/a"

    def test_nested_empty_composite_becomes_placeholder(self):
        assert prepare_profile_data({"profile": {}}, "n/a") == {"profile": "n/a"}

    def test_only_rejected_keys_becomes_placeholder(self):
        assert prepare_profile_data({"sesskey": "x", "editing": "1"}, "n/a") == "n/a"

    def test_long_placeholder_is_truncated_for_empty_composites(self):
        placeholder = "p" * 150
        result = prepare_profile_data({"profile": {}, "city": ""}, placeholder)
        assert result["profile"] == "p" * MAX_VALUE_LENGTH
        assert result["city"] == "p" * MAX_VALUE_LENGTH
        assert prepare_profile_data({}, placeholder) == "p" * MAX_VALUE_LENGTH

    def test_order_is_preserved(self):
        result = prepare_profile_data({"z": "1", "a": "2", "m": "3"})
        assert list(result) == ["z", "a", "m"]

    def test_nested_values_are_truncated(self):
        result = prepare_profile_data({"profile": {"notes": "y" * 300}})
        assert len(result["profile"]["notes"]) == MAX_VALUE_LENGTH


class TestDescribeFields:
    """Dotted field listing."""

    def test_nested_fields_are_dotted(self):
        profile = {"city": "NY", "email": {"domain": "example.com", "username": "a"}}
        assert describe_fields(profile) == [
            ("city", "NY"),
            ("email.domain", "example.com"),
            ("email.username", "a"),
        ]
