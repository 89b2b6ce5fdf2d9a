"""
Tests for document dumping.
"""

import pytest
from nu2vgap.parser import dump, parse_document
from nu2vgap.parser.serde import format_number, quote_string


class TestDump:
    """Test the beautified output format."""

    def test_scalars(self):
        assert dump(None) == "null"
        assert dump(True) == "true"
        assert dump(False) == "false"
        assert dump(42) == "42"
        assert dump("x") == '"x"'

    def test_empty_containers(self):
        assert dump({}) == "{}"
        assert dump([]) == "[]"

    def test_keys_sorted(self):
        text = dump({"b": 1, "a": 2})
        assert text.index('"a"') < text.index('"b"')
        assert text == '{\n    "a": 2,\n    "b": 1\n}'

    def test_short_list_on_one_line(self):
        assert dump([1, 2, 3]) == "[1,2,3]"

    def test_mixed_list_full_form(self):
        """Lists with anything but non-negative integers use one line per item."""
        assert dump([1, -2]) == "[\n    1,\n    -2\n]"

    def test_long_short_list_wraps(self):
        text = dump(list(range(50)))
        lines = text.split("\n")
        assert len(lines) == 3
        assert lines[0].count(",") == 21
        assert parse_document(text) == list(range(50))


class TestQuoting:

    def test_escapes(self):
        assert quote_string('a"b\\c\nd\te\rf') == '"a\\"b\\\\c\\nd\\te\\rf"'

    def test_backslash_escaped_once(self):
        assert quote_string("\\") == '"\\\\"'

    def test_float_without_exponent(self):
        assert "e" not in format_number(1e20)
        assert format_number(0.5) == "0.5"


class TestRoundTrip:
    """Dumped text parses back to the same tree."""

    @pytest.mark.parametrize("value", [
        {"rst": {"ships": [{"id": 1, "name": "Scout"}], "racehulls": [1, 2, 3]}},
        {"text": 'He said "hi"\n\\o/', "flag": True, "none": None},
        [[], {}, [1, [2, [3]]]],
        {"ratio": 0.25, "neg": -7},
        {"name": "Caf\xe9"},
    ])
    def test_round_trip(self, value):
        assert parse_document(dump(value).encode("latin-1")) == value

    def test_sample_document(self, nu_root):
        assert parse_document(dump(nu_root).encode("latin-1")) == nu_root
