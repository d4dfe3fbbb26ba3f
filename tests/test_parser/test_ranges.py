"""Tests for selections and range literals."""

from shell_expand.parser.ranges import (
    SELECT_ALL,
    SELECT_NONE,
    Backward,
    Forward,
    Key,
    Range,
    parse_index_range,
    parse_range,
    parse_select,
    select,
)


class TestParseSelect:
    """Parsing selection suffixes."""

    def test_all(self):
        assert parse_select("..") == SELECT_ALL

    def test_forward_index(self):
        assert parse_select("2") == Forward(2)

    def test_backward_index(self):
        assert parse_select("-1") == Backward(0)
        assert parse_select("-3") == Backward(2)

    def test_range(self):
        assert parse_select("1...2") == Range(Forward(1), Forward(2), inclusive=True)

    def test_key(self):
        assert parse_select("foo") == Key("foo")

    def test_oversized_number_is_a_key(self):
        digits = "9" * 5000
        assert parse_select(digits) == Key(digits)


class TestParseIndexRange:
    """Index ranges used in selections."""

    def test_exclusive(self):
        assert parse_index_range("1..3") == Range(Forward(1), Forward(3))

    def test_inclusive_forms(self):
        assert parse_index_range("1...3") == Range(Forward(1), Forward(3), True)
        assert parse_index_range("1..=3") == Range(Forward(1), Forward(3), True)

    def test_open_start(self):
        assert parse_index_range("..-2") == Range(Forward(0), Backward(1))

    def test_open_end(self):
        assert parse_index_range("2..") == Range(Forward(2), Backward(0), True)

    def test_not_a_range(self):
        assert parse_index_range("a..b") is None
        assert parse_index_range("12") is None


class TestRangeResolve:
    """Resolving ranges against a length."""

    def test_inclusive(self):
        assert Range(Forward(1), Backward(0), True).resolve(3) == (1, 2)

    def test_exclusive(self):
        assert Range(Forward(0), Backward(1)).resolve(3) == (0, 1)

    def test_backward_out_of_bounds(self):
        assert Range(Forward(4), Backward(3)).resolve(3) is None

    def test_reversed(self):
        assert Range(Forward(2), Forward(1)).resolve(5) is None


class TestSelect:
    """Applying selections to sequences."""

    values = ["1", "2", "3"]

    def test_none_and_key_are_empty(self):
        assert select(self.values, SELECT_NONE) == []
        assert select(self.values, Key("a")) == []

    def test_all(self):
        assert select(self.values, SELECT_ALL) == ["1", "2", "3"]

    def test_indices(self):
        assert select(self.values, Forward(0)) == ["1"]
        assert select(self.values, Backward(0)) == ["3"]

    def test_out_of_range_is_empty(self):
        assert select(self.values, Forward(3)) == []
        assert select(self.values, Backward(16)) == []

    def test_range(self):
        assert select(self.values, Range(Forward(1), Forward(2), True)) == ["2", "3"]


class TestParseRange:
    """Brace range literals."""

    def test_exclusive_numeric(self):
        assert parse_range("1..4") == ["1", "2", "3"]

    def test_inclusive_numeric(self):
        assert parse_range("1...4") == ["1", "2", "3", "4"]
        assert parse_range("1..=4") == ["1", "2", "3", "4"]

    def test_descending(self):
        assert parse_range("3...1") == ["3", "2", "1"]

    def test_negative(self):
        assert parse_range("-2...1") == ["-2", "-1", "0", "1"]

    def test_step(self):
        assert parse_range("0..2..7") == ["0", "2", "4", "6"]

    def test_zero_padding(self):
        assert parse_range("01...03") == ["01", "02", "03"]

    def test_characters(self):
        assert parse_range("a...e") == ["a", "b", "c", "d", "e"]
        assert parse_range("c..a") == ["c", "b"]

    def test_not_a_range(self):
        assert parse_range("abc") is None
        assert parse_range("ab..cd") is None
        assert parse_range("1..0..5") is None

    def test_limit(self):
        assert parse_range("1...100000000", limit=3) == ["1", "2", "3"]
        assert parse_range("10...1", limit=2) == ["10", "9"]
        assert parse_range("0..2..100", limit=2) == ["0", "2"]

    def test_limit_is_logged(self, caplog):
        with caplog.at_level("WARNING"):
            parse_range("1...1000", limit=10)
        assert "brace range truncated" in caplog.text

    def test_oversized_endpoint_is_not_a_range(self):
        assert parse_range("1.." + "9" * 5000) is None
