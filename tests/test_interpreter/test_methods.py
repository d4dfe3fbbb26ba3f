"""Tests for string and array methods."""

import pytest

from shell_expand import Shell


@pytest.fixture
def shell():
    return Shell(
        variables={
            "name": "hello world",
            "x": "ab",
            "csv": "a,b,c",
            "path": "/usr/lib/archive.tar.gz",
            "accent": "e\u0301",
            "text": "one\ntwo",
        },
        arrays={"items": ["x", "y", "z"]},
        home="/home/user",
        cwd="/work",
    )


class TestStringMethods:
    """$method(...) expansions."""

    def test_len(self, shell):
        assert shell.expand("$len(name)") == ["11"]

    def test_len_of_array(self, shell):
        assert shell.expand("$len(@items)") == ["3"]

    def test_len_counts_graphemes(self, shell):
        assert shell.expand("$len(accent)") == ["1"]
        assert shell.expand("$len_bytes(accent)") == ["3"]

    def test_join(self, shell):
        assert shell.expand("$join(@items, '-')") == ["x-y-z"]
        assert shell.expand("$join(@items)") == ["x y z"]

    def test_case(self, shell):
        assert shell.expand("$to_uppercase(name)") == ["HELLO WORLD"]
        assert shell.expand("$to_lowercase('ABC')") == ["abc"]

    def test_reverse(self, shell):
        assert shell.expand("$reverse(name)") == ["dlrow olleh"]

    def test_repeat(self, shell):
        assert shell.expand("$repeat(x, 3)") == ["ababab"]

    def test_repeat_invalid_count(self, shell):
        assert shell.expand("$repeat(x, many)") == []

    def test_replace(self, shell):
        assert shell.expand("$replace(name, 'world there')") == ["hello there"]

    def test_predicates(self, shell):
        assert shell.expand("$starts_with(name, hello)") == ["1"]
        assert shell.expand("$ends_with(name, xyz)") == ["0"]
        assert shell.expand("$contains(name, 'o w')") == ["1"]

    def test_find(self, shell):
        assert shell.expand("$find(name, world)") == ["6"]
        assert shell.expand("$find(name, nope)") == ["-1"]

    def test_path_methods(self, shell):
        assert shell.expand("$basename(path)") == ["archive.tar.gz"]
        assert shell.expand("$filename(path)") == ["archive.tar"]
        assert shell.expand("$extension(path)") == ["gz"]
        assert shell.expand("$parent(path)") == ["/usr/lib"]

    def test_selection(self, shell):
        assert shell.expand("$to_uppercase(name)[0..5]") == ["HELLO"]

    def test_unknown_method(self, shell, caplog):
        with caplog.at_level("WARNING"):
            assert shell.expand("$nosuch(name)") == []
        assert "unknown string method" in caplog.text

    def test_method_in_word(self, shell):
        assert shell.expand("len=$len(x)") == ["len=2"]


class TestArrayMethods:
    """@method(...) expansions."""

    def test_split(self, shell):
        assert shell.expand("@split(csv, ',')") == ["a", "b", "c"]

    def test_split_on_whitespace(self, shell):
        assert shell.expand("@split(name)") == ["hello", "world"]

    def test_split_selection(self, shell):
        assert shell.expand("@split(csv, ',')[1]") == ["b"]
        assert shell.expand("@split(csv, ',')[-1]") == ["c"]

    def test_split_at(self, shell):
        assert shell.expand("@split_at(name, 5)") == ["hello", " world"]
        assert shell.expand("@split_at(name, 50)") == []

    def test_chars(self, shell):
        assert shell.expand("@chars(x)") == ["a", "b"]

    def test_graphemes(self, shell):
        assert shell.expand("@graphemes(accent)") == ["e\u0301"]

    def test_bytes(self, shell):
        assert shell.expand("@bytes(x)") == ["97", "98"]

    def test_lines(self, shell):
        assert shell.expand("@lines(text)") == ["one", "two"]

    def test_reverse(self, shell):
        assert shell.expand("@reverse(@items)") == ["z", "y", "x"]
        assert shell.expand("@reverse(items)") == ["z", "y", "x"]

    def test_nested_methods(self, shell):
        assert shell.expand("$join(@split(csv, ','), '+')") == ["a+b+c"]

    def test_unknown_method(self, shell):
        assert shell.expand("@nosuch(name)") == []
