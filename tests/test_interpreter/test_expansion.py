"""Tests for word expansion."""

from shell_expand import Expander, ExpansionLimits, expand
from shell_expand.interpreter import ExpansionContext, expand_process
from shell_expand.parser.ranges import SELECT_ALL, Forward, Range

VARIABLES = {
    "A": "1",
    "B": "test",
    "C": "ing",
    "D": "1 2 3",
    "FOO": "FOO",
    "BAR": "BAR",
    "EMPTY": "",
    "ACCENT": "e\u0301x",
}


def lookup(name: str, quoted: bool):
    return VARIABLES.get(name)


def variable_expander() -> Expander:
    return Expander(string=lookup)


def command_expander() -> Expander:
    # The command text doubles as its output
    return Expander(command=lambda command: command)


class TestEmptyInput:
    """Empty words."""

    def test_empty_string_is_one_empty_word(self):
        assert expand("") == [""]


class TestVariables:
    """Scalar variable expansion."""

    def test_variable_with_literal_between(self):
        assert expand("$FOO:NOT:$BAR", variable_expander()) == ["FOO:NOT:BAR"]

    def test_variables_with_colons(self):
        assert expand("$FOO:$BAR", variable_expander()) == ["FOO:BAR"]

    def test_multiple_variables(self):
        assert expand("${B}${C}...${D}", variable_expander()) == ["testing...1 2 3"]

    def test_unresolved_variable_alone_is_empty(self):
        assert expand("$MISSING", variable_expander()) == []

    def test_unresolved_variable_is_skipped(self):
        assert expand("a$MISSING-b", variable_expander()) == ["a-b"]

    def test_empty_variable_is_empty(self):
        assert expand("$EMPTY", variable_expander()) == []

    def test_no_capabilities(self):
        assert expand("x$FOO") == ["x"]

    def test_grapheme_index(self):
        assert expand("$ACCENT[0]", variable_expander()) == ["e\u0301"]
        assert expand("$ACCENT[1]", variable_expander()) == ["x"]
        assert expand("$ACCENT[-1]", variable_expander()) == ["x"]

    def test_grapheme_range(self):
        assert expand("$B[1..3]", variable_expander()) == ["es"]
        assert expand("$B[1...3]", variable_expander()) == ["est"]

    def test_out_of_range_slice_is_empty(self):
        assert expand("$B[10]", variable_expander()) == []

    def test_key_selection_on_string_is_empty(self):
        assert expand("$B[foo]", variable_expander()) == []

    def test_reverse_quoting(self):
        seen = []

        def record(name, quoted):
            seen.append(quoted)
            return "x"

        expander = Expander(string=record)
        expand("$A", expander)
        expand('"$A"', expander)
        expand("$A", expander, reverse_quoting=True)
        assert seen == [False, True, True]


class TestArrays:
    """Array literals and array variables."""

    def base(self, idx: str) -> list[str]:
        return expand(f"[1 2 3][{idx}]", variable_expander())

    def test_first_element(self):
        for idx in ("-3", "0", "..-2"):
            assert self.base(idx) == ["1"]

    def test_ranges(self):
        for idx in ("1...2", "1...-1"):
            assert self.base(idx) == ["2", "3"]

    def test_out_of_range_is_empty(self):
        for idx in ("-17", "4..-4"):
            assert self.base(idx) == []

    def test_whole_array(self):
        assert expand("[1 2 3]") == ["1", "2", "3"]

    def test_key_on_literal_is_empty(self):
        assert expand("[1 2 3][foo]") == []

    def test_embedded_arrays(self):
        line = "[[foo bar] [baz bat] [bing crosby]][{}]"
        cases = [
            (["foo"], "0"),
            (["baz"], "2"),
            (["bat"], "-3"),
            (["bar", "baz", "bat"], "1...3"),
        ]
        for expected, idx in cases:
            assert expand(line.format(idx)) == expected

    def test_elements_are_expanded(self):
        assert expand("[$A $D]", variable_expander()) == ["1", "1 2 3"]

    def test_array_in_word_is_joined(self):
        assert expand("[1 2 3]x") == ["1 2 3x"]

    def test_array_variable(self):
        expander = Expander(array=lambda name, selection: ["a", "b"] if name == "arr" else None)
        assert expand("@arr", expander) == ["a", "b"]
        assert expand('"@arr"', expander) == ["a b"]
        assert expand("@missing", expander) == []
        assert expand("<@arr>", expander) == ["<a b>"]

    def test_array_variable_receives_selection(self):
        received = []

        def array(name, selection):
            received.append(selection)
            return []

        expand("@arr[1..2]", Expander(array=array))
        assert received == [Range(Forward(1), Forward(2))]

    def test_multiple_keys_expand_like_separate_lookups(self):
        table = {"a": "1", "b": "2"}

        def array(name, selection):
            return [table[selection.key]]

        assert expand("@map[a b]", Expander(array=array)) == ["1 2"]


class TestProcessSubstitution:
    """Command substitution output normalization."""

    line = " Mary   had\ta little  \n\t lamb\t"

    def context(self) -> ExpansionContext:
        return ExpansionContext(expander=command_expander())

    def test_quoted_output_is_verbatim(self):
        assert expand_process(self.context(), self.line, SELECT_ALL, True) == self.line

    def test_unquoted_output_is_field_split(self):
        result = expand_process(self.context(), self.line, SELECT_ALL, False)
        assert result == "Mary had a little lamb"

    def test_trailing_newlines(self):
        ctx = self.context()
        assert expand_process(ctx, "  a   b\n", SELECT_ALL, False) == "a b"
        assert expand_process(ctx, "  a   b\n", SELECT_ALL, True) == "  a   b"
        assert expand_process(ctx, "a \n\n", SELECT_ALL, True) == "a "

    def test_only_ascii_separators_split_fields(self):
        ctx = ExpansionContext(expander=Expander(command=lambda command: "a\u00a0b\u2003c\n"))
        assert expand_process(ctx, "x", SELECT_ALL, False) == "a\u00a0b\u2003c"

    def test_array_process_keeps_unicode_spaces(self):
        expander = Expander(command=lambda command: "a\u00a0b  c\u2028d\n")
        assert expand("@(x)", expander) == ["a\u00a0b", "c\u2028d"]

    def test_selection_applies_to_output(self):
        assert expand_process(self.context(), "hello", Forward(1), True) == "e"

    def test_no_command_capability(self):
        assert expand("$(echo hi)") == []

    def test_empty_output(self):
        assert expand("$()", command_expander()) == []

    def test_process_in_word(self):
        assert expand("<$(a  b)>", command_expander()) == ["<a b>"]

    def test_array_process(self):
        expander = command_expander()
        assert expand("@(a b  c)", expander) == ["a", "b", "c"]
        assert expand("@(a b  c)[1]", expander) == ["b"]
        assert expand("@(a b  c)[-1]", expander) == ["c"]
        assert expand("@(a b c)[1..]", expander) == ["b", "c"]
        assert expand("@(a b c)[9]", expander) == []

    def test_array_process_key_does_not_run(self):
        calls = []

        def command(text):
            calls.append(text)
            return text

        assert expand("@(a b)[key]", Expander(command=command)) == []
        assert calls == []

    def test_array_process_in_word(self):
        assert expand("x@(a  b)[1]", command_expander()) == ["xb"]


class TestArithmetic:
    """Arithmetic expansion."""

    def test_variables_are_substituted(self):
        assert expand("$((A * A - (A + A)))", variable_expander()) == ["-1"]

    def test_literal_expression(self):
        assert expand("$((3 * 10 - 27))") == ["3"]

    def test_division_by_zero_is_inline(self):
        assert expand("$((1/0))") == ["division by 0"]

    def test_error_does_not_stop_siblings(self):
        assert expand("$A-$((1/0))-$B", variable_expander()) == ["1-division by 0-test"]

    def test_unresolved_names_are_zero(self):
        assert expand("$((missing + 2))") == ["2"]

    def test_huge_results_wrap(self):
        assert expand("$((10**5000))") == ["0"]
        assert expand("a-$((10**5000))-b") == ["a-0-b"]

    def test_huge_shift_count(self):
        assert expand("$((1<<99999999999999999999))") == ["0"]

    def test_deep_nesting_is_inline_error(self):
        words = expand("x$((" + "(" * 3000 + "1" + ")" * 3000 + "))")
        assert len(words) == 1
        assert words[0].startswith("x")
        assert "expression recursion level exceeded" in words[0]


class TestMethods:
    """Inline string and array methods."""

    def test_len_of_array_literal(self):
        assert expand("$len([0 1 2 3 4])", variable_expander()) == ["5"]

    def test_join_of_chars(self):
        assert expand("$join(@chars(FOO), 'x')", variable_expander()) == ["FxOxO"]


class TestTilde:
    """Tilde expansion."""

    def test_tilde_capability(self):
        expander = Expander(tilde=lambda text: "/home/user" + text[1:])
        assert expand("~/src", expander) == ["/home/user/src"]

    def test_unresolved_tilde_is_literal(self):
        assert expand("~nobody/x") == ["~nobody/x"]


class TestNestingLimit:
    """Nested expansions past the configured depth."""

    def test_deep_nesting_is_left_unexpanded(self):
        limits = ExpansionLimits(max_nesting_depth=1)
        assert expand("[[[a b]]]", limits=limits) == ["[a b]"]

    def test_within_limit(self):
        limits = ExpansionLimits(max_nesting_depth=3)
        assert expand("[[[a b]]]", limits=limits) == ["a", "b"]
