"""Tests for replacement-list substitution."""

from pycpp.macros import FunctionMacro
from pycpp.substitute import FragmentBuilder, bind_arguments, raw_text, stringify, substitute
from pycpp.tape import Fragment


def _args(*texts):
    return [[Fragment(t)] if t else [] for t in texts]


class TestStringify:
    """# operator"""

    def test_collapses_whitespace(self):
        assert stringify("a  +\n  b") == '"a + b"'

    def test_escapes_quotes_and_backslashes(self):
        assert stringify('a  "b"\\n') == '"a \\"b\\"\\\\n"'

    def test_empty(self):
        assert stringify("") == '""'


class TestBinding:
    """Parameter binding"""

    def test_variadic_arguments_are_joined(self):
        b = bind_arguments(FunctionMacro(["a", "..."], ""), _args("1", "2", "3"))
        assert raw_text(b["a"]) == "1"
        assert raw_text(b["__VA_ARGS__"]) == "2, 3"

    def test_no_variadic_arguments(self):
        b = bind_arguments(FunctionMacro(["a", "..."], ""), _args("1"))
        assert b["__VA_ARGS__"] == []

    def test_missing_argument_is_unbound(self):
        b = bind_arguments(FunctionMacro(["a", "b"], ""), _args("1"))
        assert "b" not in b

    def test_extra_arguments_are_ignored(self):
        b = bind_arguments(FunctionMacro(["a"], ""), _args("1", "2"))
        assert list(b) == ["a"]


class TestSubstitute:
    """Body scan"""

    def test_paste(self):
        out = substitute("a ## b", {"a": _args("x")[0], "b": _args("y")[0]})
        assert raw_text(out) == "xy"

    def test_paste_of_literals(self):
        assert substitute("int ## 32") == [Fragment("int32")]

    def test_paste_operand_is_not_pre_expanded(self):
        out = substitute("p ## 1 p", {"p": _args("raw")[0]}, lambda arg: [Fragment("EXP")])
        assert raw_text(out) == "raw1 EXP"

    def test_prescan_runs_once_per_parameter(self):
        calls = []

        def prescan(arg):
            calls.append(raw_text(arg))
            return [Fragment("E")]

        out = substitute("x x y", {"x": _args("1")[0], "y": _args("2")[0]}, prescan)
        assert raw_text(out) == "E E E"
        assert calls == ["1", "2"]

    def test_stringify_parameter(self):
        out = substitute("#x", {"x": _args("a + b")[0]}, lambda arg: [Fragment("NO")])
        assert raw_text(out) == '"a + b"'

    def test_stringified_argument_is_painted(self):
        assert substitute("#x", {"x": _args("N")[0]}) == [Fragment('"N"', painted=True)]

    def test_hash_without_parameter_is_literal(self):
        assert raw_text(substitute("# y", {"x": []})) == "# y"

    def test_unbound_parameter_name_is_copied(self):
        assert raw_text(substitute("a + b", {"a": _args("1")[0]})) == "1 + b"

    def test_comma_elision(self):
        body = "f(fmt, ## __VA_ARGS__)"
        assert raw_text(substitute(body, {"fmt": _args("s")[0], "__VA_ARGS__": []})) == "f(s)"
        assert raw_text(substitute(body, {"fmt": _args("s")[0], "__VA_ARGS__": _args("1, 2")[0]})) == "f(s,1, 2)"

    def test_painted_fragments_survive(self):
        out = substitute("(x)", {"x": _args("N")[0]}, lambda arg: [Fragment("N", painted=True)])
        assert out == [Fragment("("), Fragment("N", painted=True), Fragment(")")]

    def test_pp_number_suffix_is_not_a_parameter(self):
        out = substitute("10UL x", {"UL": _args("bad")[0], "x": _args("y")[0]})
        assert raw_text(out) == "10UL y"


class TestFragmentBuilder:
    """Fragment accumulation"""

    def test_merges_unpainted_text(self):
        out = FragmentBuilder()
        out.text("a")
        out.text("b")
        out.painted("P")
        out.text("c")
        assert out.fragments == [Fragment("ab"), Fragment("P", painted=True), Fragment("c")]
        assert out.getvalue() == "abPc"

    def test_many_pieces_make_one_fragment(self):
        out = FragmentBuilder()
        for _ in range(10000):
            out.text("ab")
        assert out.fragments == [Fragment("ab" * 10000)]
        out.text("c")
        assert out.getvalue() == "ab" * 10000 + "c"

    def test_rstrip_stops_at_painted(self):
        out = FragmentBuilder()
        out.painted("P")
        out.text("  ")
        out.rstrip()
        assert out.fragments == [Fragment("P", painted=True)]
