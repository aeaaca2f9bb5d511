"""Tests for the static checker: literal text and format arity rules."""

from __future__ import annotations

import pytest

from tests.conftest import errors_only, messages
from unindent.check import check_source
from unindent.errors import CheckSyntaxError, Severity
from unindent.spans import Position

# ---------------------------------------------------------------------------
# Literal text rule
# ---------------------------------------------------------------------------


class TestLiteralText:
    def test_literal_ok(self, problems) -> None:
        assert problems('X = make_unindented("""\n    a\n""")\n') == []

    def test_implicit_concatenation_is_literal(self, problems) -> None:
        assert problems('X = make_folded("a" "b")\n') == []

    def test_keyword_text_literal_ok(self, problems) -> None:
        assert problems('X = make_folded(text="a")\n') == []

    def test_name_argument(self, problems) -> None:
        found = problems("X = make_unindented(body)\n")
        assert messages(found) == ["make_unindented() needs a string literal, not name 'body'"]
        assert found[0].severity is Severity.ERROR

    def test_fstring_argument(self, problems) -> None:
        found = problems('X = make_folded(f"{a}")\n')
        assert messages(found) == ["make_folded() needs a string literal, not an f-string"]

    def test_call_argument(self, problems) -> None:
        found = problems("X = unindented_view(read())\n")
        assert messages(found) == ["unindented_view() needs a string literal, not a call"]

    def test_expression_argument(self, problems) -> None:
        found = problems('X = folded_view("a" + b)\n')
        assert messages(found) == ["folded_view() needs a string literal, not an expression"]

    def test_bytes_argument(self, problems) -> None:
        found = problems('X = make_unindented(b"a")\n')
        assert messages(found) == ["make_unindented() needs a string literal, not a bytes literal"]

    def test_starred_argument(self, problems) -> None:
        found = problems("X = make_unindented(*parts)\n")
        assert messages(found) == [
            "make_unindented() needs a string literal, not an unpacked argument"
        ]

    def test_missing_argument(self, problems) -> None:
        found = problems("X = make_unindented()\n")
        assert messages(found) == ["make_unindented() missing text argument"]

    def test_attribute_callee(self, problems) -> None:
        found = problems("import unindent\nX = unindent.make_folded(body)\n")
        assert len(found) == 1
        assert found[0].span.start.line == 2

    def test_unrelated_calls_ignored(self, problems) -> None:
        assert problems("x = dedent(body)\ny = unindent(body)\n") == []

    def test_argument_span(self, problems) -> None:
        found = problems("X = make_unindented(body)\n")
        span = found[0].span
        assert (span.start.line, span.start.column) == (1, 21)
        assert (span.end.line, span.end.column) == (1, 25)

    def test_span_counts_characters(self, problems) -> None:
        found = problems('é = "ü"; X = make_unindented(body)\n')
        assert found[0].span.start.column == 30

    def test_nested_in_function(self, problems) -> None:
        found = problems("def f(x):\n    return make_folded(x)\n")
        assert found[0].span.start.line == 2


# ---------------------------------------------------------------------------
# Format arity rule
# ---------------------------------------------------------------------------


class TestFormatArity:
    def test_matching_args(self, problems) -> None:
        src = 'make_folded("""\n    {}\n    {}\n""").format("Hello", "World")\n'
        assert problems(src) == []

    def test_too_few_args(self, problems) -> None:
        src = 'make_folded("""\n    {}\n    {}\n""").format("Hello")\n'
        found = problems(src)
        assert messages(found) == ["format template expects 2 positional arguments, got 1"]
        assert found[0].severity is Severity.ERROR

    def test_too_many_args_is_warning(self, problems) -> None:
        found = problems('make_unindented("{}").format(1, 2, 3)\n')
        assert messages(found) == ["2 unused positional arguments to format"]
        assert found[0].severity is Severity.WARNING
        assert found[0].span.start.column == 33

    def test_one_unused_arg(self, problems) -> None:
        found = problems('make_unindented("x").format(1)\n')
        assert messages(found) == ["1 unused positional argument to format"]

    def test_template_after_transform(self, problems) -> None:
        # Indentation is stripped before counting, so this is one field
        found = problems('unindented_view("\\n    {0}\\n    {0}\\n").format()\n')
        assert messages(found) == ["format template expects 1 positional argument, got 0"]

    def test_module_constant(self, problems) -> None:
        src = 'GREETING = make_folded("{} {}")\n\ndef hello():\n    return GREETING.format("a")\n'
        found = problems(src)
        assert messages(found) == ["format template expects 2 positional arguments, got 1"]
        assert found[0].span.start.line == 4

    def test_annotated_module_constant(self, problems) -> None:
        src = 'GREETING: TransformedText = make_folded("{}")\nGREETING.format()\n'
        assert len(errors_only(problems(src))) == 1

    def test_unknown_names_ignored(self, problems) -> None:
        assert problems('"{} {}".format(1)\nOTHER.format()\n') == []

    def test_non_literal_constant_not_tracked(self, problems) -> None:
        found = problems("GREETING = make_folded(body)\nGREETING.format()\n")
        assert len(found) == 1
        assert "string literal" in found[0].message

    def test_missing_keyword(self, problems) -> None:
        found = problems('make_folded("{greeting}, {name}").format(greeting="hi")\n')
        assert messages(found) == ["format template needs keyword argument 'name'"]

    def test_keywords_given(self, problems) -> None:
        assert problems('make_folded("{a}{b}").format(a=1, b=2)\n') == []

    def test_star_args_skip_positional_check(self, problems) -> None:
        assert problems('make_folded("{} {}").format(*args)\n') == []

    def test_double_star_skips_keyword_check(self, problems) -> None:
        assert problems('make_folded("{name}").format(**values)\n') == []

    def test_malformed_template(self, problems) -> None:
        found = problems('make_unindented("{").format()\n')
        assert len(found) == 1
        assert found[0].message.startswith("invalid format template:")

    def test_mixed_numbering(self, problems) -> None:
        found = problems('make_unindented("{} {0}").format(1)\n')
        assert len(found) == 1
        assert "cannot switch" in found[0].message

    def test_escaped_braces(self, problems) -> None:
        assert problems('make_unindented("{{}}").format()\n') == []


# ---------------------------------------------------------------------------
# Ordering and syntax errors
# ---------------------------------------------------------------------------


class TestResults:
    def test_sorted_by_position(self, problems) -> None:
        src = "A = make_folded(x)\nB = make_folded(y)\nC = make_unindented(z)\n"
        found = problems(src)
        assert [p.span.start.line for p in found] == [1, 2, 3]

    def test_syntax_error(self) -> None:
        with pytest.raises(CheckSyntaxError) as exc_info:
            check_source("def f(:\n    pass\n", "bad.py")
        err = exc_info.value
        assert err.span.start.line == 1
        assert err.format("bad.py").startswith("error:")

    def test_clean_module(self, problems) -> None:
        src = (
            "from unindent import make_folded, make_unindented\n"
            "\n"
            'USAGE = make_unindented("""\n'
            "    usage: tool [options]\n"
            '""")\n'
            'CMD = make_folded("""\n'
            "    cmake\n"
            "    -B {}\n"
            '""")\n'
            "\n"
            "def command(build_dir):\n"
            "    return CMD.format(build_dir)\n"
        )
        assert problems(src) == []


# ---------------------------------------------------------------------------
# Line numbering matches the tokenizer
# ---------------------------------------------------------------------------


class TestLineBreaks:
    def test_form_feed_line(self, problems) -> None:
        found = problems("import os\n\x0c\nX = make_folded(body)\n")
        span = found[0].span
        assert (span.start.line, span.start.column) == (3, 17)
        assert "3 | X = make_folded(body)" in found[0].format()

    def test_form_feed_inside_string(self, problems) -> None:
        found = problems('A = "a\x0cb"; X = make_folded(body)\n')
        assert found[0].span.start == Position(1, 28)

    def test_line_separator_inside_string(self, problems) -> None:
        found = problems('A = """a\u2028b"""\nX = make_folded(body)\n')
        assert found[0].span.start == Position(2, 17)
        assert "2 | X = make_folded(body)" in found[0].format()

    def test_crlf_line_endings(self, problems) -> None:
        found = problems("import os\r\nX = make_folded(body)\r\n")
        assert found[0].span.start == Position(2, 17)


# ---------------------------------------------------------------------------
# Module constants and rebinding
# ---------------------------------------------------------------------------


class TestRebinding:
    def test_module_rebinding_drops_constant(self, problems) -> None:
        src = 'GREETING = make_folded("{}")\nGREETING = "{} {}"\nGREETING.format(1, 2)\n'
        assert problems(src) == []

    def test_rebinding_before_format_with_fewer_args(self, problems) -> None:
        src = 'GREETING = make_folded("{} {}")\nGREETING = "{}"\nGREETING.format(1)\n'
        assert problems(src) == []

    @pytest.mark.parametrize(
        "rebind",
        [
            'GREETING += "{}"',
            "for GREETING in items:\n    pass",
            "with open(path) as GREETING:\n    pass",
            "from templates import GREETING",
            "import GREETING",
            "del GREETING",
            "def GREETING():\n    pass",
            "try:\n    pass\nexcept Exception as GREETING:\n    pass",
            "if flag:\n    GREETING = other",
        ],
    )
    def test_any_module_binding_drops_constant(self, problems, rebind: str) -> None:
        src = f'GREETING = make_folded("{{}}")\n{rebind}\nGREETING.format(1, 2)\n'
        assert problems(src) == []

    def test_global_declaration_drops_constant(self, problems) -> None:
        src = (
            'GREETING = make_folded("{}")\n'
            "def reset():\n"
            "    global GREETING\n"
            '    GREETING = "{} {}"\n'
            "GREETING.format(1, 2)\n"
        )
        assert problems(src) == []

    def test_function_local_shadow(self, problems) -> None:
        src = (
            'GREETING = make_folded("{}")\n'
            "def hello():\n"
            '    GREETING = "{} {}"\n'
            "    return GREETING.format(1, 2)\n"
        )
        assert problems(src) == []

    def test_parameter_shadow(self, problems) -> None:
        src = 'GREETING = make_folded("{}")\ndef hello(GREETING):\n    return GREETING.format(1, 2)\n'
        assert problems(src) == []

    def test_lambda_and_comprehension_shadow(self, problems) -> None:
        src = (
            'GREETING = make_folded("{}")\n'
            "f = lambda GREETING: GREETING.format(1, 2)\n"
            "out = [GREETING.format(1, 2) for GREETING in templates]\n"
        )
        assert problems(src) == []

    def test_other_function_still_checked(self, problems) -> None:
        src = (
            'GREETING = make_folded("{} {}")\n'
            "def shadow():\n"
            '    GREETING = "{}"\n'
            "    return GREETING.format(1)\n"
            "def hello():\n"
            "    return GREETING.format(1)\n"
        )
        found = problems(src)
        assert messages(found) == ["format template expects 2 positional arguments, got 1"]
        assert found[0].span.start.line == 6

    def test_class_body_does_not_shadow_methods(self, problems) -> None:
        src = (
            'GREETING = make_folded("{} {}")\n'
            "class Greeter:\n"
            '    GREETING = "{}"\n'
            "    local = GREETING.format(1)\n"
            "    def hello(self):\n"
            "        return GREETING.format(1)\n"
        )
        found = problems(src)
        assert [p.span.start.line for p in found] == [6]
