from __future__ import annotations

from sigmarshal.config import MarshalOptions
from sigmarshal.indent import indent
from sigmarshal.ir import Blank, Comment, Declare, FieldRead, Loop, Recovery
from sigmarshal.marshal import generate
from sigmarshal.render import render
from sigmarshal.variables import VarName


def test_indent_skips_blank_lines():
    assert indent("a;\n\nb;\n") == "\ta;\n\n\tb;\n"
    assert indent("x;", 2, char="  ") == "    x;"
    assert indent("x;", 0) == "x;"


def test_render_simple_statements():
    n = VarName("n")
    block = (
        Comment("hello"),
        Declare("const char *", n),
        Blank(),
        FieldRead(n, VarName("s"), "item0"),
    )
    assert render(block) == "/* hello */\nconst char *n;\n\nn = s->item0;\n"


def test_render_sentinel_loop():
    loop = Loop(index=VarName("a_i"), array=VarName("a"), length=None, body=(Recovery("break;\n"),))
    assert render((loop,)) == "for (size_t a_i = 0; a[a_i]; a_i++) {\n\t\tbreak;\n}\n"


def test_indent_char_option():
    result = generate("ai", name="nums", options=MarshalOptions(indent_char="    "))
    assert "    nums_element = nums[nums_i];" in result.code
    assert "\t" not in result.code


def test_multiline_recovery_is_reindented_inside_loops():
    result = generate("aas", name="m", oom_error_code="free (buf);\nreturn -1;\n")
    lines = result.code.splitlines()
    assert "\t\tfree (buf);" in lines
    assert "\t\t\tfree (buf);" in lines
