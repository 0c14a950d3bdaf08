from __future__ import annotations

import pytest

from sigmarshal.config import MarshalOptions
from sigmarshal.ir import FieldRead, OpenContainer
from sigmarshal.marshal import generate, marshal
from sigmarshal.signature import parse
from sigmarshal.variables import VarList


def test_pair_struct():
    result = generate("(is)", name="pair")
    assert result.inputs.pairs() == [("const struct dbus_struct_is *", "pair")]
    assert result.locals.pairs() == [
        ("DBusMessageIter", "pair_iter"),
        ("int32_t", "pair_item0"),
        ("const char *", "pair_item1"),
    ]
    assert result.code == (
        "/* Marshal a structure onto the message */\n"
        "if (! dbus_message_iter_open_container (&iter, DBUS_TYPE_STRUCT, NULL, &pair_iter)) {\n"
        "\treturn -1;\n"
        "}\n"
        "\n"
        "pair_item0 = pair->item0;\n"
        "\n"
        "/* Marshal a int32_t onto the message */\n"
        "if (! dbus_message_iter_append_basic (&pair_iter, DBUS_TYPE_INT32, &pair_item0)) {\n"
        "\treturn -1;\n"
        "}\n"
        "\n"
        "pair_item1 = pair->item1;\n"
        "\n"
        "/* Marshal a const char * onto the message */\n"
        "if (! dbus_message_iter_append_basic (&pair_iter, DBUS_TYPE_STRING, &pair_item1)) {\n"
        "\treturn -1;\n"
        "}\n"
        "\n"
        "if (! dbus_message_iter_close_container (&iter, &pair_iter)) {\n"
        "\treturn -1;\n"
        "}\n"
    )


def test_struct_with_array_member_reads_length_field():
    result = generate("(sai)", name="p")
    assert result.inputs.pairs() == [("const struct dbus_struct_sai *", "p")]
    assert result.locals.pairs() == [
        ("DBusMessageIter", "p_iter"),
        ("const char *", "p_item0"),
        ("DBusMessageIter", "p_item1_iter"),
        ("const int32_t *", "p_item1"),
        ("size_t", "p_item1_len"),
    ]
    reads = [(str(s.target), str(s.source), s.field) for s in result.block if isinstance(s, FieldRead)]
    assert reads == [
        ("p_item0", "p", "item0"),
        ("p_item1", "p", "item1"),
        ("p_item1_len", "p", "item1_len"),
    ]
    assert "p_item1_len = p->item1_len;" in result.code


@pytest.mark.parametrize("sig", ["(i)", "(is)", "(sai)", "(a{sas}(ii)d)", "((i(s))ay)"])
def test_struct_has_one_input_and_flattened_locals(sig: str):
    node = parse(sig)
    result = generate(sig, name="s")
    assert [n for _t, n in result.inputs.pairs()] == ["s"]

    # One local per input each member would need on its own, plus the
    # members' own locals and our iterator.
    expected = 1
    for member in node.members:
        member_inputs, member_locals = VarList(), VarList()
        marshal(member, "sub", "m", "return;", member_inputs, member_locals)
        expected += len(member_inputs) + len(member_locals)
    assert len(result.locals) == expected


def test_nested_struct_reads_through_member():
    result = generate("(i(ss))", name="outer")
    code = result.code
    assert "outer_item1 = outer->item1;" in code
    assert "outer_item1_item0 = outer_item1->item0;" in code
    assert ("const struct dbus_struct_ss *", "outer_item1") in result.locals.pairs()


def test_dict_entry_uses_entry_marker():
    node = parse("a{ss}").element
    inputs, local_vars = VarList(), VarList()
    block = marshal(node, "iter", "entry", "return;", inputs, local_vars)
    (opening,) = [s for s in block if isinstance(s, OpenContainer)]
    assert opening.type_const == "DBUS_TYPE_DICT_ENTRY"
    assert opening.signature is None
    assert inputs.pairs() == [("const struct dbus_struct_entry_ss *", "entry")]
    assert local_vars.names() == ["entry_iter", "entry_item0", "entry_item1"]


def test_struct_name_override():
    result = generate("(is)", name="pair", options=MarshalOptions(struct_names={"(is)": "Pair"}))
    assert result.inputs.pairs() == [("const struct Pair *", "pair")]
