from __future__ import annotations

import pytest

from sigmarshal.errors import SignatureError
from sigmarshal.signature import (
    ArrayType,
    BasicType,
    DictEntryType,
    StructType,
    VariantType,
    contains_variant,
    parse,
    parse_many,
)


@pytest.mark.parametrize(
    "sig",
    ["y", "s", "ai", "aai", "(is)", "a{sv}", "a(ia{s(ud)})", "a{oa{sv}}", "((i))"],
)
def test_parse_renders_canonical_signature(sig: str):
    assert parse(sig).signature == sig


def test_parse_builds_tagged_nodes():
    node = parse("a{s(ib)}")
    assert isinstance(node, ArrayType)
    entry = node.element
    assert isinstance(entry, DictEntryType)
    assert entry.key == BasicType("s")
    assert isinstance(entry.value, StructType)
    assert entry.value.members == (BasicType("i"), BasicType("b"))
    assert entry.children == (entry.key, entry.value)


def test_fixed_types():
    assert parse("i").is_fixed
    assert parse("d").is_fixed
    assert not parse("s").is_fixed
    assert not parse("o").is_fixed
    assert not parse("ai").is_fixed
    assert not parse("(i)").is_fixed


def test_parse_many_splits_complete_types():
    nodes = parse_many("ia{sv}(ss)")
    assert [n.signature for n in nodes] == ["i", "a{sv}", "(ss)"]
    assert parse_many("") == []


@pytest.mark.parametrize(
    ("sig", "message"),
    [
        ("", "expected a single complete type"),
        ("ii", "expected a single complete type"),
        ("z", "unknown type code"),
        ("a", "unexpected end of signature"),
        ("(is", "unterminated structure"),
        ("()", "empty structure"),
        ("{si}", "dict entry outside of an array"),
        ("a{vs}", "dict entry key must be a basic type"),
        ("a{s}", "dict entry must have a key and a value"),
        ("a{sii}", "dict entry must have exactly two members"),
        ("a{si", "unterminated dict entry"),
        (")", "unexpected"),
    ],
)
def test_parse_rejects_malformed_signatures(sig: str, message: str):
    with pytest.raises(SignatureError, match=message):
        parse(sig)


def test_parse_reports_error_index():
    with pytest.raises(SignatureError) as exc:
        parse("(iz)")
    assert exc.value.index == 2


def test_nesting_limits():
    assert parse("a" * 32 + "i").signature == "a" * 32 + "i"
    with pytest.raises(SignatureError, match="array nesting too deep"):
        parse("a" * 33 + "i")
    with pytest.raises(SignatureError, match="structure nesting too deep"):
        parse("(" * 33 + "i" + ")" * 33)
    with pytest.raises(SignatureError, match="longer than"):
        parse_many("i" * 256)


def test_contains_variant():
    assert contains_variant(parse("a{sv}"))
    assert isinstance(parse("v"), VariantType)
    assert not contains_variant(parse("a{s(ii)}"))
