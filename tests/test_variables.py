from __future__ import annotations

import pytest

from sigmarshal.variables import ELEMENT, INDEX, ITER, LEN, TypeVar, VarList, VarName, item


def test_varname_renders_segments():
    name = VarName("foo").child(ELEMENT, item(2), LEN)
    assert str(name) == "foo_element_item2_len"
    assert str(VarName("foo").child(ITER)) == "foo_iter"
    assert str(VarName("foo").child(INDEX)) == "foo_i"


def test_varname_rebase_and_member_of():
    base = VarName("nums")
    element = base.child(ELEMENT)
    assert element.child(LEN).rebase(element, base) == base.child(LEN)
    assert element.rebase(element, base) == base
    assert base.child(item(1), LEN).member_of(base) == "item1_len"


def test_varname_compares_structurally():
    # Same text, different structure: never treated as derived from one another.
    flat = VarName("foo_element")
    derived = VarName("foo").child(ELEMENT)
    assert str(flat) == str(derived)
    assert flat != derived
    assert not flat.startswith(VarName("foo"))
    with pytest.raises(AssertionError):
        flat.rebase(VarName("foo"), VarName("bar"))
    with pytest.raises(AssertionError):
        derived.member_of(derived)


def test_varlist_single_owner():
    a, b = VarList(), VarList()
    var = a.add(TypeVar("int32_t", VarName("x")))
    assert var.owner is a

    with pytest.raises(AssertionError, match="already owned"):
        b.add(var)

    a.transfer(var, b)
    assert var.owner is b
    assert len(a) == 0
    assert b.pairs() == [("int32_t", "x")]

    with pytest.raises(AssertionError, match="not owned"):
        a.transfer(var, b)


def test_varlist_rejects_duplicate_names():
    vars_ = VarList()
    vars_.add(TypeVar("int32_t", VarName("x")))
    with pytest.raises(AssertionError, match="duplicate"):
        vars_.add(TypeVar("size_t", VarName("x")))


def test_transfer_all_preserves_order():
    a, b = VarList(), VarList()
    for n in ("p", "q", "r"):
        a.add(TypeVar("int", VarName(n)))
    a.transfer_all(b)
    assert b.names() == ["p", "q", "r"]
    assert all(v.owner is b for v in b)


def test_typevar_equality_ignores_owner():
    vars_ = VarList()
    owned = vars_.add(TypeVar("size_t", VarName("n")))
    assert owned == TypeVar("size_t", VarName("n"))
    assert owned.declaration() == "size_t n"
    assert TypeVar("const char *", VarName("s")).declaration() == "const char *s"
