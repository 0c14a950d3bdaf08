"""Generate code that marshals native values onto a D-Bus message iterator."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .config import MarshalOptions, default_options
from .errors import UnsupportedTypeError
from .ir import (
    AppendBasic,
    Assign,
    Blank,
    Block,
    CloseContainer,
    Comment,
    Declare,
    FieldRead,
    Loop,
    OpenContainer,
    Recovery,
)
from .render import render
from .signature import ArrayType, BasicType, DictEntryType, Node, StructType, contains_variant, parse
from .typemap import TypeMapper, to_const, to_pointer
from .variables import ELEMENT, INDEX, ITER, LEN, TypeVar, VarList, VarName, item

logger = logging.getLogger(__name__)

ITER_TYPE = "DBusMessageIter"
SIZE_TYPE = "size_t"


def marshal(
    node: Node,
    iter_name: VarName | str,
    name: VarName | str,
    oom_error_code: str,
    inputs: VarList,
    local_vars: VarList,
    *,
    mapper: TypeMapper | None = None,
) -> Block:
    """Generate code to marshal a value of type `node` named `name` onto `iter_name`.

    The generated code detects out-of-memory conditions but does not handle
    them; `oom_error_code` is inserted wherever one can occur and must leave
    the enclosing function.

    Variables the caller must provide are appended to `inputs`. The first one
    is always `name` itself and every other name is derived from it. Variables
    the code declares itself are appended to `local_vars`.
    """
    if node is None:
        raise AssertionError("missing signature node")
    if not iter_name or not name:
        raise AssertionError("iterator and variable names are required")
    if oom_error_code is None:
        raise AssertionError("out-of-memory error code is required")
    if inputs is None or local_vars is None:
        raise AssertionError("input and local lists are required")

    if isinstance(iter_name, str):
        iter_name = VarName(iter_name)
    if isinstance(name, str):
        name = VarName(name)
    mapper = mapper or TypeMapper()

    logger.debug("marshal %s from %s onto %s", node.signature, name, iter_name)

    if isinstance(node, BasicType):
        return _marshal_basic(node, iter_name, name, oom_error_code, inputs, local_vars, mapper)
    if isinstance(node, ArrayType):
        return _marshal_array(node, iter_name, name, oom_error_code, inputs, local_vars, mapper)
    if isinstance(node, (StructType, DictEntryType)):
        return _marshal_struct(node, iter_name, name, oom_error_code, inputs, local_vars, mapper)
    raise AssertionError(f"unexpected signature node: {node!r}")


def _marshal_basic(
    node: BasicType,
    iter_name: VarName,
    name: VarName,
    oom_error_code: str,
    inputs: VarList,
    local_vars: VarList,
    mapper: TypeMapper,
) -> Block:
    # const is a promise that we never modify the value, if it's a pointer.
    c_type = to_const(mapper.type_of(node))

    block: Block = (
        Comment(f"Marshal a {c_type} onto the message"),
        AppendBasic(iter_name, mapper.type_const(node), name, Recovery(oom_error_code)),
    )
    inputs.add(TypeVar(c_type, name))
    return block


def _marshal_array(
    node: ArrayType,
    iter_name: VarName,
    name: VarName,
    oom_error_code: str,
    inputs: VarList,
    local_vars: VarList,
    mapper: TypeMapper,
) -> Block:
    array_iter = name.child(ITER)
    loop_index = name.child(INDEX)
    element_name = name.child(ELEMENT)
    len_name = name.child(LEN)
    element = node.element
    recovery = Recovery(oom_error_code)

    opening: Block = (
        Comment("Marshal an array onto the message"),
        OpenContainer(iter_name, "DBUS_TYPE_ARRAY", element.signature, array_iter, recovery),
        Blank(),
    )
    local_vars.add(TypeVar(ITER_TYPE, array_iter))

    element_inputs = VarList()
    element_locals = VarList()
    element_block = marshal(
        element,
        array_iter,
        element_name,
        oom_error_code,
        element_inputs,
        element_locals,
        mapper=mapper,
    )

    # Every element input becomes one of our inputs with another level of
    # const pointer, keeping its suffix. Inside the loop the original element
    # variable is declared locally and copied out of that array.
    assigns: list[Assign] = []
    for input_var in element_inputs:
        var_name = input_var.name.rebase(element_name, name)
        inputs.add(TypeVar(to_const(to_pointer(input_var.type)), var_name))
        assigns.append(Assign(input_var.name, var_name, loop_index))
        element_inputs.transfer(input_var, element_locals)

    declarations = tuple(Declare(v.type, v.name) for v in element_locals)
    body: Block = declarations + (Blank(),) + tuple(assigns) + (Blank(),) + element_block

    fixed = element.is_fixed
    loop = Loop(
        index=loop_index,
        array=name,
        length=len_name if fixed else None,
        body=body,
    )

    closing: Block = (
        Blank(),
        CloseContainer(iter_name, array_iter, recovery),
    )

    # Arrays of fixed types are not NULL-terminated, so the length is an input.
    if fixed:
        inputs.add(TypeVar(SIZE_TYPE, len_name))

    return opening + (loop,) + closing


def _marshal_struct(
    node: StructType | DictEntryType,
    iter_name: VarName,
    name: VarName,
    oom_error_code: str,
    inputs: VarList,
    local_vars: VarList,
    mapper: TypeMapper,
) -> Block:
    struct_iter = name.child(ITER)
    recovery = Recovery(oom_error_code)
    c_type = to_const(mapper.type_of(node))

    statements: list = [
        Comment("Marshal a structure onto the message"),
        OpenContainer(iter_name, mapper.type_const(node), None, struct_iter, recovery),
        Blank(),
    ]
    local_vars.add(TypeVar(ITER_TYPE, struct_iter))

    for k, member in enumerate(node.children):
        item_name = name.child(item(k))
        item_inputs = VarList()
        item_locals = VarList()
        item_block = marshal(
            member,
            struct_iter,
            item_name,
            oom_error_code,
            item_inputs,
            item_locals,
            mapper=mapper,
        )

        item_locals.transfer_all(local_vars)

        # Member inputs are read out of the structure into locals.
        for input_var in item_inputs:
            statements.append(FieldRead(input_var.name, name, input_var.name.member_of(name)))
            item_inputs.transfer(input_var, local_vars)

        statements.append(Blank())
        statements.extend(item_block)
        statements.append(Blank())

    statements.append(CloseContainer(iter_name, struct_iter, recovery))

    inputs.add(TypeVar(c_type, name))
    return tuple(statements)


@dataclass(frozen=True)
class MarshalResult:
    signature: str
    block: Block
    inputs: VarList
    locals: VarList
    options: MarshalOptions

    @property
    def code(self) -> str:
        return render(self.block, indent_char=self.options.indent_char)


def generate(
    signature: str | Node,
    *,
    name: str,
    iter_name: str = "iter",
    oom_error_code: str = "return -1;\n",
    options: MarshalOptions | None = None,
) -> MarshalResult:
    """Parse `signature` and generate code marshalling the variable `name`."""
    node = parse(signature) if isinstance(signature, str) else signature
    if contains_variant(node):
        raise UnsupportedTypeError(f"variant values cannot be marshalled: {node.signature!r}")

    options = options or default_options()
    inputs = VarList()
    local_vars = VarList()
    block = marshal(
        node,
        iter_name,
        name,
        oom_error_code,
        inputs,
        local_vars,
        mapper=TypeMapper(options),
    )
    return MarshalResult(
        signature=node.signature,
        block=block,
        inputs=inputs,
        locals=local_vars,
        options=options,
    )
