from __future__ import annotations

import os
from dataclasses import dataclass, field

DEFAULT_STRUCT_PREFIX = "dbus_struct"


@dataclass(frozen=True)
class MarshalOptions:
    # C struct typedefs are named `struct <struct_prefix>_<mangled signature>`
    # unless `struct_names` maps the full struct signature to a name.
    struct_prefix: str = DEFAULT_STRUCT_PREFIX
    struct_names: dict[str, str] = field(default_factory=dict)
    indent_char: str = "\t"


def default_options() -> MarshalOptions:
    """Return the default generator options.

    Override the struct prefix with `SIGMARSHAL_STRUCT_PREFIX`.
    """
    prefix = os.environ.get("SIGMARSHAL_STRUCT_PREFIX")
    if prefix:
        return MarshalOptions(struct_prefix=prefix)
    return MarshalOptions()
