from __future__ import annotations

import argparse
import importlib.metadata
import logging
import sys
from pathlib import Path


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(prog="sigmarshal")
    parser.add_argument("--verbose", action="store_true", help="Log generator decisions to stderr.")
    sub = parser.add_subparsers(dest="cmd", required=True)

    sub.add_parser("version", help="Print sigmarshal version.")

    p_gen = sub.add_parser("gen", help="Generate C code marshalling one value of a D-Bus type.")
    p_gen.add_argument("--signature", required=True, help="D-Bus signature of a single complete type.")
    p_gen.add_argument("--name", required=True, help="Base name of the variable to marshal.")
    p_gen.add_argument("--iter", default="iter", help="Name of the DBusMessageIter variable (default: iter).")
    p_gen.add_argument(
        "--oom",
        default="return -1;",
        help="C code executed when the message iterator runs out of memory; must not fall through.",
    )
    p_gen.add_argument(
        "--struct-prefix",
        default=None,
        help="Prefix for generated struct type names (default: SIGMARSHAL_STRUCT_PREFIX or dbus_struct).",
    )
    p_gen.add_argument(
        "--format",
        choices=["c", "envelope"],
        default="c",
        help="Print C source, or write the MessagePack result envelope.",
    )
    p_gen.add_argument("--out", default=None, help="Output file path (default: stdout).")

    args = parser.parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    if args.cmd == "version":
        try:
            print(importlib.metadata.version("sigmarshal"))
        except importlib.metadata.PackageNotFoundError:
            print("0.0.0")
        return

    if args.cmd == "gen":
        from dataclasses import replace

        from .config import default_options
        from .envelope import encode_result
        from .errors import SigMarshalError
        from .marshal import generate

        options = default_options()
        if args.struct_prefix:
            options = replace(options, struct_prefix=args.struct_prefix)

        oom = args.oom if args.oom.endswith("\n") else args.oom + "\n"
        try:
            result = generate(
                args.signature,
                name=args.name,
                iter_name=args.iter,
                oom_error_code=oom,
                options=options,
            )
        except SigMarshalError as e:
            raise SystemExit(f"sigmarshal: {e}") from None

        if args.format == "envelope":
            payload = encode_result(result)
            if args.out:
                Path(args.out).write_bytes(payload)
            else:
                sys.stdout.buffer.write(payload)
            return

        text = _c_listing(result)
        if args.out:
            Path(args.out).write_text(text, encoding="utf-8")
        else:
            sys.stdout.write(text)
        return


def _c_listing(result) -> str:
    lines = [f"/* Marshal {result.signature} */"]
    for label, vars_ in (("input", result.inputs), ("local", result.locals)):
        for var in vars_:
            lines.append(f"/* {label}: {var.declaration()} */")
    lines.append("")
    return "\n".join(lines) + "\n" + result.code
