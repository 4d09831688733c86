from __future__ import annotations

from typing import Iterable

from .models import ImportedPackage, Method

GENERATED_MARKER = "// Code generated by ifacemaker. DO NOT EDIT."


def render_interface(
    pkg_name: str,
    iface_name: str,
    imports: Iterable[ImportedPackage],
    methods: Iterable[Method],
) -> str:
    """
    Assembles the unformatted Go file holding the interface.

    Imports and methods are emitted in the order given, unsorted and
    unpruned; layout is left to the formatter.
    """
    output = [
        GENERATED_MARKER,
        "",
        "package " + pkg_name,
        "import (",
    ]
    for pkg in imports:
        output.extend(pkg.lines())
    output.extend([")", f"type {iface_name} interface {{"])

    for method in methods:
        output.extend(method.lines())
    output.append("}")

    return "\n".join(output) + "\n"
