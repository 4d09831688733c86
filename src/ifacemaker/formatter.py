"""
Formatting pass applied to the rendered interface.

Every formatter takes the renderer's text and returns the final bytes, or
raises FormatError carrying the unformatted text.
"""

from __future__ import annotations

import re
import subprocess
from typing import Any, Protocol, Sequence

from tree_sitter import Node

from .errors import ConfigError, FormatError, IfacemakerError, SignatureRenderError
from .imports import unquote_path
from .parser import import_specs, node_text, parse_tree, significant_children
from .printer import TypePrinter


class Formatter(Protocol):
    def format(self, source: str) -> bytes: ...


def assumed_package_name(path: str) -> str:
    """
    Guesses the package name of an import path from its last element, the
    way goimports does: `/vN` suffixes and a `go-` prefix are skipped and the
    name stops at the first non-identifier character.
    """
    parts = path.split("/")
    base = parts[-1]
    if len(parts) > 1 and re.fullmatch(r"v\d+", base):
        base = parts[-2]
    if base.startswith("go-"):
        base = base[len("go-") :]
    match = re.match(r"\w*", base)
    return match.group(0) if match else base


def is_std_import(path: str) -> bool:
    return "." not in path.split("/", 1)[0]


class BuiltinFormatter:
    """
    In-process canonicaliser for generated interface files.

    Re-parses the text (a syntax error is a FormatError), prunes imports no
    type refers to, groups the rest (standard library first) sorted by
    path, drops an empty import block and prints the interface body with
    tab indentation.
    """

    def __init__(self, *, prune_imports: bool = True) -> None:
        self._prune = prune_imports
        self._printer = TypePrinter()

    def format(self, source: str) -> bytes:
        try:
            tree = parse_tree(source.encode("utf-8"), "<generated>")
            text = self._layout(tree.root_node)
        except FormatError:
            raise
        except IfacemakerError as e:
            raise FormatError(source, str(e)) from e
        return text.encode("utf-8")

    # --- Private Helpers ---

    def _layout(self, root: Node) -> str:
        used = self._used_qualifiers(root) if self._prune else None

        blocks: list[tuple[Node, list[str]]] = []
        for node in root.named_children:
            lines = self._block(node, used)
            if lines is None:
                continue
            if (
                blocks
                and node.type == "comment"
                and blocks[-1][0].type != "comment"
                and node.start_point[0] == blocks[-1][0].end_point[0]
            ):
                # trailing comment stays on its line
                blocks[-1][1][-1] += " " + lines[0]
                blocks[-1][1].extend(lines[1:])
                continue
            blocks.append((node, lines))

        out: list[str] = []
        prev: Node | None = None
        for node, lines in blocks:
            if prev is not None and self._blank_between(prev, node):
                out.append("")
            out.extend(lines)
            prev = node
        return "\n".join(out) + "\n"

    @staticmethod
    def _blank_between(prev: Node, node: Node) -> bool:
        gap = node.start_point[0] - prev.end_point[0]
        if prev.type == "comment":
            return gap > 1
        if node.type == "comment":
            return True
        return not (prev.type == node.type and gap <= 1)

    def _block(self, node: Node, used: set[str] | None) -> list[str] | None:
        if node.type == "comment":
            return self._comment_lines(node)
        if node.type == "package_clause":
            ident = next(significant_children(node), None)
            return ["package " + (node_text(ident) if ident is not None else "")]
        if node.type == "import_declaration":
            return self._imports(node, used)
        if node.type == "type_declaration":
            return self._type_decl(node)
        raise SignatureRenderError(
            f"cannot format {node.type} at line {node.start_point[0] + 1}"
        )

    @staticmethod
    def _comment_lines(node: Node) -> list[str]:
        return [line.rstrip("\r") for line in node_text(node).split("\n")]

    def _imports(self, node: Node, used: set[str] | None) -> list[str] | None:
        kept: list[tuple[str, str]] = []
        for spec in import_specs(node):
            path = unquote_path(spec.literal)
            name = spec.alias or assumed_package_name(path)
            if used is not None and spec.alias not in ("_", ".") and name not in used:
                continue
            kept.append((spec.alias, path))
        if not kept:
            return None

        std = sorted((k for k in kept if is_std_import(k[1])), key=lambda k: (k[1], k[0]))
        other = sorted((k for k in kept if not is_std_import(k[1])), key=lambda k: (k[1], k[0]))

        lines = ["import ("]
        for i, group in enumerate(g for g in (std, other) if g):
            if i:
                lines.append("")
            lines.extend(
                f'\t{alias} "{path}"' if alias else f'\t"{path}"' for alias, path in group
            )
        lines.append(")")
        return lines

    @staticmethod
    def _used_qualifiers(root: Node) -> set[str]:
        used: set[str] = set()
        stack = [root]
        while stack:
            node = stack.pop()
            if node.type == "import_declaration":
                continue
            if node.type == "qualified_type":
                pkg = node.child_by_field_name("package")
                if pkg is not None:
                    used.add(node_text(pkg))
            elif node.type == "selector_expression":
                operand = node.child_by_field_name("operand")
                if operand is not None and operand.type == "identifier":
                    used.add(node_text(operand))
            stack.extend(node.children)
        return used

    def _type_decl(self, node: Node) -> list[str]:
        lines: list[str] = []
        for spec in significant_children(node):
            if spec.type not in ("type_spec", "type_alias"):
                raise SignatureRenderError(
                    f"cannot format {spec.type} at line {spec.start_point[0] + 1}"
                )
            if spec.child_by_field_name("type_parameters") is not None:
                raise SignatureRenderError(
                    f"cannot format type parameters at line {spec.start_point[0] + 1}"
                )
            name = spec.child_by_field_name("name")
            typ = spec.child_by_field_name("type")
            if name is None or typ is None:
                raise SignatureRenderError(f"malformed type declaration {node_text(spec)!r}")

            head = f"type {node_text(name)}" + (" =" if spec.type == "type_alias" else "")
            if typ.type == "interface_type":
                lines.append(head + " interface {")
                lines.extend(self._interface_body(typ))
                lines.append("}")
            else:
                lines.append(f"{head} {self._printer.type(typ)}")
        return lines

    def _interface_body(self, node: Node) -> list[str]:
        body: list[str] = []
        prev: Node | None = None
        for elem in node.named_children:
            if prev is not None and elem.type == "comment" and elem.start_point[0] == prev.end_point[0]:
                body[-1] += " " + node_text(elem)
                prev = elem
                continue
            if prev is not None and elem.start_point[0] - prev.end_point[0] > 1:
                body.append("")
            if elem.type == "comment":
                first, *rest = self._comment_lines(elem)
                body.append("\t" + first)
                body.extend(rest)
            else:
                body.append("\t" + self._printer.interface_elem(elem))
            prev = elem
        return body


class CommandFormatter:
    """Pipes the generated code through an external tool such as goimports."""

    def __init__(self, command: Sequence[str]) -> None:
        if not command:
            raise ConfigError("format_command must not be empty")
        self._command = list(command)

    def format(self, source: str) -> bytes:
        try:
            proc = subprocess.run(
                self._command,
                input=source.encode("utf-8"),
                capture_output=True,
                check=False,
            )
        except OSError as e:
            raise FormatError(source, f"running {self._command[0]}: {e}") from e
        if proc.returncode != 0:
            reason = proc.stderr.decode("utf-8", errors="replace").strip()
            raise FormatError(
                source, reason or f"{self._command[0]} exited with {proc.returncode}"
            )
        return proc.stdout


class PassthroughFormatter:
    def format(self, source: str) -> bytes:
        if not source.endswith("\n"):
            source += "\n"
        return source.encode("utf-8")


def build_formatter(config: dict[str, Any]) -> Formatter:
    kind = config.get("formatter", "builtin")
    if kind == "builtin":
        return BuiltinFormatter(prune_imports=bool(config.get("prune_imports", True)))
    if kind == "command":
        return CommandFormatter(config.get("format_command") or [])
    if kind == "none":
        return PassthroughFormatter()
    raise ConfigError(f"Unknown formatter: {kind!r}")
