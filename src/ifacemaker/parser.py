"""
Go source parsing on top of tree-sitter.

Turns raw source bytes into a `SourceFile`: the package name plus a closed
list of top-level declarations (`FuncDecl | ImportDecl | OtherDecl`). The
concrete syntax nodes of parameter and result types are kept so they can be
re-printed later by `ifacemaker.printer`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Union

import tree_sitter_go as tsgo
from tree_sitter import Language, Node, Parser, Tree

from .errors import ParseError, SignatureRenderError

GO_LANGUAGE = Language(tsgo.language())

_parser: Parser | None = None


def _get_parser() -> Parser:
    global _parser
    if _parser is None:
        _parser = Parser(GO_LANGUAGE)
    return _parser


# --- Syntax Model ---


@dataclass(slots=True, frozen=True)
class Field:
    """One entry of a parameter, result or receiver list."""

    names: tuple[str, ...]
    type: Node
    variadic: bool = False


@dataclass(slots=True, frozen=True)
class FieldList:
    fields: tuple[Field, ...]

    def num_fields(self) -> int:
        """Number of bindings; an unnamed field counts as one."""
        return sum(max(1, len(f.names)) for f in self.fields)


@dataclass(slots=True, frozen=True)
class ImportSpec:
    # "" when no name is written, "." for dot imports, "_" for blank imports
    alias: str
    literal: str
    line: int

    @property
    def is_dot(self) -> bool:
        return self.alias == "."


@dataclass(slots=True, frozen=True)
class FuncDecl:
    name: str
    receiver: FieldList | None
    params: FieldList
    results: FieldList | None
    docs: tuple[str, ...]
    line: int


@dataclass(slots=True, frozen=True)
class ImportDecl:
    specs: tuple[ImportSpec, ...]


@dataclass(slots=True, frozen=True)
class OtherDecl:
    kind: str
    line: int


Decl = Union[FuncDecl, ImportDecl, OtherDecl]


@dataclass(slots=True)
class SourceFile:
    filename: str
    package: str
    decls: list[Decl]

    @property
    def imports(self) -> list[ImportSpec]:
        return [
            spec
            for decl in self.decls
            if isinstance(decl, ImportDecl)
            for spec in decl.specs
        ]


# --- Node Helpers ---


def node_text(node: Node) -> str:
    return (node.text or b"").decode("utf-8")


def significant_children(node: Node) -> Iterator[Node]:
    """Named children of a node, comments excluded."""
    for child in node.named_children:
        if child.type != "comment":
            yield child


def field_list(node: Node | None) -> FieldList | None:
    """Converts a `parameter_list` (or a bare result type) into a FieldList."""
    if node is None:
        return None
    if node.type != "parameter_list":
        return FieldList(fields=(Field(names=(), type=node),))

    fields: list[Field] = []
    for child in significant_children(node):
        if child.type == "parameter_declaration":
            names = tuple(node_text(n) for n in child.children_by_field_name("name"))
            fields.append(Field(names=names, type=_required(child, "type")))
        elif child.type == "variadic_parameter_declaration":
            name = child.child_by_field_name("name")
            fields.append(
                Field(
                    names=(node_text(name),) if name is not None else (),
                    type=_required(child, "type"),
                    variadic=True,
                )
            )
        else:
            raise SignatureRenderError(
                f"unexpected {child.type} in parameter list at line "
                f"{child.start_point[0] + 1}"
            )
    return FieldList(fields=tuple(fields))


def import_specs(decl: Node) -> tuple[ImportSpec, ...]:
    """Collects the specs of an `import_declaration`, single or grouped."""
    specs: list[ImportSpec] = []
    for child in significant_children(decl):
        if child.type == "import_spec":
            specs.append(_import_spec(child))
        elif child.type == "import_spec_list":
            specs.extend(
                _import_spec(spec)
                for spec in significant_children(child)
                if spec.type == "import_spec"
            )
    return tuple(specs)


def _import_spec(node: Node) -> ImportSpec:
    name = node.child_by_field_name("name")
    return ImportSpec(
        alias=node_text(name) if name is not None else "",
        literal=node_text(_required(node, "path")),
        line=node.start_point[0] + 1,
    )


def _required(node: Node, field_name: str) -> Node:
    child = node.child_by_field_name(field_name)
    if child is None:
        raise SignatureRenderError(
            f"{node.type} at line {node.start_point[0] + 1} has no {field_name}"
        )
    return child


def doc_comments(node: Node) -> tuple[str, ...]:
    """
    Returns the lead comment of a top-level declaration, one entry per
    comment node, markers included.

    The group is the run of comments ending on the line directly above the
    declaration with no blank line in between. A comment trailing code on
    the same line belongs to that code and is not part of the group.
    """
    group: list[Node] = []
    expected_line = node.start_point[0]
    prev = node.prev_named_sibling

    while prev is not None and prev.type == "comment":
        gap = expected_line - prev.end_point[0]
        if (not group and gap != 1) or gap > 1:
            break
        group.append(prev)
        expected_line = prev.start_point[0]
        prev = prev.prev_named_sibling

    if group and prev is not None and prev.end_point[0] == group[-1].start_point[0]:
        group.pop()

    group.reverse()
    return tuple(node_text(c).rstrip("\r") for c in group)


# --- Parsing ---


def parse_tree(src: bytes, filename: str) -> Tree:
    """Parses src, raising ParseError on the first syntax error."""
    # The grammar needs a final line terminator, gofmt does not.
    if not src.endswith(b"\n"):
        src += b"\n"
    tree = _get_parser().parse(src)
    if tree.root_node.has_error:
        bad = _first_error(tree.root_node)
        if bad is None:
            row, column = _end_of_input(tree.root_node)
            raise ParseError(filename, row + 1, column + 1, "unexpected end of input")
        row, column = bad.start_point[0], bad.start_point[1]
        if bad.is_missing:
            detail = f"missing {bad.type}"
        else:
            snippet = " ".join(node_text(bad).split())
            if len(snippet) > 40:
                snippet = snippet[:37] + "..."
            detail = f"unexpected {snippet!r}"
        raise ParseError(filename, row + 1, column + 1, detail)
    return tree


def _end_of_input(root: Node) -> tuple[int, int]:
    """Where the last parsed node ends; root itself may span trailing blanks."""
    if root.child_count:
        point = root.children[-1].end_point
    else:
        point = root.end_point
    return point[0], point[1]


def _first_error(root: Node) -> Node | None:
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == "ERROR" or node.is_missing:
            return node
        if node.has_error:
            stack.extend(reversed(node.children))
    return None


def parse_source(src: bytes, filename: str) -> SourceFile:
    """
    Parses one Go compilation unit.
    filename is used for diagnostics only.
    """
    root = parse_tree(src, filename).root_node

    package = ""
    decls: list[Decl] = []
    for node in root.named_children:
        line = node.start_point[0] + 1
        if node.type == "comment":
            continue
        if node.type == "package_clause":
            ident = next(significant_children(node), None)
            package = node_text(ident) if ident is not None else ""
            decls.append(OtherDecl(kind=node.type, line=line))
        elif node.type == "import_declaration":
            decls.append(ImportDecl(specs=import_specs(node)))
        elif node.type in ("function_declaration", "method_declaration"):
            receiver = node.child_by_field_name("receiver")
            decls.append(
                FuncDecl(
                    name=node_text(_required(node, "name")),
                    receiver=field_list(receiver),
                    params=field_list(_required(node, "parameters")),
                    results=field_list(node.child_by_field_name("result")),
                    docs=doc_comments(node),
                    line=line,
                )
            )
        else:
            decls.append(OtherDecl(kind=node.type, line=line))

    return SourceFile(filename=filename, package=package, decls=decls)
