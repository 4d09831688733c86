from __future__ import annotations

from typing import Callable

from tree_sitter import Node

from .errors import SignatureRenderError
from .parser import FieldList, field_list, node_text, significant_children


class TypePrinter:
    """
    Prints Go type expressions from their syntax nodes, laid out the way
    gofmt prints them.

    A qualified type whose package equals `strip_qualifier` is printed as the
    bare type name, wherever it appears in the expression.
    """

    def __init__(self, strip_qualifier: str | None = None) -> None:
        self._strip = strip_qualifier or None
        self._handlers: dict[str, Callable[[Node], str]] = {
            "type_identifier": node_text,
            "identifier": node_text,
            "field_identifier": node_text,
            "package_identifier": node_text,
            "qualified_type": self._qualified,
            "pointer_type": lambda n: "*" + self._inner(n),
            "parenthesized_type": lambda n: f"({self._inner(n)})",
            "negated_type": lambda n: "~" + self._inner(n),
            "slice_type": lambda n: "[]" + self._field(n, "element"),
            "array_type": self._array,
            "implicit_length_array_type": lambda n: "[...]" + self._field(n, "element"),
            "map_type": self._map,
            "channel_type": self._channel,
            "function_type": self._function,
            "generic_type": self._generic,
            "type_elem": self._union,
            "constraint_elem": self._union,
            "struct_type": self._struct,
            "interface_type": self._interface,
        }

    def type(self, node: Node) -> str:
        handler = self._handlers.get(node.type)
        if handler is None:
            raise SignatureRenderError(
                f"cannot print {node.type} {node_text(node)!r} "
                f"at line {node.start_point[0] + 1}"
            )
        return handler(node)

    def fields(self, fl: FieldList | None) -> str:
        if fl is None:
            return ""
        parts: list[str] = []
        for f in fl.fields:
            typ = ("..." if f.variadic else "") + self.type(f.type)
            parts.append(f"{', '.join(f.names)} {typ}" if f.names else typ)
        return ", ".join(parts)

    def results(self, fl: FieldList | None) -> str:
        """Result list with its leading space, or "" when there is none."""
        if fl is None or not fl.fields:
            return ""
        if len(fl.fields) == 1 and not fl.fields[0].names:
            return " " + self.type(fl.fields[0].type)
        return f" ({self.fields(fl)})"

    def signature(
        self, name: str, params: FieldList | None, results: FieldList | None
    ) -> str:
        return f"{name}({self.fields(params)}){self.results(results)}"

    # --- Node Handlers ---

    def _inner(self, node: Node) -> str:
        child = next(significant_children(node), None)
        if child is None:
            raise SignatureRenderError(
                f"empty {node.type} at line {node.start_point[0] + 1}"
            )
        return self.type(child)

    def _field(self, node: Node, name: str) -> str:
        child = node.child_by_field_name(name)
        if child is None:
            raise SignatureRenderError(
                f"{node.type} at line {node.start_point[0] + 1} has no {name}"
            )
        return self.type(child)

    def _qualified(self, node: Node) -> str:
        pkg = node.child_by_field_name("package")
        name = node.child_by_field_name("name")
        if pkg is None or name is None:
            raise SignatureRenderError(f"malformed qualified type {node_text(node)!r}")
        if node_text(pkg) == self._strip:
            return node_text(name)
        return f"{node_text(pkg)}.{node_text(name)}"

    def _array(self, node: Node) -> str:
        length = node.child_by_field_name("length")
        if length is None:
            raise SignatureRenderError(f"array without length {node_text(node)!r}")
        # Lengths are expressions, not types: kept as written.
        return f"[{' '.join(node_text(length).split())}]" + self._field(node, "element")

    def _map(self, node: Node) -> str:
        return f"map[{self._field(node, 'key')}]{self._field(node, 'value')}"

    def _channel(self, node: Node) -> str:
        tokens = [c.type for c in node.children if not c.is_named]
        if tokens and tokens[0] == "<-":
            prefix = "<-chan "
        elif "<-" in tokens:
            prefix = "chan<- "
        else:
            prefix = "chan "
        return prefix + self._field(node, "value")

    def _function(self, node: Node) -> str:
        params = field_list(node.child_by_field_name("parameters"))
        results = field_list(node.child_by_field_name("result"))
        return self.signature("func", params, results)

    def _generic(self, node: Node) -> str:
        args = node.child_by_field_name("type_arguments")
        if args is None:
            raise SignatureRenderError(f"generic type without arguments {node_text(node)!r}")
        rendered = ", ".join(self.type(a) for a in significant_children(args))
        return f"{self._field(node, 'type')}[{rendered}]"

    def _union(self, node: Node) -> str:
        return " | ".join(self.type(t) for t in significant_children(node))

    def _struct(self, node: Node) -> str:
        decls = next(significant_children(node), None)
        fields = (
            [self._struct_field(f) for f in significant_children(decls)]
            if decls is not None
            else []
        )
        if not fields:
            return "struct{}"
        return "struct{ " + "; ".join(fields) + " }"

    def _struct_field(self, node: Node) -> str:
        names = [node_text(n) for n in node.children_by_field_name("name")]
        typ = self._field(node, "type")
        if names:
            out = f"{', '.join(names)} {typ}"
        else:
            # embedded: `*T` keeps its star as a direct token
            star = any(c.type == "*" for c in node.children if not c.is_named)
            out = ("*" if star else "") + typ
        tag = node.child_by_field_name("tag")
        if tag is not None:
            out += " " + node_text(tag)
        return out

    def _interface(self, node: Node) -> str:
        elems = [self.interface_elem(e) for e in significant_children(node)]
        if not elems:
            return "interface{}"
        return "interface{ " + "; ".join(elems) + " }"

    def interface_elem(self, node: Node) -> str:
        """Prints a method or embedded element of an interface body."""
        if node.type in ("method_elem", "method_spec"):
            name = node.child_by_field_name("name")
            if name is None:
                raise SignatureRenderError(f"method without name {node_text(node)!r}")
            return self.signature(
                node_text(name),
                field_list(node.child_by_field_name("parameters")),
                field_list(node.child_by_field_name("result")),
            )
        return self.type(node)
