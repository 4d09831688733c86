from __future__ import annotations

import datetime
import logging
from enum import Enum
from typing import assert_never

from . import models
from .console import ConsoleManager
from .errors import MakerStateError
from .formatter import BuiltinFormatter, Formatter
from .imports import ImportRegistry
from .models import ImportedPackage, MakerOptions, Method
from .parser import FuncDecl, ImportDecl, OtherDecl, SourceFile, node_text, parse_source
from .printer import TypePrinter
from .render import render_interface


class Phase(Enum):
    EMPTY = "empty"
    ACCUMULATING = "accumulating"
    RENDERED = "rendered"


def is_exported(name: str) -> bool:
    return bool(name) and name[0].isupper()


def receiver_type_name(decl: FuncDecl) -> str | None:
    """
    Name of the type a method is bound to, through at most one `*`.
    Returns None for plain functions and any other receiver shape.
    """
    recv = decl.receiver
    if recv is None or recv.num_fields() != 1:
        return None
    node = recv.fields[0].type
    if node.type == "pointer_type":
        inner = [c for c in node.named_children if c.type != "comment"]
        if len(inner) != 1:
            return None
        node = inner[0]
    if node.type != "type_identifier":
        return None
    return node_text(node)


class Maker:
    """
    Generates a Go interface from the exported methods of a named type.

    Feed every source file through `parse_source` in order, then call
    `make_interface` once. A Maker holds the state of a single run and must
    not be shared between threads.
    """

    def __init__(
        self,
        options: MakerOptions,
        *,
        formatter: Formatter | None = None,
        logger: ConsoleManager | None = None,
    ) -> None:
        self._options = options
        self._formatter = formatter or BuiltinFormatter()
        self._logger = logger or ConsoleManager(level=logging.WARNING, no_color=True)
        self._imports = ImportRegistry(
            source_alias=options.pkg_name,
            output_dir=options.output_dir,
            logger=self._logger,
        )
        self._methods: list[Method] = []
        self._method_names: set[str] = set()
        self._files: list[models.FileRecord] = []
        self._duplicates = 0
        self._phase = Phase.EMPTY

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def methods(self) -> tuple[Method, ...]:
        return tuple(self._methods)

    @property
    def imports(self) -> tuple[ImportedPackage, ...]:
        return self._imports.imports

    @property
    def source_alias(self) -> str:
        return self._imports.source_alias

    def parse_source(self, src: bytes, filename: str) -> None:
        """
        Parses the source code in src and collects the target's methods.
        filename is used for position information only.
        """
        if self._phase is Phase.RENDERED:
            raise MakerStateError("interface already rendered; start a new Maker")

        source = parse_source(src, filename)
        self._phase = Phase.ACCUMULATING
        self._logger.debug(f"Parsed {filename} (package {source.package or '?'})")

        decls = self._qualifying(source)
        record = models.FileRecord(name=filename, package=source.package, methods=[])
        self._files.append(record)

        # Files without relevant methods are not allowed to contribute
        # imports, so unrelated aliases cannot cause conflicts.
        if not decls:
            self._logger.debug(f"No methods of {self._options.struct_name} in {filename}")
            return

        self._imports.harvest(source.imports)

        printer = TypePrinter(self._imports.source_alias)
        for fd in decls:
            if fd.name in self._method_names:
                self._drop_duplicate(fd, filename)
                continue
            method = Method(
                name=fd.name,
                signature=printer.signature(fd.name, fd.params, fd.results),
                docs=fd.docs if self._options.copy_docs else (),
                order=len(self._methods),
            )
            self._method_names.add(method.name)
            self._methods.append(method)
            record["methods"].append(method.name)
            self._logger.debug(f"Collected {filename}:{fd.line} {method.signature}")

    def make_interface(self) -> bytes:
        """
        Renders and formats the interface. Can be called once per Maker.
        """
        if self._phase is Phase.RENDERED:
            raise MakerStateError("interface already rendered; start a new Maker")
        self._phase = Phase.RENDERED

        unformatted = render_interface(
            self._options.pkg_name,
            self._options.iface_name,
            self._imports.imports,
            self._methods,
        )
        return self._formatter.format(unformatted)

    def report(self) -> models.ExtractionReport:
        """Summary of what was collected so far."""
        meta = models.ReportMeta(
            generated_at=datetime.datetime.now(datetime.timezone.utc)
            .isoformat()
            .replace("+00:00", "Z"),
            struct=self._options.struct_name,
            iface=self._options.iface_name,
            package=self._options.pkg_name,
            source_alias=self._imports.source_alias,
        )
        stats = models.ReportStats(
            files_processed=len(self._files),
            files_contributing=sum(1 for f in self._files if f["methods"]),
            methods=len(self._methods),
            duplicates_dropped=self._duplicates,
            imports=len(self._imports.imports),
        )
        return models.ExtractionReport(
            meta=meta,
            stats=stats,
            files=[models.FileRecord(**f) for f in self._files],
            methods=[
                models.MethodRecord(name=m.name, signature=m.signature, docs=list(m.docs))
                for m in self._methods
            ],
            imports=[
                models.ImportRecord(path=p.path, alias=p.alias or None)
                for p in self._imports.imports
            ],
        )

    # --- Private Helpers ---

    def _qualifying(self, source: SourceFile) -> list[FuncDecl]:
        found: list[FuncDecl] = []
        for decl in source.decls:
            if isinstance(decl, FuncDecl):
                if receiver_type_name(decl) != self._options.struct_name:
                    continue
                if not is_exported(decl.name):
                    continue
                if decl.name in self._method_names:
                    self._drop_duplicate(decl, source.filename)
                    continue
                found.append(decl)
            elif isinstance(decl, (ImportDecl, OtherDecl)):
                continue
            else:
                assert_never(decl)
        return found

    def _drop_duplicate(self, decl: FuncDecl, filename: str) -> None:
        self._duplicates += 1
        self._logger.debug(f"Skipping duplicate method {decl.name} at {filename}:{decl.line}")
