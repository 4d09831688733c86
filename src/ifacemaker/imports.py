from __future__ import annotations

from pathlib import Path, PurePosixPath
from typing import Iterable

from .console import ConsoleManager
from .errors import ImportAliasConflictError, ImportAliasInUseError, ImportPathError
from .models import ImportedPackage
from .parser import ImportSpec


def unquote_path(literal: str) -> str:
    """Unquotes an import path written as an interpreted or raw string."""
    if len(literal) >= 2 and literal[0] == literal[-1] == "`":
        return literal[1:-1]
    if len(literal) >= 2 and literal[0] == literal[-1] == '"':
        body = literal[1:-1]
        if "\\" not in body and '"' not in body:
            return body
    raise ImportPathError(literal)


class ImportRegistry:
    """
    Collects the imports the generated file needs, across all source files
    that contributed methods.

    Keeps one index by path and one by alias, plus the registration order.
    The import of the package the output lives in is never registered; its
    alias becomes the qualifier stripped from printed types.
    """

    def __init__(
        self,
        *,
        source_alias: str,
        output_dir: Path | None = None,
        logger: ConsoleManager | None = None,
    ) -> None:
        self.source_alias = source_alias
        self._target_parts: tuple[str, ...] | None = (
            PurePosixPath(Path(output_dir).as_posix()).parts
            if output_dir is not None
            else None
        )
        self._logger = logger
        self._by_path: dict[str, ImportedPackage] = {}
        self._by_alias: dict[str, ImportedPackage] = {}
        self._ordered: list[ImportedPackage] = []

    @property
    def imports(self) -> tuple[ImportedPackage, ...]:
        return tuple(self._ordered)

    def harvest(self, specs: Iterable[ImportSpec]) -> None:
        for spec in specs:
            if spec.is_dot:
                # The types a dot import brings into scope cannot be told
                # apart without loading the package; assume none is used.
                continue
            self.register(unquote_path(spec.literal), spec.alias)

    def register(self, path: str, alias: str = "") -> None:
        if self.is_self_import(path):
            if alias:
                self.source_alias = alias
            self._debug(f"Self import {path!r} (qualifier: {self.source_alias})")
            return

        existing = self._by_path.get(path)
        if existing is not None:
            if existing.alias != alias:
                raise ImportAliasConflictError(path, existing.alias, alias)
            return

        if alias and alias in self._by_alias:
            raise ImportAliasInUseError(alias)

        pkg = ImportedPackage(path=path, alias=alias)
        self._by_path[path] = pkg
        if alias:
            self._by_alias[alias] = pkg
        self._ordered.append(pkg)
        self._debug(f"Import registered: {alias or '<none>'} {path!r}")

    def is_self_import(self, path: str) -> bool:
        """True when the import path names the output directory."""
        if self._target_parts is None:
            return False
        parts = tuple(p for p in path.split("/") if p)
        if not parts or len(parts) > len(self._target_parts):
            return False
        return self._target_parts[-len(parts) :] == parts

    def _debug(self, msg: str) -> None:
        if self._logger is not None:
            self._logger.debug(msg)
