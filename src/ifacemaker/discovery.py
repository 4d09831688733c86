from __future__ import annotations

from pathlib import Path
from typing import Iterable

import pathspec

from .console import ConsoleManager

SOURCE_SUFFIX = ".go"


class SourceDiscovery:
    """
    Expands the command-line inputs into the ordered list of source files.

    A file argument is taken as-is. A directory contributes its immediate
    `*.go` entries (no recursion), sorted by name; entries matching an
    exclude pattern are dropped.
    """

    def __init__(
        self,
        *,
        exclude: list[str] | None = None,
        logger: ConsoleManager | None = None,
    ) -> None:
        self._logger = logger
        self._exclude_spec = (
            pathspec.PathSpec.from_lines("gitwildmatch", exclude) if exclude else None
        )

    def expand(self, inputs: Iterable[str]) -> list[Path]:
        files: list[Path] = []
        for raw in inputs:
            path = Path(raw)
            if not path.exists():
                raise FileNotFoundError(f"No such file or directory: {raw}")
            if path.is_dir():
                files.extend(self._directory_sources(path))
            else:
                files.append(path)
        return files

    def _directory_sources(self, directory: Path) -> list[Path]:
        found: list[Path] = []
        for entry in sorted(directory.iterdir(), key=lambda p: p.name):
            if entry.is_dir() or not entry.name.endswith(SOURCE_SUFFIX):
                continue
            if self._exclude_spec and self._exclude_spec.match_file(entry.as_posix()):
                if self._logger:
                    self._logger.debug(f"EXCLUDE: {entry.as_posix()}")
                continue
            found.append(entry)
        return found
