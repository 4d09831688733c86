from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TypedDict


@dataclass(slots=True, frozen=True)
class MakerOptions:
    """Settings of one generation run."""

    struct_name: str
    iface_name: str
    pkg_name: str
    copy_docs: bool = True
    # Directory the generated file lives in; None disables self-import detection.
    output_dir: Path | None = None


@dataclass(slots=True, frozen=True)
class Method:
    name: str
    signature: str
    docs: tuple[str, ...]
    order: int

    def lines(self) -> list[str]:
        return [*self.docs, self.signature]


@dataclass(slots=True, frozen=True)
class ImportedPackage:
    path: str
    alias: str = ""

    def lines(self) -> list[str]:
        return [f'{self.alias} "{self.path}"']


# --- Extraction Report ---


class FileRecord(TypedDict):
    name: str
    package: str
    methods: list[str]


class MethodRecord(TypedDict):
    name: str
    signature: str
    docs: list[str]


class ImportRecord(TypedDict):
    path: str
    alias: str | None


class ReportStats(TypedDict):
    files_processed: int
    files_contributing: int
    methods: int
    duplicates_dropped: int
    imports: int


class ReportMeta(TypedDict):
    generated_at: str
    struct: str
    iface: str
    package: str
    source_alias: str


class ExtractionReport(TypedDict):
    meta: ReportMeta
    stats: ReportStats
    files: list[FileRecord]
    methods: list[MethodRecord]
    imports: list[ImportRecord]
