from pathlib import Path
from typing import Any

import yaml

from .models import ExtractionReport


def write_yaml(report: ExtractionReport, path: str) -> Path:
    """
    Writes the extraction report to a YAML file and returns its location.
    """
    out_p = Path(path)
    out_p.parent.mkdir(parents=True, exist_ok=True)

    with open(out_p, "w", encoding="utf-8") as f:
        _yaml_dump_no_alias(dict(report), f)

    return out_p.resolve()


def _yaml_dump_no_alias(data: Any, stream: Any) -> None:
    class MultilineDumper(yaml.SafeDumper):
        def represent_scalar(self, tag, value, style=None):
            if isinstance(value, str) and "\n" in value:
                style = "|"
            return super().represent_scalar(tag, value, style)

    class NoAliasDumper(MultilineDumper):
        def ignore_aliases(self, data):
            return True

    yaml.dump(data, stream, Dumper=NoAliasDumper, sort_keys=False, allow_unicode=True)
