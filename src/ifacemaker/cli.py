"""
ifacemaker

Generates a Go interface declaration from the exported methods of a named
type, scanning one or more Go source files or directories.

Example:
  ifacemaker -f ./store -s Store -i StoreIface -p store -o store/iface.go
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Any

from .config import ConfigurationManager
from .console import ConsoleManager
from .discovery import SourceDiscovery
from .errors import IfacemakerError
from .formatter import build_formatter
from .maker import Maker
from .report import write_yaml


class CliInterface:
    """
    Handles command-line arguments and application bootstrapping.
    """

    def __init__(self) -> None:
        self._parser = self._build_parser()

    def run(self, argv: list[str] | None = None) -> int:
        args = self._parser.parse_args(argv)
        log_level = args.log_level or logging.INFO

        logging.basicConfig(
            level=log_level,
            format="%(message)s",  # Handled by ConsoleManager
            handlers=[logging.StreamHandler(sys.stderr)],
            force=True,
        )
        console = ConsoleManager(level=log_level, no_color=args.no_color)

        try:
            mgr = ConfigurationManager()
            config = mgr.load_config(args.config, self._overrides(args))

            files = SourceDiscovery(exclude=config.get("exclude"), logger=console).expand(
                config["files"]
            )
            maker = Maker(
                mgr.build_options(config),
                formatter=build_formatter(config),
                logger=console,
            )
            for path in files:
                maker.parse_source(path.read_bytes(), path.name)

            result = maker.make_interface()
            self._write_result(result, config.get("output"), console)

            report = maker.report()
            if config.get("report"):
                written = write_yaml(report, config["report"])
                console.info(f"Report written to: {written}")
            if args.print_summary:
                console.print_summary(report)
            return 0

        except (IfacemakerError, OSError) as e:
            console.critical(str(e))
            return 1
        except Exception as e:
            console.critical(f"An unexpected error occurred: {e}", exc_info=args.log_level == logging.DEBUG)
            return 2

    def _write_result(self, result: bytes, output: str | None, console: ConsoleManager) -> None:
        if not output:
            sys.stdout.write(result.decode("utf-8"))
            sys.stdout.flush()
            return
        out_p = Path(output)
        out_p.parent.mkdir(parents=True, exist_ok=True)
        out_p.write_bytes(result)
        console.info(f"Interface written to: {out_p.resolve()}")

    @staticmethod
    def _overrides(args: argparse.Namespace) -> dict[str, Any]:
        return {
            "files": args.files,
            "struct": args.struct,
            "iface": args.iface,
            "pkg": args.pkg,
            "copy_docs": args.copy_docs,
            "output": args.output,
            "pkg_dir": args.pkg_dir,
            "exclude": args.excludes,
            "formatter": args.formatter,
            "format_command": args.format_command.split() if args.format_command else None,
            "prune_imports": args.prune_imports,
            "report": args.report,
        }

    def _build_parser(self) -> argparse.ArgumentParser:
        parser = argparse.ArgumentParser(
            prog="ifacemaker",
            description="Generate a Go interface from the methods of a type.",
            formatter_class=argparse.RawTextHelpFormatter,
        )

        # Core
        parser.add_argument(
            "-f", "--file", action="append", dest="files",
            help="Go source file or directory to read. Repeatable.",
        )
        parser.add_argument("-s", "--struct", help="Generate an interface for this type name.")
        parser.add_argument("-i", "--iface", help="Name of the generated interface.")
        parser.add_argument("-p", "--pkg", help="Package name for the generated interface.")
        parser.add_argument("--config", help="Path to JSONC config.")
        parser.add_argument("-e", "--exclude", action="append", dest="excludes")

        # Docs
        parser.add_argument(
            "-d", "--doc", action="store_true", dest="copy_docs", default=None,
            help="Copy docs from methods (default).",
        )
        parser.add_argument("--no-doc", action="store_false", dest="copy_docs")

        # Output
        parser.add_argument(
            "-o", "--output",
            help="Output file name. If not provided, result will be printed to stdout.",
        )
        parser.add_argument(
            "--pkg-dir",
            help="Directory of the output package, for self-import detection\n"
            "(defaults to the directory of --output).",
        )
        parser.add_argument("--formatter", choices=["builtin", "command", "none"])
        parser.add_argument("--format-command", help='e.g. "goimports"')
        parser.add_argument("--prune-imports", action="store_true", default=None)
        parser.add_argument("--keep-imports", action="store_false", dest="prune_imports")
        parser.add_argument("--report", help="Write a YAML extraction report here.")

        # Log
        log_g = parser.add_mutually_exclusive_group()
        log_g.add_argument(
            "-v", "--verbose", action="store_const", dest="log_level", const=logging.DEBUG
        )
        log_g.add_argument(
            "-q", "--quiet", action="store_const", dest="log_level", const=logging.ERROR
        )
        parser.add_argument("--no-color", action="store_true")
        parser.add_argument("--print-summary", action="store_true")

        return parser


def main() -> None:
    sys.exit(CliInterface().run())


if __name__ == "__main__":
    main()
