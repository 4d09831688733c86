import logging

from colorama import Fore, Style, init

from .models import ExtractionReport


class ConsoleManager:
    """Manages console output, respecting quiet/verbose/color flags."""

    def __init__(self, level: int, no_color: bool):
        self.level = level
        self.no_color = no_color
        if not no_color:
            init(autoreset=True)

    def _log(self, msg: str, log_level: int, color: str = "", exc_info: bool = False):
        if log_level < self.level:
            return

        if not self.no_color and color:
            msg = f"{color}{msg}{Style.RESET_ALL}"

        if log_level >= logging.ERROR:
            logging.error(msg, exc_info=exc_info)
        elif log_level >= logging.WARNING:
            logging.warning(msg)
        elif log_level >= logging.INFO:
            logging.info(msg)
        else:
            logging.debug(msg)

    def debug(self, msg: str):
        self._log(msg, logging.DEBUG, Style.DIM)

    def info(self, msg: str):
        self._log(msg, logging.INFO)

    def warning(self, msg: str):
        self._log(msg, logging.WARNING, Fore.YELLOW)

    def error(self, msg: str):
        self._log(msg, logging.ERROR, Fore.RED)

    def critical(self, msg: str, exc_info: bool = False):
        self._log(msg, logging.CRITICAL, Fore.RED + Style.BRIGHT, exc_info=exc_info)

    def print_summary(self, report: ExtractionReport):
        """Print the final counts table to stderr."""
        if self.level > logging.INFO:
            return

        def color_val(val, color_if_nonzero):
            if val > 0 and not self.no_color:
                return f"{color_if_nonzero}{val}{Style.RESET_ALL}"
            return str(val)

        stats = report["stats"]
        summary_data = [
            ("Files Processed", stats["files_processed"], ""),
            ("  - Contributing Methods", stats["files_contributing"], Fore.GREEN),
            ("Methods Collected", stats["methods"], Fore.GREEN),
            ("Duplicates Dropped", stats["duplicates_dropped"], Fore.YELLOW),
            ("Imports", stats["imports"], ""),
        ]
        max_label = max(len(label) for label, _, _ in summary_data)

        lines = ["", "--- Interface Summary ---"]
        for label, value, color in summary_data:
            lines.append(f"{label:<{max_label}} : {color_val(value, color)}")
        lines.append("-------------------------")
        logging.info("\n".join(lines))
