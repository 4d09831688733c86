class IfacemakerError(Exception):
    """Base class for every error raised by the interface generator."""


class ConfigError(IfacemakerError):
    pass


class ParseError(IfacemakerError):
    """A source file is not syntactically valid Go."""

    def __init__(self, filename: str, line: int, column: int, detail: str) -> None:
        self.filename = filename
        self.line = line
        self.column = column
        super().__init__(f"{filename}:{line}:{column}: syntax error: {detail}")


class ImportPathError(IfacemakerError):
    def __init__(self, literal: str) -> None:
        self.literal = literal
        super().__init__(f"parsing import `{literal}` failed")


class SignatureRenderError(IfacemakerError):
    """A parameter or result type could not be printed."""


def error_alias(alias: str) -> str:
    """Formats an alias for error messages, '<none>' when empty."""
    return alias if alias else "<none>"


class ImportAliasConflictError(IfacemakerError):
    def __init__(self, path: str, existing: str, alias: str) -> None:
        self.path = path
        self.existing = existing
        self.alias = alias
        super().__init__(
            f'Package "{path}" imported multiple times with different aliases: '
            f"{error_alias(existing)}, {error_alias(alias)}"
        )


class ImportAliasInUseError(IfacemakerError):
    def __init__(self, alias: str) -> None:
        self.alias = alias
        super().__init__(f"Import alias {alias} already in use")


class FormatError(IfacemakerError):
    """
    The generated code failed the formatting pass.
    The renderer should always produce valid input, so this is most likely
    a bug; the unformatted text is kept for diagnosis.
    """

    def __init__(self, unformatted: str, reason: str) -> None:
        self.unformatted = unformatted
        self.reason = reason
        super().__init__(
            "Failed to format generated code. This could be a bug in ifacemaker. "
            f"The generated code was:\n{unformatted}\nError: {reason}"
        )


class MakerStateError(IfacemakerError):
    pass
