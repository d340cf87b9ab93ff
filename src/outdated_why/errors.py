"""Custom exceptions for outdated-why with user-friendly error messages."""


class OutdatedWhyError(Exception):
    """Base exception with user-friendly message and optional hint.

    Attributes:
        message: The main error message.
        hint: Optional hint for resolving the error.
    """

    def __init__(self, message: str, hint: str = "") -> None:
        """Initialize the exception.

        Args:
            message: The main error message.
            hint: Optional hint for resolving the error.
        """
        self.message = message
        self.hint = hint
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation."""
        if self.hint:
            return f"{self.message}\nHint: {self.hint}"
        return self.message


class ConfigurationError(OutdatedWhyError):
    """Invalid configuration."""

    pass


class InputError(OutdatedWhyError):
    """An input file could not be read."""

    def __init__(
        self,
        path: str,
        original_error: Exception | None = None,
        message: str = "",
        hint: str = "",
    ) -> None:
        if not message:
            message = f"Failed to read input file {path}"
            if original_error:
                message += f": {original_error}"
        if not hint:
            hint = "Check that the file exists and is readable."
        super().__init__(message, hint)


class ParseError(OutdatedWhyError):
    """Failed to parse package manager output."""

    pass


class OutdatedParseError(ParseError):
    """Failed to parse `npm outdated --json` output."""

    def __init__(self, message: str = "", hint: str = "") -> None:
        if not message:
            message = "Failed to parse outdated package listing"
        if not hint:
            hint = "Capture it with `npm outdated --json > outdated.json`."
        super().__init__(message, hint)


class AuditParseError(ParseError):
    """Failed to parse `npm audit --json` output."""

    def __init__(self, message: str = "", hint: str = "") -> None:
        if not message:
            message = "Failed to parse security audit output"
        if not hint:
            hint = "Capture it with `npm audit --json > audit.json` (npm 7 or newer)."
        super().__init__(message, hint)


class RegistryParseError(ParseError):
    """Failed to parse registry metadata."""

    def __init__(self, package: str = "", message: str = "", hint: str = "") -> None:
        if not message:
            message = f"Failed to parse registry metadata for {package}" if package else "Failed to parse registry metadata"
        if not hint:
            hint = "Expected a JSON object keyed by package name with `time` and `versions` fields."
        super().__init__(message, hint)


class KnowledgeBaseError(OutdatedWhyError):
    """The breaking-change table could not be loaded."""

    def __init__(self, source: str = "", message: str = "", hint: str = "") -> None:
        if not message:
            message = f"Invalid breaking-change table in {source}" if source else "Invalid breaking-change table"
        if not hint:
            hint = "Entries are keyed by package, then major version, with summary, url and effort fields."
        super().__init__(message, hint)

