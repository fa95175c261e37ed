"""Exception types raised by the archive, planner and builder layers."""


class TextToSlidesError(Exception):
    """Base class for every error raised by this package."""


class ArchiveError(TextToSlidesError):
    pass


class ArchiveFormatError(ArchiveError):
    """Raised when bytes cannot be opened as a zip package."""


class EntryNotFoundError(ArchiveError, KeyError):
    """Raised when a package entry is requested that does not exist."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Entry not found in package: {path}")

    def __str__(self) -> str:
        return self.args[0]


class ProviderError(TextToSlidesError):
    """Raised when an LLM provider call fails or returns an unusable body."""

    def __init__(self, provider: str, message: str):
        self.provider = provider
        super().__init__(f"[{provider}] {message}")


class UnsupportedProviderError(ProviderError, ValueError):
    def __init__(self, provider: str):
        super().__init__(provider, f"Unsupported LLM provider: {provider}")


class BuildError(TextToSlidesError):
    """Raised when the generated package cannot be assembled or serialized."""


class UploadValidationError(ValueError):
    """Raised for request problems caught before any core component runs."""

    def __init__(self, issues):
        self.issues = [str(i).strip() for i in issues if str(i).strip()]
        if not self.issues:
            self.issues = ["Invalid request"]
        super().__init__(self._format())

    def _format(self) -> str:
        lines = ["Request validation failed:"]
        for issue in self.issues:
            lines.append(f"- {issue}")
        return "\n".join(lines)
