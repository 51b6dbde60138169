from typing import Optional


class CompileError(ValueError):
    """A pattern line could not be turned into a Pattern."""

    def __init__(self, message: str, line: Optional[bytes] = None):
        super().__init__(message)
        self.line = line

    def __str__(self) -> str:
        message = super().__str__()
        if self.line is None:
            return message
        return f"{message}: {self.line!r}"


class MatchDepthExceeded(RuntimeError):
    """Wildcard backtracking nested deeper than MAX_WILDCARD_DEPTH."""


class BaselineError(ValueError):
    """A baseline transcript is malformed or contradicts itself."""
