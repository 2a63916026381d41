"""Error taxonomy for provider operations.

Every failure raised by the provider layer is a ProviderError carrying a
category, a short summary and a detail message. Orchestrators that want values
instead of exceptions can turn any of them into a Diagnostic.
"""
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Diagnostic:
    """Structured description of a failed operation."""
    category: str
    summary: str
    detail: str


class ProviderError(Exception):
    """Base class for all provider errors."""

    category = "error"
    summary = "Provider error"

    def __init__(self, detail: str, summary: Optional[str] = None):
        super().__init__(detail)
        self.detail = detail
        if summary is not None:
            self.summary = summary

    def to_diagnostic(self) -> Diagnostic:
        return Diagnostic(category=self.category, summary=self.summary, detail=self.detail)


class ConfigurationError(ProviderError):
    """Provider configuration is missing, invalid, or wired incorrectly."""

    category = "configuration"
    summary = "Provider configuration error"


class ValidationError(ProviderError):
    """A required field was empty. Raised before any bws call is made."""

    category = "validation"
    summary = "Invalid configuration"


class ExecutionError(ProviderError):
    """The bws process failed to spawn, exited non-zero, or timed out.

    The detail is the process's stderr verbatim.
    """

    category = "execution"
    summary = "Bitwarden CLI encountered an error"

    def __init__(self, detail: str, returncode: Optional[int] = None):
        super().__init__(detail)
        self.returncode = returncode


class DecodeError(ProviderError):
    """bws output was not valid JSON or did not have the expected shape."""

    category = "decode"
    summary = "Unable to decode bws output"
