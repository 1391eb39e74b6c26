"""Exception hierarchy shared by the form controller and the request handlers."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from .error_codes import ErrorCode

if TYPE_CHECKING:
    from .models import SearchOutcome


class CrawlError(Exception):
    def __init__(self, error_code: str, message: str) -> None:
        super().__init__(message)
        self.error_code = error_code

    def __str__(self) -> str:  # pragma: no cover - inherited behaviour
        return str(self.args[0]) if self.args else ""


class UsageError(CrawlError):
    """Bad or missing caller input; raised before any browser work starts."""

    def __init__(self, message: str) -> None:
        super().__init__(ErrorCode.USAGE, message)


class NonRetryableError(CrawlError):
    """The request failed in a way another attempt cannot fix."""


class TerminalQueryError(NonRetryableError):
    """The search itself is unsatisfiable as posed; the whole crawl stops."""

    def __init__(
        self, error_code: str, message: str, *, outcome: Optional["SearchOutcome"] = None
    ) -> None:
        super().__init__(error_code, message)
        self.outcome = outcome


class TransientCrawlError(CrawlError):
    """A bounded wait expired or the page came back in an unexpected shape."""


__all__ = [
    "CrawlError",
    "UsageError",
    "NonRetryableError",
    "TerminalQueryError",
    "TransientCrawlError",
]
