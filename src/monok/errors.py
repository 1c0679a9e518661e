"""Exceptions raised for misuse of monok.

Domain failures travel as ``Err`` values and never show up here. These types
cover programming errors only: unwrapping the wrong variant, and malformed
pipeline sites found while rewriting a decorated function.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Self

from pydantic import BaseModel


class ErrorCode(StrEnum):
    """Codes for monok usage errors."""
    NOT_A_CALL = "NOT_A_CALL"
    SOURCE_UNAVAILABLE = "SOURCE_UNAVAILABLE"
    NOT_A_FUNCTION = "NOT_A_FUNCTION"
    ALREADY_WRAPPED = "ALREADY_WRAPPED"
    UNSUPPORTED_SITE = "UNSUPPORTED_SITE"
    UNWRAP_FAILED = "UNWRAP_FAILED"


class ErrorInfo(BaseModel):
    """Structured description of a usage error, with optional source location."""

    model_config = {"frozen": True}

    message: str
    code: ErrorCode
    filename: str | None = None
    lineno: int | None = None

    @property
    def location(self) -> str:
        if self.filename is None:
            return ""
        return f"{self.filename}:{self.lineno}" if self.lineno is not None else self.filename

    def render(self) -> str:
        loc = self.location
        return f"{self.message} [{self.code}]" + (f" ({loc})" if loc else "")

    __str__ = render


class MonokError(Exception):
    """Base exception wrapping an ErrorInfo."""

    def __init__(self, error: ErrorInfo) -> None:
        self.error = error
        super().__init__(error.render())

    @classmethod
    def create(
        cls,
        message: str,
        code: ErrorCode,
        *,
        filename: str | None = None,
        lineno: int | None = None,
    ) -> Self:
        return cls(ErrorInfo(message=message, code=code, filename=filename, lineno=lineno))

    @property
    def code(self) -> ErrorCode:
        return self.error.code

    @property
    def message(self) -> str:
        return self.error.message


class UnwrapError(MonokError, RuntimeError):
    """Raised by unwrap()/expect() and friends when called on the wrong variant."""

    @classmethod
    def wrong_variant(cls, message: str) -> Self:
        return cls.create(message, ErrorCode.UNWRAP_FAILED)


class RewriteError(MonokError):
    """Raised at decoration time when a pipeline function cannot be rewritten.

    Carries the file and line of the offending site when one is known.
    """

    @property
    def filename(self) -> str | None:
        return self.error.filename

    @property
    def lineno(self) -> int | None:
        return self.error.lineno
