"""Error types for hwmon.

Errors raised inside a collection round (ProviderError and NoDataError) are
recovered by the round itself: they are logged and the affected snapshot
fields are left at zero. InitializationError is the only fatal error the
core surfaces to its caller.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from hwmon.models.base import MetricKind


class HwmonError(Exception):
    """Base class for hwmon errors."""


class ProviderError(HwmonError):
    """A metric provider call failed or returned unusable data.

    Attributes:
        kind: The metric kind the failing call was sampling (if known)
        message: Human-readable reason, without the kind prefix
    """

    def __init__(self, message: str, kind: MetricKind | None = None) -> None:
        self.message = message
        self.kind = kind
        super().__init__(message)

    def with_kind(self, kind: MetricKind) -> ProviderError:
        """Return this error tagged with ``kind`` (sets it in place if missing)."""
        if self.kind is None:
            self.kind = kind
        return self


class NoDataError(ProviderError):
    """A provider call succeeded but returned an empty or degenerate reading."""

    def __init__(self, message: str = "no data returned", kind: MetricKind | None = None) -> None:
        super().__init__(message, kind)


class InitializationError(HwmonError):
    """The presenter or event source failed to initialize before the loop started."""
