from __future__ import annotations


class FpsOverlayError(Exception):
    """Base class for overlay failures."""


class ResourceUnavailable(FpsOverlayError, OSError):
    """The sample resource could not be opened; the overlay cannot run."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Unable to open {path}, {reason}")
        self.path = path
        self.reason = reason


class ProbeFailure(FpsOverlayError):
    """A single probe of the sample resource failed."""
