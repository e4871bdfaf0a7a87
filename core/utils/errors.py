"""Custom exceptions for snapshot acquisition."""

from __future__ import annotations


class AcquisitionError(Exception):
    """Raised when serving or loading the build artifact fails."""

    def __init__(self, message: str, *, stage: str) -> None:
        super().__init__(message)
        self.stage = stage


class ServerStartError(AcquisitionError):
    """Raised when the static server cannot bind or does not come up."""

    def __init__(self, message: str, *, port: int | None = None) -> None:
        super().__init__(message, stage="serve")
        self.port = port


class PageLoadError(AcquisitionError):
    """Raised when navigation yields no response or an error status."""

    def __init__(self, message: str, *, url: str, status: int | None = None) -> None:
        super().__init__(message, stage="load")
        self.url = url
        self.status = status
