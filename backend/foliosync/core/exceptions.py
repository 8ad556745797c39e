"""Application-level exceptions."""

from typing import Optional


class FolioSyncError(Exception):
    """Base exception for application errors."""

    def __init__(self, message: str, code: str = "FOLIOSYNC_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)


class PageFetchError(FolioSyncError):
    """Raised when an upstream page cannot be fetched."""

    def __init__(self, url: str, status_code: Optional[int] = None, reason: str = ""):
        self.url = url
        self.status_code = status_code
        self.reason = reason
        if status_code is not None:
            message = f"Failed to fetch {url}: HTTP {status_code}"
        else:
            message = f"Failed to fetch {url}: {reason or 'transport error'}"
        super().__init__(message, code="PAGE_FETCH_ERROR")


class LandingPageFetchError(PageFetchError):
    """Raised when the portfolio landing page fails; aborts the whole round."""


class SettingsValidationError(FolioSyncError):
    """Raised when user settings fail validation."""

    def __init__(self, message: str):
        super().__init__(message, code="VALIDATION_ERROR")
