"""
Error types shared by the analytics, featured-content and adapter layers.

The API maps these onto HTTP status codes; the CLI prints them and exits 1.
"""
from typing import List, Optional


class CmsError(Exception):
    """Base class for every error raised by this project."""


class InvalidRowError(CmsError):
    """A metric row cannot be grouped because it has no usable date."""

    def __init__(self, message: str, row: Optional[object] = None) -> None:
        super().__init__(message)
        self.row = row


class CategoryResolutionError(CmsError):
    """One or more featured categories could not be found or created."""

    def __init__(self, missing: List[str]) -> None:
        self.missing = list(missing)
        names = ", ".join(self.missing)
        super().__init__(f"could not save featured content, category {names} missing")


class GatewayError(CmsError):
    """An I/O failure talking to Supabase or Brevo."""

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code
