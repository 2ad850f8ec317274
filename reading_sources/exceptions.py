"""
Custom exceptions for the reading_sources package.

Error philosophy:
  - TransportFailure   → the page could not be retrieved (after the single
                         alternate-URL retry). A network/site problem.
  - StructuralMismatch → the page was retrieved, but a required field ran out
                         of fallback patterns. The site markup drifted and an
                         adapter needs a pattern update.
  - EmptyResult        → the markup matched, but the payload is empty
                         (blank chapter body, zero page images).

search() never lets any of these escape: it returns an empty list and reports
the failure. get_details() and get_content() raise them to the caller.
"""

from typing import Optional


class ReadingSourceError(Exception):
    """Base exception for all reading_sources errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class TransportFailure(ReadingSourceError):
    """Raised when a page request fails or answers with a non-success status."""

    def __init__(
        self,
        message: str,
        url: str,
        status: Optional[int] = None,
        details: Optional[dict] = None
    ):
        super().__init__(message, details)
        self.url = url
        # None when the transport itself failed (DNS, timeout, refused...)
        self.status = status


class StructuralMismatch(ReadingSourceError):
    """
    Raised when a required field exhausted all of its fallback patterns.

    Distinct from TransportFailure: the document arrived fine, but none of
    the known layouts for the field matched it.
    """

    def __init__(
        self,
        field: str,
        url: str,
        details: Optional[dict] = None
    ):
        super().__init__(f"No pattern matched required field '{field}' at {url}", details)
        self.field = field
        self.url = url


class EmptyResult(ReadingSourceError):
    """Raised when a required field matched but its cleaned payload is empty."""

    def __init__(
        self,
        field: str,
        url: str,
        details: Optional[dict] = None
    ):
        super().__init__(f"Field '{field}' matched but is empty at {url}", details)
        self.field = field
        self.url = url
