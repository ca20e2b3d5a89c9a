"""
Exception types raised by the upload parsers.

Only uploads with no safe default raise; everything else falls back silently.
"""

from typing import List, Optional


class DashboardError(Exception):
    """Base exception for all dashboard data errors."""
    pass


class InvalidCSVError(DashboardError, ValueError):
    """Raised when an upload has no header/data rows to work with."""

    def __init__(self, dataset: str, message: Optional[str] = None):
        self.dataset = dataset
        super().__init__(message or f"Invalid CSV file for {dataset}: need a header and at least one data row")


class MissingHeadersError(DashboardError, ValueError):
    """Raised when required columns are absent from an uploaded CSV."""

    def __init__(self, dataset: str, missing: List[str]):
        self.dataset = dataset
        self.missing = list(missing)
        super().__init__(f"Missing headers for {dataset}: {', '.join(self.missing)}")
