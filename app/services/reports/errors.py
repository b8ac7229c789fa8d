class ReportError(Exception):
    """Base exception for report generation."""


class InvalidReportRequest(ReportError, ValueError):
    """Raised when the report type or date parameters cannot be interpreted."""


class ReportStorageError(ReportError):
    """Raised when the records needed for a report could not be loaded."""
