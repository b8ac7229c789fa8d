from app.services.reports.assembler import ReportRequest, generate_report
from app.services.reports.errors import InvalidReportRequest, ReportError, ReportStorageError
from app.services.reports.periods import ReportType
from app.services.reports.storage import ReportStorage, SqlAlchemyReportStorage

__all__ = [
    "InvalidReportRequest",
    "ReportError",
    "ReportRequest",
    "ReportStorage",
    "ReportStorageError",
    "ReportType",
    "SqlAlchemyReportStorage",
    "generate_report",
]
