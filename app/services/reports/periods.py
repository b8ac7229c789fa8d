import calendar
import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from enum import Enum

from app.services.reports.errors import InvalidReportRequest


class ReportType(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


_ISO_WEEK = re.compile(r"^(\d{4})-W(\d{1,2})$")
_MONTH = re.compile(r"^(\d{4})-(\d{1,2})$")
_YEAR = re.compile(r"^(\d{4})$")


@dataclass(frozen=True)
class ReportWindow:
    """Inclusive report window. ``None`` bounds mean the window is open."""

    start: datetime | None = None
    end: datetime | None = None
    explicit_range: bool = False

    @property
    def bounded(self) -> bool:
        return self.start is not None and self.end is not None

    def contains(self, value: datetime | None) -> bool:
        if value is None:
            return False
        if self.start is not None and value < self.start:
            return False
        if self.end is not None and value > self.end:
            return False
        return True


def _day_window(first: date, last: date, *, explicit_range: bool = False) -> ReportWindow:
    return ReportWindow(
        start=datetime.combine(first, time.min),
        end=datetime.combine(last, time.max),
        explicit_range=explicit_range,
    )


def _parse_day(value: str, field: str) -> date:
    text = value.strip()
    try:
        if len(text) > 10:
            # a full timestamp is accepted, trailing junk is not
            if text.endswith("Z"):
                text = f"{text[:-1]}+00:00"
            return datetime.fromisoformat(text).date()
        return date.fromisoformat(text)
    except ValueError as exc:
        raise InvalidReportRequest(f"Invalid {field}: {value!r}, expected YYYY-MM-DD") from exc


def _week_window(value: str) -> ReportWindow:
    match = _ISO_WEEK.match(value.strip())
    if match:
        try:
            monday = date.fromisocalendar(int(match.group(1)), int(match.group(2)), 1)
        except ValueError as exc:
            raise InvalidReportRequest(f"Invalid week: {value!r}") from exc
        first = monday - timedelta(days=1)
    else:
        day = _parse_day(value, "date")
        # weeks run Sunday to Saturday
        first = day - timedelta(days=(day.weekday() + 1) % 7)
    return _day_window(first, first + timedelta(days=6))


def _month_window(value: str) -> ReportWindow:
    match = _MONTH.match(value.strip())
    if match:
        year, month = int(match.group(1)), int(match.group(2))
    else:
        day = _parse_day(value, "date")
        year, month = day.year, day.month
    if not 1 <= month <= 12:
        raise InvalidReportRequest(f"Invalid month: {value!r}, expected YYYY-MM")
    try:
        first = date(year, month, 1)
    except ValueError as exc:
        raise InvalidReportRequest(f"Invalid month: {value!r}, year out of range") from exc
    return _day_window(first, date(year, month, calendar.monthrange(year, month)[1]))


def _year_window(value: str) -> ReportWindow:
    match = _YEAR.match(value.strip())
    if match:
        year = int(match.group(1))
    else:
        year = _parse_day(value, "date").year
    try:
        first = date(year, 1, 1)
    except ValueError as exc:
        raise InvalidReportRequest(f"Invalid year: {value!r}") from exc
    return _day_window(first, date(year, 12, 31))


def parse_report_type(value: str | ReportType | None) -> ReportType:
    if isinstance(value, ReportType):
        return value
    if value is None or not str(value).strip():
        return ReportType.DAILY
    try:
        return ReportType(str(value).strip().lower())
    except ValueError as exc:
        raise InvalidReportRequest(f"Invalid report type: {value!r}") from exc


def resolve_window(
    report_type: ReportType,
    date_value: str | None = None,
    start_date: str | None = None,
    end_date: str | None = None,
) -> ReportWindow:
    if start_date and end_date:
        first = _parse_day(start_date, "startDate")
        last = _parse_day(end_date, "endDate")
        if first > last:
            raise InvalidReportRequest("startDate must not be after endDate")
        return _day_window(first, last, explicit_range=True)
    if start_date or end_date:
        raise InvalidReportRequest("startDate and endDate must be given together")

    if not date_value:
        return ReportWindow()
    if report_type is ReportType.DAILY:
        day = _parse_day(date_value, "date")
        return _day_window(day, day)
    if report_type is ReportType.WEEKLY:
        try:
            return _week_window(date_value)
        except OverflowError as exc:
            # the week spills past date.min or date.max
            raise InvalidReportRequest(f"Week out of range: {date_value!r}") from exc
    if report_type is ReportType.MONTHLY:
        return _month_window(date_value)
    return _year_window(date_value)


def previous_window(report_type: ReportType, window: ReportWindow) -> ReportWindow | None:
    """The period immediately before ``window``; ``None`` for open windows or when none exists."""
    if not window.bounded:
        return None
    try:
        return _shift_back(report_type, window)
    except (ValueError, OverflowError):
        # nothing precedes the first supported day
        return None


def _shift_back(report_type: ReportType, window: ReportWindow) -> ReportWindow:
    first = window.start.date()
    last = window.end.date()
    if window.explicit_range or report_type in (ReportType.DAILY, ReportType.WEEKLY):
        length = (last - first).days + 1
        return _day_window(first - timedelta(days=length), first - timedelta(days=1), explicit_range=window.explicit_range)
    if report_type is ReportType.MONTHLY:
        previous_last = first - timedelta(days=1)
        return _day_window(previous_last.replace(day=1), previous_last)
    return _day_window(date(first.year - 1, 1, 1), date(first.year - 1, 12, 31))


def days_in_month(window: ReportWindow) -> int:
    if window.end is None:
        return 31
    return calendar.monthrange(window.end.year, window.end.month)[1]
