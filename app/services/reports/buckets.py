from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

from app.services.reports.periods import ReportType, ReportWindow, days_in_month

WEEKDAY_NAMES = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")
MONTH_NAMES = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)


@dataclass
class ReportBucket:
    label: str
    revenue: float = 0.0
    profit: float = 0.0


def bucket_labels(report_type: ReportType, window: ReportWindow) -> list[str]:
    if report_type is ReportType.DAILY:
        return [f"{hour}:00" for hour in range(24)]
    if report_type is ReportType.WEEKLY:
        return list(WEEKDAY_NAMES)
    if report_type is ReportType.MONTHLY:
        return [str(day) for day in range(1, days_in_month(window) + 1)]
    return list(MONTH_NAMES)


def bucket_index(report_type: ReportType, value: datetime) -> int:
    if report_type is ReportType.DAILY:
        return value.hour
    if report_type is ReportType.WEEKLY:
        # datetime.weekday() is Monday-based
        return (value.weekday() + 1) % 7
    if report_type is ReportType.MONTHLY:
        return value.day - 1
    return value.month - 1


def aggregate_buckets(
    report_type: ReportType,
    window: ReportWindow,
    entries: Iterable[tuple[datetime | None, float, float]],
) -> list[ReportBucket]:
    """Fold ``(date, revenue, profit)`` entries into the buckets of ``report_type``.

    Entries without a date, or whose date component has no bucket, are skipped.
    """
    buckets = [ReportBucket(label=label) for label in bucket_labels(report_type, window)]
    for when, revenue, profit in entries:
        if when is None:
            continue
        index = bucket_index(report_type, when)
        if not 0 <= index < len(buckets):
            continue
        buckets[index].revenue += revenue
        buckets[index].profit += profit
    return buckets
