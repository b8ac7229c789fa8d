from datetime import datetime

from app.services.reports.buckets import MONTH_NAMES, WEEKDAY_NAMES, aggregate_buckets, bucket_index, bucket_labels
from app.services.reports.periods import ReportType, ReportWindow, resolve_window


def test_bucket_counts_per_report_type():
    assert len(bucket_labels(ReportType.DAILY, ReportWindow())) == 24
    assert bucket_labels(ReportType.WEEKLY, ReportWindow()) == list(WEEKDAY_NAMES)
    assert bucket_labels(ReportType.YEARLY, ReportWindow()) == list(MONTH_NAMES)
    assert len(bucket_labels(ReportType.MONTHLY, resolve_window(ReportType.MONTHLY, "2024-02"))) == 29
    assert len(bucket_labels(ReportType.MONTHLY, resolve_window(ReportType.MONTHLY, "2023-02"))) == 28
    assert len(bucket_labels(ReportType.MONTHLY, ReportWindow())) == 31


def test_daily_labels_are_hours():
    labels = bucket_labels(ReportType.DAILY, ReportWindow())

    assert labels[0] == "0:00"
    assert labels[23] == "23:00"


def test_weekly_index_starts_on_sunday():
    assert bucket_index(ReportType.WEEKLY, datetime(2024, 3, 10)) == 0  # Sunday
    assert bucket_index(ReportType.WEEKLY, datetime(2024, 3, 11)) == 1
    assert bucket_index(ReportType.WEEKLY, datetime(2024, 3, 16)) == 6


def test_entries_are_folded_into_their_bucket():
    window = resolve_window(ReportType.DAILY, "2024-03-15")
    entries = [
        (datetime(2024, 3, 15, 9, 5), 100.0, 20.0),
        (datetime(2024, 3, 15, 9, 55), 50.0, 5.0),
        (datetime(2024, 3, 15, 17, 0), 10.0, 1.0),
    ]

    buckets = aggregate_buckets(ReportType.DAILY, window, entries)

    assert (buckets[9].revenue, buckets[9].profit) == (150.0, 25.0)
    assert buckets[17].revenue == 10.0
    assert sum(bucket.revenue for bucket in buckets) == 160.0


def test_undated_and_out_of_range_entries_are_skipped():
    window = resolve_window(ReportType.MONTHLY, "2023-02")
    entries = [
        (None, 99.0, 9.0),
        # day 30 has no bucket in a 28-day month
        (datetime(2023, 1, 30), 40.0, 4.0),
        (datetime(2023, 2, 28), 7.0, 1.0),
    ]

    buckets = aggregate_buckets(ReportType.MONTHLY, window, entries)

    assert len(buckets) == 28
    assert sum(bucket.revenue for bucket in buckets) == 7.0
    assert buckets[27].label == "28"
