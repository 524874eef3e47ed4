from datetime import datetime, timedelta, timezone

from sitecrawl.utils.datetime_utils import file_timestamp, to_iso, utc_now


def test_utc_now_is_aware():
    assert utc_now().tzinfo is not None


def test_to_iso_millisecond_precision_with_z():
    value = datetime(2024, 5, 1, 10, 20, 30, 123456, tzinfo=timezone.utc)
    assert to_iso(value) == "2024-05-01T10:20:30.123Z"


def test_to_iso_converts_other_offsets_to_utc():
    value = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone(timedelta(hours=2)))
    assert to_iso(value) == "2024-05-01T10:00:00.000Z"


def test_file_timestamp_is_filename_safe():
    value = datetime(2024, 5, 1, 10, 20, 30, 123000, tzinfo=timezone.utc)
    stamp = file_timestamp(value)
    assert stamp == "2024-05-01T10-20-30-123Z"
    assert ":" not in file_timestamp()
