"""Unit tests for time formatting helpers and the debouncer."""
from datetime import date, datetime, timedelta, timezone
from unittest.mock import Mock

import pytest

from processor.timeutils import (
    Debouncer,
    day_label,
    default_form_times,
    duration_label,
    format_datetime_local,
    format_timestamp,
    is_same_day,
    parse_datetime_local,
    parse_timestamp,
)


class FakeClock:
    def __init__(self, now=0.0):
        self.now = now

    def __call__(self):
        return self.now


class TestTimestamps:
    """Parsing and formatting of service timestamps."""

    def test_parse_utc_suffix(self):
        """Test parsing a timestamp with a Z suffix."""
        parsed = parse_timestamp('2024-01-01T09:00:00Z')

        assert parsed == datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)

    def test_parse_keeps_offset_wall_clock(self):
        """Test that the service offset is kept."""
        parsed = parse_timestamp('2024-01-01T09:30:00+03:00')

        assert parsed.hour == 9
        assert parsed.minute == 30
        assert parsed.utcoffset() == timedelta(hours=3)

    def test_parse_nanosecond_fraction(self):
        """Test parsing a nanosecond fraction."""
        parsed = parse_timestamp('2024-01-01T09:30:00.123456789+03:00')

        assert parsed.microsecond == 123456

    @pytest.mark.parametrize('value', ['', '   ', 'tomorrow', None])
    def test_parse_invalid(self, value):
        """Test parsing invalid timestamps."""
        with pytest.raises(ValueError):
            parse_timestamp(value)

    def test_format_aware(self):
        """Test formatting an aware datetime."""
        dt = datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)

        assert format_timestamp(dt) == '2024-01-01T09:00:00+00:00'

    def test_format_naive_gets_offset(self):
        """Test that naive datetimes get the local offset."""
        formatted = format_timestamp(datetime(2024, 1, 1, 9, 0))

        assert parse_timestamp(formatted).tzinfo is not None

    def test_datetime_local(self):
        """Test datetime-local formatting."""
        assert format_datetime_local(datetime(2024, 3, 5, 7, 8, 59)) == '2024-03-05T07:08'

    def test_parse_datetime_local(self):
        """Test reading a datetime-local field back into the value it was formatted from."""
        dt = datetime(2024, 3, 5, 7, 8)

        assert parse_datetime_local(format_datetime_local(dt)) == dt
        assert parse_datetime_local(' 2024-03-05T07:08 ') == dt

    @pytest.mark.parametrize('text', ['', '2024-03-05', '2024-03-05T07:08:00Z'])
    def test_parse_datetime_local_rejects_other_forms(self, text):
        """Test that text other than YYYY-MM-DDTHH:MM is rejected."""
        with pytest.raises(ValueError):
            parse_datetime_local(text)


class TestCalendarHelpers:
    """Calendar-day comparison and labels."""

    def test_same_day_ignores_time(self):
        """Test calendar-day comparison."""
        assert is_same_day(datetime(2024, 1, 1, 0, 0), datetime(2024, 1, 1, 23, 59))
        assert is_same_day(datetime(2024, 1, 1, 12, 0), date(2024, 1, 1))
        assert not is_same_day(datetime(2024, 1, 1, 23, 59), datetime(2024, 1, 2, 0, 0))

    def test_day_labels(self):
        """Test relative day labels."""
        today = date(2024, 1, 10)

        assert day_label(date(2024, 1, 10), today) == 'Today'
        assert day_label(date(2024, 1, 9), today) == 'Yesterday'
        assert day_label(datetime(2024, 1, 11, 8, 0), today) == 'Tomorrow'
        assert day_label(date(2024, 1, 20), today) == ''

    def test_duration_labels(self):
        """Test duration labels."""
        start = datetime(2024, 1, 1, 9, 0)

        assert duration_label(start, start + timedelta(minutes=90)) == '1.5 h'
        assert duration_label(start, start + timedelta(minutes=45)) == '45 min'

    def test_default_form_times(self):
        """Test default times of the add form."""
        start, end = default_form_times(datetime(2024, 1, 1, 9, 17, 42, 5))

        assert start == datetime(2024, 1, 1, 9, 17)
        assert end == datetime(2024, 1, 1, 10, 17)


class TestDebouncer:
    """Trailing-edge debounce."""

    def test_only_last_call_fires_after_quiet_period(self):
        """Test that only the last call fires after the quiet period."""
        clock = FakeClock()
        func = Mock()
        debounced = Debouncer(0.3, func, clock)

        debounced('a')
        clock.now = 0.1
        debounced('ab')
        clock.now = 0.2
        debounced('abc')

        clock.now = 0.45
        assert debounced.poll() is False
        func.assert_not_called()

        clock.now = 0.5
        assert debounced.poll() is True
        func.assert_called_once_with('abc')

        clock.now = 5.0
        assert debounced.poll() is False
        assert func.call_count == 1

    def test_flush_fires_immediately(self):
        """Test flushing a pending call."""
        func = Mock()
        debounced = Debouncer(10, func, FakeClock())

        debounced('x', page=2)

        assert debounced.pending
        assert debounced.flush() is True
        func.assert_called_once_with('x', page=2)
        assert not debounced.pending

    def test_cancel_drops_pending_call(self):
        """Test cancelling a pending call."""
        clock = FakeClock()
        func = Mock()
        debounced = Debouncer(0.3, func, clock)

        debounced('x')
        debounced.cancel()
        clock.now = 1.0

        assert debounced.poll() is False
        func.assert_not_called()
