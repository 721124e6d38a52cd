"""Date/time formatting helpers and a clock-driven debouncer."""
import logging
import time
from datetime import date, datetime, timedelta
from typing import Any, Callable, Optional, Tuple, Union

logger = logging.getLogger(__name__)

DATETIME_LOCAL_FORMAT = '%Y-%m-%dT%H:%M'


def parse_timestamp(value: Union[str, datetime]) -> datetime:
    """
    Parse an RFC 3339 / ISO 8601 timestamp.

    Args:
        value: Timestamp text (e.g. "2024-01-01T09:00:00Z") or a datetime

    Returns:
        datetime object, timezone-aware when the text carries an offset

    Raises:
        ValueError: If the text is not a valid timestamp
    """
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Invalid timestamp: {value!r}")

    return datetime.fromisoformat(value.strip())


def format_timestamp(dt: datetime) -> str:
    """Serialize with an explicit offset; naive values are local wall-clock time."""
    if dt.tzinfo is None:
        dt = dt.astimezone()
    return dt.isoformat(timespec='seconds')


def format_datetime_local(dt: datetime) -> str:
    return dt.strftime(DATETIME_LOCAL_FORMAT)


def parse_datetime_local(text: str) -> datetime:
    """
    Parse the value of a datetime-local form field ("2024-01-01T09:00").

    Raises:
        ValueError: If the text does not match DATETIME_LOCAL_FORMAT
    """
    return datetime.strptime(text.strip(), DATETIME_LOCAL_FORMAT)


def format_date(day: Union[date, datetime]) -> str:
    return day.strftime('%A, %d %B %Y')


def format_time(dt: datetime) -> str:
    return dt.strftime('%H:%M')


def _as_date(value: Union[date, datetime]) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def is_same_day(first: Union[date, datetime], second: Union[date, datetime]) -> bool:
    """Compare two values by calendar day, ignoring the time of day."""
    return _as_date(first) == _as_date(second)


def day_label(day: Union[date, datetime], today: Union[date, datetime]) -> str:
    """
    Relative label for a day shown in the day view header.

    Args:
        day: Day being displayed
        today: Reference day

    Returns:
        "Today", "Yesterday", "Tomorrow" or an empty string
    """
    delta = (_as_date(day) - _as_date(today)).days
    return {0: 'Today', -1: 'Yesterday', 1: 'Tomorrow'}.get(delta, '')


def duration_label(start: datetime, end: datetime) -> str:
    hours = (end - start).total_seconds() / 3600
    if hours >= 1:
        return f"{hours:.1f} h"
    return f"{round(hours * 60)} min"


def default_form_times(now: datetime) -> Tuple[datetime, datetime]:
    """Start and end shown in a fresh create form: now and one hour later."""
    start = now.replace(second=0, microsecond=0)
    return start, start + timedelta(hours=1)


class Debouncer:
    """
    Trailing-edge debounce driven by an explicit clock.

    Each call restarts the quiet period and replaces the pending arguments.
    The wrapped function runs once, with the latest arguments, when poll()
    observes that the quiet period has elapsed.
    """

    def __init__(
        self,
        wait_seconds: float,
        func: Callable[..., Any],
        clock: Callable[[], float] = time.monotonic
    ):
        self.wait_seconds = wait_seconds
        self.func = func
        self.clock = clock
        self._pending: Optional[Tuple[tuple, dict]] = None
        self._deadline: Optional[float] = None

    def __call__(self, *args, **kwargs) -> None:
        self._pending = (args, kwargs)
        self._deadline = self.clock() + self.wait_seconds

    @property
    def pending(self) -> bool:
        return self._pending is not None

    def poll(self) -> bool:
        """
        Fire the pending call if its quiet period has elapsed.

        Returns:
            True if the wrapped function was called
        """
        if self._pending is None or self.clock() < self._deadline:
            return False
        return self.flush()

    def flush(self) -> bool:
        if self._pending is None:
            return False
        args, kwargs = self._pending
        self._pending = None
        self._deadline = None
        self.func(*args, **kwargs)
        return True

    def cancel(self) -> None:
        if self._pending is not None:
            logger.debug("Dropping pending debounced call")
        self._pending = None
        self._deadline = None
