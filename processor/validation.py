"""Validation of create/edit form input before it reaches the service."""
import logging
from datetime import datetime
from typing import Iterable, List, Optional, Union

from api_client.errors import ValidationError
from processor.models import EventInput
from processor.timeutils import parse_datetime_local, parse_timestamp

logger = logging.getLogger(__name__)

# Fallbacks after the datetime-local form; other layers may pass full timestamps
DATETIME_FORMATS = [
    '%Y-%m-%dT%H:%M:%S',    # datetime-local with seconds
    '%Y-%m-%d %H:%M',       # space separated
    '%Y-%m-%d %H:%M:%S',    # space separated with seconds
]


def parse_form_datetime(value: Union[str, datetime, None]) -> Optional[datetime]:
    """
    Parse a start/end value coming from a form.

    Args:
        value: datetime-local text, text in one of DATETIME_FORMATS, an ISO 8601 timestamp,
            or an already parsed datetime

    Returns:
        datetime object or None if the value is missing or unparseable
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value

    text = value.strip()
    if not text:
        return None

    try:
        return parse_datetime_local(text)
    except ValueError:
        logger.debug(f"Not a datetime-local value: {text!r}")

    for fmt in DATETIME_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue

    try:
        return parse_timestamp(text)
    except ValueError:
        return None


def normalize_tags(tags: Iterable[str]) -> List[str]:
    """Trim tags, drop empty ones and duplicates, keep first-seen order."""
    normalized = []
    for tag in tags or []:
        name = tag.strip()
        if name and name not in normalized:
            normalized.append(name)
    return normalized


def validate_event_input(
    title: Optional[str],
    start: Union[str, datetime, None],
    end: Union[str, datetime, None],
    tags: Iterable[str] = ()
) -> EventInput:
    """
    Validate raw form values and build the service payload.

    Args:
        title: Event title, surrounding whitespace is ignored
        start: Start time (form text or datetime)
        end: End time (form text or datetime)
        tags: Draft tags

    Returns:
        EventInput ready to send

    Raises:
        ValidationError: If the title is empty, a time is missing or
            unparseable, or the end is not after the start
    """
    title = (title or '').strip()
    if not title:
        raise ValidationError('title', 'Please enter an event title')

    start_time = parse_form_datetime(start)
    end_time = parse_form_datetime(end)
    if start_time is None or end_time is None:
        raise ValidationError('startTime', 'Please provide both start and end time')

    if (start_time.tzinfo is None) != (end_time.tzinfo is None):
        raise ValidationError('endTime', 'Start and end time must use the same time zone form')

    if end_time <= start_time:
        raise ValidationError('endTime', 'End time must be later than start time')

    return EventInput(
        title=title,
        start_time=start_time,
        end_time=end_time,
        tags=normalize_tags(tags)
    )
