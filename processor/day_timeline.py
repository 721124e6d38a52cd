"""Hourly bucketing of events for the day timeline."""
import logging
from dataclasses import dataclass, field
from typing import Iterable, List

from processor.models import Event

logger = logging.getLogger(__name__)

FIRST_HOUR = 8
LAST_HOUR = 22
SLOT_HEIGHT = 60  # one hour of timeline


@dataclass
class TimeSlot:
    """One hour of the day timeline and the events overlapping it."""
    hour: int
    label: str
    events: List[Event] = field(default_factory=list)


@dataclass
class EventBlock:
    """Drawable block for an event, placed in the slot of its start hour."""
    event: Event
    height: float
    offset: int


def build_time_slots() -> List[TimeSlot]:
    return [TimeSlot(hour=hour, label=f"{hour:02d}:00")
            for hour in range(FIRST_HOUR, LAST_HOUR + 1)]


def in_display_window(event: Event) -> bool:
    """
    Check whether the day timeline can show an event.

    Only the hour of day of start and end is consulted; events crossing
    midnight are not treated specially.
    """
    start_hour = event.start_time.hour
    end_hour = event.end_time.hour
    return FIRST_HOUR <= start_hour <= LAST_HOUR and FIRST_HOUR <= end_hour <= LAST_HOUR


def bucket_events(events: Iterable[Event]) -> List[TimeSlot]:
    """
    Place events into the fixed hourly slots.

    An event is appended to every slot from its start hour to its end hour
    inclusive. Events starting or ending outside 08:00-22:59 are left out
    of all slots.

    Args:
        events: Events of the displayed day

    Returns:
        List of TimeSlot objects, 08:00 through 22:00
    """
    slots = build_time_slots()
    by_hour = {slot.hour: slot for slot in slots}

    skipped = 0
    for event in sorted(events, key=lambda e: e.start_time):
        if not in_display_window(event):
            skipped += 1
            continue
        for hour in range(event.start_time.hour, event.end_time.hour + 1):
            slot = by_hour.get(hour)
            if slot is not None:
                slot.events.append(event)

    if skipped:
        logger.debug(f"{skipped} events outside the {FIRST_HOUR}-{LAST_HOUR} window not shown")
    return slots


def event_block(event: Event) -> EventBlock:
    height = min(event.duration_hours * SLOT_HEIGHT, SLOT_HEIGHT)
    return EventBlock(event=event, height=height, offset=event.start_time.minute)


def blocks_for_slot(slot: TimeSlot) -> List[EventBlock]:
    """Blocks drawn in a slot: only events that start in the slot's hour."""
    return [event_block(event) for event in slot.events
            if event.start_time.hour == slot.hour]
