"""Pure view derivations: state snapshot in, renderable description out."""
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, Iterable, List, Optional

from processor.day_timeline import EventBlock, TimeSlot, blocks_for_slot, bucket_events
from processor.models import Event
from processor.tag_aggregator import suggest_tags, tag_color
from processor.timeutils import (
    day_label,
    duration_label,
    format_date,
    format_datetime_local,
    format_time,
)
from state.app_state import AppState, View

FORM_TAG_SHORTCUTS = 5


@dataclass
class TagChip:
    name: str
    color: str


@dataclass
class EventItem:
    """One event line in the list and search views."""
    event: Event
    when: str
    time_range: str
    duration: str
    tags: List[TagChip] = field(default_factory=list)


@dataclass
class DayView:
    day: date
    title: str
    subtitle: str
    slots: List[TimeSlot]
    blocks: Dict[int, List[EventBlock]]
    is_empty: bool
    view: View = View.DAY


@dataclass
class ListView:
    items: List[EventItem]
    is_empty: bool
    view: View = View.LIST


@dataclass
class FormView:
    view: View
    title: str
    start: str
    end: str
    tags: List[TagChip]
    shortcuts: List[TagChip]
    event_id: Optional[str] = None
    tag_query: str = ''
    suggestions: List[TagChip] = field(default_factory=list)


@dataclass
class SearchView:
    """
    Search results panel.

    status is one of: idle (no query yet), loading, results, empty,
    error, disconnected.
    """
    query: str
    status: str
    results: List[EventItem] = field(default_factory=list)
    message: Optional[str] = None
    view: View = View.SEARCH


@dataclass
class TagsView:
    tags: List[TagChip]
    counts: Dict[str, int]
    is_empty: bool
    view: View = View.TAGS


def tag_chips(names: Iterable[str]) -> List[TagChip]:
    return [TagChip(name=name, color=tag_color(name)) for name in names]


def event_item(event: Event, today: date) -> EventItem:
    start = event.start_time
    label = day_label(start, today)
    when = label if label in ('Today', 'Tomorrow') else format_date(start)
    return EventItem(
        event=event,
        when=when,
        time_range=f"{format_time(start)} - {format_time(event.end_time)}",
        duration=duration_label(start, event.end_time),
        tags=tag_chips(event.tags)
    )


def render_day_view(state: AppState, day_events: List[Event], today: date) -> DayView:
    """
    Describe the day timeline for state.current_date.

    Args:
        state: Store snapshot
        day_events: Events of the displayed day
        today: Reference day for the Today/Yesterday/Tomorrow subtitle

    Returns:
        DayView with 15 hourly slots and the blocks drawn in each
    """
    slots = bucket_events(day_events)
    return DayView(
        day=state.current_date,
        title=format_date(state.current_date),
        subtitle=day_label(state.current_date, today),
        slots=slots,
        blocks={slot.hour: blocks_for_slot(slot) for slot in slots},
        is_empty=not day_events
    )


def render_list_view(state: AppState, today: date) -> ListView:
    # newest start first
    events = sorted(state.events, key=lambda e: e.start_time, reverse=True)
    return ListView(
        items=[event_item(event, today) for event in events],
        is_empty=not events
    )


def render_form_view(state: AppState, view: View, start: datetime, end: datetime,
                     title: str = '', event_id: Optional[str] = None,
                     tag_query: str = '') -> FormView:
    """
    Describe the create or edit form.

    Args:
        state: Store snapshot, its temp_tags are the draft tags
        view: View.ADD or View.EDIT
        start: Initial start time
        end: Initial end time
        title: Initial title (edit only)
        event_id: Event being edited
        tag_query: Text typed into the tag input, drives the suggestions

    Returns:
        FormView with datetime-local field values
    """
    return FormView(
        view=view,
        title=title,
        start=format_datetime_local(start),
        end=format_datetime_local(end),
        tags=tag_chips(state.temp_tags),
        shortcuts=[TagChip(name=tag.name, color=tag.color)
                   for tag in state.tags[:FORM_TAG_SHORTCUTS]],
        event_id=event_id,
        tag_query=tag_query,
        suggestions=tag_chips(suggest_tags(tag_query, state.tags, state.temp_tags))
    )


def render_search_view(state: AppState, status: str, results: List[Event],
                       today: date, message: Optional[str] = None) -> SearchView:
    # service order is kept
    return SearchView(
        query=state.search_query,
        status=status,
        results=[event_item(event, today) for event in results],
        message=message
    )


def render_tags_view(state: AppState) -> TagsView:
    return TagsView(
        tags=[TagChip(name=tag.name, color=tag.color) for tag in state.tags],
        counts={tag.name: tag.count for tag in state.tags},
        is_empty=not state.tags
    )
