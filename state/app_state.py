"""Application state and the store that owns it."""
import dataclasses
import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from enum import Enum
from typing import Callable, Iterable, List, Optional

from api_client.errors import ConnectivityError
from api_client.schedule_api import ScheduleApiClient
from processor.models import ApiResult, Event, Tag
from processor.tag_aggregator import aggregate_tags
from processor.validation import normalize_tags
from state.sequencing import RequestSequencer

logger = logging.getLogger(__name__)

REFRESH = 'refresh'


class View(str, Enum):
    DAY = 'day'
    LIST = 'list'
    ADD = 'add'
    EDIT = 'edit'
    SEARCH = 'search'
    TAGS = 'tags'


@dataclass
class AppState:
    """Snapshot of everything the views are rendered from."""
    current_view: View = View.DAY
    events: List[Event] = field(default_factory=list)
    tags: List[Tag] = field(default_factory=list)
    current_date: date = field(default_factory=date.today)
    selected_event_id: Optional[str] = None
    search_query: str = ''
    temp_tags: List[str] = field(default_factory=list)
    connected: bool = False
    is_loading: bool = False


class StateStore:
    """
    Single owner of the mutable AppState.

    Events are replaced wholesale by refresh(); everything else changes only
    through the explicit setters below. Listeners are called after every
    successful refresh so the current view can be rendered again.
    """

    def __init__(self, client: ScheduleApiClient,
                 sequencer: Optional[RequestSequencer] = None,
                 today: Optional[date] = None):
        self.client = client
        self.sequencer = sequencer or RequestSequencer()
        self._state = AppState()
        if today is not None:
            self._state.current_date = today
        self._listeners: List[Callable[[], None]] = []

    def subscribe(self, listener: Callable[[], None]) -> None:
        self._listeners.append(listener)

    def snapshot(self) -> AppState:
        return dataclasses.replace(
            self._state,
            events=list(self._state.events),
            tags=list(self._state.tags),
            temp_tags=list(self._state.temp_tags)
        )

    @property
    def current_view(self) -> View:
        return self._state.current_view

    @property
    def events(self) -> List[Event]:
        return list(self._state.events)

    @property
    def tags(self) -> List[Tag]:
        return list(self._state.tags)

    @property
    def current_date(self) -> date:
        return self._state.current_date

    @property
    def search_query(self) -> str:
        return self._state.search_query

    @property
    def temp_tags(self) -> List[str]:
        return list(self._state.temp_tags)

    @property
    def connected(self) -> bool:
        return self._state.connected

    @property
    def is_loading(self) -> bool:
        return self._state.is_loading

    @property
    def selected_event_id(self) -> Optional[str]:
        return self._state.selected_event_id

    @property
    def selected_event(self) -> Optional[Event]:
        """The selected event resolved against the current cache, or None."""
        return self.find_event(self._state.selected_event_id)

    def find_event(self, event_id: Optional[str]) -> Optional[Event]:
        if event_id is None:
            return None
        for event in self._state.events:
            if event.id == event_id:
                return event
        return None

    def stats(self) -> dict:
        return {'events': len(self._state.events), 'tags': len(self._state.tags)}

    def refresh(self, notify: bool = True) -> bool:
        """
        Reload all events from the service and recompute tags.

        Args:
            notify: Call the listeners after the cache was replaced

        Returns:
            True if the cache was replaced
        """
        if not self._state.connected:
            logger.warning("Skipping refresh while the schedule service is disconnected")
            return False

        seq = self.begin_refresh()
        return self.complete_refresh(seq, self.client.list_events(), notify=notify)

    def begin_refresh(self) -> int:
        self._state.is_loading = True
        return self.sequencer.issue(REFRESH)

    def complete_refresh(self, seq: int, result: ApiResult, notify: bool = True) -> bool:
        """
        Apply the outcome of a refresh request.

        Args:
            seq: Sequence number from begin_refresh()
            result: Result of the list events call
            notify: Call the listeners if the cache was replaced

        Returns:
            True if the cache was replaced; False for failures and for
            responses superseded by a newer refresh
        """
        if not self.sequencer.is_latest(REFRESH, seq):
            return False
        self._state.is_loading = False

        if not result.ok:
            logger.error(f"Failed to refresh events: {result.message}")
            if isinstance(result.error, ConnectivityError):
                self.set_connected(False)
            return False

        self._state.events = list(result.value)
        self._state.tags = aggregate_tags(self._state.events)
        logger.info(
            "Event cache refreshed",
            extra={'events': len(self._state.events), 'tags': len(self._state.tags)}
        )

        if notify:
            for listener in list(self._listeners):
                listener()
        return True

    def set_connected(self, connected: bool) -> None:
        if connected != self._state.connected:
            logger.info(f"Schedule service {'connected' if connected else 'disconnected'}")
        self._state.connected = connected

    def set_view(self, view: View) -> None:
        self._state.current_view = View(view)

    def set_draft_tags(self, tags: Iterable[str]) -> None:
        self._state.temp_tags = normalize_tags(tags)

    def add_draft_tag(self, tag: str) -> bool:
        name = tag.strip()
        if not name or name in self._state.temp_tags:
            return False
        self._state.temp_tags.append(name)
        return True

    def remove_draft_tag(self, tag: str) -> bool:
        if tag not in self._state.temp_tags:
            return False
        self._state.temp_tags = [t for t in self._state.temp_tags if t != tag]
        return True

    def select_event(self, event_id: str) -> Optional[Event]:
        event = self.find_event(event_id)
        self._state.selected_event_id = event.id if event else None
        return event

    def clear_selection(self) -> None:
        self._state.selected_event_id = None

    def set_current_date(self, day: date) -> None:
        self._state.current_date = day

    def shift_date(self, days: int) -> date:
        self._state.current_date = self._state.current_date + timedelta(days=days)
        return self._state.current_date

    def set_search_query(self, query: str) -> None:
        self._state.search_query = query
