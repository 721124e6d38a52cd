"""Debounced event search where the last issued request wins."""
import logging
import time
from dataclasses import dataclass
from typing import Callable, List, Optional

from api_client.errors import ConnectivityError
from api_client.schedule_api import ScheduleApiClient
from processor.models import ApiResult, Event
from processor.timeutils import Debouncer
from state.app_state import StateStore

logger = logging.getLogger(__name__)

SEARCH = 'search'
DEFAULT_DEBOUNCE_SECONDS = 0.3


@dataclass
class SearchTicket:
    """Handle for an issued search request."""
    seq: int
    query: str


class SearchController:
    """
    Keeps the search query and results.

    Keystrokes go through on_input() and are debounced; submit() runs a
    search immediately. Requests are numbered and only the completion of
    the most recently issued one is applied.
    """

    def __init__(
        self,
        store: StateStore,
        client: ScheduleApiClient,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
        clock: Callable[[], float] = time.monotonic
    ):
        self.store = store
        self.client = client
        self.status = 'idle'
        self.results: List[Event] = []
        self.message: Optional[str] = None
        self._debouncer = Debouncer(debounce_seconds, self.submit, clock)
        self._listeners: List[Callable[[], None]] = []

    def subscribe(self, listener: Callable[[], None]) -> None:
        self._listeners.append(listener)

    def on_input(self, text: str) -> None:
        self._debouncer(text)

    def poll(self) -> bool:
        """Run the debounced search once the input has been quiet long enough."""
        return self._debouncer.poll()

    def submit(self, query: str) -> bool:
        """
        Search now, superseding any pending debounced input.

        Args:
            query: Search text

        Returns:
            True if results were applied
        """
        self._debouncer.cancel()
        ticket = self.begin(query)
        if ticket is None:
            return False
        return self.complete(ticket, self.client.search_events(ticket.query))

    def begin(self, query: str) -> Optional[SearchTicket]:
        """
        Register a new search and invalidate earlier ones still in flight.

        Args:
            query: Search text, surrounding whitespace is ignored

        Returns:
            SearchTicket to pass to complete(), or None when no request
            should be sent (empty query or service disconnected)
        """
        query = (query or '').strip()
        self.store.set_search_query(query)
        seq = self.store.sequencer.issue(SEARCH)

        if not query:
            self._update('idle', [], None)
            return None

        if not self.store.connected:
            self._update('disconnected', [], 'Schedule service is unavailable')
            return None

        logger.debug(f"Search #{seq} issued for {query!r}")
        self._update('loading', [], None)
        return SearchTicket(seq=seq, query=query)

    def complete(self, ticket: SearchTicket, result: ApiResult) -> bool:
        """
        Apply a search response unless a newer search has been issued.

        Args:
            ticket: Ticket returned by begin()
            result: Result of the search call

        Returns:
            True if the results were applied
        """
        if not self.store.sequencer.is_latest(SEARCH, ticket.seq):
            return False

        if not result.ok:
            if isinstance(result.error, ConnectivityError):
                self.store.set_connected(False)
            self._update('error', [], result.message)
            return False

        events = list(result.value)
        logger.info(f"Search for {ticket.query!r} returned {len(events)} events")
        self._update('results' if events else 'empty', events, None)
        return True

    def _update(self, status: str, results: List[Event], message: Optional[str]) -> None:
        self.status = status
        self.results = results
        self.message = message
        for listener in list(self._listeners):
            listener()
