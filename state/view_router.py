"""View routing: which view is shown and what a transition resets."""
import logging
from datetime import datetime
from typing import Any, Callable, List, Optional, Tuple

from api_client.errors import ConnectivityError
from api_client.schedule_api import ScheduleApiClient
from processor.models import Event
from processor.timeutils import default_form_times, is_same_day
from state.app_state import AppState, StateStore, View
from state.search import SearchController
from views.renderers import (
    render_day_view,
    render_form_view,
    render_list_view,
    render_search_view,
    render_tags_view,
)

logger = logging.getLogger(__name__)


def log_surface(view_model: Any) -> None:
    logger.debug(f"Rendered {type(view_model).__name__}")


class ViewRouter:
    """
    State machine over the views in View.

    Rendering is manual: the router renders on every transition, after each
    successful store refresh and whenever search results change.
    """

    def __init__(
        self,
        store: StateStore,
        client: ScheduleApiClient,
        search: SearchController,
        surface: Callable[[Any], None] = log_surface,
        clock: Callable[[], datetime] = datetime.now
    ):
        self.store = store
        self.client = client
        self.search = search
        self.surface = surface
        self.clock = clock
        self.last_view: Any = None
        # start, end, title, event id shown by the add/edit form
        self._form: Tuple[datetime, datetime, str, Optional[str]] = (
            *default_form_times(clock()), '', None)
        # text typed into the tag input of the form
        self.tag_query = ''

        store.subscribe(self._on_refresh)
        search.subscribe(self._on_search_update)

    def switch_view(self, target: View) -> Any:
        """
        Transition to another view.

        Draft tags are always reset. The selection survives only into the
        edit view; entering edit without a resolvable selection redirects
        to the list view.

        Args:
            target: View to show

        Returns:
            The rendered view description

        Raises:
            ValueError: If target is not a known view
        """
        target = View(target)
        logger.info(f"Switching to view: {target.value}")

        self.store.set_view(target)
        self.store.set_draft_tags([])
        self.tag_query = ''

        if target is View.EDIT:
            event = self.store.selected_event
            if event is None:
                logger.warning("No event selected for editing, showing the list instead")
                return self.switch_view(View.LIST)
            self.store.set_draft_tags(event.tags)
            self._form = (event.start_time, event.end_time, event.title, event.id)
        else:
            self.store.clear_selection()
            if target is View.ADD:
                self._form = (*default_form_times(self.clock()), '', None)

        if target is View.SEARCH and self.store.search_query:
            # renders through the search subscription
            self.search.submit(self.store.search_query)
            return self.last_view

        return self.render_current()

    def render_current(self) -> Any:
        """Render the current view from the store snapshot and push it to the surface."""
        state = self.store.snapshot()
        today = self.clock().date()
        view = state.current_view

        if view is View.DAY:
            view_model = render_day_view(state, self._day_events(state), today)
        elif view is View.LIST:
            view_model = render_list_view(state, today)
        elif view in (View.ADD, View.EDIT):
            start, end, title, event_id = self._form
            view_model = render_form_view(state, view, start, end, title, event_id,
                                          tag_query=self.tag_query)
        elif view is View.SEARCH:
            view_model = render_search_view(state, self.search.status,
                                            self.search.results, today,
                                            self.search.message)
        else:
            view_model = render_tags_view(state)

        self.last_view = view_model
        self.surface(view_model)
        return view_model

    def render_form(self, tag_query: Optional[str] = None) -> Any:
        """
        Render the add/edit form again after its draft tags or tag input changed.

        Args:
            tag_query: New text of the tag input, None keeps the current text

        Returns:
            The rendered FormView, or None when no form is shown
        """
        if tag_query is not None:
            self.tag_query = tag_query
        if self.store.current_view not in (View.ADD, View.EDIT):
            return None
        return self.render_current()

    def _day_events(self, state: AppState) -> List[Event]:
        if self.store.connected:
            result = self.client.list_events_by_day(state.current_date)
            if result.ok:
                return result.value
            if not isinstance(result.error, ConnectivityError):
                return []
            self.store.set_connected(False)

        logger.debug("Disconnected, taking day events from the cache")
        return [event for event in state.events
                if is_same_day(event.start_time, state.current_date)]

    def _on_refresh(self) -> None:
        if self.store.current_view is View.SEARCH and self.store.search_query:
            self.search.submit(self.store.search_query)
        else:
            self.render_current()

    def _on_search_update(self) -> None:
        if self.store.current_view is View.SEARCH:
            self.render_current()
