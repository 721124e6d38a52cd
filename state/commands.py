"""Command handlers: validate input, call the service, refresh on success."""
import logging
from datetime import datetime
from typing import List, Optional, Union

from api_client.errors import ConnectivityError, StaleReferenceError, ValidationError
from api_client.schedule_api import ScheduleApiClient
from processor.models import ApiResult, CommandResult
from processor.tag_aggregator import suggest_tags
from processor.validation import validate_event_input
from state.app_state import StateStore, View
from state.view_router import ViewRouter

logger = logging.getLogger(__name__)

TimeValue = Union[str, datetime, None]


class CommandHandlers:
    """
    Entry points for user commands.

    Every failure is caught here and returned as a CommandResult; the store
    only changes after the service has confirmed a command.
    """

    def __init__(self, store: StateStore, client: ScheduleApiClient, router: ViewRouter):
        self.store = store
        self.client = client
        self.router = router

    def create_event(self, title: Optional[str], start: TimeValue, end: TimeValue) -> CommandResult:
        """
        Create an event from the add form and the draft tags.

        Args:
            title: Title field
            start: Start field (datetime-local text or datetime)
            end: End field (datetime-local text or datetime)

        Returns:
            CommandResult; on success the day view is shown
        """
        try:
            event_input = validate_event_input(title, start, end, self.store.temp_tags)
        except ValidationError as e:
            logger.warning(f"Create rejected: {e.message}")
            return CommandResult(ok=False, message=e.message, error=e)

        if not self.store.connected:
            return self._disconnected()

        result = self.client.create_event(event_input)
        if not result.ok:
            return self._failed('create', result)

        self.store.set_draft_tags([])
        self.store.refresh(notify=False)
        self.router.switch_view(View.DAY)
        return CommandResult(ok=True, message='Event created', event=result.value)

    def update_event(self, title: Optional[str], start: TimeValue, end: TimeValue,
                     event_id: Optional[str] = None) -> CommandResult:
        """
        Save the edit form.

        Args:
            title: Title field
            start: Start field
            end: End field
            event_id: Event to update, defaults to the selected event

        Returns:
            CommandResult; on success the list view is shown
        """
        event_id = event_id or self.store.selected_event_id

        try:
            event_input = validate_event_input(title, start, end, self.store.temp_tags)
        except ValidationError as e:
            logger.warning(f"Update rejected: {e.message}")
            return CommandResult(ok=False, message=e.message, error=e)

        if event_id is None or self.store.find_event(event_id) is None:
            error = StaleReferenceError(event_id or '', 'The event no longer exists')
            logger.warning(f"Update rejected, event {event_id} is not in the cache")
            return CommandResult(ok=False, message=error.message, error=error)

        if not self.store.connected:
            return self._disconnected()

        result = self.client.update_event(event_id, event_input)
        if not result.ok:
            return self._failed('update', result)

        self.store.set_draft_tags([])
        self.store.clear_selection()
        self.store.refresh(notify=False)
        self.router.switch_view(View.LIST)
        return CommandResult(ok=True, message='Event updated', event=result.value)

    def delete_event(self, event_id: str) -> CommandResult:
        """
        Delete an event; the current view stays and is rendered again.

        Confirmation is the caller's concern.
        """
        if not self.store.connected:
            return self._disconnected()

        result = self.client.delete_event(event_id)
        if not result.ok:
            return self._failed('delete', result)

        self.store.refresh()
        return CommandResult(ok=True, message='Event deleted')

    def edit_event(self, event_id: str) -> CommandResult:
        """
        Open the edit form for a cached event.

        While connected the service is asked whether the event still exists;
        an event deleted elsewhere is dropped from the cache by a refresh
        instead of being edited.
        """
        if self.store.find_event(event_id) is None:
            error = StaleReferenceError(event_id, 'The event no longer exists')
            return CommandResult(ok=False, message=error.message, error=error)

        if self.store.connected:
            result = self.client.get_event(event_id)
            if isinstance(result.error, StaleReferenceError):
                logger.warning(f"Event {event_id} was deleted on the service")
                self.store.refresh()
                return CommandResult(ok=False, message=result.message, error=result.error)
            if isinstance(result.error, ConnectivityError):
                self.store.set_connected(False)

        event = self.store.select_event(event_id)
        self.router.switch_view(View.EDIT)
        return CommandResult(ok=True, message=f"Editing {event.title}", event=event)

    def add_draft_tag(self, tag: str) -> bool:
        added = self.store.add_draft_tag(tag)
        if added:
            self.router.render_form(tag_query='')
        return added

    def remove_draft_tag(self, tag: str) -> bool:
        removed = self.store.remove_draft_tag(tag)
        if removed:
            self.router.render_form()
        return removed

    def type_tag(self, text: str) -> List[str]:
        """
        Update the tag input of the form and return the matching suggestions.

        Args:
            text: Current text of the tag input

        Returns:
            Suggested tag names, at most MAX_SUGGESTIONS
        """
        self.router.render_form(tag_query=text)
        return suggest_tags(text, self.store.tags, self.store.temp_tags)

    def change_date(self, days: int) -> None:
        day = self.store.shift_date(days)
        logger.debug(f"Current date is now {day}")
        if self.store.current_view is View.DAY:
            self.router.render_current()

    def go_to_today(self) -> None:
        self.store.set_current_date(self.router.clock().date())
        if self.store.current_view is View.DAY:
            self.router.render_current()

    def filter_by_tag(self, name: str):
        """Show the search view with the tag name as query."""
        self.store.set_search_query(name)
        return self.router.switch_view(View.SEARCH)

    def _disconnected(self) -> CommandResult:
        error = ConnectivityError('Schedule service is unavailable')
        return CommandResult(ok=False, message=error.message, error=error)

    def _failed(self, action: str, result: ApiResult) -> CommandResult:
        if isinstance(result.error, ConnectivityError):
            self.store.set_connected(False)
        logger.error(
            f"Failed to {action} event: {result.message}",
            extra={'error_type': type(result.error).__name__}
        )
        return CommandResult(ok=False, message=result.message, error=result.error)
