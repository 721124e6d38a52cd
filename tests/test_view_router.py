"""Unit tests for ViewRouter."""
from datetime import date, datetime
from unittest.mock import Mock

import pytest

from api_client.errors import ConnectivityError, ServiceError
from api_client.schedule_api import ScheduleApiClient
from processor.models import ApiResult, Event
from state.app_state import StateStore, View
from state.search import SearchController
from state.view_router import ViewRouter
from views.renderers import DayView, FormView, ListView, SearchView, TagsView

NOW = datetime(2024, 1, 1, 9, 0)


def make_event(event_id, start, end, tags=None):
    return Event(id=event_id, title=f"Event {event_id}", start_time=start,
                 end_time=end, tags=tags or [])


@pytest.fixture
def events():
    return [
        make_event('standup', datetime(2024, 1, 1, 9, 0), datetime(2024, 1, 1, 10, 30), ['работа']),
        make_event('dinner', datetime(2024, 1, 2, 19, 0), datetime(2024, 1, 2, 21, 0), ['личное'])
    ]


@pytest.fixture
def client(events):
    client = Mock(spec=ScheduleApiClient)
    client.list_events.return_value = ApiResult(value=events)
    client.list_events_by_day.return_value = ApiResult(value=events[:1])
    client.search_events.return_value = ApiResult(value=events[1:])
    return client


@pytest.fixture
def rendered():
    return []


@pytest.fixture
def store(client):
    store = StateStore(client, today=NOW.date())
    store.set_connected(True)
    return store


@pytest.fixture
def router(store, client, rendered):
    search = SearchController(store, client, clock=lambda: 0.0)
    router = ViewRouter(store, client, search, surface=rendered.append, clock=lambda: NOW)
    store.refresh()
    rendered.clear()
    return router


def test_unknown_view_raises(router):
    """Test switching to an unknown view."""
    with pytest.raises(ValueError):
        router.switch_view('calendar')


def test_day_view_buckets_events_of_current_date(router, client, rendered):
    """Test the day view of the current date."""
    view = router.switch_view(View.DAY)

    client.list_events_by_day.assert_called_with(date(2024, 1, 1))
    assert isinstance(view, DayView)
    assert rendered == [view]
    assert view.subtitle == 'Today'
    assert [b.event.id for b in view.blocks[9]] == ['standup']
    assert view.blocks[10] == []
    assert not view.is_empty


def test_day_view_uses_cache_when_disconnected(router, store, client):
    """Test the day view while disconnected."""
    store.shift_date(1)
    store.set_connected(False)
    client.list_events_by_day.reset_mock()

    view = router.switch_view(View.DAY)

    client.list_events_by_day.assert_not_called()
    assert view.subtitle == 'Tomorrow'
    assert [b.event.id for b in view.blocks[19]] == ['dinner']


def test_day_view_connectivity_failure_falls_back_to_cache(router, store, client):
    """Test the day view after a transport failure."""
    client.list_events_by_day.return_value = ApiResult(value=[], error=ConnectivityError('down'))

    view = router.switch_view(View.DAY)

    assert not store.connected
    assert [b.event.id for b in view.blocks[9]] == ['standup']


def test_day_view_service_failure_shows_empty_day(router, client):
    """Test the day view after a service error."""
    client.list_events_by_day.return_value = ApiResult(value=[], error=ServiceError('boom'))

    view = router.switch_view(View.DAY)

    assert view.is_empty


def test_add_view_defaults(router, store):
    """Test the defaults of the add form."""
    view = router.switch_view(View.ADD)

    assert isinstance(view, FormView)
    assert store.current_view is View.ADD
    assert view.start == '2024-01-01T09:00'
    assert view.end == '2024-01-01T10:00'
    assert view.title == ''
    assert view.event_id is None


def test_leaving_add_discards_draft_tags(router, store, client):
    """Test leaving the add view."""
    router.switch_view(View.ADD)
    store.add_draft_tag('черновик')

    router.switch_view(View.LIST)

    assert store.temp_tags == []
    assert [e.id for e in store.events] == ['standup', 'dinner']
    client.create_event.assert_not_called()


def test_edit_without_selection_redirects_to_list(router, store):
    """Test entering edit without a selection."""
    view = router.switch_view(View.EDIT)

    assert isinstance(view, ListView)
    assert store.current_view is View.LIST


def test_edit_seeds_form_and_draft_tags(router, store):
    """Test entering edit with a selection."""
    store.select_event('standup')

    view = router.switch_view(View.EDIT)

    assert isinstance(view, FormView)
    assert view.title == 'Event standup'
    assert view.start == '2024-01-01T09:00'
    assert view.end == '2024-01-01T10:30'
    assert view.event_id == 'standup'
    assert store.temp_tags == ['работа']


def test_leaving_edit_clears_selection_and_draft(router, store):
    """Test leaving the edit view."""
    store.select_event('standup')
    router.switch_view(View.EDIT)
    store.add_draft_tag('extra')

    router.switch_view(View.TAGS)

    assert store.selected_event_id is None
    assert store.temp_tags == []


def test_list_view_newest_first(router):
    """Test list view ordering and labels."""
    view = router.switch_view(View.LIST)

    assert [item.event.id for item in view.items] == ['dinner', 'standup']
    assert view.items[1].duration == '1.5 h'
    assert view.items[1].when == 'Today'
    assert view.items[0].when == 'Tomorrow'


def test_tags_view(router):
    """Test the tags view."""
    view = router.switch_view(View.TAGS)

    assert isinstance(view, TagsView)
    assert view.counts == {'работа': 1, 'личное': 1}


def test_search_view_without_query_shows_placeholder(router, client):
    """Test the search view without a query."""
    view = router.switch_view(View.SEARCH)

    assert isinstance(view, SearchView)
    assert view.status == 'idle'
    client.search_events.assert_not_called()


def test_search_view_with_query_searches_on_entry(router, store, client):
    """Test the search view with a query."""
    store.set_search_query('ужин')

    view = router.switch_view(View.SEARCH)

    client.search_events.assert_called_once_with('ужин')
    assert view.status == 'results'
    assert [item.event.id for item in view.results] == ['dinner']


def test_refresh_renders_current_view_again(router, store, rendered):
    """Test that a refresh renders the current view again."""
    router.switch_view(View.TAGS)
    rendered.clear()

    store.refresh()

    assert len(rendered) == 1
    assert isinstance(rendered[0], TagsView)


def test_render_form_outside_form_views(router, rendered):
    """Test that a form re-render is skipped when no form is shown."""
    router.switch_view(View.LIST)
    rendered.clear()

    assert router.render_form(tag_query='раб') is None

    assert rendered == []
    assert router.tag_query == 'раб'


def test_switching_views_clears_tag_input(router):
    """Test that the tag input text does not survive a view change."""
    router.switch_view(View.ADD)
    router.render_form(tag_query='раб')

    view = router.switch_view(View.ADD)

    assert view.tag_query == ''
    assert view.suggestions == []
