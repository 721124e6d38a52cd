"""HTTP client for the schedule persistence service."""
import logging
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Union

import requests

from api_client.errors import (
    ApiError,
    ConnectivityError,
    ServiceError,
    StaleReferenceError,
)
from processor.models import ApiResult, Event, EventInput

logger = logging.getLogger(__name__)


class ScheduleApiClient:
    """Client for the schedule service REST API."""

    DEFAULT_BASE_URL = "http://localhost:8080/api"

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 10,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize the API client.

        Args:
            base_url: Service root, e.g. "http://localhost:8080/api"
            timeout: HTTP request timeout in seconds (default: 10)
            session: Optional requests session to reuse
        """
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = session or requests.Session()

    def close(self) -> None:
        self.session.close()

    def health(self) -> ApiResult:
        """
        Check that the service is alive.

        Returns:
            ApiResult with the liveness payload ({status, service, time})
        """
        try:
            payload = self._request('GET', '/health')
            logger.info(f"Schedule service is up: {payload}")
            return ApiResult(value=payload)
        except ApiError as e:
            logger.error(f"Health check failed: {e.message}")
            return ApiResult(value=None, error=e)

    def list_events(self, tag: Optional[str] = None,
                    limit: Optional[int] = None) -> ApiResult:
        """
        Fetch all events, optionally filtered by tag and limited in number.

        Args:
            tag: Only events carrying this tag (case-insensitive on the service)
            limit: Maximum number of events

        Returns:
            ApiResult with a list of Event objects (empty list on failure)
        """
        params = {}
        if tag:
            params['tag'] = tag
        if limit:
            params['limit'] = limit
        return self._fetch_event_list('/events', params=params or None)

    def list_events_by_day(self, day: Union[date, datetime]) -> ApiResult:
        """
        Fetch the events whose start falls on the given calendar day.

        Args:
            day: Calendar day; the time of day is ignored

        Returns:
            ApiResult with a list of Event objects (empty list on failure)
        """
        if isinstance(day, datetime):
            day = day.date()
        return self._fetch_event_list(f"/events/date/{day.strftime('%Y-%m-%d')}")

    def search_events(self, query: str) -> ApiResult:
        """
        Full-text search over events.

        Args:
            query: Search string

        Returns:
            ApiResult with matching Event objects in service order
            (empty list on failure)
        """
        return self._fetch_event_list('/events/search', params={'q': query})

    def get_event(self, event_id: str) -> ApiResult:
        try:
            payload = self._request('GET', f"/events/{event_id}", event_id=event_id)
            return ApiResult(value=Event.from_dict(payload))
        except ApiError as e:
            logger.error(f"Failed to get event {event_id}: {e.message}")
            return ApiResult(value=None, error=e)
        except (KeyError, TypeError, ValueError) as e:
            logger.error(f"Malformed event {event_id} in response: {e}")
            return ApiResult(value=None, error=ServiceError(f"Malformed event in response: {e}"))

    def create_event(self, event_input: EventInput) -> ApiResult:
        """
        Create an event.

        Args:
            event_input: Validated event fields

        Returns:
            ApiResult with the created Event
        """
        return self._write_event('POST', '/events', event_input)

    def update_event(self, event_id: str, event_input: EventInput) -> ApiResult:
        """
        Replace the fields of an existing event.

        Args:
            event_id: Identifier of the event to update
            event_input: Validated event fields

        Returns:
            ApiResult with the updated Event; a missing event yields
            StaleReferenceError
        """
        return self._write_event('PUT', f"/events/{event_id}", event_input,
                                 event_id=event_id)

    def delete_event(self, event_id: str) -> ApiResult:
        """
        Delete an event.

        Args:
            event_id: Identifier of the event to delete

        Returns:
            ApiResult with the confirmation payload ({message, id})
        """
        try:
            payload = self._request('DELETE', f"/events/{event_id}", event_id=event_id)
            logger.info(f"Deleted event {event_id}")
            return ApiResult(value=payload)
        except ApiError as e:
            logger.error(f"Failed to delete event {event_id}: {e.message}")
            return ApiResult(value=None, error=e)

    def _fetch_event_list(self, path: str,
                          params: Optional[Dict[str, Any]] = None) -> ApiResult:
        try:
            payload = self._request('GET', path, params=params)
        except ApiError as e:
            logger.error(f"Failed to fetch events from {path}: {e.message}")
            return ApiResult(value=[], error=e)

        items = (payload.get('events') or []) if isinstance(payload, dict) else None
        if not isinstance(items, list):
            logger.error(f"Malformed event list from {path}: {type(payload).__name__} body")
            return ApiResult(value=[], error=ServiceError(f"Malformed response from {path}"))

        events = self._parse_events(items)
        logger.debug(f"Fetched {len(events)} events from {path}")
        return ApiResult(value=events)

    def _write_event(self, method: str, path: str, event_input: EventInput,
                     event_id: Optional[str] = None) -> ApiResult:
        try:
            payload = self._request(method, path, json=event_input.to_payload(),
                                    event_id=event_id)
            event = Event.from_dict(payload.get('event') or payload)
        except ApiError as e:
            logger.error(f"{method} {path} failed: {e.message}")
            return ApiResult(value=None, error=e)
        except (KeyError, TypeError, ValueError) as e:
            logger.error(f"{method} {path} returned a malformed event: {e}")
            return ApiResult(value=None, error=ServiceError(f"Malformed event in response: {e}"))

        logger.info(f"{method} {path} succeeded for event {event.id}")
        return ApiResult(value=event)

    def _parse_events(self, items: List[Dict[str, Any]]) -> List[Event]:
        """
        Convert JSON items to Event objects.

        Items that cannot be converted are skipped.

        Args:
            items: Decoded JSON objects

        Returns:
            List of Event objects in service order
        """
        events = []
        for item in items:
            try:
                events.append(Event.from_dict(item))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Failed to parse event item: {e}")
                continue
        return events

    def _request(self, method: str, path: str, event_id: Optional[str] = None,
                 **kwargs) -> Dict[str, Any]:
        """
        Send one request to the service. Fire-once, no retries.

        Args:
            method: HTTP method
            path: Path below base_url
            event_id: Event addressed by the path, if any
            **kwargs: Passed on to requests (params, json)

        Returns:
            Decoded JSON body

        Raises:
            ConnectivityError: If the service cannot be reached
            StaleReferenceError: If an addressed event does not exist
            ServiceError: If the service answers with an error status
        """
        url = f"{self.base_url}{path}"
        logger.debug(f"{method} {url}")

        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise ConnectivityError(f"Schedule service unreachable: {e}") from e

        if not response.ok:
            message = self._error_message(response)
            if response.status_code == 404 and event_id is not None:
                raise StaleReferenceError(event_id, message, response.status_code)
            raise ServiceError(message, response.status_code)

        try:
            return response.json()
        except ValueError as e:
            raise ServiceError(f"Invalid JSON in response from {path}",
                               response.status_code) from e

    def _error_message(self, response: requests.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            body = None

        if isinstance(body, dict) and body.get('error'):
            return str(body['error'])
        return f"Request failed with status {response.status_code}"
