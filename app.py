"""Schedule client application: configuration, logging and wiring."""
import json
import logging
import os
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, Optional

from api_client.schedule_api import ScheduleApiClient
from state.app_state import StateStore, View
from state.commands import CommandHandlers
from state.search import SearchController
from state.view_router import ViewRouter, log_surface

# Attributes every LogRecord carries; anything else came in through extra=
_RECORD_ATTRS = set(vars(logging.LogRecord('', 0, '', 0, '', (), None))) | {'message', 'asctime'}

logger = logging.getLogger(__name__)


# Configure JSON logging
class JsonFormatter(logging.Formatter):
    """Custom JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON, including fields passed via extra."""
        log_data = {
            'timestamp': self.formatTime(record),
            'level': record.levelname,
            'message': record.getMessage(),
            'logger': record.name
        }

        for key, value in vars(record).items():
            if key not in _RECORD_ATTRS and key not in log_data:
                log_data[key] = value

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str, ensure_ascii=False)


def setup_logging(log_level: str = 'INFO') -> None:
    """
    Configure logging with JSON formatter.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
    """
    root_logger = logging.getLogger()

    # Remove existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    root_logger.addHandler(handler)

    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))


@dataclass
class AppConfig:
    """Settings read from the environment."""
    api_base_url: str = ScheduleApiClient.DEFAULT_BASE_URL
    log_level: str = 'INFO'
    timeout_seconds: float = 10
    search_debounce_ms: int = 300
    initial_view: View = View.DAY

    @classmethod
    def from_env(cls, environ: Optional[Dict[str, str]] = None) -> 'AppConfig':
        environ = os.environ if environ is None else environ
        return cls(
            api_base_url=environ.get('SCHEDULE_API_URL', ScheduleApiClient.DEFAULT_BASE_URL),
            log_level=environ.get('LOG_LEVEL', 'INFO'),
            timeout_seconds=float(environ.get('TIMEOUT_SECONDS', '10')),
            search_debounce_ms=int(environ.get('SEARCH_DEBOUNCE_MS', '300')),
            initial_view=View(environ.get('INITIAL_VIEW', 'day'))
        )


class ScheduleApp:
    """Owns the store and wires the client, router, search and commands together."""

    def __init__(
        self,
        config: AppConfig,
        client: Optional[ScheduleApiClient] = None,
        surface: Callable[[Any], None] = log_surface,
        clock: Callable[[], datetime] = datetime.now,
        monotonic: Callable[[], float] = time.monotonic
    ):
        self.config = config
        self.client = client or ScheduleApiClient(
            base_url=config.api_base_url,
            timeout=config.timeout_seconds
        )
        self.store = StateStore(self.client, today=clock().date())
        self.search = SearchController(
            self.store,
            self.client,
            debounce_seconds=config.search_debounce_ms / 1000,
            clock=monotonic
        )
        self.router = ViewRouter(self.store, self.client, self.search,
                                 surface=surface, clock=clock)
        self.commands = CommandHandlers(self.store, self.client, self.router)

    def start(self) -> bool:
        """
        Initialize the application if the service answers its health check.

        Returns:
            True if the service is connected and the initial view is shown
        """
        start_time = time.time()
        logger.info(
            "Application start",
            extra={'api_base_url': self.config.api_base_url,
                   'initial_view': self.config.initial_view.value}
        )

        if not self.check_connection():
            logger.error("Schedule service unavailable, application not initialized")
            return False

        self.router.switch_view(self.config.initial_view)

        logger.info(
            "Application initialized",
            extra={'duration_seconds': round(time.time() - start_time, 2),
                   **self.store.stats()}
        )
        return True

    def check_connection(self) -> bool:
        """
        Run the health check and reload events when the service is reachable.

        Returns:
            True if the service is connected
        """
        health = self.client.health()
        if not health.ok:
            self.store.set_connected(False)
            return False

        self.store.set_connected(True)
        self.store.refresh()
        return True

    def poll(self) -> bool:
        return self.search.poll()

    def close(self) -> None:
        self.client.close()


def main() -> int:
    config = AppConfig.from_env()
    setup_logging(config.log_level)

    app = ScheduleApp(config)
    try:
        if not app.start():
            return 1
        logger.info("Schedule summary", extra=app.store.stats())
        return 0
    finally:
        app.close()


if __name__ == '__main__':
    raise SystemExit(main())
