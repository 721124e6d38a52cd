"""Data models for events, tags and operation results."""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from processor.timeutils import format_timestamp, parse_timestamp


@dataclass
class Event:
    """Event as cached from the schedule service."""
    id: str
    title: str
    start_time: datetime
    end_time: datetime
    tags: List[str] = field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Event':
        """
        Build an Event from the service's JSON representation.

        Args:
            data: Decoded JSON object with camelCase keys

        Returns:
            Event object

        Raises:
            KeyError: If a required key is missing
            ValueError: If a timestamp cannot be parsed
        """
        created_at = data.get('createdAt')
        updated_at = data.get('updatedAt')
        return cls(
            id=str(data['id']),
            title=data['title'],
            start_time=parse_timestamp(data['startTime']),
            end_time=parse_timestamp(data['endTime']),
            tags=list(data.get('tags') or []),
            created_at=parse_timestamp(created_at) if created_at else None,
            updated_at=parse_timestamp(updated_at) if updated_at else None
        )

    @property
    def duration_hours(self) -> float:
        return (self.end_time - self.start_time).total_seconds() / 3600


@dataclass
class EventInput:
    """Validated payload for create and update commands."""
    title: str
    start_time: datetime
    end_time: datetime
    tags: List[str] = field(default_factory=list)

    def to_payload(self) -> Dict[str, Any]:
        return {
            'title': self.title,
            'startTime': format_timestamp(self.start_time),
            'endTime': format_timestamp(self.end_time),
            'tags': list(self.tags)
        }


@dataclass
class Tag:
    """Tag derived from the cached events."""
    name: str
    count: int
    color: str


@dataclass
class ApiResult:
    """Result of a single schedule service call."""
    value: Any = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def message(self) -> Optional[str]:
        if self.error is None:
            return None
        return getattr(self.error, 'message', str(self.error))


@dataclass
class CommandResult:
    """Outcome of a user command, for the calling layer to present."""
    ok: bool
    message: str
    error: Optional[Exception] = None
    event: Optional[Event] = None
