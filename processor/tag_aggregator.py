"""Tag aggregation and deterministic tag colours."""
import logging
from typing import Dict, Iterable, List

from processor.models import Event, Tag

logger = logging.getLogger(__name__)

PALETTE = [
    '#2196f3', '#4caf50', '#ff9800', '#f44336',
    '#9c27b0', '#00bcd4', '#795548', '#607d8b',
]

POPULAR_TAGS = ['работа', 'личное', 'учеба', 'важно', 'встреча', 'развлечения', 'спорт']

MAX_SUGGESTIONS = 5


def _to_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value & 0x80000000 else value


def tag_hash(name: str) -> int:
    """
    Rolling hash of a tag name: hash = unit + ((hash << 5) - hash).

    Iterates UTF-16 code units and performs the shift in 32-bit signed
    arithmetic, so colours match the ones the browser client assigns.

    Args:
        name: Tag name

    Returns:
        Hash value (may exceed the 32-bit range between shifts)
    """
    encoded = name.encode('utf-16-le')
    value = 0
    for i in range(0, len(encoded), 2):
        unit = encoded[i] | (encoded[i + 1] << 8)
        value = unit + (_to_int32(value << 5) - value)
    return value


def palette_index(name: str) -> int:
    return abs(tag_hash(name)) % len(PALETTE)


def tag_color(name: str) -> str:
    return PALETTE[palette_index(name)]


def aggregate_tags(events: Iterable[Event]) -> List[Tag]:
    """
    Count tag occurrences across events and assign colours.

    Args:
        events: Cached events

    Returns:
        List of Tag objects in discovery order
    """
    counts: Dict[str, int] = {}
    for event in events:
        for name in event.tags or []:
            counts[name] = counts.get(name, 0) + 1

    tags = [Tag(name=name, count=count, color=tag_color(name))
            for name, count in counts.items()]
    logger.debug(f"Aggregated {len(tags)} tags")
    return tags


def suggest_tags(query: str, tags: Iterable[Tag], draft: Iterable[str],
                 limit: int = MAX_SUGGESTIONS) -> List[str]:
    """
    Suggest tag names for the tag input of the create/edit form.

    Existing tag names come first, then the popular defaults. Names already
    in the draft are skipped.

    Args:
        query: Text typed so far
        tags: Aggregated tags
        draft: Tags already added to the draft
        limit: Maximum number of suggestions

    Returns:
        List of tag names
    """
    needle = query.strip().lower()
    if not needle:
        return []

    taken = set(draft)
    suggestions = []
    for name in [tag.name for tag in tags] + POPULAR_TAGS:
        if needle in name.lower() and name not in taken and name not in suggestions:
            suggestions.append(name)
    return suggestions[:limit]
