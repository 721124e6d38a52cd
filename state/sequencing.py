"""Monotonic request numbering so that the last issued request wins."""
import itertools
import logging
from typing import Dict

logger = logging.getLogger(__name__)


class RequestSequencer:
    """Issues increasing sequence numbers per operation kind."""

    def __init__(self):
        self._counter = itertools.count(1)
        self._latest: Dict[str, int] = {}

    def issue(self, kind: str) -> int:
        seq = next(self._counter)
        self._latest[kind] = seq
        return seq

    def latest(self, kind: str) -> int:
        return self._latest.get(kind, 0)

    def is_latest(self, kind: str, seq: int) -> bool:
        """
        Check whether a completion belongs to the most recent request.

        Args:
            kind: Operation kind, e.g. "search" or "refresh"
            seq: Sequence number the request was issued with

        Returns:
            False when a newer request of the same kind has been issued
        """
        current = self._latest.get(kind, 0)
        if seq != current:
            logger.debug(f"Discarding stale {kind} response #{seq} (latest is #{current})")
            return False
        return True
