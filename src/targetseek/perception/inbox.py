"""Sensor inbox: events posted from any thread, drained by the control tick.

Blob frames and depth clouds keep only the latest pending event per kind. Contact
edges are queued, so a press and release between two drains are both applied.
"""

from __future__ import annotations

import itertools
import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Iterable

import numpy as np

from .types import BlobDetection


class SensorKind(Enum):
    BLOBS = "blobs"
    DEPTH = "depth"
    CONTACT = "contact"


@dataclass(frozen=True)
class SensorEvent:
    """One pending inbox event."""

    kind: SensorKind
    payload: Any  # list[BlobDetection] | np.ndarray | bool
    received_at: float  # monotonic seconds
    seq: int


class SensorInbox:
    """Thread-safe. BLOBS and DEPTH: one slot, a new event overwrites the pending one. CONTACT: queued."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._lock = threading.Lock()
        self._clock = clock
        self._seq = itertools.count()
        self._slots: dict[SensorKind, SensorEvent] = {}
        self._contacts: list[SensorEvent] = []
        self._posted: dict[SensorKind, int] = {k: 0 for k in SensorKind}

    def post_blobs(self, blobs: Iterable[BlobDetection]) -> None:
        self._post(SensorKind.BLOBS, list(blobs))

    def post_depth(self, cloud: np.ndarray) -> None:
        self._post(SensorKind.DEPTH, cloud)

    def post_contact(self, pressed: bool) -> None:
        self._post(SensorKind.CONTACT, bool(pressed))

    def _post(self, kind: SensorKind, payload: Any) -> None:
        with self._lock:
            event = SensorEvent(kind, payload, self._clock(), next(self._seq))
            if kind is SensorKind.CONTACT:
                self._contacts.append(event)
            else:
                self._slots[kind] = event
            self._posted[kind] += 1

    def drain(self) -> list[SensorEvent]:
        """Take all pending events, oldest arrival first."""
        with self._lock:
            events = sorted([*self._slots.values(), *self._contacts], key=lambda e: e.seq)
            self._slots.clear()
            self._contacts.clear()
        return events

    def pending(self) -> int:
        with self._lock:
            return len(self._slots) + len(self._contacts)

    def posted_counts(self) -> dict[str, int]:
        """Events posted per kind since start (overwritten ones included)."""
        with self._lock:
            return {k.value: n for k, n in self._posted.items()}
