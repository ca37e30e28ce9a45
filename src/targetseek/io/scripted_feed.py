"""Scripted sensor feed: replays timed blob/depth/contact events into a SensorInbox.

Stands in for the camera, depth camera and bumper when running without a robot.
Given color classes, blob frames come from rendered camera images run through
extract_blobs, the same path a real camera frame takes.
"""

from __future__ import annotations

import logging
import math
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Sequence

import numpy as np

from targetseek.config import ControllerConfig
from targetseek.perception.blob_extractor import ColorClass, class_for, extract_blobs, paint_bgr
from targetseek.perception.inbox import SensorInbox, SensorKind
from targetseek.perception.types import BlobDetection

logger = logging.getLogger(__name__)

# Any non-target color seen in the scene
DISTRACTOR_COLOR = (40, 90, 200)


@dataclass(frozen=True)
class FeedEvent:
    at_s: float  # seconds after feed start
    kind: SensorKind
    payload: Any


def depth_cloud(
    cfg: ControllerConfig,
    near_points: int = 0,
    far_z: float = 3.0,
    near_z: float = 0.3,
) -> np.ndarray:
    """Organized (height, width, 3) cloud at far_z with near_points near points inside the scan band."""
    cloud = np.zeros((cfg.image_height, cfg.image_width, 3), dtype=np.float32)
    cloud[..., 2] = far_z
    band = cloud[cfg.scan_row_offset:cfg.scan_row_offset + cfg.scan_rows, :, 2]
    flat = band.reshape(-1)
    n = min(near_points, flat.size)
    flat[:n] = near_z
    band[...] = flat.reshape(band.shape)
    return cloud


def target_blobs(
    cfg: ControllerConfig,
    area: int,
    offset_x: float = 0.0,
    with_distractor: bool = True,
) -> list[BlobDetection]:
    """One target-colored blob offset_x pixels right of center, plus an optional distractor."""
    r, g, b = cfg.target_signature
    blobs = [BlobDetection(r, g, b, x=cfg.image_width / 2 + offset_x, y=cfg.image_height / 2, area=area)]
    if with_distractor:
        blobs.append(BlobDetection(*DISTRACTOR_COLOR, x=50.0, y=50.0, area=8000))
    return blobs


def camera_frame(
    cfg: ControllerConfig,
    classes: list[ColorClass],
    area: int = 0,
    offset_x: float = 0.0,
    with_distractor: bool = True,
) -> np.ndarray:
    """BGR frame with a target-colored rectangle of at least `area` px, offset_x right of center.

    The distractor is painted with the first class that is not the target.
    """
    frame = np.zeros((cfg.image_height, cfg.image_width, 3), dtype=np.uint8)
    if with_distractor:
        others = [cc for cc in classes if cc.color != tuple(cfg.target_signature)]
        if others:
            frame[10:90, 10:110] = paint_bgr(others[0])  # 8000 px
    if area > 0:
        rows = min(cfg.image_height, max(1, int(math.sqrt(area))))
        cols = min(cfg.image_width, math.ceil(area / rows))
        x0 = max(0, int(cfg.image_width / 2 + offset_x - cols / 2))
        y0 = (cfg.image_height - rows) // 2
        frame[y0:y0 + rows, x0:x0 + cols] = paint_bgr(class_for(classes, cfg.target_signature))
    return frame


def demo_feed(cfg: ControllerConfig, classes: list[ColorClass] | None = None) -> list[FeedEvent]:
    """Search -> approach -> depth obstacle -> forward escape -> bumper escape -> arrive.

    With classes, each blob frame is extracted from a rendered camera image.
    """

    def blobs(area: int, offset_x: float = 0.0) -> list[BlobDetection]:
        if classes is not None:
            return extract_blobs(camera_frame(cfg, classes, area, offset_x), classes)
        if area == 0:
            return [BlobDetection(*DISTRACTOR_COLOR, x=50.0, y=50.0, area=8000)]
        return target_blobs(cfg, area, offset_x)

    return [
        FeedEvent(0.0, SensorKind.BLOBS, blobs(0)),
        FeedEvent(0.0, SensorKind.DEPTH, depth_cloud(cfg)),
        FeedEvent(1.5, SensorKind.BLOBS, blobs(5000, offset_x=80.0)),
        FeedEvent(3.0, SensorKind.DEPTH, depth_cloud(cfg, near_points=50)),
        FeedEvent(4.0, SensorKind.DEPTH, depth_cloud(cfg)),
        FeedEvent(7.5, SensorKind.CONTACT, True),
        FeedEvent(8.0, SensorKind.CONTACT, False),
        FeedEvent(8.1, SensorKind.DEPTH, depth_cloud(cfg)),
        FeedEvent(12.0, SensorKind.BLOBS, blobs(int(cfg.arrival_area) + 5000)),
        FeedEvent(12.0, SensorKind.DEPTH, depth_cloud(cfg, near_points=200)),
    ]


class ScriptedFeed:
    """Posts FeedEvents into the inbox when their time comes, from a background thread or via post_due()."""

    def __init__(
        self,
        inbox: SensorInbox,
        events: Sequence[FeedEvent],
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._inbox = inbox
        self._events = sorted(events, key=lambda e: e.at_s)
        self._clock = clock
        self._next = 0
        self._started_at: float | None = None
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def remaining(self) -> int:
        return len(self._events) - self._next

    def post_due(self, elapsed_s: float) -> int:
        """Post every event with at_s <= elapsed_s not yet posted. Returns how many were posted."""
        posted = 0
        while self._next < len(self._events) and self._events[self._next].at_s <= elapsed_s:
            ev = self._events[self._next]
            if ev.kind is SensorKind.BLOBS:
                self._inbox.post_blobs(ev.payload)
            elif ev.kind is SensorKind.DEPTH:
                self._inbox.post_depth(ev.payload)
            else:
                self._inbox.post_contact(ev.payload)
            logger.debug("feed t=%.2f: %s", ev.at_s, ev.kind.value)
            self._next += 1
            posted += 1
        return posted

    def start(self) -> None:
        self._started_at = self._clock()
        self._thread = threading.Thread(target=self._run, name="scripted-feed", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout=1.0)

    def _run(self) -> None:
        assert self._started_at is not None
        while not self._stop.is_set() and self.remaining:
            self.post_due(self._clock() - self._started_at)
            self._stop.wait(0.01)
