"""Color blob extraction from camera frames (cmvision-style color classes).

Color file format (same as cmvision's colors.txt):

    [Colors]
    (185, 66, 36) 0.000000 10 PinkOutdoor
    [Thresholds]
    ( 127:187, 142:161, 175:197 )

The N-th threshold line belongs to the N-th color. Thresholds are Y:U:V ranges
(inclusive). Each extracted blob reports its class color as (red, green, blue), so
BlobAggregator can match it against the target signature exactly.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path

import cv2
import numpy as np

from targetseek.config import ColorSignature

from .types import BlobDetection

logger = logging.getLogger(__name__)

_COLOR_RE = re.compile(
    r"^\(\s*(\d+)\s*,\s*(\d+)\s*,\s*(\d+)\s*\)\s+([-+\d.eE]+)\s+(\d+)\s+(\S+)\s*$"
)
_RANGE = r"\s*(\d+)\s*:\s*(\d+)\s*"
_THRESH_RE = re.compile(r"^\(" + _RANGE + "," + _RANGE + "," + _RANGE + r"\)\s*$")

# Built-in classes: both pink target signatures and the blue used as a demo distractor
DEFAULT_COLOR_FILE = """\
[Colors]
(185, 66, 36) 0.000000 10 PinkOutdoor
(238, 114, 76) 0.000000 10 PinkIndoor
(40, 90, 200) 0.000000 10 Blue
[Thresholds]
( 80:116, 85:110, 190:220 )
( 130:165, 85:105, 195:220 )
( 70:105, 170:200, 70:100 )
"""


class ColorFileError(ValueError):
    """Malformed color file."""


@dataclass(frozen=True)
class ColorClass:
    """One color class: reported signature plus YUV thresholds."""

    name: str
    color: ColorSignature
    merge: float
    expected_num: int
    y_range: tuple[int, int]
    u_range: tuple[int, int]
    v_range: tuple[int, int]

    @property
    def lower(self) -> np.ndarray:
        return np.array([self.y_range[0], self.u_range[0], self.v_range[0]], dtype=np.uint8)

    @property
    def upper(self) -> np.ndarray:
        return np.array([self.y_range[1], self.u_range[1], self.v_range[1]], dtype=np.uint8)


def parse_color_file(text: str) -> list[ColorClass]:
    """Parse cmvision color file text into ColorClass list."""
    section = ""
    colors: list[tuple[str, ColorSignature, float, int]] = []
    thresholds: list[tuple[tuple[int, int], tuple[int, int], tuple[int, int]]] = []
    for lineno, raw in enumerate(text.splitlines(), start=1):
        line = raw.split("#", 1)[0].strip()
        if not line:
            continue
        if line.startswith("[") and line.endswith("]"):
            section = line[1:-1].strip().lower()
            continue
        if section == "colors":
            m = _COLOR_RE.match(line)
            if m is None:
                raise ColorFileError(f"line {lineno}: bad color entry {raw!r}")
            r, g, b = (int(m.group(i)) for i in (1, 2, 3))
            if any(c > 255 for c in (r, g, b)):
                raise ColorFileError(f"line {lineno}: color channel out of range in {raw!r}")
            colors.append((m.group(6), (r, g, b), float(m.group(4)), int(m.group(5))))
        elif section == "thresholds":
            m = _THRESH_RE.match(line)
            if m is None:
                raise ColorFileError(f"line {lineno}: bad threshold entry {raw!r}")
            vals = [int(m.group(i)) for i in range(1, 7)]
            if any(v > 255 for v in vals):
                raise ColorFileError(f"line {lineno}: threshold out of range in {raw!r}")
            thresholds.append(((vals[0], vals[1]), (vals[2], vals[3]), (vals[4], vals[5])))
        else:
            raise ColorFileError(f"line {lineno}: entry outside [Colors]/[Thresholds]: {raw!r}")

    if len(thresholds) < len(colors):
        raise ColorFileError(f"{len(colors)} colors but only {len(thresholds)} thresholds")
    return [
        ColorClass(name=name, color=color, merge=merge, expected_num=n, y_range=y, u_range=u, v_range=v)
        for (name, color, merge, n), (y, u, v) in zip(colors, thresholds)
    ]


def extract_blobs(
    frame_bgr: np.ndarray,
    classes: list[ColorClass],
    min_area: int = 1,
) -> list[BlobDetection]:
    """Segment frame by each class's YUV thresholds; one BlobDetection per connected region."""
    if frame_bgr is None or frame_bgr.size == 0:
        return []
    yuv = cv2.cvtColor(frame_bgr, cv2.COLOR_BGR2YUV)
    blobs: list[BlobDetection] = []
    for cc in classes:
        mask = cv2.inRange(yuv, cc.lower, cc.upper)
        n, _, stats, centroids = cv2.connectedComponentsWithStats(mask, connectivity=8)
        # Label 0 is background
        for i in range(1, n):
            area = int(stats[i, cv2.CC_STAT_AREA])
            if area < min_area:
                continue
            cx, cy = centroids[i]
            blobs.append(BlobDetection(*cc.color, x=float(cx), y=float(cy), area=area))
    logger.debug("extract_blobs: %d blobs over %d classes", len(blobs), len(classes))
    return blobs


def load_color_file(path: str | Path | None = None) -> list[ColorClass]:
    """Read and parse a color file; None loads the built-in classes."""
    if path is None:
        return parse_color_file(DEFAULT_COLOR_FILE)
    classes = parse_color_file(Path(path).read_text(encoding="utf-8"))
    logger.info("Loaded %d color classes from %s", len(classes), path)
    return classes


def class_for(classes: list[ColorClass], signature: ColorSignature) -> ColorClass:
    """The class reporting this signature. Raises ColorFileError if there is none."""
    for cc in classes:
        if cc.color == tuple(signature):
            return cc
    known = ", ".join(f"{cc.name}{cc.color}" for cc in classes) or "none"
    raise ColorFileError(f"no color class for target signature {tuple(signature)} (known: {known})")


def paint_bgr(cc: ColorClass) -> tuple[int, int, int]:
    """BGR pixel at the center of the class's YUV box, for rendering synthetic frames."""
    mid = [(lo + hi) // 2 for lo, hi in (cc.y_range, cc.u_range, cc.v_range)]
    bgr = cv2.cvtColor(np.array([[mid]], dtype=np.uint8), cv2.COLOR_YUV2BGR)[0, 0]
    return int(bgr[0]), int(bgr[1]), int(bgr[2])
