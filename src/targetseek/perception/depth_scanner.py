"""Depth obstacle scan over a fixed horizontal band of the point cloud."""

from __future__ import annotations

import logging

import numpy as np

from targetseek.config import ControllerConfig

from .types import ObstacleState

logger = logging.getLogger(__name__)


class DepthScanner:
    """
    Counts near points (z < near_range_m) in rows [scan_row_offset, scan_row_offset + scan_rows)
    across the full image width. obstacle_found is raised when hits > near_point_threshold and
    lowered otherwise, unless the bumper is latched.

    Accepts an organized cloud (rows, cols, 3) or a flat row-major cloud (N, 3) with
    image_width points per row. Missing rows/columns and non-finite points never count.
    """

    def __init__(self, config: ControllerConfig) -> None:
        self._near_range_m = config.near_range_m
        self._hit_threshold = config.near_point_threshold
        self._row0 = config.scan_row_offset
        self._rows = config.scan_rows
        self._width = config.image_width

    def count_hits(self, cloud: np.ndarray) -> int:
        """Number of near points inside the scan band."""
        z = self._band_z(np.asarray(cloud))
        if z.size == 0:
            return 0
        near = np.isfinite(z) & (z < self._near_range_m)
        return int(np.count_nonzero(near))

    def update(self, obstacle: ObstacleState, cloud: np.ndarray) -> int:
        hits = self.count_hits(cloud)
        if hits > self._hit_threshold:
            if not obstacle.obstacle_found:
                logger.debug("Depth obstacle: %d near points", hits)
            obstacle.obstacle_found = True
        elif not obstacle.bumper_latched:
            obstacle.obstacle_found = False
        return hits

    def _band_z(self, cloud: np.ndarray) -> np.ndarray:
        if cloud.ndim == 3 and cloud.shape[-1] >= 3:
            band = cloud[self._row0:self._row0 + self._rows, :self._width, 2]
            return band.astype(np.float64, copy=False)
        if cloud.ndim == 2 and cloud.shape[-1] >= 3:
            # Flat organized cloud: point (row, col) lives at index row * width + col
            start = self._row0 * self._width
            stop = (self._row0 + self._rows) * self._width
            return cloud[start:stop, 2].astype(np.float64, copy=False)
        logger.warning("Ignoring depth cloud with unexpected shape %s", cloud.shape)
        return np.empty(0)
