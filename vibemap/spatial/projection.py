"""Web-Mercator helpers mapping WGS84 degrees onto the unit square."""

from __future__ import annotations

import math

import numpy as np

MAX_LATITUDE = 85.0511287798


def lng_x(lng: float) -> float:
    """Longitude in degrees to x in [0, 1]."""
    return lng / 360.0 + 0.5


def lat_y(lat: float) -> float:
    """Latitude in degrees to Mercator y in [0, 1] (0 is the north edge)."""
    sin = math.sin(math.radians(lat))
    if sin >= 1.0:
        return 0.0
    if sin <= -1.0:
        return 1.0
    y = 0.5 - 0.25 * math.log((1 + sin) / (1 - sin)) / math.pi
    return min(max(y, 0.0), 1.0)


def project_arrays(lngs: np.ndarray, lats: np.ndarray) -> np.ndarray:
    """Vectorised projection; returns an ``(n, 2)`` array of ``(x, y)``."""
    lngs = np.asarray(lngs, dtype=float)
    lats = np.clip(np.asarray(lats, dtype=float), -MAX_LATITUDE, MAX_LATITUDE)
    sin = np.sin(np.radians(lats))
    xs = lngs / 360.0 + 0.5
    ys = np.clip(0.5 - 0.25 * np.log((1 + sin) / (1 - sin)) / np.pi, 0.0, 1.0)
    return np.column_stack([xs, ys])


def zoom_radius(radius: float, extent: int, zoom: int) -> float:
    """Cluster radius in unit-square units at ``zoom``."""
    return radius / (extent * math.pow(2, zoom))
