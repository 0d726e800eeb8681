"""Turn destination records into :class:`GeoPoint` values for the index."""

from __future__ import annotations

import logging
import math
from typing import Any, Dict, Iterable, List, Optional

import pandas as pd

from ..schemas import Destination
from ..vibes import calculate_primary_vibe
from .models import GeoPoint

logger = logging.getLogger(__name__)


def _coerce_records(destinations: Iterable) -> List[Dict[str, Any]]:
    """Return ``destinations`` as a list of plain dicts.

    Accepts a :class:`~pandas.DataFrame`, :class:`Destination` models or any
    iterable of mappings. DataFrame NaNs become ``None`` so missing coordinates
    are detected uniformly.
    """

    if isinstance(destinations, pd.DataFrame):
        df = destinations.astype(object).where(destinations.notna(), None)
        return df.to_dict("records")

    records = []
    for item in destinations:
        if isinstance(item, Destination):
            records.append(item.model_dump(by_alias=True))
        else:
            records.append(dict(item))
    return records


def _finite(value: Optional[float]) -> bool:
    return value is not None and math.isfinite(value)


def destination_to_point(record: Dict[str, Any]) -> Optional[GeoPoint]:
    """
    Convert one record to a point, or None when a coordinate is missing.

    The category is the record's ``primary_vibe`` when set, otherwise it is
    derived from the theme scores. The original record becomes the payload.
    """
    destination = Destination.model_validate(record)
    lat, lng = destination.latitude, destination.longitude
    if not (_finite(lat) and _finite(lng)):
        return None

    vibe = destination.primary_vibe or calculate_primary_vibe(destination.model_dump())
    return GeoPoint(
        id=destination.object_id,
        lng=float(lng),
        lat=float(lat),
        category=vibe,
        payload=record,
    )


def points_from_destinations(destinations: Iterable) -> List[GeoPoint]:
    """
    Build index input from destination records, dropping incomplete ones.

    Args:
        destinations: DataFrame, :class:`Destination` models or mappings with
            ``objectID`` and either ``_geoloc.lat``/``_geoloc.lng`` or
            top-level ``lat``/``lng``

    Returns:
        Points in input order, without records missing a coordinate
    """
    points: List[GeoPoint] = []
    dropped = 0
    for record in _coerce_records(destinations):
        point = destination_to_point(record)
        if point is None:
            dropped += 1
            continue
        points.append(point)

    if dropped:
        logger.debug(f"Dropped {dropped} destination(s) without coordinates")
    return points


__all__ = [
    "destination_to_point",
    "points_from_destinations",
]
