"""
Vibe categories for travel destinations.

A vibe is the dominant travel theme of a destination. The declaration order
of :class:`VibeCategory` is the canonical order used everywhere a tie has to
be broken (dominant vibe of a cluster, primary vibe of a city).
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Tuple


class VibeCategory(str, Enum):
    """Fixed set of vibe labels, in canonical order."""
    ADVENTURE = "adventure"
    ROMANTIC = "romantic"
    CULTURAL = "cultural"
    BEACH = "beach"
    NIGHTLIFE = "nightlife"
    NATURE = "nature"


CANONICAL_VIBE_ORDER: Tuple[VibeCategory, ...] = tuple(VibeCategory)

# Position of each vibe in the canonical order
VIBE_RANK: Dict[VibeCategory, int] = {vibe: i for i, vibe in enumerate(CANONICAL_VIBE_ORDER)}

DEFAULT_VIBE = VibeCategory.CULTURAL


VIBE_COLORS: Dict[VibeCategory, str] = {
    VibeCategory.ADVENTURE: "#FF6B35",
    VibeCategory.ROMANTIC: "#FF69B4",
    VibeCategory.CULTURAL: "#9B59B6",
    VibeCategory.BEACH: "#00CED1",
    VibeCategory.NIGHTLIFE: "#FFD700",
    VibeCategory.NATURE: "#228B22",
}

VIBE_LABELS: Dict[VibeCategory, str] = {
    VibeCategory.ADVENTURE: "Adventure",
    VibeCategory.ROMANTIC: "Romantic",
    VibeCategory.CULTURAL: "Cultural",
    VibeCategory.BEACH: "Beach",
    VibeCategory.NIGHTLIFE: "Nightlife",
    VibeCategory.NATURE: "Nature",
}

VIBE_ICONS: Dict[VibeCategory, str] = {
    VibeCategory.ADVENTURE: "🧗",
    VibeCategory.ROMANTIC: "💕",
    VibeCategory.CULTURAL: "🎭",
    VibeCategory.BEACH: "🏖️",
    VibeCategory.NIGHTLIFE: "🌙",
    VibeCategory.NATURE: "🌲",
}

ROMANTIC_KEYWORDS: Tuple[str, ...] = (
    "romantic",
    "couples",
    "honeymoon",
    "love",
    "elegant",
    "charming",
)


def parse_vibe(value: Any) -> VibeCategory:
    """
    Coerce a vibe name (any case) or enum member into a :class:`VibeCategory`.

    Raises:
        ValueError: If ``value`` does not name a known vibe
    """
    if isinstance(value, VibeCategory):
        return value
    try:
        return VibeCategory(str(value).strip().lower())
    except ValueError as exc:
        known = ", ".join(v.value for v in CANONICAL_VIBE_ORDER)
        raise ValueError(f"Unknown vibe '{value}'. Known vibes: {known}") from exc


def _has_romantic_tags(tags: Iterable[str]) -> bool:
    return any(
        keyword in str(tag).lower()
        for tag in tags
        for keyword in ROMANTIC_KEYWORDS
    )


def calculate_primary_vibe(city: Mapping[str, Any]) -> VibeCategory:
    """
    Derive the primary vibe of a destination from its theme scores.

    Romantic has no score of its own: it borrows the larger of the culture and
    nature scores when any vibe tag contains a romantic keyword, and is zero
    otherwise. The highest score wins; ties go to the vibe that comes first in
    the canonical order.

    Args:
        city: Mapping with ``adventure_score``, ``culture_score``,
            ``nature_score``, ``beach_score``, ``nightlife_score`` and
            ``vibe_tags`` (missing scores count as 0)

    Returns:
        The primary :class:`VibeCategory`
    """
    def score(key: str) -> float:
        value = city.get(key)
        return float(value) if value is not None else 0.0

    culture = score("culture_score")
    nature = score("nature_score")
    romantic = max(culture, nature) if _has_romantic_tags(city.get("vibe_tags") or []) else 0.0

    scores = {
        VibeCategory.ADVENTURE: score("adventure_score"),
        VibeCategory.ROMANTIC: romantic,
        VibeCategory.CULTURAL: culture,
        VibeCategory.BEACH: score("beach_score"),
        VibeCategory.NIGHTLIFE: score("nightlife_score"),
        VibeCategory.NATURE: nature,
    }
    return max(CANONICAL_VIBE_ORDER, key=lambda vibe: (scores[vibe], -VIBE_RANK[vibe]))


def get_vibe_color(vibe: VibeCategory) -> str:
    return VIBE_COLORS[parse_vibe(vibe)]


def get_vibe_label(vibe: VibeCategory) -> str:
    return VIBE_LABELS[parse_vibe(vibe)]


def get_vibe_icon(vibe: VibeCategory) -> str:
    return VIBE_ICONS[parse_vibe(vibe)]


def get_all_vibe_categories() -> List[VibeCategory]:
    """Return every vibe in canonical order."""
    return list(CANONICAL_VIBE_ORDER)


__all__ = [
    "VibeCategory",
    "CANONICAL_VIBE_ORDER",
    "VIBE_RANK",
    "DEFAULT_VIBE",
    "VIBE_COLORS",
    "VIBE_LABELS",
    "VIBE_ICONS",
    "ROMANTIC_KEYWORDS",
    "parse_vibe",
    "calculate_primary_vibe",
    "get_vibe_color",
    "get_vibe_label",
    "get_vibe_icon",
    "get_all_vibe_categories",
]
