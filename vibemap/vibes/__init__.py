"""Vibe categories, their canonical order and display metadata."""

from .categories import (
    VibeCategory,
    CANONICAL_VIBE_ORDER,
    VIBE_RANK,
    DEFAULT_VIBE,
    VIBE_COLORS,
    VIBE_LABELS,
    VIBE_ICONS,
    ROMANTIC_KEYWORDS,
    parse_vibe,
    calculate_primary_vibe,
    get_vibe_color,
    get_vibe_label,
    get_vibe_icon,
    get_all_vibe_categories,
)

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
