"""vibemap: vibe-aware point clustering for travel destination maps."""

__version__ = "0.1.0"
