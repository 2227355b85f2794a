from __future__ import annotations


class ConfigError(RuntimeError):
    """Raised when configuration or required input is missing or invalid."""


class FeedApiError(RuntimeError):
    """Raised when a Neynar feed request fails or returns an unusable body."""


class RecordShapeError(RuntimeError):
    """Raised when a fetched cast lacks a nested attribute the export needs."""


class ExportError(RuntimeError):
    """Raised when the CSV document cannot be written to disk."""
