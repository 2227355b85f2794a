from __future__ import annotations

from .config import load_config, resolve_runtime_secrets
from .config_schema import AppConfig
from .csv_export import FEED_CSV_HEADERS, ExportDocument, build_document, write_export
from .errors import ConfigError, ExportError, FeedApiError, RecordShapeError
from .export import ExportFailure, ExportRequest, ExportResult, run_export

__all__ = [
    "AppConfig",
    "ConfigError",
    "ExportDocument",
    "ExportError",
    "ExportFailure",
    "ExportRequest",
    "ExportResult",
    "FEED_CSV_HEADERS",
    "FeedApiError",
    "RecordShapeError",
    "build_document",
    "load_config",
    "resolve_runtime_secrets",
    "run_export",
    "write_export",
]
