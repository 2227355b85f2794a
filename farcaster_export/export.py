from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from .csv_export import ExportDocument, build_document
from .errors import ConfigError, FeedApiError, RecordShapeError
from .pager import ChannelFeedSource, coerce_page_count, fetch_channel_feed
from .run_log import RunLogger

ExportStage = Literal["fetch", "assemble"]


@dataclass(frozen=True)
class ExportRequest:
    """Everything one export needs; owned by the caller."""

    channel_id: str
    api_key: str
    max_pages: int = 10

    def __post_init__(self) -> None:
        object.__setattr__(self, "channel_id", self.channel_id or "")
        object.__setattr__(self, "api_key", (self.api_key or "").strip())
        object.__setattr__(self, "max_pages", coerce_page_count(self.max_pages))

    @property
    def is_ready(self) -> bool:
        # Whitespace-only input counts as empty; non-blank ids are used as given.
        return bool(self.channel_id.strip() and self.api_key)


@dataclass(frozen=True)
class ExportFailure:
    stage: ExportStage
    error_type: str
    message: str


@dataclass(frozen=True)
class ExportResult:
    document: ExportDocument | None = None
    failure: ExportFailure | None = None
    pages_fetched: int = 0

    @property
    def ok(self) -> bool:
        return self.document is not None and self.failure is None


def run_export(
    request: ExportRequest,
    source: ChannelFeedSource,
    *,
    logger: RunLogger | None = None,
) -> ExportResult:
    """
    Fetch the channel feed and assemble the CSV document.

    Remote and record-shape failures come back as a failed ExportResult; no
    document is produced in that case. Raises ConfigError when the request
    lacks a channel id or credential.
    """
    if not request.is_ready:
        raise ConfigError("Both a channel id and a Neynar API key are required")

    if logger is not None:
        logger.bind_channel(request.channel_id)

    try:
        records, pages = fetch_channel_feed(
            source,
            request.channel_id,
            max_pages=request.max_pages,
            logger=logger,
        )
    except (FeedApiError, RecordShapeError) as e:
        return _failed("fetch", e, logger)

    if logger is not None:
        logger.info("feed_fetch_completed", pages=pages, records=len(records))

    try:
        document = build_document(request.channel_id, records)
    except (RecordShapeError, TypeError, ValueError) as e:
        return _failed("assemble", e, logger, pages_fetched=pages)

    if logger is not None:
        logger.info(
            "document_assembled",
            filename=document.filename,
            records=document.record_count,
        )

    return ExportResult(document=document, pages_fetched=pages)


def _failed(
    stage: ExportStage,
    exc: Exception,
    logger: RunLogger | None,
    *,
    pages_fetched: int = 0,
) -> ExportResult:
    if logger is not None:
        logger.exception("export_failed", exc=exc, stage=stage)
    return ExportResult(
        failure=ExportFailure(stage=stage, error_type=type(exc).__name__, message=str(exc)),
        pages_fetched=pages_fetched,
    )
