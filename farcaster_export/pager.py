from __future__ import annotations

from typing import Protocol

from .cast import FeedRecord, PageResult
from .run_log import RunLogger


class ChannelFeedSource(Protocol):
    def fetch_channel_page(self, channel_id: str, *, cursor: str | None = None) -> PageResult:
        ...


def coerce_page_count(value: int | str | None) -> int:
    """Parse a page count, falling back to 1 for anything below 1 or unparseable."""
    try:
        n = int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 1
    return max(1, n)


def fetch_channel_feed(
    source: ChannelFeedSource,
    channel_id: str,
    *,
    max_pages: int,
    logger: RunLogger | None = None,
) -> tuple[list[FeedRecord], int]:
    """
    Fetch up to max_pages pages of a channel feed, following the cursor.

    Stops early when a page comes back without a cursor. Errors from the
    source propagate unchanged. Returns the casts in arrival order and the
    number of pages fetched.
    """
    limit = coerce_page_count(max_pages)
    records: list[FeedRecord] = []
    cursor: str | None = None
    pages = 0

    for _ in range(limit):
        page = source.fetch_channel_page(channel_id, cursor=cursor)
        pages += 1
        records.extend(page.casts)

        if logger is not None:
            logger.info(
                "feed_page_fetched",
                page=pages,
                page_size=len(page.casts),
                total=len(records),
                has_next=bool(page.next_cursor),
            )

        if not page.next_cursor:
            break
        cursor = page.next_cursor

    return records, pages
