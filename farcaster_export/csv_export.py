from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Sequence

from .cast import CastEmbed, FeedRecord, Scalar, UrlEmbed
from .errors import ExportError

FILENAME_PREFIX = "farcaster_feed_"

FEED_CSV_HEADERS: tuple[str, ...] = (
    "author.fid",
    "author.username",
    "author.displayName",
    "author.pfpUrl",
    "author.custodyAddress",
    "author.bioText",
    "author.followerCount",
    "author.followingCount",
    "author.verifications",
    "author.verifiedEthAddresses",
    "author.powerBadge",
    "thread_hash",
    "parent_hash",
    "parent_url",
    "root_parent_url",
    "parent_author.fid",
    "text",
    "timestamp",
    "url_embeds",
    "cast_embeds",
    "likes_count",
    "recasts_count",
    "replies_count",
)


@dataclass(frozen=True)
class ExportDocument:
    channel_id: str
    filename: str
    text: str
    record_count: int


def encode_field(value: Scalar) -> str:
    """
    Encode one cell.

    Strings are always quoted with inner quotes doubled; nothing else in them
    is touched. Booleans become true/false, None becomes an empty cell.
    """
    if isinstance(value, str):
        return '"' + value.replace('"', '""') + '"'
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def flatten_record(record: FeedRecord) -> list[Scalar]:
    author = record.author

    url_embeds: list[str] = []
    cast_embeds: list[str] = []
    for embed in record.embeds:
        if isinstance(embed, UrlEmbed):
            url_embeds.append(embed.url)
        elif isinstance(embed, CastEmbed):
            cast_embeds.append(embed.hash)
        else:
            raise TypeError(f"Unknown embed type: {type(embed).__name__}")

    return [
        author.fid,
        author.username,
        author.display_name,
        author.pfp_url,
        author.custody_address,
        author.bio_text,
        author.follower_count,
        author.following_count,
        ",".join(author.verifications),
        ",".join(author.verified_eth_addresses),
        author.power_badge,
        record.thread_hash,
        record.parent_hash,
        record.parent_url,
        record.root_parent_url,
        record.parent_author_fid,
        record.text,
        record.timestamp,
        ",".join(url_embeds),
        ",".join(cast_embeds),
        record.likes_count,
        record.recasts_count,
        record.replies_count,
    ]


def serialize_table(headers: Sequence[str], rows: Iterable[Sequence[Scalar]]) -> str:
    """Header line, then one encoded line per row, joined with newlines."""
    width = len(headers)
    lines = [",".join(headers)]
    for i, row in enumerate(rows):
        if len(row) != width:
            raise ValueError(f"Row {i} has {len(row)} fields, expected {width}")
        lines.append(",".join(encode_field(v) for v in row))
    return "\n".join(lines)


def export_filename(channel_id: str) -> str:
    return f"{FILENAME_PREFIX}{channel_id}.csv"


def build_document(channel_id: str, records: Sequence[FeedRecord]) -> ExportDocument:
    text = serialize_table(FEED_CSV_HEADERS, (flatten_record(r) for r in records))
    return ExportDocument(
        channel_id=channel_id,
        filename=export_filename(channel_id),
        text=text,
        record_count=len(records),
    )


def write_export(document: ExportDocument, out_dir: str | Path) -> Path:
    """
    Write the document as UTF-8 to out_dir/document.filename.

    The bytes go to a temporary file first, which is moved into place and
    always removed if anything fails.
    """
    target_dir = Path(out_dir)
    target = target_dir / document.filename

    try:
        target_dir.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=".export-", suffix=".csv.tmp", dir=target_dir)
    except OSError as e:
        raise ExportError(f"Failed to prepare export directory {target_dir}: {e}") from e

    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "wb") as fp:
            fp.write(document.text.encode("utf-8"))
        os.replace(tmp_path, target)
    except OSError as e:
        raise ExportError(f"Failed to write export file {target}: {e}") from e
    finally:
        if tmp_path.exists():
            tmp_path.unlink()

    return target
