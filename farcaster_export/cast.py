from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Union

Scalar = Union[str, int, float, bool, None]


@dataclass(frozen=True)
class Author:
    fid: Scalar = None
    username: str | None = None
    display_name: str | None = None
    pfp_url: str | None = None
    custody_address: str | None = None
    bio_text: str | None = None
    follower_count: Scalar = None
    following_count: Scalar = None
    verifications: Sequence[str] = ()
    verified_eth_addresses: Sequence[str] = ()
    power_badge: Scalar = None


@dataclass(frozen=True)
class UrlEmbed:
    url: str


@dataclass(frozen=True)
class CastEmbed:
    hash: str


Embed = Union[UrlEmbed, CastEmbed]


@dataclass(frozen=True)
class FeedRecord:
    """One cast from a channel feed, reduced to the fields the export uses."""

    hash: str | None
    author: Author
    thread_hash: str | None = None
    parent_hash: str | None = None
    parent_url: str | None = None
    root_parent_url: str | None = None
    parent_author_fid: Scalar = None
    text: str | None = None
    timestamp: str | None = None
    embeds: Sequence[Embed] = ()
    likes_count: Scalar = None
    recasts_count: Scalar = None
    replies_count: Scalar = None


@dataclass(frozen=True)
class PageResult:
    casts: tuple[FeedRecord, ...]
    next_cursor: str | None = None
