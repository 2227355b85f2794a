from __future__ import annotations

from typing import Any, Sequence

from .cast import PageResult
from .normalize import page_result_from_api_payload


def _offline_cast(
    n: int,
    *,
    text: str,
    embeds: list[dict[str, Any]],
    parent_hash: str | None = None,
) -> dict[str, Any]:
    return {
        "hash": f"0xoffline{n:04d}",
        "thread_hash": f"0xoffline{n:04d}" if parent_hash is None else parent_hash,
        "parent_hash": parent_hash,
        "parent_url": "https://warpcast.com/~/channel/offline",
        "root_parent_url": "https://warpcast.com/~/channel/offline",
        "parent_author": {"fid": 7 if parent_hash else None},
        "author": {
            "fid": 1000 + n,
            "username": f"user{n}",
            "display_name": f"User {n}",
            "pfp_url": f"https://example.com/pfp/{n}.png",
            "custody_address": f"0x{n:040x}",
            "profile": {"bio": {"text": f"Bio for user {n}"}},
            "follower_count": 10 * n,
            "following_count": n,
            "verifications": [f"0x{n + 100:040x}"],
            "verified_addresses": {"eth_addresses": [f"0x{n + 100:040x}"], "sol_addresses": []},
            "power_badge": n % 2 == 0,
        },
        "text": text,
        "timestamp": f"2025-01-0{n}T12:00:00.000Z",
        "embeds": embeds,
        "reactions": {"likes_count": n * 3, "recasts_count": n},
        "replies": {"count": n % 3},
    }


_DEFAULT_OFFLINE_PAGES: list[dict[str, Any]] = [
    {
        "casts": [
            _offline_cast(1, text="gm, offline channel", embeds=[]),
            _offline_cast(
                2,
                text='A "quoted" take, with a comma',
                embeds=[{"url": "https://example.com/a"}, {"cast": {"hash": "0xabc"}}],
            ),
        ],
        "next": {"cursor": "offline-cursor-1"},
    },
    {
        "casts": [
            _offline_cast(
                3,
                text="reply on a second page",
                embeds=[{"url": "https://example.com/b"}],
                parent_hash="0xoffline0001",
            ),
        ],
        "next": {"cursor": None},
    },
]


class OfflineFeedClient:
    """Serves a small stub feed so the export can be exercised without network access."""

    def __init__(self, pages: Sequence[dict[str, Any]] | None = None) -> None:
        self._pages = list(pages) if pages is not None else list(_DEFAULT_OFFLINE_PAGES)
        self.calls: list[tuple[str, str | None]] = []

    def fetch_channel_page(self, channel_id: str, *, cursor: str | None = None) -> PageResult:
        self.calls.append((channel_id, cursor))
        idx = min(len(self.calls), len(self._pages)) - 1
        if idx < 0:
            return PageResult(casts=())
        return page_result_from_api_payload(self._pages[idx])

    def close(self) -> None:
        return None

    def __enter__(self) -> "OfflineFeedClient":
        return self

    def __exit__(self, exc_type: object, exc: object, tb: object) -> None:
        self.close()
