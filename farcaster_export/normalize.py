from __future__ import annotations

from typing import Any, Callable, Mapping

from .cast import Author, CastEmbed, Embed, FeedRecord, PageResult, Scalar, UrlEmbed
from .errors import RecordShapeError

OnSkippedEmbedFn = Callable[[Mapping[str, Any]], None]


def _opt_str(value: Any) -> str | None:
    # Text is exported verbatim, so no stripping here.
    if value is None:
        return None
    if isinstance(value, str):
        return value
    return str(value)


def _opt_scalar(value: Any) -> Scalar:
    # Numbers, booleans and strings are kept as sent; the encoder decides how they print.
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return str(value)


def _require_mapping(parent: Mapping[str, Any], key: str, *, path: str) -> Mapping[str, Any]:
    value = parent.get(key)
    if not isinstance(value, Mapping):
        raise RecordShapeError(f"Cast is missing object '{path}'")
    return value


def _require_str_list(parent: Mapping[str, Any], key: str, *, path: str) -> tuple[str, ...]:
    value = parent.get(key)
    if not isinstance(value, list):
        raise RecordShapeError(f"Cast is missing list '{path}'")
    return tuple("" if item is None else str(item) for item in value)


def embed_from_api_item(item: Any) -> Embed | None:
    """
    Classify one raw embed object.

    A `url` key makes it a URL embed; otherwise a `cast` key makes it a cast
    reference. Anything else returns None.
    """
    if not isinstance(item, Mapping):
        return None

    if "url" in item:
        return UrlEmbed(url=_opt_str(item.get("url")) or "")

    if "cast" in item:
        ref = item.get("cast")
        if not isinstance(ref, Mapping) or "hash" not in ref:
            raise RecordShapeError("Cast embed is missing 'cast.hash'")
        return CastEmbed(hash=_opt_str(ref.get("hash")) or "")

    return None


def _author_from_api_item(author: Mapping[str, Any]) -> Author:
    profile = _require_mapping(author, "profile", path="author.profile")
    bio = _require_mapping(profile, "bio", path="author.profile.bio")
    verified = _require_mapping(author, "verified_addresses", path="author.verified_addresses")

    return Author(
        fid=_opt_scalar(author.get("fid")),
        username=_opt_str(author.get("username")),
        display_name=_opt_str(author.get("display_name")),
        pfp_url=_opt_str(author.get("pfp_url")),
        custody_address=_opt_str(author.get("custody_address")),
        bio_text=_opt_str(bio.get("text")),
        follower_count=_opt_scalar(author.get("follower_count")),
        following_count=_opt_scalar(author.get("following_count")),
        verifications=_require_str_list(author, "verifications", path="author.verifications"),
        verified_eth_addresses=_require_str_list(
            verified, "eth_addresses", path="author.verified_addresses.eth_addresses"
        ),
        power_badge=_opt_scalar(author.get("power_badge")),
    )


def feed_record_from_api_item(
    item: Mapping[str, Any],
    *,
    on_skipped_embed: OnSkippedEmbedFn | None = None,
) -> FeedRecord:
    """
    Convert one cast object from a Neynar feed response into a FeedRecord.

    Leaf values may be null. A missing nested object or list raises
    RecordShapeError.
    """
    if not isinstance(item, Mapping):
        raise RecordShapeError(f"Cast must be an object, got {type(item).__name__}")

    author = _author_from_api_item(_require_mapping(item, "author", path="author"))
    parent_author = _require_mapping(item, "parent_author", path="parent_author")
    reactions = _require_mapping(item, "reactions", path="reactions")
    replies = _require_mapping(item, "replies", path="replies")

    raw_embeds = item.get("embeds")
    if not isinstance(raw_embeds, list):
        raise RecordShapeError("Cast is missing list 'embeds'")

    embeds: list[Embed] = []
    for raw in raw_embeds:
        embed = embed_from_api_item(raw)
        if embed is None:
            if on_skipped_embed is not None:
                on_skipped_embed(raw if isinstance(raw, Mapping) else {"value": raw})
            continue
        embeds.append(embed)

    return FeedRecord(
        hash=_opt_str(item.get("hash")),
        author=author,
        thread_hash=_opt_str(item.get("thread_hash")),
        parent_hash=_opt_str(item.get("parent_hash")),
        parent_url=_opt_str(item.get("parent_url")),
        root_parent_url=_opt_str(item.get("root_parent_url")),
        parent_author_fid=_opt_scalar(parent_author.get("fid")),
        text=_opt_str(item.get("text")),
        timestamp=_opt_str(item.get("timestamp")),
        embeds=tuple(embeds),
        likes_count=_opt_scalar(reactions.get("likes_count")),
        recasts_count=_opt_scalar(reactions.get("recasts_count")),
        replies_count=_opt_scalar(replies.get("count")),
    )


def page_result_from_api_payload(
    payload: Mapping[str, Any],
    *,
    on_skipped_embed: OnSkippedEmbedFn | None = None,
) -> PageResult:
    raw_casts = payload.get("casts")
    if not isinstance(raw_casts, list):
        raise RecordShapeError("Feed response is missing list 'casts'")

    casts = tuple(
        feed_record_from_api_item(item, on_skipped_embed=on_skipped_embed) for item in raw_casts
    )

    next_obj = payload.get("next")
    cursor = None
    if isinstance(next_obj, Mapping):
        cursor = _opt_str(next_obj.get("cursor")) or None

    return PageResult(casts=casts, next_cursor=cursor)
