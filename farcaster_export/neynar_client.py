from __future__ import annotations

from typing import Any, Mapping

import requests

from .cast import PageResult
from .config_schema import NeynarConfig
from .errors import FeedApiError
from .normalize import page_result_from_api_payload
from .run_log import RunLogger

_FEED_PATH = "/v2/farcaster/feed"
_ERROR_BODY_LIMIT = 400


def _short_body(response: requests.Response) -> str:
    body = (response.text or "").strip()
    if len(body) > _ERROR_BODY_LIMIT:
        return body[:_ERROR_BODY_LIMIT] + "..."
    return body


class NeynarFeedClient:
    """
    Thin wrapper around Neynar's filtered feed endpoint.

    One call fetches one page; following cursors is the pager's job.
    """

    def __init__(
        self,
        api_key: str,
        *,
        neynar: NeynarConfig | None = None,
        session: requests.Session | None = None,
        logger: RunLogger | None = None,
    ) -> None:
        key = (api_key or "").strip()
        if not key:
            raise FeedApiError("Neynar API key must be non-empty")

        self._cfg = neynar or NeynarConfig()
        self._logger = logger
        self._session = session if session is not None else requests.Session()
        self._session.headers.update({"accept": "application/json", "x-api-key": key})

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> "NeynarFeedClient":
        return self

    def __exit__(self, exc_type: object, exc: object, tb: object) -> None:
        self.close()

    def fetch_channel_page(self, channel_id: str, *, cursor: str | None = None) -> PageResult:
        cid = channel_id or ""
        if not cid.strip():
            raise FeedApiError("channel_id must be a non-empty string")

        params: dict[str, Any] = {
            "feed_type": "filter",
            "filter_type": "channel_id",
            "channel_id": cid,
        }
        if cursor:
            params["cursor"] = cursor
        if self._cfg.page_limit is not None:
            params["limit"] = int(self._cfg.page_limit)

        payload = self._get_json(_FEED_PATH, params)

        skipped: list[Mapping[str, Any]] = []
        page = page_result_from_api_payload(payload, on_skipped_embed=skipped.append)
        if skipped and self._logger is not None:
            self._logger.warning(
                "unrecognized_embeds_skipped",
                count=len(skipped),
                keys=sorted({k for item in skipped for k in item}),
            )
        return page

    def _get_json(self, path: str, params: dict[str, Any]) -> Mapping[str, Any]:
        url = f"{self._cfg.base_url}{path}"
        try:
            response = self._session.get(url, params=params, timeout=self._cfg.timeout_seconds)
        except requests.RequestException as e:
            raise FeedApiError(f"Neynar request failed ({url}): {e}") from e

        if response.status_code >= 400:
            raise FeedApiError(
                f"Neynar returned HTTP {response.status_code} for {url}: {_short_body(response)}"
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise FeedApiError(f"Neynar returned a non-JSON body for {url}") from e

        if not isinstance(payload, Mapping):
            raise FeedApiError(f"Unexpected response type from {url}: {type(payload).__name__}")
        return payload
