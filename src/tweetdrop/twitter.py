"""Twitter API client and HTTP session setup."""

from __future__ import annotations

import logging
from typing import Any

from requests import Session
from requests.adapters import HTTPAdapter
from requests.exceptions import RequestException
from urllib3.util.retry import Retry

from .errors import FetchError
from .models import FollowerIdPage, PostPage, SourceItem

SEARCH_RECENT_URL = "https://api.twitter.com/2/tweets/search/recent"
FOLLOWER_IDS_URL = "https://api.twitter.com/1.1/followers/ids.json"
USERS_LOOKUP_URL = "https://api.twitter.com/1.1/users/lookup.json"
MAX_SEARCH_RESULTS = 100
MAX_LOOKUP_IDS = 100


def make_retry_session(user_agent: str, bearer_token: str | None = None) -> Session:
    """Create requests session with retry/backoff defaults."""
    session = Session()
    session.headers.update({"User-Agent": user_agent})
    if bearer_token:
        session.headers.update({"Authorization": f"Bearer {bearer_token}"})
    retry = Retry(
        total=3,
        backoff_factor=0.6,
        status_forcelist=[429, 500, 502, 503, 504],
        allowed_methods=frozenset({"GET", "POST"}),
    )
    adapter = HTTPAdapter(max_retries=retry)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session


class TwitterClient:
    """Paged reads against the Twitter v2 search and v1.1 follower endpoints."""

    def __init__(self, *, session: Session, timeout: float, logger: logging.Logger) -> None:
        self._session = session
        self._timeout = timeout
        self._logger = logger

    def _request(self, method: str, url: str, params: dict[str, Any]) -> Any:
        try:
            response = self._session.request(method, url, params=params, timeout=self._timeout)
            response.raise_for_status()
            return response.json()
        except RequestException as exc:
            raise FetchError(f"{method} {url} failed: {exc}") from exc
        except ValueError as exc:
            raise FetchError(f"{method} {url} returned invalid JSON: {exc}") from exc

    def fetch_page(self, conversation_id: str, next_token: str | None = None) -> PostPage:
        params: dict[str, Any] = {
            "query": f"conversation_id:{conversation_id}",
            "max_results": MAX_SEARCH_RESULTS,
        }
        if next_token:
            params["next_token"] = next_token
        payload = self._request("GET", SEARCH_RECENT_URL, params)
        if not isinstance(payload, dict):
            raise FetchError("Search response was not a JSON object.")

        items: list[SourceItem] = []
        for tweet in payload.get("data") or []:
            if not isinstance(tweet, dict):
                continue
            items.append(SourceItem(id=str(tweet.get("id", "")), text=str(tweet.get("text", ""))))
        meta = payload.get("meta") or {}
        token = meta.get("next_token") if isinstance(meta, dict) else None
        self._logger.debug("Search page returned %d tweets", len(items))
        return PostPage(items=items, next_token=token or None)

    def fetch_follower_ids(self, handle: str, cursor: str | None = None) -> FollowerIdPage:
        params: dict[str, Any] = {"screen_name": handle, "stringify_ids": "true"}
        if cursor:
            params["cursor"] = cursor
        payload = self._request("GET", FOLLOWER_IDS_URL, params)
        if not isinstance(payload, dict):
            raise FetchError("Follower ids response was not a JSON object.")

        ids = [str(value) for value in payload.get("ids") or []]
        next_cursor = str(payload.get("next_cursor_str") or "0")
        return FollowerIdPage(ids=ids, next_cursor=None if next_cursor == "0" else next_cursor)

    def lookup_users(self, ids: list[str]) -> list[dict[str, Any]]:
        if len(ids) > MAX_LOOKUP_IDS:
            raise ValueError(f"users/lookup accepts at most {MAX_LOOKUP_IDS} ids.")
        if not ids:
            return []
        params = {"user_id": ",".join(ids), "include_entities": "false"}
        payload = self._request("POST", USERS_LOOKUP_URL, params)
        if not isinstance(payload, list):
            raise FetchError("User lookup response was not a JSON array.")
        return [user for user in payload if isinstance(user, dict)]
