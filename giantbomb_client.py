"""
giantbomb_client.py
===================
Lightweight wrapper around the Giant Bomb search API, used by Beaten Games
to autocomplete game names.

Authentication
--------------
Every request carries the account's API key as the ``api_key`` query
parameter.  Obtain a key at https://www.giantbomb.com/api/.

Usage
-----
::

    from giantbomb_client import GiantBombClient

    client = GiantBombClient(api_key="abc")
    client.search("celeste", limit=10, page=1)
    # [{"id": 56733, "name": "Celeste",
    #   "platforms": [{"id": 94, "name": "PC", "abbreviation": "PC"}, ...]}, ...]
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List

import requests

from app.errors import SearchError

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
_SEARCH_URL = "https://www.giantbomb.com/api/search/"
_DEFAULT_TIMEOUT = 10  # seconds
_USER_AGENT = "beaten-games/1.0"

RESOURCE_GAME = "game"
DEFAULT_FIELDS = ("id", "name", "platforms")

# Giant Bomb reports success as status_code 1 inside the JSON body.
_STATUS_OK = 1


class GiantBombClient:
    """Minimal Giant Bomb API client for game search."""

    def __init__(self, api_key: str, timeout: int = _DEFAULT_TIMEOUT) -> None:
        """
        Args:
            api_key: Giant Bomb API key.
            timeout: HTTP request timeout in seconds.
        """
        if not api_key:
            raise ValueError("api_key must not be empty")
        self._api_key = api_key
        self._timeout = timeout

    def search(
        self,
        query: str,
        limit: int = 10,
        page: int = 1,
        resources: Iterable[str] = (RESOURCE_GAME,),
        field_list: Iterable[str] = DEFAULT_FIELDS,
    ) -> List[Dict[str, Any]]:
        """Search the Giant Bomb catalogue.

        Each entry contains::

            {
              "id":        56733,
              "name":      "Celeste",
              "platforms": [{"id": 94, "name": "PC", "abbreviation": "PC"}]
            }

        Args:
            query:      Free-text search string.
            limit:      Maximum number of results (1-100).
            page:       1-based result page.
            resources:  Resource types to search.
            field_list: Fields requested from the API.

        Returns:
            List of game summaries in the order the API ranked them.

        Raises:
            SearchError: Network failure, HTTP error, malformed body or an
                error reported by the API.
        """
        params = {
            "api_key":    self._api_key,
            "format":     "json",
            "query":      query,
            "resources":  ",".join(resources),
            "field_list": ",".join(field_list),
            "limit":      max(1, min(limit, 100)),
            "page":       max(1, page),
        }
        data = self._get(params)
        return [self._summarise(raw) for raw in data.get("results") or []]

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _get(self, params: Dict[str, Any]) -> Dict[str, Any]:
        """Perform the search request and return the parsed JSON body."""
        try:
            resp = requests.get(
                _SEARCH_URL,
                params=params,
                headers={"User-Agent": _USER_AGENT},
                timeout=self._timeout,
            )
            resp.raise_for_status()
        except requests.HTTPError as exc:
            raise SearchError(
                detail=f"Giant Bomb API error {resp.status_code}"
            ) from exc
        except requests.RequestException as exc:
            raise SearchError(detail=f"Network error calling Giant Bomb API: {exc}") from exc

        try:
            body = resp.json()
        except ValueError as exc:
            raise SearchError(detail="Giant Bomb API returned invalid JSON") from exc

        if not isinstance(body, dict):
            raise SearchError(detail="Giant Bomb API returned an unexpected body")
        if body.get("status_code") != _STATUS_OK:
            raise SearchError(
                detail=f"Giant Bomb API error {body.get('status_code')}: {body.get('error')}"
            )
        logger.debug("Giant Bomb search %r returned %s result(s)",
                     params.get("query"), body.get("number_of_page_results"))
        return body

    @staticmethod
    def _summarise(raw: Dict[str, Any]) -> Dict[str, Any]:
        platforms = raw.get("platforms") or []
        return {
            "id":   raw.get("id"),
            "name": raw.get("name", ""),
            "platforms": [
                {
                    "id":           p.get("id"),
                    "name":         p.get("name", ""),
                    "abbreviation": p.get("abbreviation", ""),
                }
                for p in platforms
            ],
        }
