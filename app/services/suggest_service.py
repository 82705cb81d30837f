"""Business logic for game-name autocomplete."""
from typing import Any, Dict, List, Optional

from ..errors import BadRequest

SUGGESTION_LIMIT = 10


class SuggestService:
    """Validates autocomplete queries and forwards them to the search client.

    The client is any object with a ``search(query, limit, page)`` method
    returning a list of ``{id, name, platforms}`` dicts (normally
    :class:`giantbomb_client.GiantBombClient`).
    """

    def __init__(self, client, limit: int = SUGGESTION_LIMIT, page: int = 1) -> None:
        self._client = client
        self._limit = limit
        self._page = page

    def suggest(self, query: Optional[str]) -> List[Dict[str, Any]]:
        """Return game summaries matching *query*.

        Raises:
            BadRequest: *query* is missing or blank; the client is not called.
            SearchError: The remote search failed.
        """
        if query is None or not query.strip():
            raise BadRequest("Query is empty.")
        return self._client.search(query, limit=self._limit, page=self._page)
