"""Exception hierarchy shared by the repositories, services and HTTP layer.

Every error carries the HTTP ``status_code`` it maps to and a ``message``
that is safe to show to the caller.  Internal details (SQL errors, remote API
payloads) go in ``detail`` and the exception chain, which only reach the log.
"""


class BeatenGamesError(Exception):
    """Base class for all application errors."""

    status_code = 500
    default_message = 'Internal error.'

    def __init__(self, message: str = '', detail: str = '') -> None:
        self.message = message or self.default_message
        self.detail = detail
        super().__init__(detail or self.message)


class BadRequest(BeatenGamesError):
    """Caller-supplied data is invalid, or required data is missing."""

    status_code = 400
    default_message = 'Bad request.'


class GameNotFound(BadRequest):
    """No game exists with the requested id."""

    status_code = 404
    default_message = "Can't find this game."


class ParseFailure(BeatenGamesError):
    """The request body could not be decoded."""

    status_code = 400
    default_message = 'Failed to parse submitted form.'


class StorageError(BeatenGamesError):
    """The database failed to read or write."""

    default_message = 'Storage failure.'


class SearchError(BeatenGamesError):
    """The remote game search failed."""

    default_message = 'Search failed.'
