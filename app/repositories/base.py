"""Repository base class used by all concrete repositories."""
import contextlib
import logging
from typing import Callable, Iterator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..errors import StorageError


class BaseRepository:
    """Provides SQLAlchemy session handling for a single table.

    Every public repository call runs inside :meth:`_session`, which opens a
    fresh session, commits it when the block finishes, rolls it back on
    failure and always closes it.  No session outlives a call, so repositories
    are safe to share between concurrently running request handlers.

    Backend failures are logged with their traceback and re-raised as
    :class:`~app.errors.StorageError`, whose message carries no SQL detail.
    """

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory
        self._log = logging.getLogger(f'beaten.repository.{type(self).__name__}')

    @contextlib.contextmanager
    def _session(self, action: str) -> Iterator[Session]:
        """Yield a session for one unit of work described by *action*."""
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            self._log.exception("Failed to %s: %s", action, exc)
            raise StorageError(f"Failed to {action}.", detail=str(exc)) from exc
        finally:
            session.close()
