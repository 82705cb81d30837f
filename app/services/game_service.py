"""Business logic for adding, listing and deleting beaten games."""
import datetime
import logging
import re
from typing import Callable, List, Mapping

from ..errors import BadRequest, GameNotFound
from ..records import BeatenOn, Game, Note
from ..repositories.game_repository import GameRepository

DATE_FORMAT = '%Y-%m-%d'
_DATE_RE = re.compile(r'[0-9]{4}-[0-9]{2}-[0-9]{2}')

logger = logging.getLogger('beaten.service.games')


def parse_date(value: str) -> datetime.date:
    """Parse a ``YYYY-MM-DD`` string.

    Raises:
        BadRequest: *value* is not a valid calendar date in that format.
    """
    if not _DATE_RE.fullmatch(value):
        raise BadRequest("Failed to parse date.")
    try:
        return datetime.datetime.strptime(value, DATE_FORMAT).date()
    except ValueError as exc:
        raise BadRequest("Failed to parse date.") from exc


class GameService:
    """Turns submitted forms into :class:`~app.records.Game` records and
    delegates persistence to
    :class:`~app.repositories.game_repository.GameRepository`.

    Forms are any mapping of field name to string (a werkzeug ``MultiDict``
    in production).  Every form is fully validated before the repository is
    touched, so a rejected request never changes stored data.
    """

    def __init__(self, repository: GameRepository,
                 clock: Callable[[], datetime.date] = datetime.date.today) -> None:
        """
        Args:
            repository: Storage gateway for games.
            clock:      Returns today's date; quick-add stamps games with it.
        """
        self._repo = repository
        self._clock = clock

    # ------------------------------------------------------------------
    # Form parsing
    # ------------------------------------------------------------------

    def parse_full_add(self, form: Mapping[str, str]) -> Game:
        """Build a game from the full add form.

        The note is always recorded, even when blank.  An empty or missing
        ``beaten_on`` leaves the date absent.
        """
        name = self._require_name(form)
        note = Note.of(form.get('note') or '')
        raw_date = form.get('beaten_on') or ''
        if raw_date:
            beaten_on = BeatenOn.of(parse_date(raw_date))
        else:
            beaten_on = BeatenOn.absent()
        return Game(name=name, note=note, beaten_on=beaten_on)

    def parse_quick_add(self, form: Mapping[str, str]) -> Game:
        """Build a game from the quick-add form: no note, beaten today."""
        name = self._require_name(form)
        return Game(name=name, note=Note.absent(), beaten_on=BeatenOn.of(self._clock()))

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def add(self, form: Mapping[str, str]) -> Game:
        """Parse and store a game from the full add form.

        Returns:
            The stored game, carrying its new id.
        """
        return self._store(self.parse_full_add(form))

    def quick_add(self, form: Mapping[str, str]) -> Game:
        return self._store(self.parse_quick_add(form))

    def list_games(self) -> List[Game]:
        return self._repo.list_all()

    def get_game(self, game_id: int) -> Game:
        """Return the game with *game_id*.

        Raises:
            GameNotFound: No such game.
        """
        game = self._repo.find(game_id)
        if game is None:
            raise GameNotFound()
        return game

    def delete(self, name: str) -> int:
        """Delete every game called *name*.

        Returns:
            Number of games deleted (at least one).

        Raises:
            BadRequest: *name* is empty, or no game has that name.
        """
        if not name or not name.strip():
            raise BadRequest("Game name is required.")
        count = self._repo.delete_by_name(name)
        if count == 0:
            raise BadRequest("Can't find this game.")
        logger.info("Deleted %d game(s) named %r", count, name)
        return count

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _require_name(form: Mapping[str, str]) -> str:
        name = form.get('name') or ''
        if not name.strip():
            raise BadRequest("Game name is required.")
        return name

    def _store(self, game: Game) -> Game:
        game_id = self._repo.insert(game)
        logger.info("Added game %r (id=%s)", game.name, game_id)
        return Game(id=game_id, name=game.name, note=game.note, beaten_on=game.beaten_on)
