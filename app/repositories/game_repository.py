"""Repository for beaten games (the ``games`` table)."""
from typing import List, Optional

from ..records import BeatenOn, Game, Note
from .base import BaseRepository


class GameRepository(BaseRepository):
    """Reads and writes :class:`~app.records.Game` records.

    Schema::

        games(id INTEGER PK, name VARCHAR NOT NULL, note TEXT NULL, beaten_on DATE NULL)

    Absent optional fields are stored as ``NULL`` and read back as absent, so
    an absent note never turns into an empty one.
    """

    def __init__(self, db_module) -> None:
        """
        Args:
            db_module: The imported ``database`` module (or any object that
                exposes ``SessionLocal`` and the ``GameRow`` model).
        """
        super().__init__(db_module.SessionLocal)
        self._row = db_module.GameRow

    def list_all(self) -> List[Game]:
        """Return every game in insertion order."""
        with self._session('list games') as session:
            rows = session.query(self._row).order_by(self._row.id).all()
            return [self._to_game(row) for row in rows]

    def find(self, game_id: int) -> Optional[Game]:
        with self._session('look up game') as session:
            row = session.get(self._row, game_id)
            return self._to_game(row) if row is not None else None

    def insert(self, game: Game) -> int:
        """Persist *game* and return the id the database assigned to it.

        Any id already set on *game* is ignored.
        """
        with self._session('add a game') as session:
            row = self._row(
                name=game.name,
                note=game.note.to_db(),
                beaten_on=game.beaten_on.to_db(),
            )
            session.add(row)
            session.flush()
            game_id = row.id
        self._log.debug("Inserted game %r with id %s", game.name, game_id)
        return game_id

    def delete_by_name(self, name: str) -> int:
        """Delete every game called exactly *name*.

        Returns:
            Number of rows removed; ``0`` when nothing matched.
        """
        with self._session('delete a game') as session:
            count = (session.query(self._row)
                     .filter(self._row.name == name)
                     .delete(synchronize_session=False))
        self._log.debug("Deleted %d game(s) named %r", count, name)
        return count

    @staticmethod
    def _to_game(row) -> Game:
        return Game(
            id=row.id,
            name=row.name,
            note=Note.from_db(row.note),
            beaten_on=BeatenOn.from_db(row.beaten_on),
        )
