"""Domain records: the ``Game`` entity and its optional fields.

``Nullable`` keeps "never set" apart from "set to an empty value".  An absent
note is stored as SQL ``NULL``; a blank note is stored as ``''``.  The two must
survive a round-trip through the database unchanged.
"""
import datetime
from typing import Any, Optional


class AbsentValueError(RuntimeError):
    """Raised when :meth:`Nullable.unwrap` is called on an absent value."""


class Nullable:
    """An optional value with an explicit presence flag."""

    __slots__ = ('_value', '_present')

    def __init__(self, value: Any = None, present: bool = False) -> None:
        if present and value is None:
            raise ValueError("A present value cannot be None")
        self._present = bool(present)
        self._value = self._coerce(value) if present else None

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    @classmethod
    def wrap(cls, value: Any, present: bool) -> 'Nullable':
        return cls(value, present)

    @classmethod
    def of(cls, value: Any) -> 'Nullable':
        return cls(value, True)

    @classmethod
    def absent(cls) -> 'Nullable':
        return cls()

    @classmethod
    def from_db(cls, value: Any) -> 'Nullable':
        """Build a wrapper from a column value, ``NULL`` meaning absent."""
        if value is None:
            return cls.absent()
        return cls.of(value)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    def is_present(self) -> bool:
        return self._present

    def unwrap(self) -> Any:
        """Return the wrapped value.

        Raises:
            AbsentValueError: The value is absent.  Callers must check
                :meth:`is_present` first.
        """
        if not self._present:
            raise AbsentValueError(f"{type(self).__name__} is absent")
        return self._value

    def unwrap_or(self, default: Any) -> Any:
        return self._value if self._present else default

    def to_db(self) -> Any:
        """Return the column value to store, ``None`` when absent."""
        return self._value if self._present else None

    def _coerce(self, value: Any) -> Any:
        return value

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Nullable):
            return NotImplemented
        return type(self) is type(other) and \
            (self._present, self._value) == (other._present, other._value)

    def __hash__(self) -> int:
        return hash((type(self).__name__, self._present, self._value))

    def __repr__(self) -> str:
        if not self._present:
            return f"{type(self).__name__}(absent)"
        return f"{type(self).__name__}({self._value!r})"


class Note(Nullable):
    """Optional free-text note."""

    __slots__ = ()

    def _coerce(self, value: Any) -> str:
        if not isinstance(value, str):
            raise TypeError(f"Note must be text, got {type(value).__name__}")
        return value


class BeatenOn(Nullable):
    """Optional completion date, day granularity."""

    __slots__ = ()

    def _coerce(self, value: Any) -> datetime.date:
        # datetime is a subclass of date; keep only the calendar day.
        if isinstance(value, datetime.datetime):
            return value.date()
        if not isinstance(value, datetime.date):
            raise TypeError(f"BeatenOn must be a date, got {type(value).__name__}")
        return value


class Game:
    """A beaten game.

    ``id`` is ``None`` until the repository inserts the record; after that it
    never changes.
    """

    __slots__ = ('id', 'name', 'note', 'beaten_on')

    def __init__(self, name: str, note: Optional[Note] = None,
                 beaten_on: Optional[BeatenOn] = None,
                 id: Optional[int] = None) -> None:
        self.id = id
        self.name = name
        self.note = note if note is not None else Note.absent()
        self.beaten_on = beaten_on if beaten_on is not None else BeatenOn.absent()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Game):
            return NotImplemented
        return (self.id, self.name, self.note, self.beaten_on) == \
            (other.id, other.name, other.note, other.beaten_on)

    def __repr__(self) -> str:
        return (f"Game(id={self.id!r}, name={self.name!r}, "
                f"note={self.note!r}, beaten_on={self.beaten_on!r})")
