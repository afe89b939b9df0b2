"""Entity types: contacts and the two meeting variants.

A meeting is either a ``FutureMeeting`` or a ``PastMeeting``. The variant is
fixed when the value is created; the registry converts a future meeting by
storing a new ``PastMeeting`` under the same id.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import ClassVar, Literal

from kith.errors import require

MeetingKind = Literal["future", "past"]


@dataclass(eq=False)
class Contact:
    """A person the user deals with.

    Identity is ``(id, name)``; notes are mutable and do not take part in
    equality or hashing.
    """

    id: int
    name: str
    notes: str = ""

    def add_notes(self, notes: str) -> None:
        """Replace the notes (last write wins)."""
        require(notes=notes)
        self.notes = notes

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Contact):
            return NotImplemented
        return self.id == other.id and self.name == other.name

    def __hash__(self) -> int:
        return hash((self.id, self.name))


@dataclass(frozen=True)
class FutureMeeting:
    """A meeting scheduled to take place."""

    kind: ClassVar[MeetingKind] = "future"

    id: int
    date: datetime
    contacts: frozenset[Contact] = field(default_factory=frozenset)

    def to_past(self, notes: str = "") -> PastMeeting:
        return PastMeeting(id=self.id, date=self.date, contacts=self.contacts, notes=notes)


@dataclass(frozen=True)
class PastMeeting:
    """A meeting that took place, with the user's notes about it."""

    kind: ClassVar[MeetingKind] = "past"

    id: int
    date: datetime
    contacts: frozenset[Contact] = field(default_factory=frozenset)
    notes: str = ""

    def with_notes(self, notes: str) -> PastMeeting:
        return replace(self, notes=notes)


Meeting = FutureMeeting | PastMeeting


def instant(when: datetime) -> datetime:
    """Aware datetime for ordering; naive dates are read as local time."""
    return when if when.tzinfo is not None else when.astimezone()
