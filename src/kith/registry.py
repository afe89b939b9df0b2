"""Contact and meeting registry.

The registry owns every contact and meeting, allocates their ids and answers
the chronological queries. It performs no I/O: persistence goes through
``snapshot()`` / ``restore()``.

Ordering: every meeting list is sorted by date, then by meeting id. Naive and
aware dates are ordered as instants, reading naive dates as local time. Meeting
ids are allocated in creation order and survive Future → Past conversion, so
two meetings at the same instant always come out in allocation order.

Every mutating operation validates completely before touching state; a
rejected call leaves the registry (counters included) unchanged.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from datetime import date, datetime

from kith.errors import (
    InvalidArgumentError,
    InvalidStateError,
    SnapshotError,
    require,
)
from kith.models import Contact, FutureMeeting, Meeting, PastMeeting, instant
from kith.snapshot import ContactRecord, MeetingRecord, RegistrySnapshot

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


class Registry:
    """In-memory store of contacts and meetings for a single user."""

    def __init__(self, clock: Clock | None = None) -> None:
        self._clock: Clock = clock or datetime.now
        self._contacts: dict[int, Contact] = {}
        self._meetings: dict[int, Meeting] = {}  # id → meeting, allocation order
        self._last_contact_id = 0
        self._last_meeting_id = 0

    @property
    def next_contact_id(self) -> int:
        return self._last_contact_id + 1

    @property
    def next_meeting_id(self) -> int:
        return self._last_meeting_id + 1

    # ── 1. Contacts ──────────────────────────────────────────

    def create_contact(self, name: str, notes: str = "") -> int:
        """Add a contact and return its id. Ids start at 1 and are never reused."""
        require(name=name, notes=notes)
        if not name:
            raise InvalidArgumentError("Contact name must not be empty")

        self._last_contact_id += 1
        contact = Contact(id=self._last_contact_id, name=name, notes=notes)
        self._contacts[contact.id] = contact
        logger.info("Created contact %d: %s", contact.id, name)
        return contact.id

    def update_contact_notes(self, contact_id: int, notes: str) -> Contact:
        """Replace the notes of an existing contact."""
        require(contact_id=contact_id, notes=notes)
        contact = self._contacts.get(contact_id)
        if contact is None:
            raise InvalidArgumentError(f"Unknown contact id: {contact_id}")
        contact.add_notes(notes)
        return contact

    def contacts(self) -> set[Contact]:
        return set(self._contacts.values())

    def find_contacts_by_ids(self, *ids: int) -> set[Contact]:
        """Return the contacts with the given ids.

        Fails as a whole if any id is non-positive or unknown.
        """
        for contact_id in ids:
            require(contact_id=contact_id)
            valid = isinstance(contact_id, int) and not isinstance(contact_id, bool)
            if not valid or contact_id <= 0 or contact_id not in self._contacts:
                logger.debug("Rejected contact lookup: %r", contact_id)
                raise InvalidArgumentError(f"Unknown contact id: {contact_id}")
        return {self._contacts[contact_id] for contact_id in ids}

    def find_contacts_by_name(self, substring: str) -> set[Contact]:
        """Return contacts whose name contains ``substring`` (case-sensitive).

        The empty string matches no contact.
        """
        require(substring=substring)
        if not substring:
            return set()
        return {c for c in self._contacts.values() if substring in c.name}

    def _is_known(self, contact: object) -> bool:
        return isinstance(contact, Contact) and self._contacts.get(contact.id) == contact

    def _check_contact(self, contact: Contact) -> None:
        require(contact=contact)
        if not self._is_known(contact):
            raise InvalidArgumentError(f"Unknown contact: {contact!r}")

    def _resolve_attendees(self, contacts: Iterable[Contact]) -> frozenset[Contact]:
        """Validate an attendee collection and map it to the registry's own instances."""
        attendees = list(contacts)
        if not attendees:
            raise InvalidArgumentError("A meeting needs at least one contact")
        unknown = [c for c in attendees if not self._is_known(c)]
        if unknown:
            raise InvalidArgumentError(f"Unknown contact(s): {unknown!r}")
        return frozenset(self._contacts[c.id] for c in attendees)

    # ── 2. Meetings ──────────────────────────────────────────

    def schedule_future_meeting(self, contacts: Iterable[Contact], date: datetime) -> int:
        """Schedule a meeting strictly after now and return its id."""
        require(contacts=contacts, date=date)
        attendees = self._resolve_attendees(contacts)
        if not date > self._now(date):
            logger.debug("Rejected future meeting at %s: not in the future", date.isoformat())
            raise InvalidArgumentError(f"Date is not in the future: {date.isoformat()}")

        meeting = FutureMeeting(id=self._allocate_meeting_id(), date=date, contacts=attendees)
        self._meetings[meeting.id] = meeting
        logger.info("Scheduled future meeting %d at %s", meeting.id, date.isoformat())
        return meeting.id

    def record_past_meeting(self, contacts: Iterable[Contact], date: datetime, notes: str) -> int:
        """Record a meeting that took place and return its id.

        The date is not checked against the clock.
        """
        require(contacts=contacts, date=date, notes=notes)
        attendees = self._resolve_attendees(contacts)

        meeting = PastMeeting(
            id=self._allocate_meeting_id(), date=date, contacts=attendees, notes=notes
        )
        self._meetings[meeting.id] = meeting
        logger.info("Recorded past meeting %d at %s", meeting.id, date.isoformat())
        return meeting.id

    def get_meeting(self, meeting_id: int) -> Meeting | None:
        return self._meetings.get(meeting_id)

    def get_past_meeting(self, meeting_id: int) -> PastMeeting | None:
        meeting = self._meetings.get(meeting_id)
        if isinstance(meeting, FutureMeeting):
            raise InvalidArgumentError(f"Meeting {meeting_id} is a future meeting")
        return meeting

    def get_future_meeting(self, meeting_id: int) -> FutureMeeting | None:
        meeting = self._meetings.get(meeting_id)
        if isinstance(meeting, PastMeeting):
            raise InvalidArgumentError(f"Meeting {meeting_id} is a past meeting")
        return meeting

    def meetings(self) -> list[Meeting]:
        return list(self._meetings.values())

    def get_future_meetings_for_contact(self, contact: Contact) -> list[FutureMeeting]:
        self._check_contact(contact)
        return self._sorted(
            m
            for m in self._meetings.values()
            if isinstance(m, FutureMeeting) and contact in m.contacts
        )

    def get_past_meetings_for_contact(self, contact: Contact) -> list[PastMeeting]:
        self._check_contact(contact)
        return self._sorted(
            m
            for m in self._meetings.values()
            if isinstance(m, PastMeeting) and contact in m.contacts
        )

    def get_meetings_on_date(self, day: date | datetime) -> list[Meeting]:
        """Return past and future meetings on the calendar day of ``day``."""
        require(day=day)
        target = day.date() if isinstance(day, datetime) else day
        return self._sorted(m for m in self._meetings.values() if m.date.date() == target)

    def add_meeting_notes(self, meeting_id: int, text: str) -> PastMeeting:
        """Attach notes to a meeting whose date has passed.

        A future meeting is replaced by a past meeting with the same id, date
        and attendees. A past meeting has its notes replaced.
        """
        meeting = self._meetings.get(meeting_id)
        if meeting is None:
            raise InvalidArgumentError(f"Unknown meeting id: {meeting_id}")
        require(text=text)
        if meeting.date > self._now(meeting.date):
            raise InvalidStateError(f"Meeting {meeting_id} has not taken place yet")

        if isinstance(meeting, FutureMeeting):
            updated = meeting.to_past(text)
            logger.info("Converted meeting %d to a past meeting", meeting_id)
        else:
            updated = meeting.with_notes(text)
        self._meetings[meeting_id] = updated
        return updated

    def _allocate_meeting_id(self) -> int:
        self._last_meeting_id += 1
        return self._last_meeting_id

    def _now(self, reference: datetime) -> datetime:
        """Read the clock with the same tz-awareness as ``reference``."""
        now = self._clock()
        if reference.tzinfo is not None and now.tzinfo is None:
            return now.astimezone()
        if reference.tzinfo is None and now.tzinfo is not None:
            return now.astimezone().replace(tzinfo=None)
        return now

    @staticmethod
    def _sorted(meetings: Iterable[Meeting]) -> list:
        return sorted(meetings, key=lambda m: (instant(m.date), m.id))

    # ── 3. Snapshot / restore ────────────────────────────────

    def snapshot(self) -> RegistrySnapshot:
        """Capture the complete state, counters included."""
        contacts = [
            ContactRecord(id=c.id, name=c.name, notes=c.notes)
            for c in sorted(self._contacts.values(), key=lambda c: c.id)
        ]
        meetings = [
            MeetingRecord(
                id=m.id,
                kind=m.kind,
                date=m.date,
                contact_ids=sorted(c.id for c in m.contacts),
                notes=m.notes if isinstance(m, PastMeeting) else None,
            )
            for m in self._meetings.values()
        ]
        return RegistrySnapshot(
            contacts=contacts,
            meetings=meetings,
            last_contact_id=self._last_contact_id,
            last_meeting_id=self._last_meeting_id,
        )

    def restore(self, snapshot: RegistrySnapshot) -> None:
        """Replace the whole state with ``snapshot``.

        Raises SnapshotError if the snapshot is inconsistent; the current
        state is kept in that case.
        """
        require(snapshot=snapshot)
        contacts: dict[int, Contact] = {}
        for rec in snapshot.contacts:
            if rec.id in contacts:
                raise SnapshotError(f"Duplicate contact id {rec.id}")
            if not 0 < rec.id <= snapshot.last_contact_id:
                raise SnapshotError(
                    f"Contact id {rec.id} outside 1..{snapshot.last_contact_id}"
                )
            if not rec.name:
                raise SnapshotError(f"Contact {rec.id} has an empty name")
            contacts[rec.id] = Contact(id=rec.id, name=rec.name, notes=rec.notes)

        meetings: dict[int, Meeting] = {}
        for rec in snapshot.meetings:
            if rec.id in meetings:
                raise SnapshotError(f"Duplicate meeting id {rec.id}")
            if not 0 < rec.id <= snapshot.last_meeting_id:
                raise SnapshotError(
                    f"Meeting id {rec.id} outside 1..{snapshot.last_meeting_id}"
                )
            missing = [cid for cid in rec.contact_ids if cid not in contacts]
            if missing or not rec.contact_ids:
                raise SnapshotError(f"Meeting {rec.id} has unknown or no contacts: {missing}")
            attendees = frozenset(contacts[cid] for cid in rec.contact_ids)
            if rec.kind == FutureMeeting.kind:
                meetings[rec.id] = FutureMeeting(id=rec.id, date=rec.date, contacts=attendees)
            elif rec.kind == PastMeeting.kind:
                meetings[rec.id] = PastMeeting(
                    id=rec.id, date=rec.date, contacts=attendees, notes=rec.notes or ""
                )
            else:
                raise SnapshotError(f"Meeting {rec.id} has unknown kind {rec.kind!r}")

        self._contacts = contacts
        self._meetings = meetings
        self._last_contact_id = snapshot.last_contact_id
        self._last_meeting_id = snapshot.last_meeting_id
        logger.info("Restored %d contacts and %d meetings", len(contacts), len(meetings))

    @classmethod
    def from_snapshot(cls, snapshot: RegistrySnapshot, clock: Clock | None = None) -> Registry:
        registry = cls(clock=clock)
        registry.restore(snapshot)
        return registry
