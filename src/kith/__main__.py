"""Entry point: python -m kith <command> [args]

Contacts:
- add-contact NAME [NOTES]               Create a contact, print its id
- note-contact ID NOTES                  Replace a contact's notes
- contacts [ID ...]                      List all contacts, or the given ids
- find NAME                              Contacts whose name contains NAME

Meetings:
- schedule WHEN ID [ID ...]              Schedule a future meeting, print its id
- record WHEN NOTES ID [ID ...]          Record a past meeting, print its id
- meeting ID                             Show one meeting
- future CONTACT_ID                      Future meetings with a contact
- past CONTACT_ID                        Past meetings with a contact
- on DAY                                 All meetings on a calendar day
- notes MEETING_ID TEXT                  Add notes (a due future meeting becomes past)

WHEN and DAY are ISO-8601 (2026-10-19T14:30, 2026-10-19).
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Callable
from datetime import datetime

from kith.config import load_config
from kith.core import Kith
from kith.errors import InvalidArgumentError, KithError
from kith.models import Contact, Meeting, PastMeeting

logger = logging.getLogger(__name__)


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


# ── Argument parsing ─────────────────────────────────────────


def _parse_id(text: str) -> int:
    try:
        return int(text)
    except ValueError:
        raise InvalidArgumentError(f"Not an id: {text!r}") from None


def _parse_when(text: str) -> datetime:
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        raise InvalidArgumentError(f"Not an ISO-8601 date: {text!r}") from None


# ── Output ───────────────────────────────────────────────────


def _format_contact(contact: Contact) -> str:
    line = f"{contact.id}\t{contact.name}"
    if contact.notes:
        line += f"\t{contact.notes}"
    return line


def _format_meeting(meeting: Meeting) -> str:
    who = ", ".join(c.name for c in sorted(meeting.contacts, key=lambda c: c.id))
    line = f"{meeting.id}\t{meeting.kind}\t{meeting.date.isoformat(timespec='minutes')}\t{who}"
    if isinstance(meeting, PastMeeting) and meeting.notes:
        line += f"\t{meeting.notes}"
    return line


def _print_contacts(contacts: set[Contact]) -> None:
    for contact in sorted(contacts, key=lambda c: c.id):
        print(_format_contact(contact))


def _print_meetings(meetings: list) -> None:
    for meeting in meetings:
        print(_format_meeting(meeting))


# ── Commands ─────────────────────────────────────────────────


def _cmd_add_contact(kith: Kith, args: list[str]) -> None:
    notes = args[1] if len(args) > 1 else ""
    print(kith.registry.create_contact(args[0], notes))


def _cmd_note_contact(kith: Kith, args: list[str]) -> None:
    kith.registry.update_contact_notes(_parse_id(args[0]), args[1])


def _cmd_contacts(kith: Kith, args: list[str]) -> None:
    if args:
        _print_contacts(kith.registry.find_contacts_by_ids(*(_parse_id(a) for a in args)))
    else:
        _print_contacts(kith.registry.contacts())


def _cmd_find(kith: Kith, args: list[str]) -> None:
    _print_contacts(kith.registry.find_contacts_by_name(args[0]))


def _cmd_schedule(kith: Kith, args: list[str]) -> None:
    when = _parse_when(args[0])
    contacts = kith.registry.find_contacts_by_ids(*(_parse_id(a) for a in args[1:]))
    print(kith.registry.schedule_future_meeting(contacts, when))


def _cmd_record(kith: Kith, args: list[str]) -> None:
    when = _parse_when(args[0])
    contacts = kith.registry.find_contacts_by_ids(*(_parse_id(a) for a in args[2:]))
    print(kith.registry.record_past_meeting(contacts, when, args[1]))


def _cmd_meeting(kith: Kith, args: list[str]) -> None:
    meeting = kith.registry.get_meeting(_parse_id(args[0]))
    if meeting is None:
        raise InvalidArgumentError(f"No meeting with id {args[0]}")
    print(_format_meeting(meeting))


def _contact_arg(kith: Kith, text: str) -> Contact:
    (contact,) = kith.registry.find_contacts_by_ids(_parse_id(text))
    return contact


def _cmd_future(kith: Kith, args: list[str]) -> None:
    contact = _contact_arg(kith, args[0])
    _print_meetings(kith.registry.get_future_meetings_for_contact(contact))


def _cmd_past(kith: Kith, args: list[str]) -> None:
    contact = _contact_arg(kith, args[0])
    _print_meetings(kith.registry.get_past_meetings_for_contact(contact))


def _cmd_on(kith: Kith, args: list[str]) -> None:
    _print_meetings(kith.registry.get_meetings_on_date(_parse_when(args[0])))


def _cmd_notes(kith: Kith, args: list[str]) -> None:
    kith.registry.add_meeting_notes(_parse_id(args[0]), args[1])


# name → (handler, min args, max args or None, mutates)
COMMANDS: dict[str, tuple[Callable[[Kith, list[str]], None], int, int | None, bool]] = {
    "add-contact": (_cmd_add_contact, 1, 2, True),
    "note-contact": (_cmd_note_contact, 2, 2, True),
    "contacts": (_cmd_contacts, 0, None, False),
    "find": (_cmd_find, 1, 1, False),
    "schedule": (_cmd_schedule, 2, None, True),
    "record": (_cmd_record, 3, None, True),
    "meeting": (_cmd_meeting, 1, 1, False),
    "future": (_cmd_future, 1, 1, False),
    "past": (_cmd_past, 1, 1, False),
    "on": (_cmd_on, 1, 1, False),
    "notes": (_cmd_notes, 2, 2, True),
}


def _usage() -> None:
    print("Usage: python -m kith <command> [args]")
    print(f"  commands: {', '.join(COMMANDS)}")


def main(argv: list[str] | None = None) -> None:
    argv = sys.argv[1:] if argv is None else argv
    if not argv or argv[0] not in COMMANDS:
        _usage()
        sys.exit(1)

    cmd, args = argv[0], argv[1:]
    handler, min_args, max_args, mutates = COMMANDS[cmd]
    if len(args) < min_args or (max_args is not None and len(args) > max_args):
        _usage()
        sys.exit(1)

    config = load_config()
    _setup_logging(config.log_level)

    try:
        kith = Kith(config)
        handler(kith, args)
        if mutates:
            kith.autosave()
    except KithError as e:
        logger.debug("Command %s failed", cmd, exc_info=True)
        print(f"error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
