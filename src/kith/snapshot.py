"""Explicit snapshot of registry state.

The snapshot is decoupled from the in-memory entity types: contacts and
meetings are plain records, attendees are referenced by contact id and dates
are ISO-8601 strings. ``to_dict`` output only contains str, int, list and
dict values, so any structured encoder can persist it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from kith.errors import SnapshotError

SNAPSHOT_VERSION = 1


@dataclass
class ContactRecord:
    id: int
    name: str
    notes: str = ""


@dataclass
class MeetingRecord:
    id: int
    kind: str
    date: datetime
    contact_ids: list[int] = field(default_factory=list)
    notes: str | None = None


@dataclass
class RegistrySnapshot:
    """Complete registry state: contacts, meetings in allocation order, counters."""

    contacts: list[ContactRecord] = field(default_factory=list)
    meetings: list[MeetingRecord] = field(default_factory=list)
    last_contact_id: int = 0
    last_meeting_id: int = 0
    version: int = SNAPSHOT_VERSION

    def to_dict(self) -> dict[str, Any]:
        meetings = []
        for m in self.meetings:
            entry: dict[str, Any] = {
                "id": m.id,
                "kind": m.kind,
                "date": m.date.isoformat(),
                "contacts": list(m.contact_ids),
            }
            if m.notes is not None:
                entry["notes"] = m.notes
            meetings.append(entry)
        return {
            "version": self.version,
            "last_contact_id": self.last_contact_id,
            "last_meeting_id": self.last_meeting_id,
            "contacts": [{"id": c.id, "name": c.name, "notes": c.notes} for c in self.contacts],
            "meetings": meetings,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RegistrySnapshot:
        """Decode the structure produced by ``to_dict``.

        Raises SnapshotError on a missing key, a wrong type or an unsupported
        version. Cross-references are checked later by ``Registry.restore``.
        """
        if not isinstance(data, dict):
            raise SnapshotError(f"Snapshot must be a mapping, got {type(data).__name__}")
        version = data.get("version", SNAPSHOT_VERSION)
        if version != SNAPSHOT_VERSION:
            raise SnapshotError(f"Unsupported snapshot version: {version!r}")
        try:
            contacts = [
                ContactRecord(
                    id=_as_int(c["id"]),
                    name=str(c["name"]),
                    notes=str(c.get("notes") or ""),
                )
                for c in data.get("contacts") or []
            ]
            meetings = [
                MeetingRecord(
                    id=_as_int(m["id"]),
                    kind=str(m["kind"]),
                    date=_as_datetime(m["date"]),
                    contact_ids=[_as_int(cid) for cid in m.get("contacts") or []],
                    notes=None if m.get("notes") is None else str(m["notes"]),
                )
                for m in data.get("meetings") or []
            ]
            return cls(
                contacts=contacts,
                meetings=meetings,
                last_contact_id=_as_int(data.get("last_contact_id", 0)),
                last_meeting_id=_as_int(data.get("last_meeting_id", 0)),
                version=version,
            )
        except (KeyError, TypeError, ValueError) as e:
            raise SnapshotError(f"Malformed snapshot: {e}") from e


def _as_int(value: Any) -> int:
    # bool is an int subclass; a YAML "yes" must not become id 1
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"expected an integer, got {value!r}")
    return value


def _as_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str):
        raise TypeError(f"expected an ISO-8601 string, got {value!r}")
    return datetime.fromisoformat(value)
