"""kith — personal contact and meeting record keeper.

Layout:
    ~/.kith/
    ├── kith.toml                      # Optional configuration
    └── data/
        ├── registry.md                # Snapshot: YAML frontmatter + readable manifest
        └── .versions/                 # Timestamped backups of registry.md
"""

from kith.errors import (
    InvalidArgumentError,
    InvalidStateError,
    KithError,
    MissingArgumentError,
    SnapshotError,
)
from kith.models import Contact, FutureMeeting, Meeting, PastMeeting
from kith.registry import Registry
from kith.snapshot import RegistrySnapshot

__all__ = [
    "Contact",
    "FutureMeeting",
    "InvalidArgumentError",
    "InvalidStateError",
    "KithError",
    "Meeting",
    "MissingArgumentError",
    "PastMeeting",
    "Registry",
    "RegistrySnapshot",
    "SnapshotError",
]
