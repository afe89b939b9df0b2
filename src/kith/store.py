"""Snapshot store — persists registry snapshots as a markdown file.

The file is the source of truth between runs. YAML frontmatter carries the
structured snapshot; the body is a readable manifest of contacts and meetings
that is regenerated on every save and ignored on load.

Layout:
    <root>/
    ├── registry.md
    └── .versions/
        └── registry-20261019T101500.md   # Backups (keep_versions most recent)
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

import frontmatter
import yaml

from kith.errors import SnapshotError
from kith.models import instant
from kith.snapshot import RegistrySnapshot

logger = logging.getLogger(__name__)

SNAPSHOT_FILENAME = "registry.md"


class SnapshotStore:
    """Read/write access to the registry snapshot file."""

    def __init__(self, root: Path, keep_versions: int = 10) -> None:
        self.root = root
        self.keep_versions = keep_versions
        self._ensure_initialized()

    def _ensure_initialized(self) -> None:
        """Ensure the data and backup directories exist. Idempotent."""
        (self.root / ".versions").mkdir(parents=True, exist_ok=True)

    @property
    def path(self) -> Path:
        return self.root / SNAPSHOT_FILENAME

    def exists(self) -> bool:
        return self.path.exists()

    # ── Load / save ──────────────────────────────────────────

    def load(self) -> RegistrySnapshot | None:
        """Read the snapshot file. Returns None if there is none yet."""
        if not self.path.exists():
            return None
        try:
            post = frontmatter.load(str(self.path))
        except (yaml.YAMLError, UnicodeDecodeError) as e:
            raise SnapshotError(f"Cannot parse {self.path}: {e}") from e
        if not post.metadata:
            raise SnapshotError(f"{self.path} has no snapshot frontmatter")
        snapshot = RegistrySnapshot.from_dict(dict(post.metadata))
        logger.info(
            "Loaded snapshot from %s (%d contacts, %d meetings)",
            self.path,
            len(snapshot.contacts),
            len(snapshot.meetings),
        )
        return snapshot

    def save(self, snapshot: RegistrySnapshot) -> Path:
        """Write the snapshot, backing up the previous file first. Returns the path."""
        self._ensure_initialized()
        self._backup(self.path)
        post = frontmatter.Post(_render_manifest(snapshot), **snapshot.to_dict())
        tmp = self.path.with_name(f".{self.path.name}.tmp")
        tmp.write_text(frontmatter.dumps(post, sort_keys=False) + "\n", encoding="utf-8")
        tmp.replace(self.path)
        logger.info(
            "Saved snapshot to %s (%d contacts, %d meetings)",
            self.path,
            len(snapshot.contacts),
            len(snapshot.meetings),
        )
        return self.path

    # ── Versions ─────────────────────────────────────────────

    def _backup(self, path: Path) -> None:
        """Backup to .versions/, keep at most keep_versions copies."""
        if not path.exists():
            return
        versions_dir = self.root / ".versions"
        versions_dir.mkdir(exist_ok=True)
        ts = datetime.now().strftime("%Y%m%dT%H%M%S%f")
        (versions_dir / f"{path.stem}-{ts}.md").write_text(
            path.read_text(encoding="utf-8"), encoding="utf-8"
        )
        self.cleanup_old_versions(self.keep_versions)

    def versions(self) -> list[Path]:
        """Backup files, oldest first."""
        return sorted((self.root / ".versions").glob(f"{self.path.stem}-*.md"))

    def cleanup_old_versions(self, keep: int) -> int:
        """Keep only the most recent `keep` backups. Returns count removed."""
        old = self.versions()
        stale = old[:-keep] if keep > 0 else old
        for path in stale:
            path.unlink()
        if stale:
            logger.debug("Pruned %d old snapshot versions", len(stale))
        return len(stale)


def _render_manifest(snapshot: RegistrySnapshot) -> str:
    """Readable summary tables of the snapshot contents."""
    names = {c.id: c.name for c in snapshot.contacts}

    body = "# Contacts\n\n"
    if snapshot.contacts:
        body += "| ID | Name | Notes |\n|----|------|-------|\n"
        for c in snapshot.contacts:
            body += f"| {c.id} | {_cell(c.name)} | {_cell(c.notes)} |\n"
    else:
        body += "(none)\n"

    body += "\n# Meetings\n\n"
    if snapshot.meetings:
        body += "| ID | Kind | Date | Contacts | Notes |\n|----|------|------|----------|-------|\n"
        for m in sorted(snapshot.meetings, key=lambda m: (instant(m.date), m.id)):
            who = ", ".join(_cell(names.get(cid, f"#{cid}")) for cid in m.contact_ids)
            body += (
                f"| {m.id} | {m.kind} | {m.date.isoformat(timespec='minutes')} "
                f"| {who} | {_cell(m.notes or '')} |\n"
            )
    else:
        body += "(none)\n"
    return body


def _cell(text: str) -> str:
    return text.replace("|", "\\|").replace("\n", " ")
