"""kith application core — wires configuration, snapshot store and registry.

Responsibilities:
1. Open the snapshot store under the configured data directory
2. Restore the registry from the last snapshot, if any
3. Flush the registry back to the store on demand
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from kith.config import KithConfig
from kith.registry import Registry
from kith.store import SnapshotStore

logger = logging.getLogger(__name__)


class Kith:
    """Owns one registry and the store it is persisted to."""

    def __init__(self, config: KithConfig, clock: Callable[[], datetime] | None = None) -> None:
        self.config = config
        self.store = SnapshotStore(config.data_dir, keep_versions=config.store.keep_versions)
        self.registry = self._load(clock)

    def _load(self, clock: Callable[[], datetime] | None) -> Registry:
        snapshot = self.store.load()
        if snapshot is None:
            logger.info("No snapshot at %s, starting empty", self.store.path)
            return Registry(clock=clock)
        return Registry.from_snapshot(snapshot, clock=clock)

    def flush(self) -> None:
        """Persist the current registry state."""
        self.store.save(self.registry.snapshot())

    def autosave(self) -> None:
        """Flush if the configuration asks for saving after every change."""
        if self.config.store.autosave:
            self.flush()
