"""Tests for the kith application core."""

from datetime import datetime, timedelta
from pathlib import Path

import pytest

from kith.config import KithConfig, StoreConfig
from kith.core import Kith

NOW = datetime(2026, 10, 19, 12, 0)


@pytest.fixture
def config(tmp_path: Path) -> KithConfig:
    return KithConfig(data_dir=tmp_path / "data")


class TestKith:
    def test_starts_empty(self, config: KithConfig):
        kith = Kith(config)
        assert kith.registry.contacts() == set()
        assert not kith.store.exists()

    def test_flush_then_reload(self, config: KithConfig):
        kith = Kith(config, clock=lambda: NOW)
        kith.registry.create_contact("Alice", "")
        alice = kith.registry.find_contacts_by_ids(1)
        kith.registry.schedule_future_meeting(alice, NOW + timedelta(days=1))
        kith.flush()

        reopened = Kith(config, clock=lambda: NOW)
        assert {c.name for c in reopened.registry.contacts()} == {"Alice"}
        assert reopened.registry.get_future_meeting(1) is not None
        assert reopened.registry.create_contact("Bob", "") == 2

    def test_unflushed_changes_are_lost(self, config: KithConfig):
        kith = Kith(config)
        kith.registry.create_contact("Alice", "")
        assert Kith(config).registry.contacts() == set()

    def test_autosave_enabled(self, config: KithConfig):
        kith = Kith(config)
        kith.registry.create_contact("Alice", "")
        kith.autosave()
        assert kith.store.exists()

    def test_autosave_disabled(self, tmp_path: Path):
        config = KithConfig(data_dir=tmp_path / "data", store=StoreConfig(autosave=False))
        kith = Kith(config)
        kith.registry.create_contact("Alice", "")
        kith.autosave()
        assert not kith.store.exists()

    def test_keep_versions_passed_to_store(self, tmp_path: Path):
        config = KithConfig(data_dir=tmp_path / "data", store=StoreConfig(keep_versions=2))
        kith = Kith(config)
        for i in range(5):
            kith.registry.create_contact(f"c{i}", "")
            kith.flush()
        assert len(kith.store.versions()) == 2
