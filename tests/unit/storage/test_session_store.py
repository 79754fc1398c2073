"""Tests for JSON hero session persistence."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from dsa_tracker.core.exceptions import LoadError, SaveError
from dsa_tracker.engine.rng import ScriptedRandomSource
from dsa_tracker.engine.tracker import Tracker
from dsa_tracker.engine.transactions import TransactionKind
from dsa_tracker.models.hero import Hero
from dsa_tracker.storage.session_store import SESSION_FORMAT_VERSION, HeroStore


class TestHeroStore:
    """Tests for saving and loading sessions."""

    def test_save_and_load_hero(self, tmp_path: Path, sample_hero: Hero) -> None:
        """Test a saved hero loads back equal."""
        store = HeroStore(tmp_path / "alrik.json")

        path = store.save(sample_hero)
        hero, log = store.load()

        assert path == tmp_path / "alrik.json"
        assert hero == sample_hero
        assert len(log) == 0

    def test_log_survives_reload(self, tmp_path: Path, sample_hero: Hero) -> None:
        """Test transactions and rolls are restored and still replay."""
        tracker = Tracker(rng=ScriptedRandomSource([2, 5]))
        tracker.apply_damage(sample_hero, "life_points", 6)
        tracker.recover(sample_hero, "life_points", "2d6kh1")
        store = HeroStore(tmp_path / "alrik.json")

        store.save(sample_hero, tracker.history(sample_hero))
        hero, log = store.load()

        assert hero.attribute("life_points") == 7
        assert [entry.kind for entry in log] == [TransactionKind.DAMAGE, TransactionKind.RECOVER]
        recovered = log.entries[1].outcome
        assert recovered is not None
        assert recovered.raw == [[2, 5]]
        assert recovered.selected == [[5]]
        assert log.initial.attribute("life_points") == 8
        assert log.matches(hero)

    def test_file_layout(self, tmp_path: Path, sample_hero: Hero) -> None:
        """Test the file is versioned JSON."""
        store = HeroStore(tmp_path / "alrik.json")
        store.save(sample_hero)

        data = json.loads((tmp_path / "alrik.json").read_text(encoding="utf-8"))

        assert data["version"] == SESSION_FORMAT_VERSION
        assert data["hero"]["name"] == "Alrik"
        assert data["transactions"] == []

    def test_creates_parent_directories(self, tmp_path: Path, sample_hero: Hero) -> None:
        """Test saving into a missing directory creates it."""
        store = HeroStore(tmp_path / "heroes" / "alrik.json")

        store.save(sample_hero)

        assert store.exists()

    def test_no_temp_files_left(self, tmp_path: Path, sample_hero: Hero) -> None:
        """Test the atomic write cleans up after itself."""
        HeroStore(tmp_path / "alrik.json").save(sample_hero)

        assert [p.name for p in tmp_path.iterdir()] == ["alrik.json"]

    def test_missing_file(self, tmp_path: Path) -> None:
        """Test loading a missing file raises LoadError."""
        with pytest.raises(LoadError) as exc_info:
            HeroStore(tmp_path / "nobody.json").load()

        assert exc_info.value.details["path"].endswith("nobody.json")

    def test_invalid_json(self, tmp_path: Path) -> None:
        """Test loading garbage raises LoadError."""
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(LoadError):
            HeroStore(path).load()

    def test_unsupported_version(self, tmp_path: Path, sample_hero: Hero) -> None:
        """Test a future format version is refused."""
        path = tmp_path / "alrik.json"
        HeroStore(path).save(sample_hero)
        data = json.loads(path.read_text(encoding="utf-8"))
        data["version"] = SESSION_FORMAT_VERSION + 1
        path.write_text(json.dumps(data), encoding="utf-8")

        with pytest.raises(LoadError, match="version"):
            HeroStore(path).load()

    def test_tampered_values_detected(self, tmp_path: Path, sample_hero: Hero) -> None:
        """Test a hero that no longer matches its log is refused."""
        tracker = Tracker()
        tracker.apply_damage(sample_hero, "life_points", 2)
        path = tmp_path / "alrik.json"
        HeroStore(path).save(sample_hero, tracker.history(sample_hero))
        data = json.loads(path.read_text(encoding="utf-8"))
        data["hero"]["resources"]["life_points"]["current"] = 20
        path.write_text(json.dumps(data), encoding="utf-8")

        with pytest.raises(LoadError, match="reproduce"):
            HeroStore(path).load()

    def test_save_error(self, tmp_path: Path, sample_hero: Hero) -> None:
        """Test a write into an unusable location raises SaveError."""
        blocker = tmp_path / "file"
        blocker.write_text("", encoding="utf-8")

        with pytest.raises(SaveError):
            HeroStore(blocker / "alrik.json").save(sample_hero)

    def test_xml_saved_as_json(self, tmp_path: Path) -> None:
        """Test an imported export is saved next to it as JSON."""
        store = HeroStore(tmp_path / "alrik.xml")

        assert store.save_path == tmp_path / "alrik.json"

    def test_load_hero(self, tmp_path: Path, sample_hero: Hero) -> None:
        """Test load_hero returns only the hero."""
        store = HeroStore(tmp_path / "alrik.json")
        store.save(sample_hero)

        assert store.load_hero().name == "Alrik"
