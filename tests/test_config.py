"""Tests für Konfiguration (Schema, Manager, Defaults)."""

from pathlib import Path

import pytest

from config.schema import (
    AuthConfig,
    MapConfig,
    NavigatorConfig,
    StorageConfig,
    hash_password,
)
from config.defaults import default_config, demo_dataset
from config.manager import ADMINS_ENV_VAR, ConfigManager


# ─── SCHEMA ───────────────────────────────────────────────────────────────────

class TestSchema:
    def test_default_config_valid(self):
        """Default-Config lässt sich ohne Fehler erstellen."""
        config = default_config()
        assert config.school_name == "Muster-Schule"
        assert config.storage.dataset_key == "school_navigator_v1"
        assert config.storage.role_key == "sn_role"
        assert config.storage.user_key == "sn_user"
        assert config.map.default_floor_id == "1"

    def test_default_password_hash(self):
        """Default-Hash entspricht dem Demo-Passwort."""
        auth = AuthConfig()
        assert auth.admin_password_sha256 == hash_password("admin123")
        assert len(auth.admin_password_sha256) == 64

    def test_storage_keys_must_differ(self):
        """Gleiche Speicher-Schlüssel sind ungültig."""
        with pytest.raises(ValueError):
            StorageConfig(dataset_key="x", role_key="x")

    def test_zoom_bounds(self):
        """zoom_min > zoom_max ist ungültig."""
        with pytest.raises(ValueError):
            MapConfig(zoom_min=4.0, zoom_max=2.0)

    def test_identity_configured(self):
        assert not AuthConfig().identity_configured
        assert not AuthConfig(identity_client_id="REPLACE_WITH_CLIENT_ID").identity_configured
        assert AuthConfig(identity_client_id="1234.apps.example.com").identity_configured


# ─── MANAGER ──────────────────────────────────────────────────────────────────

class TestConfigManager:
    def test_missing_file_gives_defaults(self, tmp_path: Path):
        """Ohne Datei gelten die Defaults."""
        mgr = ConfigManager(tmp_path / "navigator.yaml")
        assert mgr.first_run_check()
        assert mgr.load() == default_config()

    def test_save_and_load(self, tmp_path: Path):
        """Config speichern und wieder laden ergibt identisches Objekt."""
        path = tmp_path / "navigator.yaml"
        mgr = ConfigManager(path)
        config = NavigatorConfig(
            school_name="Test-Schule",
            storage=StorageConfig(directory=str(tmp_path / "store")),
            auth=AuthConfig(admin_emails=["chef@test.de"], identity_client_id="abc"),
            map=MapConfig(default_floor_id="2", grid_width=40),
        )
        mgr.save(config)
        assert path.exists()
        assert not mgr.first_run_check()
        assert mgr.load() == config

    def test_yaml_has_german_comments(self, tmp_path: Path):
        path = tmp_path / "navigator.yaml"
        ConfigManager(path).save(default_config())
        text = path.read_text(encoding="utf-8")
        assert "Schul-Navigator" in text
        assert "Lokaler Speicher" in text

    def test_invalid_file_raises(self, tmp_path: Path):
        """Ungültige Werte → ValueError mit Dateipfad."""
        path = tmp_path / "navigator.yaml"
        path.write_text("map:\n  zoom_min: 5\n  zoom_max: 1\n", encoding="utf-8")
        with pytest.raises(ValueError, match="ungültig"):
            ConfigManager(path).load()

    def test_env_overrides_admins(self, tmp_path: Path, monkeypatch):
        """Umgebungsvariable ersetzt die Admin-Allowlist."""
        monkeypatch.setenv(ADMINS_ENV_VAR, "a@x.de, b@x.de,")
        config = ConfigManager(tmp_path / "missing.yaml").load()
        assert config.auth.admin_emails == ["a@x.de", "b@x.de"]


# ─── DEMO-DATEN ───────────────────────────────────────────────────────────────

class TestDemoDataset:
    def test_demo_dataset_shape(self):
        d = demo_dataset()
        assert [f.id for f in d.floors] == ["1", "2"]
        assert [r.id for r in d.rooms] == ["A101", "A102", "B201"]
        assert all(r.is_placed for r in d.rooms)
        assert {s.day for s in d.schedule} == {"Mon"}

    def test_demo_dataset_fresh_copy(self):
        """Jeder Aufruf liefert ein neues Objekt."""
        a = demo_dataset()
        a.rooms.clear()
        assert len(demo_dataset().rooms) == 3
