"""Legajos - Seed Script Tests"""

import pytest

from scripts.seed_data import SAMPLE_SOURCES, admin_from_env


@pytest.mark.unit
class TestSeedConfiguration:
    def test_defaults(self, monkeypatch):
        for name in ("EMAIL", "PASSWORD", "FIRST_NAME", "LAST_NAME"):
            monkeypatch.delenv(f"SEED_ADMIN_{name}", raising=False)
        admin = admin_from_env()
        assert admin["email"] == "admin@example.com"
        assert len(admin["password"]) >= 8

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("SEED_ADMIN_EMAIL", "  Jefa@Fiscalia.gob.ar ")
        monkeypatch.setenv("SEED_ADMIN_PASSWORD", "muysecreta1")
        admin = admin_from_env()
        assert admin["email"] == "jefa@fiscalia.gob.ar"
        assert admin["password"] == "muysecreta1"

    def test_sample_sources_have_names_and_kinds(self):
        assert all(s["name"] and s["kind"] for s in SAMPLE_SOURCES)
