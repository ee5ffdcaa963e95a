"""
Tests for PreferencesStore and the preference models.
"""

import json
import logging
import os

import pytest

from encoding_checker.domains.preferences.models import ScanPreferences, WindowPosition
from encoding_checker.domains.preferences.store import PreferencesStore

logging.disable(logging.CRITICAL)


class TestWindowPosition:

    def test_defaults_are_not_applicable(self):
        assert not WindowPosition().is_valid()

    def test_valid_geometry(self):
        assert WindowPosition(left=0, top=0, width=800, height=600).is_valid()

    @pytest.mark.parametrize(
        "geometry",
        [
            {"left": -1, "top": 0, "width": 800, "height": 600},
            {"left": 0, "top": -1, "width": 800, "height": 600},
            {"left": 0, "top": 0, "width": 0, "height": 600},
            {"left": 0, "top": 0, "width": 800, "height": 0},
        ],
    )
    def test_invalid_geometry(self, geometry):
        assert not WindowPosition(**geometry).is_valid()


class TestPreferencesStore:

    @pytest.mark.asyncio
    async def test_missing_file_gives_defaults(self, tmp_path):
        store = PreferencesStore(str(tmp_path / "prefs.json"), default_file_masks="*.txt")

        preferences = await store.load()

        assert preferences.base_directory == os.getcwd()
        assert preferences.include_subdirectories is True
        assert preferences.file_masks == "*.txt"
        assert not preferences.window_position.is_valid()

    @pytest.mark.asyncio
    async def test_save_then_load(self, tmp_path):
        path = tmp_path / "nested" / "prefs.json"
        store = PreferencesStore(str(path))
        preferences = ScanPreferences(
            base_directory=str(tmp_path),
            include_subdirectories=False,
            file_masks="*.cs\n*.txt",
            window_position=WindowPosition(left=10, top=20, width=640, height=480, maximized=True),
        )

        await store.save(preferences)
        loaded = await PreferencesStore(str(path)).load()

        assert loaded == preferences
        assert not (tmp_path / "nested" / "prefs.json.tmp").exists()

    @pytest.mark.asyncio
    async def test_corrupt_file_gives_defaults(self, tmp_path):
        path = tmp_path / "prefs.json"
        path.write_text("{not json", encoding="utf-8")
        store = PreferencesStore(str(path), default_file_masks="*.md")

        preferences = await store.load()

        assert preferences.file_masks == "*.md"

    @pytest.mark.asyncio
    async def test_invalid_values_give_defaults(self, tmp_path):
        path = tmp_path / "prefs.json"
        path.write_text(json.dumps({"include_subdirectories": "not-a-bool"}), encoding="utf-8")

        preferences = await PreferencesStore(str(path)).load()

        assert preferences.include_subdirectories is True

    @pytest.mark.asyncio
    async def test_current_tracks_last_save(self, tmp_path):
        store = PreferencesStore(str(tmp_path / "prefs.json"))
        assert store.current.file_masks == ""

        updated = ScanPreferences(base_directory=str(tmp_path), file_masks="*.py")
        await store.save(updated)

        assert store.current == updated
