import json
import logging
from pathlib import Path
from typing import Optional

import aiofiles
import aiofiles.os
from pydantic import ValidationError

from encoding_checker.domains.preferences.models import ScanPreferences


class PreferencesStore:
    """
    JSON file persistence for ScanPreferences.

    load() never fails: a missing file yields defaults, a corrupt one yields
    defaults and a warning. save() writes to a temporary file first and
    replaces the target, so a crash mid-write never leaves a truncated file.
    """

    def __init__(self, file_path: str, default_file_masks: str = ""):
        self._file_path = Path(file_path)
        self._default_file_masks = default_file_masks
        self._current: Optional[ScanPreferences] = None

    @property
    def file_path(self) -> Path:
        return self._file_path

    @property
    def current(self) -> ScanPreferences:
        """Last loaded or saved preferences (defaults before the first load)."""
        if self._current is None:
            self._current = self._defaults()
        return self._current

    def _defaults(self) -> ScanPreferences:
        return ScanPreferences(file_masks=self._default_file_masks)

    async def load(self) -> ScanPreferences:
        if not await aiofiles.os.path.exists(self._file_path):
            logging.info(f"No preferences file at {self._file_path}, using defaults")
            self._current = self._defaults()
            return self._current

        try:
            async with aiofiles.open(self._file_path, "r", encoding="utf-8") as f:
                content = await f.read()
            self._current = ScanPreferences.model_validate(json.loads(content))
            logging.info(f"Preferences loaded from {self._file_path}")
        except (OSError, ValueError, ValidationError) as e:
            logging.warning(f"Could not read preferences from {self._file_path}, using defaults: {e}")
            self._current = self._defaults()

        return self._current

    async def save(self, preferences: ScanPreferences) -> None:
        """Persist preferences. OSError propagates to the caller."""
        await aiofiles.os.makedirs(self._file_path.parent, exist_ok=True)

        temp_path = self._file_path.with_name(f"{self._file_path.name}.tmp")
        async with aiofiles.open(temp_path, "w", encoding="utf-8") as f:
            await f.write(preferences.model_dump_json(indent=2))
        await aiofiles.os.replace(temp_path, self._file_path)

        self._current = preferences
        logging.debug(f"Preferences saved to {self._file_path}")
