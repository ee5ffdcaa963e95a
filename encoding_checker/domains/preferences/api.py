import logging

from fastapi import APIRouter, Depends, HTTPException

from encoding_checker.dependencies import get_preferences_store
from encoding_checker.domains.preferences.models import ScanPreferences
from encoding_checker.domains.preferences.store import PreferencesStore

preferences_router = APIRouter(
    prefix="/api/preferences",
    tags=["preferences"],
)


@preferences_router.get("", response_model=ScanPreferences)
async def get_preferences(store: PreferencesStore = Depends(get_preferences_store)) -> ScanPreferences:
    return store.current


@preferences_router.put("", response_model=ScanPreferences)
async def update_preferences(
    preferences: ScanPreferences,
    store: PreferencesStore = Depends(get_preferences_store),
) -> ScanPreferences:
    try:
        await store.save(preferences)
    except OSError as e:
        logging.error(f"API: Could not save preferences: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to save preferences: {str(e)}")
    return preferences
