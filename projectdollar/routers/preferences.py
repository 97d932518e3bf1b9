# projectdollar/routers/preferences.py
"""User preference endpoints (GET and merge-on-PUT)."""

from fastapi import APIRouter, Depends

from projectdollar.dependencies import get_preferences_service
from projectdollar.schemas.preferences import PreferencesResponse, PreferencesUpdate
from projectdollar.services.preferences_service import PreferencesService

router = APIRouter(
    prefix="/preferences",
    tags=["Preferences"],
)


@router.get("", response_model=PreferencesResponse)
def get_preferences(
        service: PreferencesService = Depends(get_preferences_service),
) -> PreferencesResponse:
    return PreferencesResponse(preferences=service.get_preferences())


@router.put("", response_model=PreferencesResponse)
def update_preferences(
        payload: PreferencesUpdate,
        service: PreferencesService = Depends(get_preferences_service),
) -> PreferencesResponse:
    """Keys in the body replace stored keys; other stored keys are kept."""
    return PreferencesResponse(preferences=service.update_preferences(payload.preferences))
