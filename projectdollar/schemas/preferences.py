# projectdollar/schemas/preferences.py
"""Pydantic schemas for user preferences (opaque key/value settings)."""

from typing import Any

from pydantic import BaseModel, Field


class PreferencesResponse(BaseModel):
    preferences: dict[str, Any] = Field(default_factory=dict)


class PreferencesUpdate(BaseModel):
    """Keys to set; existing keys not named here are kept."""

    preferences: dict[str, Any] = Field(
        ...,
        examples=[{"theme": "dark", "display_currency": "EUR"}]
    )
