"""Schemas for user preferences."""
from __future__ import annotations

import re
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.db.models.project import PROJECT_TYPES
from app.services.daily_assignments import WEEKDAY_CODES

_HHMM = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


class PreferencesPayload(BaseModel):
    tasks_per_day: int = Field(3, ge=1, le=20)
    active_days: List[str] = Field(default_factory=lambda: list(WEEKDAY_CODES))
    type_priority_order: List[str] = Field(default_factory=lambda: list(PROJECT_TYPES))
    wake_time: str = "07:00"
    sleep_time: str = "23:00"
    blocking_enabled: bool = False

    @field_validator("active_days")
    @classmethod
    def _check_active_days(cls, value: List[str]) -> List[str]:
        days = list(dict.fromkeys(value))
        if not days:
            raise ValueError("Please select at least one active day")
        unknown = [day for day in days if day not in WEEKDAY_CODES]
        if unknown:
            raise ValueError(f"Unknown weekday codes: {', '.join(unknown)}")
        return days

    @field_validator("type_priority_order")
    @classmethod
    def _check_type_order(cls, value: List[str]) -> List[str]:
        if len(value) != len(PROJECT_TYPES) or set(value) != set(PROJECT_TYPES):
            raise ValueError(f"type_priority_order must order exactly: {', '.join(PROJECT_TYPES)}")
        return value

    @field_validator("wake_time", "sleep_time")
    @classmethod
    def _check_hhmm(cls, value: str) -> str:
        if not _HHMM.match(value):
            raise ValueError("Times must be zero-padded 24h HH:MM")
        return value


class PreferencesUpdateRequest(PreferencesPayload):
    user_id: UUID


class PreferencesResponse(PreferencesPayload):
    model_config = ConfigDict(from_attributes=True)

    user_id: UUID
    updated_at: Optional[datetime] = None
