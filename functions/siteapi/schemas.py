"""
Pydantic schemas for the site API.
"""

import datetime as dt
from typing import Any, ClassVar, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Envelope(BaseModel):
    """Standard response shape shared by every endpoint."""

    success: bool
    data: Any = None
    error: Optional[str] = None
    message: Optional[str] = None
    count: Optional[int] = None

    @classmethod
    def ok(cls, data: Any = None, **extra: Any) -> "Envelope":
        return cls(success=True, data=data, **extra)


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SessionRegisterRequest(CamelModel):
    user_id: str = Field(..., min_length=1, max_length=255)
    utm_source: Optional[str] = None
    utm_medium: Optional[str] = None
    utm_campaign: Optional[str] = None
    utm_content: Optional[str] = None
    utm_term: Optional[str] = None
    referrer: Optional[str] = None
    device_type: Optional[str] = None
    user_agent: Optional[str] = None


class BookingRequest(CamelModel):
    validation_message: ClassVar[str] = "Name, email, date, and time are required"

    name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3)
    date: dt.date
    time: str = Field(..., min_length=1)
    appointment_type: Optional[str] = None
    gender: Optional[str] = None
    session_id: Optional[int] = None


class MobFields(BaseModel):
    breed_name: Optional[str] = None
    status_name: Optional[str] = None
    zone_name: Optional[str] = None
    team_name: Optional[str] = None
    current_stage: Optional[str] = None
    current_location: Optional[str] = None
    ewes_joined: Optional[int] = Field(default=None, ge=0)
    rams_in: Optional[int] = Field(default=None, ge=0)
    joining_date: Optional[dt.date] = None
    expected_lambing: Optional[dt.date] = None
    dry_off_date: Optional[dt.date] = None
    lamb_marking_date: Optional[dt.date] = None
    weaning_date: Optional[dt.date] = None
    scanning_percent: Optional[float] = None
    marking_percent: Optional[float] = None
    weaning_percent: Optional[float] = None


class MobCreateRequest(MobFields):
    mob_name: str = Field(..., min_length=1)


class MobUpdateRequest(MobFields):
    mob_name: Optional[str] = Field(default=None, min_length=1)
    is_active: Optional[bool] = None


class BreedingEventRequest(BaseModel):
    mob_id: int
    event_type: str = Field(..., min_length=1)
    event_date: dt.date
    event_time: Optional[str] = None
    event_data: Optional[dict] = None
    notes: Optional[str] = None
    recorded_by: Optional[str] = None


class HealthResponse(BaseModel):
    status: str
    service: str
    version: str
    timestamp: dt.datetime


class ServiceInfoResponse(BaseModel):
    message: str
    version: str
    timestamp: dt.datetime
    endpoints: list[str]
