"""
HTTP routes for the site API.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Query

from siteapi.config import get_settings
from siteapi.db import (
    ANALYTICS_GROUPS,
    BookingDraft,
    BreedingEventDraft,
    DbClient,
    SessionRegistration,
)
from siteapi.dependencies import get_db_client
from siteapi.errors import ApiError, server_error
from siteapi.schemas import (
    BookingRequest,
    BreedingEventRequest,
    Envelope,
    HealthResponse,
    MobCreateRequest,
    MobUpdateRequest,
    ServiceInfoResponse,
    SessionRegisterRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()

ENDPOINTS = [
    "/health",
    "/sessions/register",
    "/create-booking",
    "/analytics/bookings",
    "/mobs",
    "/breeding-events",
    "/farm-statistics",
]
ANALYTICS_DEFAULT_DAYS = 30
NON_NULLABLE_MOB_FIELDS = ("mob_name", "current_stage", "is_active")

envelope_route = dict(response_model=Envelope, response_model_exclude_unset=True)


@router.get("/", response_model=ServiceInfoResponse)
def service_info():
    settings = get_settings()
    return ServiceInfoResponse(
        message=f"{settings.service_name} API",
        version=settings.service_version,
        timestamp=datetime.now(timezone.utc),
        endpoints=ENDPOINTS,
    )


@router.get("/health", response_model=HealthResponse)
def health():
    settings = get_settings()
    return HealthResponse(
        status="healthy",
        service=settings.service_name,
        version=settings.service_version,
        timestamp=datetime.now(timezone.utc),
    )


@router.post("/sessions/register", status_code=201, **envelope_route)
def register_session(
    payload: SessionRegisterRequest, db: DbClient = Depends(get_db_client)
):
    """
    Create the visitor's session row, or bump its page count on re-entry.
    """
    with server_error("Failed to register session"):
        record = db.register_session(SessionRegistration(**payload.model_dump()))
    logger.info(
        "Registered session user_id=%s page_count=%d", record.user_id, record.page_count
    )
    return Envelope.ok(
        {
            "sessionId": record.id,
            "userId": record.user_id,
            "pageCount": record.page_count,
            "createdAt": record.created_at,
            "updatedAt": record.updated_at,
        }
    )


@router.get("/sessions/{user_id}", **envelope_route)
def get_session(user_id: str, db: DbClient = Depends(get_db_client)):
    with server_error("Failed to fetch session"):
        record = db.get_session(user_id)
    if not record:
        raise ApiError(404, "Session not found")
    return Envelope.ok(record.as_dict())


@router.post("/create-booking", status_code=201, **envelope_route)
def create_booking(payload: BookingRequest, db: DbClient = Depends(get_db_client)):
    draft = BookingDraft(
        name=payload.name,
        email=payload.email,
        date=payload.date,
        time=payload.time,
        appointment_type=payload.appointment_type,
        gender=payload.gender,
        user_session_id=payload.session_id,
    )
    with server_error("Failed to create booking"):
        record = db.create_booking(draft)
    logger.info("Created booking %s for %s", record.reference, record.date)
    return Envelope.ok(record.as_dict(), message="Booking created successfully")


@router.get("/analytics/bookings", **envelope_route)
def booking_analytics(
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    group_by: str = Query("utm_source", alias="groupBy"),
    db: DbClient = Depends(get_db_client),
):
    if group_by not in ANALYTICS_GROUPS:
        raise ApiError(400, "Invalid groupBy parameter")
    today = datetime.now(timezone.utc).date()
    end = end_date or today
    start = start_date or today - timedelta(days=ANALYTICS_DEFAULT_DAYS)
    with server_error("Failed to fetch analytics"):
        rows = db.booking_analytics(start, end, group_by)
    return Envelope.ok(
        {
            "period": {"startDate": start, "endDate": end},
            "groupBy": group_by,
            "rows": rows,
            "totalSessions": sum(r["sessions"] for r in rows),
            "totalBookings": sum(r["bookings"] for r in rows),
        },
        count=len(rows),
    )


@router.get("/mobs", **envelope_route)
def list_mobs(
    stage: Optional[str] = Query(None), db: DbClient = Depends(get_db_client)
):
    with server_error("Failed to fetch mobs"):
        mobs = db.list_mobs(stage=stage)
    return Envelope.ok([m.as_dict() for m in mobs], count=len(mobs))


@router.post("/mobs", status_code=201, **envelope_route)
def create_mob(payload: MobCreateRequest, db: DbClient = Depends(get_db_client)):
    with server_error("Failed to create mob"):
        mob = db.create_mob(payload.model_dump())
    logger.info("Created mob %d (%s)", mob.mob_id, mob.mob_name)
    return Envelope.ok(mob.as_dict(), message="Mob created successfully")


@router.get("/mobs/{mob_id}", **envelope_route)
def get_mob(mob_id: int, db: DbClient = Depends(get_db_client)):
    with server_error("Failed to fetch mob"):
        mob = db.get_mob(mob_id)
    if not mob:
        raise ApiError(404, "Mob not found")
    return Envelope.ok(mob.as_dict())


@router.api_route("/mobs/{mob_id}", methods=["PUT", "PATCH"], **envelope_route)
def update_mob(
    mob_id: int, payload: MobUpdateRequest, db: DbClient = Depends(get_db_client)
):
    updates = {
        key: value
        for key, value in payload.model_dump(exclude_unset=True).items()
        if value is not None or key not in NON_NULLABLE_MOB_FIELDS
    }
    if not updates:
        raise ApiError(400, "No valid fields to update")
    with server_error("Failed to update mob"):
        mob = db.update_mob(mob_id, updates)
    if not mob:
        raise ApiError(404, "Mob not found")
    logger.info("Updated mob %d fields=%s", mob_id, sorted(updates))
    return Envelope.ok(mob.as_dict(), message="Mob updated successfully")


@router.get("/mobs/{mob_id}/history", **envelope_route)
def get_mob_history(
    mob_id: int,
    limit: int = Query(10, ge=1, le=100),
    db: DbClient = Depends(get_db_client),
):
    with server_error("Failed to fetch mob history"):
        events = db.get_mob_history(mob_id, limit=limit)
    return Envelope.ok([e.as_dict() for e in events], count=len(events))


@router.post("/breeding-events", status_code=201, **envelope_route)
def record_breeding_event(
    payload: BreedingEventRequest, db: DbClient = Depends(get_db_client)
):
    with server_error("Failed to record breeding event"):
        event = db.record_breeding_event(BreedingEventDraft(**payload.model_dump()))
    if not event:
        raise ApiError(404, "Mob not found")
    return Envelope.ok(
        event.as_dict(), message="Breeding event recorded successfully"
    )


@router.get("/farm-statistics", **envelope_route)
def farm_statistics(db: DbClient = Depends(get_db_client)):
    with server_error("Failed to fetch farm statistics"):
        stats = db.get_farm_statistics()
    return Envelope.ok(stats or {})


@router.get("/farm-statistics/stage-distribution", **envelope_route)
def stage_distribution(db: DbClient = Depends(get_db_client)):
    with server_error("Failed to fetch stage distribution"):
        stages = db.get_stage_distribution()
    return Envelope.ok(stages, count=len(stages))
