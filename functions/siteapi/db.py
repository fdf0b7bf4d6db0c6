"""
Database abstraction for Postgres and an in-memory test implementation.
"""

from __future__ import annotations

import time
from dataclasses import asdict, dataclass, field, fields
from datetime import date, datetime, time as dt_time, timedelta, timezone
from typing import Any, Optional, Protocol

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    case,
    create_engine,
    desc,
    distinct,
    func,
    literal_column,
    select,
)
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session, declarative_base, sessionmaker

DEFAULT_STAGE = "Pre-Joining"
STAGE_ORDER = ("Pre-Joining", "Joining", "Scanning", "Lambing", "Marking", "Weaning")
ANALYTICS_GROUPS = (
    "utm_source",
    "utm_medium",
    "utm_campaign",
    "appointment_type",
    "gender",
)
MOB_UPDATABLE_FIELDS = (
    "mob_name",
    "breed_name",
    "status_name",
    "zone_name",
    "team_name",
    "current_location",
    "current_stage",
    "ewes_joined",
    "rams_in",
    "joining_date",
    "expected_lambing",
    "dry_off_date",
    "lamb_marking_date",
    "weaning_date",
    "scanning_percent",
    "marking_percent",
    "weaning_percent",
    "is_active",
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _day_bounds(start: date, end: date) -> tuple[datetime, datetime]:
    """Half-open [start 00:00, end+1 00:00) UTC range covering both dates."""
    lower = datetime.combine(start, dt_time.min, tzinfo=timezone.utc)
    upper = datetime.combine(end + timedelta(days=1), dt_time.min, tzinfo=timezone.utc)
    return lower, upper


class DbClient(Protocol):
    """Interface for database access."""

    def register_session(self, registration: "SessionRegistration") -> "SessionRecord":
        ...

    def get_session(self, user_id: str) -> Optional["SessionRecord"]:
        ...

    def create_booking(self, draft: "BookingDraft") -> "BookingRecord":
        ...

    def booking_analytics(
        self, start: date, end: date, group_by: str = "utm_source"
    ) -> list[dict]:
        ...

    def list_mobs(self, stage: Optional[str] = None) -> list["MobRecord"]:
        ...

    def get_mob(self, mob_id: int) -> Optional["MobRecord"]:
        ...

    def create_mob(self, values: dict) -> "MobRecord":
        ...

    def update_mob(self, mob_id: int, updates: dict) -> Optional["MobRecord"]:
        ...

    def record_breeding_event(
        self, draft: "BreedingEventDraft"
    ) -> Optional["BreedingEventRecord"]:
        ...

    def get_mob_history(
        self, mob_id: int, limit: int = 10
    ) -> list["BreedingEventRecord"]:
        ...

    def get_farm_statistics(self) -> dict:
        ...

    def get_stage_distribution(self) -> list[dict]:
        ...


@dataclass
class SessionRegistration:
    user_id: str
    utm_source: Optional[str] = None
    utm_medium: Optional[str] = None
    utm_campaign: Optional[str] = None
    utm_content: Optional[str] = None
    utm_term: Optional[str] = None
    referrer: Optional[str] = None
    device_type: Optional[str] = None
    user_agent: Optional[str] = None


@dataclass
class SessionRecord:
    id: int
    user_id: str
    utm_source: Optional[str] = None
    utm_medium: Optional[str] = None
    utm_campaign: Optional[str] = None
    utm_content: Optional[str] = None
    utm_term: Optional[str] = None
    referrer: Optional[str] = None
    device_type: Optional[str] = None
    user_agent: Optional[str] = None
    page_count: int = 1
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)
    session_end: Optional[datetime] = None

    def as_dict(self) -> dict:
        return {
            "sessionId": self.id,
            "userId": self.user_id,
            "utmSource": self.utm_source,
            "utmMedium": self.utm_medium,
            "utmCampaign": self.utm_campaign,
            "utmContent": self.utm_content,
            "utmTerm": self.utm_term,
            "referrer": self.referrer,
            "deviceType": self.device_type,
            "userAgent": self.user_agent,
            "pageCount": self.page_count,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
            "sessionEnd": self.session_end,
        }


@dataclass
class BookingDraft:
    name: str
    email: str
    date: date
    time: str
    appointment_type: Optional[str] = None
    gender: Optional[str] = None
    user_session_id: Optional[int] = None


@dataclass
class BookingRecord:
    id: int
    reference: str
    name: str
    email: str
    date: date
    time: str
    status: str = "confirmed"
    payment_status: str = "pending"
    appointment_type: Optional[str] = None
    gender: Optional[str] = None
    user_session_id: Optional[int] = None
    created_at: datetime = field(default_factory=_utcnow)

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "reference": self.reference,
            "name": self.name,
            "email": self.email,
            "date": self.date,
            "time": self.time,
            "status": self.status,
            "paymentStatus": self.payment_status,
            "appointmentType": self.appointment_type,
            "gender": self.gender,
            "sessionId": self.user_session_id,
            "createdAt": self.created_at,
        }


@dataclass
class MobRecord:
    mob_id: int
    mob_name: str
    breed_name: Optional[str] = None
    status_name: Optional[str] = None
    zone_name: Optional[str] = None
    team_name: Optional[str] = None
    current_stage: str = DEFAULT_STAGE
    current_location: Optional[str] = None
    ewes_joined: Optional[int] = None
    rams_in: Optional[int] = None
    joining_date: Optional[date] = None
    expected_lambing: Optional[date] = None
    dry_off_date: Optional[date] = None
    lamb_marking_date: Optional[date] = None
    weaning_date: Optional[date] = None
    scanning_percent: Optional[float] = None
    marking_percent: Optional[float] = None
    weaning_percent: Optional[float] = None
    is_active: bool = True
    created_at: datetime = field(default_factory=_utcnow)
    last_updated: datetime = field(default_factory=_utcnow)

    def as_dict(self) -> dict:
        return asdict(self)


@dataclass
class BreedingEventDraft:
    mob_id: int
    event_type: str
    event_date: date
    event_time: Optional[str] = None
    event_data: Optional[dict] = None
    notes: Optional[str] = None
    recorded_by: Optional[str] = None


@dataclass
class BreedingEventRecord:
    event_id: int
    mob_id: int
    event_type: str
    event_date: date
    event_time: Optional[str] = None
    event_data: Optional[dict] = None
    notes: Optional[str] = None
    recorded_by: Optional[str] = None
    created_at: datetime = field(default_factory=_utcnow)

    def as_dict(self) -> dict:
        return asdict(self)


def _booking_reference() -> str:
    return f"booking-{int(time.time() * 1000)}"


def _round(value: Any) -> Optional[float]:
    return round(float(value), 2) if value is not None else None


def _conversion_rate(sessions: int, bookings: int) -> Optional[float]:
    if not sessions:
        return None
    return round(100.0 * bookings / sessions, 2)


def _stage_rank(stage: Optional[str]) -> int:
    try:
        return STAGE_ORDER.index(stage) + 1
    except ValueError:
        return len(STAGE_ORDER) + 1


class InMemoryDbClient:
    """Simple in-memory database for development and tests."""

    def __init__(self):
        self.sessions: dict[str, SessionRecord] = {}
        self.bookings: dict[int, BookingRecord] = {}
        self.mobs: dict[int, MobRecord] = {}
        self.events: dict[int, BreedingEventRecord] = {}
        self._ids: dict[str, int] = {}

    def _next_id(self, kind: str) -> int:
        self._ids[kind] = self._ids.get(kind, 0) + 1
        return self._ids[kind]

    def register_session(self, registration: SessionRegistration) -> SessionRecord:
        now = _utcnow()
        existing = self.sessions.get(registration.user_id)
        if existing:
            existing.page_count += 1
            existing.session_end = None
            existing.updated_at = now
            return existing
        record = SessionRecord(
            id=self._next_id("session"),
            created_at=now,
            updated_at=now,
            **asdict(registration),
        )
        self.sessions[registration.user_id] = record
        return record

    def get_session(self, user_id: str) -> Optional[SessionRecord]:
        return self.sessions.get(user_id)

    def create_booking(self, draft: BookingDraft) -> BookingRecord:
        values = asdict(draft)
        # Unknown session ids are stored unlinked.
        known_ids = {s.id for s in self.sessions.values()}
        if values["user_session_id"] not in known_ids:
            values["user_session_id"] = None
        record = BookingRecord(
            id=self._next_id("booking"),
            reference=_booking_reference(),
            **values,
        )
        self.bookings[record.id] = record
        return record

    def booking_analytics(
        self, start: date, end: date, group_by: str = "utm_source"
    ) -> list[dict]:
        if group_by not in ANALYTICS_GROUPS:
            raise ValueError(f"Unsupported groupBy: {group_by}")
        lower, upper = _day_bounds(start, end)
        # Mirror of sessions LEFT JOIN bookings.
        joined: list[tuple[SessionRecord, Optional[BookingRecord]]] = []
        for session in self.sessions.values():
            if not lower <= session.created_at < upper:
                continue
            linked = [
                b for b in self.bookings.values() if b.user_session_id == session.id
            ]
            joined.extend((session, b) for b in linked or [None])

        groups: dict[str, dict[str, set]] = {}
        for session, booking in joined:
            source = session if group_by.startswith("utm_") else booking
            value = getattr(source, group_by) if source is not None else None
            target = groups.setdefault(
                value if value is not None else "Direct",
                {"sessions": set(), "bookings": set(), "paid": set()},
            )
            target["sessions"].add(session.id)
            if booking is not None:
                target["bookings"].add(booking.id)
                if booking.payment_status == "paid":
                    target["paid"].add(booking.id)

        rows = []
        for category, counts in groups.items():
            sessions = len(counts["sessions"])
            bookings = len(counts["bookings"])
            rows.append(
                {
                    "category": category,
                    "sessions": sessions,
                    "bookings": bookings,
                    "conversion_rate": _conversion_rate(sessions, bookings),
                    "paid_bookings": len(counts["paid"]),
                }
            )
        rows.sort(key=lambda r: (-r["bookings"], r["category"]))
        return rows

    def list_mobs(self, stage: Optional[str] = None) -> list[MobRecord]:
        mobs = [
            m
            for m in self.mobs.values()
            if m.is_active and (stage is None or m.current_stage == stage)
        ]
        mobs.sort(key=lambda m: (m.last_updated, m.mob_id), reverse=True)
        return mobs

    def get_mob(self, mob_id: int) -> Optional[MobRecord]:
        return self.mobs.get(mob_id)

    def create_mob(self, values: dict) -> MobRecord:
        now = _utcnow()
        values = dict(values)
        if not values.get("current_stage"):
            values["current_stage"] = DEFAULT_STAGE
        record = MobRecord(
            mob_id=self._next_id("mob"),
            created_at=now,
            last_updated=now,
            **values,
        )
        self.mobs[record.mob_id] = record
        return record

    def update_mob(self, mob_id: int, updates: dict) -> Optional[MobRecord]:
        mob = self.mobs.get(mob_id)
        if not mob:
            return None
        for key, value in updates.items():
            if key in MOB_UPDATABLE_FIELDS:
                setattr(mob, key, value)
        mob.last_updated = _utcnow()
        return mob

    def record_breeding_event(
        self, draft: BreedingEventDraft
    ) -> Optional[BreedingEventRecord]:
        if draft.mob_id not in self.mobs:
            return None
        record = BreedingEventRecord(event_id=self._next_id("event"), **asdict(draft))
        self.events[record.event_id] = record
        return record

    def get_mob_history(self, mob_id: int, limit: int = 10) -> list[BreedingEventRecord]:
        events = [e for e in self.events.values() if e.mob_id == mob_id]
        events.sort(key=lambda e: (e.event_date, e.created_at), reverse=True)
        return events[:limit]

    def get_farm_statistics(self) -> dict:
        active = [m for m in self.mobs.values() if m.is_active]

        def present(attr: str) -> list[float]:
            return [getattr(m, attr) for m in active if getattr(m, attr) is not None]

        def avg(attr: str) -> Optional[float]:
            values = present(attr)
            return _round(sum(values) / len(values)) if values else None

        scanning = present("scanning_percent")
        return {
            "total_mobs": len(active),
            "total_ewes": sum(present("ewes_joined")),
            "avg_scanning_percent": avg("scanning_percent"),
            "avg_marking_percent": avg("marking_percent"),
            "avg_weaning_percent": avg("weaning_percent"),
            "best_scanning_percent": _round(max(scanning)) if scanning else None,
            "worst_scanning_percent": _round(min(scanning)) if scanning else None,
        }

    def get_stage_distribution(self) -> list[dict]:
        stages: dict[str, dict] = {}
        for mob in self.mobs.values():
            if not mob.is_active:
                continue
            entry = stages.setdefault(
                mob.current_stage,
                {"current_stage": mob.current_stage, "mob_count": 0, "total_ewes": 0},
            )
            entry["mob_count"] += 1
            entry["total_ewes"] += mob.ewes_joined or 0
        return sorted(
            stages.values(),
            key=lambda e: (_stage_rank(e["current_stage"]), e["current_stage"]),
        )


def _to_record(row: Any, cls: type) -> Any:
    return cls(**{f.name: getattr(row, f.name) for f in fields(cls)})


class SqlDbClient:
    """
    SQLAlchemy-backed implementation. Accepts any SQLAlchemy URL (e.g., Postgres or SQLite for tests).
    """

    def __init__(
        self,
        database_url: str,
        *,
        pool_size: int = 20,
        pool_timeout: float = 10.0,
        pool_recycle: int = 1800,
        create_tables: bool = True,
    ):
        if not database_url:
            raise ValueError("DATABASE_URL is required for SqlDbClient")
        engine_kwargs: dict[str, Any] = {
            "future": True,
            "pool_pre_ping": True,
            "pool_recycle": pool_recycle,
        }
        if not database_url.startswith("sqlite"):
            engine_kwargs.update(pool_size=pool_size, pool_timeout=pool_timeout)
        self.engine = create_engine(database_url, **engine_kwargs)
        self.Session = sessionmaker(
            bind=self.engine, class_=Session, expire_on_commit=False, future=True
        )
        if create_tables:
            Base.metadata.create_all(self.engine)

    def _insert(self, model: type):
        dialect = self.engine.dialect.name
        if dialect == "postgresql":
            return postgresql.insert(model)
        if dialect == "sqlite":
            return sqlite.insert(model)
        raise NotImplementedError(f"Upsert not supported for dialect {dialect}")

    def register_session(self, registration: SessionRegistration) -> SessionRecord:
        now = _utcnow()
        stmt = self._insert(UserSessionRow).values(
            **asdict(registration),
            page_count=1,
            created_at=now,
            updated_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[UserSessionRow.user_id],
            set_={
                "session_end": None,
                "page_count": UserSessionRow.page_count + 1,
                "updated_at": now,
            },
        ).returning(UserSessionRow)
        with self.Session() as session:
            row = session.scalars(
                stmt, execution_options={"populate_existing": True}
            ).one()
            record = _to_record(row, SessionRecord)
            session.commit()
            return record

    def get_session(self, user_id: str) -> Optional[SessionRecord]:
        with self.Session() as session:
            row = session.execute(
                select(UserSessionRow).where(UserSessionRow.user_id == user_id)
            ).scalar_one_or_none()
            return _to_record(row, SessionRecord) if row else None

    def create_booking(self, draft: BookingDraft) -> BookingRecord:
        values = asdict(draft)
        with self.Session() as session:
            session_id = values["user_session_id"]
            if session_id is not None and session.get(UserSessionRow, session_id) is None:
                values["user_session_id"] = None
            row = BookingRow(
                reference=_booking_reference(),
                status="confirmed",
                payment_status="pending",
                created_at=_utcnow(),
                **values,
            )
            session.add(row)
            session.commit()
            session.refresh(row)
            return _to_record(row, BookingRecord)

    def booking_analytics(
        self, start: date, end: date, group_by: str = "utm_source"
    ) -> list[dict]:
        columns = {
            "utm_source": UserSessionRow.utm_source,
            "utm_medium": UserSessionRow.utm_medium,
            "utm_campaign": UserSessionRow.utm_campaign,
            "appointment_type": BookingRow.appointment_type,
            "gender": BookingRow.gender,
        }
        if group_by not in columns:
            raise ValueError(f"Unsupported groupBy: {group_by}")
        group_col = columns[group_by]
        lower, upper = _day_bounds(start, end)
        booking_count = func.count(distinct(BookingRow.id))
        stmt = (
            select(
                func.coalesce(group_col, literal_column("'Direct'")).label("category"),
                func.count(distinct(UserSessionRow.id)).label("sessions"),
                booking_count.label("bookings"),
                func.count(distinct(BookingRow.id))
                .filter(BookingRow.payment_status == "paid")
                .label("paid_bookings"),
            )
            .select_from(UserSessionRow)
            .outerjoin(BookingRow, BookingRow.user_session_id == UserSessionRow.id)
            .where(
                UserSessionRow.created_at >= lower,
                UserSessionRow.created_at < upper,
            )
            .group_by(group_col)
            .order_by(desc(booking_count))
        )
        with self.Session() as session:
            result = session.execute(stmt).all()
        rows = []
        for category, sessions, bookings, paid in result:
            rows.append(
                {
                    "category": category,
                    "sessions": int(sessions or 0),
                    "bookings": int(bookings or 0),
                    "conversion_rate": _conversion_rate(sessions, bookings or 0),
                    "paid_bookings": int(paid or 0),
                }
            )
        rows.sort(key=lambda r: (-r["bookings"], r["category"]))
        return rows

    def list_mobs(self, stage: Optional[str] = None) -> list[MobRecord]:
        stmt = select(MobRow).where(MobRow.is_active.is_(True))
        if stage:
            stmt = stmt.where(MobRow.current_stage == stage)
        stmt = stmt.order_by(MobRow.last_updated.desc(), MobRow.mob_id.desc())
        with self.Session() as session:
            return [_to_record(row, MobRecord) for row in session.scalars(stmt)]

    def get_mob(self, mob_id: int) -> Optional[MobRecord]:
        with self.Session() as session:
            row = session.get(MobRow, mob_id)
            return _to_record(row, MobRecord) if row else None

    def create_mob(self, values: dict) -> MobRecord:
        now = _utcnow()
        values = dict(values)
        if not values.get("current_stage"):
            values["current_stage"] = DEFAULT_STAGE
        with self.Session() as session:
            row = MobRow(created_at=now, last_updated=now, **values)
            session.add(row)
            session.commit()
            session.refresh(row)
            return _to_record(row, MobRecord)

    def update_mob(self, mob_id: int, updates: dict) -> Optional[MobRecord]:
        with self.Session() as session:
            row = session.get(MobRow, mob_id)
            if not row:
                return None
            for key, value in updates.items():
                if key in MOB_UPDATABLE_FIELDS:
                    setattr(row, key, value)
            row.last_updated = _utcnow()
            session.commit()
            session.refresh(row)
            return _to_record(row, MobRecord)

    def record_breeding_event(
        self, draft: BreedingEventDraft
    ) -> Optional[BreedingEventRecord]:
        with self.Session() as session:
            if session.get(MobRow, draft.mob_id) is None:
                return None
            row = BreedingEventRow(created_at=_utcnow(), **asdict(draft))
            session.add(row)
            session.commit()
            session.refresh(row)
            return _to_record(row, BreedingEventRecord)

    def get_mob_history(self, mob_id: int, limit: int = 10) -> list[BreedingEventRecord]:
        stmt = (
            select(BreedingEventRow)
            .where(BreedingEventRow.mob_id == mob_id)
            .order_by(
                BreedingEventRow.event_date.desc(),
                BreedingEventRow.created_at.desc(),
            )
            .limit(limit)
        )
        with self.Session() as session:
            return [
                _to_record(row, BreedingEventRecord) for row in session.scalars(stmt)
            ]

    def get_farm_statistics(self) -> dict:
        stmt = select(
            func.count(MobRow.mob_id),
            func.sum(MobRow.ewes_joined),
            func.avg(MobRow.scanning_percent),
            func.avg(MobRow.marking_percent),
            func.avg(MobRow.weaning_percent),
            func.max(MobRow.scanning_percent),
            func.min(MobRow.scanning_percent),
        ).where(MobRow.is_active.is_(True))
        with self.Session() as session:
            total, ewes, scan, mark, wean, best, worst = session.execute(stmt).one()
        return {
            "total_mobs": int(total or 0),
            "total_ewes": int(ewes or 0),
            "avg_scanning_percent": _round(scan),
            "avg_marking_percent": _round(mark),
            "avg_weaning_percent": _round(wean),
            "best_scanning_percent": _round(best),
            "worst_scanning_percent": _round(worst),
        }

    def get_stage_distribution(self) -> list[dict]:
        rank = case(
            {stage: index + 1 for index, stage in enumerate(STAGE_ORDER)},
            value=MobRow.current_stage,
            else_=len(STAGE_ORDER) + 1,
        )
        stmt = (
            select(
                MobRow.current_stage,
                func.count(MobRow.mob_id),
                func.sum(MobRow.ewes_joined),
            )
            .where(MobRow.is_active.is_(True))
            .group_by(MobRow.current_stage)
            .order_by(rank, MobRow.current_stage)
        )
        with self.Session() as session:
            result = session.execute(stmt).all()
        return [
            {
                "current_stage": stage,
                "mob_count": int(count or 0),
                "total_ewes": int(ewes or 0),
            }
            for stage, count, ewes in result
        ]


Base = declarative_base()


class UserSessionRow(Base):
    __tablename__ = "user_sessions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String, nullable=False, unique=True)
    utm_source = Column(String, nullable=True)
    utm_medium = Column(String, nullable=True)
    utm_campaign = Column(String, nullable=True)
    utm_content = Column(String, nullable=True)
    utm_term = Column(String, nullable=True)
    referrer = Column(String, nullable=True)
    device_type = Column(String, nullable=True)
    user_agent = Column(String, nullable=True)
    page_count = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime(timezone=True), nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False)
    session_end = Column(DateTime(timezone=True), nullable=True)


class BookingRow(Base):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    reference = Column(String, nullable=False)
    name = Column(String, nullable=False)
    email = Column(String, nullable=False)
    date = Column(Date, nullable=False)
    time = Column(String, nullable=False)
    status = Column(String, nullable=False, default="confirmed")
    payment_status = Column(String, nullable=False, default="pending")
    appointment_type = Column(String, nullable=True)
    gender = Column(String, nullable=True)
    user_session_id = Column(
        Integer, ForeignKey("user_sessions.id"), nullable=True, index=True
    )
    created_at = Column(DateTime(timezone=True), nullable=False)


class MobRow(Base):
    __tablename__ = "mobs"

    mob_id = Column(Integer, primary_key=True, autoincrement=True)
    mob_name = Column(String, nullable=False)
    breed_name = Column(String, nullable=True)
    status_name = Column(String, nullable=True)
    zone_name = Column(String, nullable=True)
    team_name = Column(String, nullable=True)
    current_stage = Column(String, nullable=False, default=DEFAULT_STAGE, index=True)
    current_location = Column(String, nullable=True)
    ewes_joined = Column(Integer, nullable=True)
    rams_in = Column(Integer, nullable=True)
    joining_date = Column(Date, nullable=True)
    expected_lambing = Column(Date, nullable=True)
    dry_off_date = Column(Date, nullable=True)
    lamb_marking_date = Column(Date, nullable=True)
    weaning_date = Column(Date, nullable=True)
    scanning_percent = Column(Float, nullable=True)
    marking_percent = Column(Float, nullable=True)
    weaning_percent = Column(Float, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False)
    last_updated = Column(DateTime(timezone=True), nullable=False)


class BreedingEventRow(Base):
    __tablename__ = "breeding_events"

    event_id = Column(Integer, primary_key=True, autoincrement=True)
    mob_id = Column(Integer, ForeignKey("mobs.mob_id"), nullable=False, index=True)
    event_type = Column(String, nullable=False)
    event_date = Column(Date, nullable=False)
    event_time = Column(String, nullable=True)
    event_data = Column(JSON, nullable=True)
    notes = Column(String, nullable=True)
    recorded_by = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False)
