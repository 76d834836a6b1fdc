"""
Database abstraction for Postgres and an in-memory test implementation.
"""

from __future__ import annotations

import itertools
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Dict, Optional, Protocol

from sqlalchemy import (
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
    create_engine,
    func,
    or_,
    select,
)
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

FLYER_UPDATABLE_FIELDS = frozenset(
    {"url", "pdf_url", "s3_key", "redirect_url", "lat", "long", "posted_at"}
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


class DbClient(Protocol):
    """Interface for database access."""

    def create_user(self, email: str, password_hash: str) -> "UserRecord":
        ...

    def get_user(self, user_id: str) -> Optional["UserRecord"]:
        ...

    def get_user_by_email(self, email: str) -> Optional["UserRecord"]:
        ...

    def create_campaign(
        self,
        *,
        owner: str,
        name: str,
        url: str,
        pdf_key: str,
        pdf_url: str,
        flyers: int,
    ) -> "CampaignRecord":
        ...

    def get_campaign(self, campaign_id: int) -> Optional["CampaignRecord"]:
        ...

    def get_campaign_by_name(self, name: str) -> Optional["CampaignRecord"]:
        ...

    def list_campaigns(self, owner: str) -> list["CampaignRecord"]:
        ...

    def count_campaigns(self, owner: str) -> int:
        ...

    def update_campaign(
        self,
        campaign_id: int,
        *,
        url: Optional[str] = None,
        merged_pdf_key: Optional[str] = None,
    ) -> Optional["CampaignRecord"]:
        ...

    def create_flyer(
        self, *, campaign_id: int, number: int, campaign_name: str, redirect_url: str
    ) -> "FlyerRecord":
        ...

    def update_flyer(self, flyer_id: int, **fields) -> Optional["FlyerRecord"]:
        ...

    def get_flyer(self, flyer_id: int) -> Optional["FlyerRecord"]:
        ...

    def get_flyer_by_number(
        self, campaign_name: str, number: int
    ) -> Optional["FlyerRecord"]:
        ...

    def list_flyers(self, campaign_id: int) -> list["FlyerRecord"]:
        ...

    def set_flyers_redirect_url(self, campaign_id: int, url: str) -> int:
        ...

    def record_scan(
        self,
        *,
        flyer_id: int,
        campaign_id: int,
        redirect_url: Optional[str],
        lat: Optional[float] = None,
        long: Optional[float] = None,
    ) -> "ScanRecord":
        ...

    def get_scan(self, scan_id: int) -> Optional["ScanRecord"]:
        ...

    def latest_scan_without_location(self, flyer_id: int) -> Optional["ScanRecord"]:
        ...

    def update_scan_location(self, scan_id: int, lat: float, long: float) -> None:
        ...

    def count_scans(
        self, *, flyer_id: Optional[int] = None, campaign_id: Optional[int] = None
    ) -> int:
        ...

    def refresh_scan_counts(self, flyer_id: int, campaign_id: int) -> tuple[int, int]:
        ...

    def list_scans(self, campaign_id: int) -> list["ScanRecord"]:
        ...

    def find_campaign_for_key(self, key: str) -> Optional["CampaignRecord"]:
        ...


@dataclass
class UserRecord:
    id: str
    email: str
    password_hash: str
    created_at: datetime = field(default_factory=_utcnow)

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "email": self.email,
            "created_at": _iso(self.created_at),
        }


@dataclass
class CampaignRecord:
    id: int
    owner: str
    name: str
    url: str
    pdf_key: str
    pdf_url: str
    flyers: int
    scans: int = 0
    merged_pdf_key: Optional[str] = None
    created_at: datetime = field(default_factory=_utcnow)

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "user": self.owner,
            "name": self.name,
            "url": self.url,
            "pdf_url": self.pdf_url,
            "pdf_key": self.pdf_key,
            "merged_pdf_key": self.merged_pdf_key,
            "flyers": self.flyers,
            "scans": self.scans,
            "created_at": _iso(self.created_at),
        }


@dataclass
class FlyerRecord:
    id: int
    campaign: int
    number: int
    campaign_name: str
    redirect_url: str
    url: Optional[str] = None
    pdf_url: Optional[str] = None
    s3_key: Optional[str] = None
    scans: int = 0
    lat: Optional[float] = None
    long: Optional[float] = None
    posted_at: Optional[datetime] = None
    created_at: datetime = field(default_factory=_utcnow)

    @property
    def has_location(self) -> bool:
        return self.lat is not None and self.long is not None

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "campaign": self.campaign,
            "number": self.number,
            "campaign_name": self.campaign_name,
            "url": self.url,
            "redirect_url": self.redirect_url,
            "pdf_url": self.pdf_url,
            "s3_key": self.s3_key,
            "scans": self.scans,
            "lat": self.lat,
            "long": self.long,
            "posted_at": _iso(self.posted_at),
            "created_at": _iso(self.created_at),
        }


@dataclass
class ScanRecord:
    id: int
    flyer: int
    campaign: int
    redirect_url: Optional[str] = None
    lat: Optional[float] = None
    long: Optional[float] = None
    scan_time: datetime = field(default_factory=_utcnow)

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "flyer": self.flyer,
            "campaign": self.campaign,
            "redirect_url": self.redirect_url,
            "lat": self.lat,
            "long": self.long,
            "scan_time": _iso(self.scan_time),
        }


class InMemoryDbClient:
    """Simple in-memory database for development and tests."""

    def __init__(self):
        self.users: Dict[str, UserRecord] = {}
        self.campaigns: Dict[int, CampaignRecord] = {}
        self.flyers: Dict[int, FlyerRecord] = {}
        self.scans: Dict[int, ScanRecord] = {}
        self._ids = {
            "campaigns": itertools.count(1),
            "flyers": itertools.count(1),
            "scans": itertools.count(1),
        }

    def reset(self) -> None:
        """Clear all stored data (useful in tests)."""
        self.__init__()

    def create_user(self, email: str, password_hash: str) -> UserRecord:
        record = UserRecord(
            id=uuid.uuid4().hex, email=email.lower(), password_hash=password_hash
        )
        self.users[record.id] = record
        return record

    def get_user(self, user_id: str) -> Optional[UserRecord]:
        return self.users.get(user_id)

    def get_user_by_email(self, email: str) -> Optional[UserRecord]:
        email = email.lower()
        for user in self.users.values():
            if user.email == email:
                return user
        return None

    def create_campaign(
        self,
        *,
        owner: str,
        name: str,
        url: str,
        pdf_key: str,
        pdf_url: str,
        flyers: int,
    ) -> CampaignRecord:
        record = CampaignRecord(
            id=next(self._ids["campaigns"]),
            owner=owner,
            name=name,
            url=url,
            pdf_key=pdf_key,
            pdf_url=pdf_url,
            flyers=flyers,
        )
        self.campaigns[record.id] = record
        return replace(record)

    def get_campaign(self, campaign_id: int) -> Optional[CampaignRecord]:
        record = self.campaigns.get(campaign_id)
        return replace(record) if record else None

    def get_campaign_by_name(self, name: str) -> Optional[CampaignRecord]:
        for record in self.campaigns.values():
            if record.name == name:
                return replace(record)
        return None

    def list_campaigns(self, owner: str) -> list[CampaignRecord]:
        owned = [replace(c) for c in self.campaigns.values() if c.owner == owner]
        return sorted(owned, key=lambda c: (c.created_at, c.id), reverse=True)

    def count_campaigns(self, owner: str) -> int:
        return sum(1 for c in self.campaigns.values() if c.owner == owner)

    def update_campaign(
        self,
        campaign_id: int,
        *,
        url: Optional[str] = None,
        merged_pdf_key: Optional[str] = None,
    ) -> Optional[CampaignRecord]:
        record = self.campaigns.get(campaign_id)
        if not record:
            return None
        if url is not None:
            record.url = url
        if merged_pdf_key is not None:
            record.merged_pdf_key = merged_pdf_key
        return replace(record)

    def create_flyer(
        self, *, campaign_id: int, number: int, campaign_name: str, redirect_url: str
    ) -> FlyerRecord:
        record = FlyerRecord(
            id=next(self._ids["flyers"]),
            campaign=campaign_id,
            number=number,
            campaign_name=campaign_name,
            redirect_url=redirect_url,
        )
        self.flyers[record.id] = record
        return replace(record)

    def update_flyer(self, flyer_id: int, **fields) -> Optional[FlyerRecord]:
        _check_flyer_fields(fields)
        record = self.flyers.get(flyer_id)
        if not record:
            return None
        for name, value in fields.items():
            setattr(record, name, value)
        return replace(record)

    def get_flyer(self, flyer_id: int) -> Optional[FlyerRecord]:
        record = self.flyers.get(flyer_id)
        return replace(record) if record else None

    def get_flyer_by_number(
        self, campaign_name: str, number: int
    ) -> Optional[FlyerRecord]:
        for record in self.flyers.values():
            if record.campaign_name == campaign_name and record.number == number:
                return replace(record)
        return None

    def list_flyers(self, campaign_id: int) -> list[FlyerRecord]:
        flyers = [replace(f) for f in self.flyers.values() if f.campaign == campaign_id]
        return sorted(flyers, key=lambda f: f.number)

    def set_flyers_redirect_url(self, campaign_id: int, url: str) -> int:
        updated = 0
        for record in self.flyers.values():
            if record.campaign == campaign_id:
                record.redirect_url = url
                updated += 1
        return updated

    def record_scan(
        self,
        *,
        flyer_id: int,
        campaign_id: int,
        redirect_url: Optional[str],
        lat: Optional[float] = None,
        long: Optional[float] = None,
    ) -> ScanRecord:
        record = ScanRecord(
            id=next(self._ids["scans"]),
            flyer=flyer_id,
            campaign=campaign_id,
            redirect_url=redirect_url,
            lat=lat,
            long=long,
        )
        self.scans[record.id] = record
        return replace(record)

    def get_scan(self, scan_id: int) -> Optional[ScanRecord]:
        record = self.scans.get(scan_id)
        return replace(record) if record else None

    def latest_scan_without_location(self, flyer_id: int) -> Optional[ScanRecord]:
        candidates = [
            s for s in self.scans.values() if s.flyer == flyer_id and s.lat is None
        ]
        if not candidates:
            return None
        return replace(max(candidates, key=lambda s: s.id))

    def update_scan_location(self, scan_id: int, lat: float, long: float) -> None:
        record = self.scans.get(scan_id)
        if record:
            record.lat = lat
            record.long = long

    def count_scans(
        self, *, flyer_id: Optional[int] = None, campaign_id: Optional[int] = None
    ) -> int:
        return sum(
            1
            for s in self.scans.values()
            if (flyer_id is None or s.flyer == flyer_id)
            and (campaign_id is None or s.campaign == campaign_id)
        )

    def refresh_scan_counts(self, flyer_id: int, campaign_id: int) -> tuple[int, int]:
        flyer_scans = self.count_scans(flyer_id=flyer_id)
        campaign_scans = self.count_scans(campaign_id=campaign_id)
        if flyer_id in self.flyers:
            self.flyers[flyer_id].scans = flyer_scans
        if campaign_id in self.campaigns:
            self.campaigns[campaign_id].scans = campaign_scans
        return flyer_scans, campaign_scans

    def list_scans(self, campaign_id: int) -> list[ScanRecord]:
        scans = [replace(s) for s in self.scans.values() if s.campaign == campaign_id]
        return sorted(scans, key=lambda s: (s.scan_time, s.id), reverse=True)

    def find_campaign_for_key(self, key: str) -> Optional[CampaignRecord]:
        for record in self.campaigns.values():
            if key in (record.pdf_key, record.merged_pdf_key):
                return replace(record)
        for flyer in self.flyers.values():
            if flyer.s3_key == key:
                return self.get_campaign(flyer.campaign)
        return None


class PostgresDbClient:
    """
    SQLAlchemy-backed client. Production runs on Postgres; tests pass a
    SQLite URL.
    """

    def __init__(self, database_url: str):
        engine_kwargs = {}
        if database_url.startswith("sqlite") and ":memory:" in database_url:
            # One shared connection so every thread sees the same database.
            engine_kwargs = {
                "connect_args": {"check_same_thread": False},
                "poolclass": StaticPool,
            }
        self.engine = create_engine(database_url, **engine_kwargs)
        self.Session = sessionmaker(bind=self.engine, expire_on_commit=False)
        Base.metadata.create_all(self.engine)

    def create_user(self, email: str, password_hash: str) -> UserRecord:
        with self.Session() as session:
            row = UserRow(
                id=uuid.uuid4().hex,
                email=email.lower(),
                password_hash=password_hash,
                created_at=_utcnow(),
            )
            session.add(row)
            session.commit()
            return _user_from_row(row)

    def get_user(self, user_id: str) -> Optional[UserRecord]:
        with self.Session() as session:
            row = session.get(UserRow, user_id)
            return _user_from_row(row) if row else None

    def get_user_by_email(self, email: str) -> Optional[UserRecord]:
        with self.Session() as session:
            row = session.execute(
                select(UserRow).where(UserRow.email == email.lower())
            ).scalar_one_or_none()
            return _user_from_row(row) if row else None

    def create_campaign(
        self,
        *,
        owner: str,
        name: str,
        url: str,
        pdf_key: str,
        pdf_url: str,
        flyers: int,
    ) -> CampaignRecord:
        with self.Session() as session:
            row = CampaignRow(
                owner=owner,
                name=name,
                url=url,
                pdf_key=pdf_key,
                pdf_url=pdf_url,
                flyers=flyers,
                scans=0,
                created_at=_utcnow(),
            )
            session.add(row)
            session.commit()
            return _campaign_from_row(row)

    def get_campaign(self, campaign_id: int) -> Optional[CampaignRecord]:
        with self.Session() as session:
            row = session.get(CampaignRow, campaign_id)
            return _campaign_from_row(row) if row else None

    def get_campaign_by_name(self, name: str) -> Optional[CampaignRecord]:
        with self.Session() as session:
            row = session.execute(
                select(CampaignRow).where(CampaignRow.name == name)
            ).scalar_one_or_none()
            return _campaign_from_row(row) if row else None

    def list_campaigns(self, owner: str) -> list[CampaignRecord]:
        with self.Session() as session:
            rows = session.execute(
                select(CampaignRow)
                .where(CampaignRow.owner == owner)
                .order_by(CampaignRow.created_at.desc(), CampaignRow.id.desc())
            ).scalars()
            return [_campaign_from_row(row) for row in rows]

    def count_campaigns(self, owner: str) -> int:
        with self.Session() as session:
            return session.execute(
                select(func.count())
                .select_from(CampaignRow)
                .where(CampaignRow.owner == owner)
            ).scalar_one()

    def update_campaign(
        self,
        campaign_id: int,
        *,
        url: Optional[str] = None,
        merged_pdf_key: Optional[str] = None,
    ) -> Optional[CampaignRecord]:
        with self.Session() as session:
            row = session.get(CampaignRow, campaign_id)
            if not row:
                return None
            if url is not None:
                row.url = url
            if merged_pdf_key is not None:
                row.merged_pdf_key = merged_pdf_key
            session.commit()
            return _campaign_from_row(row)

    def create_flyer(
        self, *, campaign_id: int, number: int, campaign_name: str, redirect_url: str
    ) -> FlyerRecord:
        with self.Session() as session:
            row = FlyerRow(
                campaign=campaign_id,
                number=number,
                campaign_name=campaign_name,
                redirect_url=redirect_url,
                scans=0,
                created_at=_utcnow(),
            )
            session.add(row)
            session.commit()
            return _flyer_from_row(row)

    def update_flyer(self, flyer_id: int, **fields) -> Optional[FlyerRecord]:
        _check_flyer_fields(fields)
        with self.Session() as session:
            row = session.get(FlyerRow, flyer_id)
            if not row:
                return None
            for name, value in fields.items():
                setattr(row, name, value)
            session.commit()
            return _flyer_from_row(row)

    def get_flyer(self, flyer_id: int) -> Optional[FlyerRecord]:
        with self.Session() as session:
            row = session.get(FlyerRow, flyer_id)
            return _flyer_from_row(row) if row else None

    def get_flyer_by_number(
        self, campaign_name: str, number: int
    ) -> Optional[FlyerRecord]:
        with self.Session() as session:
            row = session.execute(
                select(FlyerRow).where(
                    FlyerRow.campaign_name == campaign_name,
                    FlyerRow.number == number,
                )
            ).scalar_one_or_none()
            return _flyer_from_row(row) if row else None

    def list_flyers(self, campaign_id: int) -> list[FlyerRecord]:
        with self.Session() as session:
            rows = session.execute(
                select(FlyerRow)
                .where(FlyerRow.campaign == campaign_id)
                .order_by(FlyerRow.number)
            ).scalars()
            return [_flyer_from_row(row) for row in rows]

    def set_flyers_redirect_url(self, campaign_id: int, url: str) -> int:
        with self.Session() as session:
            rows = session.execute(
                select(FlyerRow).where(FlyerRow.campaign == campaign_id)
            ).scalars().all()
            for row in rows:
                row.redirect_url = url
            session.commit()
            return len(rows)

    def record_scan(
        self,
        *,
        flyer_id: int,
        campaign_id: int,
        redirect_url: Optional[str],
        lat: Optional[float] = None,
        long: Optional[float] = None,
    ) -> ScanRecord:
        with self.Session() as session:
            row = ScanRow(
                flyer=flyer_id,
                campaign=campaign_id,
                redirect_url=redirect_url,
                lat=lat,
                long=long,
                scan_time=_utcnow(),
            )
            session.add(row)
            session.commit()
            return _scan_from_row(row)

    def get_scan(self, scan_id: int) -> Optional[ScanRecord]:
        with self.Session() as session:
            row = session.get(ScanRow, scan_id)
            return _scan_from_row(row) if row else None

    def latest_scan_without_location(self, flyer_id: int) -> Optional[ScanRecord]:
        with self.Session() as session:
            row = session.execute(
                select(ScanRow)
                .where(ScanRow.flyer == flyer_id, ScanRow.lat.is_(None))
                .order_by(ScanRow.id.desc())
                .limit(1)
            ).scalar_one_or_none()
            return _scan_from_row(row) if row else None

    def update_scan_location(self, scan_id: int, lat: float, long: float) -> None:
        with self.Session() as session:
            row = session.get(ScanRow, scan_id)
            if row:
                row.lat = lat
                row.long = long
                session.commit()

    def count_scans(
        self, *, flyer_id: Optional[int] = None, campaign_id: Optional[int] = None
    ) -> int:
        with self.Session() as session:
            return self._count_scans(session, flyer_id=flyer_id, campaign_id=campaign_id)

    def refresh_scan_counts(self, flyer_id: int, campaign_id: int) -> tuple[int, int]:
        with self.Session() as session:
            flyer_scans = self._count_scans(session, flyer_id=flyer_id)
            campaign_scans = self._count_scans(session, campaign_id=campaign_id)
            flyer = session.get(FlyerRow, flyer_id)
            if flyer:
                flyer.scans = flyer_scans
            campaign = session.get(CampaignRow, campaign_id)
            if campaign:
                campaign.scans = campaign_scans
            session.commit()
            return flyer_scans, campaign_scans

    def list_scans(self, campaign_id: int) -> list[ScanRecord]:
        with self.Session() as session:
            rows = session.execute(
                select(ScanRow)
                .where(ScanRow.campaign == campaign_id)
                .order_by(ScanRow.scan_time.desc(), ScanRow.id.desc())
            ).scalars()
            return [_scan_from_row(row) for row in rows]

    def find_campaign_for_key(self, key: str) -> Optional[CampaignRecord]:
        with self.Session() as session:
            row = session.execute(
                select(CampaignRow).where(
                    or_(CampaignRow.pdf_key == key, CampaignRow.merged_pdf_key == key)
                )
            ).scalar_one_or_none()
            if row is None:
                flyer = session.execute(
                    select(FlyerRow).where(FlyerRow.s3_key == key)
                ).scalar_one_or_none()
                if flyer is None:
                    return None
                row = session.get(CampaignRow, flyer.campaign)
            return _campaign_from_row(row) if row else None

    @staticmethod
    def _count_scans(
        session, *, flyer_id: Optional[int] = None, campaign_id: Optional[int] = None
    ) -> int:
        query = select(func.count()).select_from(ScanRow)
        if flyer_id is not None:
            query = query.where(ScanRow.flyer == flyer_id)
        if campaign_id is not None:
            query = query.where(ScanRow.campaign == campaign_id)
        return session.execute(query).scalar_one()


def _check_flyer_fields(fields: dict) -> None:
    unknown = set(fields) - FLYER_UPDATABLE_FIELDS
    if unknown:
        raise ValueError(f"Cannot update flyer fields: {sorted(unknown)}")


def _aware(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite hands back naive datetimes even for timezone-aware columns.
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _user_from_row(row: "UserRow") -> UserRecord:
    return UserRecord(
        id=row.id,
        email=row.email,
        password_hash=row.password_hash,
        created_at=_aware(row.created_at),
    )


def _campaign_from_row(row: "CampaignRow") -> CampaignRecord:
    return CampaignRecord(
        id=row.id,
        owner=row.owner,
        name=row.name,
        url=row.url,
        pdf_key=row.pdf_key,
        pdf_url=row.pdf_url,
        flyers=row.flyers,
        scans=row.scans or 0,
        merged_pdf_key=row.merged_pdf_key,
        created_at=_aware(row.created_at),
    )


def _flyer_from_row(row: "FlyerRow") -> FlyerRecord:
    return FlyerRecord(
        id=row.id,
        campaign=row.campaign,
        number=row.number,
        campaign_name=row.campaign_name,
        redirect_url=row.redirect_url,
        url=row.url,
        pdf_url=row.pdf_url,
        s3_key=row.s3_key,
        scans=row.scans or 0,
        lat=row.lat,
        long=row.long,
        posted_at=_aware(row.posted_at),
        created_at=_aware(row.created_at),
    )


def _scan_from_row(row: "ScanRow") -> ScanRecord:
    return ScanRecord(
        id=row.id,
        flyer=row.flyer,
        campaign=row.campaign,
        redirect_url=row.redirect_url,
        lat=row.lat,
        long=row.long,
        scan_time=_aware(row.scan_time),
    )


Base = declarative_base()


class UserRow(Base):
    __tablename__ = "users"

    id = Column(String, primary_key=True)
    email = Column(String, nullable=False, unique=True, index=True)
    password_hash = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)


class CampaignRow(Base):
    __tablename__ = "campaigns"

    id = Column(Integer, primary_key=True, autoincrement=True)
    owner = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String(64), nullable=False, unique=True)
    url = Column(String, nullable=False)
    pdf_key = Column(String, nullable=False)
    pdf_url = Column(String, nullable=False)
    merged_pdf_key = Column(String, nullable=True)
    flyers = Column(Integer, nullable=False)
    scans = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False)


class FlyerRow(Base):
    __tablename__ = "flyers"
    __table_args__ = (UniqueConstraint("campaign", "number"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    campaign = Column(Integer, ForeignKey("campaigns.id"), nullable=False, index=True)
    number = Column(Integer, nullable=False)
    campaign_name = Column(String(64), nullable=False, index=True)
    url = Column(String, nullable=True, unique=True)
    redirect_url = Column(String, nullable=False)
    pdf_url = Column(String, nullable=True)
    s3_key = Column(String, nullable=True)
    scans = Column(Integer, nullable=False, default=0)
    lat = Column(Float, nullable=True)
    long = Column(Float, nullable=True)
    posted_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False)


class ScanRow(Base):
    __tablename__ = "scans"

    id = Column(Integer, primary_key=True, autoincrement=True)
    flyer = Column(Integer, ForeignKey("flyers.id"), nullable=False, index=True)
    campaign = Column(Integer, ForeignKey("campaigns.id"), nullable=False, index=True)
    redirect_url = Column(String, nullable=True)
    lat = Column(Float, nullable=True)
    long = Column(Float, nullable=True)
    scan_time = Column(DateTime(timezone=True), nullable=False, index=True)
