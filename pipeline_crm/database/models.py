"""SQLAlchemy tables backing the prospects, activities and files gateway."""

from __future__ import annotations

import uuid
from datetime import date, datetime, timezone
from typing import Any

from sqlalchemy import JSON, Boolean, Date, DateTime, Float, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def utcnow() -> datetime:
    """Timezone-aware UTC timestamp helper."""
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


class Base(DeclarativeBase):
    """Declarative base for the gateway schema."""


class ProspectRecord(Base):
    __tablename__ = "prospects"
    __table_args__ = (
        Index("idx_prospects_created_at", "created_at"),
        Index("idx_prospects_current_stage", "current_stage"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    company_name: Mapped[str] = mapped_column(String(255), nullable=False)
    contact_name: Mapped[str] = mapped_column(String(255), nullable=False)
    contact_email: Mapped[str | None] = mapped_column(String(320))
    contact_phone: Mapped[str | None] = mapped_column(String(64))
    first_contact_date: Mapped[date] = mapped_column(Date, nullable=False)
    assigned_to: Mapped[str] = mapped_column(String(255), nullable=False)
    current_stage: Mapped[int | None] = mapped_column(Integer, default=1)
    stage_progress: Mapped[dict[str, Any] | None] = mapped_column(JSON, default=dict)
    is_lost: Mapped[bool | None] = mapped_column(Boolean, default=False)
    lost_reason: Mapped[str | None] = mapped_column(Text)
    priority_level: Mapped[str | None] = mapped_column(String(20), default="medium")
    estimated_value: Mapped[float | None] = mapped_column(Float)
    expected_close_date: Mapped[date | None] = mapped_column(Date)
    last_action: Mapped[str | None] = mapped_column(Text)
    next_step: Mapped[str | None] = mapped_column(Text)
    tags: Mapped[list[str] | None] = mapped_column(JSON)
    created_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    activities = relationship("ProspectActivityRecord", back_populates="prospect", passive_deletes=True)
    files = relationship("ProspectFileRecord", back_populates="prospect", passive_deletes=True)


class ProspectActivityRecord(Base):
    __tablename__ = "prospect_activities"
    __table_args__ = (Index("idx_prospect_activities_prospect", "prospect_id", "created_at"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    prospect_id: Mapped[str | None] = mapped_column(ForeignKey("prospects.id", ondelete="CASCADE"))
    activity_type: Mapped[str] = mapped_column(String(64), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    stage: Mapped[int | None] = mapped_column(Integer)
    created_by: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), default=utcnow)

    prospect = relationship("ProspectRecord", back_populates="activities")


class ProspectFileRecord(Base):
    __tablename__ = "prospect_files"
    __table_args__ = (Index("idx_prospect_files_prospect", "prospect_id", "uploaded_at"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    prospect_id: Mapped[str | None] = mapped_column(ForeignKey("prospects.id", ondelete="CASCADE"))
    stage: Mapped[int] = mapped_column(Integer, nullable=False)
    file_name: Mapped[str] = mapped_column(String(512), nullable=False)
    file_url: Mapped[str] = mapped_column(Text, nullable=False)
    file_type: Mapped[str | None] = mapped_column(String(255))
    uploaded_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), default=utcnow)

    prospect = relationship("ProspectRecord", back_populates="files")


TABLES = {
    ProspectRecord.__tablename__: ProspectRecord.__table__,
    ProspectActivityRecord.__tablename__: ProspectActivityRecord.__table__,
    ProspectFileRecord.__tablename__: ProspectFileRecord.__table__,
}
