from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import JSON, Boolean, CheckConstraint, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base


def _uuid() -> str:
    return str(uuid.uuid4())


class User(Base):
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("arch_type IN ('flat','normal','high','unknown')", name="ck_users_arch_type"),
        CheckConstraint("usage IN ('road','trail','treadmill','casual','racing')", name="ck_users_usage"),
        CheckConstraint("weekly_mileage >= 0", name="ck_users_weekly_mileage"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    arch_type: Mapped[str] = mapped_column(String(16), nullable=False)
    usage: Mapped[str] = mapped_column(String(16), nullable=False)
    weekly_mileage: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    scans: Mapped[list["Scan"]] = relationship(back_populates="user", cascade="all, delete-orphan")


class Scan(Base):
    __tablename__ = "scans"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    image_url: Mapped[str] = mapped_column(Text(), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    user: Mapped[User] = relationship(back_populates="scans")
    recommendation: Mapped["Recommendation | None"] = relationship(
        back_populates="scan", uselist=False, cascade="all, delete-orphan"
    )


class Shoe(Base):
    __tablename__ = "shoes"
    __table_args__ = (
        UniqueConstraint("brand", "model", name="uq_shoes_brand_model"),
        CheckConstraint(
            "terrain IN ('road','trail','treadmill','casual','racing','mixed')", name="ck_shoes_terrain"
        ),
        CheckConstraint("stability IN ('neutral','stable','motion_control')", name="ck_shoes_stability"),
        CheckConstraint("cushion IN ('low','medium','high')", name="ck_shoes_cushion"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    brand: Mapped[str] = mapped_column(String(128), nullable=False)
    model: Mapped[str] = mapped_column(String(255), nullable=False)
    terrain: Mapped[str] = mapped_column(String(16), nullable=False)
    stability: Mapped[str] = mapped_column(String(16), nullable=False)
    cushion: Mapped[str] = mapped_column(String(16), nullable=False)
    drop_mm: Mapped[int | None] = mapped_column(Integer, nullable=True)
    weight_g: Mapped[int | None] = mapped_column(Integer, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )


class Recommendation(Base):
    __tablename__ = "recommendations"

    scan_id: Mapped[str] = mapped_column(ForeignKey("scans.id", ondelete="CASCADE"), primary_key=True)
    ranked: Mapped[list] = mapped_column(JSON, nullable=False)
    avoid: Mapped[list] = mapped_column(JSON, nullable=False)
    fallback_needed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    scan: Mapped[Scan] = relationship(back_populates="recommendation")
