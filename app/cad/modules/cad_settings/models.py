from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.cad.models import Base


class CadSettings(Base):
    """One row per deployment; created on first access."""

    __tablename__ = "cad_settings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    name: Mapped[str] = mapped_column(String(255), nullable=False, default="My CAD")
    area_of_play: Mapped[str | None] = mapped_column(String(255), nullable=True)
    steam_api_key: Mapped[str | None] = mapped_column(String(255), nullable=True)
    registration_code: Mapped[str | None] = mapped_column(String(255), nullable=True)
    logo_id: Mapped[str | None] = mapped_column(String(255), nullable=True)

    whitelisted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    tow_whitelisted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    taxi_whitelisted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    business_whitelisted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    roleplay_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)
    updated_by_user_id: Mapped[int | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    features: Mapped[list["CadFeature"]] = relationship(
        "CadFeature",
        back_populates="cad",
        cascade="all, delete-orphan",
        lazy="selectin",
    )


class CadFeature(Base):
    __tablename__ = "cad_features"
    __table_args__ = (
        UniqueConstraint("cad_id", "feature", name="uq_cad_features_cad_feature"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    cad_id: Mapped[int] = mapped_column(ForeignKey("cad_settings.id", ondelete="CASCADE"), nullable=False)
    feature: Mapped[str] = mapped_column(String(64), nullable=False)  # see constants.Feature
    is_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    cad: Mapped[CadSettings] = relationship(CadSettings, back_populates="features")
