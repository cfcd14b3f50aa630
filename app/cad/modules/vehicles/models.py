from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.cad.models import Base
from app.cad.modules.citizens.models import Citizen
from app.cad.modules.values.models import Value


class RegisteredVehicle(Base):
    __tablename__ = "registered_vehicles"
    __table_args__ = (
        Index("idx_registered_vehicles_plate", "plate"),
        Index("idx_registered_vehicles_user", "user_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    plate: Mapped[str] = mapped_column(String(32), nullable=False, unique=True)
    color: Mapped[str | None] = mapped_column(String(64), nullable=True)

    model_id: Mapped[int] = mapped_column(ForeignKey("cad_values.id", ondelete="RESTRICT"), nullable=False)
    citizen_id: Mapped[int] = mapped_column(ForeignKey("citizens.id", ondelete="CASCADE"), nullable=False)
    user_id: Mapped[int | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)

    model: Mapped[Value] = relationship(Value, lazy="joined")
    citizen: Mapped[Citizen] = relationship(Citizen, lazy="joined")
