from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from app.cad.models import Base


class Citizen(Base):
    __tablename__ = "citizens"
    __table_args__ = (
        Index("idx_citizens_name", "name", "surname"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    # Citizens created by admins for NPCs have no linked user.
    user_id: Mapped[int | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    surname: Mapped[str] = mapped_column(String(255), nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)

    @property
    def full_name(self) -> str:
        return f"{self.name} {self.surname}".strip()
