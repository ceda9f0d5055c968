"""IdeaRole model — a user's stake in an idea (the ``idea_users`` table)."""

import enum
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import Date, DateTime, Enum, ForeignKey, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ideahub.database import Base, new_id, utcnow


class RoleKind(str, enum.Enum):
    IDEA_OWNER = "IDEA_OWNER"
    EQUITY_OWNER = "EQUITY_OWNER"
    DEBT_FINANCIER = "DEBT_FINANCIER"
    CONTRACTOR = "CONTRACTOR"
    VIEWER = "VIEWER"


class IdeaRole(Base):
    __tablename__ = "idea_users"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    idea_id: Mapped[str] = mapped_column(
        ForeignKey("ideas.id", ondelete="CASCADE"), index=True, nullable=False
    )
    user_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False
    )

    role: Mapped[RoleKind] = mapped_column(Enum(RoleKind), nullable=False)

    # ── Kind-specific terms (only the columns of ``role`` are ever set) ──
    equity_percentage: Mapped[Optional[Decimal]] = mapped_column(Numeric(5, 2))
    debt_amount: Mapped[Optional[Decimal]] = mapped_column(Numeric(14, 2))
    start_date: Mapped[Optional[date]] = mapped_column(Date)
    end_date: Mapped[Optional[date]] = mapped_column(Date)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    # ── Relationship to the holder ──
    user: Mapped["User"] = relationship("User", lazy="selectin")  # noqa: F821
