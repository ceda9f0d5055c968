"""Idea model — a tracked startup proposal owned by one user."""

import enum
from datetime import datetime

from sqlalchemy import DateTime, Enum, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from ideahub.database import Base, new_id, utcnow


class ProblemCategory(str, enum.Enum):
    TECHNOLOGY = "Technology"
    HEALTHCARE = "Healthcare"
    EDUCATION = "Education"
    ENVIRONMENT = "Environment"
    FINANCE = "Finance"
    SOCIAL_IMPACT = "Social Impact"
    ENTERTAINMENT = "Entertainment"
    OTHER = "Other"


class Visibility(str, enum.Enum):
    PUBLIC = "public"
    PRIVATE = "private"


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class Idea(Base):
    __tablename__ = "ideas"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(300), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    problem_category: Mapped[ProblemCategory] = mapped_column(
        Enum(ProblemCategory, values_callable=_enum_values, native_enum=False),
        nullable=False,
    )
    solution: Mapped[str] = mapped_column(Text, nullable=False)
    visibility: Mapped[Visibility] = mapped_column(
        Enum(Visibility, values_callable=_enum_values, native_enum=False),
        default=Visibility.PRIVATE,
    )

    owner_id: Mapped[str] = mapped_column(
        ForeignKey("users.id"), index=True, nullable=False
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )
