"""User model — account plus a light founder profile."""

import json
from datetime import datetime
from typing import List, Optional

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from ideahub.database import Base, new_id, utcnow


class User(Base):
    __tablename__ = "users"

    # ── Identity ──
    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    email: Mapped[str] = mapped_column(
        String(255), unique=True, index=True, nullable=False
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    # Plaintext, compared only through services.identity.check_credentials.
    password: Mapped[str] = mapped_column(String(255), nullable=False)

    # ── Profile (JSON lists stored as Text) ──
    skills_json: Mapped[str] = mapped_column("skills", Text, default="[]")
    interests_json: Mapped[str] = mapped_column("interests", Text, default="[]")
    portfolio: Mapped[Optional[str]] = mapped_column(Text)

    # ── Timestamps ──
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    # ── JSON helpers ──
    @property
    def skills(self) -> List[str]:
        return _load_list(self.skills_json)

    @skills.setter
    def skills(self, value: List[str]) -> None:
        self.skills_json = json.dumps(list(value))

    @property
    def interests(self) -> List[str]:
        return _load_list(self.interests_json)

    @interests.setter
    def interests(self, value: List[str]) -> None:
        self.interests_json = json.dumps(list(value))


def _load_list(raw: Optional[str]) -> List[str]:
    try:
        return json.loads(raw or "[]")
    except (json.JSONDecodeError, TypeError):
        return []
