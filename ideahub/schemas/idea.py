"""Idea Pydantic schemas."""

from datetime import datetime
from typing import Optional

from ideahub.models.idea import ProblemCategory, Visibility
from ideahub.models.idea_role import RoleKind
from ideahub.schemas.base import CamelModel


class IdeaCreate(CamelModel):
    name: str
    description: str
    problem_category: str
    solution: str
    visibility: Optional[str] = None


class IdeaUpdate(CamelModel):
    """Partial update; only the fields present in the body are applied."""
    name: Optional[str] = None
    description: Optional[str] = None
    problem_category: Optional[str] = None
    solution: Optional[str] = None
    visibility: Optional[str] = None


class IdeaOut(CamelModel):
    id: str
    name: str
    description: str
    problem_category: ProblemCategory
    solution: str
    visibility: Visibility
    owner_id: str
    created_at: datetime
    updated_at: datetime
    user_role: Optional[RoleKind] = None
