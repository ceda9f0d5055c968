"""
IdeaHub – SQLAlchemy ORM models package.

Imports all model classes so the schema bootstrap can discover them
through a single ``import ideahub.models``.
"""

from ideahub.models.user import User                        # noqa: F401
from ideahub.models.idea import Idea, ProblemCategory, Visibility  # noqa: F401
from ideahub.models.idea_role import IdeaRole, RoleKind     # noqa: F401
