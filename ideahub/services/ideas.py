"""Idea service — create, list, read and update ideas with visibility rules."""

import logging
from typing import Dict, Iterable, List, Optional

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from ideahub.database import new_id, persist, utcnow
from ideahub.errors import Forbidden, NotFound, ValidationError
from ideahub.models.idea import Idea, ProblemCategory, Visibility
from ideahub.models.idea_role import IdeaRole, RoleKind

logger = logging.getLogger(__name__)

TEXT_FIELDS = ("name", "description", "solution")


def _clean_text(field: str, value) -> str:
    # Blank means missing; anything else is stored as submitted.
    if value is None or not str(value).strip():
        raise ValidationError(f"{field} is required")
    return str(value)


def parse_category(value) -> ProblemCategory:
    try:
        return ProblemCategory(value)
    except ValueError:
        allowed = ", ".join(c.value for c in ProblemCategory)
        raise ValidationError(f"problemCategory must be one of: {allowed}")


def parse_visibility(value) -> Visibility:
    try:
        return Visibility(value)
    except ValueError:
        raise ValidationError("visibility must be 'public' or 'private'")


# ═══════════════════════════════════════════════════════════════
#  Access checks
# ═══════════════════════════════════════════════════════════════

async def holds_role(db: AsyncSession, idea_id: str, user_id: str) -> bool:
    """Return True if the user holds any role on the idea."""
    result = await db.execute(
        select(IdeaRole.id)
        .where(IdeaRole.idea_id == idea_id, IdeaRole.user_id == user_id)
        .limit(1)
    )
    return result.scalar_one_or_none() is not None


async def load_idea(db: AsyncSession, idea_id: str) -> Idea:
    result = await db.execute(select(Idea).where(Idea.id == idea_id))
    idea = result.scalar_one_or_none()
    if not idea:
        raise NotFound("Idea not found")
    return idea


async def ensure_readable(db: AsyncSession, idea: Idea, requester_id: str) -> None:
    if idea.visibility == Visibility.PUBLIC or idea.owner_id == requester_id:
        return
    if await holds_role(db, idea.id, requester_id):
        return
    logger.warning(f"User {requester_id} denied read access to idea {idea.id}")
    raise Forbidden("You do not have access to this idea")


def ensure_owner(idea: Idea, requester_id: str) -> None:
    if idea.owner_id != requester_id:
        logger.warning(f"User {requester_id} is not the owner of idea {idea.id}")
        raise Forbidden("Only the idea owner can do this")


# ═══════════════════════════════════════════════════════════════
#  Operations
# ═══════════════════════════════════════════════════════════════

async def create_idea(
    db: AsyncSession,
    owner_id: str,
    name: str,
    description: str,
    category,
    solution: str,
    visibility=None,
) -> Idea:
    """Create an idea together with its owner's IDEA_OWNER role.

    Both rows are flushed in the caller's transaction, so they are committed
    (or rolled back) together.
    """
    idea = Idea(
        id=new_id(),
        name=_clean_text("name", name),
        description=_clean_text("description", description),
        problem_category=parse_category(category),
        solution=_clean_text("solution", solution),
        visibility=parse_visibility(visibility) if visibility is not None else Visibility.PRIVATE,
        owner_id=owner_id,
    )
    owner_role = IdeaRole(idea_id=idea.id, user_id=owner_id, role=RoleKind.IDEA_OWNER)
    await persist(db, idea)
    await persist(db, owner_role)

    logger.info(f"Idea {idea.id} created by {owner_id}")
    return idea


async def list_ideas_for(db: AsyncSession, user_id: str) -> List[Idea]:
    """Ideas the user owns or holds any role on, newest first."""
    member_of = select(IdeaRole.idea_id).where(IdeaRole.user_id == user_id)
    result = await db.execute(
        select(Idea)
        .where(or_(Idea.owner_id == user_id, Idea.id.in_(member_of)))
        .order_by(Idea.created_at.desc(), Idea.id)
    )
    return list(result.scalars().all())


async def get_idea(db: AsyncSession, idea_id: str, requester_id: str) -> Idea:
    idea = await load_idea(db, idea_id)
    await ensure_readable(db, idea, requester_id)
    return idea


async def update_idea(db: AsyncSession, idea_id: str, requester_id: str, patch: dict) -> Idea:
    """Apply the fields present in ``patch``; others are left untouched.

    No version check: concurrent updates are last-write-wins.
    """
    idea = await load_idea(db, idea_id)
    ensure_owner(idea, requester_id)

    # Validate the whole patch before touching the row.
    changes = {}
    for field in TEXT_FIELDS:
        if field in patch:
            changes[field] = _clean_text(field, patch[field])
    if "problem_category" in patch:
        changes["problem_category"] = parse_category(patch["problem_category"])
    if "visibility" in patch:
        changes["visibility"] = parse_visibility(patch["visibility"])

    for field, value in changes.items():
        setattr(idea, field, value)
    idea.updated_at = utcnow()
    await persist(db, idea)

    logger.info(f"Idea {idea.id} updated by {requester_id}")
    return idea


async def roles_held(db: AsyncSession, user_id: str, idea_ids: Iterable[str]) -> Dict[str, RoleKind]:
    """Map idea id -> the user's role there (IDEA_OWNER first, else the earliest)."""
    idea_ids = list(idea_ids)
    if not idea_ids:
        return {}
    result = await db.execute(
        select(IdeaRole)
        .where(IdeaRole.user_id == user_id, IdeaRole.idea_id.in_(idea_ids))
        .order_by(IdeaRole.created_at)
    )
    held: Dict[str, RoleKind] = {}
    for role in result.scalars().all():
        if role.role == RoleKind.IDEA_OWNER or role.idea_id not in held:
            held[role.idea_id] = role.role
    return held


async def role_held(db: AsyncSession, user_id: str, idea_id: str) -> Optional[RoleKind]:
    return (await roles_held(db, user_id, [idea_id])).get(idea_id)
