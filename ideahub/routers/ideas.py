"""
Ideas router — JSON CRUD over the caller's ideas.

Endpoints:
    POST /api/ideas          → create an idea (caller becomes owner)
    GET  /api/ideas          → ideas the caller owns or holds a role on
    GET  /api/ideas/{id}     → one idea, subject to visibility
    PUT  /api/ideas/{id}     → owner-only partial update
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from ideahub.database import commit, get_db
from ideahub.models.idea import Idea
from ideahub.models.idea_role import RoleKind
from ideahub.models.user import User
from ideahub.routers.auth import get_current_user
from ideahub.schemas.idea import IdeaCreate, IdeaOut, IdeaUpdate
from ideahub.services import ideas as idea_service

router = APIRouter(prefix="/api/ideas", tags=["ideas"])


def _to_out(idea: Idea, user_role: Optional[RoleKind]) -> IdeaOut:
    out = IdeaOut.model_validate(idea)
    out.user_role = user_role
    return out


@router.post("", response_model=IdeaOut, status_code=status.HTTP_201_CREATED)
async def create_idea(
    payload: IdeaCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    idea = await idea_service.create_idea(
        db,
        owner_id=current_user.id,
        name=payload.name,
        description=payload.description,
        category=payload.problem_category,
        solution=payload.solution,
        visibility=payload.visibility,
    )
    await commit(db)
    return _to_out(idea, RoleKind.IDEA_OWNER)


@router.get("", response_model=List[IdeaOut])
async def list_ideas(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    ideas = await idea_service.list_ideas_for(db, current_user.id)
    held = await idea_service.roles_held(db, current_user.id, [i.id for i in ideas])
    return [_to_out(idea, held.get(idea.id)) for idea in ideas]


@router.get("/{idea_id}", response_model=IdeaOut)
async def read_idea(
    idea_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    idea = await idea_service.get_idea(db, idea_id, current_user.id)
    return _to_out(idea, await idea_service.role_held(db, current_user.id, idea.id))


@router.put("/{idea_id}", response_model=IdeaOut)
async def update_idea(
    idea_id: str,
    payload: IdeaUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    idea = await idea_service.update_idea(
        db, idea_id, current_user.id, payload.model_dump(exclude_unset=True)
    )
    await commit(db)
    return _to_out(idea, await idea_service.role_held(db, current_user.id, idea.id))
