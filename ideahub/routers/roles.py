"""Roles router — manage who holds which stake in an idea."""

from typing import List

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from ideahub.database import commit, get_db
from ideahub.models.user import User
from ideahub.routers.auth import get_current_user
from ideahub.schemas.role import RoleCreate, RoleOut
from ideahub.services import roles as role_service

router = APIRouter(prefix="/api/ideas/{idea_id}/roles", tags=["roles"])


@router.post("", response_model=RoleOut, status_code=status.HTTP_201_CREATED)
async def add_role(
    idea_id: str,
    payload: RoleCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    role = await role_service.assign_role(
        db,
        idea_id,
        current_user.id,
        payload.email,
        payload.role,
        equity_percentage=payload.equity_percentage,
        debt_amount=payload.debt_amount,
        start_date=payload.start_date,
        end_date=payload.end_date,
    )
    await commit(db)
    return role


@router.get("", response_model=List[RoleOut])
async def list_roles(
    idea_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await role_service.list_roles(db, idea_id, current_user.id)


@router.delete("/{role_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_role(
    idea_id: str,
    role_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await role_service.remove_role(db, role_id, current_user.id, idea_id=idea_id)
    await commit(db)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
