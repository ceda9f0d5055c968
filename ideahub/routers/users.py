"""Users router – own profile read / edit."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ideahub.database import commit, get_db
from ideahub.models.user import User
from ideahub.routers.auth import get_current_user
from ideahub.schemas.user import ProfileUpdate, UserOut
from ideahub.services import identity

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("/me", response_model=UserOut)
async def read_me(current_user: User = Depends(get_current_user)):
    """Return the authenticated user's profile."""
    return current_user


@router.put("/me", response_model=UserOut)
async def update_me(
    payload: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Edit name, skills, interests and portfolio."""
    user = await identity.update_profile(
        db, current_user.id, payload.model_dump(exclude_unset=True)
    )
    await commit(db)
    return user
