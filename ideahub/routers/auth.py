"""
Authentication router — email/password signup and login + bearer tokens.

Endpoints:
    POST /api/auth/signup   → create an account, return user + token
    POST /api/auth/login    → check credentials, return user + token
"""

from typing import Optional

from fastapi import APIRouter, Depends, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from ideahub.database import commit, get_db
from ideahub.errors import NotFound, Unauthorized
from ideahub.models.user import User
from ideahub.schemas.user import AuthOut, UserCreate, UserLogin, UserOut
from ideahub.services import identity

router = APIRouter(prefix="/api/auth", tags=["auth"])

bearer_scheme = HTTPBearer(auto_error=False)


# ═══════════════════════════════════════════════════════════════
#  Helpers
# ═══════════════════════════════════════════════════════════════

async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Resolve the bearer token into a User.
    Raises Unauthorized when the token is missing, malformed, or names
    an account that no longer exists.
    """
    if not credentials or not credentials.credentials:
        raise Unauthorized()

    user_id = identity.resolve_token(credentials.credentials)
    try:
        return await identity.get_user(db, user_id)
    except NotFound:
        raise Unauthorized("Invalid token")


# ═══════════════════════════════════════════════════════════════
#  Routes
# ═══════════════════════════════════════════════════════════════

@router.post("/signup", response_model=AuthOut, status_code=status.HTTP_201_CREATED)
async def signup(payload: UserCreate, db: AsyncSession = Depends(get_db)):
    user, token = await identity.sign_up(db, payload.email, payload.password, payload.name)
    await commit(db)
    return AuthOut(user=UserOut.model_validate(user), token=token)


@router.post("/login", response_model=AuthOut)
async def login(payload: UserLogin, db: AsyncSession = Depends(get_db)):
    user, token = await identity.log_in(db, payload.email, payload.password)
    return AuthOut(user=UserOut.model_validate(user), token=token)
