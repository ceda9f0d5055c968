"""
Identity service — signup, login, tokens, profile edits.

Tokens come in two flavours, picked by ``settings.TOKEN_SCHEME``:

* ``base64``: the legacy scheme, a plain base64 encoding of the user id.
  It carries no signature or expiry and anyone who knows an id can mint one,
  so it is only fit for local development and tests.
* ``jwt``: an HS256-signed JWT with ``sub`` and ``exp`` claims.
"""

import base64
import binascii
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple

from jose import JWTError, jwt
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ideahub.config import settings
from ideahub.database import persist, utcnow
from ideahub.errors import (
    DuplicateEmail,
    InvalidCredentials,
    NotFound,
    StoreError,
    Unauthorized,
    ValidationError,
)
from ideahub.models.user import User

logger = logging.getLogger(__name__)

TOKEN_SCHEMES = {"base64", "jwt"}


# ═══════════════════════════════════════════════════════════════
#  Credentials & tokens
# ═══════════════════════════════════════════════════════════════

def check_credentials(stored: str, supplied: str) -> bool:
    """The one place a stored credential is compared with a supplied one.

    Plaintext equality; swap this for a hash check to change the storage
    scheme without touching callers.
    """
    return stored == supplied


def issue_token(user_id: str, scheme: Optional[str] = None) -> str:
    scheme = scheme or settings.TOKEN_SCHEME
    if scheme == "jwt":
        expire = datetime.now(timezone.utc) + timedelta(
            minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES
        )
        claims = {"sub": user_id, "exp": expire}
        return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
    if scheme == "base64":
        return base64.b64encode(user_id.encode("utf-8")).decode("ascii")
    raise ValueError(f"Unknown token scheme: {scheme}")


def resolve_token(token: str, scheme: Optional[str] = None) -> str:
    """Decode a token back into the user id it was issued for."""
    if not token:
        raise Unauthorized()
    scheme = scheme or settings.TOKEN_SCHEME

    if scheme == "jwt":
        try:
            payload = jwt.decode(
                token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM]
            )
        except JWTError:
            raise Unauthorized("Invalid token")
        user_id = payload.get("sub")
    elif scheme == "base64":
        try:
            user_id = base64.b64decode(token, validate=True).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError):
            raise Unauthorized("Invalid token")
    else:
        raise ValueError(f"Unknown token scheme: {scheme}")

    if not user_id:
        raise Unauthorized("Invalid token")
    return user_id


# ═══════════════════════════════════════════════════════════════
#  Users
# ═══════════════════════════════════════════════════════════════

def _require(**fields) -> None:
    missing = [name for name, value in fields.items() if not value or not str(value).strip()]
    if missing:
        raise ValidationError("All fields are required")


async def get_user(db: AsyncSession, user_id: str) -> User:
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if not user:
        raise NotFound("User not found")
    return user


async def find_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
    result = await db.execute(select(User).where(User.email == email))
    return result.scalar_one_or_none()


async def sign_up(db: AsyncSession, email: str, password: str, name: str) -> Tuple[User, str]:
    _require(email=email, password=password, name=name)

    if await find_user_by_email(db, email):
        raise DuplicateEmail()

    user = User(email=email, password=password, name=name)
    user.skills = []
    user.interests = []
    db.add(user)
    try:
        await db.flush()
    except IntegrityError as exc:
        # Lost a race with a concurrent signup for the same email.
        raise DuplicateEmail() from exc
    except SQLAlchemyError as exc:
        logger.exception("Signup flush failed")
        raise StoreError() from exc

    logger.info(f"New user signed up: {user.id}")
    return user, issue_token(user.id)


async def log_in(db: AsyncSession, email: str, password: str) -> Tuple[User, str]:
    if not email or not password:
        raise ValidationError("Email and password are required")

    user = await find_user_by_email(db, email)
    # Same error for unknown email and wrong password.
    if not user or not check_credentials(user.password, password):
        logger.warning("Failed login attempt")
        raise InvalidCredentials()

    logger.info(f"User logged in: {user.id}")
    return user, issue_token(user.id)


async def update_profile(db: AsyncSession, user_id: str, patch: dict) -> User:
    user = await get_user(db, user_id)

    if "name" in patch:
        name = patch["name"]
        if not name or not name.strip():
            raise ValidationError("Name cannot be empty")
        user.name = name
    if patch.get("skills") is not None:
        user.skills = [s.strip() for s in patch["skills"] if s and s.strip()]
    if patch.get("interests") is not None:
        user.interests = [i.strip() for i in patch["interests"] if i and i.strip()]
    if "portfolio" in patch:
        user.portfolio = patch["portfolio"] or None

    user.updated_at = utcnow()
    await persist(db, user)
    return user
