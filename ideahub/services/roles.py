"""Role service — assign collaborators to ideas under kind-specific terms."""

import logging
from datetime import date
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ideahub.database import flush, persist
from ideahub.errors import Conflict, NotFound, ValidationError
from ideahub.models.idea_role import IdeaRole, RoleKind
from ideahub.schemas.role import (
    ContractTerms,
    DebtTerms,
    EquityTerms,
    OwnerTerms,
    RoleTerms,
    ViewerTerms,
)
from ideahub.services import ideas as idea_service
from ideahub.services.identity import find_user_by_email

logger = logging.getLogger(__name__)

MAX_EQUITY = Decimal("100")
MAX_DEBT = Decimal("999999999999.99")
# Both term columns are stored at two decimal places.
CENT = Decimal("0.01")

# Which optional detail fields each kind accepts.
_DETAIL_FIELDS = {
    RoleKind.EQUITY_OWNER: {"equity_percentage"},
    RoleKind.DEBT_FINANCIER: {"debt_amount"},
    RoleKind.CONTRACTOR: {"start_date", "end_date"},
    RoleKind.VIEWER: set(),
}


# ═══════════════════════════════════════════════════════════════
#  Terms
# ═══════════════════════════════════════════════════════════════

def terms_from_fields(
    kind,
    equity_percentage: Optional[Decimal] = None,
    debt_amount: Optional[Decimal] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> RoleTerms:
    """Build the terms variant for ``kind`` from flat form fields."""
    try:
        kind = RoleKind(kind)
    except ValueError:
        raise ValidationError(f"Unknown role: {kind}")
    if kind == RoleKind.IDEA_OWNER:
        raise ValidationError("The idea owner role cannot be assigned")

    supplied = {
        name
        for name, value in (
            ("equity_percentage", equity_percentage),
            ("debt_amount", debt_amount),
            ("start_date", start_date),
            ("end_date", end_date),
        )
        if value is not None
    }
    stray = supplied - _DETAIL_FIELDS[kind]
    if stray:
        raise ValidationError(
            f"{kind.value} does not take: {', '.join(sorted(stray))}"
        )

    if kind == RoleKind.EQUITY_OWNER:
        if equity_percentage is None:
            raise ValidationError("Equity percentage is required for equity owners")
        return EquityTerms(equity_percentage=equity_percentage)
    if kind == RoleKind.DEBT_FINANCIER:
        if debt_amount is None:
            raise ValidationError("Debt amount is required for debt financiers")
        return DebtTerms(debt_amount=debt_amount)
    if kind == RoleKind.CONTRACTOR:
        if start_date is None:
            raise ValidationError("Start date is required for contractors")
        return ContractTerms(start_date=start_date, end_date=end_date)
    return ViewerTerms()


def _check_places(value: Decimal, label: str) -> None:
    if value != value.quantize(CENT):
        raise ValidationError(f"{label} can have at most two decimal places")


def check_terms(terms: RoleTerms) -> None:
    """Range and precision checks for the kind-specific details."""
    if isinstance(terms, EquityTerms):
        if not Decimal("0") < terms.equity_percentage <= MAX_EQUITY:
            raise ValidationError("Equity percentage must be greater than 0 and at most 100")
        _check_places(terms.equity_percentage, "Equity percentage")
    elif isinstance(terms, DebtTerms):
        if terms.debt_amount <= 0:
            raise ValidationError("Debt amount must be positive")
        if terms.debt_amount > MAX_DEBT:
            raise ValidationError("Debt amount is too large")
        _check_places(terms.debt_amount, "Debt amount")
    elif isinstance(terms, ContractTerms):
        if terms.end_date is not None and terms.end_date < terms.start_date:
            raise ValidationError("End date cannot be before start date")
    elif isinstance(terms, OwnerTerms):
        raise ValidationError("The idea owner role cannot be assigned")


def terms_of(role: IdeaRole) -> RoleTerms:
    """Read the stored row back as its terms variant."""
    if role.role == RoleKind.EQUITY_OWNER:
        return EquityTerms(equity_percentage=role.equity_percentage)
    if role.role == RoleKind.DEBT_FINANCIER:
        return DebtTerms(debt_amount=role.debt_amount)
    if role.role == RoleKind.CONTRACTOR:
        return ContractTerms(start_date=role.start_date, end_date=role.end_date)
    if role.role == RoleKind.IDEA_OWNER:
        return OwnerTerms()
    return ViewerTerms()


def _apply_terms(role: IdeaRole, terms: RoleTerms) -> None:
    role.role = terms.kind
    role.equity_percentage = getattr(terms, "equity_percentage", None)
    role.debt_amount = getattr(terms, "debt_amount", None)
    role.start_date = getattr(terms, "start_date", None)
    role.end_date = getattr(terms, "end_date", None)


# ═══════════════════════════════════════════════════════════════
#  Operations
# ═══════════════════════════════════════════════════════════════

async def _add_role(db: AsyncSession, idea, target_email: str, terms: RoleTerms) -> IdeaRole:
    check_terms(terms)

    target = await find_user_by_email(db, target_email) if target_email else None
    if not target:
        raise NotFound("No user with that email")

    role = IdeaRole(idea_id=idea.id, user_id=target.id)
    _apply_terms(role, terms)
    role.user = target
    await persist(db, role)

    logger.info(f"Role {role.role.value} on idea {idea.id} given to {target.id}")
    return role


async def add_role(
    db: AsyncSession,
    idea_id: str,
    requester_id: str,
    target_email: str,
    terms: RoleTerms,
) -> IdeaRole:
    """Assign the user with ``target_email`` to the idea.

    The same user may hold several roles, including several of one kind.
    """
    idea = await idea_service.load_idea(db, idea_id)
    idea_service.ensure_owner(idea, requester_id)
    return await _add_role(db, idea, target_email, terms)


async def remove_role(
    db: AsyncSession,
    role_id: str,
    requester_id: str,
    idea_id: Optional[str] = None,
) -> None:
    """Delete a role. ``idea_id``, when given, must be the role's idea."""
    result = await db.execute(select(IdeaRole).where(IdeaRole.id == role_id))
    role = result.scalar_one_or_none()
    if not role or (idea_id is not None and role.idea_id != idea_id):
        raise NotFound("Role not found")

    idea = await idea_service.load_idea(db, role.idea_id)
    idea_service.ensure_owner(idea, requester_id)

    if role.role == RoleKind.IDEA_OWNER and role.user_id == idea.owner_id:
        raise Conflict("The owner's role on an idea cannot be removed")

    await db.delete(role)
    await flush(db)
    logger.info(f"Role {role.id} removed from idea {idea.id}")


async def list_roles(db: AsyncSession, idea_id: str, requester_id: str) -> List[IdeaRole]:
    idea = await idea_service.get_idea(db, idea_id, requester_id)
    result = await db.execute(
        select(IdeaRole)
        .where(IdeaRole.idea_id == idea.id)
        .order_by(IdeaRole.created_at, IdeaRole.id)
        .execution_options(populate_existing=True)
    )
    return list(result.scalars().all())


async def assign_role(
    db: AsyncSession,
    idea_id: str,
    requester_id: str,
    target_email: str,
    kind,
    **details,
) -> IdeaRole:
    """``add_role`` for flat form input: ownership is checked before the terms."""
    idea = await idea_service.load_idea(db, idea_id)
    idea_service.ensure_owner(idea, requester_id)
    terms = terms_from_fields(kind, **details)
    return await _add_role(db, idea, target_email, terms)
