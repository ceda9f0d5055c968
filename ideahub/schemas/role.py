"""IdeaRole Pydantic schemas and the kind-tagged role terms."""

from datetime import date, datetime
from decimal import Decimal
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field, field_serializer

from ideahub.models.idea_role import RoleKind
from ideahub.schemas.base import CamelModel


# ═══════════════════════════════════════════════════════════════
#  Role terms: one variant per role kind
# ═══════════════════════════════════════════════════════════════

class OwnerTerms(BaseModel):
    kind: Literal[RoleKind.IDEA_OWNER] = RoleKind.IDEA_OWNER


class EquityTerms(BaseModel):
    kind: Literal[RoleKind.EQUITY_OWNER] = RoleKind.EQUITY_OWNER
    equity_percentage: Decimal


class DebtTerms(BaseModel):
    kind: Literal[RoleKind.DEBT_FINANCIER] = RoleKind.DEBT_FINANCIER
    debt_amount: Decimal


class ContractTerms(BaseModel):
    kind: Literal[RoleKind.CONTRACTOR] = RoleKind.CONTRACTOR
    start_date: date
    end_date: Optional[date] = None


class ViewerTerms(BaseModel):
    kind: Literal[RoleKind.VIEWER] = RoleKind.VIEWER


RoleTerms = Annotated[
    Union[OwnerTerms, EquityTerms, DebtTerms, ContractTerms, ViewerTerms],
    Field(discriminator="kind"),
]


# ═══════════════════════════════════════════════════════════════
#  API payloads
# ═══════════════════════════════════════════════════════════════

class RoleCreate(CamelModel):
    """Flat form body; turned into a RoleTerms variant by the role service."""
    email: str
    role: str
    equity_percentage: Optional[Decimal] = None
    debt_amount: Optional[Decimal] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class RoleHolderOut(CamelModel):
    id: str
    email: str
    name: str


class RoleOut(CamelModel):
    id: str
    idea_id: str
    user_id: str
    role: RoleKind
    equity_percentage: Optional[Decimal] = None
    debt_amount: Optional[Decimal] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    created_at: datetime
    updated_at: datetime
    user: RoleHolderOut

    @field_serializer("equity_percentage", "debt_amount")
    def _as_number(self, value: Optional[Decimal]) -> Optional[float]:
        return float(value) if value is not None else None
