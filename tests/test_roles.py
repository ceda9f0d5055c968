from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import event

from ideahub.errors import Conflict, Forbidden, NotFound, ValidationError
from ideahub.models.idea_role import RoleKind
from ideahub.schemas.role import (
    ContractTerms,
    DebtTerms,
    EquityTerms,
    OwnerTerms,
    ViewerTerms,
)
from ideahub.services import ideas as idea_service
from ideahub.services import roles as role_service


@pytest.fixture
async def idea(db, alice):
    return await idea_service.create_idea(
        db, alice.id, "Tool library", "Borrow instead of buy", "Other", "Neighbourhood lockers"
    )


@pytest.mark.parametrize("percentage", [0, -5, 150, Decimal("100.01")])
async def test_equity_out_of_range_is_rejected(db, alice, bob, idea, percentage):
    with pytest.raises(ValidationError):
        await role_service.add_role(
            db, idea.id, alice.id, bob.email, EquityTerms(equity_percentage=percentage)
        )


async def test_equity_owner_is_added(db, alice, bob, idea):
    role = await role_service.add_role(
        db, idea.id, alice.id, bob.email, EquityTerms(equity_percentage=25)
    )

    assert role.role == RoleKind.EQUITY_OWNER
    assert role.user_id == bob.id
    assert role.equity_percentage == Decimal("25")
    assert role.debt_amount is None
    assert role.start_date is None


async def test_full_equity_is_allowed(db, alice, bob, idea):
    role = await role_service.add_role(
        db, idea.id, alice.id, bob.email, EquityTerms(equity_percentage=100)
    )
    assert role.equity_percentage == Decimal("100")


@pytest.mark.parametrize(
    "terms",
    [
        EquityTerms(equity_percentage=Decimal("25.555")),
        DebtTerms(debt_amount=Decimal("10.001")),
        DebtTerms(debt_amount=Decimal("1000000000000")),
    ],
)
async def test_terms_beyond_stored_precision_are_rejected(db, alice, bob, idea, terms):
    with pytest.raises(ValidationError):
        await role_service.add_role(db, idea.id, alice.id, bob.email, terms)


async def test_stored_terms_match_what_was_accepted(db, alice, bob, idea):
    await role_service.add_role(
        db, idea.id, alice.id, bob.email, EquityTerms(equity_percentage=Decimal("25.550"))
    )
    idea_id, alice_id = idea.id, alice.id
    db.expire_all()

    roles = await role_service.list_roles(db, idea_id, alice_id)
    [equity] = [r for r in roles if r.role == RoleKind.EQUITY_OWNER]
    assert equity.equity_percentage == Decimal("25.55")


async def test_debt_must_be_positive(db, alice, bob, idea):
    with pytest.raises(ValidationError):
        await role_service.add_role(db, idea.id, alice.id, bob.email, DebtTerms(debt_amount=0))

    role = await role_service.add_role(
        db, idea.id, alice.id, bob.email, DebtTerms(debt_amount=Decimal("50000"))
    )
    assert role_service.terms_of(role) == DebtTerms(debt_amount=Decimal("50000"))


async def test_contract_end_cannot_precede_start(db, alice, bob, idea):
    with pytest.raises(ValidationError):
        await role_service.add_role(
            db,
            idea.id,
            alice.id,
            bob.email,
            ContractTerms(start_date=date(2024, 5, 1), end_date=date(2024, 4, 30)),
        )


async def test_same_user_may_hold_several_contracts(db, alice, bob, idea):
    for start in (date(2024, 1, 1), date(2024, 6, 1)):
        await role_service.add_role(
            db, idea.id, alice.id, bob.email, ContractTerms(start_date=start)
        )

    roles = await role_service.list_roles(db, idea.id, alice.id)
    contracts = [r for r in roles if r.role == RoleKind.CONTRACTOR]
    assert len(contracts) == 2
    assert all(r.user.email == bob.email for r in contracts)


async def test_owner_terms_cannot_be_assigned(db, alice, bob, idea):
    with pytest.raises(ValidationError):
        await role_service.add_role(db, idea.id, alice.id, bob.email, OwnerTerms())


async def test_only_owner_adds_roles(db, alice, bob, idea):
    with pytest.raises(Forbidden):
        await role_service.add_role(db, idea.id, bob.id, alice.email, ViewerTerms())


async def test_unknown_target_email_is_not_found(db, alice, idea):
    with pytest.raises(NotFound):
        await role_service.add_role(db, idea.id, alice.id, "ghost@example.com", ViewerTerms())


async def test_non_owner_with_bad_terms_is_forbidden_first(db, alice, bob, idea):
    with pytest.raises(Forbidden):
        await role_service.assign_role(
            db, idea.id, bob.id, alice.email, "EQUITY_OWNER", equity_percentage=None
        )


async def test_assign_role_looks_up_the_idea_once(db, alice, bob, idea):
    statements = []

    def record(conn, cursor, statement, parameters, context, executemany):
        statements.append(statement)

    engine = db.bind.sync_engine
    event.listen(engine, "before_cursor_execute", record)
    try:
        role = await role_service.assign_role(
            db, idea.id, alice.id, bob.email, "DEBT_FINANCIER", debt_amount=Decimal("5000")
        )
    finally:
        event.remove(engine, "before_cursor_execute", record)

    assert role.role == RoleKind.DEBT_FINANCIER
    assert role.debt_amount == Decimal("5000")
    assert len([s for s in statements if "FROM ideas" in s]) == 1


def test_terms_from_fields_builds_matching_variant():
    assert role_service.terms_from_fields("VIEWER") == ViewerTerms()
    assert role_service.terms_from_fields(
        "CONTRACTOR", start_date=date(2024, 1, 1)
    ) == ContractTerms(start_date=date(2024, 1, 1))
    assert role_service.terms_from_fields(
        "EQUITY_OWNER", equity_percentage=Decimal("12.5")
    ) == EquityTerms(equity_percentage=Decimal("12.5"))


@pytest.mark.parametrize(
    "kind,details",
    [
        ("EQUITY_OWNER", {}),
        ("DEBT_FINANCIER", {}),
        ("CONTRACTOR", {"end_date": date(2024, 1, 1)}),
        ("VIEWER", {"debt_amount": Decimal("10")}),
        ("EQUITY_OWNER", {"equity_percentage": Decimal("10"), "debt_amount": Decimal("10")}),
        ("IDEA_OWNER", {}),
        ("JANITOR", {}),
    ],
)
def test_terms_from_fields_rejects_missing_or_foreign_details(kind, details):
    with pytest.raises(ValidationError):
        role_service.terms_from_fields(kind, **details)


async def test_owner_role_cannot_be_removed(db, alice, idea):
    [owner_role] = await role_service.list_roles(db, idea.id, alice.id)

    with pytest.raises(Conflict):
        await role_service.remove_role(db, owner_role.id, alice.id)


async def test_owner_removes_a_role(db, alice, bob, idea):
    role = await role_service.add_role(db, idea.id, alice.id, bob.email, ViewerTerms())

    await role_service.remove_role(db, role.id, alice.id)

    roles = await role_service.list_roles(db, idea.id, alice.id)
    assert [r.role for r in roles] == [RoleKind.IDEA_OWNER]
    with pytest.raises(Forbidden):
        await idea_service.get_idea(db, idea.id, bob.id)


async def test_only_owner_removes_roles(db, alice, bob, idea):
    role = await role_service.add_role(db, idea.id, alice.id, bob.email, ViewerTerms())

    with pytest.raises(Forbidden):
        await role_service.remove_role(db, role.id, bob.id)


async def test_remove_missing_role_is_not_found(db, alice, idea):
    with pytest.raises(NotFound):
        await role_service.remove_role(db, "missing", alice.id)


async def test_remove_role_under_another_idea_is_not_found(db, alice, bob, idea):
    other = await idea_service.create_idea(db, alice.id, "Other", "d", "Finance", "s")
    role = await role_service.add_role(db, other.id, alice.id, bob.email, ViewerTerms())

    with pytest.raises(NotFound):
        await role_service.remove_role(db, role.id, alice.id, idea_id=idea.id)


async def test_list_roles_follows_idea_visibility(db, alice, bob, idea):
    with pytest.raises(Forbidden):
        await role_service.list_roles(db, idea.id, bob.id)
