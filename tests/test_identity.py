import base64

import pytest

from ideahub.errors import (
    Conflict,
    DuplicateEmail,
    InvalidCredentials,
    Unauthorized,
    ValidationError,
)
from ideahub.services import identity


async def test_sign_up_creates_user_with_empty_profile(db):
    user, token = await identity.sign_up(db, "a@x.com", "pw", "A")

    assert user.id
    assert user.email == "a@x.com"
    assert user.name == "A"
    assert user.skills == []
    assert user.interests == []
    assert user.portfolio is None
    assert user.created_at is not None
    assert identity.resolve_token(token) == user.id


async def test_sign_up_twice_with_same_email_conflicts(db):
    await identity.sign_up(db, "a@x.com", "pw", "A")

    with pytest.raises(DuplicateEmail) as excinfo:
        await identity.sign_up(db, "a@x.com", "other", "Other A")
    assert isinstance(excinfo.value, Conflict)
    assert excinfo.value.status_code == 400


@pytest.mark.parametrize(
    "email,password,name",
    [("", "pw", "A"), ("a@x.com", "", "A"), ("a@x.com", "pw", "   "), ("a@x.com", "pw", None)],
)
async def test_sign_up_requires_every_field(db, email, password, name):
    with pytest.raises(ValidationError):
        await identity.sign_up(db, email, password, name)


async def test_log_in_token_resolves_to_same_user(db, alice):
    user, token = await identity.log_in(db, "alice@example.com", "pw-alice")

    assert user.id == alice.id
    assert identity.resolve_token(token) == alice.id


async def test_log_in_does_not_reveal_which_field_was_wrong(db, alice):
    with pytest.raises(InvalidCredentials) as wrong_password:
        await identity.log_in(db, "alice@example.com", "nope")
    with pytest.raises(InvalidCredentials) as unknown_email:
        await identity.log_in(db, "nobody@example.com", "pw-alice")

    assert wrong_password.value.message == unknown_email.value.message
    assert wrong_password.value.status_code == 401


async def test_log_in_requires_both_fields(db):
    with pytest.raises(ValidationError):
        await identity.log_in(db, "alice@example.com", "")


def test_check_credentials_is_exact():
    assert identity.check_credentials("secret", "secret")
    assert not identity.check_credentials("secret", "Secret")
    assert not identity.check_credentials("secret", "secret ")


def test_base64_token_is_reversible_encoding_of_id():
    token = identity.issue_token("abc123", scheme="base64")

    assert base64.b64decode(token).decode() == "abc123"
    assert identity.resolve_token(token, scheme="base64") == "abc123"


@pytest.mark.parametrize("token", ["", "not base64!", "//79"])
def test_malformed_base64_token_is_unauthorized(token):
    with pytest.raises(Unauthorized):
        identity.resolve_token(token, scheme="base64")


def test_jwt_token_round_trip():
    token = identity.issue_token("abc123", scheme="jwt")

    assert identity.resolve_token(token, scheme="jwt") == "abc123"


def test_jwt_scheme_rejects_tampered_and_unsigned_tokens():
    token = identity.issue_token("abc123", scheme="jwt")
    header, payload, signature = token.split(".")
    tampered = ".".join([header, payload, signature[::-1]])

    with pytest.raises(Unauthorized):
        identity.resolve_token(tampered, scheme="jwt")
    with pytest.raises(Unauthorized):
        identity.resolve_token(identity.issue_token("abc123", scheme="base64"), scheme="jwt")


async def test_update_profile_changes_only_given_fields(db, alice):
    before = alice.updated_at

    user = await identity.update_profile(
        db, alice.id, {"skills": ["python", " sql ", ""], "portfolio": "https://a.dev"}
    )

    assert user.skills == ["python", "sql"]
    assert user.interests == []
    assert user.portfolio == "https://a.dev"
    assert user.name == "Alice"
    assert user.updated_at >= before


async def test_update_profile_rejects_empty_name(db, alice):
    with pytest.raises(ValidationError):
        await identity.update_profile(db, alice.id, {"name": ""})
