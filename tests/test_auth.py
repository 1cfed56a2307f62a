import pytest

from auth import (
    EXACT,
    MIN,
    Identity,
    authorize,
    current_user_from_header,
    issue_token,
    require_role,
    verify_token,
)
from errors import DuplicateUsername, InvalidCredentials, InvalidRole, InvalidToken, Unauthorized, ValidationFailed
from schemas import Role

from conftest import PASSWORD


def user_with(role):
    return {"id": "1", "username": "someone", "role": int(role)}


@pytest.mark.parametrize("role", list(Role))
def test_min_mode_compares_role_order(role):
    assert authorize(user_with(role), Role.CHEF, MIN) == (role >= Role.CHEF)


@pytest.mark.parametrize("role", list(Role))
def test_exact_mode_only_matches_same_level(role):
    assert authorize(user_with(role), Role.OWNER, EXACT) == (role == Role.OWNER)


def test_anonymous_is_always_denied():
    assert not authorize(None, Role.CUSTOMER, MIN)
    with pytest.raises(Unauthorized):
        require_role(None, Role.CUSTOMER)


def test_unknown_stored_role_is_denied():
    assert not authorize({"id": "1", "username": "x", "role": 42}, Role.CUSTOMER, MIN)


def test_require_role_returns_user_when_allowed():
    chef = user_with(Role.CHEF)
    assert require_role(chef, Role.WAITER) is chef


def test_token_round_trip():
    claim = Identity(username="alice", id="64b7f0c2a1e4d3b2c1a09f8e")
    assert verify_token(issue_token(claim)) == claim


def test_issue_is_deterministic():
    claim = Identity(username="alice", id="1")
    assert issue_token(claim) == issue_token(claim)


def test_tampered_token_is_rejected():
    header, payload, signature = issue_token(Identity(username="alice", id="1")).split(".")
    swapped = "A" if payload[0] != "A" else "B"
    with pytest.raises(InvalidToken):
        verify_token(".".join([header, swapped + payload[1:], signature]))


def test_token_signed_with_other_secret_is_rejected():
    token = issue_token(Identity(username="alice", id="1"), secret="another-secret")
    with pytest.raises(InvalidToken):
        verify_token(token)


def test_garbage_token_is_rejected():
    with pytest.raises(InvalidToken):
        verify_token("not-a-token")


def test_missing_or_non_bearer_header_is_anonymous(users):
    assert current_user_from_header(None, users) is None
    assert current_user_from_header("", users) is None
    assert current_user_from_header("Basic dXNlcjpwYXNz", users) is None


def test_bearer_header_resolves_user(users):
    created = users.create_user("alice", PASSWORD, Role.CHEF)
    token = users.login("alice", PASSWORD)
    assert current_user_from_header(f"Bearer {token}", users) == created
    assert current_user_from_header(f"bearer {token}", users) == created


def test_invalid_bearer_token_raises(users):
    with pytest.raises(InvalidToken):
        current_user_from_header("Bearer abc.def.ghi", users)


def test_token_for_deleted_account_is_anonymous(users, db):
    users.create_user("alice", PASSWORD, Role.WAITER)
    token = users.login("alice", PASSWORD)
    db["user"].delete_one({"username": "alice"})
    assert current_user_from_header(f"Bearer {token}", users) is None


def test_create_user_stores_digest_not_password(users, db):
    user = users.create_user("alice", PASSWORD, Role.WAITER)
    assert user["username"] == "alice"
    assert user["role"] == 2
    assert "password_hash" not in user
    stored = db["user"].find_one({"username": "alice"})
    assert stored["password_hash"] != PASSWORD


def test_duplicate_username(users):
    users.create_user("alice", PASSWORD, Role.WAITER)
    with pytest.raises(DuplicateUsername):
        users.create_user("alice", "other-pass", Role.CHEF)


def test_unknown_role_is_rejected(users):
    with pytest.raises(InvalidRole):
        users.create_user("alice", PASSWORD, 9)


def test_short_username_is_rejected(users):
    with pytest.raises(ValidationFailed):
        users.create_user("al", PASSWORD, Role.WAITER)


def test_login_returns_token_for_the_account(users):
    user = users.create_user("alice", PASSWORD, Role.CHEF)
    claim = verify_token(users.login("alice", PASSWORD))
    assert claim == Identity(username="alice", id=user["id"])


def test_login_failures_are_indistinguishable(users):
    users.create_user("alice", PASSWORD, Role.CHEF)
    with pytest.raises(InvalidCredentials) as wrong_password:
        users.login("alice", "wrong")
    with pytest.raises(InvalidCredentials) as unknown_user:
        users.login("nonexistent", "x")
    assert str(wrong_password.value) == str(unknown_user.value)


def test_owner_exists(users):
    assert not users.owner_exists()
    users.create_user("boss", PASSWORD, Role.OWNER)
    assert users.owner_exists()
