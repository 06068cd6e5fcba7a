import pytest

from models import storage
from models.user import User
from utils import credentials
from utils.exceptions import Conflict, InvalidInput, NotFound, Unauthorized
from utils.security import verify_password


@pytest.fixture
def alice(app):
    return credentials.register("Alice", "Alice@X.com", "Alice Liddell", "S1")


def test_register_normalizes_and_hashes(alice):
    assert alice.username == "alice"
    assert alice.email == "alice@x.com"
    assert alice.password_hash != "S1"
    assert verify_password("S1", alice.password_hash)
    assert "password_hash" not in alice.to_dict()
    assert "refresh_token" not in alice.to_dict()


@pytest.mark.parametrize(
    "username, email",
    [("alice", "other@x.com"), ("bob", "alice@x.com"), (" ALICE ", "bob@x.com")],
)
def test_register_duplicate_username_or_email_conflicts(alice, username, email):
    with pytest.raises(Conflict):
        credentials.register(username, email, "Someone", "S2")
    assert storage.count(User) == 1


def test_register_requires_every_field(app):
    with pytest.raises(InvalidInput) as exc:
        credentials.register("bob", "", "Bob", "  ")
    assert set(exc.value.details["missing"]) == {"email", "password"}


@pytest.mark.parametrize("identifier", ["alice", "ALICE", " alice@x.com ", "Alice@X.com"])
def test_verify_accepts_username_or_email(alice, identifier):
    assert credentials.verify(identifier, "S1").id == alice.id


def test_verify_wrong_password(alice):
    with pytest.raises(Unauthorized):
        credentials.verify("alice", "S2")


def test_verify_unknown_user(alice):
    with pytest.raises(NotFound):
        credentials.verify("carol", "S1")


def test_change_password(alice):
    credentials.change_password(alice, "S1", "S3")
    assert credentials.verify("alice", "S3").id == alice.id
    with pytest.raises(Unauthorized):
        credentials.verify("alice", "S1")


def test_change_password_requires_current(alice):
    with pytest.raises(Unauthorized):
        credentials.change_password(alice, "wrong", "S3")


def test_update_account(alice):
    updated = credentials.update_account(alice, " Alice L. ", "ALICE@new.com")
    assert updated.full_name == "Alice L."
    assert updated.email == "alice@new.com"


def test_update_account_email_taken(alice):
    credentials.register("bob", "bob@x.com", "Bob", "S2")
    with pytest.raises(Conflict):
        credentials.update_account(alice, "Alice", "bob@x.com")


def test_count_applies_criteria(alice):
    credentials.register("bob", "bob@x.com", "Bob", "S2")
    assert storage.count(User) == 2
    assert storage.count(User, User.username == "bob") == 1
    assert storage.count(User, User.refresh_token.isnot(None)) == 0
