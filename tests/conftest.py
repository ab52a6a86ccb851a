import pytest

from finval.engine.gate import Gate
from finval.engine.hashing import PasswordHasher
from finval.web import flows
from finval.web.database import Database


@pytest.fixture
def gate():
    return Gate()


@pytest.fixture
def hasher():
    # Few rounds keep the suite fast; the format is the same.
    return PasswordHasher(iterations=1_000)


@pytest.fixture
def database():
    db = Database("sqlite://").init()
    yield db
    db.close()


@pytest.fixture
def session(database):
    with database.session() as s:
        yield s


@pytest.fixture
def signup_form():
    return flows.SignupForm(
        email="Ada@Example.com",
        password="Password1!",
        first_name="Ada",
        last_name="Lovelace",
        phone_number="(202) 555-1234",
        address="1 Analytical Way",
        city="Washington",
        state="dc",
        zip_code="20001",
    )


@pytest.fixture
def user(session, gate, signup_form, hasher):
    return flows.signup(session, gate, signup_form, hasher=hasher)
