from conftest import register

from database import get_db
from models.user import User


def test_first_user_is_admin_and_later_users_are_not(client):
    first = register(client, "first@x.com")
    second = register(client, "second@x.com")
    third = register(client, "third@x.com")

    assert first.status_code == 201
    assert [r.json()["user"]["role"] for r in (first, second, third)] == ["admin", "user", "user"]


def test_register_returns_token_and_public_fields_only(client):
    response = register(client, "someone@x.com")

    body = response.json()
    assert body["token"]
    assert set(body["user"]) == {"id", "email", "role"}
    assert body["user"]["email"] == "someone@x.com"


def test_register_lowercases_email(client):
    response = register(client, "  MiXeD@X.com ")
    assert response.json()["user"]["email"] == "mixed@x.com"


def test_register_requires_email_and_password(client):
    for payload in ({"email": "x@x.com"}, {"password": "pw"}, {"email": "", "password": "pw"}, {"email": "   ", "password": "pw"}, {}):
        response = client.post("/api/auth/register", json=payload)
        assert response.status_code == 400
        assert response.json() == {"message": "Email and password are required."}


def test_duplicate_email_is_rejected_case_insensitively(client, db_session):
    assert register(client, "dup@x.com").status_code == 201

    response = register(client, "DUP@x.com", "another-pw")

    assert response.status_code == 400
    assert response.json() == {"message": "User with this email already exists."}
    assert db_session.query(User).filter(User.email == "dup@x.com").count() == 1


def test_stored_password_is_hashed(client, db_session):
    register(client, "hash@x.com", "plain-secret")

    user = db_session.query(User).filter(User.email == "hash@x.com").one()
    assert user.password_hash != "plain-secret"
    assert user.password_hash.startswith("$pbkdf2-sha256$")


def test_login_succeeds_with_correct_credentials(client):
    registered = register(client, "login@x.com", "pw").json()

    response = client.post("/api/auth/login", json={"email": "LOGIN@x.com", "password": "pw"})

    assert response.status_code == 200
    assert response.json()["user"] == registered["user"]
    assert response.json()["token"]


def test_wrong_password_and_unknown_email_are_indistinguishable(client):
    register(client, "known@x.com", "right-pw")

    wrong_password = client.post("/api/auth/login", json={"email": "known@x.com", "password": "wrong"})
    unknown_email = client.post("/api/auth/login", json={"email": "nobody@x.com", "password": "wrong"})

    assert wrong_password.status_code == unknown_email.status_code == 400
    assert wrong_password.json() == unknown_email.json() == {"message": "Invalid credentials."}


def test_login_requires_both_fields(client):
    response = client.post("/api/auth/login", json={"email": "known@x.com"})

    assert response.status_code == 400
    assert response.json() == {"message": "Email and password are required."}


def test_login_with_corrupt_stored_hash_is_a_server_error(client, db_session):
    register(client, "corrupt@x.com", "pw")
    user = db_session.query(User).filter(User.email == "corrupt@x.com").one()
    user.password_hash = "garbage"
    db_session.commit()

    response = client.post("/api/auth/login", json={"email": "corrupt@x.com", "password": "pw"})

    assert response.status_code == 500
    assert response.json() == {"message": "Server error during login."}


def test_login_rejects_blank_email(client):
    response = client.post("/api/auth/login", json={"email": "   ", "password": "pw"})

    assert response.status_code == 400
    assert response.json() == {"message": "Email and password are required."}


class _NoMatchQuery:
    """Query whose lookups find nothing, as a concurrent request would see."""

    def __init__(self, query):
        self._query = query

    def filter(self, *criteria):
        return self

    def first(self):
        return None

    def count(self):
        return self._query.count()


class _StaleReadSession:
    """Real session whose duplicate pre-check misses already committed rows."""

    def __init__(self, session):
        self._session = session

    def query(self, *entities):
        return _NoMatchQuery(self._session.query(*entities))

    def __getattr__(self, name):
        return getattr(self._session, name)


def test_unique_index_catches_duplicate_that_slipped_past_precheck(app, client, database, db_session):
    assert register(client, "race@x.com").status_code == 201

    def _stale_get_db():
        session = database.session()
        try:
            yield _StaleReadSession(session)
        finally:
            session.close()

    app.dependency_overrides[get_db] = _stale_get_db
    try:
        response = register(client, "race@x.com", "other-pw")
    finally:
        app.dependency_overrides.pop(get_db, None)

    assert response.status_code == 400
    assert response.json() == {"message": "User with this email already exists."}
    assert db_session.query(User).filter(User.email == "race@x.com").count() == 1
