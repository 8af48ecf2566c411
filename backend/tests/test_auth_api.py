from conftest import auth_headers, register

from dressgenius.models import PersonalAccessToken
from dressgenius.repositories.users import create_user
from dressgenius.schemas import UserResponse


def test_health(client):
    res = client.get("/health")
    assert res.status_code == 200
    assert res.json() == {"status": "ok"}


def test_register_returns_user_and_token(client, db):
    body = register(client, email="Alice@Mail.com")

    assert body["user"]["name"] == "Alice"
    assert body["user"]["email"] == "alice@mail.com"
    assert isinstance(body["token"], str) and body["token"]
    assert db.query(PersonalAccessToken).count() == 1


def test_register_rejects_duplicate_email(client):
    register(client)
    res = client.post("/register", json={"name": "Again", "email": "alice@mail.com", "password": "secret123"})

    assert res.status_code == 422
    assert res.json()["message"] == "The email has already been taken."


def test_register_validates_password_complexity(client):
    res = client.post("/register", json={"name": "A", "email": "a@mail.com", "password": "lettersonly"})

    assert res.status_code == 422
    body = res.json()
    assert body["error_code"] == "VALIDATION_ERROR"
    assert body["details"]["errors"][0]["field"] == "password"


def test_login_with_valid_credentials(client):
    register(client)
    res = client.post("/login", json={"email": "alice@mail.com", "password": "secret123"})

    assert res.status_code == 200
    body = res.json()
    assert body["user"]["email"] == "alice@mail.com"
    assert body["token"]


def test_login_with_wrong_password(client):
    register(client)
    res = client.post("/login", json={"email": "alice@mail.com", "password": "wrong-password1"})

    assert res.status_code == 422
    assert res.json()["message"] == "Invalid credentials."


def test_me_requires_token(client):
    assert client.get("/me").status_code == 401
    assert client.get("/me", headers=auth_headers("not-a-jwt")).status_code == 401


def test_me_returns_current_user(client, user_headers):
    res = client.get("/me", headers=user_headers)

    assert res.status_code == 200
    assert res.json()["user"]["email"] == "alice@mail.com"


def test_logout_revokes_only_the_presented_token(client, db):
    first = register(client)["token"]
    second = client.post("/login", json={"email": "alice@mail.com", "password": "secret123"}).json()["token"]

    res = client.post("/logout", headers=auth_headers(first))
    assert res.status_code == 200
    assert res.json() == {"message": "Logged out."}

    assert client.get("/me", headers=auth_headers(first)).status_code == 401
    assert client.get("/me", headers=auth_headers(second)).status_code == 200
    assert db.query(PersonalAccessToken).count() == 1


def test_register_is_rate_limited(client):
    for i in range(5):
        register(client, email=f"user{i}@mail.com")

    res = client.post("/register", json={"name": "Six", "email": "user6@mail.com", "password": "secret123"})
    assert res.status_code == 429


def test_user_response_reads_orm_rows(db):
    user = create_user(db, "Orm", "ORM@mail.com", "x")
    db.commit()
    db.refresh(user)
    data = UserResponse.model_validate(user).model_dump()
    assert data["email"] == "orm@mail.com"
    assert data["profile_photo_url"] is None
