from conftest import JPEG_BYTES, auth_headers, register


def test_update_profile_name_and_email(client, user_headers):
    res = client.patch("/profile", json={"name": "  Alice B  ", "email": "alice.b@mail.com"}, headers=user_headers)

    assert res.status_code == 200
    user = res.json()["user"]
    assert user["name"] == "Alice B"
    assert user["email"] == "alice.b@mail.com"


def test_update_profile_rejects_taken_email(client, user_headers, other_headers):
    res = client.patch("/profile", json={"email": "bob@mail.com"}, headers=user_headers)

    assert res.status_code == 422
    assert res.json()["details"] == {"field": "email"}


def test_change_password(client, user_headers):
    res = client.patch(
        "/profile/password",
        json={"current_password": "secret123", "password": "newpass456", "password_confirmation": "newpass456"},
        headers=user_headers,
    )
    assert res.status_code == 200

    old = client.post("/login", json={"email": "alice@mail.com", "password": "secret123"})
    new = client.post("/login", json={"email": "alice@mail.com", "password": "newpass456"})
    assert old.status_code == 422
    assert new.status_code == 200


def test_change_password_wrong_current(client, user_headers):
    res = client.patch(
        "/profile/password",
        json={"current_password": "nope12345", "password": "newpass456", "password_confirmation": "newpass456"},
        headers=user_headers,
    )

    assert res.status_code == 422
    assert res.json()["message"] == "Current password is incorrect."


def test_change_password_confirmation_mismatch(client, user_headers):
    res = client.patch(
        "/profile/password",
        json={"current_password": "secret123", "password": "newpass456", "password_confirmation": "other4567"},
        headers=user_headers,
    )
    assert res.status_code == 422


def test_upload_photo_replaces_previous(client, user_headers, storage):
    first = client.post("/profile/photo", files={"photo": ("me.jpg", JPEG_BYTES, "image/jpeg")}, headers=user_headers)
    assert first.status_code == 200
    first_url = first.json()["user"]["profile_photo_url"]
    assert first_url.startswith("http://testserver/storage/profile-photos/")
    first_path = first_url.split("/storage/", 1)[1]
    assert storage.exists(first_path)

    second = client.post("/profile/photo", files={"photo": ("me2.png", b"\x89PNG data", "image/png")}, headers=user_headers)
    assert second.status_code == 200
    assert not storage.exists(first_path)
    assert second.json()["user"]["profile_photo_url"].endswith(".png")


def test_upload_photo_rejects_other_types(client, user_headers):
    res = client.post("/profile/photo", files={"photo": ("me.gif", b"GIF89a", "image/gif")}, headers=user_headers)
    assert res.status_code == 422


def test_profile_requires_auth(client):
    assert client.patch("/profile", json={"name": "x"}).status_code == 401
