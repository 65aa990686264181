from fastapi import status


def test_register_signs_user_in(client):
    response = client.post(
        "/auth/register",
        json={
            "email": "New.Student@Example.com",
            "password": "student123",
            "full_name": "New Student",
            "role": "student",
        },
    )
    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data["role"] == "student"
    assert data["token_type"] == "bearer"
    assert data["user"]["email"] == "new.student@example.com"
    assert data["user"]["full_name"] == "New Student"

    me = client.get("/me", headers={"Authorization": f"Bearer {data['access_token']}"})
    assert me.status_code == status.HTTP_200_OK
    assert me.json()["email"] == "new.student@example.com"


def test_register_duplicate_email(client, student):
    response = client.post(
        "/auth/register",
        json={"email": "ADA@example.com", "password": "another1", "full_name": "Ada Again"},
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["detail"] == "Email already registered"


def test_register_rejects_short_password(client):
    response = client.post(
        "/auth/register",
        json={"email": "short@example.com", "password": "123", "full_name": "Short"},
    )
    assert response.status_code == 422


def test_login_teacher(client, teacher):
    response = client.post("/auth/login", json={"email": teacher.email, "password": "secret123"})
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["role"] == "teacher"
    assert data["user"]["id"] == teacher.id
    assert data["refresh_token"]


def test_login_wrong_password(client, student):
    response = client.post("/auth/login", json={"email": student.email, "password": "wrong-pass"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["detail"] == "Invalid credentials"


def test_login_unknown_email(client):
    response = client.post("/auth/login", json={"email": "nobody@example.com", "password": "secret123"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_me_requires_token(client):
    assert client.get("/me").status_code == status.HTTP_401_UNAUTHORIZED


def test_refresh_rotates_token(client, student):
    login = client.post("/auth/login", json={"email": student.email, "password": "secret123"}).json()

    response = client.post("/auth/refresh", json={"refresh_token": login["refresh_token"]})
    assert response.status_code == status.HTTP_200_OK
    rotated = response.json()
    assert rotated["refresh_token"] != login["refresh_token"]

    again = client.post("/auth/refresh", json={"refresh_token": login["refresh_token"]})
    assert again.status_code == status.HTTP_401_UNAUTHORIZED


def test_refresh_token_is_not_an_access_token(client, student):
    login = client.post("/auth/login", json={"email": student.email, "password": "secret123"}).json()
    response = client.get("/me", headers={"Authorization": f"Bearer {login['refresh_token']}"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_logout_revokes_session(client, student, auth_for):
    login = client.post("/auth/login", json={"email": student.email, "password": "secret123"}).json()

    response = client.post(
        "/auth/logout",
        json={"refresh_token": login["refresh_token"]},
        headers=auth_for(student),
    )
    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"ok": True}

    refresh = client.post("/auth/refresh", json={"refresh_token": login["refresh_token"]})
    assert refresh.status_code == status.HTTP_401_UNAUTHORIZED

    second = client.post(
        "/auth/logout",
        json={"refresh_token": login["refresh_token"]},
        headers=auth_for(student),
    )
    assert second.status_code == status.HTTP_404_NOT_FOUND


def test_password_reset_flow(client, student):
    login = client.post("/auth/login", json={"email": student.email, "password": "secret123"}).json()

    request = client.post("/auth/reset-password-request", json={"email": student.email})
    assert request.status_code == status.HTTP_200_OK
    token = request.json()["reset_token"]
    assert token

    reset = client.post("/auth/reset-password", json={"token": token, "new_password": "brand-new-pw"})
    assert reset.status_code == status.HTTP_200_OK

    old = client.post("/auth/login", json={"email": student.email, "password": "secret123"})
    assert old.status_code == status.HTTP_401_UNAUTHORIZED
    new = client.post("/auth/login", json={"email": student.email, "password": "brand-new-pw"})
    assert new.status_code == status.HTTP_200_OK

    # existing sessions are signed out and the token is single-use
    refresh = client.post("/auth/refresh", json={"refresh_token": login["refresh_token"]})
    assert refresh.status_code == status.HTTP_401_UNAUTHORIZED
    reused = client.post("/auth/reset-password", json={"token": token, "new_password": "another-pw"})
    assert reused.status_code == status.HTTP_400_BAD_REQUEST


def test_password_reset_request_unknown_email(client):
    response = client.post("/auth/reset-password-request", json={"email": "ghost@example.com"})
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["reset_token"] is None
    assert "If an account with this email exists" in data["message"]


def test_update_profile(client, student, auth_for):
    response = client.patch("/me", json={"full_name": "Augusta Ada King"}, headers=auth_for(student))
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["full_name"] == "Augusta Ada King"


def test_change_password(client, student, auth_for):
    wrong = client.post(
        "/me/password",
        json={"current_password": "not-it", "new_password": "changed123"},
        headers=auth_for(student),
    )
    assert wrong.status_code == status.HTTP_400_BAD_REQUEST
    assert wrong.json()["detail"] == "Current password is incorrect"

    ok = client.post(
        "/me/password",
        json={"current_password": "secret123", "new_password": "changed123"},
        headers=auth_for(student),
    )
    assert ok.status_code == status.HTTP_200_OK
    login = client.post("/auth/login", json={"email": student.email, "password": "changed123"})
    assert login.status_code == status.HTTP_200_OK


def test_role_guards(client, teacher, student, auth_for):
    assert client.get("/teacher/classes", headers=auth_for(student)).status_code == status.HTTP_403_FORBIDDEN
    assert client.get("/student/classes", headers=auth_for(teacher)).status_code == status.HTTP_403_FORBIDDEN


def test_register_rejects_password_over_72_bytes(client):
    # 40 characters, 80 bytes
    response = client.post(
        "/auth/register",
        json={"email": "accent@example.com", "password": "é" * 40, "full_name": "Accent"},
    )
    assert response.status_code == 422


def test_register_accepts_multibyte_password_within_limit(client):
    response = client.post(
        "/auth/register",
        json={"email": "accent@example.com", "password": "é" * 36, "full_name": "Accent"},
    )
    assert response.status_code == status.HTTP_201_CREATED
    login = client.post("/auth/login", json={"email": "accent@example.com", "password": "é" * 36})
    assert login.status_code == status.HTTP_200_OK


def test_login_with_overlong_password(client, student):
    response = client.post("/auth/login", json={"email": student.email, "password": "a" * 100})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["detail"] == "Invalid credentials"


def test_change_password_with_overlong_values(client, student, auth_for):
    wrong = client.post(
        "/me/password",
        json={"current_password": "a" * 100, "new_password": "changed123"},
        headers=auth_for(student),
    )
    assert wrong.status_code == status.HTTP_400_BAD_REQUEST

    too_long = client.post(
        "/me/password",
        json={"current_password": "secret123", "new_password": "ü" * 50},
        headers=auth_for(student),
    )
    assert too_long.status_code == 422


def test_reset_password_rejects_overlong_password(client, student):
    token = client.post("/auth/reset-password-request", json={"email": student.email}).json()["reset_token"]
    response = client.post("/auth/reset-password", json={"token": token, "new_password": "ß" * 40})
    assert response.status_code == 422
