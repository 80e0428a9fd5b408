def test_register_hides_password(client):
    resp = client.post(
        "/register",
        json={"email": "a@b.com", "password": "pw", "farmName": "F", "address": "X"},
    )

    assert resp.status_code == 201
    body = resp.json()
    assert body["email"] == "a@b.com"
    assert body["farmName"] == "F"
    assert body["address"] == "X"
    assert "password" not in body
    assert "passwordHash" not in body


def test_register_normalizes_email(client):
    resp = client.post(
        "/register",
        json={"email": "  Farmer@GreenHill.COM ", "password": "pw", "farmName": "F", "address": "X"},
    )

    assert resp.status_code == 201
    assert resp.json()["email"] == "farmer@greenhill.com"


def test_duplicate_email_is_case_insensitive(client, farmer):
    resp = client.post(
        "/register",
        json={"email": "A@B.COM", "password": "other", "farmName": "F2", "address": "Y"},
    )

    assert resp.status_code == 400
    assert resp.json() == {"error": "Email already in use."}

    # first account is untouched
    login = client.post("/login", json={"email": "a@b.com", "password": "pw"})
    assert login.status_code == 200
    assert login.json()["user"]["farmName"] == "F"


def test_register_missing_fields(client):
    resp = client.post("/register", json={"email": "a@b.com", "password": "pw"})

    assert resp.status_code == 422
    body = resp.json()
    assert body["error"] == "Invalid input"
    assert body["details"]


def test_register_blank_farm_name(client):
    resp = client.post(
        "/register",
        json={"email": "a@b.com", "password": "pw", "farmName": "   ", "address": "X"},
    )

    assert resp.status_code == 422


def test_login_ok(client, farmer):
    resp = client.post("/login", json={"email": "A@b.com", "password": "pw"})

    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "ok"
    assert body["user"]["id"] == farmer["id"]
    assert "password" not in body["user"]


def test_login_wrong_password(client, farmer):
    resp = client.post("/login", json={"email": "a@b.com", "password": "nope"})

    assert resp.status_code == 400
    assert resp.json() == {"error": "Invalid credentials"}


def test_login_unknown_email(client, farmer):
    resp = client.post("/login", json={"email": "ghost@b.com", "password": "pw"})

    assert resp.status_code == 404
    assert resp.json() == {"error": "User not found"}


def test_password_is_hashed(app, farmer):
    from sqlmodel import Session, select

    from app.models.user import User

    with Session(app.state.engine) as session:
        user = session.exec(select(User)).one()

    assert user.password_hash != "pw"
    assert user.password_hash.startswith("$2")
