from app import crud
from app.models import AccountStatus, UserRole


def _register(db, phone, password, **kw):
    kw.setdefault("name", "Test User")
    kw.setdefault("role", UserRole.CUSTOMER)
    return crud.user.create_user(db, phone=phone, password=password, **kw)


def test_login_by_phone_then_me(client, db):
    user = _register(db, "98765-43210", "pw-123", role=UserRole.WORKER, name="Asha")

    resp = client.post(
        "/api/v1/auth/login",
        data={"username": "98765 43210", "password": "pw-123"},
    )
    assert resp.status_code == 200
    token = resp.json()["access_token"]
    assert resp.json()["token_type"] == "bearer"

    me = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    data = me.json()
    assert data["id"] == user.id
    assert data["name"] == "Asha"
    assert data["role"] == "worker"


def test_wrong_password(client, db):
    _register(db, "9000011111", "right")
    resp = client.post("/api/v1/auth/login", data={"username": "9000011111", "password": "wrong"})
    assert resp.status_code == 401


def test_blocked_user_cannot_log_in(client, db):
    _register(db, "9000022222", "pw", status=AccountStatus.BLOCKED)
    resp = client.post("/api/v1/auth/login", data={"username": "9000022222", "password": "pw"})
    assert resp.status_code == 403


def test_garbage_token(client):
    resp = client.get("/api/v1/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert resp.status_code == 401
