from datetime import timedelta

from sipe.core.security import create_access_token
from sipe.models.user import User

REGISTER_PAYLOAD = {
    "username": "carlos",
    "email": "Carlos@Example.com",
    "password": "secreto1",
}


def test_register_returns_public_user(client):
    resp = client.post("/api/auth/registro", json=REGISTER_PAYLOAD)

    assert resp.status_code == 201
    body = resp.json()
    assert body["message"] == "Usuario registrado exitosamente"
    usuario = body["usuario"]
    assert usuario["username"] == "carlos"
    assert usuario["email"] == "carlos@example.com"
    assert usuario["role"] == "user"
    assert "id" in usuario
    assert "password" not in usuario
    assert "password_hash" not in usuario


def test_register_stores_hashed_password(client, db_session):
    client.post("/api/auth/registro", json=REGISTER_PAYLOAD)

    user = db_session.query(User).filter(User.username == "carlos").one()
    assert user.password_hash != "secreto1"
    assert user.password_hash.startswith("$pbkdf2-sha256$")


def test_register_duplicate_email_conflicts(client, db_session):
    assert client.post("/api/auth/registro", json=REGISTER_PAYLOAD).status_code == 201

    resp = client.post(
        "/api/auth/registro",
        json={"username": "otro", "email": "carlos@example.com", "password": "secreto1"},
    )
    assert resp.status_code == 409
    assert resp.json() == {"error": "El email o username ya está registrado"}
    assert db_session.query(User).count() == 1


def test_register_duplicate_username_conflicts(client, db_session):
    client.post("/api/auth/registro", json=REGISTER_PAYLOAD)

    resp = client.post(
        "/api/auth/registro",
        json={"username": "carlos", "email": "otro@example.com", "password": "secreto1"},
    )
    assert resp.status_code == 409
    assert db_session.query(User).count() == 1


def test_register_missing_field(client):
    resp = client.post("/api/auth/registro", json={"username": "carlos", "password": "secreto1"})

    assert resp.status_code == 400
    assert "email" in resp.json()["error"]


def test_register_rejects_short_password_and_bad_email(client):
    short = client.post("/api/auth/registro", json={**REGISTER_PAYLOAD, "password": "123"})
    bad_email = client.post("/api/auth/registro", json={**REGISTER_PAYLOAD, "email": "no-es-email"})
    short_name = client.post("/api/auth/registro", json={**REGISTER_PAYLOAD, "username": "ab"})

    assert short.status_code == 400
    assert bad_email.status_code == 400
    assert short_name.status_code == 400


def test_register_rejects_unknown_role(client):
    resp = client.post("/api/auth/registro", json={**REGISTER_PAYLOAD, "role": "superuser"})
    assert resp.status_code == 400


def test_public_registration_cannot_pick_admin_role(client, db_session):
    resp = client.post("/api/auth/registro", json={**REGISTER_PAYLOAD, "role": "admin"})

    assert resp.status_code == 201
    assert resp.json()["usuario"]["role"] == "user"
    assert db_session.query(User).filter(User.username == "carlos").one().role == "user"


def test_admin_registration_keeps_requested_role(client, admin_headers):
    resp = client.post("/api/auth/registro", json={**REGISTER_PAYLOAD, "role": "admin"}, headers=admin_headers)

    assert resp.status_code == 201
    assert resp.json()["usuario"]["role"] == "admin"


def test_login_returns_token(client):
    client.post("/api/auth/registro", json=REGISTER_PAYLOAD)

    resp = client.post("/api/auth/login", json={"email": "carlos@example.com", "password": "secreto1"})

    assert resp.status_code == 200
    body = resp.json()
    assert body["token"]
    assert body["usuario"]["email"] == "carlos@example.com"

    me = client.get("/api/auth/verificar", headers={"Authorization": f"Bearer {body['token']}"})
    assert me.status_code == 200
    assert me.json()["usuario"]["username"] == "carlos"


def test_login_wrong_password_matches_unknown_email(client):
    client.post("/api/auth/registro", json=REGISTER_PAYLOAD)

    wrong_password = client.post("/api/auth/login", json={"email": "carlos@example.com", "password": "nope123"})
    unknown_email = client.post("/api/auth/login", json={"email": "nadie@example.com", "password": "secreto1"})

    assert wrong_password.status_code == unknown_email.status_code == 401
    assert wrong_password.json() == unknown_email.json() == {"error": "Credenciales inválidas"}


def test_token_form_endpoint(client, regular_user):
    resp = client.post(
        "/api/auth/token",
        data={"username": "jane@example.com", "password": "jane1234"},
        headers={"Content-Type": "application/x-www-form-urlencoded"},
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["token_type"] == "bearer"
    assert body["access_token"]


def test_missing_token_is_forbidden(client):
    resp = client.get("/api/auth/verificar")

    assert resp.status_code == 403
    assert resp.json() == {"error": "Token no proporcionado"}


def test_invalid_token_is_unauthorized(client):
    resp = client.get("/api/auth/verificar", headers={"Authorization": "Bearer abc.def.ghi"})

    assert resp.status_code == 401
    assert resp.json() == {"error": "Token inválido"}
    assert resp.headers["WWW-Authenticate"] == "Bearer"


def test_expired_token_is_unauthorized(client, regular_user):
    token = create_access_token(regular_user.id, regular_user.role, expires_delta=timedelta(minutes=-1))

    resp = client.get("/api/auth/verificar", headers={"Authorization": f"Bearer {token}"})

    assert resp.status_code == 401
    assert resp.json() == {"error": "Token expirado"}
    assert resp.headers["WWW-Authenticate"] == "Bearer"


def test_verify_deleted_user(client, db_session, regular_user, user_headers):
    db_session.delete(regular_user)
    db_session.commit()

    resp = client.get("/api/auth/verificar", headers=user_headers)
    assert resp.status_code == 404
    assert resp.json() == {"error": "Usuario no encontrado"}


def test_health_and_index(client):
    health = client.get("/api/health")
    assert health.status_code == 200
    assert health.json()["status"] == "OK"
    assert health.json()["uptime"] >= 0

    index = client.get("/")
    assert index.json()["endpoints"]["equipos"] == "/api/equipos"


def test_unknown_route(client):
    resp = client.get("/api/nada")
    assert resp.status_code == 404
    assert resp.json() == {"error": "Ruta no encontrada"}
