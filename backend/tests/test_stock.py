import pytest
from sqlalchemy import update

from conftest import stored_stock
from sipe.core.database import SessionLocal
from sipe.core.errors import ValidationError
from sipe.models.equipment import Equipment
from sipe.services.stock import is_low_stock, move_stock


def create_laptop(client, headers, stock=5):
    resp = client.post(
        "/api/equipos",
        json={"code": "EQ-1", "name": "Laptop", "purchaseDate": "2024-03-12", "stock": stock},
        headers=headers,
    )
    assert resp.status_code == 201
    return resp.json()["equipo"]


# ---------- absolute set ----------

def test_set_stock_is_absolute(client, admin_headers, user_headers):
    item = create_laptop(client, admin_headers, stock=5)

    resp = client.patch(f"/api/equipos/{item['id']}/stock", json={"stock": 12}, headers=user_headers)

    assert resp.status_code == 200
    assert resp.json()["message"] == "Stock actualizado exitosamente"
    assert resp.json()["equipo"]["stock"] == 12
    assert resp.json()["equipo"]["lastUpdated"] >= item["lastUpdated"]
    assert stored_stock(item["id"]) == 12


def test_set_stock_to_zero(client, admin_headers):
    item = create_laptop(client, admin_headers)

    resp = client.patch(f"/api/equipos/{item['id']}/stock", json={"stock": 0}, headers=admin_headers)
    assert resp.status_code == 200
    assert stored_stock(item["id"]) == 0


@pytest.mark.parametrize("body", [{"stock": -1}, {}, {"stock": None}])
def test_set_stock_rejects_negative_or_missing(client, admin_headers, body):
    item = create_laptop(client, admin_headers, stock=5)

    resp = client.patch(f"/api/equipos/{item['id']}/stock", json=body, headers=admin_headers)

    assert resp.status_code == 400
    assert resp.json() == {"error": "Stock inválido"}
    assert stored_stock(item["id"]) == 5


def test_set_stock_missing_item(client, user_headers):
    resp = client.patch("/api/equipos/999/stock", json={"stock": 3}, headers=user_headers)
    assert resp.status_code == 404


def test_set_stock_requires_token(client, admin_headers):
    item = create_laptop(client, admin_headers)
    assert client.patch(f"/api/equipos/{item['id']}/stock", json={"stock": 3}).status_code == 403


# ---------- in/out movements ----------

def test_out_then_insufficient(client, admin_headers, user_headers):
    item = create_laptop(client, admin_headers, stock=5)
    url = f"/api/equipos/{item['id']}/movimientos"

    first = client.post(url, json={"quantity": 3, "direction": "out"}, headers=user_headers)

    assert first.status_code == 200
    assert first.json()["message"] == "Salida registrada exitosamente"
    movement = first.json()["movimiento"]
    assert movement["previousStock"] == 5
    assert movement["currentStock"] == 2
    assert movement["quantity"] == 3
    assert movement["code"] == "EQ-1"

    second = client.post(url, json={"quantity": 3, "direction": "out"}, headers=user_headers)

    assert second.status_code == 400
    assert second.json() == {"error": "Stock insuficiente"}
    assert stored_stock(item["id"]) == 2


def test_in_is_unbounded(client, admin_headers):
    item = create_laptop(client, admin_headers, stock=5)

    resp = client.post(
        f"/api/equipos/{item['id']}/movimientos",
        json={"quantity": 1000, "direction": "in"},
        headers=admin_headers,
    )

    assert resp.status_code == 200
    assert resp.json()["message"] == "Entrada registrada exitosamente"
    assert resp.json()["movimiento"]["previousStock"] == 5
    assert resp.json()["movimiento"]["currentStock"] == 1005


def test_out_of_everything_reaches_zero(client, admin_headers):
    item = create_laptop(client, admin_headers, stock=5)

    resp = client.post(
        f"/api/equipos/{item['id']}/movimientos",
        json={"quantity": 5, "direction": "out"},
        headers=admin_headers,
    )
    assert resp.status_code == 200
    assert stored_stock(item["id"]) == 0


@pytest.mark.parametrize(
    "body",
    [
        {"quantity": 0, "direction": "out"},
        {"quantity": -2, "direction": "in"},
        {"direction": "in"},
        {"quantity": 2},
        {"quantity": 2, "direction": "entrada"},
    ],
)
def test_move_validation(client, admin_headers, body):
    item = create_laptop(client, admin_headers, stock=5)

    resp = client.post(f"/api/equipos/{item['id']}/movimientos", json=body, headers=admin_headers)

    assert resp.status_code == 400
    assert stored_stock(item["id"]) == 5


def test_move_missing_item(client, user_headers):
    resp = client.post("/api/equipos/999/movimientos", json={"quantity": 1, "direction": "out"}, headers=user_headers)
    assert resp.status_code == 404


def test_move_stock_service_rejects_oversell(db_session, make_equipment):
    item = make_equipment("EQ-5", stock=1)

    with pytest.raises(ValidationError):
        move_stock(db_session, item.id, 2, "out")

    assert stored_stock(item.id) == 1


def test_movement_reports_its_own_update(db_session, make_equipment, monkeypatch):
    """A restock landing right after the commit must not leak into the report."""
    item_id = make_equipment("EQ-6", stock=10).id
    commit = db_session.commit

    def commit_then_restock():
        commit()
        with SessionLocal() as other:
            other.execute(update(Equipment).where(Equipment.id == item_id).values(stock=Equipment.stock + 100))
            other.commit()

    monkeypatch.setattr(db_session, "commit", commit_then_restock)

    movement = move_stock(db_session, item_id, 4, "out")

    assert (movement["previous_stock"], movement["current_stock"]) == (10, 6)
    assert stored_stock(item_id) == 106


@pytest.mark.parametrize("stock,expected", [(0, False), (1, True), (10, True), (11, False)])
def test_low_stock_notice_rule(stock, expected):
    assert is_low_stock(stock, 10) is expected
