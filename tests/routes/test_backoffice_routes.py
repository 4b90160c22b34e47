import re
import uuid

import pytest
from fastapi.testclient import TestClient

from giftlist.auth.deps import require_backoffice
from giftlist.routes.backoffice import router

API = "/api/v1/backoffice"


@pytest.fixture
def client(app_factory):
    app = app_factory(router)
    app.dependency_overrides[require_backoffice] = lambda: None
    with TestClient(app) as client:
        yield client


def _gift_payload(**overrides):
    payload = {
        "title": "Lego Technic",
        "description": "Grue mobile",
        "purchase_link": "https://www.amazon.fr/dp/B0LEGO",
        "image_url": "",
        "price": 49.9,
        "categories": "Jouets, Construction, ",
    }
    payload.update(overrides)
    return payload


def test_backoffice_api_requires_session(app_factory):
    with TestClient(app_factory(router)) as client:
        response = client.get(f"{API}/stats")
    assert response.status_code == 401


def test_gift_crud(client):
    created = client.post(f"{API}/gifts", json=_gift_payload())
    assert created.status_code == 201
    gift = created.json()
    assert gift["categories"] == ["Jouets", "Construction"]
    assert gift["image_url"] is None

    gift_url = f"{API}/gifts/{gift['id']}"
    assert client.get(gift_url).json()["title"] == "Lego Technic"
    assert [g["id"] for g in client.get(f"{API}/gifts").json()] == [gift["id"]]

    updated = client.put(gift_url, json=_gift_payload(price=39.9, categories=["Jouets"]))
    assert updated.status_code == 200
    assert updated.json()["price"] == 39.9
    assert updated.json()["categories"] == ["Jouets"]

    assert client.delete(gift_url).status_code == 204
    assert client.get(gift_url).status_code == 404
    assert client.delete(gift_url).status_code == 404


def test_gift_validation(client):
    assert client.post(f"{API}/gifts", json=_gift_payload(title="")).status_code == 422
    assert client.post(f"{API}/gifts", json=_gift_payload(price=-1)).status_code == 422
    assert client.put(f"{API}/gifts/{uuid.uuid4()}", json=_gift_payload()).status_code == 404


def test_users_and_stats(client):
    created = client.post(f"{API}/users", json={"name": "Alice"})
    assert created.status_code == 201
    user = created.json()
    assert re.fullmatch(r"[0-9a-f]{16}", user["hex_key"])
    assert user["link"] == f"http://gifts.test/gifts/{user['hex_key']}"
    assert user["view_only"] is False

    viewer = client.post(f"{API}/users", json={"name": "Mamie", "view_only": True}).json()
    assert viewer["view_only"] is True

    client.post(f"{API}/gifts", json=_gift_payload())
    assert client.get(f"{API}/stats").json() == {"gifts": 1, "users": 2, "interests": 0}

    assert client.delete(f"{API}/users/{user['id']}").status_code == 204
    assert [u["name"] for u in client.get(f"{API}/users").json()] == ["Mamie"]
    assert client.delete(f"{API}/users/{user['id']}").status_code == 404


def test_person_budget_tracking(client):
    person = client.post(f"{API}/persons", json={"name": "Léa", "budget": 100}).json()
    person_url = f"{API}/persons/{person['id']}"

    book = client.post(f"{person_url}/gifts", json={"name": "Livre", "amount": 30}).json()
    assert book["status"] == "Idée"
    client.post(f"{person_url}/gifts", json={"name": "Casque", "amount": 55, "status": "Commandé"})

    listing = client.get(f"{API}/persons").json()
    assert listing["totals"]["total_spent"] == 85
    assert listing["totals"]["total_remaining"] == 15
    assert listing["totals"]["total_ideas"] == 1
    summary = listing["persons"][0]
    assert summary["remaining_budget"] == 15
    assert summary["budget_percentage"] == pytest.approx(15)
    assert summary["low_budget"] is True
    assert summary["over_budget"] is False

    status = client.patch(f"{API}/person-gifts/{book['id']}/status", json={"status": "Livré"})
    assert status.json()["status"] == "Livré"

    detail = client.get(person_url).json()
    assert [g["name"] for g in detail["gifts_by_status"]["Livré"]] == ["Livre"]
    assert detail["gifts_by_status"]["Idée"] == []
    assert detail["summary"]["status_counts"] == {"Idée": 0, "Commandé": 1, "Livré": 1}

    edited = client.put(
        f"{API}/person-gifts/{book['id']}",
        json={"name": "Livre relié", "amount": 35, "status": "Livré", "note": "Dédicacé"},
    )
    assert edited.json()["note"] == "Dédicacé"

    assert client.delete(f"{API}/person-gifts/{book['id']}").status_code == 204
    assert client.delete(person_url).status_code == 204
    assert client.get(person_url).status_code == 404
    assert client.get(f"{API}/persons").json()["persons"] == []


def test_person_rename(client):
    person = client.post(f"{API}/persons", json={"name": "Tom", "budget": 50}).json()

    updated = client.put(f"{API}/persons/{person['id']}", json={"name": "Tom B.", "budget": 80})
    assert (updated.json()["name"], updated.json()["budget"]) == ("Tom B.", 80)
    assert client.put(f"{API}/persons/{uuid.uuid4()}", json={"name": "x", "budget": 1}).status_code == 404


def test_invalid_amounts(client):
    budget = client.post(f"{API}/persons", json={"name": "Léa", "budget": -5})
    assert budget.status_code == 400
    assert budget.json()["error"] == "Veuillez entrer un budget valide"

    person = client.post(f"{API}/persons", json={"name": "Léa", "budget": 40}).json()
    amount = client.post(f"{API}/persons/{person['id']}/gifts", json={"name": "Jeu", "amount": -1})
    assert amount.status_code == 400
    assert amount.json()["error"] == "Veuillez entrer un montant valide"

    bad_status = client.post(
        f"{API}/persons/{person['id']}/gifts", json={"name": "Jeu", "amount": 5, "status": "Perdu"}
    )
    assert bad_status.status_code == 422

    missing = client.post(f"{API}/persons/{uuid.uuid4()}/gifts", json={"name": "Jeu", "amount": 5})
    assert missing.status_code == 404
