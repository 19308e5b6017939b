import pytest

from app.middleware import bearer_token
from conftest import TOKEN


def test_tasks_require_token(auth_client, collection):
    r = auth_client.get("/tasks")
    assert r.status_code == 401
    assert r.json() == {"message": "Unauthorized"}

    r = auth_client.post("/tasks", json={"text": "sneaky"})
    assert r.status_code == 401
    assert collection.count_documents({}) == 0


@pytest.mark.parametrize("header", [
    "Bearer wrong",
    f"Token {TOKEN}",
    TOKEN,
    "Bearer ",
    f"bearer {TOKEN}",
])
def test_bad_authorization_headers(auth_client, header):
    r = auth_client.get("/tasks", headers={"Authorization": header})
    assert r.status_code == 401


def test_correct_token_passes(auth_client):
    headers = {"Authorization": f"Bearer {TOKEN}"}
    r = auth_client.post("/tasks", json={"text": "allowed"}, headers=headers)
    assert r.status_code == 201
    r = auth_client.get("/tasks", headers=headers)
    assert r.status_code == 200
    assert [t["text"] for t in r.json()] == ["allowed"]


def test_exempt_paths_skip_token(auth_client):
    assert auth_client.get("/health").status_code == 200
    assert auth_client.get("/").status_code == 200
    assert auth_client.get("/health", headers={"Authorization": "Bearer wrong"}).status_code == 200


def test_options_skips_token(auth_client):
    r = auth_client.options("/tasks")
    assert r.status_code == 204


def test_no_token_configured_disables_gate(client):
    assert client.get("/tasks").status_code == 200
    assert client.get("/tasks", headers={"Authorization": "Bearer anything"}).status_code == 200


def test_bearer_token_parsing():
    assert bearer_token("Bearer abc") == "abc"
    assert bearer_token("Bearer ") == ""
    assert bearer_token("Basic abc") is None
    assert bearer_token(None) is None
