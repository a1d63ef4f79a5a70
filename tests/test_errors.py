from fastapi.testclient import TestClient

import auth
import loans
from app import create_app
from errors import ServerError


def test_health(client):
    assert client.get("/health").json() == {"ok": True}


def test_unexpected_error_is_hidden(database, monkeypatch, caplog):
    def explode(*args, **kwargs):
        raise RuntimeError("connection string leaked here")

    monkeypatch.setattr(loans, "list_user_loans", explode)
    app = create_app(database=database, seed_demo_data=False)
    with TestClient(app, raise_server_exceptions=False) as c:
        c.post("/signup", json={"fullName": "Err Or", "email": "err@loanmanager.com", "password": "secret1"})
        token = c.post("/login", json={"email": "err@loanmanager.com", "password": "secret1"}).json()["token"]
        res = c.get("/user/loans", headers={"Authorization": f"Bearer {token}"})

    assert res.status_code == 500
    assert res.json() == {"error": "Something went wrong!"}
    assert "leaked" not in res.text
    logged = [r for r in caplog.records if r.getMessage().startswith("Unhandled error on GET /user/loans")]
    assert len(logged) == 1
    assert logged[0].exc_info is None


def test_server_error_uses_generic_message(database, monkeypatch):
    def fail(*args, **kwargs):
        raise ServerError("pool exhausted")

    monkeypatch.setattr(loans, "list_loans", fail)
    app = create_app(database=database, seed_demo_data=False)
    with TestClient(app) as c:
        c.post("/signup", json={"fullName": "Err Or", "email": "err@loanmanager.com", "password": "secret1"})
        token = c.post("/login", json={"email": "err@loanmanager.com", "password": "secret1"}).json()["token"]
        admin = auth.create_token(auth.decode_token(token).id, "admin")
        res = c.get("/loans", headers={"Authorization": f"Bearer {admin}"})

    assert res.status_code == 500
    assert res.json() == {"error": "Something went wrong!"}


def test_non_integer_loan_id(client, make_user):
    res = client.put("/loans/abc/verify", headers=make_user("verifier").headers)
    assert res.status_code == 400
    assert res.json()["errors"][0]["field"] == "loan_id"
