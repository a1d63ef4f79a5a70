import itertools
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

import auth
from app import create_app
from db import Database
from models import User

_emails = itertools.count(1)


@pytest.fixture
def database(tmp_path):
    return Database(f"sqlite:///{tmp_path / 'loans.db'}")


@pytest.fixture
def client(database):
    app = create_app(database=database, seed_demo_data=False)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def seeded_client(database):
    app = create_app(database=database, seed_demo_data=True)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def make_user(client, database):
    """Insert a user straight into the store and hand back a bearer header for it."""
    def _make(role="user", full_name=None, password="secret123"):
        email = f"{role}{next(_emails)}@loanmanager.com"
        sess = database.session()
        try:
            user = User(
                full_name=full_name or f"{role.title()} Person",
                email=email,
                password=auth.hash_password(password),
                role=role,
            )
            sess.add(user)
            sess.commit()
            user_id = user.id
        finally:
            sess.close()
        token = auth.create_token(user_id, role)
        return SimpleNamespace(
            id=user_id,
            email=email,
            password=password,
            role=role,
            full_name=full_name or f"{role.title()} Person",
            headers={"Authorization": f"Bearer {token}"},
        )

    return _make


LOAN_PAYLOAD = {
    "fullName": "Jane Borrower",
    "amount": 5000,
    "tenure": 12,
    "employmentStatus": "Employed",
    "reason": "Car repair",
    "employmentAddress": "1 Market Street",
}


@pytest.fixture
def loan_payload():
    return dict(LOAN_PAYLOAD)


@pytest.fixture
def submit_loan(client, loan_payload):
    def _submit(owner, **overrides):
        body = dict(loan_payload, **overrides)
        res = client.post("/loans", json=body, headers=owner.headers)
        assert res.status_code == 201, res.text
        return res.json()

    return _submit
