from datetime import date

from models import Repayment


def _login(client, email, password):
    token = client.post("/login", json={"email": email, "password": password}).json()["token"]
    return {"Authorization": f"Bearer {token}"}


def test_dashboards_on_empty_store(client, make_user):
    admin = make_user("admin")
    res = client.get("/dashboard/admin", headers=admin.headers)
    assert res.status_code == 200
    assert res.json() == {
        "loans": 0,
        "borrowers": 0,
        "cashDisbursed": 0,
        "savings": 0,
        "repaidLoans": 0,
        "cashReceived": 0,
        "activeUsers": 1,
        "otherAccounts": 0,
    }


def test_admin_dashboard_on_demo_data(seeded_client):
    headers = _login(seeded_client, "admin@loanmanager.com", "admin123")
    res = seeded_client.get("/dashboard/admin", headers=headers)
    assert res.status_code == 200
    assert res.json() == {
        "loans": 7,
        "borrowers": 1,
        "cashDisbursed": 155000,
        "savings": 50000,
        "repaidLoans": 2,
        "cashReceived": 50000,
        "activeUsers": 3,
        "otherAccounts": 4,
    }


def test_verifier_dashboard_on_demo_data(seeded_client):
    headers = _login(seeded_client, "verifier@loanmanager.com", "verifier123")
    res = seeded_client.get("/dashboard/verifier", headers=headers)
    assert res.status_code == 200
    assert res.json() == {
        "loans": 7,
        "borrowers": 1,
        "cashDisbursed": 155000,
        "savings": 50000,
        "repaidLoans": 2,
        "cashReceived": 50000,
    }


def test_verifier_cannot_open_admin_dashboard(client, make_user):
    res = client.get("/dashboard/admin", headers=make_user("verifier").headers)
    assert res.status_code == 403


def test_user_cannot_open_dashboards(client, make_user):
    headers = make_user().headers
    assert client.get("/dashboard/admin", headers=headers).status_code == 403
    assert client.get("/dashboard/verifier", headers=headers).status_code == 403


def test_only_completed_repayments_count(client, database, make_user, submit_loan):
    admin = make_user("admin")
    user = make_user()
    approved = submit_loan(user, amount=2000)
    unpaid = submit_loan(user, amount=3000)
    submit_loan(user, amount=4000)
    for loan in (approved, unpaid):
        client.put(f"/loans/{loan['id']}/status", json={"status": "approved"}, headers=admin.headers)

    sess = database.session()
    try:
        sess.add_all([
            Repayment(loan_id=approved["id"], amount=500, payment_date=date(2024, 2, 1), status="completed"),
            Repayment(loan_id=unpaid["id"], amount=700, payment_date=date(2024, 2, 1), status="failed"),
            Repayment(loan_id=unpaid["id"], amount=900, payment_date=date(2024, 3, 1), status="pending"),
        ])
        sess.commit()
    finally:
        sess.close()

    body = client.get("/dashboard/admin", headers=admin.headers).json()
    assert body["cashDisbursed"] == 5000
    assert body["cashReceived"] == 500
    assert body["repaidLoans"] == 1
    assert body["otherAccounts"] == 1
    assert body["borrowers"] == 1
    assert body["activeUsers"] == 2
