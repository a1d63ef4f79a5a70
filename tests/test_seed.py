from sqlalchemy import func, select

import seed
from models import LoanApplication, Repayment, User


def _counts(database):
    sess = database.session()
    try:
        return tuple(
            sess.execute(select(func.count()).select_from(model)).scalar()
            for model in (User, LoanApplication, Repayment)
        )
    finally:
        sess.close()


def test_demo_data_seeded_on_startup(seeded_client, database):
    assert _counts(database) == (3, 7, 3)


def test_seeding_is_idempotent(seeded_client, database):
    seed.seed_demo_data(database)
    assert _counts(database) == (3, 7, 3)


def test_seeded_accounts_can_log_in(seeded_client):
    for email, password, role in [
        ("admin@loanmanager.com", "admin123", "admin"),
        ("verifier@loanmanager.com", "verifier123", "verifier"),
        ("user@loanmanager.com", "user123", "user"),
    ]:
        res = seeded_client.post("/login", json={"email": email, "password": password})
        assert res.status_code == 200
        assert res.json()["user"]["role"] == role


def test_seeded_loans_belong_to_demo_user(seeded_client):
    token = seeded_client.post("/login", json={"email": "user@loanmanager.com", "password": "user123"}).json()["token"]
    res = seeded_client.get("/user/loans", headers={"Authorization": f"Bearer {token}"})
    body = res.json()
    assert len(body) == 7
    assert body[0]["fullName"] == "Tom Cruise"
    reviewed = [loan for loan in body if loan["status"] != "pending"]
    assert reviewed and all(loan["loanOfficerName"] == "John Okoh" for loan in reviewed)
    dated = [loan for loan in body if loan["disbursedDate"]]
    assert [(loan["disbursedDate"], loan["repaymentDate"]) for loan in dated] == [("2021-05-27", "2023-05-27")]


def test_seeding_skipped_when_disabled(client, database):
    assert _counts(database) == (0, 0, 0)


def test_existing_users_are_left_alone(client, database, make_user):
    make_user("admin")
    seed.seed_demo_data(database)
    # demo users are not added, so there is nobody to own the sample loans
    assert _counts(database) == (1, 0, 0)
