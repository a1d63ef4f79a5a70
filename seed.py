# seed.py - demo users, loans and repayments, inserted once per empty table
import logging
from datetime import date, datetime
from sqlalchemy import func, insert, select

from auth import hash_password
from models import LoanApplication, Repayment, User

logger = logging.getLogger("loan-manager.seed")

DEFAULT_USERS = [
    {"full_name": "John Deo", "email": "admin@loanmanager.com", "password": "admin123", "role": "admin"},
    {"full_name": "John Okoh", "email": "verifier@loanmanager.com", "password": "verifier123", "role": "verifier"},
    {"full_name": "Regular User", "email": "user@loanmanager.com", "password": "user123", "role": "user"},
]

# owned by the demo user; "reviewed" loans carry the demo verifier as officer
SAMPLE_LOANS = [
    {"full_name": "Tom Cruise", "amount": 50000, "tenure": 12, "employment_status": "Employed",
     "reason": "Home renovation", "employment_address": "123 Hollywood Blvd, Los Angeles",
     "status": "pending", "created_at": datetime(2021, 6, 9)},
    {"full_name": "Robert Downey", "amount": 60000, "tenure": 24, "employment_status": "Employed",
     "reason": "When will I be charged this month?", "employment_address": "789 Malibu, CA",
     "status": "pending", "created_at": datetime(2021, 6, 8)},
    {"full_name": "Christian Bale", "amount": 40000, "tenure": 12,
     "employment_status": "Self-employed", "reason": "Payment not going through",
     "employment_address": "101 Gotham City", "status": "verified", "reviewed": True,
     "created_at": datetime(2021, 6, 8)},
    {"full_name": "Henry Cavill", "amount": 55000, "tenure": 24, "employment_status": "Employed",
     "reason": "Unable to add replies", "employment_address": "202 Metropolis",
     "status": "approved", "reviewed": True, "created_at": datetime(2021, 6, 8)},
    {"full_name": "Sam Smith", "amount": 30000, "tenure": 12, "employment_status": "Self-employed",
     "reason": "Referral Bonus", "employment_address": "404 London, UK",
     "status": "pending", "created_at": datetime(2021, 6, 8)},
    {"full_name": "Regular User", "amount": 100000, "tenure": 24,
     "employment_status": "Self-employed", "reason": "Business expansion",
     "employment_address": "456 Main St, New York", "status": "rejected", "reviewed": True,
     "created_at": datetime(2021, 6, 7)},
    {"full_name": "Regular User", "amount": 100000, "tenure": 24,
     "employment_status": "Self-employed", "reason": "Business expansion",
     "employment_address": "456 Main St, New York", "status": "approved", "reviewed": True,
     "disbursed_date": date(2021, 5, 27), "repayment_date": date(2023, 5, 27),
     "created_at": datetime(2021, 5, 27)},
]

# "loan" indexes SAMPLE_LOANS (the two approved samples)
SAMPLE_REPAYMENTS = [
    {"loan": 3, "amount": 10000, "payment_date": date(2021, 7, 8), "status": "completed"},
    {"loan": 6, "amount": 15000, "payment_date": date(2021, 7, 8), "status": "completed"},
    {"loan": 6, "amount": 25000, "payment_date": date(2021, 6, 27), "status": "completed"},
]


def _is_empty(sess, model):
    return sess.execute(select(func.count()).select_from(model)).scalar() == 0


def seed_default_users(sess):
    if not _is_empty(sess, User):
        return 0
    rows = [
        {"full_name": u["full_name"], "email": u["email"], "password": hash_password(u["password"]), "role": u["role"]}
        for u in DEFAULT_USERS
    ]
    sess.execute(insert(User), rows)
    logger.info("Default users added successfully.")
    return len(rows)


def _user_id(sess, email):
    return sess.execute(select(User.id).where(User.email == email)).scalar_one_or_none()


def seed_sample_loans(sess):
    """Insert SAMPLE_LOANS and return the created rows (empty if skipped)."""
    if not _is_empty(sess, LoanApplication):
        return []
    owner_id = _user_id(sess, "user@loanmanager.com")
    officer_id = _user_id(sess, "verifier@loanmanager.com")
    if owner_id is None or officer_id is None:
        logger.warning("Demo users missing, sample loans not added")
        return []

    loans = []
    for sample in SAMPLE_LOANS:
        fields = dict(sample)
        reviewed = fields.pop("reviewed", False)
        loans.append(LoanApplication(user_id=owner_id, loan_officer_id=officer_id if reviewed else None, **fields))
    sess.add_all(loans)
    sess.flush()
    logger.info("Sample loan applications added successfully.")
    return loans


def seed_sample_repayments(sess, loans):
    if not loans or not _is_empty(sess, Repayment):
        return []
    repayments = []
    for sample in SAMPLE_REPAYMENTS:
        fields = dict(sample)
        loan = loans[fields.pop("loan")]
        repayments.append(Repayment(loan_id=loan.id, **fields))
    sess.add_all(repayments)
    logger.info("Sample repayments added successfully.")
    return repayments


def seed_demo_data(database):
    """Seed every empty table; tables that already hold rows are left alone."""
    sess = database.session()
    try:
        seed_default_users(sess)
        loans = seed_sample_loans(sess)
        seed_sample_repayments(sess, loans)
        sess.commit()
    except Exception:
        sess.rollback()
        logger.exception("Seeding demo data failed")
        raise
    finally:
        sess.close()
