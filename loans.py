# loans.py - loan applications: submission, review queries and status transitions
import logging
from sqlalchemy import select, update
from sqlalchemy.orm import Session, aliased

from auth import CurrentUser
from errors import InvalidStateError, NotFoundError
from models import LoanApplication, LoanStatus, User

logger = logging.getLogger("loan-manager.loans")

RECENT_LOANS_LIMIT = 20

EMPLOYMENT_STATUSES = ["Employed", "Self-employed", "Unemployed", "Student", "Retired"]

LOAN_APPLICATION_FORM = {
    "fields": [
        {"name": "fullName", "label": "Full name as it appears on bank account", "type": "text", "required": True},
        {"name": "amount", "label": "How much do you need?", "type": "number", "required": True, "min": 1000},
        {"name": "tenure", "label": "Loan tenure (in months)", "type": "number", "required": True, "min": 1},
        {"name": "employmentStatus", "label": "Employment status", "type": "select", "required": True,
         "options": EMPLOYMENT_STATUSES},
        {"name": "reason", "label": "Reason for loan", "type": "textarea", "required": True},
        {"name": "employmentAddress", "label": "Employment address", "type": "text", "required": True},
    ],
    "terms": (
        "I have read the important information and accept that by completing the application "
        "I will be bound by the terms. Additional credit information obtained may be disclosed "
        "from time to time to other lenders, credit bureaus or other credit reporting agencies."
    ),
}

_newest_first = (LoanApplication.created_at.desc(), LoanApplication.id.desc())


def create_loan(db_sess: Session, owner: CurrentUser, full_name, amount, tenure,
                employment_status, reason, employment_address) -> LoanApplication:
    loan = LoanApplication(
        user_id=owner.id,
        full_name=full_name,
        amount=amount,
        tenure=tenure,
        employment_status=employment_status,
        reason=reason,
        employment_address=employment_address,
        status=LoanStatus.PENDING.value,
    )
    db_sess.add(loan)
    db_sess.commit()
    db_sess.refresh(loan)
    logger.info("Loan application %s submitted by user_id=%s amount=%s", loan.id, owner.id, amount)
    return loan


def list_user_loans(db_sess: Session, user_id: int):
    """Caller's own loans with the officer's name, as (loan, officer_name) rows."""
    officer = aliased(User)
    stmt = (
        select(LoanApplication, officer.full_name)
        .outerjoin(officer, LoanApplication.loan_officer_id == officer.id)
        .where(LoanApplication.user_id == user_id)
        .order_by(*_newest_first)
    )
    return db_sess.execute(stmt).all()


def list_loans(db_sess: Session, limit=None):
    """All loans with applicant and officer, as (loan, applicant_name, applicant_email, officer_name) rows."""
    applicant = aliased(User)
    officer = aliased(User)
    stmt = (
        select(LoanApplication, applicant.full_name, applicant.email, officer.full_name)
        .join(applicant, LoanApplication.user_id == applicant.id)
        .outerjoin(officer, LoanApplication.loan_officer_id == officer.id)
        .order_by(*_newest_first)
    )
    if limit is not None:
        stmt = stmt.limit(limit)
    return db_sess.execute(stmt).all()


def list_recent_loans(db_sess: Session):
    return list_loans(db_sess, limit=RECENT_LOANS_LIMIT)


def verify_loan(db_sess: Session, loan_id: int, officer: CurrentUser):
    # the status predicate makes concurrent verifications race-safe
    result = db_sess.execute(
        update(LoanApplication)
        .where(LoanApplication.id == loan_id, LoanApplication.status == LoanStatus.PENDING.value)
        .values(status=LoanStatus.VERIFIED.value, loan_officer_id=officer.id)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        db_sess.rollback()
        logger.warning("Verify rejected for loan %s by user_id=%s: not found or not pending", loan_id, officer.id)
        raise InvalidStateError("Loan not found or not pending")
    db_sess.commit()
    logger.info("Loan %s verified by user_id=%s", loan_id, officer.id)


def update_loan_status(db_sess: Session, loan_id: int, officer: CurrentUser, status,
                       disbursed_date=None, repayment_date=None):
    """Admin transition to approved/rejected/verified.

    Both dates are written as given, so omitting one clears it. Only the
    move to "verified" is guarded; approved/rejected are accepted from any
    current status.
    """
    status = LoanStatus(status)
    current = db_sess.execute(
        select(LoanApplication.status).where(LoanApplication.id == loan_id)
    ).scalar_one_or_none()
    if current is None:
        raise NotFoundError("Loan not found")

    stmt = update(LoanApplication).where(LoanApplication.id == loan_id)
    if status is LoanStatus.VERIFIED:
        if current != LoanStatus.PENDING.value:
            logger.warning("Status update rejected for loan %s: %s -> verified", loan_id, current)
            raise InvalidStateError("Only pending loans can be verified")
        stmt = stmt.where(LoanApplication.status == LoanStatus.PENDING.value)

    result = db_sess.execute(
        stmt.values(
            status=status.value,
            loan_officer_id=officer.id,
            disbursed_date=disbursed_date,
            repayment_date=repayment_date,
        ).execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        db_sess.rollback()
        if status is LoanStatus.VERIFIED:
            raise InvalidStateError("Only pending loans can be verified")
        raise NotFoundError("Loan not found")
    db_sess.commit()
    logger.info("Loan %s status %s -> %s by user_id=%s", loan_id, current, status.value, officer.id)
