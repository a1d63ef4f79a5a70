# stats.py - dashboard aggregates for admins and verifiers
from sqlalchemy import and_, distinct, exists, func, select
from sqlalchemy.orm import Session

from models import LoanApplication, LoanStatus, Repayment, RepaymentStatus, User

_APPROVED = LoanStatus.APPROVED.value
_FINAL = (LoanStatus.APPROVED.value, LoanStatus.REJECTED.value)


def _scalar(db_sess, stmt, default=0):
    value = db_sess.execute(stmt).scalar()
    return default if value is None else value


def _completed_repayments_total(db_sess):
    return _scalar(
        db_sess,
        select(func.sum(Repayment.amount)).where(Repayment.status == RepaymentStatus.COMPLETED.value),
    )


def _loan_totals(db_sess):
    has_completed_repayment = exists().where(
        and_(Repayment.loan_id == LoanApplication.id, Repayment.status == RepaymentStatus.COMPLETED.value)
    ).correlate(LoanApplication)
    row = db_sess.execute(
        select(
            func.count(LoanApplication.id),
            func.count(distinct(LoanApplication.user_id)),
            func.sum(LoanApplication.amount).filter(LoanApplication.status == _APPROVED),
            func.count(LoanApplication.id).filter(
                and_(LoanApplication.status == _APPROVED, has_completed_repayment)
            ),
            func.count(LoanApplication.id).filter(LoanApplication.status.not_in(_FINAL)),
        )
    ).one()
    loans, borrowers, cash_disbursed, repaid_loans, other_accounts = row
    return {
        "loans": loans or 0,
        "borrowers": borrowers or 0,
        "cash_disbursed": cash_disbursed or 0,
        "repaid_loans": repaid_loans or 0,
        "other_accounts": other_accounts or 0,
    }


def verifier_dashboard(db_sess: Session) -> dict:
    totals = _loan_totals(db_sess)
    received = _completed_repayments_total(db_sess)
    return {
        "loans": totals["loans"],
        "borrowers": totals["borrowers"],
        "cash_disbursed": totals["cash_disbursed"],
        "savings": received,
        "repaid_loans": totals["repaid_loans"],
        "cash_received": received,
    }


def admin_dashboard(db_sess: Session) -> dict:
    """Loan totals plus the user count and loans still awaiting a final decision."""
    totals = _loan_totals(db_sess)
    received = _completed_repayments_total(db_sess)
    totals.update(
        active_users=_scalar(db_sess, select(func.count(User.id))),
        cash_received=received,
        savings=received,
    )
    return totals
