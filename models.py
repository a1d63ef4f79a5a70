# models.py - SQLAlchemy models for users, loan applications and repayments
import datetime
import enum
from sqlalchemy import Column, Integer, String, Float, Date, Text, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class Role(str, enum.Enum):
    ADMIN = "admin"
    VERIFIER = "verifier"
    USER = "user"


class LoanStatus(str, enum.Enum):
    PENDING = "pending"
    VERIFIED = "verified"
    APPROVED = "approved"
    REJECTED = "rejected"


class RepaymentStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


def _check_in(table, column, choices):
    values = ", ".join(f"'{c.value}'" for c in choices)
    return CheckConstraint(f"{column} IN ({values})", name=f"ck_{table}_{column}")


class User(Base):
    __tablename__ = "users"
    __table_args__ = (_check_in("users", "role", Role),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    full_name = Column(Text, nullable=False)
    email = Column(String(320), unique=True, nullable=False)
    password = Column(Text, nullable=False)
    role = Column(String(20), nullable=False, default=Role.USER.value)
    created_at = Column(DateTime, nullable=False, default=datetime.datetime.utcnow)


class LoanApplication(Base):
    __tablename__ = "loan_applications"
    __table_args__ = (_check_in("loan_applications", "status", LoanStatus),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    full_name = Column(Text, nullable=False)
    amount = Column(Float, nullable=False)
    tenure = Column(Integer, nullable=False)
    employment_status = Column(Text, nullable=False)
    reason = Column(Text, nullable=False)
    employment_address = Column(Text, nullable=False)
    status = Column(String(20), nullable=False, default=LoanStatus.PENDING.value)
    loan_officer_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    disbursed_date = Column(Date, nullable=True)
    repayment_date = Column(Date, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.datetime.utcnow)


class Repayment(Base):
    __tablename__ = "repayments"
    __table_args__ = (_check_in("repayments", "status", RepaymentStatus),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    loan_id = Column(Integer, ForeignKey("loan_applications.id"), nullable=False)
    amount = Column(Float, nullable=False)
    payment_date = Column(Date, nullable=False)
    status = Column(String(20), nullable=False, default=RepaymentStatus.PENDING.value)
    created_at = Column(DateTime, nullable=False, default=datetime.datetime.utcnow)
