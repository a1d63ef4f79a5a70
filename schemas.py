# schemas.py - request/response models; snake_case in Python, camelCase on the wire
import datetime
from typing import Annotated, List, Literal, Optional
from pydantic import BaseModel, ConfigDict, EmailStr, Field, StringConstraints, field_validator
from pydantic.alias_generators import to_camel

from models import LoanStatus, Role


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# passwords are compared byte for byte, so only free-text fields are trimmed
StrippedStr = Annotated[str, StringConstraints(strip_whitespace=True)]


def _required(value, label):
    if not value:
        raise ValueError(f"{label} is required")
    return value


def parse_iso_date(value):
    """Accept an ISO-8601 date or date-time string and keep the calendar date."""
    if value is None or type(value) is datetime.date:
        return value
    if isinstance(value, datetime.datetime):
        return value.date()
    if not isinstance(value, str):
        raise ValueError("must be an ISO-8601 date")
    try:
        return datetime.date.fromisoformat(value)
    except ValueError:
        pass
    try:
        return datetime.datetime.fromisoformat(value).date()
    except ValueError:
        raise ValueError("must be an ISO-8601 date") from None


# ---------- auth ----------

class SignupRequest(CamelModel):
    full_name: StrippedStr
    email: EmailStr
    password: str

    @field_validator("full_name")
    @classmethod
    def full_name_required(cls, v):
        return _required(v, "Full name")

    @field_validator("password")
    @classmethod
    def password_length(cls, v):
        if len(v) < 6:
            raise ValueError("Password must be at least 6 characters long")
        return v


class LoginRequest(CamelModel):
    email: EmailStr
    password: str

    @field_validator("password")
    @classmethod
    def password_required(cls, v):
        return _required(v, "Password")


class UserOut(CamelModel):
    id: int
    full_name: str
    email: str
    role: Role

    @classmethod
    def from_user(cls, user):
        return cls(id=user.id, full_name=user.full_name, email=user.email, role=user.role)


class LoginResponse(CamelModel):
    token: str
    user: UserOut


# ---------- loans ----------

class LoanCreateRequest(CamelModel):
    full_name: StrippedStr
    amount: float = Field(allow_inf_nan=False)
    tenure: int
    employment_status: StrippedStr
    reason: StrippedStr
    employment_address: StrippedStr

    @field_validator("amount")
    @classmethod
    def amount_minimum(cls, v):
        if v < 1000:
            raise ValueError("Amount must be at least 1000")
        return v

    @field_validator("tenure")
    @classmethod
    def tenure_minimum(cls, v):
        if v < 1:
            raise ValueError("Tenure must be at least 1 month")
        return v

    @field_validator("full_name", "employment_status", "reason", "employment_address")
    @classmethod
    def text_required(cls, v, info):
        labels = {
            "full_name": "Full name",
            "employment_status": "Employment status",
            "reason": "Reason for loan",
            "employment_address": "Employment address",
        }
        return _required(v, labels[info.field_name])


class LoanStatusUpdateRequest(CamelModel):
    status: Literal["approved", "rejected", "verified"]
    disbursed_date: Optional[datetime.date] = None
    repayment_date: Optional[datetime.date] = None

    @field_validator("disbursed_date", "repayment_date", mode="before")
    @classmethod
    def iso_date(cls, v):
        return parse_iso_date(v)


class LoanOut(CamelModel):
    id: int
    user_id: int
    full_name: str
    amount: float
    tenure: int
    employment_status: str
    reason: str
    employment_address: str
    status: LoanStatus
    loan_officer_id: Optional[int] = None
    disbursed_date: Optional[datetime.date] = None
    repayment_date: Optional[datetime.date] = None
    created_at: Optional[datetime.datetime] = None

    @staticmethod
    def loan_fields(loan):
        return {
            "id": loan.id,
            "user_id": loan.user_id,
            "full_name": loan.full_name,
            "amount": loan.amount,
            "tenure": loan.tenure,
            "employment_status": loan.employment_status,
            "reason": loan.reason,
            "employment_address": loan.employment_address,
            "status": loan.status,
            "loan_officer_id": loan.loan_officer_id,
            "disbursed_date": loan.disbursed_date,
            "repayment_date": loan.repayment_date,
            "created_at": loan.created_at,
        }

    @classmethod
    def from_loan(cls, loan):
        return cls(**cls.loan_fields(loan))


class UserLoanOut(LoanOut):
    loan_officer_name: Optional[str] = None

    @classmethod
    def from_row(cls, loan, loan_officer_name):
        return cls(**cls.loan_fields(loan), loan_officer_name=loan_officer_name)


class LoanReviewOut(LoanOut):
    user_full_name: str
    user_email: str
    verifier_name: Optional[str] = None

    @classmethod
    def from_row(cls, loan, user_full_name, user_email, verifier_name):
        return cls(
            **cls.loan_fields(loan),
            user_full_name=user_full_name,
            user_email=user_email,
            verifier_name=verifier_name,
        )


class MessageOut(BaseModel):
    message: str


class FormField(BaseModel):
    name: str
    label: str
    type: str
    required: bool = True
    min: Optional[float] = None
    options: Optional[List[str]] = None


class LoanApplicationForm(BaseModel):
    form_fields: List[FormField] = Field(alias="fields")
    terms: str


# ---------- dashboards ----------

class VerifierDashboard(CamelModel):
    loans: int = 0
    borrowers: int = 0
    cash_disbursed: float = 0
    savings: float = 0
    repaid_loans: int = 0
    cash_received: float = 0


class AdminDashboard(VerifierDashboard):
    active_users: int = 0
    other_accounts: int = 0
