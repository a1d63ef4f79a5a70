# auth.py - signup/login, credential tokens and role gates
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from fastapi import Depends, Header
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from werkzeug.security import generate_password_hash, check_password_hash

import config
from errors import AuthError, ConflictError, ForbiddenError, NotFoundError, TokenError
from models import Role, User

logger = logging.getLogger("loan-manager.auth")


@dataclass(frozen=True)
class CurrentUser:
    """Identity carried by a verified credential token."""
    id: int
    role: Role


def hash_password(password: str) -> str:
    return generate_password_hash(password)


def verify_password(password_hash: str, password: str) -> bool:
    return check_password_hash(password_hash or "", password)


def create_token(user_id: int, role, expires_minutes: Optional[int] = None) -> str:
    now = datetime.now(timezone.utc)
    minutes = config.JWT_EXPIRES_MINUTES if expires_minutes is None else expires_minutes
    payload = {
        "id": user_id,
        "role": Role(role).value,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(minutes=minutes)).timestamp()),
    }
    return jwt.encode(payload, config.JWT_SECRET, algorithm=config.JWT_ALGORITHM)


def decode_token(token: str) -> CurrentUser:
    try:
        data = jwt.decode(
            token,
            config.JWT_SECRET,
            algorithms=[config.JWT_ALGORITHM],
            options={"require": ["exp", "id", "role"]},
        )
        return CurrentUser(id=int(data["id"]), role=Role(data["role"]))
    except (jwt.InvalidTokenError, ValueError, TypeError) as e:
        logger.info("Rejected credential token: %s", e)
        raise TokenError("Invalid token.") from e


def signup(db_sess: Session, full_name: str, email: str, password: str) -> User:
    user = User(full_name=full_name, email=email, password=hash_password(password), role=Role.USER.value)
    db_sess.add(user)
    try:
        db_sess.commit()
    except IntegrityError as e:
        db_sess.rollback()
        logger.info("Signup rejected, email already registered: %s", email)
        raise ConflictError("Email already exists") from e
    db_sess.refresh(user)
    logger.info("New user signed up; user_id=%s", user.id)
    return user


def login(db_sess: Session, email: str, password: str):
    """Check credentials and return (token, user)."""
    user = db_sess.execute(select(User).where(User.email == email)).scalar_one_or_none()
    if user is None:
        raise NotFoundError("User not found")
    if not verify_password(user.password, password):
        logger.warning("Failed login attempt for user_id=%s", user.id)
        raise AuthError("Invalid credentials")

    token = create_token(user.id, user.role)
    logger.info("User logged in; user_id=%s role=%s", user.id, user.role)
    return token, user


# ---------- FastAPI dependencies ----------

def get_current_user(authorization: Optional[str] = Header(default=None)) -> CurrentUser:
    token = (authorization or "").strip()
    if token[:7].lower() == "bearer ":
        token = token[7:].strip()
    if not token:
        raise AuthError("Access denied. No token provided.")
    return decode_token(token)


def require_roles(*roles: Role, message: str = "Access denied."):
    """Build a dependency that admits only callers holding one of `roles`."""
    allowed = {Role(r) for r in roles}

    def dependency(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if user.role not in allowed:
            raise ForbiddenError(message)
        return user

    return dependency


require_verifier = require_roles(Role.VERIFIER, Role.ADMIN, message="Access denied. Verifier or admin role required.")
require_admin = require_roles(Role.ADMIN, message="Access denied. Admin role required.")
