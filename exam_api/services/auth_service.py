"""
Accounts and bearer tokens.

Every issued JWT carries a `jti` that names a row in `sessions`; a token is
honoured only while that row is active and unexpired, which is what makes
logout and server-side expiry work for otherwise stateless tokens.
"""
import logging
import uuid
from datetime import datetime, timedelta, timezone

import bcrypt
from jose import JWTError, jwt
from sqlalchemy import delete, or_, select
from sqlalchemy.orm import Session as DbSession

from exam_api.config import (
    ACCESS_TOKEN_EXPIRE_MINUTES,
    ALGORITHM,
    SECRET_KEY,
    SESSION_EXTEND_MINUTES,
)
from exam_api.models.db.user import Session, User, UserRole

logger = logging.getLogger(__name__)


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))


def issue_token(db: DbSession, user: User) -> str:
    """Sign a JWT for the user and open the session row it refers to."""
    jti = str(uuid.uuid4())
    expires_at = datetime.now(timezone.utc) + timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    token = jwt.encode(
        {"sub": str(user.id), "role": user.role, "jti": jti, "exp": expires_at},
        SECRET_KEY,
        algorithm=ALGORITHM,
    )
    db.add(Session(user_id=user.id, token_jti=jti, expires_at=expires_at))
    db.commit()
    logger.debug(f"Issued session {jti} for user {user.id}")
    return token


def decode_token(token: str) -> dict | None:
    """Claims of a validly signed, unexpired token, or None."""
    try:
        return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        return None


def get_user_by_id(db: DbSession, user_id: int) -> User | None:
    return db.get(User, user_id)


def get_user_by_username(db: DbSession, username: str) -> User | None:
    return db.execute(select(User).where(User.username == username)).scalar_one_or_none()


def get_user_by_email(db: DbSession, email: str) -> User | None:
    return db.execute(select(User).where(User.email == email)).scalar_one_or_none()


def find_user_by_login(db: DbSession, login: str) -> User | None:
    """Look a user up by username or email."""
    return db.execute(
        select(User).where(or_(User.username == login, User.email == login)).limit(1)
    ).scalar_one_or_none()


def authenticate(db: DbSession, login: str, password: str) -> User | None:
    """User matching the credentials, or None when they do not match."""
    user = find_user_by_login(db, login)
    if user is None or not verify_password(password, user.hashed_password):
        return None
    return user


def create_user(
    db: DbSession,
    username: str,
    email: str,
    password: str,
    full_name: str,
    phone: str | None = None,
    role: UserRole = UserRole.USER,
) -> User:
    user = User(
        username=username,
        email=email,
        hashed_password=hash_password(password),
        full_name=full_name,
        phone=phone,
        role=role.value,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info(f"Created {role.value} account {user.id} ({username})")
    return user


def get_active_session(db: DbSession, token_jti: str) -> Session | None:
    return db.execute(
        select(Session).where(
            Session.token_jti == token_jti,
            Session.is_active == True,  # noqa: E712
            Session.expires_at > datetime.now(timezone.utc),
        )
    ).scalar_one_or_none()


def touch_session(db: DbSession, session: Session) -> None:
    """Sliding expiry: activity pushes the session deadline forward."""
    now = datetime.now(timezone.utc)
    session.last_activity = now
    session.expires_at = now + timedelta(minutes=SESSION_EXTEND_MINUTES)
    db.commit()


def revoke_session(db: DbSession, token_jti: str) -> bool:
    session = db.execute(
        select(Session).where(Session.token_jti == token_jti)
    ).scalar_one_or_none()
    if session is None or not session.is_active:
        return False
    session.is_active = False
    db.commit()
    return True


def cleanup_expired_sessions(db: DbSession) -> int:
    """Delete sessions past their expiry. Returns how many were removed."""
    result = db.execute(
        delete(Session).where(Session.expires_at < datetime.now(timezone.utc))
    )
    db.commit()
    return result.rowcount or 0
