"""
Credential store: account lookup, creation and password checks.
"""
from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from werkzeug.security import check_password_hash, generate_password_hash

from app.roster.models import Role, User

logger = logging.getLogger(__name__)


class UsernameTaken(Exception):
    def __init__(self, username: str) -> None:
        super().__init__(f"Username already taken: {username}")
        self.username = username


def find_account(s: Session, username: str) -> User | None:
    return s.query(User).filter(User.username == username).one_or_none()


def list_accounts(s: Session) -> list[User]:
    return s.query(User).order_by(User.username.asc()).all()


def create_account(s: Session, username: str, password: str, role: Role = Role.USER) -> User:
    """
    Insert a new account and flush. Raises UsernameTaken if the name exists,
    including when a concurrent insert wins the race and the unique index rejects ours.
    """
    if find_account(s, username) is not None:
        raise UsernameTaken(username)

    user = User(username=username, password_hash=generate_password_hash(password), role=role)
    s.add(user)
    try:
        s.flush()
    except IntegrityError as e:
        s.rollback()
        raise UsernameTaken(username) from e
    logger.info("account.create username=%s role=%s", username, role.value)
    return user


def authenticate(s: Session, username: str, password: str) -> User | None:
    """
    Returns the account when the password matches, otherwise None.
    Unknown usernames and wrong passwords are indistinguishable to the caller.
    """
    user = find_account(s, username)
    if user is None or not check_password_hash(user.password_hash, password):
        return None
    return user


def ensure_account(s: Session, username: str, password: str, role: Role) -> bool:
    """
    Create the account if missing. Never touches an existing account's password or role.
    Returns True when an account was created.
    """
    if find_account(s, username) is not None:
        return False
    create_account(s, username, password, role=role)
    return True
