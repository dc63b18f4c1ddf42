import hashlib
import hmac
import secrets
from dataclasses import dataclass
from fastapi import Request
from sqlalchemy.orm import Session
from bananadb import crud
from bananadb.models import User

PBKDF2_ITERATIONS = 260000

def hash_password(password: str, salt: str | None = None, iterations: int = PBKDF2_ITERATIONS) -> str:
    salt = salt or secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt.encode("utf-8"), iterations)
    return f"pbkdf2_sha256${iterations}${salt}${digest.hex()}"

def verify_password(password: str, stored: str) -> bool:
    try:
        algorithm, iterations, salt, _ = stored.split("$", 3)
        iterations = int(iterations)
    except ValueError:
        return False
    if algorithm != "pbkdf2_sha256" or iterations < 1:
        return False
    return hmac.compare_digest(hash_password(password, salt, iterations), stored)

def authenticate(db: Session, email: str, password: str) -> User | None:
    user = crud.get_user_by_email(db, email)
    if user is None or not verify_password(password, user.password_hash):
        return None
    crud.record_sign_in(db, user)
    return user

def login_session(request: Request, user: User):
    request.session.clear()
    request.session["user_id"] = user.id

def logout_session(request: Request):
    request.session.clear()

def current_user(request: Request, db: Session) -> User | None:
    user_id = request.session.get("user_id")
    if user_id is None:
        return None
    return crud.get_user(db, user_id)

@dataclass(frozen=True)
class NavState:
    """What the navigation bar needs, built per request and passed to templates."""
    current_page: str
    user: User | None = None

    @property
    def is_admin(self) -> bool:
        return bool(self.user and self.user.is_admin)

    @property
    def display_name(self) -> str:
        if not self.user:
            return ""
        return self.user.full_name or self.user.email
