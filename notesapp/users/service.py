import logging
from typing import Optional
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from notesapp.extensions import db
from notesapp.users.models import User
from notesapp.common.errors import ApiError
from notesapp.common.validation import validate_email, validate_password_strength

logger = logging.getLogger(__name__)


def normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


def find_by_email(email: str) -> Optional[User]:
    return User.query.filter_by(email=normalize_email(email)).first()


def get_user(user_id: int) -> Optional[User]:
    return db.session.get(User, user_id)


def create_user(email: str, password: str) -> User:
    email_n = normalize_email(email)
    if not email_n or not password:
        raise ApiError("Email and password required", 400)
    if not validate_email(email_n):
        raise ApiError("Invalid email format", 400)

    strength = validate_password_strength(password)
    if not strength.is_valid:
        raise ApiError("Password requirements: " + ", ".join(strength.errors), 400)

    if find_by_email(email_n) is not None:
        raise ApiError("Email already registered", 409)

    user = User(email=email_n, auth_provider="local")
    user.set_password(password)
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        # inscription concurrente sur le même email
        db.session.rollback()
        raise ApiError("Email already registered", 409)
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("user_register_failed")
        raise ApiError("Registration failed", 500)
    return user


def authenticate_user(email: str, password: str) -> User:
    email_n = normalize_email(email)
    if not email_n or not password:
        raise ApiError("Email and password required", 400)
    if not validate_email(email_n):
        raise ApiError("Invalid email format", 400)

    user = find_by_email(email_n)
    # même message pour "inconnu" et "mauvais mot de passe" (anti-énumération)
    if not user or not user.check_password(password):
        raise ApiError("Invalid credentials", 401)
    return user


def upsert_google_user(email: str, google_sub: str) -> User:
    """Lie le compte existant (même email) ou crée un compte provider=google."""
    email_n = normalize_email(email)
    if not validate_email(email_n):
        raise ApiError("Invalid email from Google", 400)

    user = find_by_email(email_n)
    try:
        if user is not None:
            if not user.google_id:
                user.google_id = google_sub
                user.auth_provider = "google"
                db.session.commit()
        else:
            user = User(email=email_n, google_id=google_sub, auth_provider="google")
            db.session.add(user)
            db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ApiError("Google authentication failed", 401)
    return user
