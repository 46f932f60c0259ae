"""Validateurs purs: aucun effet de bord, jamais d'exception.

Chaque fonction renvoie un résultat structuré; c'est aux routes de
transformer un résultat invalide en réponse 400.
"""
import re
from typing import List, NamedTuple

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
EMAIL_MAX_LENGTH = 254

PASSWORD_MIN_LENGTH = 8
PASSWORD_SPECIALS = "!@#$%^&*"

TITLE_MAX_LENGTH = 500
CONTENTS_MAX_LENGTH = 50_000

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 20
MAX_LIMIT = 100


class ValidationResult(NamedTuple):
    is_valid: bool
    errors: List[str]


class PaginationResult(NamedTuple):
    is_valid: bool
    errors: List[str]
    page: int
    limit: int


def validate_email(email) -> bool:
    if not isinstance(email, str):
        return False
    return bool(EMAIL_RE.match(email)) and len(email) <= EMAIL_MAX_LENGTH


def validate_password_strength(password) -> ValidationResult:
    password = password if isinstance(password, str) else ""
    errors = []
    if len(password) < PASSWORD_MIN_LENGTH:
        errors.append(f"Password must be at least {PASSWORD_MIN_LENGTH} characters")
    if not re.search(r"[a-z]", password):
        errors.append("Password must contain lowercase letters")
    if not re.search(r"[A-Z]", password):
        errors.append("Password must contain uppercase letters")
    if not re.search(r"\d", password):
        errors.append("Password must contain numbers")
    if not any(c in PASSWORD_SPECIALS for c in password):
        errors.append(f"Password must contain special characters ({PASSWORD_SPECIALS})")
    return ValidationResult(not errors, errors)


def validate_note_input(title, contents=None) -> ValidationResult:
    errors = []
    if not isinstance(title, str) or not title.strip():
        errors.append("Title is required")
    elif len(title) > TITLE_MAX_LENGTH:
        errors.append(f"Title must not exceed {TITLE_MAX_LENGTH} characters")
    if contents is not None and not isinstance(contents, str):
        errors.append("Contents must be a string")
    elif contents and len(contents) > CONTENTS_MAX_LENGTH:
        errors.append("Note content must not exceed 50,000 characters")
    return ValidationResult(not errors, errors)


def _to_int(value, default: int) -> int:
    # valeur absente / vide / non numérique -> défaut
    if value is None or isinstance(value, bool):
        return default
    try:
        return int(str(value).strip())
    except ValueError:
        return default


def validate_pagination(page=None, limit=None) -> PaginationResult:
    page_n = _to_int(page, DEFAULT_PAGE)
    limit_n = _to_int(limit, DEFAULT_LIMIT)

    errors = []
    if page_n < 1:
        errors.append("Page must be >= 1")

    return PaginationResult(
        not errors,
        errors,
        max(page_n, 1),
        min(max(limit_n, 1), MAX_LIMIT),
    )
