from functools import wraps
from typing import NamedTuple, Optional
from flask import g
from flask_jwt_extended import verify_jwt_in_request, get_jwt
from notesapp.common.errors import ApiError


class CurrentUser(NamedTuple):
    id: int
    email: Optional[str]


def current_user() -> CurrentUser:
    return g.current_user


def auth_required(fn):
    """
    Ex: @auth_required
    Lit le cookie d'access token; les erreurs (absent, expiré, invalide)
    sont rendues par les callbacks JWT (voir notesapp.auth.handlers).
    """
    @wraps(fn)
    def inner(*args, **kwargs):
        verify_jwt_in_request()  # lève si non authentifié / token invalide
        claims = get_jwt() or {}
        try:
            user_id = int(claims["sub"])
        except (KeyError, TypeError, ValueError):
            raise ApiError("Invalid token", 401, "INVALID_TOKEN")
        g.current_user = CurrentUser(id=user_id, email=claims.get("email"))
        return fn(*args, **kwargs)
    return inner
