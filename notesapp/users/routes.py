import logging
from flask import Blueprint, request, current_app

from notesapp.extensions import limiter
from notesapp.users import service
from notesapp.users.schemas import CredentialsIn, GoogleLoginIn, UserOut
from notesapp.auth.tokens import get_token_service, RefreshTokenExpired, RefreshTokenInvalid
from notesapp.auth.google import get_google_verifier, GoogleAuthError
from notesapp.common.errors import ApiError
from notesapp.common.utils import success

logger = logging.getLogger(__name__)

bp = Blueprint("users", __name__)

credentials_in = CredentialsIn()
google_in = GoogleLoginIn()
user_out = UserOut()


def _auth_limit():
    return current_app.config.get("RATELIMIT_AUTH", "5 per 15 minutes")


def _start_session(user, message: str):
    """Réponse 200 + cookies access/refresh."""
    tokens = get_token_service()
    resp, status = success({"message": message})
    tokens.set_session_cookies(resp, tokens.issue_pair(user))
    return resp, status


@bp.post("/register")
@limiter.limit(_auth_limit)
def register():
    data = credentials_in.load(request.get_json(silent=True) or {})
    user = service.create_user(data["email"], data["password"])
    logger.info("user_registered", extra={"user_id": user.id})
    return success(user_out.dump(user), 201)


@bp.post("/login")
@limiter.limit(_auth_limit)
def login():
    data = credentials_in.load(request.get_json(silent=True) or {})
    user = service.authenticate_user(data["email"], data["password"])
    return _start_session(user, "Login successful")


@bp.post("/google")
def google_login():
    data = google_in.load(request.get_json(silent=True) or {})
    if not data["credential"]:
        raise ApiError("Google credential required", 400)

    try:
        identity = get_google_verifier().verify(data["credential"])
    except GoogleAuthError as e:
        logger.warning("google_verification_failed", extra={"reason": str(e)})
        raise ApiError("Google authentication failed", 401)

    user = service.upsert_google_user(identity.email, identity.sub)
    return _start_session(user, "Google login successful")


@bp.post("/refresh")
def refresh():
    """Nouveau cookie d'access token à partir du cookie refresh (pas de rotation)."""
    tokens = get_token_service()
    raw = request.cookies.get(current_app.config["JWT_REFRESH_COOKIE_NAME"])
    if not raw:
        raise ApiError("Refresh token required", 401)

    try:
        claims = tokens.decode_refresh_token(raw)
        user_id = int(claims["sub"])
    except RefreshTokenExpired:
        raise ApiError("Refresh token expired, please login again", 401, "REFRESH_TOKEN_EXPIRED")
    except (RefreshTokenInvalid, ValueError) as e:
        logger.warning("refresh_token_rejected", extra={"reason": str(e)})
        raise ApiError("Token refresh failed", 401)

    user = service.get_user(user_id)
    if user is None:
        raise ApiError("User not found", 404)

    resp, status = success({"message": "Token refreshed successfully"})
    tokens.set_access_cookie(resp, tokens.create_access_token(user))
    return resp, status


@bp.post("/logout")
def logout():
    resp, status = success({"message": "Logged out"})
    get_token_service().clear_cookies(resp)
    return resp, status
