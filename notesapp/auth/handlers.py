import logging
from notesapp.common.errors import json_error

logger = logging.getLogger(__name__)


def register_jwt_handlers(jwt):
    """Callbacks flask-jwt-extended -> erreurs 401 catégorisées."""

    @jwt.unauthorized_loader
    def unauthorized_callback(err_msg):
        # cookie absent
        return json_error("Authentication required", 401)

    @jwt.expired_token_loader
    def expired_token_callback(jwt_header, jwt_payload):
        return json_error("Token expired", 401, "TOKEN_EXPIRED")

    @jwt.invalid_token_loader
    def invalid_token_callback(err_msg):
        # signature fausse, token mal formé, mauvais type de token
        return json_error("Invalid token", 401, "INVALID_TOKEN")

    @jwt.token_verification_failed_loader
    def verification_failed_callback(jwt_header, jwt_payload):
        logger.warning("jwt_verification_failed")
        return json_error("Authentication failed", 401)

    @jwt.user_lookup_error_loader
    def user_lookup_error_callback(jwt_header, jwt_payload):
        return json_error("Authentication failed", 401)
