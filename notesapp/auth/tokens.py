"""Émission/vérification des tokens et pose des cookies.

- access token: flask-jwt-extended (JWT_SECRET_KEY, cookie ``token``, 1h)
- refresh token: PyJWT signé avec REFRESH_TOKEN_SECRET (cookie ``refreshToken``, 7j)

Les deux secrets sont distincts: un refresh token présenté comme access
token (ou l'inverse) échoue à la vérification de signature.
"""
import uuid
from datetime import datetime, timezone

import jwt as pyjwt
from flask import current_app
from flask_jwt_extended import create_access_token, set_access_cookies, unset_jwt_cookies


class RefreshTokenExpired(Exception):
    pass


class RefreshTokenInvalid(Exception):
    pass


class TokenService:
    def __init__(self, refresh_secret: str, refresh_expires, algorithm: str = "HS256"):
        if not refresh_secret:
            raise ValueError("refresh_secret is required")
        self.refresh_secret = refresh_secret
        self.refresh_expires = refresh_expires
        self.algorithm = algorithm

    @classmethod
    def from_config(cls, config) -> "TokenService":
        return cls(
            refresh_secret=config["REFRESH_TOKEN_SECRET"],
            refresh_expires=config["REFRESH_TOKEN_EXPIRES"],
            algorithm=config.get("JWT_ALGORITHM", "HS256"),
        )

    # --- access
    def create_access_token(self, user) -> str:
        return create_access_token(identity=str(user.id), additional_claims={"email": user.email})

    # --- refresh
    def create_refresh_token(self, user) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            "sub": str(user.id),
            "type": "refresh",
            "jti": str(uuid.uuid4()),
            "iat": now,
            "exp": now + self.refresh_expires,
        }
        return pyjwt.encode(payload, self.refresh_secret, algorithm=self.algorithm)

    def decode_refresh_token(self, token: str) -> dict:
        try:
            payload = pyjwt.decode(
                token,
                self.refresh_secret,
                algorithms=[self.algorithm],
                options={"require": ["sub", "exp"]},
            )
        except pyjwt.ExpiredSignatureError as e:
            raise RefreshTokenExpired(str(e)) from e
        except pyjwt.InvalidTokenError as e:
            raise RefreshTokenInvalid(str(e)) from e
        if payload.get("type") != "refresh":
            raise RefreshTokenInvalid("not a refresh token")
        return payload

    def issue_pair(self, user) -> dict:
        """Émet un couple {access, refresh} pour un utilisateur."""
        return {
            "access_token": self.create_access_token(user),
            "refresh_token": self.create_refresh_token(user),
        }

    # --- cookies
    def set_access_cookie(self, response, access_token: str):
        max_age = int(current_app.config["JWT_ACCESS_TOKEN_EXPIRES"].total_seconds())
        set_access_cookies(response, access_token, max_age=max_age)

    def set_refresh_cookie(self, response, refresh_token: str):
        cfg = current_app.config
        response.set_cookie(
            cfg["JWT_REFRESH_COOKIE_NAME"],
            value=refresh_token,
            max_age=int(self.refresh_expires.total_seconds()),
            secure=cfg["JWT_COOKIE_SECURE"],
            httponly=True,
            samesite=cfg["JWT_COOKIE_SAMESITE"],
            path="/",
        )

    def set_session_cookies(self, response, tokens: dict):
        self.set_access_cookie(response, tokens["access_token"])
        self.set_refresh_cookie(response, tokens["refresh_token"])

    def clear_cookies(self, response):
        unset_jwt_cookies(response)


def get_token_service() -> TokenService:
    return current_app.extensions["tokens"]
