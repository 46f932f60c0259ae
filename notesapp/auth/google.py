from typing import NamedTuple

from flask import current_app
from google.auth import exceptions as google_exceptions
from google.auth.transport import requests as google_requests
from google.oauth2 import id_token


class GoogleAuthError(Exception):
    pass


class GoogleIdentity(NamedTuple):
    email: str
    sub: str


class GoogleVerifier:
    """Vérifie un ID token Google (clés publiques Google + audience = client id)."""

    def __init__(self, client_id: str):
        self.client_id = client_id
        self._request = google_requests.Request()

    def verify(self, credential: str) -> GoogleIdentity:
        if not self.client_id:
            raise GoogleAuthError("GOOGLE_CLIENT_ID is not configured")
        try:
            payload = id_token.verify_oauth2_token(credential, self._request, audience=self.client_id)
        except (ValueError, google_exceptions.GoogleAuthError) as e:
            # signature, audience, expiration, émetteur…
            raise GoogleAuthError(str(e)) from e

        email = (payload.get("email") or "").strip().lower()
        sub = payload.get("sub")
        if not email or not sub:
            raise GoogleAuthError("token has no email/sub claim")
        return GoogleIdentity(email=email, sub=str(sub))


def get_google_verifier() -> GoogleVerifier:
    return current_app.extensions["google_verifier"]
