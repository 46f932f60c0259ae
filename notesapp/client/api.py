# notesapp/client/api.py
"""Client HTTP de l'API notes.

Les cookies (token / refreshToken) vivent dans le cookie jar de la session
``requests``: le client ne manipule jamais les tokens lui-même.
"""
import requests

API_PREFIX = "/api/v1"


class ClientError(Exception):
    def __init__(self, status_code: int, message: str, code=None):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.code = code


class NotesApiClient:
    def __init__(self, base_url: str = "", session=None, timeout: float = 10.0):
        self.base_url = base_url.rstrip("/")
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout

    def _url(self, path: str) -> str:
        return f"{self.base_url}{API_PREFIX}{path}"

    def _request(self, method: str, path: str, **kwargs):
        """Renvoie ``data`` de l'enveloppe, lève ClientError sinon.

        Une erreur réseau (serveur injoignable, timeout) devient un
        ClientError de statut 0.
        """
        try:
            resp = self.session.request(method, self._url(path), timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise ClientError(0, f"Network error: {e}") from e
        try:
            body = resp.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}

        if resp.status_code >= 400 or not body.get("success", False):
            raise ClientError(resp.status_code, body.get("error") or f"HTTP {resp.status_code}", body.get("code"))
        return body.get("data")

    # --- users
    def register(self, email: str, password: str) -> dict:
        return self._request("POST", "/users/register", json={"email": email, "password": password})

    def login(self, email: str, password: str) -> dict:
        return self._request("POST", "/users/login", json={"email": email, "password": password})

    def google_login(self, credential: str) -> dict:
        return self._request("POST", "/users/google", json={"credential": credential})

    def refresh(self) -> dict:
        return self._request("POST", "/users/refresh")

    def logout(self) -> dict:
        return self._request("POST", "/users/logout")

    # --- notes
    def list_notes(self, page: int = 1, limit: int = 20, q: str = "", title: str = "") -> dict:
        params = {"page": page, "limit": limit}
        if q:
            params["q"] = q
        if title:
            params["title"] = title
        return self._request("GET", "/notes", params=params)

    def create_note(self, title: str, contents: str) -> dict:
        return self._request("POST", "/notes", json={"title": title, "contents": contents})

    def update_note(self, note_id: int, title: str, contents: str) -> dict:
        return self._request("PUT", f"/notes/{note_id}", json={"title": title, "contents": contents})

    def delete_note(self, note_id: int) -> dict:
        return self._request("DELETE", f"/notes/{note_id}")
