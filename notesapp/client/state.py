# notesapp/client/state.py
"""État de l'interface notes (session, liste paginée, formulaire d'édition).

L'état visible dérive toujours du dernier fetch réussi: la page 1 remplace
la liste, les pages suivantes s'ajoutent à la fin.
"""
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from notesapp.client.api import ClientError, NotesApiClient

logger = logging.getLogger(__name__)

PROTECTED_PATHS = {"/"}
PUBLIC_PATHS = {"/login", "/register"}


@dataclass
class NotesState:
    is_logged_in: bool = False
    checking_auth: bool = True
    notes: List[dict] = field(default_factory=list)
    current_page: int = 1
    limit: int = 20
    has_next_page: bool = False
    search_term: str = ""
    title: str = ""
    contents: str = ""
    editing_note_id: Optional[int] = None
    error: str = ""


class NotesStore:
    def __init__(self, api: NotesApiClient, limit: int = 20):
        self.api = api
        self.state = NotesState(limit=limit)

    # --- session
    def start(self) -> NotesState:
        """Premier chargement: la session est valide si la liste se charge."""
        self.fetch_notes()
        return self.state

    def fetch_notes(self, page: int = 1, q: str = "", _retry: bool = True) -> bool:
        s = self.state
        try:
            data = self.api.list_notes(page=page, limit=s.limit, q=q)
        except ClientError as e:
            if e.status_code == 401 and _retry:
                return self.refresh_session(page, q)
            logger.warning("fetch_notes_failed", extra={"status": e.status_code, "reason": e.message})
            self._logged_out()
            return False
        finally:
            s.checking_auth = False

        if page == 1:
            s.notes = list(data["notes"])
        else:
            s.notes = s.notes + list(data["notes"])
        s.current_page = page
        s.has_next_page = bool(data["hasNextPage"])
        s.search_term = q
        s.is_logged_in = True
        return True

    def refresh_session(self, page: int = 1, q: str = "") -> bool:
        """Refresh silencieux puis un seul nouvel essai."""
        try:
            self.api.refresh()
        except ClientError as e:
            logger.warning("refresh_failed", extra={"status": e.status_code, "reason": e.message})
            self.logout()
            return False
        return self.fetch_notes(page, q, _retry=False)

    def login(self, email: str, password: str) -> bool:
        if not email.strip() or not password:
            return False
        self.state.error = ""
        try:
            self.api.login(email, password)
        except ClientError as e:
            self.state.error = e.message or "Login failed"
            return False
        return self.fetch_notes()

    def register(self, email: str, password: str) -> bool:
        if not email.strip() or not password:
            return False
        self.state.error = ""
        try:
            self.api.register(email, password)
            self.api.login(email, password)
        except ClientError as e:
            self.state.error = e.message or "Registration failed"
            return False
        return self.fetch_notes()

    def google_login(self, credential: str) -> bool:
        self.state.error = ""
        try:
            self.api.google_login(credential)
        except ClientError as e:
            self.state.error = e.message or "Google login failed"
            return False
        return self.fetch_notes()

    def logout(self) -> None:
        try:
            self.api.logout()
        except ClientError as e:
            logger.warning("logout_failed", extra={"status": e.status_code})
        self._logged_out()

    def _logged_out(self) -> None:
        s = self.state
        s.is_logged_in = False
        s.notes = []
        s.current_page = 1
        s.has_next_page = False
        s.editing_note_id = None
        s.title = ""
        s.contents = ""

    # --- formulaire
    def start_edit(self, note: dict) -> None:
        self.state.title = note["title"]
        self.state.contents = note.get("contents") or ""
        self.state.editing_note_id = note["id"]

    def submit_note(self) -> bool:
        """Update si une note est en édition, sinon création; vide le formulaire."""
        s = self.state
        if not s.title.strip() or not s.contents.strip():
            return False
        s.error = ""
        try:
            if s.editing_note_id is not None:
                updated = self.api.update_note(s.editing_note_id, s.title.strip(), s.contents.strip())
                s.notes = [updated if n["id"] == s.editing_note_id else n for n in s.notes]
                s.editing_note_id = None
            else:
                created = self.api.create_note(s.title.strip(), s.contents.strip())
                s.notes = [created] + s.notes
        except ClientError as e:
            s.error = e.message or "Failed to save note"
            return False
        s.title = ""
        s.contents = ""
        return True

    def delete_note(self, note_id: int) -> bool:
        try:
            self.api.delete_note(note_id)
        except ClientError as e:
            self.state.error = e.message or "Failed to delete note"
            return False
        self.state.notes = [n for n in self.state.notes if n["id"] != note_id]
        return True

    # --- recherche / pagination
    def search(self, term: str) -> bool:
        return self.fetch_notes(1, term)

    def clear_search(self) -> bool:
        return self.fetch_notes(1)

    def next_page(self) -> bool:
        if not self.state.has_next_page:
            return False
        return self.fetch_notes(self.state.current_page + 1, self.state.search_term)

    # --- garde de routes
    def guard(self, path: str) -> str:
        """Vue à afficher pour ``path``: "checking", ou un chemin (éventuellement redirigé)."""
        s = self.state
        if path in PROTECTED_PATHS:
            if s.checking_auth:
                return "checking"
            return path if s.is_logged_in else "/login"
        if path in PUBLIC_PATHS:
            return path
        return "/" if s.is_logged_in else "/login"
