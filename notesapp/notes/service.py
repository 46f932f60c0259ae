"""Accès aux notes, toujours filtré par propriétaire dans la requête SQL.

Les fonctions prennent des valeurs simples (user_id, filtres) et ne
connaissent ni la requête Flask ni la réponse HTTP.
"""
from typing import List, NamedTuple, Optional
from sqlalchemy import or_
from notesapp.extensions import db
from notesapp.notes.models import Note

FILTER_MAX_LENGTH = 500
LIKE_ESCAPE = "\\"


class NotePage(NamedTuple):
    notes: List[Note]
    page: int
    limit: int
    total_notes: int
    has_next_page: bool
    next_page: Optional[int]


def like_pattern(term: Optional[str]) -> str:
    """'%terme%' échappé; terme vide -> '%' (tout)."""
    term = (term or "").strip()[:FILTER_MAX_LENGTH]
    if not term:
        return "%"
    for ch in (LIKE_ESCAPE, "%", "_"):
        term = term.replace(ch, LIKE_ESCAPE + ch)
    return f"%{term}%"


def list_notes(user_id: int, page: int, limit: int, title: str = "", q: str = "") -> NotePage:
    title_p = like_pattern(title)
    search_p = like_pattern(q)

    query = Note.query.filter(
        Note.user_id == user_id,
        Note.title.ilike(title_p, escape=LIKE_ESCAPE),
        or_(
            Note.title.ilike(search_p, escape=LIKE_ESCAPE),
            Note.contents.ilike(search_p, escape=LIKE_ESCAPE),
        ),
    )

    offset = (page - 1) * limit
    total = query.count()
    rows = query.order_by(Note.created_at.desc(), Note.id.desc()).limit(limit).offset(offset).all()

    has_next = offset + len(rows) < total
    return NotePage(
        notes=rows,
        page=page,
        limit=limit,
        total_notes=total,
        has_next_page=has_next,
        next_page=page + 1 if has_next else None,
    )


def create_note(user_id: int, title: str, contents: Optional[str]) -> Note:
    note = Note(title=title.strip(), contents=(contents or "").strip(), user_id=user_id)
    db.session.add(note)
    db.session.commit()
    return note


def update_note(user_id: int, note_id: int, title: str, contents: Optional[str]) -> Optional[Note]:
    """Met à jour la note (id + propriétaire). None si aucune ligne ne correspond.

    Seules les colonnes modifiées sont écrites: rejouer la même mise à jour
    ne touche pas updated_at.
    """
    note = Note.query.filter_by(id=note_id, user_id=user_id).first()
    if note is None:
        return None

    title = title.strip()
    contents = (contents or "").strip()
    if note.title != title:
        note.title = title
    if note.contents != contents:
        note.contents = contents
    db.session.commit()
    return note


def delete_note(user_id: int, note_id: int) -> bool:
    deleted = Note.query.filter_by(id=note_id, user_id=user_id).delete(synchronize_session=False)
    db.session.commit()
    return deleted > 0
