import logging
from flask import Blueprint, request
from sqlalchemy.exc import SQLAlchemyError

from notesapp.extensions import db
from notesapp.notes import service
from notesapp.notes.schemas import NoteIn, NoteListQuery, NoteOut, NotePageOut
from notesapp.common.authz import auth_required, current_user
from notesapp.common.errors import ApiError
from notesapp.common.utils import success
from notesapp.common.validation import validate_note_input, validate_pagination

logger = logging.getLogger(__name__)

bp = Blueprint("notes", __name__)

note_in = NoteIn()
note_out = NoteOut()
list_query = NoteListQuery()
page_out = NotePageOut()


# borne de la colonne INTEGER (Postgres)
MAX_NOTE_ID = 2**31 - 1


def _parse_note_id(raw: str) -> int:
    try:
        note_id = int(raw)
    except ValueError:
        note_id = 0
    if not 1 <= note_id <= MAX_NOTE_ID:
        raise ApiError("Invalid note ID", 400)
    return note_id


def _load_note_body() -> dict:
    data = note_in.load(request.get_json(silent=True) or {})
    result = validate_note_input(data["title"], data["contents"])
    if not result.is_valid:
        raise ApiError("; ".join(result.errors), 400)
    return data


def _db_failure(message: str):
    db.session.rollback()
    logger.exception("notes_db_error", extra={"method": request.method, "path": request.path})
    return ApiError(message, 500)


@bp.get("/", strict_slashes=False)
@auth_required
def list_notes():
    args = list_query.load(request.args.to_dict())
    pagination = validate_pagination(args["page"], args["limit"])
    if not pagination.is_valid:
        raise ApiError("; ".join(pagination.errors), 400)

    try:
        page = service.list_notes(
            current_user().id,
            pagination.page,
            pagination.limit,
            title=args["title"],
            q=args["q"],
        )
    except SQLAlchemyError:
        raise _db_failure("Failed to fetch notes")
    return success(page_out.dump(page))


@bp.post("/", strict_slashes=False)
@auth_required
def create_note():
    data = _load_note_body()
    try:
        note = service.create_note(current_user().id, data["title"], data["contents"])
    except SQLAlchemyError:
        raise _db_failure("Failed to create note")
    return success(note_out.dump(note), 201)


@bp.put("/<note_id>")
@auth_required
def update_note(note_id):
    note_id = _parse_note_id(note_id)
    data = _load_note_body()
    try:
        note = service.update_note(current_user().id, note_id, data["title"], data["contents"])
    except SQLAlchemyError:
        raise _db_failure("Failed to update note")
    # note d'un autre utilisateur: 404, pas 403
    if note is None:
        raise ApiError("Note not found", 404)
    return success(note_out.dump(note))


@bp.delete("/<note_id>")
@auth_required
def delete_note(note_id):
    note_id = _parse_note_id(note_id)
    try:
        deleted = service.delete_note(current_user().id, note_id)
    except SQLAlchemyError:
        raise _db_failure("Failed to delete note")
    if not deleted:
        raise ApiError("Note not found", 404)
    return success({"message": "Note deleted successfully"})
