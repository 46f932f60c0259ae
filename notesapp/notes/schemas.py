from marshmallow import Schema, fields, EXCLUDE


class NoteIn(Schema):
    """Types seulement; longueurs/obligations via common.validation.validate_note_input."""
    class Meta:
        unknown = EXCLUDE

    title = fields.String(load_default=None, allow_none=True)
    contents = fields.String(load_default=None, allow_none=True)


class NoteListQuery(Schema):
    class Meta:
        unknown = EXCLUDE

    # page/limit restent bruts: validate_pagination les convertit
    page = fields.Raw(load_default=None)
    limit = fields.Raw(load_default=None)
    title = fields.String(load_default="")
    q = fields.String(load_default="")


class NoteOut(Schema):
    id = fields.Integer(required=True)
    title = fields.String(required=True)
    contents = fields.String(required=True)
    created_at = fields.DateTime(required=True)
    updated_at = fields.DateTime(required=True)


class NotePageOut(Schema):
    notes = fields.List(fields.Nested(NoteOut))
    page = fields.Integer()
    limit = fields.Integer()
    totalNotes = fields.Integer(attribute="total_notes")
    hasNextPage = fields.Boolean(attribute="has_next_page")
    nextPage = fields.Integer(attribute="next_page", allow_none=True)
