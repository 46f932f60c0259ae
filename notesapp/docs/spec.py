# notesapp/docs/spec.py
from apispec import APISpec
from apispec.ext.marshmallow import MarshmallowPlugin
from marshmallow import Schema, fields

from notesapp.users.schemas import CredentialsIn, GoogleLoginIn, UserOut
from notesapp.notes.schemas import NoteIn, NoteOut, NotePageOut


class EnvelopeSchema(Schema):
    success = fields.Boolean(required=True)
    data = fields.Raw(allow_none=True)
    error = fields.String(allow_none=True)
    code = fields.String()


class MessageSchema(Schema):
    message = fields.String()


def _ref(name: str):
    return {"$ref": f"#/components/schemas/{name}"}


def _envelope(data_ref=None):
    """Schéma {success, data, error} avec data typé."""
    if data_ref is None:
        return _ref("Envelope")
    return {"allOf": [_ref("Envelope"), {"type": "object", "properties": {"data": _ref(data_ref)}}]}


def _json(description, data_ref=None):
    return {"description": description, "content": {"application/json": {"schema": _envelope(data_ref)}}}


_ID_PARAM = [{"in": "path", "name": "id", "required": True, "schema": {"type": "integer", "minimum": 1}}]
_UNAUTHORIZED = _json("Authentication required / TOKEN_EXPIRED / INVALID_TOKEN")


def build_spec():
    spec = APISpec(
        title="Notes API",
        version="1.0.0",
        openapi_version="3.0.3",
        info={"description": "Notes service: cookie-based JWT auth and per-user notes"},
        plugins=[MarshmallowPlugin()],
    )

    # Access token en cookie HttpOnly
    spec.components.security_scheme("cookieAuth", {"type": "apiKey", "in": "cookie", "name": "token"})
    spec.components.security_scheme("refreshCookie", {"type": "apiKey", "in": "cookie", "name": "refreshToken"})

    spec.components.schema("Envelope", schema=EnvelopeSchema)
    spec.components.schema("Credentials", schema=CredentialsIn)
    spec.components.schema("GoogleLogin", schema=GoogleLoginIn)
    spec.components.schema("User", schema=UserOut)
    spec.components.schema("Message", schema=MessageSchema)
    spec.components.schema("NoteIn", schema=NoteIn)
    spec.components.schema("Note", schema=NoteOut)
    spec.components.schema("NotePage", schema=NotePageOut)

    # ---- USERS ----
    spec.path(
        path="/api/v1/users/register",
        operations={
            "post": {
                "summary": "Register",
                "requestBody": {"required": True, "content": {"application/json": {"schema": _ref("Credentials")}}},
                "responses": {
                    "201": _json("Created", "User"),
                    "400": _json("Validation error"),
                    "409": _json("Email already registered"),
                    "429": _json("Rate limited"),
                },
            }
        },
    )
    spec.path(
        path="/api/v1/users/login",
        operations={
            "post": {
                "summary": "Login (sets token + refreshToken cookies)",
                "requestBody": {"required": True, "content": {"application/json": {"schema": _ref("Credentials")}}},
                "responses": {
                    "200": _json("Logged in", "Message"),
                    "401": _json("Invalid credentials"),
                    "429": _json("Rate limited"),
                },
            }
        },
    )
    spec.path(
        path="/api/v1/users/google",
        operations={
            "post": {
                "summary": "Login with a Google ID token",
                "requestBody": {"required": True, "content": {"application/json": {"schema": _ref("GoogleLogin")}}},
                "responses": {
                    "200": _json("Logged in", "Message"),
                    "400": _json("Credential missing"),
                    "401": _json("Google authentication failed"),
                },
            }
        },
    )
    spec.path(
        path="/api/v1/users/refresh",
        operations={
            "post": {
                "summary": "New access cookie from the refresh cookie",
                "security": [{"refreshCookie": []}],
                "responses": {
                    "200": _json("Refreshed", "Message"),
                    "401": _json("Refresh token missing, expired or invalid"),
                    "404": _json("User not found"),
                },
            }
        },
    )
    spec.path(
        path="/api/v1/users/logout",
        operations={"post": {"summary": "Clear auth cookies", "responses": {"200": _json("Logged out", "Message")}}},
    )

    # ---- NOTES ----
    spec.path(
        path="/api/v1/notes",
        operations={
            "get": {
                "summary": "List my notes (paginated, filterable, searchable)",
                "security": [{"cookieAuth": []}],
                "parameters": [
                    {"in": "query", "name": "page", "schema": {"type": "integer", "minimum": 1, "default": 1}},
                    {"in": "query", "name": "limit", "schema": {"type": "integer", "minimum": 1, "maximum": 100, "default": 20}},
                    {"in": "query", "name": "title", "schema": {"type": "string"}},
                    {"in": "query", "name": "q", "schema": {"type": "string"}},
                ],
                "responses": {"200": _json("Page of notes", "NotePage"), "400": _json("Bad pagination"), "401": _UNAUTHORIZED},
            },
            "post": {
                "summary": "Create note",
                "security": [{"cookieAuth": []}],
                "requestBody": {"required": True, "content": {"application/json": {"schema": _ref("NoteIn")}}},
                "responses": {"201": _json("Created", "Note"), "400": _json("Validation error"), "401": _UNAUTHORIZED},
            },
        },
    )
    spec.path(
        path="/api/v1/notes/{id}",
        operations={
            "put": {
                "summary": "Replace a note's title and contents",
                "security": [{"cookieAuth": []}],
                "parameters": _ID_PARAM,
                "requestBody": {"required": True, "content": {"application/json": {"schema": _ref("NoteIn")}}},
                "responses": {
                    "200": _json("Updated", "Note"),
                    "400": _json("Validation error"),
                    "401": _UNAUTHORIZED,
                    "404": _json("Not found"),
                },
            },
            "delete": {
                "summary": "Delete note",
                "security": [{"cookieAuth": []}],
                "parameters": _ID_PARAM,
                "responses": {
                    "200": _json("Deleted", "Message"),
                    "400": _json("Invalid note ID"),
                    "401": _UNAUTHORIZED,
                    "404": _json("Not found"),
                },
            },
        },
    )

    return spec.to_dict()
