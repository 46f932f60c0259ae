from marshmallow import Schema, fields, EXCLUDE


class CredentialsIn(Schema):
    """Forme du corps register/login; les règles métier sont dans common.validation."""
    class Meta:
        unknown = EXCLUDE

    email = fields.String(load_default="")
    password = fields.String(load_default="", load_only=True)


class GoogleLoginIn(Schema):
    class Meta:
        unknown = EXCLUDE

    credential = fields.String(load_default="")


class UserOut(Schema):
    id = fields.Integer(required=True)
    email = fields.String(required=True)
