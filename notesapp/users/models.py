from typing import Optional
from sqlalchemy import func
from passlib.hash import bcrypt
from notesapp.extensions import db

# coût bcrypt (2^10 tours)
BCRYPT_ROUNDS = 10
_hasher = bcrypt.using(rounds=BCRYPT_ROUNDS)


class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(254), unique=True, nullable=False, index=True)
    # NULL pour les comptes créés via Google uniquement
    password_hash = db.Column(db.String(255), nullable=True)
    google_id = db.Column(db.String(255), unique=True, nullable=True)
    # "local" | "google"
    auth_provider = db.Column(db.String(32), nullable=False, default="local")

    created_at = db.Column(db.DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = db.Column(db.DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    notes = db.relationship("Note", back_populates="owner", lazy="raise", passive_deletes=True)

    # helpers mot de passe
    def set_password(self, raw_password: str) -> None:
        self.password_hash = _hasher.hash(raw_password)

    def check_password(self, raw_password: Optional[str]) -> bool:
        if not self.password_hash or not raw_password:
            return False
        return _hasher.verify(raw_password, self.password_hash)
