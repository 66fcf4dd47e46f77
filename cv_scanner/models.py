# models.py

import uuid
from datetime import datetime, timezone
from typing import Optional

from cv_scanner.extensions import db


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def isoformat(value: Optional[datetime]) -> Optional[str]:
    """Serialize a timestamp as ISO-8601; naive values (SQLite) are UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


class User(db.Model):
    __tablename__ = "users"

    email = db.Column(db.String(254), primary_key=True)  # lower-cased
    name = db.Column(db.String(200), default="", nullable=False)
    password_hash = db.Column(db.String(200), nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow)

    def __repr__(self):
        return f"<User {self.email}>"


class Keyword(db.Model):
    __tablename__ = "keywords"
    """Skill keyword matched against scanned CV text.

    Only rows with ``is_active`` set take part in matching.
    """

    id = db.Column(db.String(32), primary_key=True, default=lambda: uuid.uuid4().hex)
    name = db.Column(db.String(200), nullable=False)
    is_active = db.Column(db.Boolean, nullable=False, default=True, index=True)
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow, index=True)
    updated_at = db.Column(db.DateTime(timezone=True), default=utcnow)

    def __repr__(self):
        status = "active" if self.is_active else "inactive"
        return f"<Keyword {self.id} - {self.name} ({status})>"

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "isActive": self.is_active,
            "createdAt": isoformat(self.created_at),
            "updatedAt": isoformat(self.updated_at),
        }


class ScannedCv(db.Model):
    __tablename__ = "scanned_cvs"
    """One record per candidate email; rescans and repeat scans update it.

    ``scanned_at`` is fixed when the row is first written, ``updated_at``
    moves on every scan or rescan.
    """

    email = db.Column(db.String(254), primary_key=True)  # lower-cased
    extracted_name = db.Column(db.String(200), nullable=False, default="Unknown")
    matched_keywords = db.Column(db.JSON, nullable=False, default=list)
    full_text = db.Column(db.Text, nullable=False, default="")
    scanned_at = db.Column(db.DateTime(timezone=True), nullable=False)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False)

    def __repr__(self):
        return f"<ScannedCv {self.email}>"

    def to_dict(self, include_text: bool = True):
        data = {
            "email": self.email,
            "extractedName": self.extracted_name,
            "matchedKeywords": list(self.matched_keywords or []),
            "scannedAt": isoformat(self.scanned_at),
            "updatedAt": isoformat(self.updated_at),
        }
        if include_text:
            data["fullText"] = self.full_text or ""
        return data
