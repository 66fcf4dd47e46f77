"""
SQLAlchemy-backed stores for keywords, scanned CVs and users.

Callers never see SQLAlchemy exceptions: any failure rolls back the session
and is re-raised as ``DatabaseError`` so routes can answer 503.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from cv_scanner.errors import DatabaseError
from cv_scanner.extensions import db
from cv_scanner.models import Keyword, ScannedCv, User, utcnow
from cv_scanner.services.keyword_cache import ACTIVE_KEYWORDS_KEY, KeywordCache

logger = logging.getLogger(__name__)

SORTABLE_KEYWORD_FIELDS = {"name": Keyword.name, "createdAt": Keyword.created_at}


@contextmanager
def _db_guard(action: str) -> Iterator[None]:
    try:
        yield
    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.error("Database failure while %s: %s", action, exc)
        raise DatabaseError(f"Database failure while {action}.") from exc


class KeywordStore:
    """Keyword persistence; every mutation clears the active keyword cache."""

    def __init__(self, cache: Optional[KeywordCache] = None):
        self.cache = cache

    def _invalidate(self) -> None:
        if self.cache is not None:
            self.cache.clear(ACTIVE_KEYWORDS_KEY)

    def get_active_names(self) -> List[str]:
        with _db_guard("loading active keywords"):
            rows = (
                Keyword.query.filter_by(is_active=True)
                .order_by(Keyword.created_at.asc(), Keyword.name.asc())
                .all()
            )
        return [row.name for row in rows]

    def list_keywords(
        self,
        *,
        is_active: Optional[bool] = None,
        sort_by: str = "createdAt",
        descending: bool = True,
        offset: int = 0,
        limit: int = 10,
    ) -> List[Keyword]:
        column = SORTABLE_KEYWORD_FIELDS.get(sort_by, Keyword.created_at)
        with _db_guard("listing keywords"):
            query = Keyword.query
            if is_active is not None:
                query = query.filter(Keyword.is_active == is_active)
            query = query.order_by(column.desc() if descending else column.asc())
            return query.offset(offset).limit(limit).all()

    def get_by_id(self, keyword_id: str) -> Optional[Keyword]:
        with _db_guard("loading keyword"):
            return db.session.get(Keyword, keyword_id)

    def create(self, name: str) -> Keyword:
        now = utcnow()
        keyword = Keyword(name=name, is_active=True, created_at=now, updated_at=now)
        with _db_guard("creating keyword"):
            db.session.add(keyword)
            db.session.commit()
        self._invalidate()
        logger.info("Created keyword %s (%s)", keyword.id, keyword.name)
        return keyword

    def update_name(self, keyword: Keyword, name: str) -> Keyword:
        with _db_guard("renaming keyword"):
            keyword.name = name
            keyword.updated_at = utcnow()
            db.session.commit()
        self._invalidate()
        return keyword

    def set_status(self, keyword: Keyword, is_active: bool) -> Keyword:
        with _db_guard("updating keyword status"):
            keyword.is_active = is_active
            keyword.updated_at = utcnow()
            db.session.commit()
        self._invalidate()
        logger.info("Keyword %s is_active=%s", keyword.id, is_active)
        return keyword

    def delete(self, keyword: Keyword) -> None:
        with _db_guard("deleting keyword"):
            db.session.delete(keyword)
            db.session.commit()
        self._invalidate()


class ScanStore:
    """Scanned CV persistence keyed by lower-cased email."""

    def get_by_email(self, email: str) -> Optional[ScannedCv]:
        with _db_guard("loading scanned CV"):
            return db.session.get(ScannedCv, email.lower())

    def upsert(
        self,
        *,
        email: str,
        extracted_name: str,
        matched_keywords: List[str],
        full_text: str,
        now: datetime,
    ) -> ScannedCv:
        """Insert or overwrite the record, keeping the original ``scanned_at``."""
        key = email.lower()
        with _db_guard("saving scanned CV"):
            record = db.session.get(ScannedCv, key)
            if record is None:
                record = ScannedCv(email=key, scanned_at=now)
                db.session.add(record)
            record.extracted_name = extracted_name
            record.matched_keywords = list(matched_keywords)
            record.full_text = full_text
            record.updated_at = now
            db.session.commit()
        return record

    def update_matches(
        self, record: ScannedCv, matched_keywords: List[str], now: datetime
    ) -> ScannedCv:
        with _db_guard("updating scanned CV"):
            record.matched_keywords = list(matched_keywords)
            record.updated_at = now
            db.session.commit()
        return record

    def delete(self, record: ScannedCv) -> None:
        with _db_guard("deleting scanned CV"):
            db.session.delete(record)
            db.session.commit()

    def list_all(self) -> List[ScannedCv]:
        with _db_guard("listing scanned CVs"):
            return ScannedCv.query.order_by(ScannedCv.updated_at.desc()).all()


class UserStore:
    def get_by_email(self, email: str) -> Optional[User]:
        with _db_guard("loading user"):
            return db.session.get(User, email.lower())

    def create(self, *, email: str, name: str, password_hash: str) -> User:
        user = User(
            email=email.lower(),
            name=name,
            password_hash=password_hash,
            created_at=utcnow(),
        )
        with _db_guard("creating user"):
            db.session.add(user)
            db.session.commit()
        return user
