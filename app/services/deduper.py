# app/services/deduper.py
"""
Deduplication and idempotent storage of normalized articles.

Dedupe rules:
1. An article's identity is an MD5 fingerprint of (title, source_id, published_at)
2. Storing is one bulk INSERT ... ON CONFLICT (article_identifier) DO UPDATE,
   so re-ingesting the same provider output converges instead of duplicating
3. Category/Source/Author rows are resolved by name, created on first sight

The whole batch for one provider runs in a single transaction.
"""

import hashlib
import logging
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Iterable

from sqlalchemy import case, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app import models
from app.exceptions import StoreError
from app.services.api_fetchers.base import CanonicalArticle

logger = logging.getLogger(__name__)

# Joins fingerprint fields. source_id and timestamp never contain it, so the
# join stays unambiguous even for titles that do.
FIELD_SEPARATOR = "\x1f"

# Named entity tables resolvable by name
NamedModel = type[models.Category] | type[models.Source] | type[models.Author]

# Columns refreshed when an incoming article matches an existing fingerprint
UPDATE_COLUMNS = (
    "title",
    "description",
    "content",
    "category_id",
    "source_id",
    "author_id",
    "published_at",
    "updated_at",
)


@dataclass
class StoreResult:
    """Counts for one provider batch."""

    source_id: int | None
    received: int = 0
    upserted: int = 0
    inserted: int = 0
    updated: int = 0


class Deduper:
    """Fingerprinting, entity resolution and bulk upsert."""

    TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

    @staticmethod
    def fingerprint(title: str, source_id: int, published_at: datetime | None) -> str:
        """
        Stable identity for an article. Not a security hash.

        Fields are joined with a unit separator so (title, source_id) pairs
        such as ("Top 11", 1) and ("Top 1", 11) never share a fingerprint.

        published_at=None (no usable provider date) leaves the timestamp out,
        so an undated article keeps one identity across ingestion runs.
        """
        timestamp = published_at.strftime(Deduper.TIMESTAMP_FORMAT) if published_at else ""
        raw = FIELD_SEPARATOR.join((title, str(source_id), timestamp))
        return hashlib.md5(raw.encode("utf-8")).hexdigest()

    # -------------------------------------------------------------------------
    # Entity resolution
    # -------------------------------------------------------------------------

    def resolve_or_create(self, db: Session, model: NamedModel, name: str) -> int:
        """
        Return the ID of the `model` row called `name`, creating it if absent.

        Creation is INSERT ... ON CONFLICT (name) DO NOTHING followed by a read,
        so a concurrent writer inserting the same name cannot fail this call.
        """
        existing = db.execute(select(model.id).where(model.name == name)).scalar_one_or_none()
        if existing is not None:
            return existing

        insert = self._insert_for(db)
        db.execute(
            insert(model.__table__)
            .values(name=name, created_at=datetime.utcnow())
            .on_conflict_do_nothing(index_elements=["name"])
        )
        return db.execute(select(model.id).where(model.name == name)).scalar_one()

    def resolve_names(self, db: Session, model: NamedModel, names: Iterable[str]) -> dict[str, int]:
        """Resolve every distinct name once. Returns name -> ID."""
        distinct = list(dict.fromkeys(names))
        if not distinct:
            return {}

        rows = db.execute(select(model.name, model.id).where(model.name.in_(distinct))).all()
        resolved = {name: entity_id for name, entity_id in rows}

        for name in distinct:
            if name not in resolved:
                resolved[name] = self.resolve_or_create(db, model, name)

        return resolved

    # -------------------------------------------------------------------------
    # Upsert
    # -------------------------------------------------------------------------

    @staticmethod
    def _insert_for(db: Session):
        """Dialect insert construct that supports ON CONFLICT."""
        dialect = db.get_bind().dialect.name
        if dialect == "postgresql":
            return postgresql.insert
        if dialect == "sqlite":
            return sqlite.insert
        raise NotImplementedError(f"Upsert is not supported for dialect '{dialect}'")

    def build_rows(
        self,
        articles: list[CanonicalArticle],
        source_id: int,
        categories: dict[str, int],
        authors: dict[str, int],
        now: datetime,
    ) -> list[dict]:
        """
        Build insert rows keyed by fingerprint.

        Repeated fingerprints inside one batch collapse to the last occurrence,
        since a single ON CONFLICT statement may not touch the same row twice.
        """
        rows: dict[str, dict] = {}
        for article in articles:
            identifier = self.fingerprint(
                article.title,
                source_id,
                None if article.published_at_estimated else article.published_at,
            )
            rows.pop(identifier, None)
            rows[identifier] = {
                "article_identifier": identifier,
                "title": article.title,
                "description": article.description,
                "content": article.content,
                "category_id": categories[article.category],
                "source_id": source_id,
                "author_id": authors[article.author],
                "published_at": article.published_at,
                "published_at_estimated": article.published_at_estimated,
                "created_at": now,
                "updated_at": now,
            }
        return list(rows.values())

    def upsert(self, db: Session, rows: list[dict]) -> tuple[int, int]:
        """
        Insert or update `rows` in one statement. Returns (inserted, updated).

        An estimated published_at never replaces the stored one, so undated
        articles keep their first-seen time.
        """
        if not rows:
            return 0, 0

        table = models.Article.__table__
        identifiers = [row["article_identifier"] for row in rows]
        existing = db.execute(
            select(models.Article.article_identifier).where(models.Article.article_identifier.in_(identifiers))
        ).scalars().all()

        insert = self._insert_for(db)
        stmt = insert(table).values(rows)
        update_set = {column: stmt.excluded[column] for column in UPDATE_COLUMNS}
        update_set["published_at"] = case(
            (stmt.excluded.published_at_estimated, table.c.published_at),
            else_=stmt.excluded.published_at,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[table.c.article_identifier],
            set_=update_set,
        )
        db.execute(stmt)

        updated = len(set(existing))
        return len(rows) - updated, updated

    def store(
        self,
        db: Session,
        articles: list[CanonicalArticle],
        source_name: str,
        now: datetime | None = None,
    ) -> StoreResult:
        """
        Persist one provider's normalized articles atomically.

        Args:
            db: Session; committed on success, rolled back on failure
            articles: Normalized articles from one provider response
            source_name: Source the articles belong to
            now: Timestamp for created_at/updated_at (default: utcnow)

        Returns:
            StoreResult with insert/update counts

        Raises:
            StoreError: The batch could not be written; nothing was persisted
        """
        if not articles:
            return StoreResult(source_id=None)

        now = now or datetime.utcnow()
        rows: list[dict] = []

        try:
            source_id = self.resolve_or_create(db, models.Source, source_name)
            categories = self.resolve_names(db, models.Category, (a.category for a in articles))
            authors = self.resolve_names(db, models.Author, (a.author for a in articles))

            rows = self.build_rows(articles, source_id, categories, authors, now)
            inserted, updated = self.upsert(db, rows)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(
                f"Failed to store {len(articles)} articles for {source_name}: {e}",
                extra={
                    "event": "store_failed",
                    "provider": source_name,
                    "items_failed": len(articles),
                    "payload_sample": rows[:3] if rows else [asdict(a) for a in articles[:3]],
                },
                exc_info=True,
            )
            raise StoreError(source_name, e) from e

        logger.info(
            f"Stored {len(rows)} articles for {source_name} ({inserted} new, {updated} updated)",
            extra={
                "event": "store_complete",
                "provider": source_name,
                "source_id": source_id,
                "items_processed": len(rows),
                "inserted": inserted,
                "updated": updated,
            },
        )
        return StoreResult(
            source_id=source_id,
            received=len(articles),
            upserted=len(rows),
            inserted=inserted,
            updated=updated,
        )
