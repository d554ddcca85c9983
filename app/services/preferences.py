# app/services/preferences.py
"""
User preferences and the personalized feed.

Saving preferences evicts every cached page of that user's feed before the
call returns, so the next feed read always reflects the new preferences.
"""

import logging
from datetime import datetime
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from app import models
from app.exceptions import ValidationFailure
from app.schemas.preferences import PreferenceResponse, PreferenceUpdate
from app.services.articles import serialize_page
from app.services.cache import CacheLayer, feed_prefix, get_cache, personalized_feed_key
from app.services.query_builder import DEFAULT_PAGE_SIZE, ArticleFilters, ArticleQueryBuilder

logger = logging.getLogger(__name__)

# Request field -> entity the IDs must reference
PREFERENCE_FIELDS = (
    ("preferred_categories", models.Category),
    ("preferred_sources", models.Source),
    ("preferred_authors", models.Author),
)


class PreferenceService:
    def __init__(self, db: Session, cache: CacheLayer | None = None, page_size: int = DEFAULT_PAGE_SIZE):
        self.db = db
        self.cache = cache if cache is not None else get_cache()
        self.page_size = page_size

    def _validate_ids(self, update: PreferenceUpdate) -> None:
        """Every referenced ID must exist. Collects all problems before raising."""
        errors: dict[str, list[str]] = {}
        for field, model in PREFERENCE_FIELDS:
            ids = getattr(update, field) or []
            if not ids:
                continue
            found = set(self.db.execute(select(model.id).where(model.id.in_(ids))).scalars().all())
            for index, entity_id in enumerate(ids):
                if entity_id not in found:
                    errors.setdefault(f"{field}.{index}", []).append(
                        f"The selected {field}.{index} is invalid."
                    )
        if errors:
            raise ValidationFailure(errors)

    def update_preferences(self, user: models.User, update: PreferenceUpdate) -> dict[str, Any]:
        """
        Replace the user's preferences (creating the row on first save).

        Raises:
            ValidationFailure: An ID does not reference an existing entity
        """
        self._validate_ids(update)

        preference = self.db.query(models.UserPreference).filter(models.UserPreference.user_id == user.id).first()
        if preference is None:
            preference = models.UserPreference(user_id=user.id)
            self.db.add(preference)

        preference.preferred_categories = list(update.preferred_categories or [])
        preference.preferred_sources = list(update.preferred_sources or [])
        preference.preferred_authors = list(update.preferred_authors or [])
        preference.updated_at = datetime.utcnow()

        self.db.commit()
        self.db.refresh(preference)

        evicted = self.cache.invalidate_prefix(feed_prefix(user.id))
        logger.info(
            f"Updated preferences for user {user.id} ({evicted} cached feed pages evicted)",
            extra={"event": "preferences_updated", "user_id": user.id},
        )
        return PreferenceResponse.model_validate(preference).model_dump(mode="json")

    def get_preferences(self, user: models.User) -> dict[str, Any] | None:
        """Saved preferences, or None when the user never saved any."""
        preference = self.db.query(models.UserPreference).filter(models.UserPreference.user_id == user.id).first()
        if preference is None:
            return None
        return PreferenceResponse.model_validate(preference).model_dump(mode="json")

    def get_personalized_feed(self, user: models.User, page: int = 1) -> dict[str, Any] | None:
        """
        Newest-first page of articles matching the user's preferences.

        Returns None (not an empty page) when the user has no saved preferences.
        """
        page = max(page, 1)

        def compute() -> dict[str, Any] | None:
            preference = (
                self.db.query(models.UserPreference).filter(models.UserPreference.user_id == user.id).first()
            )
            if preference is None:
                return None
            builder = ArticleQueryBuilder(self.db, page_size=self.page_size)
            filters = ArticleFilters.from_preference(preference, page=page)
            return serialize_page(builder.fetch(filters, order="recent"))

        return self.cache.get_or_compute(personalized_feed_key(user.id, page), compute)
