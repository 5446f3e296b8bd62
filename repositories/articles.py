"""
Article store.

Every record written here keeps the news rule: a news article is
public. This holds for partial updates too, not just for new articles.
"""

from typing import Optional

from models import (
    Article,
    ArticleVisibility,
    CreateArticleInput,
    UpdateArticleInput,
    utc_now,
)
from .store import EntityStore, new_id

ARTICLES_TABLE = "articles"

PUBLIC = ArticleVisibility.PUBLIC.value
PRIVATE = ArticleVisibility.PRIVATE.value


def enforce_news_visibility(changes: dict) -> dict:
    """
    Make a record or change set consistent with the news rule.

    is_news forces public; going private without touching is_news
    drops the news flag.
    """
    fixed = dict(changes)
    if fixed.get("is_news"):
        fixed["visibility"] = PUBLIC
    elif fixed.get("visibility") == PRIVATE and "is_news" not in fixed:
        fixed["is_news"] = False
    return fixed


class ArticleStore(EntityStore[Article]):
    """CRUD for articles plus the news and per-author listings."""

    table = ARTICLES_TABLE
    model = Article

    async def list_news(self) -> list[Article]:
        """Public news articles, most recently published first."""
        return await self._select(
            {"is_news": True, "visibility": PUBLIC},
            order_by="published_at",
            descending=True,
        )

    async def list_for_creator(self, creator_id: str) -> list[Article]:
        return await self._select({"created_by": creator_id}, order_by="created_at", descending=True)

    async def create(self, data: CreateArticleInput, creator_id: str) -> Article:
        now = utc_now()
        record = enforce_news_visibility(data.model_dump(mode="json"))

        published_at: Optional[str] = record.get("published_at")
        if published_at is None and record["visibility"] == PUBLIC:
            published_at = now.isoformat()

        record.update(
            id=new_id(),
            created_at=now.isoformat(),
            updated_at=now.isoformat(),
            published_at=published_at,
            created_by=creator_id,
        )
        # Local validation before insert
        article = self.to_model(record)
        return await self._insert(article.model_dump(mode="json"))

    async def update(self, id: str, data: UpdateArticleInput) -> Article:
        changes = enforce_news_visibility(data.changes())
        changes["updated_at"] = utc_now().isoformat()
        return await self._update(id, changes)

    async def list(self) -> list[Article]:
        return await self._select(order_by="created_at", descending=True)
