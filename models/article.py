"""
Article - an editorial piece, optionally flagged for the public news feed.
"""

from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .base import BaseEntity, ensure_utc, reject_cleared


class ArticleVisibility(str, Enum):
    PUBLIC = "public"
    PRIVATE = "private"


def normalize_tags(tags) -> list[str]:
    """Trim, drop empties, de-duplicate keeping first occurrence."""
    if tags is None:
        return []
    if isinstance(tags, str):
        tags = tags.split(",")
    seen = []
    for tag in tags:
        cleaned = str(tag).strip()
        if cleaned and cleaned not in seen:
            seen.append(cleaned)
    return seen


class Article(BaseEntity):
    """
    A persisted article.

    A news article is always public; records that break this are
    rejected at the boundary.
    """
    title: str = Field(min_length=1)
    subtitle: str = ""
    summary: str = ""
    content: str = ""
    author_name: str = ""
    section: str = ""
    location: str = ""
    tags: list[str] = Field(default_factory=list)
    cover_image_url: Optional[str] = None
    visibility: ArticleVisibility = ArticleVisibility.PRIVATE
    is_news: bool = False
    published_at: Optional[datetime] = None

    @field_validator("tags", mode="before")
    @classmethod
    def clean_tags(cls, value):
        return normalize_tags(value)

    @field_validator("published_at")
    @classmethod
    def published_as_utc(cls, value):
        return ensure_utc(value)

    @model_validator(mode="after")
    def check_news_visibility(self):
        if self.is_news and self.visibility != ArticleVisibility.PUBLIC:
            raise ValueError("news articles must be public")
        return self


class CreateArticleInput(BaseModel):
    """Fields a user supplies when creating an article."""
    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(min_length=1)
    subtitle: str = ""
    summary: str = ""
    content: str = ""
    author_name: str = ""
    section: str = ""
    location: str = ""
    tags: list[str] = Field(default_factory=list)
    cover_image_url: Optional[str] = None
    visibility: ArticleVisibility = ArticleVisibility.PRIVATE
    is_news: bool = False
    published_at: Optional[datetime] = None

    @field_validator("tags", mode="before")
    @classmethod
    def clean_tags(cls, value):
        return normalize_tags(value)


class UpdateArticleInput(BaseModel):
    """Partial changes to an article. Same set/unset rules as tasks."""
    model_config = ConfigDict(str_strip_whitespace=True)

    title: Optional[str] = Field(default=None, min_length=1)
    subtitle: Optional[str] = None
    summary: Optional[str] = None
    content: Optional[str] = None
    author_name: Optional[str] = None
    section: Optional[str] = None
    location: Optional[str] = None
    tags: Optional[list[str]] = None
    cover_image_url: Optional[str] = None
    visibility: Optional[ArticleVisibility] = None
    is_news: Optional[bool] = None
    published_at: Optional[datetime] = None

    @field_validator("tags", mode="before")
    @classmethod
    def clean_tags(cls, value):
        return None if value is None else normalize_tags(value)

    @model_validator(mode="after")
    def check_required_not_cleared(self):
        # Only cover_image_url and published_at may be cleared
        reject_cleared(self, (
            "title", "subtitle", "summary", "content", "author_name",
            "section", "location", "tags", "visibility", "is_news",
        ))
        return self

    def changes(self) -> dict:
        """Explicitly set fields, JSON-ready."""
        return self.model_dump(mode="json", exclude_unset=True)
