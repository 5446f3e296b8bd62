"""
Domain models - single source of truth for all entities.

Design principles:
- Every entity defined once
- Validation at the backend boundary
- Inputs separate from persisted records
- Backend-agnostic (stores handle persistence)
"""

from .base import BaseEntity, TimestampMixin, utc_now
from .task import Task, TaskStatus, TaskPriority, CreateTaskInput, UpdateTaskInput, PRIORITY_RANK
from .article import (
    Article,
    ArticleVisibility,
    CreateArticleInput,
    UpdateArticleInput,
    normalize_tags,
)
from .user import AuthUser, User, UserRole, TeamMember, TeamRole, NewTeamMember
from .filters import FilterCriteria, SortField
from .job import Job, JobStatus, JobStats

__all__ = [
    # Base
    "BaseEntity",
    "TimestampMixin",
    "utc_now",
    # Task
    "Task",
    "TaskStatus",
    "TaskPriority",
    "CreateTaskInput",
    "UpdateTaskInput",
    "PRIORITY_RANK",
    # Article
    "Article",
    "ArticleVisibility",
    "CreateArticleInput",
    "UpdateArticleInput",
    "normalize_tags",
    # Identity
    "AuthUser",
    "User",
    "UserRole",
    "TeamMember",
    "TeamRole",
    "NewTeamMember",
    # Filtering
    "FilterCriteria",
    "SortField",
    # Jobs
    "Job",
    "JobStatus",
    "JobStats",
]
