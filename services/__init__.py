"""
Client-side services: session, navigation, mutation coordinators and
the views derived from them.

Dependency order (leaf first):
- filtering:     pure evaluator over collections
- mutations:     coordinators owning the in-memory collections
- session:       current identity
- navigation:    current page and browser history
- views:         filtered collections recomputed on every change
"""

from .events import Observable
from .notifications import Notifier, Notification, Level
from .filtering import evaluate, group_by_status, count_label, BOARD_COLUMNS
from .mutations import (
    MutationCoordinator,
    TaskCoordinator,
    ArticleCoordinator,
    NewsFeed,
    normalize_article_input,
)
from .session import SessionManager, SessionState, project_identity
from .navigation import (
    NavigationStateMachine,
    BrowserHistory,
    MemoryHistory,
    FormState,
    Page,
    PAGE_PATHS,
    page_from_path,
    normalize_path,
)
from .views import CollectionView, TaskView, ArticleView, ViewMode

__all__ = [
    "Observable",
    "Notifier",
    "Notification",
    "Level",
    "evaluate",
    "group_by_status",
    "count_label",
    "BOARD_COLUMNS",
    "MutationCoordinator",
    "TaskCoordinator",
    "ArticleCoordinator",
    "NewsFeed",
    "normalize_article_input",
    "SessionManager",
    "SessionState",
    "project_identity",
    "NavigationStateMachine",
    "BrowserHistory",
    "MemoryHistory",
    "FormState",
    "Page",
    "PAGE_PATHS",
    "page_from_path",
    "normalize_path",
    "CollectionView",
    "TaskView",
    "ArticleView",
    "ViewMode",
]
