"""
Navigation state machine - which page is showing, kept in step with
browser history.

Every transition (in-app navigate or back/forward) resets the transient
form state: open dialog closed, edit target cleared.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from .events import Observable

logger = logging.getLogger(__name__)


class Page(str, Enum):
    TASKS = "tasks"
    ARTICLES = "articles"
    NEWS = "news"
    PROFILE = "profile"


DEFAULT_PAGE = Page.TASKS

PAGE_PATHS = {
    Page.TASKS: "/",
    Page.ARTICLES: "/articles",
    Page.NEWS: "/news",
    Page.PROFILE: "/profile",
}


def normalize_path(path: Optional[str]) -> str:
    """Strip trailing slashes; empty becomes '/'."""
    return (path or "").rstrip("/") or "/"


def page_from_path(path: Optional[str]) -> Page:
    """
    Longest-prefix match of the path against PAGE_PATHS.

    Matching ignores case and works on whole segments, so '/newsletter'
    is not under '/news'. '/' is only the fallback, never a prefix.
    """
    normalized = normalize_path(path).lower()
    candidates = sorted(
        ((prefix, page) for page, prefix in PAGE_PATHS.items() if prefix != "/"),
        key=lambda pair: len(pair[0]),
        reverse=True,
    )
    for prefix, page in candidates:
        if normalized == prefix or normalized.startswith(prefix + "/"):
            return page
    return DEFAULT_PAGE


class BrowserHistory(ABC):
    """The slice of the browser history API navigation needs."""

    @property
    @abstractmethod
    def current_path(self) -> str:
        pass

    @abstractmethod
    def push(self, path: str) -> None:
        """Add an entry and make it current. Does not fire listeners."""
        pass

    @abstractmethod
    def add_listener(self, callback: Callable[[str], None]) -> Callable[[], None]:
        """Listen for back/forward moves. Returns a remove handle."""
        pass


class MemoryHistory(BrowserHistory):
    """History stack with a cursor, like a browser tab."""

    def __init__(self, initial_path: str = "/"):
        self.entries: list[str] = [initial_path]
        self.index = 0
        self._popstate = Observable("HISTORY")

    @property
    def current_path(self) -> str:
        return self.entries[self.index]

    def push(self, path: str) -> None:
        # Pushing drops any forward entries
        del self.entries[self.index + 1:]
        self.entries.append(path)
        self.index += 1

    def add_listener(self, callback):
        return self._popstate.subscribe(callback)

    def back(self) -> bool:
        if self.index == 0:
            return False
        self.index -= 1
        self._popstate.notify(self.current_path)
        return True

    def forward(self) -> bool:
        if self.index >= len(self.entries) - 1:
            return False
        self.index += 1
        self._popstate.notify(self.current_path)
        return True


@dataclass
class FormState:
    """Create/edit dialog state for the current page."""
    is_open: bool = False
    editing_id: Optional[str] = None

    def open_create(self) -> None:
        self.is_open = True
        self.editing_id = None

    def open_edit(self, entity_id: str) -> None:
        self.is_open = True
        self.editing_id = entity_id

    def close(self) -> None:
        self.is_open = False
        self.editing_id = None

    @property
    def is_editing(self) -> bool:
        return self.is_open and self.editing_id is not None


class NavigationStateMachine:
    """
    Current page, derived from and pushed to the history.

    Observers get the page after every transition, including ones that
    stay on the same page.
    """

    def __init__(self, history: BrowserHistory):
        self.history = history
        self.page = page_from_path(history.current_path)
        self.form = FormState()
        self.changed = Observable("NAVIGATION")
        self._remove_listener: Optional[Callable[[], None]] = None

    def start(self) -> None:
        """Sync with the current location and listen for back/forward."""
        self.page = page_from_path(self.history.current_path)
        if self._remove_listener is None:
            self._remove_listener = self.history.add_listener(self._on_popstate)

    def stop(self) -> None:
        if self._remove_listener is not None:
            self._remove_listener()
            self._remove_listener = None

    def subscribe(self, callback: Callable[[Page], None]) -> Callable[[], None]:
        return self.changed.subscribe(callback)

    def navigate(self, page: Page) -> None:
        """
        In-app navigation.

        Pushes a history entry unless the browser is already at the
        page's path (compared case- and trailing-slash-insensitively).
        """
        page = Page(page)
        target = PAGE_PATHS[page]
        if normalize_path(self.history.current_path).lower() != target:
            self.history.push(target)
        self._enter(page)

    def _on_popstate(self, path: str) -> None:
        self._enter(page_from_path(path))

    def _enter(self, page: Page) -> None:
        if page != self.page:
            logger.debug("[NAVIGATION] %s -> %s", self.page.value, page.value)
        self.page = page
        self.form.close()
        self.changed.notify(page)

    @property
    def path(self) -> str:
        return PAGE_PATHS[self.page]
