"""
TaskFlow application - wires stores, coordinators, session and
navigation into one object with an explicit start/stop lifecycle.

Control flow:
    session resolves -> collections load -> mutations reconcile ->
    views recompute -> navigation picks which view is rendered
"""

import asyncio
import logging
from typing import Optional

from config import Settings, load_settings
from models import TeamMember, User
from repositories import (
    ArticleStore,
    AuthBackend,
    RemoteBackend,
    TaskStore,
    TeamStore,
    configure_backend,
    get_auth_backend,
    get_backend,
)
from errors import StoreError
from services import (
    ArticleCoordinator,
    ArticleView,
    BrowserHistory,
    MemoryHistory,
    NavigationStateMachine,
    NewsFeed,
    Notifier,
    Page,
    SessionManager,
    SessionState,
    TaskCoordinator,
    TaskView,
)
from workers.jobs import BackgroundJobService

logger = logging.getLogger(__name__)


class TaskFlowApp:
    """
    The running client session.

    Nothing is shared between instances; tests build as many as they
    like against separate backends.
    """

    def __init__(
        self,
        backend: RemoteBackend,
        auth: AuthBackend,
        history: Optional[BrowserHistory] = None,
        notifier: Optional[Notifier] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or Settings()
        self.notifier = notifier or Notifier()
        self.history = history or MemoryHistory()

        self.session = SessionManager(auth, self.notifier, self.settings.default_login)
        self.navigation = NavigationStateMachine(self.history)

        self.task_store = TaskStore(backend)
        self.article_store = ArticleStore(backend)
        self.team_store = TeamStore(backend)

        self.tasks = TaskCoordinator(self.task_store, self.notifier)
        self.articles = ArticleCoordinator(self.article_store, self.notifier, lambda: self.session.user)
        self.news = NewsFeed(self.article_store, self.notifier)

        self.task_view = TaskView(self.tasks)
        self.article_view = ArticleView(self.articles, "ARTICLE-VIEW")
        self.news_view = ArticleView(self.news, "NEWS-VIEW")

        self.jobs = BackgroundJobService(
            step=self.settings.job_step,
            interval=self.settings.job_interval,
            retention=self.settings.job_retention,
        )

        self.team: list[TeamMember] = []
        self._unsubscribers: list = []
        self._pending_load: Optional[asyncio.Task] = None

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None, **kwargs) -> "TaskFlowApp":
        """Build against the process-wide backend chosen by settings."""
        settings = settings or load_settings()
        if settings.backend == "json":
            configure_backend("json", data_dir=settings.data_dir)
        else:
            configure_backend(settings.backend, latency=settings.backend_latency)
        return cls(get_backend(), get_auth_backend(), settings=settings, **kwargs)

    @property
    def user(self) -> Optional[User]:
        return self.session.user

    @property
    def page(self) -> Page:
        return self.navigation.page

    # === Lifecycle ===

    async def start(self) -> None:
        """Start navigation and session; data loads once identity resolves."""
        self.navigation.start()
        self._unsubscribers.append(self.session.subscribe(self._on_session_changed))
        self._unsubscribers.append(self.news.follow(self.articles))
        await self.session.start()
        await self.wait_until_loaded()

    async def stop(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers.clear()
        self.session.stop()
        self.navigation.stop()
        for view in (self.task_view, self.article_view, self.news_view):
            view.close()
        self._cancel_pending_load()
        await self.jobs.stop()

    def _on_session_changed(self, state: SessionState, user: Optional[User]) -> None:
        # A load still running belongs to the previous identity
        self._cancel_pending_load()
        if state == SessionState.AUTHENTICATED:
            self._pending_load = asyncio.create_task(self.load_all())
        else:
            self.clear_all()

    def _cancel_pending_load(self) -> None:
        if self._pending_load is not None and not self._pending_load.done():
            logger.info("[APP] Cancelling in-flight load")
            self._pending_load.cancel()

    async def load_all(self) -> None:
        """Load every collection for the signed-in user."""
        await self.tasks.load()
        await self.articles.load()
        await self.news.load()
        await self.load_team()

    async def load_team(self) -> None:
        try:
            self.team = await self.team_store.list()
        except StoreError as e:
            logger.warning("[APP] Team load failed: %s", e)
            self.team = []

    def clear_all(self) -> None:
        self.tasks.clear()
        self.articles.clear()
        self.news.clear()
        self.team = []

    async def wait_until_loaded(self) -> None:
        """Wait for the latest load; a load cancelled by sign-out just ends the wait."""
        while self._pending_load is not None:
            pending = self._pending_load
            await asyncio.wait([pending])
            if pending is self._pending_load:
                if not pending.cancelled():
                    pending.result()
                return

    # === Rendering ===

    def rendered(self):
        """
        What the current page shows.

        None while the session resolves or when signed out (the sign-in
        form); the identity on the profile page; otherwise the derived
        collection for the page.
        """
        if self.session.state != SessionState.AUTHENTICATED:
            return None
        if self.page == Page.PROFILE:
            return self.user
        if self.page == Page.ARTICLES:
            return self.article_view.visible
        if self.page == Page.NEWS:
            return self.news_view.visible
        return self.task_view.visible
