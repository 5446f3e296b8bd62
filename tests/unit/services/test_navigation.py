"""Unit tests for the navigation state machine."""

import pytest

from services import FormState, MemoryHistory, NavigationStateMachine, Page, normalize_path, page_from_path


class TestPaths:

    @pytest.mark.parametrize("path,expected", [
        ("", "/"),
        (None, "/"),
        ("/", "/"),
        ("///", "/"),
        ("/articles/", "/articles"),
        ("/news", "/news"),
    ])
    def test_normalize(self, path, expected):
        assert normalize_path(path) == expected

    @pytest.mark.parametrize("path,page", [
        ("/", Page.TASKS),
        ("", Page.TASKS),
        ("/articles", Page.ARTICLES),
        ("/articles/", Page.ARTICLES),
        ("/ARTICLES", Page.ARTICLES),
        ("/articles/42/edit", Page.ARTICLES),
        ("/news", Page.NEWS),
        ("/profile", Page.PROFILE),
        ("/nowhere", Page.TASKS),
        ("/settings", Page.TASKS),
        ("/newsletter", Page.TASKS),
        ("/articlesx", Page.TASKS),
        ("/News/2024", Page.NEWS),
    ])
    def test_page_from_path(self, path, page):
        assert page_from_path(path) == page


class TestMemoryHistory:

    def test_push_drops_forward_entries(self):
        history = MemoryHistory("/")
        history.push("/articles")
        history.push("/news")
        history.back()
        history.push("/profile")

        assert history.entries == ["/", "/articles", "/profile"]
        assert history.forward() is False

    def test_back_at_start(self):
        assert MemoryHistory().back() is False


@pytest.fixture
def history():
    return MemoryHistory("/")


@pytest.fixture
def nav(history):
    machine = NavigationStateMachine(history)
    machine.start()
    yield machine
    machine.stop()


class TestNavigate:

    def test_cold_load_restores_page(self):
        machine = NavigationStateMachine(MemoryHistory("/news"))
        machine.start()
        assert machine.page == Page.NEWS

    def test_navigate_pushes(self, nav, history):
        nav.navigate(Page.ARTICLES)

        assert nav.page == Page.ARTICLES
        assert history.entries == ["/", "/articles"]
        assert nav.path == "/articles"

    def test_navigate_to_current_page_no_duplicate(self, nav, history):
        nav.navigate(Page.ARTICLES)
        nav.navigate(Page.ARTICLES)
        assert history.entries == ["/", "/articles"]

    def test_same_page_different_case_no_push(self):
        history = MemoryHistory("/Articles/")
        machine = NavigationStateMachine(history)
        machine.start()

        machine.navigate(Page.ARTICLES)

        assert history.entries == ["/Articles/"]

    def test_navigate_resets_form_even_on_same_page(self, nav):
        nav.form.open_edit("task-1")

        nav.navigate(Page.TASKS)

        assert nav.form == FormState()
        assert not nav.form.is_editing

    def test_navigate_accepts_page_value(self, nav):
        nav.navigate("profile")
        assert nav.page == Page.PROFILE

    def test_observers_notified_every_time(self, nav):
        seen = []
        nav.subscribe(seen.append)

        nav.navigate(Page.NEWS)
        nav.navigate(Page.NEWS)

        assert seen == [Page.NEWS, Page.NEWS]


class TestPopstate:

    def test_back_and_forward(self, nav, history):
        nav.navigate(Page.ARTICLES)
        nav.navigate(Page.PROFILE)

        history.back()
        assert nav.page == Page.ARTICLES
        history.back()
        assert nav.page == Page.TASKS
        history.forward()
        assert nav.page == Page.ARTICLES

    def test_back_resets_form(self, nav, history):
        nav.navigate(Page.ARTICLES)
        nav.form.open_create()

        history.back()

        assert nav.form.is_open is False

    def test_back_does_not_push(self, nav, history):
        nav.navigate(Page.NEWS)
        history.back()
        assert history.entries == ["/", "/news"]

    def test_stop_detaches(self, nav, history):
        nav.navigate(Page.NEWS)
        nav.stop()

        history.back()

        assert nav.page == Page.NEWS


class TestFormState:

    def test_open_create(self):
        form = FormState()
        form.open_create()
        assert form.is_open and not form.is_editing

    def test_open_edit_then_close(self):
        form = FormState()
        form.open_edit("a1")
        assert form.is_editing and form.editing_id == "a1"
        form.close()
        assert form == FormState()
