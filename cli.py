#!/usr/bin/env python3
"""
TaskFlow - command line entry point.

Runs the same client core as the app against the JSON backend, so the
session and data survive between invocations.

    taskflow signup ada@example.com secret123 "Ada Lovelace"
    taskflow login ada@example.com secret123
    taskflow add-task "Write spec" -p high
    taskflow tasks --status todo --search spec
    taskflow set-status 3f2a done
"""

import argparse
import asyncio
import logging
import sys
from typing import Optional

from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.progress import Progress
from rich.table import Table

from app import TaskFlowApp
from config import configure_logging, load_settings
from models import (
    ArticleVisibility,
    CreateArticleInput,
    CreateTaskInput,
    FilterCriteria,
    TaskPriority,
    TaskStatus,
)
from services import BOARD_COLUMNS, Level, MemoryHistory, Notification, Page, PAGE_PATHS, count_label

console = Console()
logger = logging.getLogger(__name__)

STATUS_STYLES = {
    TaskStatus.TODO: "white",
    TaskStatus.IN_PROGRESS: "cyan",
    TaskStatus.IN_REVIEW: "magenta",
    TaskStatus.DONE: "green",
}

PRIORITY_STYLES = {
    TaskPriority.LOW: "dim",
    TaskPriority.MEDIUM: "white",
    TaskPriority.HIGH: "yellow",
    TaskPriority.URGENT: "bold red",
}

LEVEL_STYLES = {
    Level.SUCCESS: "green",
    Level.INFO: "blue",
    Level.WARNING: "yellow",
    Level.ERROR: "red",
}


def print_notification(note: Notification) -> None:
    style = LEVEL_STYLES[note.level]
    console.print(f"[{style}]{note.message}[/{style}]")


def short_id(id: str) -> str:
    return id[:8]


def render_tasks(tasks, title: str = "Tasks") -> None:
    if not tasks:
        console.print("[dim]No tasks. Add one with: taskflow add-task TITLE[/dim]")
        return

    table = Table(title=f"{title} ({count_label(len(tasks))})", box=box.ROUNDED)
    table.add_column("ID", style="dim")
    table.add_column("Title", style="cyan")
    table.add_column("Status")
    table.add_column("Priority")
    table.add_column("Assignee")
    table.add_column("Due", style="dim")

    for task in tasks:
        status_style = STATUS_STYLES[task.status]
        priority_style = PRIORITY_STYLES[task.priority]
        table.add_row(
            short_id(task.id),
            task.title,
            f"[{status_style}]{task.status.value}[/{status_style}]",
            f"[{priority_style}]{task.priority.value}[/{priority_style}]",
            task.assignee_name or task.assignee_id or "-",
            task.due_date.strftime("%Y-%m-%d") if task.due_date else "-",
        )
    console.print(table)


def render_board(columns) -> None:
    for status, label in BOARD_COLUMNS:
        tasks = columns[status]
        style = STATUS_STYLES[status]
        lines = "\n".join(f"[dim]{short_id(t.id)}[/dim] {t.title}" for t in tasks) or "[dim]No tasks[/dim]"
        console.print(Panel(lines, title=f"[{style}]{label}[/{style}] ({count_label(len(tasks))})", expand=False))


def render_articles(articles, title: str) -> None:
    if not articles:
        console.print("[dim]No articles found.[/dim]")
        return

    table = Table(title=title, box=box.ROUNDED)
    table.add_column("ID", style="dim")
    table.add_column("Title", style="cyan")
    table.add_column("Section")
    table.add_column("Visibility")
    table.add_column("By")
    table.add_column("Published", style="dim")

    for article in articles:
        visibility = article.visibility.value + (" [yellow]news[/yellow]" if article.is_news else "")
        published = article.published_at or article.created_at
        table.add_row(
            short_id(article.id),
            article.title,
            article.section or "General",
            visibility,
            article.author_name or "Staff",
            published.strftime("%Y-%m-%d"),
        )
    console.print(table)


def render_profile(user) -> None:
    console.print(Panel.fit(
        f"[bold]{user.login}[/bold]\n"
        f"{user.email}\n\n"
        f"Role: {user.role.value.title()}\n"
        f"User ID: {user.id}",
        title="Profile",
    ))


def resolve_id(items, prefix: str) -> Optional[str]:
    """Full id from a unique prefix of it."""
    found = [i.id for i in items if i.id.startswith(prefix)]
    if len(found) == 1:
        return found[0]
    if not found:
        console.print(f"[red]No match for id '{prefix}'[/red]")
    else:
        console.print(f"[red]'{prefix}' is ambiguous ({len(found)} matches)[/red]")
    return None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="taskflow", description="TaskFlow tasks and articles")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("signup", help="Create an account")
    p.add_argument("email")
    p.add_argument("password")
    p.add_argument("name")

    p = sub.add_parser("login", help="Sign in")
    p.add_argument("email")
    p.add_argument("password")

    p = sub.add_parser("oauth", help="Print the OAuth sign-in URL")
    p.add_argument("provider")
    p.add_argument("--redirect", default="/")

    sub.add_parser("logout", help="Sign out")
    sub.add_parser("whoami", help="Show the current identity")

    p = sub.add_parser("tasks", help="List tasks")
    p.add_argument("--status", action="append", choices=[s.value for s in TaskStatus])
    p.add_argument("--priority", action="append", choices=[p.value for p in TaskPriority])
    p.add_argument("--assignee", action="append")
    p.add_argument("--search", default="")
    p.add_argument("--sort", choices=["created_at", "updated_at", "due_date", "priority", "title"])
    p.add_argument("--desc", action="store_true")
    p.add_argument("--board", action="store_true", help="Group by status")

    p = sub.add_parser("add-task", help="Create a task")
    p.add_argument("title")
    p.add_argument("-d", "--description", default="")
    p.add_argument("-s", "--status", default=TaskStatus.TODO.value, choices=[s.value for s in TaskStatus])
    p.add_argument("-p", "--priority", default=TaskPriority.MEDIUM.value, choices=[p.value for p in TaskPriority])
    p.add_argument("--assignee")

    p = sub.add_parser("set-status", help="Move a task")
    p.add_argument("id")
    p.add_argument("status", choices=[s.value for s in TaskStatus])

    p = sub.add_parser("delete-task", help="Delete a task")
    p.add_argument("id")

    p = sub.add_parser("articles", help="List your articles")
    p.add_argument("--search", default="")

    sub.add_parser("news", help="List public news")

    p = sub.add_parser("add-article", help="Create an article")
    p.add_argument("title")
    p.add_argument("--content", default="")
    p.add_argument("--summary", default="")
    p.add_argument("--section", default="")
    p.add_argument("--tags", default="")
    p.add_argument("--public", action="store_true")
    p.add_argument("--news", action="store_true", help="Flag for the news feed (editors only)")

    p = sub.add_parser("open", help="Show the page for a URL path")
    p.add_argument("path")

    p = sub.add_parser("job", help="Run a background job and follow its progress")
    p.add_argument("type")

    return parser


async def follow_job(app: TaskFlowApp, job_type: str) -> int:
    job_id = await app.jobs.enqueue(job_type)
    with Progress(console=console) as progress:
        bar = progress.add_task(job_type, total=100)
        while True:
            job = await app.jobs.get_status(job_id)
            if job is None:
                break
            progress.update(bar, completed=job.progress)
            if job.is_finished:
                break
            await asyncio.sleep(app.jobs.interval / 2 or 0.05)
    if job and job.error:
        console.print(f"[red]Job failed: {job.error}[/red]")
        return 1
    console.print(f"[green]Job {job_id} completed[/green]")
    return 0


async def run(args) -> int:
    settings = load_settings()
    if settings.backend == "memory":
        settings.backend = "json"  # Nothing would survive the process otherwise

    path = PAGE_PATHS[Page.TASKS]
    if args.command == "open":
        path = args.path
    elif args.command in ("articles", "add-article"):
        path = PAGE_PATHS[Page.ARTICLES]
    elif args.command == "news":
        path = PAGE_PATHS[Page.NEWS]

    app = TaskFlowApp.from_settings(settings, history=MemoryHistory(path))
    app.notifier.subscribe(print_notification)
    await app.start()

    try:
        return await dispatch(app, args)
    finally:
        await app.stop()


async def dispatch(app: TaskFlowApp, args) -> int:
    cmd = args.command

    if cmd == "signup":
        return 0 if await app.session.sign_up(args.email, args.password, args.name) else 1
    if cmd == "login":
        return 0 if await app.session.sign_in(args.email, args.password) else 1
    if cmd == "oauth":
        url = await app.session.sign_in_with_oauth(args.provider, args.redirect)
        if url:
            console.print(url)
        return 0 if url else 1
    if cmd == "logout":
        return 0 if await app.session.sign_out() else 1
    if cmd == "whoami":
        if app.user is None:
            console.print("[dim]Not signed in.[/dim]")
            return 1
        render_profile(app.user)
        return 0

    if app.user is None:
        console.print("[yellow]Sign in first: taskflow login EMAIL PASSWORD[/yellow]")
        return 1
    await app.wait_until_loaded()

    if cmd == "tasks":
        app.task_view.set_criteria(FilterCriteria(
            statuses=args.status,
            priorities=args.priority,
            assignee_ids=args.assignee,
            sort_by=args.sort,
            descending=args.desc,
        ))
        app.task_view.set_search(args.search)
        if args.board:
            render_board(app.task_view.board)
        else:
            render_tasks(app.task_view.visible)
        return 0

    if cmd == "add-task":
        member = next((m for m in app.team if m.id == args.assignee or m.name == args.assignee), None)
        data = CreateTaskInput(
            title=args.title,
            description=args.description,
            status=args.status,
            priority=args.priority,
            assignee_id=member.id if member else args.assignee,
            assignee_name=member.name if member else None,
            assignee_avatar=member.avatar if member else None,
        )
        task = await app.tasks.create(data, app.user.id)
        if task:
            console.print(f"[dim]{task.id}[/dim]")
        return 0 if task else 1

    if cmd == "set-status":
        id = resolve_id(app.tasks.items, args.id)
        if id is None:
            return 1
        return 0 if await app.tasks.change_status(id, TaskStatus(args.status)) else 1

    if cmd == "delete-task":
        id = resolve_id(app.tasks.items, args.id)
        if id is None:
            return 1
        return 0 if await app.tasks.delete(id) else 1

    if cmd == "articles":
        app.article_view.set_search(args.search)
        render_articles(app.article_view.visible, "My Articles")
        return 0

    if cmd == "news":
        render_articles(app.news_view.visible, "News")
        return 0

    if cmd == "add-article":
        data = CreateArticleInput(
            title=args.title,
            content=args.content,
            summary=args.summary,
            section=args.section,
            author_name=app.user.login,
            tags=args.tags,
            visibility=ArticleVisibility.PUBLIC if args.public else ArticleVisibility.PRIVATE,
            is_news=args.news,
        )
        article = await app.articles.create(data, app.user.id)
        return 0 if article else 1

    if cmd == "open":
        console.print(f"[bold]{app.page.value}[/bold] [dim]{app.navigation.path}[/dim]")
        shown = app.rendered()
        if app.page == Page.PROFILE:
            render_profile(shown)
        elif app.page in (Page.ARTICLES, Page.NEWS):
            render_articles(shown, app.page.value.title())
        else:
            render_tasks(shown)
        return 0

    if cmd == "job":
        return await follow_job(app, args.type)

    console.print(f"[red]Unknown command: {cmd}[/red]")
    return 2


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    level = "DEBUG" if args.verbose else load_settings().log_level
    configure_logging(level, RichHandler(console=console, show_path=False))
    logger.debug("Running %s", args.command)
    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
