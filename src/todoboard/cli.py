"""CLI interface for todoboard."""

import asyncio
from datetime import datetime
from typing import Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.panel import Panel

from todoboard.config import get_settings
from todoboard.database import close_db, get_async_session_maker, init_db
from todoboard.log import setup_logging
from todoboard.models.todo import Urgency
from todoboard.services.exceptions import TodoBoardError
from todoboard.sync import LocalBackend, Notice, TodoStore, TodoView, UNSET
from todoboard.sync import filters

app = typer.Typer(
    name="todoboard",
    help="todoboard - todos with categories, reminders and urgency.",
    no_args_is_help=True,
)
console = Console()

URGENCY_COLORS = {
    Urgency.LOW: "green",
    Urgency.MEDIUM: "yellow",
    Urgency.HIGH: "dark_orange",
    Urgency.URGENT: "red",
}


def run_async(coro):
    """Run async function in sync context, closing the engine afterwards."""

    async def _run():
        try:
            return await coro
        finally:
            await close_db()

    try:
        return asyncio.run(_run())
    except TodoBoardError as e:
        console.print(f"[red]{escape(e.message)}[/red]")
        raise typer.Exit(1)
    except ValidationError as e:
        for error in e.errors():
            field = ".".join(str(part) for part in error["loc"])
            console.print(f"[red]Invalid {escape(field)}: {escape(error['msg'])}[/red]")
        raise typer.Exit(1)


def print_notice(notice: Notice) -> None:
    """Show successful outcomes; errors are reported by run_async."""
    if notice.level == "info":
        console.print(f"[green]{notice.title}:[/green] {escape(notice.description)}")


def parse_datetime(value: str) -> datetime:
    """Parse a date, taking it as local time when no offset is given."""
    try:
        parsed = datetime.fromisoformat(value.replace(" ", "T"))
    except ValueError:
        console.print(f"[red]Invalid date format: {escape(value)}[/red]")
        console.print("Use format: YYYY-MM-DD or YYYY-MM-DD HH:MM")
        raise typer.Exit(1)
    return parsed if parsed.tzinfo else parsed.astimezone()


async def open_store(ctx: typer.Context) -> TodoStore:
    """Initialize the database and load the user's todos and categories."""
    await init_db()
    backend = LocalBackend(get_async_session_maker(), ctx.obj)
    store = TodoStore(backend, notify=print_notice)
    await store.load()
    return store


def find_todo(store: TodoStore, todo_id: str) -> TodoView:
    """Find a todo by full or partial ID."""
    todo = store.get_todo(todo_id)
    if todo is None:
        todo = next((t for t in store.todos if t.id.startswith(todo_id)), None)
    if todo is None:
        console.print(f"[red]Todo not found: {escape(todo_id)}[/red]")
        raise typer.Exit(1)
    return todo


async def resolve_category(store: TodoStore, name: str, create: bool = False) -> str:
    """Resolve a category name (or ID) to its ID, optionally creating it."""
    for category in store.categories:
        if category.id == name or category.name.lower() == name.lower():
            return category.id
    if not create:
        console.print(f"[red]Category not found: {escape(name)}[/red]")
        raise typer.Exit(1)
    category = await store.add_category(name=name, color="#E5DEFF")
    return category.id


@app.callback()
def main(
    ctx: typer.Context,
    user: Optional[str] = typer.Option(
        None, "--user", "-u", help="User ID (default: TODOBOARD_DEFAULT_USER_ID)"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug output"),
):
    """Select the user every command acts for."""
    setup_logging("DEBUG" if verbose else "WARNING")
    ctx.obj = user or get_settings().default_user_id


@app.command()
def add(
    ctx: typer.Context,
    title: str = typer.Argument(..., help="Todo title"),
    content: Optional[str] = typer.Option(None, "--content", "-d", help="Content (HTML allowed)"),
    reminder: Optional[str] = typer.Option(None, "--reminder", "-r", help="Reminder (YYYY-MM-DD HH:MM)"),
    urgency: Urgency = typer.Option(Urgency.LOW, "--urgency", "-p", help="Urgency"),
    category: Optional[str] = typer.Option(None, "--category", "-c", help="Category name"),
):
    """Add a new todo."""

    async def _add():
        store = await open_store(ctx)
        category_id = await resolve_category(store, category, create=True) if category else None
        todo = await store.add_todo(
            title,
            category_id=category_id,
            content=content,
            reminder=parse_datetime(reminder) if reminder else None,
            urgency=urgency,
        )
        console.print(Panel(
            f"[green]Created:[/green] {escape(todo.title)}\n"
            f"[dim]ID: {todo.id}[/dim]",
            title="Todo Added",
        ))

    run_async(_add())


@app.command("list")
def list_todos(
    ctx: typer.Context,
    all_todos: bool = typer.Option(False, "--all", "-a", help="Show completed todos too"),
    category: Optional[str] = typer.Option(None, "--category", "-c", help="Filter by category"),
    search: Optional[str] = typer.Option(None, "--search", "-s", help="Search title and content"),
    by_urgency: bool = typer.Option(False, "--by-urgency", help="Most urgent first"),
):
    """List todos, newest first."""

    async def _list():
        store = await open_store(ctx)

        todos = filters.filter_by_completion(store.todos, None if all_todos else False)
        if category:
            todos = filters.filter_by_category(todos, await resolve_category(store, category))
        if search:
            todos = filters.search(todos, search)
        if by_urgency:
            todos = filters.sort_by_urgency(todos)

        if not todos:
            console.print("[dim]No todos found.[/dim]")
            return

        names = {c.id: c.name for c in store.categories}
        table = Table(title=f"Todos ({len(todos)} shown)")
        table.add_column("ID", style="dim", width=8)
        table.add_column("Urgency", justify="center")
        table.add_column("Title", style="bold")
        table.add_column("Due", width=16)
        table.add_column("Categories", style="cyan")

        for todo in todos:
            color = URGENCY_COLORS[todo.urgency]
            title = escape(todo.title)
            if todo.completed:
                title = f"[strike dim]{title}[/strike dim]"
            table.add_row(
                todo.id[:8],
                f"[{color}]{todo.urgency.value}[/{color}]",
                title,
                todo.due_date.astimezone().strftime("%Y-%m-%d %H:%M") if todo.due_date else "",
                escape(", ".join(names[c] for c in filters.live_category_ids(todo, store.categories))),
            )

        console.print(table)

    run_async(_list())


@app.command()
def toggle(
    ctx: typer.Context,
    todo_id: str = typer.Argument(..., help="Todo ID (or partial ID)"),
):
    """Toggle a todo between done and pending."""

    async def _toggle():
        store = await open_store(ctx)
        todo = await store.toggle_todo(find_todo(store, todo_id).id)
        status = "[green]Completed:[/green]" if todo.completed else "[yellow]Reopened:[/yellow]"
        console.print(f"{status} {escape(todo.title)}")

    run_async(_toggle())


@app.command()
def edit(
    ctx: typer.Context,
    todo_id: str = typer.Argument(..., help="Todo ID (or partial ID)"),
    content: Optional[str] = typer.Option(None, "--content", "-d", help="New content"),
    title: Optional[str] = typer.Option(None, "--title", "-t", help="New title"),
    reminder: Optional[str] = typer.Option(None, "--reminder", "-r", help="New reminder"),
    clear_reminder: bool = typer.Option(False, "--clear-reminder", help="Remove the reminder"),
    urgency: Optional[Urgency] = typer.Option(None, "--urgency", "-p", help="New urgency"),
):
    """Edit a todo's content, title, reminder or urgency."""

    async def _edit():
        store = await open_store(ctx)
        todo = find_todo(store, todo_id)

        new_reminder = UNSET
        if clear_reminder:
            new_reminder = None
        elif reminder:
            new_reminder = parse_datetime(reminder)

        await store.update_todo_content(
            todo.id,
            content if content is not None else todo.content,
            reminder=new_reminder,
            title=title if title is not None else UNSET,
            urgency=urgency if urgency is not None else UNSET,
        )

    run_async(_edit())


@app.command("set-categories")
def set_categories(
    ctx: typer.Context,
    todo_id: str = typer.Argument(..., help="Todo ID (or partial ID)"),
    categories: Optional[str] = typer.Argument(None, help="Comma-separated category names; empty clears"),
):
    """Replace the categories of a todo."""

    async def _set_categories():
        store = await open_store(ctx)
        todo = find_todo(store, todo_id)
        names = [n.strip() for n in (categories or "").split(",") if n.strip()]
        category_ids = [await resolve_category(store, name) for name in names]
        await store.update_todo_categories(todo.id, category_ids)
        console.print(f"[green]Categories set:[/green] {escape(', '.join(names)) or '(none)'}")

    run_async(_set_categories())


@app.command()
def delete(
    ctx: typer.Context,
    todo_id: str = typer.Argument(..., help="Todo ID (or partial ID)"),
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation"),
):
    """Delete a todo."""

    async def _delete():
        store = await open_store(ctx)
        todo = find_todo(store, todo_id)

        if not force:
            confirm = typer.confirm(f"Delete '{todo.title}'?")
            if not confirm:
                raise typer.Abort()

        await store.delete_todo(todo.id)

    run_async(_delete())


@app.command()
def categories(ctx: typer.Context):
    """List all categories."""

    async def _categories():
        store = await open_store(ctx)

        if not store.categories:
            console.print("[dim]No categories found.[/dim]")
            return

        table = Table(title="Categories")
        table.add_column("ID", style="dim", width=8)
        table.add_column("Name", style="bold")
        table.add_column("Color")
        table.add_column("Todos", justify="right")

        for cat in store.categories:
            count = len(filters.filter_by_category(store.todos, cat.id))
            table.add_row(cat.id[:8], escape(cat.name), cat.color, str(count))

        console.print(table)

    run_async(_categories())


@app.command("category-add")
def category_add(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Category name"),
    color: str = typer.Option("#E5DEFF", "--color", help="Hex color like #FDE1D3"),
):
    """Add a category."""

    async def _category_add():
        store = await open_store(ctx)
        await store.add_category(name=name, color=color)

    run_async(_category_add())


@app.command("category-delete")
def category_delete(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Category name or ID"),
):
    """Delete a category; todos keep their other categories."""

    async def _category_delete():
        store = await open_store(ctx)
        await store.delete_category(await resolve_category(store, name))

    run_async(_category_delete())


@app.command()
def seed(ctx: typer.Context):
    """Create the default categories if there are none."""

    async def _seed():
        store = await open_store(ctx)
        before = len(store.categories)
        created = await store.setup_default_categories()
        if before:
            console.print("[dim]Categories already exist.[/dim]")
        else:
            console.print(f"[green]Created {len(created)} default categories.[/green]")

    run_async(_seed())


@app.command()
def server(
    host: str = typer.Option("0.0.0.0", "--host", "-h", help="Host to bind to"),
    port: int = typer.Option(8000, "--port", "-p", help="Port to bind to"),
):
    """Start the API server."""
    import uvicorn

    console.print(f"[green]Starting todoboard server at http://{host}:{port}[/green]")
    console.print("[dim]Press Ctrl+C to stop[/dim]")

    uvicorn.run(
        "todoboard.main:app",
        host=host,
        port=port,
        reload=False,
    )


if __name__ == "__main__":
    app()
