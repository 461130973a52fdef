"""Unified Rich theme and reusable UI helper functions for the CLI."""

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.rule import Rule
from rich.table import Table
from rich.theme import Theme

JOURNAL_THEME = Theme({
    "app.title": "bold",
    "success": "green",
    "warning": "yellow",
    "error": "red",
    "info": "blue",
    "muted": "dim",
    "accent": "cyan",
    "genre": "bold magenta",
    "stat.label": "dim",
    "stat.value": "bold",
})


_STATUS_STYLES = {
    "pending": "yellow",
    "inProgress": "cyan",
    "completed": "green",
    "failed": "red",
}


def get_console() -> Console:
    """Return a Console instance with the journal theme applied."""
    return Console(theme=JOURNAL_THEME)


def app_header(title: str = "storyjournal") -> Rule:
    return Rule(title=f"[bold]{title}[/]", style="dim")


def command_panel(title: str, fields: dict[str, str]) -> Panel:
    """Return a Panel displaying command parameters.

    Args:
        title: Panel title (e.g. "Queue story").
        fields: Ordered dict of label -> value pairs.
    """
    lines = [f"  [stat.label]{label}:[/] [stat.value]{value}[/]" for label, value in fields.items()]
    return Panel("\n".join(lines), title=f"[bold]{title}[/]", box=box.ROUNDED, border_style="dim", padding=(0, 2))


def success_panel(title: str, body: str) -> Panel:
    """Return a green-bordered Panel for success results."""
    return Panel(body, title=f"[success]{title}[/]", box=box.ROUNDED, border_style="green", padding=(0, 2))


def request_table(requests: list) -> Table:
    """Offline requests, in queue order.

    Args:
        requests: OfflineRequest snapshots.
    """
    table = Table(box=box.ROUNDED, border_style="dim", show_header=True, padding=(0, 1))
    table.add_column("ID", style="muted")
    table.add_column("Type", style="accent")
    table.add_column("Status")
    table.add_column("Attempts", justify="right")
    table.add_column("Created", style="muted")
    table.add_column("Error")

    for r in requests:
        status = r.status.value
        style = _STATUS_STYLES.get(status, "white")
        table.add_row(
            r.id,
            r.type.value,
            f"[{style}]{status}[/]",
            str(r.attempt_count),
            r.creation_date.strftime("%Y-%m-%d %H:%M:%S"),
            escape(r.error_message or ""),
        )
    return table


def arc_table(arcs: list, summary_chars: int = 100) -> Table:
    """Story arcs, newest first, with a short summary of each chapter."""
    table = Table(box=box.ROUNDED, border_style="dim", show_header=True, padding=(0, 1))
    table.add_column("#", style="muted", justify="right")
    table.add_column("Created", style="muted")
    table.add_column("Themes", style="accent")
    table.add_column("Summary")

    for arc in arcs:
        table.add_row(
            str(arc.id or ""),
            arc.created_at.strftime("%Y-%m-%d %H:%M"),
            ", ".join(arc.themes),
            escape(arc.summary(summary_chars)),
        )
    return table


def metadata_panel(metadata) -> Panel:
    """Return a Panel with extracted StoryMetadata fields."""
    if metadata.sentiment_score is None:
        sentiment = "[muted]none[/]"
    else:
        sentiment = f"{metadata.sentiment_score:+.2f} ({metadata.sentiment_label()})"

    def _join(values) -> str:
        return ", ".join(values) if values else "[muted]none[/]"

    body = (
        f"  [stat.label]Sentiment:[/] [stat.value]{sentiment}[/]\n"
        f"  [stat.label]Themes:[/] {_join(metadata.themes)}\n"
        f"  [stat.label]Entities:[/] {_join(metadata.entities)}\n"
        f"  [stat.label]Key phrases:[/] {_join(metadata.key_phrases)}"
    )
    return Panel(body, title="[bold]Story metadata[/]", box=box.ROUNDED, border_style="dim", padding=(0, 2))


def genre_table(genres: dict[str, str], default_genre: str) -> Table:
    table = Table(box=box.ROUNDED, border_style="dim", show_header=True, padding=(0, 1))
    table.add_column("Key", style="genre")
    table.add_column("Name")
    table.add_column("", style="success")
    for key, name in genres.items():
        table.add_row(key, name, "default" if key == default_genre else "")
    return table
