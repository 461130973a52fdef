"""CLI entry point for the storyjournal narrative engine operator console.

Usage:
  storyjournal queue                         list offline requests
  storyjournal add-entry -a "Essay 1" -s Math -t "..."
  storyjournal enqueue-story -e ENTRY -g Fantasy
  storyjournal process                       drain pending requests
  storyjournal --help                        all commands
"""

import asyncio
import logging
import sys
from typing import Awaitable, Callable, TypeVar

import click

from agents.metadata_extractor import OnDeviceMetadataExtractor
from cli.theme import (
    get_console,
    app_header,
    command_panel,
    success_panel,
    request_table,
    arc_table,
    metadata_panel,
    genre_table,
)
from config.exceptions import NarrativeEngineError
from config.logging_config import setup_logging
from config.settings import Settings
from models.enums import STORY_GENRES
from models.journal import JournalEntry, PromptResponse
from workflow.callbacks import RichQueueCallback
from workflow.engine import NarrativeEngine, build_engine
from workflow.network import AlwaysOnlineSignal, NetworkReachabilitySignal

console = get_console()
logger = logging.getLogger(__name__)

T = TypeVar("T")


def _init_logging(verbose: bool):
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.INFO
    settings = Settings()
    setup_logging(level=level, log_dir=settings.log_dir, console_enabled=verbose)


def _build(online: bool) -> NarrativeEngine:
    """Engine for one command; offline engines never process requests."""
    network = AlwaysOnlineSignal() if online else NetworkReachabilitySignal()
    return build_engine(Settings(), network=network, callbacks=[RichQueueCallback(console)])


def _run(engine: NarrativeEngine, action: Callable[[], Awaitable[T]]) -> T:
    async def runner() -> T:
        try:
            return await action()
        finally:
            await engine.aclose()

    try:
        return asyncio.run(runner())
    except KeyboardInterrupt:
        console.print("\n[warning]Interrupted[/]")
        sys.exit(130)
    except NarrativeEngineError as e:
        console.print(f"[error]{e}[/]")
        logger.exception("Command failed")
        sys.exit(1)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose):
    """storyjournal: turns journal entries into chapters of an ongoing story.

    \b
    Typical flow:
      storyjournal add-entry -a "Essay 1" -s Math -t "Today Maya and I..."
      storyjournal enqueue-story -e <entry id> -g Fantasy
      storyjournal arcs
    """
    _init_logging(verbose)


# ---------------------------------------------------------------------------
# queue inspection
# ---------------------------------------------------------------------------

@cli.command(name="queue")
def show_queue():
    """List offline requests in queue order."""
    engine = _build(online=False)
    requests = engine.queue.requests
    engine.queue.close()

    console.print(app_header())
    if not requests:
        console.print("[muted]The offline queue is empty.[/]")
        return
    console.print(request_table(requests))
    console.print(
        f"[stat.label]Pending:[/] [stat.value]{engine.queue.pending_request_count}[/]  "
        f"[muted]|[/]  [stat.label]Total:[/] [stat.value]{len(requests)}[/]"
        f"[muted]/{engine.settings.max_queue_size}[/]"
    )


# ---------------------------------------------------------------------------
# story requests
# ---------------------------------------------------------------------------

@cli.command(name="enqueue-story")
@click.option("--entry-id", "-e", required=True, help="Journal entry id")
@click.option("--genre", "-g", default=None, help="Genre key (default: stored default genre)")
@click.option("--offline", is_flag=True, help="Queue only; do not process now")
def enqueue_story(entry_id, genre, offline):
    """Queue a generateStory request for a journal entry.

    Examples:
      storyjournal enqueue-story -e 3f2a... -g Mystery
      storyjournal enqueue-story -e 3f2a... --offline
    """
    engine = _build(online=not offline)
    manager = engine.manager

    console.print(app_header())
    console.print(command_panel("Queue story", {
        "Entry": entry_id,
        "Genre": genre or manager.default_genre,
        "Mode": "offline" if offline else "process now",
    }))

    request_id = _run(engine, lambda: manager.request_story(entry_id, genre))
    if request_id is None:
        if not manager.story_generation_enabled:
            console.print("[warning]Story generation is disabled.[/]")
        else:
            console.print("[error]The offline queue is full; request rejected.[/]")
        sys.exit(1)

    status = engine.queue.request_status(request_id)
    console.print(success_panel("Queued", f"Request [accent]{request_id}[/] is [stat.value]{status}[/]"))
    if status == "completed":
        arcs = engine.arc_store.recent_arc_records(1)
        if arcs:
            console.print(arc_table(arcs, engine.settings.arc_summary_chars))


@cli.command()
def process():
    """Process every pending request now."""
    engine = _build(online=True)
    console.print(app_header())
    processed = _run(engine, engine.manager.process_offline_requests)
    if processed == 0:
        console.print("[muted]Nothing to process.[/]")
    console.print(request_table(engine.queue.requests))


@cli.command()
@click.argument("request_id")
def retry(request_id):
    """Send a failed request back to pending and process it."""
    engine = _build(online=True)
    if not _run(engine, lambda: engine.queue.retry_request(request_id)):
        console.print(f"[warning]No failed request with id {request_id}[/]")
        sys.exit(1)
    console.print(f"Request [accent]{request_id}[/] is now [stat.value]{engine.queue.request_status(request_id)}[/]")


@cli.command()
@click.argument("request_id")
def remove(request_id):
    """Remove a request from the queue, whatever its status."""
    engine = _build(online=False)
    removed = engine.queue.remove_request(request_id)
    engine.queue.close()
    if not removed:
        console.print(f"[warning]No request with id {request_id}[/]")
        sys.exit(1)
    console.print(f"[success]Removed {request_id}[/]")


@cli.command(name="clear-completed")
def clear_completed():
    """Remove completed requests from the queue."""
    engine = _build(online=False)
    removed = engine.queue.clear_completed_requests()
    engine.queue.close()
    console.print(f"[success]Cleared {removed} completed request(s)[/]")


# ---------------------------------------------------------------------------
# story data
# ---------------------------------------------------------------------------

@cli.command()
@click.option("--limit", "-n", default=10, show_default=True, help="How many recent arcs to show")
def arcs(limit):
    """Show the most recent story arcs."""
    engine = _build(online=False)
    engine.queue.close()
    records = engine.arc_store.recent_arc_records(limit)

    console.print(app_header())
    if not records:
        console.print("[muted]No story arcs yet.[/]")
        return
    console.print(arc_table(records, engine.settings.arc_summary_chars))
    console.print(f"[stat.label]Total arcs:[/] [stat.value]{engine.arc_store.arc_count()}[/]")


@cli.command()
@click.argument("text")
def extract(text):
    """Print on-device story metadata for TEXT."""
    settings = Settings()
    metadata = OnDeviceMetadataExtractor(max_themes=settings.max_themes).analyze(text)
    console.print(metadata_panel(metadata))


@cli.command()
@click.option("--set-default", "set_default", default=None, help="Store a new default genre")
def genres(set_default):
    """List story genres (and optionally change the default)."""
    engine = _build(online=False)
    engine.queue.close()
    manager = engine.manager
    if set_default is not None and not manager.set_default_genre(set_default):
        console.print(
            f"[error]Unknown genre {set_default!r}. Choose one of: {', '.join(STORY_GENRES)}[/]"
        )
        sys.exit(1)
    console.print(genre_table(manager.genres, manager.default_genre))


def _parse_prompt(value: str) -> PromptResponse:
    prompt, sep, answer = value.partition("=")
    if not sep or not prompt.strip():
        raise click.BadParameter(f"expected PROMPT=ANSWER, got {value!r}")
    return PromptResponse(prompt=prompt.strip(), response=answer.strip() or None)


@cli.command(name="add-entry")
@click.option("--assignment", "-a", required=True, help="Assignment name")
@click.option("--subject", "-s", required=True, help="Subject (e.g. Math)")
@click.option("--transcription", "-t", default=None, help="Transcribed text of the entry")
@click.option("--summary", default=None, help="AI summary of the entry")
@click.option("--prompt", "-p", "prompts", multiple=True, help="Reflection prompt as PROMPT=ANSWER")
@click.option("--entry-id", "-e", default=None, help="Use this id instead of a new UUID")
def add_entry(assignment, subject, transcription, summary, prompts, entry_id):
    """Save a journal entry to the local database.

    Example:
      storyjournal add-entry -a "Essay 1" -s Math -t "Hello" -p "How did it go?=Good"
    """
    entry = JournalEntry(
        assignment_name=assignment,
        subject=subject,
        reflection_prompts=[_parse_prompt(p) for p in prompts],
        transcription=transcription,
        ai_summary=summary,
    )
    if entry_id:
        entry.id = entry_id

    engine = _build(online=False)
    engine.queue.close()
    engine.db.save_journal_entry(entry)
    console.print(success_panel("Journal entry saved", f"[accent]{entry.id}[/]"))


if __name__ == "__main__":
    cli()
