"""Offline queue callbacks for monitoring and real-time reporting."""

import logging
from typing import Optional, Protocol, runtime_checkable

from rich.markup import escape

from models.enums import RequestStatus
from models.request import OfflineRequest

logger = logging.getLogger(__name__)


@runtime_checkable
class QueueCallback(Protocol):
    """Protocol for offline queue observers.

    Implement this protocol to follow queue activity without polling.
    Callbacks run inline on the queue's event loop and must not block.
    """

    def on_request_enqueued(
        self, request: OfflineRequest, evicted: Optional[OfflineRequest]
    ) -> None:
        """Called after a request was accepted (``evicted`` made room for it)."""
        ...

    def on_request_rejected(self, request: OfflineRequest, reason: str) -> None:
        """Called when the queue is full and nothing could be evicted."""
        ...

    def on_status_changed(
        self,
        request: OfflineRequest,
        old_status: RequestStatus,
        note: Optional[str] = None,
    ) -> None:
        """Called after every status transition of a request."""
        ...

    def on_drain_started(self, pending: int) -> None:
        ...

    def on_drain_finished(self, processed: int) -> None:
        ...


class LoggingCallback:
    """Lightweight callback that logs queue activity to the standard logger."""

    def on_request_enqueued(self, request, evicted) -> None:
        if evicted is not None:
            logger.info("Enqueued %s %s (evicted %s)", request.type.value, request.id, evicted.id)
        else:
            logger.info("Enqueued %s %s", request.type.value, request.id)

    def on_request_rejected(self, request, reason) -> None:
        logger.warning("Rejected %s %s: %s", request.type.value, request.id, reason)

    def on_status_changed(self, request, old_status, note=None) -> None:
        suffix = f" ({note})" if note else ""
        logger.debug(
            "Request %s: %s -> %s%s", request.id, old_status.value, request.status.value, suffix
        )

    def on_drain_started(self, pending) -> None:
        logger.debug("Drain started: %d pending", pending)

    def on_drain_finished(self, processed) -> None:
        logger.debug("Drain finished: %d processed", processed)


class RichQueueCallback:
    """Prints queue activity to a Rich console (used by the CLI)."""

    _STATUS_STYLES: dict[RequestStatus, str] = {
        RequestStatus.PENDING: "yellow",
        RequestStatus.IN_PROGRESS: "cyan",
        RequestStatus.COMPLETED: "green",
        RequestStatus.FAILED: "red",
    }

    def __init__(self, console=None):
        """
        Args:
            console: Rich Console instance. Creates one if not provided.
        """
        if console is None:
            from rich.console import Console
            console = Console()
        self._console = console

    def on_request_enqueued(self, request, evicted) -> None:
        self._console.print(
            f"  [dim]--[/] queued [bold]{request.type.value}[/] [dim]{request.id}[/]"
        )
        if evicted is not None:
            self._console.print(f"  [dim]--[/] [yellow]evicted {evicted.id}[/]")

    def on_request_rejected(self, request, reason) -> None:
        self._console.print(f"  [dim]--[/] [red]rejected {request.id}: {escape(reason)}[/]")

    def on_status_changed(self, request, old_status, note=None) -> None:
        style = self._STATUS_STYLES.get(request.status, "white")
        line = f"  [dim]--[/] {request.id[:8]} [{style}]{request.status.value}[/]"
        if request.error_message and request.status == RequestStatus.FAILED:
            line += f" [dim]({escape(request.error_message)})[/]"
        if note:
            line += f" [yellow]({note})[/]"
        self._console.print(line)

    def on_drain_started(self, pending) -> None:
        self._console.print(f"[dim]Processing {pending} pending request(s)...[/]")

    def on_drain_finished(self, processed) -> None:
        self._console.print(f"[green]Processed {processed} request(s)[/]")
