"""Durable, bounded, network-gated queue of deferred requests.

Requests live in memory as the source of truth and are mirrored to one
JSON file after every mutation. Processing runs one request at a time,
only while the network signal reports a connection.

Request lifecycle::

    pending    -> inProgress  (attempt starts, attempt_count += 1)
    inProgress -> completed   (handler returned)
    inProgress -> failed      (handler raised or timed out)
    pending    -> failed      (attempt_count already at max_retry_attempts)
    failed     -> pending     (retry_request)
"""

import asyncio
import contextlib
import json
import logging
import os
import tempfile
import threading
from datetime import datetime
from pathlib import Path
from typing import Any, Awaitable, Callable, Optional

from config.exceptions import (
    NarrativeEngineError,
    QueueFullError,
    QueueStorageError,
    RequestTimeoutError,
)
from config.settings import Settings
from models.enums import HandlerOutcome, RequestStatus, RequestType
from models.request import OfflineRequest
from workflow.callbacks import QueueCallback
from workflow.network import NetworkReachabilitySignal

logger = logging.getLogger(__name__)

RequestHandler = Callable[[OfflineRequest], Awaitable[Any]]

MAX_ATTEMPTS_MESSAGE = "maximum retry attempts reached"
QUEUE_FULL_MESSAGE = "offline queue is full"


def _error_message(exc: BaseException) -> str:
    if isinstance(exc, NarrativeEngineError):
        return exc.message
    return str(exc) or type(exc).__name__


class OfflineRequestQueue:
    """Offline request queue.

    Args:
        settings: Queue file path, capacity, retry cap and request timeout.
        handlers: Async handler per request type.
        network: Reachability signal; a False -> True transition drains the queue.
        callbacks: Observers notified of queue activity.
    """

    def __init__(
        self,
        settings: Settings,
        handlers: dict[RequestType, RequestHandler],
        network: NetworkReachabilitySignal,
        callbacks: Optional[list[QueueCallback]] = None,
    ):
        self.settings = settings
        self.file_path = Path(settings.queue_file_path)
        self.network = network
        self._handlers = dict(handlers)
        self._callbacks: list[QueueCallback] = list(callbacks or [])
        self._requests: list[OfflineRequest] = []
        self._is_processing = False
        self._write_lock = threading.Lock()

        self._load()
        self._last_connected = network.is_connected
        self._unsubscribe = network.subscribe(self._on_network_change)

    # ---- Observers ----

    def add_callback(self, callback: QueueCallback) -> None:
        self._callbacks.append(callback)

    def remove_callback(self, callback: QueueCallback) -> None:
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    def _notify(self, event: str, *args) -> None:
        for callback in list(self._callbacks):
            method = getattr(callback, event, None)
            if method is None:
                continue
            try:
                method(*args)
            except Exception:
                logger.exception("Queue callback %s.%s failed", type(callback).__name__, event)

    def close(self) -> None:
        """Stop listening to the network signal."""
        self._unsubscribe()

    # ---- Persistence ----

    def _load(self) -> None:
        if not self.file_path.exists():
            logger.info("No offline queue file at %s; starting empty", self.file_path)
            return
        try:
            records = json.loads(self.file_path.read_text(encoding="utf-8"))
            if not isinstance(records, list):
                raise ValueError(f"expected a JSON array, got {type(records).__name__}")
            requests = [OfflineRequest.from_dict(r) for r in records]
        except OSError as e:
            logger.error("Could not read offline queue %s: %s", self.file_path, e)
            return
        except (ValueError, KeyError, TypeError) as e:
            logger.warning("Offline queue file %s is corrupt (%s); starting empty", self.file_path, e)
            self._quarantine_corrupt_file()
            return

        seen: set[str] = set()
        recovered = 0
        for request in requests:
            if request.id in seen:
                logger.warning("Dropping duplicate request id %s from %s", request.id, self.file_path)
                continue
            seen.add(request.id)
            if request.status == RequestStatus.IN_PROGRESS:
                # interrupted by a process exit; the attempt still counts
                request.status = RequestStatus.PENDING
                recovered += 1
            self._requests.append(request)

        logger.info("Loaded %d offline request(s) from %s", len(self._requests), self.file_path)
        if recovered:
            logger.warning("Reset %d interrupted request(s) to pending", recovered)
            self._persist()

    def _quarantine_corrupt_file(self) -> None:
        target = self.file_path.with_name(self.file_path.name + ".corrupt")
        try:
            os.replace(self.file_path, target)
            logger.warning("Corrupt offline queue kept at %s", target)
        except OSError as e:
            logger.error("Could not move corrupt offline queue aside: %s", e)

    def _write_atomic(self, records: list[dict]) -> None:
        directory = self.file_path.parent
        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                prefix=f".{self.file_path.name}.", suffix=".tmp", dir=str(directory)
            )
        except OSError as e:
            raise QueueStorageError(
                f"Failed to write offline queue: {e}", {"path": str(self.file_path)}
            ) from e
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(records, f, ensure_ascii=False, indent=2)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.file_path)
        except OSError as e:
            with contextlib.suppress(OSError):
                os.unlink(tmp_path)
            raise QueueStorageError(
                f"Failed to write offline queue: {e}", {"path": str(self.file_path)}
            ) from e

    def _persist(self) -> bool:
        """Mirror the in-memory queue to disk. Failures are logged, not raised."""
        records = [r.to_dict() for r in self._requests]
        with self._write_lock:
            try:
                self._write_atomic(records)
            except QueueStorageError as e:
                logger.error("%s", e)
                return False
        return True

    # ---- Mutations ----

    def _eviction_candidates(self, needed: int) -> Optional[list[OfflineRequest]]:
        """Oldest pending requests first, then oldest failed ones."""
        by_age = sorted(
            enumerate(self._requests), key=lambda pair: (pair[1].creation_date, pair[0])
        )
        pending = [r for _, r in by_age if r.status == RequestStatus.PENDING]
        failed = [r for _, r in by_age if r.status == RequestStatus.FAILED]
        candidates = (pending + failed)[:needed]
        if len(candidates) < needed:
            return None
        return candidates

    async def enqueue(self, request: OfflineRequest) -> bool:
        """Add a request, evicting to stay within capacity; drain if online.

        Returns:
            False if the queue is full of in-progress/completed requests, the
            id is already queued, or the request is not a fresh pending one.
            True otherwise.
        """
        if request.status != RequestStatus.PENDING or request.attempt_count != 0:
            logger.warning(
                "Refusing %s request %s (status=%s, attempts=%d); only fresh requests can be queued",
                request.type.value, request.id, request.status.value, request.attempt_count,
            )
            self._notify("on_request_rejected", request, "request is not pending")
            return False

        if any(r.id == request.id for r in self._requests):
            logger.warning("Request %s is already queued", request.id)
            self._notify("on_request_rejected", request, "duplicate request id")
            return False

        evicted: Optional[OfflineRequest] = None
        needed = len(self._requests) - self.settings.max_queue_size + 1
        if needed > 0:
            victims = self._eviction_candidates(needed)
            if victims is None:
                logger.warning(
                    "Offline queue full (%d); rejecting %s request %s",
                    self.settings.max_queue_size, request.type.value, request.id,
                )
                self._notify("on_request_rejected", request, QUEUE_FULL_MESSAGE)
                return False
            for victim in victims:
                self._requests.remove(victim)
                logger.warning(
                    "Evicted %s request %s (%s) to make room",
                    victim.type.value, victim.id, victim.status.value,
                )
            evicted = victims[-1]

        stored = request.copy()
        self._requests.append(stored)
        self._persist()
        logger.info("Enqueued %s request %s", stored.type.value, stored.id)
        self._notify("on_request_enqueued", stored, evicted)

        if self.network.is_connected:
            await self.process_all_pending_requests()
        return True

    async def enqueue_or_raise(self, request: OfflineRequest) -> None:
        """Like ``enqueue`` but raises QueueFullError on rejection."""
        if not await self.enqueue(request):
            raise QueueFullError(self.settings.max_queue_size)

    async def retry_request(self, request_id: str) -> bool:
        """Send a failed request back to pending. Unknown or non-failed ids are ignored."""
        request = self._find(request_id)
        if request is None or request.status != RequestStatus.FAILED:
            return False
        self._set_status(request, RequestStatus.PENDING)
        logger.info("Request %s queued for retry (attempts so far: %d)", request.id, request.attempt_count)
        if self.network.is_connected:
            await self.process_all_pending_requests()
        return True

    def remove_request(self, request_id: str) -> bool:
        request = self._find(request_id)
        if request is None:
            return False
        self._requests.remove(request)
        self._persist()
        logger.info("Removed request %s", request_id)
        return True

    def clear_completed_requests(self) -> int:
        """Drop every completed request; returns how many were removed."""
        before = len(self._requests)
        self._requests = [r for r in self._requests if r.status != RequestStatus.COMPLETED]
        removed = before - len(self._requests)
        self._persist()
        logger.info("Cleared %d completed request(s)", removed)
        return removed

    def _set_status(
        self,
        request: OfflineRequest,
        status: RequestStatus,
        error: Optional[str] = None,
        note: Optional[str] = None,
    ) -> None:
        old_status = request.status
        request.status = status
        if status == RequestStatus.IN_PROGRESS:
            request.attempt_count += 1
        elif status == RequestStatus.FAILED:
            request.error_message = error
        elif status == RequestStatus.COMPLETED:
            request.error_message = None
        self._persist()
        self._notify("on_status_changed", request, old_status, note)

    # ---- Processing ----

    async def _on_network_change(self, is_connected: bool) -> None:
        was_connected = self._last_connected
        self._last_connected = is_connected
        if is_connected and not was_connected:
            logger.info("Network restored; processing offline requests")
            await self.process_all_pending_requests()

    def _next_pending(self, attempted: set[str]) -> Optional[OfflineRequest]:
        for request in self._requests:
            if request.status == RequestStatus.PENDING and request.id not in attempted:
                return request
        return None

    async def process_all_pending_requests(self) -> int:
        """Process pending requests in queue order, one at a time.

        No-op while another drain is running, while offline, or when nothing
        is pending. Each request gets at most one attempt per drain.

        Returns:
            Number of requests processed by this call.
        """
        if self._is_processing:
            logger.debug("Drain already running; skipping")
            return 0
        if not self.network.is_connected:
            logger.debug("Offline; leaving %d request(s) pending", self.pending_request_count)
            return 0
        pending = self.pending_request_count
        if pending == 0:
            return 0

        self._is_processing = True
        attempted: set[str] = set()
        try:
            self._notify("on_drain_started", pending)
            logger.info("Processing %d pending offline request(s)", pending)
            while True:
                if not self.network.is_connected:
                    logger.info("Network lost; pausing offline queue")
                    break
                request = self._next_pending(attempted)
                if request is None:
                    break
                attempted.add(request.id)
                await self._process_request(request)
        finally:
            self._is_processing = False
        self._notify("on_drain_finished", len(attempted))
        return len(attempted)

    async def _process_request(self, request: OfflineRequest) -> None:
        if request.attempt_count >= self.settings.max_retry_attempts:
            logger.warning(
                "Request %s exhausted %d attempts; marking failed",
                request.id, request.attempt_count,
            )
            self._set_status(request, RequestStatus.FAILED, error=MAX_ATTEMPTS_MESSAGE)
            return

        self._set_status(request, RequestStatus.IN_PROGRESS)
        logger.info(
            "Processing %s request %s (attempt %d/%d)",
            request.type.value, request.id,
            request.attempt_count, self.settings.max_retry_attempts,
        )

        timeout = self.settings.request_timeout_seconds
        handler = self._handlers.get(request.type)
        try:
            if handler is None:
                raise NarrativeEngineError(f"no handler registered for {request.type.value}")
            outcome = await asyncio.wait_for(handler(request), timeout=timeout)
        except asyncio.TimeoutError:
            error = RequestTimeoutError(timeout)
            logger.error("Request %s failed: %s", request.id, error)
            self._set_status(request, RequestStatus.FAILED, error=error.message)
            return
        except Exception as e:
            logger.error("Request %s failed: %s", request.id, e)
            self._set_status(request, RequestStatus.FAILED, error=_error_message(e))
            return

        note = None
        if outcome == HandlerOutcome.NOT_IMPLEMENTED:
            logger.warning(
                "No real handler for %s yet; marking request %s completed",
                request.type.value, request.id,
            )
            note = "not implemented"
        self._set_status(request, RequestStatus.COMPLETED, note=note)
        logger.info("Request %s completed", request.id)

    # ---- Queries ----

    def _find(self, request_id: str) -> Optional[OfflineRequest]:
        for request in self._requests:
            if request.id == request_id:
                return request
        return None

    @property
    def is_processing(self) -> bool:
        return self._is_processing

    @property
    def pending_request_count(self) -> int:
        return sum(1 for r in self._requests if r.status == RequestStatus.PENDING)

    @property
    def request_ids(self) -> list[str]:
        return [r.id for r in self._requests]

    @property
    def requests(self) -> list[OfflineRequest]:
        """Snapshot copies, in queue order."""
        return [r.copy() for r in self._requests]

    def request_status(self, request_id: str) -> Optional[str]:
        request = self._find(request_id)
        return request.status.value if request else None

    def request_creation_date(self, request_id: str) -> Optional[datetime]:
        request = self._find(request_id)
        return request.creation_date if request else None

    def get_request(self, request_id: str) -> Optional[OfflineRequest]:
        request = self._find(request_id)
        return request.copy() if request else None

    def __len__(self) -> int:
        return len(self._requests)
