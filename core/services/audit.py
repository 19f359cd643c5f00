"""
Activity trail recorder.

Every state-mutating operation calls :func:`record`.  The entry is
written to two independent sinks: an append-only text file and the
``AuditEvent`` table.  Writes are submitted to a small thread pool with
a bounded number of entries in flight, so the caller's primary operation
never waits on, or fails because of, the trail.  Each sink is retried and
logged on its own; one sink persisting while the other fails is an
accepted outcome.
"""
from __future__ import annotations

import atexit
import json
import logging
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional, Sequence

from django.conf import settings
from django.core.signals import setting_changed
from django.db import close_old_connections, transaction
from django.dispatch import receiver
from django.utils import timezone

logger = logging.getLogger(__name__)

# Width of AuditEvent.actor / AuditEvent.action
MAX_FIELD_LENGTH = 255


@dataclass(frozen=True)
class AuditEntry:
    actor: str
    action: str
    details: Any = None
    timestamp: datetime = field(default_factory=timezone.now)


def _clip(value: str, name: str) -> str:
    if len(value) <= MAX_FIELD_LENGTH:
        return value
    logger.warning('Audit %s longer than %d characters; truncating: %r...',
                   name, MAX_FIELD_LENGTH, value[:40])
    return value[:MAX_FIELD_LENGTH]


def _one_line(value: str) -> str:
    return value.replace('\r', '\\r').replace('\n', '\\n')


def format_line(entry: AuditEntry) -> str:
    details = entry.details
    if details is None:
        details = ''
    elif not isinstance(details, str):
        details = json.dumps(details, sort_keys=True, default=str)
    return (f"{entry.timestamp.isoformat()} | User: {_one_line(entry.actor)} "
            f"| Action: {_one_line(entry.action)} | Details: {_one_line(details)}\n")


class FileAuditSink:
    """Sequential sink: one line per entry appended to a text file."""
    name = 'file'

    def __init__(self, path: str) -> None:
        self.path = path
        self._lock = threading.Lock()

    def write(self, entry: AuditEntry) -> None:
        line = format_line(entry)
        with self._lock:
            with open(self.path, 'a', encoding='utf-8') as fh:
                fh.write(line)


class DatabaseAuditSink:
    """Structured sink: one ``AuditEvent`` row per entry."""
    name = 'database'

    def write(self, entry: AuditEntry) -> None:
        from core.models import AuditEvent

        # Savepoint so a failed insert cannot poison an enclosing transaction
        with transaction.atomic():
            AuditEvent.objects.create(
                actor=entry.actor,
                action=entry.action,
                details=entry.details,
                timestamp=entry.timestamp,
            )


class AuditRecorder:
    """Fans entries out to sinks, inline or on a bounded worker pool.

    ``queue_size`` caps the entries waiting or being written; past that
    cap new entries are dropped with a warning.  With one worker, entries
    reach the sinks in the order they were recorded.
    """

    def __init__(
        self,
        sinks: Sequence[Any],
        *,
        async_mode: bool = True,
        queue_size: int = 1000,
        workers: int = 1,
        retries: int = 2,
        retry_delay: float = 0.2,
    ) -> None:
        self.sinks = list(sinks)
        self.async_mode = async_mode
        self.retries = max(0, retries)
        self.retry_delay = retry_delay
        self._slots = threading.BoundedSemaphore(max(1, queue_size))
        self._worker_count = max(1, workers)
        self._executor: Optional[ThreadPoolExecutor] = None
        self._pending: set[Future] = set()
        self._lock = threading.Lock()
        self._stopped = False

    def record(self, actor: str, action: str, details: Any = None) -> None:
        """Emit one entry.  Never raises and never blocks on the sinks."""
        try:
            entry = AuditEntry(
                actor=_clip(str(actor or 'System'), 'actor'),
                action=_clip(str(action), 'action'),
                details=details,
            )
            if not self.async_mode or self._stopped:
                self._dispatch(entry)
                return
            if not self._slots.acquire(blocking=False):
                logger.warning('Audit queue full; dropping entry %r by %r', action, actor)
                return
            self._submit(entry)
        except Exception:
            logger.exception('Could not emit audit entry %r by %r', action, actor)

    def flush(self, timeout: Optional[float] = None) -> bool:
        """Wait until submitted entries are written.  Returns False on timeout."""
        with self._lock:
            pending = list(self._pending)
        _, not_done = wait(pending, timeout=timeout)
        return not not_done

    def shutdown(self, timeout: float = 5.0) -> None:
        self.flush(timeout)
        with self._lock:
            self._stopped = True
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=True)

    def _submit(self, entry: AuditEntry) -> None:
        with self._lock:
            if self._stopped:
                executor = None
            else:
                if self._executor is None:
                    self._executor = ThreadPoolExecutor(
                        max_workers=self._worker_count, thread_name_prefix='audit-worker')
                executor = self._executor
        if executor is None:
            self._slots.release()
            self._dispatch(entry)
            return
        try:
            future = executor.submit(self._run, entry)
        except RuntimeError:
            # executor shut down after we picked it up
            self._slots.release()
            self._dispatch(entry)
            return
        with self._lock:
            if not future.done():
                self._pending.add(future)
        future.add_done_callback(self._forget)

    def _forget(self, future: Future) -> None:
        with self._lock:
            self._pending.discard(future)

    def _run(self, entry: AuditEntry) -> None:
        try:
            self._dispatch(entry)
        finally:
            self._slots.release()
            close_old_connections()

    def _dispatch(self, entry: AuditEntry) -> None:
        for sink in self.sinks:
            self._write(sink, entry)

    def _write(self, sink: Any, entry: AuditEntry) -> bool:
        name = getattr(sink, 'name', sink.__class__.__name__)
        for attempt in range(self.retries + 1):
            try:
                sink.write(entry)
                return True
            except Exception as exc:
                if attempt < self.retries:
                    logger.warning('Audit sink %s failed (attempt %d): %s', name, attempt + 1, exc)
                    if self.retry_delay:
                        time.sleep(self.retry_delay)
                else:
                    logger.error('Audit sink %s gave up on %r: %s', name, entry.action, exc, exc_info=True)
        return False


_recorder: Optional[AuditRecorder] = None
_recorder_lock = threading.Lock()


def build_recorder() -> AuditRecorder:
    return AuditRecorder(
        [FileAuditSink(settings.AUDIT_LOG_FILE), DatabaseAuditSink()],
        async_mode=settings.AUDIT_ASYNC,
        queue_size=settings.AUDIT_QUEUE_SIZE,
        workers=settings.AUDIT_WORKERS,
        retries=settings.AUDIT_SINK_RETRIES,
        retry_delay=settings.AUDIT_RETRY_DELAY,
    )


def get_recorder() -> AuditRecorder:
    global _recorder
    if _recorder is None:
        with _recorder_lock:
            if _recorder is None:
                _recorder = build_recorder()
    return _recorder


def reset_recorder() -> None:
    global _recorder
    with _recorder_lock:
        old, _recorder = _recorder, None
    if old is not None:
        old.shutdown()


@receiver(setting_changed)
def _audit_settings_changed(sender, setting, **kwargs):
    if setting.startswith('AUDIT_'):
        reset_recorder()


@atexit.register
def _shutdown_recorder() -> None:
    if _recorder is not None:
        _recorder.shutdown()


def record(actor: str, action: str, details: Any = None) -> None:
    get_recorder().record(actor, action, details)
