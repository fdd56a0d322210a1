"""Caller side of the scan protocol.

:class:`ScanSession` owns the unit table, the :class:`FindingStore` and one
:class:`ScanWorker`.  Every request is tagged with a :class:`ScanToken`
carrying a monotonically increasing sequence number, and only the response
to the most recent request is applied.  Anything else is a stale response
from a unit the caller has since moved away from and is dropped.
"""

from __future__ import annotations

import itertools
import logging
import queue
import time
from typing import Callable, Dict, Iterable, List, Optional

from .config import ScanConfig
from .result import Finding, Summary
from .store import FindingStore
from .unit import Unit
from .worker import Message, ScanComplete, ScanFailed, ScanRequest, ScanToken, ScanWorker, WorkerReady

_LOG = logging.getLogger(__name__)

WorkerFactory = Callable[[], ScanWorker]


class ScanSession:
    """Drive scans of many units through a background worker."""

    def __init__(self, config: Optional[ScanConfig] = None, worker_factory: WorkerFactory = ScanWorker) -> None:
        self.config = config or ScanConfig()
        self.store = FindingStore()
        self.units: Dict[str, Unit] = {}
        self._failures: Dict[str, str] = {}
        self._sequence = itertools.count(1)
        self._current: Optional[ScanToken] = None
        self._ready = False
        self._worker_factory = worker_factory
        self._worker = self._spawn_worker()
        for key in self.config.ignore:
            self.store.suppress_key(key)

    def __enter__(self) -> "ScanSession":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Worker lifecycle
    # ------------------------------------------------------------------
    def _spawn_worker(self) -> ScanWorker:
        worker = self._worker_factory()
        worker.start()
        self._ready = False
        return worker

    def restart_worker(self) -> None:
        """Abandon the current worker and start a fresh one.

        A scan still running on the old thread is not interrupted; its
        outbox is simply never read again.
        """

        self._worker.stop()
        self._current = None
        self._worker = self._spawn_worker()

    def close(self, timeout: float = 1.0) -> None:
        self._worker.stop()
        self._worker.join(timeout)

    @property
    def ready(self) -> bool:
        return self._ready

    @property
    def scanning(self) -> bool:
        return self._current is not None

    def wait_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the worker has announced itself."""

        deadline = None if timeout is None else time.monotonic() + timeout
        while not self._ready:
            message = self._next_message(deadline)
            if message is None:
                return False
            self.handle(message)
        return True

    # ------------------------------------------------------------------
    # Units
    # ------------------------------------------------------------------
    def add_units(self, units: Iterable[Unit]) -> None:
        for unit in units:
            self.units[unit.unit_id] = unit

    def remove_unit(self, unit_id: str) -> None:
        self.units.pop(unit_id, None)
        self.store.remove(unit_id)
        self._failures.pop(unit_id, None)
        if self._current is not None and self._current.unit_id == unit_id:
            self._current = None

    def failure(self, unit_id: str) -> Optional[str]:
        """Return the last scan error of the unit, if its last scan failed."""

        return self._failures.get(unit_id)

    # ------------------------------------------------------------------
    # Requests and responses
    # ------------------------------------------------------------------
    def select(self, unit_id: str) -> Optional[ScanToken]:
        """Make ``unit_id`` the relevant unit and request a scan of it.

        Returns ``None`` without scanning when the unit has no text.
        """

        unit = self.units[unit_id]
        if not unit.scannable:
            _LOG.warning("Not scanning %s: no source text", unit_id)
            self._current = None
            return None
        token = ScanToken(unit_id, next(self._sequence))
        self._current = token
        self._worker.submit(ScanRequest(unit_id, unit.source_text, token))
        return token

    def handle(self, message: Message) -> bool:
        """Apply one worker message; return True if it resolved the current request."""

        if isinstance(message, WorkerReady):
            self._ready = True
            return False
        if message.token is None or message.token != self._current:
            _LOG.debug("Discarding stale %s for %s", message.op, message.unit_id)
            return False
        self._current = None
        if isinstance(message, ScanComplete):
            self.store.replace(message.unit_id, message.findings)
            self._failures.pop(message.unit_id, None)
        elif isinstance(message, ScanFailed):
            self._failures[message.unit_id] = message.error_message
        return True

    def pump(self, timeout: Optional[float] = None) -> bool:
        """Process worker messages until the current request resolves.

        Returns False if ``timeout`` elapses first.
        """

        deadline = None if timeout is None else time.monotonic() + timeout
        while self._current is not None:
            message = self._next_message(deadline)
            if message is None:
                return False
            self.handle(message)
        return True

    def _next_message(self, deadline: Optional[float]) -> Optional[Message]:
        try:
            if deadline is None:
                return self._worker.outbox.get()
            return self._worker.outbox.get(timeout=max(deadline - time.monotonic(), 0))
        except queue.Empty:
            return None

    def scan_unit(self, unit_id: str) -> bool:
        """Scan one unit and wait for it, honoring ``scan_timeout``."""

        if self.select(unit_id) is None:
            return False
        if not self.pump(self.config.scan_timeout):
            message = f"Scan timed out after {self.config.scan_timeout}s"
            _LOG.warning("%s: %s", unit_id, message)
            self._failures[unit_id] = message
            self.restart_worker()
            return False
        return unit_id not in self._failures

    def scan_all(self, units: Iterable[Unit] = ()) -> None:
        """Scan every scannable unit in turn."""

        self.add_units(units)
        for unit_id, unit in list(self.units.items()):
            if unit.scannable:
                self.scan_unit(unit_id)

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------
    def active_findings(self, unit_id: str) -> List[Finding]:
        return self.store.active_findings(unit_id)

    def aggregate_by_severity(self, unit_id: Optional[str] = None) -> Summary:
        return self.store.aggregate_by_severity(unit_id)

    def suppress(self, finding: Finding, unit_id: str) -> None:
        self.store.suppress(finding, unit_id)

    def unsuppress(self, finding: Finding, unit_id: str) -> None:
        self.store.unsuppress(finding, unit_id)
