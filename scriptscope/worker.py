"""Off-thread scan execution and its message protocol.

A :class:`ScanWorker` owns an inbox of :class:`ScanRequest` messages and an
outbox of responses.  It announces itself with :class:`WorkerReady` once,
then handles one request at a time, answering each with either
:class:`ScanComplete` or :class:`ScanFailed`.  Responses echo the request's
token; matching them to what the caller still cares about is the caller's
job (see :mod:`scriptscope.session`).
"""

from __future__ import annotations

import logging
import queue
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple, Union

from .engine import ScanError, scan
from .result import Finding

_LOG = logging.getLogger(__name__)

SCAN = "SCAN"
SCAN_COMPLETE = "SCAN_COMPLETE"
SCAN_ERROR = "SCAN_ERROR"
WORKER_READY = "WORKER_READY"

ScanFunction = Callable[[str], List[Finding]]


@dataclass(frozen=True)
class ScanToken:
    """Correlates a response with the request that caused it."""

    unit_id: str
    sequence: int

    def to_dict(self) -> Dict[str, object]:
        return {"unit_id": self.unit_id, "sequence": self.sequence}


def _with_token(data: Dict[str, object], token: Optional[ScanToken]) -> Dict[str, object]:
    if token is not None:
        data["token"] = token.to_dict()
    return data


@dataclass(frozen=True)
class ScanRequest:
    unit_id: str
    source_text: str
    token: Optional[ScanToken] = None
    op: str = field(default=SCAN, init=False)

    def to_dict(self) -> Dict[str, object]:
        return _with_token({"op": self.op, "unit_id": self.unit_id, "source_text": self.source_text}, self.token)


@dataclass(frozen=True)
class ScanComplete:
    unit_id: str
    findings: Tuple[Finding, ...]
    token: Optional[ScanToken] = None
    op: str = field(default=SCAN_COMPLETE, init=False)

    def to_dict(self) -> Dict[str, object]:
        data: Dict[str, object] = {
            "op": self.op,
            "unit_id": self.unit_id,
            "findings": [finding.to_dict() for finding in self.findings],
        }
        return _with_token(data, self.token)


@dataclass(frozen=True)
class ScanFailed:
    unit_id: str
    error_message: str
    token: Optional[ScanToken] = None
    op: str = field(default=SCAN_ERROR, init=False)

    def to_dict(self) -> Dict[str, object]:
        return _with_token({"op": self.op, "unit_id": self.unit_id, "error_message": self.error_message}, self.token)


@dataclass(frozen=True)
class WorkerReady:
    op: str = field(default=WORKER_READY, init=False)

    def to_dict(self) -> Dict[str, object]:
        return {"op": self.op}


Response = Union[ScanComplete, ScanFailed]
Message = Union[ScanComplete, ScanFailed, WorkerReady]


class WorkerState(str, Enum):
    IDLE = "IDLE"
    SCANNING = "SCANNING"
    STOPPED = "STOPPED"


_STOP = object()


class ScanWorker(threading.Thread):
    """Run scans on a dedicated daemon thread."""

    def __init__(self, scan_fn: ScanFunction = scan, name: str = "scriptscope-worker") -> None:
        super().__init__(name=name, daemon=True)
        self.inbox: "queue.Queue[object]" = queue.Queue()
        self.outbox: "queue.Queue[Message]" = queue.Queue()
        self._scan_fn = scan_fn
        self._state = WorkerState.IDLE

    @property
    def state(self) -> WorkerState:
        return self._state

    def submit(self, request: ScanRequest) -> None:
        if self._state is WorkerState.STOPPED:
            raise RuntimeError(f"{self.name} is stopped")
        self.inbox.put(request)

    def stop(self) -> None:
        """Ask the worker to exit once its current request is done."""

        self.inbox.put(_STOP)

    def run(self) -> None:
        _LOG.debug("%s ready", self.name)
        self.outbox.put(WorkerReady())
        while True:
            request = self.inbox.get()
            if request is _STOP:
                break
            self.outbox.put(self._handle(request))
        self._state = WorkerState.STOPPED
        _LOG.debug("%s stopped", self.name)

    def _handle(self, request: ScanRequest) -> Response:
        self._state = WorkerState.SCANNING
        try:
            findings = self._scan_fn(request.source_text)
        except ScanError as exc:
            _LOG.warning("Scan of %s failed: %s", request.unit_id, exc)
            return ScanFailed(request.unit_id, str(exc), request.token)
        except Exception as exc:  # noqa: BLE001
            _LOG.exception("Unexpected error scanning %s", request.unit_id)
            return ScanFailed(request.unit_id, f"{type(exc).__name__}: {exc}", request.token)
        finally:
            self._state = WorkerState.IDLE
        return ScanComplete(request.unit_id, tuple(findings), request.token)
