import re

import pytest

from scriptscope.engine import MatcherFailure
from scriptscope.worker import (
    SCAN_COMPLETE,
    SCAN_ERROR,
    ScanComplete,
    ScanFailed,
    ScanRequest,
    ScanToken,
    ScanWorker,
    WorkerReady,
    WorkerState,
)

TIMEOUT = 5


@pytest.fixture
def make_worker():
    workers = []

    def factory(**kwargs):
        worker = ScanWorker(**kwargs)
        worker.start()
        workers.append(worker)
        return worker

    yield factory
    for worker in workers:
        worker.stop()
        worker.join(TIMEOUT)


def test_worker_announces_ready_before_results(make_worker):
    worker = make_worker()
    worker.submit(ScanRequest("a.js", "eval(x);"))

    assert isinstance(worker.outbox.get(timeout=TIMEOUT), WorkerReady)
    assert isinstance(worker.outbox.get(timeout=TIMEOUT), ScanComplete)


def test_scan_complete_echoes_token(make_worker):
    worker = make_worker()
    token = ScanToken("a.js", 7)
    worker.outbox.get(timeout=TIMEOUT)

    worker.submit(ScanRequest("a.js", "el.innerHTML = x;", token))
    response = worker.outbox.get(timeout=TIMEOUT)

    assert response.op == SCAN_COMPLETE
    assert response.unit_id == "a.js"
    assert response.token == token
    assert [f.pattern_name for f in response.findings] == ["innerHTML Assignment"]
    assert worker.state is WorkerState.IDLE


def test_scan_error_is_reported(make_worker):
    def failing_scan(text):
        raise MatcherFailure("Broken", re.error("bad pattern"))

    worker = make_worker(scan_fn=failing_scan)
    worker.outbox.get(timeout=TIMEOUT)

    worker.submit(ScanRequest("a.js", "anything", ScanToken("a.js", 1)))
    response = worker.outbox.get(timeout=TIMEOUT)

    assert isinstance(response, ScanFailed)
    assert response.op == SCAN_ERROR
    assert "Broken" in response.error_message
    assert response.token == ScanToken("a.js", 1)


def test_unexpected_error_still_answers(make_worker):
    def broken_scan(text):
        raise ValueError("boom")

    worker = make_worker(scan_fn=broken_scan)
    worker.outbox.get(timeout=TIMEOUT)

    worker.submit(ScanRequest("a.js", "x"))
    response = worker.outbox.get(timeout=TIMEOUT)

    assert isinstance(response, ScanFailed)
    assert response.error_message == "ValueError: boom"


def test_worker_keeps_serving_after_error(make_worker):
    calls = []

    def flaky_scan(text):
        calls.append(text)
        if len(calls) == 1:
            raise MatcherFailure("Broken", re.error("bad"))
        return []

    worker = make_worker(scan_fn=flaky_scan)
    worker.outbox.get(timeout=TIMEOUT)
    worker.submit(ScanRequest("a.js", "1"))
    worker.submit(ScanRequest("b.js", "2"))

    assert isinstance(worker.outbox.get(timeout=TIMEOUT), ScanFailed)
    assert isinstance(worker.outbox.get(timeout=TIMEOUT), ScanComplete)


def test_stopped_worker_rejects_requests():
    worker = ScanWorker()
    worker.start()
    worker.stop()
    worker.join(TIMEOUT)

    assert worker.state is WorkerState.STOPPED
    with pytest.raises(RuntimeError):
        worker.submit(ScanRequest("a.js", "x"))


def test_messages_serialize():
    assert ScanRequest("a.js", "x").to_dict() == {"op": "SCAN", "unit_id": "a.js", "source_text": "x"}
    assert ScanFailed("a.js", "bad").to_dict() == {"op": "SCAN_ERROR", "unit_id": "a.js", "error_message": "bad"}
    assert WorkerReady().to_dict() == {"op": "WORKER_READY"}
    assert ScanComplete("a.js", ()).to_dict() == {"op": "SCAN_COMPLETE", "unit_id": "a.js", "findings": []}


def test_messages_serialize_their_token():
    token = ScanToken("a.js", 3)
    expected = {"unit_id": "a.js", "sequence": 3}

    assert ScanRequest("a.js", "x", token).to_dict()["token"] == expected
    assert ScanComplete("a.js", (), token).to_dict()["token"] == expected
    assert ScanFailed("a.js", "bad", token).to_dict() == {
        "op": "SCAN_ERROR",
        "unit_id": "a.js",
        "error_message": "bad",
        "token": expected,
    }
