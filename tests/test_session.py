import logging
import re
import threading

import pytest

from scriptscope.config import ScanConfig
from scriptscope.engine import MatcherFailure, scan
from scriptscope.session import ScanSession
from scriptscope.store import SuppressionKey
from scriptscope.unit import Unit
from scriptscope.worker import ScanComplete, ScanFailed, ScanWorker

TIMEOUT = 5

A_TEXT = "// unit-a\neval(a);"
B_TEXT = "// unit-b\nel.innerHTML = b;"


@pytest.fixture
def units():
    return [Unit.from_text("a.js", A_TEXT), Unit.from_text("b.js", B_TEXT)]


def test_scan_unit_stores_findings(units):
    with ScanSession() as session:
        session.add_units(units)

        assert session.scan_unit("a.js")

        assert [f.pattern_name for f in session.active_findings("a.js")] == ["eval() usage"]
        assert session.failure("a.js") is None
        assert not session.scanning


def test_wait_ready():
    with ScanSession() as session:
        assert session.wait_ready(TIMEOUT)
        assert session.ready


def test_unit_without_text_is_not_submitted(caplog):
    caplog.set_level(logging.WARNING)
    with ScanSession() as session:
        session.add_units([Unit.unavailable("gone.js", "HTTP 404")])

        assert session.select("gone.js") is None
        assert not session.scan_unit("gone.js")

    assert "no source text" in caplog.text
    assert session.failure("gone.js") is None


def test_delayed_response_for_previous_unit_is_discarded(units):
    started_a = threading.Event()
    release_a = threading.Event()

    def slow_scan(text):
        if "unit-a" in text:
            started_a.set()
            release_a.wait(TIMEOUT)
        return scan(text)

    session = ScanSession(worker_factory=lambda: ScanWorker(scan_fn=slow_scan))
    try:
        session.add_units(units)
        session.select("a.js")
        assert started_a.wait(TIMEOUT)
        session.select("b.js")
        release_a.set()

        assert session.pump(TIMEOUT)

        assert "a.js" not in session.store
        assert [f.pattern_name for f in session.active_findings("b.js")] == ["innerHTML Assignment"]
    finally:
        release_a.set()
        session.close()


def test_out_of_order_responses_keep_newest_request(units):
    gate = threading.Event()

    def gated_scan(text):
        gate.wait(TIMEOUT)
        return scan(text)

    session = ScanSession(worker_factory=lambda: ScanWorker(scan_fn=gated_scan))
    try:
        session.add_units(units)
        token_a = session.select("a.js")
        token_b = session.select("b.js")

        assert session.handle(ScanComplete("b.js", tuple(scan(B_TEXT)), token_b))
        assert not session.handle(ScanComplete("a.js", tuple(scan(A_TEXT)), token_a))
        assert not session.handle(ScanFailed("a.js", "late failure", token_a))

        assert "a.js" not in session.store
        assert session.failure("a.js") is None
        assert len(session.active_findings("b.js")) == 1
    finally:
        gate.set()
        session.close()


def test_tokens_increase_per_request(units):
    with ScanSession() as session:
        session.add_units(units)
        first = session.select("a.js")
        session.pump(TIMEOUT)
        second = session.select("a.js")
        session.pump(TIMEOUT)

    assert second.sequence > first.sequence
    assert first.unit_id == second.unit_id == "a.js"


def test_failed_scan_keeps_previous_findings(units):
    fail = []

    def flaky_scan(text):
        if fail:
            raise MatcherFailure("Broken", re.error("bad"))
        return scan(text)

    with ScanSession(worker_factory=lambda: ScanWorker(scan_fn=flaky_scan)) as session:
        session.add_units(units)
        assert session.scan_unit("a.js")
        fail.append(True)

        assert not session.scan_unit("a.js")

        assert "Broken" in session.failure("a.js")
        assert [f.pattern_name for f in session.active_findings("a.js")] == ["eval() usage"]


def test_timeout_marks_failure_and_recreates_worker(units, caplog):
    stuck = threading.Event()

    def stuck_scan(text):
        stuck.wait(TIMEOUT)
        return []

    workers = iter([ScanWorker(scan_fn=stuck_scan), ScanWorker()])
    caplog.set_level(logging.WARNING)
    session = ScanSession(ScanConfig(scan_timeout=0.5), worker_factory=lambda: next(workers))
    try:
        session.add_units(units)

        assert not session.scan_unit("a.js")
        assert "timed out" in session.failure("a.js")
        assert "timed out" in caplog.text

        assert session.scan_unit("b.js")
        assert len(session.active_findings("b.js")) == 1
    finally:
        stuck.set()
        session.close()


def test_configured_ignores_apply_to_scans(units):
    finding = scan(A_TEXT)[0]
    config = ScanConfig(ignore=(SuppressionKey(finding.char_offset, finding.line, "a.js"),))

    with ScanSession(config) as session:
        session.scan_all(units)

        assert session.active_findings("a.js") == []
        assert session.store.findings("a.js") == [finding]
        assert session.aggregate_by_severity().medium == 1


def test_suppress_and_unsuppress_through_session(units):
    with ScanSession() as session:
        session.scan_all(units)
        finding = session.active_findings("b.js")[0]

        session.suppress(finding, "b.js")
        assert session.active_findings("b.js") == []

        session.unsuppress(finding, "b.js")
        assert session.active_findings("b.js") == [finding]


def test_remove_unit(units):
    with ScanSession() as session:
        session.scan_all(units)
        session.remove_unit("a.js")

        assert "a.js" not in session.units
        assert "a.js" not in session.store
        assert session.aggregate_by_severity().total == 1
