from __future__ import annotations

import threading

from hr_records.client.debounce import Debouncer


def test_only_last_call_of_a_burst_runs():
    seen = []
    debounced = Debouncer(seen.append, wait=60)
    for q in ("d", "do", "doe"):
        debounced(q)

    assert seen == []
    assert debounced.pending
    debounced.flush()
    assert seen == ["doe"]
    assert not debounced.pending


def test_cancel_drops_pending_call():
    seen = []
    debounced = Debouncer(seen.append, wait=60)
    debounced("x")
    debounced.cancel()
    debounced.flush()
    assert seen == []


def test_fires_after_wait():
    done = threading.Event()
    seen = []

    def record(value):
        seen.append(value)
        done.set()

    debounced = Debouncer(record, wait=0.01)
    debounced("doe")
    assert done.wait(2)
    assert seen == ["doe"]
