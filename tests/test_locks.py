"""tests/test_locks.py — per-fingerprint serialization"""
import threading
import time

from codescan_sync.security.utils.alert_parser import build_issue_metadata
from codescan_sync.security.utils.issue_sync import ensure_issue
from codescan_sync.security.utils.locks import KeyedLock


def test_lock_is_released_and_dropped():
    locks = KeyedLock()
    with locks.hold("fp"):
        assert len(locks) == 1
    assert len(locks) == 0


def test_same_key_is_exclusive():
    locks = KeyedLock()
    inside = []
    overlap = []

    def worker():
        with locks.hold("fp"):
            inside.append(1)
            if len(inside) > 1:
                overlap.append(True)
            time.sleep(0.01)
            inside.pop()

    threads = [threading.Thread(target=worker) for _ in range(5)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert overlap == []
    assert len(locks) == 0


def test_concurrent_ensure_issue_creates_once(ledger, make_alert):
    locks = KeyedLock()
    md = build_issue_metadata(make_alert())
    original_find = ledger.find_by_identity

    def slow_find(identity):
        found = original_find(identity)
        time.sleep(0.01)
        return found

    ledger.find_by_identity = slow_find
    results = []

    def worker():
        results.append(ensure_issue(ledger, md, locks=locks))

    threads = [threading.Thread(target=worker) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(ledger.entries) == 1
    assert sorted(created for _, created in results) == [False, False, False, True]
