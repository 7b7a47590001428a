from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor

from src.driver_ledger.driver_ledger.ledger.locks import KeyedLocks


def test_same_key_is_mutually_exclusive_and_entries_are_dropped():
    locks = KeyedLocks()
    inside = 0
    peak = 0
    guard = threading.Lock()

    def work(i):
        nonlocal inside, peak
        with locks.hold(("August 2025 Attendance", f"driver-{i % 2}", "5/8/2568")):
            with guard:
                inside += 1
                peak = max(peak, inside)
            with guard:
                inside -= 1

    with ThreadPoolExecutor(max_workers=8) as pool:
        list(pool.map(work, range(64)))

    assert peak <= 2
    assert len(locks) == 0


def test_entry_lives_while_held():
    locks = KeyedLocks()

    with locks.hold("a"):
        with locks.hold("b"):
            assert len(locks) == 2
        assert len(locks) == 1

    assert len(locks) == 0


def test_entry_is_dropped_after_an_exception():
    locks = KeyedLocks()

    try:
        with locks.hold("a"):
            raise RuntimeError("boom")
    except RuntimeError:
        pass

    assert len(locks) == 0
