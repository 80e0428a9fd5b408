import threading
import time

from app.core.locks import KeyedLock


def test_same_key_is_serialized():
    locks = KeyedLock()
    active = []
    overlaps = []

    def worker():
        with locks.hold("T1"):
            active.append(1)
            if len(active) > 1:
                overlaps.append(True)
            time.sleep(0.01)
            active.pop()

    threads = [threading.Thread(target=worker) for _ in range(5)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert overlaps == []
    assert len(locks) == 0


def test_different_keys_do_not_block():
    locks = KeyedLock()

    with locks.hold("T1"):
        acquired = threading.Event()

        def other():
            with locks.hold("T2"):
                acquired.set()

        t = threading.Thread(target=other)
        t.start()
        assert acquired.wait(timeout=1)
        t.join()

    assert len(locks) == 0
