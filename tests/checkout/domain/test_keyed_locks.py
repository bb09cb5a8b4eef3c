"""Tests for the per-key lock registry."""

import threading

from checkout.ledger.locks import KeyedLocks


class TestKeyedLocks:
    def test_lock_is_dropped_after_release(self):
        locks = KeyedLocks()
        with locks.hold("order_1"):
            assert len(locks) == 1
        assert len(locks) == 0

    def test_many_keys_do_not_accumulate(self):
        locks = KeyedLocks()
        for n in range(100):
            with locks.hold(f"order_{n}"):
                pass
        assert len(locks) == 0

    def test_lock_survives_while_another_caller_waits(self):
        locks = KeyedLocks()
        entered = threading.Event()
        release = threading.Event()
        order = []

        def second():
            entered.wait(timeout=5)
            with locks.hold("order_1"):
                order.append("second")

        waiter = threading.Thread(target=second)
        waiter.start()
        with locks.hold("order_1"):
            entered.set()
            # Give the waiter time to queue on the held lock
            release.wait(timeout=0.2)
            order.append("first")
        waiter.join(timeout=5)

        assert order == ["first", "second"]
        assert len(locks) == 0

    def test_different_keys_do_not_block(self):
        locks = KeyedLocks()
        with locks.hold("order_1"):
            acquired = threading.Event()

            def other():
                with locks.hold("order_2"):
                    acquired.set()

            thread = threading.Thread(target=other)
            thread.start()
            thread.join(timeout=5)
            assert acquired.is_set()
