"""Unit tests for the engine dispatcher lock."""

import threading
import time

import pytest

from sttgate.dispatcher import InferenceDispatcher


class TestInferenceDispatcher:
    def test_acquire_release(self):
        dispatcher = InferenceDispatcher()
        assert not dispatcher.busy

        dispatcher.acquire()
        assert dispatcher.busy

        dispatcher.release()
        assert not dispatcher.busy

    def test_release_unheld_raises(self):
        with pytest.raises(RuntimeError):
            InferenceDispatcher().release()

    def test_exclusive_releases_on_error(self):
        """The lock is released when the protected block raises."""
        dispatcher = InferenceDispatcher()

        with pytest.raises(ValueError):
            with dispatcher.exclusive():
                assert dispatcher.busy
                raise ValueError("engine blew up")

        assert not dispatcher.busy
        # A following caller is not deadlocked
        with dispatcher.exclusive():
            pass

    def test_exclusive_releases_on_early_return(self):
        dispatcher = InferenceDispatcher()

        def op():
            with dispatcher.exclusive():
                return "early"

        assert op() == "early"
        assert not dispatcher.busy

    def test_serializes_threads(self):
        """Never more than one thread inside the protected block."""
        dispatcher = InferenceDispatcher()
        counter_lock = threading.Lock()
        active = 0
        max_active = 0

        def work():
            nonlocal active, max_active
            with dispatcher.exclusive():
                with counter_lock:
                    active += 1
                    max_active = max(max_active, active)
                time.sleep(0.005)
                with counter_lock:
                    active -= 1

        threads = [threading.Thread(target=work) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert max_active == 1
        assert not dispatcher.busy

    def test_acquire_blocks_until_released(self):
        dispatcher = InferenceDispatcher()
        dispatcher.acquire()
        acquired = threading.Event()

        def waiter():
            with dispatcher.exclusive():
                acquired.set()

        t = threading.Thread(target=waiter)
        t.start()
        assert not acquired.wait(0.05)

        dispatcher.release()
        assert acquired.wait(1.0)
        t.join()
