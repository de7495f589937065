"""Tests for ScopedTimer."""

import unittest
from unittest.mock import patch

from pagewatch.timer import ScopedTimer, timed


class TestScopedTimer(unittest.TestCase):
    """Verify the timer logs exactly once on every exit path."""

    def test_logs_once_on_normal_exit(self):
        with patch("pagewatch.timer.logger") as logger:
            with ScopedTimer("block") as timer:
                pass
        logger.info.assert_called_once()
        _, kwargs = logger.info.call_args
        self.assertEqual(kwargs["label"], "block")
        self.assertGreaterEqual(kwargs["elapsed_ms"], 0)
        self.assertIsNotNone(timer.elapsed)

    def test_logs_once_when_block_raises(self):
        """The exception propagates and the record is still emitted."""
        with patch("pagewatch.timer.logger") as logger:
            with self.assertRaises(RuntimeError):
                with ScopedTimer("failing"):
                    raise RuntimeError("boom")
        logger.info.assert_called_once()

    def test_logs_once_on_early_return(self):
        def work():
            with ScopedTimer("early"):
                return 42

        with patch("pagewatch.timer.logger") as logger:
            self.assertEqual(work(), 42)
        logger.info.assert_called_once()

    def test_stop_is_idempotent(self):
        with patch("pagewatch.timer.logger") as logger:
            with ScopedTimer("twice") as timer:
                first = timer.stop()
            self.assertEqual(timer.stop(), first)
        logger.info.assert_called_once()

    def test_stop_before_start_does_nothing(self):
        with patch("pagewatch.timer.logger") as logger:
            self.assertIsNone(ScopedTimer("never").stop())
        logger.info.assert_not_called()


class TestTimedDecorator(unittest.TestCase):
    def test_wraps_function(self):
        @timed("decorated")
        def add(a, b):
            return a + b

        with patch("pagewatch.timer.logger") as logger:
            self.assertEqual(add(1, 2), 3)
        logger.info.assert_called_once()
        self.assertEqual(add.__name__, "add")


if __name__ == "__main__":
    unittest.main()
