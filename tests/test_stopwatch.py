"""Tests for tt.core.stopwatch. Wall-clock time is injected, ticks are driven by hand."""

import unittest
from datetime import datetime, timedelta, timezone


class FakeClock:

    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += timedelta(seconds=seconds)


T0 = datetime(2025, 3, 5, 9, 0, 0, tzinfo=timezone.utc)


class TestStopwatch(unittest.TestCase):

    def setUp(self):
        from tt.core.stopwatch import Stopwatch
        self.clock = FakeClock(T0)
        self.sw = Stopwatch(clock=self.clock)

    def test_fresh_stopwatch_is_idle(self):
        self.assertTrue(self.sw.is_idle)
        self.assertEqual(self.sw.display, "00:00:00")
        self.assertIsNone(self.sw.anchor)

    def test_start_anchors_at_now(self):
        self.sw.start()
        self.assertTrue(self.sw.running)
        self.assertEqual(self.sw.anchor, T0)

    def test_tick_only_counts_while_running(self):
        self.sw.tick()
        self.assertEqual(self.sw.elapsed, 0)
        self.sw.start()
        for _ in range(65):
            self.sw.tick()
        self.assertEqual(self.sw.elapsed, 65)
        self.assertEqual(self.sw.display, "00:01:05")
        self.sw.pause()
        self.sw.tick()
        self.assertEqual(self.sw.elapsed, 65)

    def test_resume_keeps_original_anchor(self):
        self.sw.start()
        self.sw.tick()
        self.sw.pause()
        self.clock.advance(600)
        self.sw.start()
        self.assertEqual(self.sw.anchor, T0)
        self.assertFalse(self.sw.is_idle)

    def test_start_twice_is_a_no_op(self):
        self.sw.start()
        self.clock.advance(30)
        self.sw.start()
        self.assertEqual(self.sw.anchor, T0)

    def test_start_with_existing_elapsed_backdates_anchor(self):
        from tt.core.stopwatch import Stopwatch
        sw = Stopwatch(elapsed=120, clock=self.clock)
        sw.start()
        self.assertEqual(sw.anchor, T0 - timedelta(seconds=120))

    def test_finalize_returns_elapsed_without_resetting(self):
        self.sw.start()
        for _ in range(10):
            self.sw.tick()
        self.assertEqual(self.sw.finalize(), 10)
        self.assertFalse(self.sw.running)
        self.assertEqual(self.sw.elapsed, 10)

    def test_reset(self):
        self.sw.start()
        self.sw.tick()
        self.sw.reset()
        self.assertTrue(self.sw.is_idle)

    def test_add_manual_sums_parts(self):
        self.assertTrue(self.sw.add_manual(1, 2, 3))
        self.assertEqual(self.sw.elapsed, 3723)

    def test_add_manual_ignores_zero_and_clamps_negatives(self):
        self.assertFalse(self.sw.add_manual(0, 0, 0))
        self.assertFalse(self.sw.add_manual(-1, 0, 0))
        self.assertTrue(self.sw.add_manual(-1, 5, 0))
        self.assertEqual(self.sw.elapsed, 300)

    def test_add_manual_while_running_reanchors(self):
        self.sw.start()
        self.clock.advance(60)
        self.sw.add_manual(0, 30, 0)
        self.assertEqual(self.sw.elapsed, 1800)
        self.assertEqual(self.sw.anchor, self.clock.now - timedelta(seconds=1800))

    def test_add_hour_while_running_then_tick_adds_one(self):
        self.sw.start()
        for _ in range(3):
            self.sw.tick()
        self.assertTrue(self.sw.add_manual(1, 0, 0))
        self.assertEqual(self.sw.elapsed, 3 + 3600)
        self.sw.tick()
        self.assertEqual(self.sw.elapsed, 3 + 3600 + 1)
        self.assertTrue(self.sw.running)

    def test_add_manual_while_paused_keeps_anchor(self):
        self.sw.add_manual(0, 10, 0)
        self.assertIsNone(self.sw.anchor)
        self.sw.start()
        self.assertEqual(self.sw.anchor, T0 - timedelta(seconds=600))


class TestStopAndAutosave(unittest.TestCase):

    def setUp(self):
        from tt.core.stopwatch import Stopwatch
        self.clock = FakeClock(T0)
        self.sw = Stopwatch(clock=self.clock)

    def test_reports_elapsed_and_anchor_then_resets(self):
        calls = []
        self.sw.start()
        for _ in range(42):
            self.sw.tick()
        result = self.sw.stop_and_autosave(lambda elapsed, anchor: calls.append((elapsed, anchor)))
        self.assertEqual(result, 42)
        self.assertEqual(calls, [(42, T0)])
        self.assertTrue(self.sw.is_idle)

    def test_nothing_to_report_skips_callback(self):
        calls = []
        self.sw.stop_and_autosave(lambda *a: calls.append(a))
        self.assertEqual(calls, [])
        self.assertTrue(self.sw.is_idle)

    def test_resets_even_when_callback_raises(self):
        def boom(elapsed, anchor):
            raise RuntimeError("save failed")

        self.sw.start()
        self.sw.tick()
        with self.assertRaises(RuntimeError):
            self.sw.stop_and_autosave(boom)
        self.assertTrue(self.sw.is_idle)


class TestSnapshot(unittest.TestCase):

    def test_snapshot_round_trip(self):
        from tt.core.stopwatch import Stopwatch
        clock = FakeClock(T0)
        sw = Stopwatch(clock=clock)
        sw.start()
        for _ in range(5):
            sw.tick()
        restored = Stopwatch.from_snapshot(sw.snapshot(), clock=clock)
        self.assertEqual(restored.elapsed, 5)
        self.assertTrue(restored.running)
        self.assertEqual(restored.anchor, T0)

    def test_from_empty_snapshot_is_idle(self):
        from tt.core.stopwatch import Stopwatch
        self.assertTrue(Stopwatch.from_snapshot(None).is_idle)
        self.assertTrue(Stopwatch.from_snapshot({}).is_idle)

    def test_anchor_from(self):
        from tt.core.stopwatch import anchor_from
        self.assertEqual(anchor_from(90, T0), T0 - timedelta(seconds=90))
        self.assertEqual(anchor_from(-5, T0), T0)


if __name__ == "__main__":
    unittest.main()
