import threading
import time
import unittest

from melody_echo.core.errors import PitchReadError
from melody_echo.mocks import ManualTicker, ScriptedPitchSampler
from melody_echo.note_types import FeedbackKind, MatchPhase
from melody_echo.polling import POLL_INTERVAL, PitchPoller, ThreadedTicker

SCENARIO = ["C/4", "D/4", "E/4"]


class TestPitchPoller(unittest.TestCase):
    def setUp(self):
        self.sampler = ScriptedPitchSampler()
        self.sampler.open()
        self.ticker = ManualTicker()
        self.poller = PitchPoller(self.sampler, ticker=self.ticker)
        self.events = []
        self.poller.events.on_feedback(self.events.append)

    def test_default_interval(self):
        self.assertEqual(POLL_INTERVAL, 0.2)
        self.poller.start(SCENARIO)
        self.assertEqual(self.ticker.interval, 0.2)

    def test_scenario(self):
        self.sampler.feed(261.6, None, 293.7, 200.0, 329.6)
        self.poller.start(SCENARIO)

        self.ticker.tick(5)

        self.assertEqual(
            [e.kind for e in self.events],
            [
                FeedbackKind.CORRECT,
                FeedbackKind.WAITING,
                FeedbackKind.CORRECT,
                FeedbackKind.INCORRECT,
                FeedbackKind.COMPLETE,
            ],
        )
        self.assertEqual(self.events[3].detected, "G3")
        self.assertIs(self.poller.matcher.phase, MatchPhase.COMPLETED)

    def test_completion_stops_polling(self):
        self.sampler.feed(261.6, 293.7, 329.6)
        self.poller.start(SCENARIO)

        self.ticker.tick(3)
        self.assertFalse(self.poller.is_running())

        self.sampler.feed(261.6)
        self.ticker.tick(3)
        self.assertEqual(self.sampler.read_count, 3)
        self.assertEqual(len(self.events), 3)

    def test_one_event_per_tick(self):
        self.poller.start(SCENARIO)
        self.ticker.tick(4)
        self.assertEqual(len(self.events), 4)
        self.assertTrue(all(e.kind is FeedbackKind.WAITING for e in self.events))

    def test_restart_replaces_previous_loop(self):
        self.sampler.feed(261.6, 293.7)
        self.poller.start(SCENARIO)
        self.ticker.tick(2)
        self.assertEqual(self.poller.matcher.position, 2)

        self.poller.start(SCENARIO)
        self.assertEqual(self.ticker.start_count, 2)
        self.assertEqual(self.poller.matcher.position, 0)

        self.events.clear()
        self.ticker.tick()
        self.assertEqual(len(self.events), 1)
        self.assertEqual(self.sampler.read_count, 3)

    def test_stop_halts_polling(self):
        self.poller.start(SCENARIO)
        self.poller.stop()
        self.ticker.tick(3)
        self.assertEqual(self.sampler.read_count, 0)
        self.assertIs(self.poller.matcher.phase, MatchPhase.IDLE)

    def test_read_error_skips_tick(self):
        errors = []
        self.poller.events.on_read_error(errors.append)
        self.sampler.feed(PitchReadError("device unplugged"), 261.6)
        self.poller.start(SCENARIO)

        self.assertIsNone(self.poller.poll_once())
        self.assertEqual(len(errors), 1)
        self.assertEqual(self.events, [])
        self.assertEqual(self.poller.matcher.position, 0)

        event = self.poller.poll_once()
        self.assertIs(event.kind, FeedbackKind.CORRECT)

    def test_idle_matcher_is_not_polled(self):
        self.assertIsNone(self.poller.poll_once())
        self.assertEqual(self.sampler.read_count, 0)


class StoppingSampler(ScriptedPitchSampler):
    """Stops the poller in the middle of a read, like a stop click racing a poll."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.poller = None
        self.stop_on_read = True

    def read_pitch(self):
        value = super().read_pitch()
        if self.stop_on_read:
            self.poller.stop()
        return value


class ReentrantSampler(ScriptedPitchSampler):
    """Triggers another poll while the first read is outstanding."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.poller = None
        self.nested_results = []

    def read_pitch(self):
        if not self.nested_results:
            self.nested_results.append(self.poller.poll_once())
        return super().read_pitch()


class TestPollerRaces(unittest.TestCase):
    def test_read_finishing_after_stop_is_discarded(self):
        sampler = StoppingSampler([261.6])
        sampler.open()
        poller = PitchPoller(sampler, ticker=ManualTicker())
        sampler.poller = poller
        events = []
        poller.events.on_feedback(events.append)

        poller.start(SCENARIO)
        self.assertIsNone(poller.poll_once())

        self.assertEqual(events, [])
        self.assertEqual(poller.matcher.position, 0)
        self.assertIs(poller.matcher.phase, MatchPhase.IDLE)

    def test_restart_after_discarded_read_polls_again(self):
        sampler = StoppingSampler([261.6])
        sampler.open()
        poller = PitchPoller(sampler, ticker=ManualTicker())
        sampler.poller = poller
        poller.start(SCENARIO)
        poller.poll_once()

        sampler.stop_on_read = False
        sampler.feed(261.6)
        poller.start(SCENARIO)
        self.assertIs(poller.poll_once().kind, FeedbackKind.CORRECT)

    def test_overlapping_poll_is_skipped(self):
        sampler = ReentrantSampler([261.6])
        sampler.open()
        poller = PitchPoller(sampler, ticker=ManualTicker())
        sampler.poller = poller
        poller.start(SCENARIO)

        event = poller.poll_once()

        self.assertEqual(sampler.nested_results, [None])
        self.assertEqual(sampler.read_count, 1)
        self.assertIs(event.kind, FeedbackKind.CORRECT)


class TestThreadedTicker(unittest.TestCase):
    def test_fires_repeatedly_until_stopped(self):
        ticker = ThreadedTicker()
        fired = threading.Event()
        calls = []

        def callback():
            calls.append(1)
            if len(calls) >= 3:
                fired.set()

        ticker.start(callback, 0.01)
        try:
            self.assertTrue(fired.wait(2.0))
        finally:
            ticker.stop()
        self.assertFalse(ticker.is_running())

    def test_callback_can_stop_its_own_ticker(self):
        ticker = ThreadedTicker()
        done = threading.Event()

        def callback():
            ticker.stop()
            done.set()

        ticker.start(callback, 0.01)
        self.assertTrue(done.wait(2.0))
        self.assertFalse(ticker.is_running())

    def test_callback_errors_do_not_kill_the_loop(self):
        ticker = ThreadedTicker()
        done = threading.Event()
        calls = []

        def callback():
            calls.append(1)
            if len(calls) == 1:
                raise RuntimeError("boom")
            done.set()

        ticker.start(callback, 0.01)
        try:
            self.assertTrue(done.wait(2.0))
        finally:
            ticker.stop()

    def test_poller_completes_on_a_real_thread(self):
        sampler = ScriptedPitchSampler([261.6, 293.7, 329.6])
        sampler.open()
        poller = PitchPoller(sampler, ticker=ThreadedTicker(), interval=0.01)
        complete = threading.Event()
        poller.events.on_feedback(
            lambda e: complete.set() if e.kind is FeedbackKind.COMPLETE else None
        )

        poller.start(SCENARIO)
        try:
            self.assertTrue(complete.wait(2.0))
        finally:
            poller.stop()


class BlockingSampler(ScriptedPitchSampler):
    """Holds its first read open until released, like a slow audio device."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.entered = threading.Event()
        self.release = threading.Event()

    def read_pitch(self):
        if not self.entered.is_set():
            self.entered.set()
            self.release.wait(5.0)
        return super().read_pitch()


def wait_for(condition, timeout=2.0):
    deadline = time.monotonic() + timeout
    while not condition():
        if time.monotonic() >= deadline:
            return False
        time.sleep(0.005)
    return True


class TestInFlightReadOnRealThread(unittest.TestCase):
    def setUp(self):
        self.sampler = BlockingSampler([261.6])
        self.sampler.open()
        self.poller = PitchPoller(self.sampler, ticker=ThreadedTicker(), interval=0.01)
        self.events = []
        self.poller.events.on_feedback(self.events.append)

    def tearDown(self):
        self.sampler.release.set()
        self.poller.stop()

    def _run_while_read_blocked(self, action, ready):
        """Run action on another thread while the first read is held open."""
        self.poller.start(SCENARIO)
        self.assertTrue(self.sampler.entered.wait(2.0))
        self.first_session = self.poller.matcher.session

        worker = threading.Thread(target=action)
        worker.start()
        try:
            # The session must change before the blocked read is let go
            self.assertTrue(wait_for(ready))
        finally:
            self.sampler.release.set()
            worker.join(5.0)
        self.assertFalse(worker.is_alive())

    def test_stop_discards_outstanding_read(self):
        self._run_while_read_blocked(
            self.poller.stop,
            lambda: self.poller.matcher.phase is MatchPhase.IDLE,
        )

        self.assertEqual(self.poller.matcher.position, 0)
        self.assertIs(self.poller.matcher.phase, MatchPhase.IDLE)
        self.assertEqual(self.events, [])

    def test_restart_discards_outstanding_read(self):
        self._run_while_read_blocked(
            lambda: self.poller.start(SCENARIO),
            lambda: self.poller.matcher.session is not self.first_session,
        )
        self.poller.stop()

        self.assertEqual(self.poller.matcher.position, 0)
        self.assertFalse(any(e.kind is FeedbackKind.CORRECT for e in self.events))


if __name__ == "__main__":
    unittest.main()
