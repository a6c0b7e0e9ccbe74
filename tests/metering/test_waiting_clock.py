import pytest

from metering.waiting_clock import WaitingClock


class FakeTime:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def fake_time():
    return FakeTime()


@pytest.fixture
def clock(fake_time):
    return WaitingClock(now=fake_time)


@pytest.mark.unit
class TestWaitingClock:
    def test_idle_clock_reads_zero(self, clock):
        assert clock.elapsed_seconds == 0
        assert not clock.running

    def test_elapsed_counts_whole_seconds(self, clock, fake_time):
        clock.start()
        fake_time.now = 61.9
        assert clock.elapsed_seconds == 61

    def test_reading_does_not_fold(self, clock, fake_time):
        clock.start()
        fake_time.now = 10
        assert clock.elapsed_seconds == 10
        assert clock.prior_total == 0

    def test_stop_folds_interval(self, clock, fake_time):
        clock.start()
        fake_time.now = 30
        clock.stop()

        fake_time.now = 100
        assert clock.prior_total == 30
        assert clock.elapsed_seconds == 30
        assert not clock.running

    def test_stop_when_not_started_is_noop(self, clock):
        clock.stop()
        clock.stop()
        assert clock.prior_total == 0

    def test_second_start_does_not_restart_interval(self, clock, fake_time):
        clock.start()
        fake_time.now = 20
        clock.start()
        fake_time.now = 50
        assert clock.elapsed_seconds == 50

    def test_accumulates_across_intervals(self, clock, fake_time):
        clock.start()
        fake_time.now = 40
        clock.stop()
        fake_time.now = 100
        clock.start()
        fake_time.now = 125
        assert clock.elapsed_seconds == 65
        clock.stop()
        assert clock.prior_total == 65

    def test_reset_total_restarts_running_interval(self, clock, fake_time):
        clock.start()
        fake_time.now = 90
        clock.reset_total()
        fake_time.now = 95
        assert clock.elapsed_seconds == 5

    def test_reset_total_when_stopped(self, clock, fake_time):
        clock.start()
        fake_time.now = 90
        clock.stop()
        clock.reset_total()
        assert clock.elapsed_seconds == 0

    @pytest.mark.parametrize("warmup_steps", [0, 1001, 20011, 36017])
    def test_whole_minute_survives_float_step_drift(self, clock, fake_time, warmup_steps):
        for _ in range(warmup_steps):
            fake_time.now += 0.1
        clock.start()
        for _ in range(600):
            fake_time.now += 0.1
        clock.stop()

        assert clock.prior_total == 60

    def test_partial_second_still_floors(self, clock, fake_time):
        fake_time.now = 1000.3
        clock.start()
        fake_time.now = 1059.95
        assert clock.elapsed_seconds == 59
