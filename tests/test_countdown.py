import threading

import pytest

from quizboard.services import Countdown


def test_remaining_rounds_up_and_never_goes_negative(clock):
    countdown = Countdown(90, clock=clock)
    assert countdown.remaining_seconds() == 90
    countdown.start()
    clock.advance(0.4)
    assert countdown.remaining_seconds() == 90
    clock.advance(1.0)
    assert countdown.remaining_seconds() == 89
    clock.advance(500)
    assert countdown.remaining_seconds() == 0
    assert countdown.is_expired()


def test_poll_emits_tick_only_when_second_changes(clock):
    countdown = Countdown(5, clock=clock)
    ticks = []
    countdown.add_tick_listener(ticks.append)
    countdown.start()

    countdown.poll()
    countdown.poll()
    clock.advance(1)
    countdown.poll()
    clock.advance(0.5)
    countdown.poll()

    assert ticks == [5, 4]


def test_expiry_fires_exactly_once(clock):
    countdown = Countdown(3, clock=clock)
    expired = []
    countdown.add_expiry_listener(lambda: expired.append(True))
    countdown.start()

    clock.advance(3)
    countdown.poll()
    countdown.poll()
    clock.advance(10)
    countdown.poll()

    assert expired == [True]


def test_run_loop_ticks_until_expiry(clock):
    countdown = Countdown(3, clock=clock)
    ticks = []
    expired = []
    countdown.add_tick_listener(ticks.append)
    countdown.add_expiry_listener(lambda: expired.append(True))
    countdown.start()

    countdown.run(sleep=clock.advance, interval=1.0)

    assert ticks == [3, 2, 1, 0]
    assert expired == [True]


def test_stopped_countdown_stays_silent(clock):
    countdown = Countdown(2, clock=clock)
    expired = []
    countdown.add_expiry_listener(lambda: expired.append(True))
    countdown.start()
    countdown.stop()

    clock.advance(5)
    countdown.poll()
    countdown.run(sleep=clock.advance)

    assert expired == []
    assert not countdown.is_running()


def test_duration_must_be_positive():
    with pytest.raises(ValueError):
        Countdown(0)


def test_ticks_only_count_down_across_polling_threads(clock):
    countdown = Countdown(20, clock=clock)
    ticks = []
    countdown.add_tick_listener(ticks.append)
    countdown.start()
    stop = threading.Event()

    def request_poller():
        while not stop.is_set():
            countdown.poll()

    pollers = [threading.Thread(target=request_poller) for _ in range(4)]
    for poller in pollers:
        poller.start()
    for _ in range(40):
        clock.advance(0.5)
        countdown.poll()
    stop.set()
    for poller in pollers:
        poller.join(timeout=5)

    assert ticks == sorted(set(ticks), reverse=True)
    assert ticks[-1] == 0


def test_poll_never_repeats_an_earlier_second(clock):
    countdown = Countdown(5, clock=clock)
    ticks = []
    countdown.add_tick_listener(ticks.append)
    countdown.start()

    clock.advance(2)
    countdown.poll()
    clock.advance(-1.5)
    countdown.poll()

    assert ticks == [3]
