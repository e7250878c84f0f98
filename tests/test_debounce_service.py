import threading

from jsonlens.services.debounce_service import Debouncer, TkScheduler


def test_rapid_calls_collapse_to_last(scheduler):
    seen = []
    debouncer = Debouncer(seen.append, 500, scheduler=scheduler)
    debouncer.call("a")
    debouncer.call("ab")
    debouncer.call("abc")
    assert len(scheduler.tasks) == 1
    assert len(scheduler.cancelled) == 2
    assert debouncer.pending
    scheduler.run_all()
    assert seen == ["abc"]
    assert not debouncer.pending


def test_delay_is_passed_to_scheduler(scheduler):
    debouncer = Debouncer(lambda: None, 250, scheduler=scheduler)
    debouncer.call()
    assert [delay for delay, _fn in scheduler.tasks.values()] == [250]


def test_flush_runs_immediately(scheduler):
    seen = []
    debouncer = Debouncer(seen.append, scheduler=scheduler)
    debouncer.call("x")
    assert debouncer.flush() is True
    assert seen == ["x"]
    assert scheduler.tasks == {}
    assert debouncer.flush() is False


def test_cancel_drops_pending_call(scheduler):
    seen = []
    debouncer = Debouncer(seen.append, scheduler=scheduler)
    debouncer.call("x")
    debouncer.cancel()
    scheduler.run_all()
    assert seen == []


def test_timer_scheduler_fires():
    fired = threading.Event()
    values = []

    def record(value):
        values.append(value)
        fired.set()

    debouncer = Debouncer(record, 10)
    debouncer.call(1)
    debouncer.call(2)
    assert fired.wait(2.0)
    assert values == [2]


class _AfterWidget:
    def __init__(self):
        self.calls = []

    def after(self, delay, fn):
        self.calls.append(("after", delay))
        return "after#1"

    def after_cancel(self, handle):
        raise ValueError("already fired")


def test_tk_scheduler_uses_after_and_swallows_stale_cancel():
    widget = _AfterWidget()
    sched = TkScheduler(widget)
    handle = sched.schedule(500, lambda: None)
    assert handle == "after#1"
    assert widget.calls == [("after", 500)]
    sched.cancel(handle)
