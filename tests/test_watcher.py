from artco.monitoring.protocol import PingResult, ReadySignal
from artco.monitoring.watcher import (
    AvailabilityState,
    ObservedWatcher,
    StateTransition,
    WatcherOptions,
)


def test_initial_state(fake_worker):
    watcher = ObservedWatcher("A", fake_worker)
    assert watcher.state is AvailabilityState.UNAVAILABLE
    assert watcher.is_ready is False
    assert watcher.is_available is False
    assert watcher.last_ping_timestamp_millis == 0


def test_ready_signal_transitions(fake_worker):
    watcher = ObservedWatcher("A", fake_worker)

    transition = watcher.compute(ReadySignal(is_ready=True))
    assert transition == StateTransition(AvailabilityState.UNAVAILABLE, AvailabilityState.TRANSITIONAL)
    assert watcher.is_ready is True

    watcher.compute(ReadySignal(is_ready=False))
    assert watcher.state is AvailabilityState.UNAVAILABLE
    assert watcher.is_ready is False


def test_ping_result_sets_state_and_details(fake_worker, clock):
    watcher = ObservedWatcher("A", fake_worker, clock=clock)
    watcher.compute(ReadySignal(is_ready=True))

    transition = watcher.compute(PingResult(True, 42.0))
    assert transition.current is AvailabilityState.AVAILABLE
    assert watcher.is_available is True
    assert watcher.last_elapsed_time_millis == 42.0
    assert watcher.last_ping_timestamp_millis == clock.now

    assert watcher.compute(PingResult(True, 10.0)) is None

    watcher.compute(PingResult(False, 5.0, reason="refused"))
    snapshot = watcher.snapshot()
    assert snapshot.state is AvailabilityState.UNAVAILABLE
    assert snapshot.last_reason == "refused"
    assert snapshot.pings_received == 3


def test_unknown_message_is_ignored(fake_worker):
    watcher = ObservedWatcher("A", fake_worker)
    assert watcher.compute({"event": "ping"}) is None
    assert watcher.state is AvailabilityState.UNAVAILABLE


def test_last_ping_timestamp_never_moves_backwards(fake_worker, clock):
    watcher = ObservedWatcher("A", fake_worker, clock=clock)
    seen = []
    for step in (100, 100, -500, 50, -20, 600):
        clock.advance(step)
        watcher.compute(PingResult(True, 1.0))
        seen.append(watcher.last_ping_timestamp_millis)

    assert seen == sorted(seen)
    assert seen[-1] == clock.now


def test_constant_false_evaluator_diverges_from_state(fake_worker):
    watcher = ObservedWatcher(
        "A", fake_worker, WatcherOptions(evaluate_availability=lambda result: False)
    )
    watcher.compute(ReadySignal(is_ready=True))

    watcher.compute(PingResult(True, 1.0))
    assert watcher.state is AvailabilityState.AVAILABLE
    assert watcher.is_available is False

    watcher.compute(PingResult(False, 1.0))
    assert watcher.state is AvailabilityState.UNAVAILABLE
    assert watcher.is_available is False


def test_failing_evaluator_falls_back_to_raw_result(fake_worker):
    def evaluator(result):
        raise ValueError("bad evaluator")

    watcher = ObservedWatcher("A", fake_worker, WatcherOptions(evaluate_availability=evaluator))
    watcher.compute(PingResult(True, 1.0))
    assert watcher.is_available is True


def test_is_due_respects_minimum_repoll_interval(fake_worker, clock):
    watcher = ObservedWatcher(
        "A", fake_worker, WatcherOptions(minimum_repoll_interval_millis=5000), clock=clock
    )
    assert watcher.is_due(clock.now)

    watcher.request_ping(clock.now)
    assert len(fake_worker.sent) == 1
    assert fake_worker.sent[0].target_identity == "A"
    assert not watcher.is_due(clock.now + 4999)
    assert watcher.is_due(clock.now + 5000)


def test_snapshot_to_dict(fake_worker, clock):
    watcher = ObservedWatcher("A", fake_worker, clock=clock)
    data = watcher.snapshot().to_dict()
    assert data["identity"] == "A"
    assert data["state"] == "Unavailable"
    assert data["lastPingAt"] is None
    assert data["workerAlive"] is True

    watcher.compute(PingResult(True, 2.0))
    assert watcher.snapshot().to_dict()["lastPingAt"].startswith("1970-01-01T00:16:40")
