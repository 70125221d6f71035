import threading
import uuid

from lazythumbs.services.optimizer.gate import ALWAYS_ELIGIBLE, NullOptimizer, OptimizerGate


class _Spy:
    def __init__(self, exc=None):
        self.exc = exc
        self.calls = []

    def invalidate(self, asset_id):
        self.calls.append(("invalidate", asset_id))

    def optimize(self, asset_id, is_eligible):
        self.calls.append(("optimize", asset_id, is_eligible("large"), is_eligible("medium")))
        if self.exc:
            raise self.exc


class _Blocking:
    """Holds the first optimize() call open until released."""

    def __init__(self):
        self.entered = threading.Event()
        self.release = threading.Event()
        self.seen = {}

    def invalidate(self, asset_id):
        pass

    def optimize(self, asset_id, is_eligible):
        self.seen[asset_id] = {s: is_eligible(s) for s in ("full", "thumb", "medium")}
        if not self.entered.is_set():
            self.entered.set()
            assert self.release.wait(5)


def test_only_full_and_scaled_are_eligible_by_default():
    gate = OptimizerGate()
    aid = uuid.uuid4()
    assert isinstance(gate.optimizer, NullOptimizer)
    for size in ALWAYS_ELIGIBLE:
        assert gate.is_eligible(aid, size)
    assert not gate.is_eligible(aid, "thumbnail")


def test_allow_is_temporary_and_nests():
    gate = OptimizerGate()
    aid = uuid.uuid4()
    with gate.allow(aid, "large"):
        with gate.allow(aid, "large"):
            assert gate.is_eligible(aid, "large")
        assert gate.is_eligible(aid, "large")
    assert not gate.is_eligible(aid, "large")


def test_allow_covers_one_asset_only():
    gate = OptimizerGate()
    mine, other = uuid.uuid4(), uuid.uuid4()
    with gate.allow(mine, "large"):
        assert gate.eligibility_for(mine)("large")
        assert not gate.eligibility_for(other)("large")
        assert gate.eligibility_for(other)("full")


def test_optimize_generated_invalidates_then_runs_for_that_size():
    spy = _Spy()
    aid = uuid.uuid4()
    assert OptimizerGate(spy).optimize_generated(aid, "large") is True
    assert spy.calls == [("invalidate", aid), ("optimize", aid, True, False)]


def test_optimizer_failure_is_swallowed_and_exception_removed():
    gate = OptimizerGate(_Spy(exc=RuntimeError("down")))
    aid = uuid.uuid4()
    assert gate.optimize_generated(aid, "large") is False
    assert not gate.is_eligible(aid, "large")


def test_concurrent_allows_do_not_leak():
    gate = OptimizerGate()
    barrier = threading.Barrier(8)
    aids = [uuid.uuid4() for _ in range(8)]

    def worker(aid):
        barrier.wait()
        for _ in range(200):
            with gate.allow(aid, "medium"):
                assert gate.is_eligible(aid, "medium")

    threads = [threading.Thread(target=worker, args=(aid,)) for aid in aids]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert not any(gate.is_eligible(aid, "medium") for aid in aids)


def test_running_optimization_does_not_open_size_for_other_assets():
    blocking = _Blocking()
    gate = OptimizerGate(blocking)
    first, second = uuid.uuid4(), uuid.uuid4()

    t = threading.Thread(target=gate.optimize_generated, args=(first, "thumb"))
    t.start()
    try:
        assert blocking.entered.wait(5)
        # first is still inside optimize() with "thumb" allowed
        assert gate.optimize_generated(second, "medium") is True
    finally:
        blocking.release.set()
        t.join()

    assert blocking.seen[first] == {"full": True, "thumb": True, "medium": False}
    assert blocking.seen[second] == {"full": True, "thumb": False, "medium": True}
