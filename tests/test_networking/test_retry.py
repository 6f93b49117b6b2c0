"""Tests for the retransmission cadences and peer timeout."""

from armada.config import (
    ATTACK_RESEND_TICKS,
    PEER_TIMEOUT_TICKS,
    POST_READY_GRACE_TICKS,
    READY_RESEND_TICKS,
)
from armada.networking.retry import RetryAction, RetryEngine, RetryTimer
from armada.simulation.state import NetState


def run(engine: RetryEngine, state: NetState, ticks: int) -> list[RetryAction]:
    actions = []
    for _ in range(ticks):
        actions.extend(engine.tick(state))
    return actions


class TestRetryTimer:
    def test_fires_on_interval(self):
        timer = RetryTimer(3)
        assert [timer.tick() for _ in range(3)] == [False, False, True]

    def test_reset(self):
        timer = RetryTimer(2)
        timer.tick()
        timer.reset()
        assert timer.tick() is False


class TestReadyCadence:
    def test_resends_while_waiting_for_ready(self):
        engine = RetryEngine()
        assert run(engine, NetState.WAIT_READY, READY_RESEND_TICKS - 1) == []
        assert engine.tick(NetState.WAIT_READY) == [RetryAction.RESEND_READY]

    def test_silent_when_idle(self):
        engine = RetryEngine()
        assert run(engine, NetState.IDLE, READY_RESEND_TICKS * 3) == []

    def test_grace_window_keeps_resending(self):
        engine = RetryEngine()
        engine.start_grace()
        actions = run(engine, NetState.MY_TURN, POST_READY_GRACE_TICKS + READY_RESEND_TICKS * 2)
        assert actions.count(RetryAction.RESEND_READY) == POST_READY_GRACE_TICKS // READY_RESEND_TICKS

    def test_reset_ends_grace(self):
        engine = RetryEngine()
        engine.start_grace()
        engine.reset()
        assert run(engine, NetState.MY_TURN, POST_READY_GRACE_TICKS) == []


class TestAttackCadence:
    def test_resends_while_waiting_for_result(self):
        engine = RetryEngine()
        actions = run(engine, NetState.WAIT_RESULT, ATTACK_RESEND_TICKS * 3)
        assert actions == [RetryAction.RESEND_ATTACK] * 3

    def test_traffic_restarts_the_count(self):
        engine = RetryEngine()
        run(engine, NetState.WAIT_RESULT, ATTACK_RESEND_TICKS - 1)
        engine.on_traffic()
        assert run(engine, NetState.WAIT_RESULT, ATTACK_RESEND_TICKS - 1) == []


class TestPeerTimeout:
    def test_lost_after_silence_on_peer_turn(self):
        engine = RetryEngine()
        assert run(engine, NetState.PEER_TURN, PEER_TIMEOUT_TICKS - 1) == []
        assert engine.tick(NetState.PEER_TURN) == [RetryAction.PEER_LOST]

    def test_traffic_keeps_peer_alive(self):
        engine = RetryEngine()
        run(engine, NetState.PEER_TURN, PEER_TIMEOUT_TICKS - 1)
        engine.on_traffic()
        assert run(engine, NetState.PEER_TURN, PEER_TIMEOUT_TICKS - 1) == []

    def test_only_counts_on_peer_turn(self):
        engine = RetryEngine()
        assert run(engine, NetState.MY_TURN, PEER_TIMEOUT_TICKS) == []
