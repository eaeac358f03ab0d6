"""Viewing session — timer wiring on a virtual clock.

Invariants:
    - Countdown reaches the intro after three 1000ms ticks
    - Sparkles clear 500ms after a pop
    - All-popped advances exactly once, 1000ms after the last pop
    - Restart and close leave no pending timer behind
"""

from app.core.domain_types import Stage
from app.core.viewing_machine import (
    BalloonsComplete,
    Decorate,
    GoToBalloons,
    LightCandle,
    NextPhoto,
    OpenGift,
    OpenMessage,
    OpenPhotos,
    PopBalloon,
    ReadyCandle,
    Restart,
    SparkleExpired,
    StartSurprise,
    Tick,
)
from app.services.viewing_session import ViewingSession
from tests.services.fake_scheduler import FakeScheduler


def _session(photo_count: int = 3):
    scheduler = FakeScheduler()
    return ViewingSession(photo_count, scheduler), scheduler


def _to_balloons(session, scheduler):
    scheduler.advance(3000)
    for action in (StartSurprise(), Decorate(), ReadyCandle(), LightCandle(), GoToBalloons()):
        assert session.dispatch(action)


def _pop_all(session):
    for i in range(4):
        assert session.dispatch(PopBalloon(i))


# --- Countdown ----------------------------------------------------------------

def test_countdown_ticks_once_per_second():
    session, scheduler = _session()
    assert session.state.stage.remaining == 3

    scheduler.advance(999)
    assert session.state.stage.remaining == 3
    scheduler.advance(1)
    assert session.state.stage.remaining == 2
    scheduler.advance(1000)
    assert session.state.stage.remaining == 1


def test_intro_after_three_seconds_then_no_more_timers():
    session, scheduler = _session()
    scheduler.advance(3000)
    assert session.state.stage.intro_shown
    assert session.pending_timers == 0
    assert scheduler.pending == []


def test_caller_tick_rejected_and_cadence_kept():
    session, scheduler = _session()
    scheduler.advance(500)
    assert not session.dispatch(Tick())
    assert session.pending_timers == 1

    scheduler.advance(500)
    assert session.state.stage.remaining == 2
    scheduler.advance(1999)
    assert not session.state.stage.intro_shown
    scheduler.advance(1)
    assert session.state.stage.intro_shown


def test_manual_tick_is_ignored_after_intro():
    session, scheduler = _session()
    scheduler.advance(3000)
    assert not session.dispatch(Tick())


# --- Balloons -----------------------------------------------------------------

def test_sparkles_clear_after_pulse():
    session, scheduler = _session()
    _to_balloons(session, scheduler)

    session.dispatch(PopBalloon(0))
    assert session.state.sparkles
    scheduler.advance(499)
    assert session.state.sparkles
    scheduler.advance(1)
    assert not session.state.sparkles


def test_all_popped_advances_after_one_second():
    session, scheduler = _session()
    _to_balloons(session, scheduler)
    _pop_all(session)

    scheduler.advance(999)
    assert session.state.stage_name == Stage.BALLOONS
    scheduler.advance(1)
    assert session.state.stage_name == Stage.MESSAGE_REVEAL
    assert session.state.confetti


def test_caller_cannot_skip_completion_delay():
    session, scheduler = _session()
    _to_balloons(session, scheduler)
    _pop_all(session)

    assert not session.dispatch(BalloonsComplete())
    assert not session.dispatch(SparkleExpired())
    assert session.state.stage_name == Stage.BALLOONS
    assert session.state.sparkles

    scheduler.advance(1000)
    assert session.state.stage_name == Stage.MESSAGE_REVEAL


def test_completion_fires_exactly_once():
    session, scheduler = _session()
    _to_balloons(session, scheduler)
    _pop_all(session)
    # Extra taps on popped balloons schedule nothing
    assert not session.dispatch(PopBalloon(3))

    scheduler.advance(5000)
    assert session.state.stage_name == Stage.MESSAGE_REVEAL
    assert session.pending_timers == 0


# --- Restart / teardown -------------------------------------------------------

def _to_final_gift(session, scheduler):
    _to_balloons(session, scheduler)
    _pop_all(session)
    scheduler.advance(1000)
    for action in (OpenPhotos(), NextPhoto(), OpenMessage(), OpenGift()):
        assert session.dispatch(action)


def test_restart_returns_to_countdown_and_replays():
    session, scheduler = _session()
    _to_final_gift(session, scheduler)

    assert session.dispatch(Restart())
    assert session.state.stage_name == Stage.COUNTDOWN
    assert session.state.stage.remaining == 3
    assert not session.state.confetti
    assert session.pending_timers == 1

    scheduler.advance(3000)
    assert session.state.stage.intro_shown


def test_close_cancels_every_timer():
    session, scheduler = _session()
    _to_balloons(session, scheduler)
    session.dispatch(PopBalloon(0))
    assert session.pending_timers == 1

    session.close()
    assert session.closed
    assert session.pending_timers == 0
    assert scheduler.pending == []

    scheduler.advance(10_000)
    assert session.state.sparkles


def test_dispatch_after_close_ignored():
    session, scheduler = _session()
    session.close()
    scheduler.advance(3000)
    assert session.state.stage.remaining == 3
    assert not session.dispatch(Tick())
