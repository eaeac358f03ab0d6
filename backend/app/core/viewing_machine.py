"""Viewing Stage Machine — pure transition function for the greeting slideshow.

Invariants:
    - All functions are PURE: no IO, no timers, no clock (timers are returned as requests)
    - Stages only move forward; FinalGift --Restart--> Countdown is the single cycle
    - Exactly two automatic forward transitions: countdown expiry and all-balloons-popped
    - Rejected actions leave the state untouched and request no timers
    - Photo index stays within [0, photo_count - 1] (0 when there are no photos)
    - Balloon i reveals word i only; popping twice has no further effect
    - BalloonsComplete is requested once per Balloons visit and applied at most once

Design Decisions:
    - One frozen dataclass per stage holding only its own sub-state; overlay
      effects (confetti, sparkles) live on ViewingState because they outlive a stage
    - Timers are data (ScheduleTimer): the imperative shell owns scheduling and
      cancellation, keeping this module deterministic under a fake clock
"""

from dataclasses import dataclass, field, replace
from typing import Callable, ClassVar, Union

from app.core.domain_types import (
    BALLOON_COUNT,
    BALLOON_WORDS,
    BALLOONS_COMPLETE_DELAY_MS,
    CAKE_DECORATIONS,
    COUNTDOWN_START,
    COUNTDOWN_TICK_MS,
    SPARKLE_PULSE_MS,
    CakeStep,
    Decoration,
    Stage,
)


# ─── Stage variants ──────────────────────────────────────────────

@dataclass(frozen=True)
class CountdownStage:
    kind: ClassVar[Stage] = Stage.COUNTDOWN
    remaining: int = COUNTDOWN_START

    @property
    def intro_shown(self) -> bool:
        return self.remaining == 0


@dataclass(frozen=True)
class CakeStage:
    kind: ClassVar[Stage] = Stage.CAKE
    step: CakeStep = CakeStep.DECORATE
    decorations: tuple[Decoration, ...] = ()

    @property
    def decorated(self) -> bool:
        return len(self.decorations) > 0

    @property
    def candle_lit(self) -> bool:
        return self.step == CakeStep.LIT


@dataclass(frozen=True)
class BalloonsStage:
    kind: ClassVar[Stage] = Stage.BALLOONS
    popped: tuple[bool, ...] = (False,) * BALLOON_COUNT
    completion_scheduled: bool = False

    @property
    def all_popped(self) -> bool:
        return all(self.popped)

    @property
    def revealed_words(self) -> tuple[str | None, ...]:
        """Word i when balloon i is popped, else None."""
        return tuple(
            word if popped else None
            for word, popped in zip(BALLOON_WORDS, self.popped)
        )


@dataclass(frozen=True)
class MessageRevealStage:
    kind: ClassVar[Stage] = Stage.MESSAGE_REVEAL


@dataclass(frozen=True)
class PhotoCarouselStage:
    kind: ClassVar[Stage] = Stage.PHOTO_CAROUSEL
    index: int = 0


@dataclass(frozen=True)
class MessageCardStage:
    kind: ClassVar[Stage] = Stage.MESSAGE_CARD


@dataclass(frozen=True)
class FinalGiftStage:
    kind: ClassVar[Stage] = Stage.FINAL_GIFT


StageState = Union[
    CountdownStage, CakeStage, BalloonsStage, MessageRevealStage,
    PhotoCarouselStage, MessageCardStage, FinalGiftStage,
]


@dataclass(frozen=True)
class ViewingState:
    """Whole view state for one page instance."""
    stage: StageState = field(default_factory=CountdownStage)
    photo_count: int = 0
    confetti: bool = False
    sparkles: bool = False

    @property
    def stage_name(self) -> Stage:
        return self.stage.kind


# ─── Actions ─────────────────────────────────────────────────────

@dataclass(frozen=True)
class Tick:
    """Countdown cadence (timer)."""


@dataclass(frozen=True)
class StartSurprise:
    pass


@dataclass(frozen=True)
class Decorate:
    pass


@dataclass(frozen=True)
class ReadyCandle:
    pass


@dataclass(frozen=True)
class LightCandle:
    pass


@dataclass(frozen=True)
class GoToBalloons:
    pass


@dataclass(frozen=True)
class PopBalloon:
    index: int


@dataclass(frozen=True)
class SparkleExpired:
    """End of a sparkle pulse (timer)."""


@dataclass(frozen=True)
class BalloonsComplete:
    """Fires after the last balloon is popped (timer)."""


@dataclass(frozen=True)
class OpenPhotos:
    pass


@dataclass(frozen=True)
class NextPhoto:
    pass


@dataclass(frozen=True)
class PreviousPhoto:
    pass


@dataclass(frozen=True)
class OpenMessage:
    pass


@dataclass(frozen=True)
class OpenGift:
    pass


@dataclass(frozen=True)
class Restart:
    pass


Action = Union[
    Tick, StartSurprise, Decorate, ReadyCandle, LightCandle, GoToBalloons,
    PopBalloon, SparkleExpired, BalloonsComplete, OpenPhotos, NextPhoto,
    PreviousPhoto, OpenMessage, OpenGift, Restart,
]

# Only the session's own timers may dispatch these
TIMER_ACTIONS: tuple[type, ...] = (Tick, SparkleExpired, BalloonsComplete)


def is_timer_action(action: Action) -> bool:
    return isinstance(action, TIMER_ACTIONS)


# ─── Transition result ───────────────────────────────────────────

@dataclass(frozen=True)
class ScheduleTimer:
    """Request to dispatch `action` after `delay_ms`."""
    action: Action
    delay_ms: int


@dataclass(frozen=True)
class Transition:
    state: ViewingState
    timers: tuple[ScheduleTimer, ...] = ()
    accepted: bool = True
    cancel_timers: bool = False


# ─── Entry points ────────────────────────────────────────────────

def initial_state(photo_count: int) -> ViewingState:
    """Fresh state: countdown at 3, no effects, carousel bound to photo_count."""
    return ViewingState(stage=CountdownStage(), photo_count=max(photo_count, 0))


def start(photo_count: int) -> Transition:
    """Initial state plus the first countdown tick."""
    return Transition(
        state=initial_state(photo_count),
        timers=(ScheduleTimer(Tick(), COUNTDOWN_TICK_MS),),
    )


def transition(state: ViewingState, action: Action) -> Transition:
    """Apply `action`; unknown or out-of-stage actions are rejected unchanged."""
    handler = _HANDLERS.get(type(action))
    result = handler(state, action) if handler else None
    if result is None:
        return Transition(state=state, accepted=False)
    return result


def current_photo(state: ViewingState, photos: list[str]) -> str | None:
    """Photo shown by the carousel, None outside the carousel or when out of range."""
    if not isinstance(state.stage, PhotoCarouselStage):
        return None
    index = state.stage.index
    if 0 <= index < len(photos):
        return photos[index]
    return None


def applied_decorations(stage: CakeStage) -> list[dict]:
    """Decorations with their staggered entrance delay, in display order."""
    delays = dict(CAKE_DECORATIONS)
    return [
        {"type": decoration.value, "delay": delays[decoration]}
        for decoration in stage.decorations
    ]


# ─── Handlers (return None to reject) ────────────────────────────

def _on_tick(state: ViewingState, action: Tick) -> Transition | None:
    stage = state.stage
    if not isinstance(stage, CountdownStage) or stage.remaining <= 0:
        return None
    remaining = stage.remaining - 1
    timers = (ScheduleTimer(Tick(), COUNTDOWN_TICK_MS),) if remaining > 0 else ()
    return Transition(
        state=replace(state, stage=CountdownStage(remaining=remaining)),
        timers=timers,
    )


def _on_start_surprise(state: ViewingState, action: StartSurprise) -> Transition | None:
    stage = state.stage
    if not isinstance(stage, CountdownStage) or not stage.intro_shown:
        return None
    return Transition(state=replace(state, stage=CakeStage()))


def _on_decorate(state: ViewingState, action: Decorate) -> Transition | None:
    stage = state.stage
    if not isinstance(stage, CakeStage) or stage.step != CakeStep.DECORATE:
        return None
    if stage.decorated:
        return None
    decorations = tuple(decoration for decoration, _ in CAKE_DECORATIONS)
    return Transition(
        state=replace(state, stage=replace(stage, decorations=decorations)),
    )


def _on_ready_candle(state: ViewingState, action: ReadyCandle) -> Transition | None:
    stage = state.stage
    if (
        not isinstance(stage, CakeStage)
        or stage.step != CakeStep.DECORATE
        or not stage.decorated
    ):
        return None
    return Transition(
        state=replace(state, stage=replace(stage, step=CakeStep.CANDLE_READY)),
    )


def _on_light_candle(state: ViewingState, action: LightCandle) -> Transition | None:
    stage = state.stage
    if not isinstance(stage, CakeStage) or stage.step != CakeStep.CANDLE_READY:
        return None
    return Transition(
        state=replace(
            state, stage=replace(stage, step=CakeStep.LIT),
            confetti=True, sparkles=True,
        ),
    )


def _on_go_to_balloons(state: ViewingState, action: GoToBalloons) -> Transition | None:
    stage = state.stage
    if not isinstance(stage, CakeStage) or not stage.candle_lit:
        return None
    return Transition(
        state=replace(
            state, stage=BalloonsStage(), confetti=False, sparkles=False,
        ),
    )


def _on_pop_balloon(state: ViewingState, action: PopBalloon) -> Transition | None:
    stage = state.stage
    if not isinstance(stage, BalloonsStage):
        return None
    if not 0 <= action.index < BALLOON_COUNT or stage.popped[action.index]:
        return None

    popped = tuple(
        was_popped or i == action.index for i, was_popped in enumerate(stage.popped)
    )
    timers = [ScheduleTimer(SparkleExpired(), SPARKLE_PULSE_MS)]
    completion_scheduled = stage.completion_scheduled
    if all(popped) and not completion_scheduled:
        timers.append(ScheduleTimer(BalloonsComplete(), BALLOONS_COMPLETE_DELAY_MS))
        completion_scheduled = True

    return Transition(
        state=replace(
            state,
            stage=BalloonsStage(popped=popped, completion_scheduled=completion_scheduled),
            sparkles=True,
        ),
        timers=tuple(timers),
    )


def _on_sparkle_expired(state: ViewingState, action: SparkleExpired) -> Transition | None:
    if not state.sparkles:
        return None
    return Transition(state=replace(state, sparkles=False))


def _on_balloons_complete(state: ViewingState, action: BalloonsComplete) -> Transition | None:
    stage = state.stage
    if not isinstance(stage, BalloonsStage) or not stage.all_popped:
        return None
    return Transition(
        state=replace(state, stage=MessageRevealStage(), confetti=True),
    )


def _on_open_photos(state: ViewingState, action: OpenPhotos) -> Transition | None:
    if not isinstance(state.stage, MessageRevealStage):
        return None
    return Transition(state=replace(state, stage=PhotoCarouselStage(index=0)))


def _on_next_photo(state: ViewingState, action: NextPhoto) -> Transition | None:
    stage = state.stage
    if not isinstance(stage, PhotoCarouselStage):
        return None
    if stage.index >= state.photo_count - 1:
        return None
    return Transition(
        state=replace(state, stage=PhotoCarouselStage(index=stage.index + 1)),
    )


def _on_previous_photo(state: ViewingState, action: PreviousPhoto) -> Transition | None:
    stage = state.stage
    if not isinstance(stage, PhotoCarouselStage) or stage.index <= 0:
        return None
    return Transition(
        state=replace(state, stage=PhotoCarouselStage(index=stage.index - 1)),
    )


def _on_open_message(state: ViewingState, action: OpenMessage) -> Transition | None:
    if not isinstance(state.stage, PhotoCarouselStage):
        return None
    return Transition(state=replace(state, stage=MessageCardStage()))


def _on_open_gift(state: ViewingState, action: OpenGift) -> Transition | None:
    if not isinstance(state.stage, MessageCardStage):
        return None
    return Transition(state=replace(state, stage=FinalGiftStage()))


def _on_restart(state: ViewingState, action: Restart) -> Transition | None:
    if not isinstance(state.stage, FinalGiftStage):
        return None
    fresh = start(state.photo_count)
    return Transition(state=fresh.state, timers=fresh.timers, cancel_timers=True)


_HANDLERS: dict[type, Callable[[ViewingState, Action], Transition | None]] = {
    Tick: _on_tick,
    StartSurprise: _on_start_surprise,
    Decorate: _on_decorate,
    ReadyCandle: _on_ready_candle,
    LightCandle: _on_light_candle,
    GoToBalloons: _on_go_to_balloons,
    PopBalloon: _on_pop_balloon,
    SparkleExpired: _on_sparkle_expired,
    BalloonsComplete: _on_balloons_complete,
    OpenPhotos: _on_open_photos,
    NextPhoto: _on_next_photo,
    PreviousPhoto: _on_previous_photo,
    OpenMessage: _on_open_message,
    OpenGift: _on_open_gift,
    Restart: _on_restart,
}
