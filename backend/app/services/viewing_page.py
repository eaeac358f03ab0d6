"""Viewing Page — loads a greeting for /wish/<id> and renders the current stage as data.

Invariants:
    - The stage machine starts only after the greeting loaded (status READY)
    - NOT_FOUND and FAILED are terminal for this page instance (no retry, reload required)
    - describe() is a pure read of the current state; it never mutates it
"""

import logging
from enum import Enum

from app.core.domain_types import BALLOON_WORDS
from app.core.errors import GreetingAPIError
from app.core.viewing_machine import (
    BalloonsStage,
    CakeStage,
    CountdownStage,
    FinalGiftStage,
    MessageCardStage,
    MessageRevealStage,
    PhotoCarouselStage,
    applied_decorations,
    current_photo,
)
from app.infrastructure.greeting_api_client import GreetingAPIClient
from app.schemas.greeting import GreetingResponse
from app.services.viewing_session import Scheduler, ViewingSession

logger = logging.getLogger(__name__)


class PageStatus(str, Enum):
    LOADING = "loading"
    READY = "ready"
    NOT_FOUND = "not_found"
    FAILED = "failed"


class ViewingPage:
    """One visit to a share link."""

    def __init__(self, greeting_id: str, api: GreetingAPIClient, scheduler: Scheduler):
        self.greeting_id = greeting_id
        self.api = api
        self.scheduler = scheduler
        self.status = PageStatus.LOADING
        self.greeting: GreetingResponse | None = None
        self.session: ViewingSession | None = None

    async def load(self) -> PageStatus:
        """Fetch the greeting once and start the stage machine on success."""
        if self.status != PageStatus.LOADING:
            return self.status
        try:
            greeting = await self.api.fetch_greeting(self.greeting_id)
        except GreetingAPIError as e:
            logger.error(
                f"Failed to load greeting: {e.message}",
                extra={"greeting_id": self.greeting_id},
            )
            self.status = PageStatus.FAILED
            return self.status

        if greeting is None:
            self.status = PageStatus.NOT_FOUND
            return self.status

        self.greeting = greeting
        self.session = ViewingSession(len(greeting.photos), self.scheduler)
        self.status = PageStatus.READY
        return self.status

    def close(self) -> None:
        """Navigation away: stop every pending timer."""
        if self.session:
            self.session.close()

    def describe(self) -> dict:
        """What the page currently shows."""
        if self.status == PageStatus.LOADING:
            return {"status": self.status.value, "message": "Loading your surprise..."}
        if self.status == PageStatus.NOT_FOUND:
            return {"status": self.status.value, "message": "Greeting not found"}
        if self.status == PageStatus.FAILED:
            return {"status": self.status.value, "message": "Something went wrong"}

        state = self.session.state
        view = {
            "status": self.status.value,
            "stage": state.stage_name.value,
            "confetti": state.confetti,
            "sparkles": state.sparkles,
        }
        view.update(_describe_stage(state, self.greeting))
        return view


def _describe_stage(state, greeting: GreetingResponse) -> dict:
    stage = state.stage
    if isinstance(stage, CountdownStage):
        if not stage.intro_shown:
            return {"countdown": stage.remaining}
        return {
            "intro": {
                "headline": "A Cutiepie was born today,",
                "subline": f"{greeting.recipient_age} years ago!",
            },
        }
    if isinstance(stage, CakeStage):
        return {
            "cake_step": stage.step.name.lower(),
            "decorations": applied_decorations(stage),
            "candle_lit": stage.candle_lit,
        }
    if isinstance(stage, BalloonsStage):
        return {
            "balloons": list(stage.popped),
            "words": list(stage.revealed_words),
        }
    if isinstance(stage, MessageRevealStage):
        return {
            "words": [
                {"text": word, "delay": round(i * 0.1, 1)}
                for i, word in enumerate(BALLOON_WORDS)
            ],
        }
    if isinstance(stage, PhotoCarouselStage):
        count = len(greeting.photos)
        return {
            "photo": current_photo(state, greeting.photos),
            "position": stage.index + 1 if count else 0,
            "total": count,
            "can_previous": stage.index > 0,
            "can_next": stage.index < count - 1,
        }
    if isinstance(stage, MessageCardStage):
        return {"recipient_name": greeting.recipient_name}
    if isinstance(stage, FinalGiftStage):
        return {
            "recipient_name": greeting.recipient_name,
            "message": (
                "Wishing you the most amazing year ahead, "
                f"{greeting.recipient_name}!"
            ),
        }
    return {}
