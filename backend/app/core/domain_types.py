"""Domain Types — identity types, enums and fixed constants for birthday greetings.

Invariants:
    - A greeting carries between MIN_PHOTOS and MAX_PHOTOS photo references
    - recipient_age is bounded MIN_AGE–MAX_AGE
    - BALLOON_WORDS and CAKE_DECORATIONS are fixed-size; balloon i reveals word i
    - All valid states encoded as Enums — no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders
"""

from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

PhotoRef = NewType("PhotoRef", str)  # e.g. "/uploads/abc-1700000000000.jpg"


# ─── Greeting limits ─────────────────────────────────────────────

MIN_PHOTOS = 2
MAX_PHOTOS = 12
MIN_AGE = 1
MAX_AGE = 150
MAX_NAME_LENGTH = 200
MAX_PHOTO_BYTES = 10 * 1024 * 1024

ALLOWED_IMAGE_EXTENSIONS = frozenset({".jpeg", ".jpg", ".png", ".gif", ".webp"})
ALLOWED_IMAGE_CONTENT_TYPES = frozenset({
    "image/jpeg", "image/jpg", "image/png", "image/gif", "image/webp",
})

UPLOADS_URL_PREFIX = "/uploads"
SHARE_PATH_PREFIX = "/wish"


# ─── Viewing timings (milliseconds) ──────────────────────────────

COUNTDOWN_START = 3
COUNTDOWN_TICK_MS = 1000
SPARKLE_PULSE_MS = 500
BALLOONS_COMPLETE_DELAY_MS = 1000


# ─── Enums ───────────────────────────────────────────────────────

class Stage(str, Enum):
    """Top-level viewing stages in forward order."""
    COUNTDOWN = "countdown"
    CAKE = "cake"
    BALLOONS = "balloons"
    MESSAGE_REVEAL = "message_reveal"
    PHOTO_CAROUSEL = "photo_carousel"
    MESSAGE_CARD = "message_card"
    FINAL_GIFT = "final_gift"


class CakeStep(int, Enum):
    """Cake sub-stages — ordered, never move backwards."""
    DECORATE = 0
    CANDLE_READY = 1
    LIT = 2


class Decoration(str, Enum):
    """The five cake decorations, applied together in this order."""
    BALLOON_LEFT = "balloon-left"
    BALLOON_RIGHT = "balloon-right"
    CONFETTI_LEFT = "confetti-left"
    CONFETTI_RIGHT = "confetti-right"
    RIBBON = "ribbon"


# Entrance delay (seconds) per decoration, staggered by 0.1s
CAKE_DECORATIONS: tuple[tuple[Decoration, float], ...] = (
    (Decoration.BALLOON_LEFT, 0.0),
    (Decoration.BALLOON_RIGHT, 0.1),
    (Decoration.CONFETTI_LEFT, 0.2),
    (Decoration.CONFETTI_RIGHT, 0.3),
    (Decoration.RIBBON, 0.4),
)

BALLOON_WORDS: tuple[str, str, str, str] = ("You", "are", "a", "Cutiee")
BALLOON_COUNT = len(BALLOON_WORDS)
