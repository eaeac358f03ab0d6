"""Creation Form — client-side state and submission flow for creating a greeting.

Invariants:
    - The photo selection never exceeds 12; an addition that would overflow is rejected whole
    - submit() runs the same recipient/photo-count rules as the server before any network call
    - A successful submit yields the share link <origin>/wish/<id> (origin defaults to PUBLIC_BASE_URL)
    - Failed submissions are not retried; the user resubmits
"""

import logging
from dataclasses import dataclass, field

from app.config import get_settings
from app.core.client_routes import build_share_link
from app.core.domain_types import MAX_PHOTOS
from app.core.enforce_upload import (
    check_photo_count,
    check_recipient_age,
    check_recipient_name,
    parse_age,
)
from app.core.errors import GreetingAPIError
from app.infrastructure.greeting_api_client import GreetingAPIClient, PhotoFile
from app.schemas.greeting import GreetingResponse

logger = logging.getLogger(__name__)


@dataclass
class SubmitResult:
    greeting: GreetingResponse | None = None
    share_link: str | None = None
    errors: list[dict] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.greeting is not None


class CreationForm:
    """Collects recipient details and photos, then creates the greeting."""

    def __init__(self, api: GreetingAPIClient, origin: str | None = None):
        self.api = api
        self.origin = origin or get_settings().public_base_url
        self.photos: list[PhotoFile] = []
        self.share_link: str | None = None
        self.submitting = False

    def add_photos(self, files: list[PhotoFile]) -> dict | None:
        """Append files to the selection, or reject all of them if it would pass 12."""
        if len(self.photos) + len(files) > MAX_PHOTOS:
            return {
                "status": "error",
                "error_code": "TOO_MANY_PHOTOS",
                "field": "photos",
                "message": f"You can upload a maximum of {MAX_PHOTOS} photos",
            }
        self.photos.extend(files)
        return None

    def remove_photo(self, index: int) -> None:
        if 0 <= index < len(self.photos):
            del self.photos[index]

    def validate(self, recipient_name: str | None, recipient_age) -> list[dict]:
        """All rule violations for the current input, empty when submittable."""
        errors = [
            check_recipient_name(recipient_name),
            check_recipient_age(parse_age(recipient_age)),
            check_photo_count(len(self.photos)),
        ]
        return [error for error in errors if error is not None]

    async def submit(self, recipient_name: str | None, recipient_age) -> SubmitResult:
        errors = self.validate(recipient_name, recipient_age)
        if errors:
            return SubmitResult(errors=errors)

        self.submitting = True
        try:
            greeting = await self.api.create_greeting(
                recipient_name.strip(), parse_age(recipient_age), list(self.photos),
            )
        except GreetingAPIError as e:
            logger.warning(f"Greeting submission failed: {e.message}")
            return SubmitResult(errors=[{
                "status": "error",
                "error_code": e.code,
                "field": None,
                "message": e.message,
            }])
        finally:
            self.submitting = False

        self.share_link = build_share_link(self.origin, str(greeting.id))
        return SubmitResult(greeting=greeting, share_link=self.share_link)
