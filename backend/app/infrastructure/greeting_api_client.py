"""Greeting API Client — async HTTP client used by the creation form and the viewing page.

Invariants:
    - create_greeting posts multipart: recipientName, recipientAge, photos[] (in order)
    - fetch_greeting returns None on 404 (absence is not an error)
    - Transport failures, unexpected statuses and malformed bodies raise GreetingAPIError
    - No retries: one attempt per call, failure is terminal for that attempt

Design Decisions:
    - Transport injectable (httpx.MockTransport / ASGITransport) for tests
"""

import logging
from dataclasses import dataclass

import httpx

from app.config import Settings, get_settings
from app.core.errors import ErrorContext, GreetingAPIError
from app.schemas.greeting import GreetingResponse

logger = logging.getLogger(__name__)

GREETINGS_PATH = "/api/greetings"


@dataclass(frozen=True)
class PhotoFile:
    """A photo selected on the client, owned by the form until submission."""
    filename: str
    content_type: str
    data: bytes


class GreetingAPIClient:
    """Wraps httpx.AsyncClient with error mapping for the greetings API."""

    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = 30,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.client = httpx.AsyncClient(
            base_url=base_url, timeout=timeout_seconds, transport=transport,
        )

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "GreetingAPIClient":
        """Client for the API served at PUBLIC_BASE_URL (same origin as share links)."""
        settings = settings or get_settings()
        return cls(
            settings.public_base_url,
            timeout_seconds=settings.api_timeout_seconds,
            transport=transport,
        )

    async def __aenter__(self) -> "GreetingAPIClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.client.aclose()

    async def create_greeting(
        self, recipient_name: str, recipient_age: int, photos: list[PhotoFile],
    ) -> GreetingResponse:
        """POST a new greeting and return it (including its generated id)."""
        response = await self._send(
            "POST", GREETINGS_PATH,
            data={
                "recipientName": recipient_name,
                "recipientAge": str(recipient_age),
            },
            files=[
                ("photos", (photo.filename, photo.data, photo.content_type))
                for photo in photos
            ],
        )
        if response.status_code != 200:
            raise GreetingAPIError(
                _error_message(response, "Failed to create greeting"),
                status_code=response.status_code,
            )
        return _parse_greeting(response)

    async def fetch_greeting(self, greeting_id: str) -> GreetingResponse | None:
        """GET a greeting by id; None when the API answers 404."""
        response = await self._send("GET", f"{GREETINGS_PATH}/{greeting_id}")
        if response.status_code == 404:
            return None
        if response.status_code != 200:
            raise GreetingAPIError(
                _error_message(response, "Failed to fetch greeting"),
                status_code=response.status_code,
                context=ErrorContext(greeting_id=greeting_id),
            )
        return _parse_greeting(response, greeting_id)

    async def _send(self, method: str, url: str, **kwargs) -> httpx.Response:
        try:
            return await self.client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"Greeting API {method} {url} failed: {e}")
            raise GreetingAPIError(f"Could not reach greeting service: {e}")


def _parse_greeting(
    response: httpx.Response, greeting_id: str | None = None,
) -> GreetingResponse:
    """Decode a 200 body; anything that is not a Greeting is a failed call."""
    try:
        return GreetingResponse.model_validate(response.json())
    except ValueError as e:
        # pydantic.ValidationError and JSONDecodeError are both ValueErrors
        logger.error(f"Malformed greeting response: {e}")
        raise GreetingAPIError(
            "Malformed greeting response",
            status_code=response.status_code,
            context=ErrorContext(greeting_id=greeting_id),
        )


def _error_message(response: httpx.Response, fallback: str) -> str:
    """Pull the user-facing message out of the API error envelope."""
    try:
        body = response.json()
    except ValueError:
        return fallback
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return error["message"]
    return fallback
