"""Client Routes — share-link construction and resolution of the page surface.

Invariants:
    - "/" is the creation form, "/wish/<id>" the viewing page, anything else not-found
    - Share links are always <origin>/wish/<id> with no trailing slash on origin
"""

from dataclasses import dataclass
from enum import Enum

from app.core.domain_types import SHARE_PATH_PREFIX


class ClientPage(str, Enum):
    CREATE = "create"
    VIEW = "view"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class ClientRoute:
    page: ClientPage
    greeting_id: str | None = None


def build_share_link(origin: str, greeting_id: str) -> str:
    return f"{origin.rstrip('/')}{SHARE_PATH_PREFIX}/{greeting_id}"


def resolve_route(path: str) -> ClientRoute:
    """Map a browser path to the page that renders it."""
    path = path.split("?", 1)[0].split("#", 1)[0]
    if path in ("", "/"):
        return ClientRoute(ClientPage.CREATE)

    segments = path.strip("/").split("/")
    if len(segments) == 2 and f"/{segments[0]}" == SHARE_PATH_PREFIX and segments[1]:
        return ClientRoute(ClientPage.VIEW, greeting_id=segments[1])
    return ClientRoute(ClientPage.NOT_FOUND)
