from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


LIST_PATH = "/"
COUNTRY_PREFIX = "/country/"


@dataclass(frozen=True)
class Route:
    view: str
    code: Optional[str] = None


def parse_route(path: Optional[str]) -> Route:
    """Map ``/`` to the list view and ``/country/{code}`` to the detail view."""
    path = path or LIST_PATH
    if path.startswith(COUNTRY_PREFIX):
        code = path[len(COUNTRY_PREFIX):].strip("/")
        if code:
            return Route(view="country", code=code)
    return Route(view="list")


def country_path(code: str) -> str:
    return f"{COUNTRY_PREFIX}{code}"
