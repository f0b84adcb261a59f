"""Live polling for the overview and workers pages.

A page is rendered one of two ways:

* normal: the full page inside the layout, with a "Live Poll" link to the
  same path plus ``.poll``;
* polling: only the page body, whitespace collapsed to single spaces, with
  a "Last Updated: HH:MM:SS" stamp the client can check between fetches.

Which one is decided by the ``polling`` flag of the request's RenderMode.
The server keeps nothing between polls and does not throttle them; clients
re-fetch on their own interval.
"""

import re
from dataclasses import dataclass
from datetime import datetime

from htpy import Node, a, p

_WHITESPACE = re.compile(r"\s+")

POLL_SUFFIX = ".poll"


@dataclass(frozen=True)
class RenderMode:
    path: str
    polling: bool = False

    @classmethod
    def for_path(cls, path: str) -> "RenderMode":
        if path.endswith(POLL_SUFFIX):
            return cls(path=path[: -len(POLL_SUFFIX)], polling=True)
        return cls(path=path.rstrip("/") or "/", polling=False)


def poll_marker(mode: RenderMode, now: datetime | None = None) -> Node:
    if mode.polling:
        stamp = (now or datetime.now()).strftime("%H:%M:%S")
        return p(class_="poll")[f"Last Updated: {stamp}"]
    return p(class_="poll")[a(href=f"{mode.path}{POLL_SUFFIX}", rel="poll")["Live Poll"]]


def condense(html: str) -> str:
    return _WHITESPACE.sub(" ", html)
