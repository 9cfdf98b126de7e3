"""Helpers turning catalog entries and request state into template values."""

from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Tuple
from urllib.parse import urlencode, urlparse

from babel.dates import format_timedelta

from oss_directory.domain.query import SortKey

LANGUAGES = [
    ("en", "English"),
    ("de", "Deutsch"),
    ("fr", "Français"),
]

# (host fragment, display name)
HOSTERS = [
    ("github.com", "GitHub"),
    ("gitlab.com", "GitLab"),
    ("codeberg.org", "Codeberg"),
    ("sr.ht", "SourceHut"),
]


def generate_handle(name: str) -> str:
    """Icon handle for an app name: ``.``, spaces and ``_`` become ``-``, lowercased."""
    handle = name.replace(".", "-").replace(" ", "-").replace("_", "-")
    return handle.lower()


def get_repo_hoster(repo_url: str) -> str:
    """Display name of the forge hosting ``repo_url``, or "Unknown"."""
    try:
        host = urlparse(repo_url).netloc
    except ValueError:
        return "Unknown"

    for fragment, display_name in HOSTERS:
        if fragment in host:
            return display_name
    return "Unknown"


def sort_options(labels: Dict[str, str], current: SortKey) -> List[Dict[str, object]]:
    return [
        {
            "value": key.value,
            "label": labels.get(f"sort_{key.value}", key.value),
            "selected": key == current,
        }
        for key in SortKey
    ]


def language_links(params: Iterable[Tuple[str, str]]) -> List[Dict[str, str]]:
    """
    Links switching the page language while keeping every other query parameter.

    Args:
        params: Current query parameters as (name, value) pairs
    """
    kept = sorted((name, value) for name, value in params if name != "lang")
    links = []
    for code, display_name in LANGUAGES:
        href = "?" + urlencode(kept + [("lang", code)])
        links.append({"code": code, "name": display_name, "href": href})
    return links


def format_relative_time(timestamp: str, locale: str, now: Optional[datetime] = None) -> str:
    """
    Localized distance between an ISO-8601 timestamp and now, e.g. "3 days ago".

    Naive timestamps are taken as UTC. Values that do not parse are returned
    unchanged, and "" stays "".

    Args:
        timestamp: ISO-8601 timestamp as stored on a CatalogEntry
        locale: Babel locale identifier such as "en" or "de"
        now: Reference time. If None, uses the current UTC time.
    """
    if not timestamp:
        return ""
    try:
        moment = datetime.fromisoformat(timestamp.replace("Z", "+00:00"))
    except ValueError:
        return timestamp

    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    return format_timedelta(moment - now, add_direction=True, locale=locale)
