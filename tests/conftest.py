"""
Pytest fixtures shared by the test suite.

Service and web tests run against an in-memory store that applies the same
keyword and tag predicates the SQL templates implement.
"""

from typing import List

import pytest

from oss_directory.application.catalog_service import CatalogQueryService
from oss_directory.domain.catalog_entry import CatalogEntry
from oss_directory.domain.errors import StoreUnavailable
from oss_directory.domain.query import CatalogQuery


def make_entry(name: str, **overrides) -> CatalogEntry:
    """Build a CatalogEntry with sensible defaults."""
    values = dict(
        id=f"id-{name.lower()}",
        name=name,
        description="",
        source_url=f"https://github.com/example/{name.lower()}",
        license="MIT",
        language="Go",
        stars=0,
        created_at="2024-01-01T00:00:00",
        first_commit="2020-01-01T00:00:00",
        last_commit="2024-06-01T00:00:00",
        tags=(),
        maintainer="",
        country="",
    )
    values.update(overrides)
    values["tags"] = tuple(values["tags"])
    return CatalogEntry(**values)


class InMemoryStore:
    """Entry store holding entries in a list."""

    def __init__(self, entries: List[CatalogEntry]):
        self.entries = list(entries)
        self.queries: List[CatalogQuery] = []

    def fetch_entries(self, query: CatalogQuery) -> List[CatalogEntry]:
        self.queries.append(query)
        return [entry for entry in self.entries if query.matches(entry)]


class FailingStore:
    """Entry store whose database is down."""

    def fetch_entries(self, query: CatalogQuery) -> List[CatalogEntry]:
        raise StoreUnavailable("connection refused")


@pytest.fixture
def sample_entries() -> List[CatalogEntry]:
    return [
        make_entry(
            "Nextcloud",
            description="Self-hosted file sync and share",
            language="PHP",
            license="AGPL-3.0",
            stars=27000,
            tags=["cloud", "self-hosted", "files"],
            maintainer="Nextcloud GmbH",
            country="Germany",
            created_at="2024-03-01T10:00:00",
            first_commit="2016-06-02T00:00:00",
            last_commit="2024-10-01T08:00:00",
        ),
        make_entry(
            "Gitea",
            description="Painless self-hosted Git service",
            language="Go",
            stars=44000,
            tags=["git", "self-hosted"],
            created_at="2024-02-01T10:00:00",
            first_commit="2016-11-01T00:00:00",
            last_commit="2024-10-05T08:00:00",
        ),
        make_entry(
            "Jellyfin",
            description="The free software media system",
            language="C#",
            license="GPL-2.0",
            stars=33000,
            tags=["media", "self-hosted", "streaming"],
            country="Canada",
            created_at="2024-05-01T10:00:00",
            first_commit="2018-12-08T00:00:00",
            last_commit="2024-09-20T08:00:00",
        ),
        make_entry(
            "Syncthing",
            description="Continuous file synchronization",
            language="Go",
            license="MPL-2.0",
            stars=62000,
            tags=["files", "sync"],
            maintainer="The Syncthing Foundation",
            created_at="2024-01-15T10:00:00",
            first_commit="2013-11-26T00:00:00",
            last_commit="2024-10-10T08:00:00",
        ),
    ]


@pytest.fixture
def store(sample_entries) -> InMemoryStore:
    return InMemoryStore(sample_entries)


@pytest.fixture
def service(store) -> CatalogQueryService:
    return CatalogQueryService(store)
