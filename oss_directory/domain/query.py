"""Catalog filter parameters, matching predicates and result ordering."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional, Tuple

from oss_directory.domain.catalog_entry import CatalogEntry


class SortKey(str, Enum):
    """Supported result orderings."""

    ALPHABETICAL = "alphabetical"
    STARS = "stars"
    ACTIVITY = "activity"
    RECENTLY_ADDED = "recently_added"
    AGE_ASC = "age_asc"
    AGE_DESC = "age_desc"

    @classmethod
    def parse(cls, value: Optional[str]) -> "SortKey":
        """Map a raw ``sort`` parameter to a SortKey, defaulting to alphabetical."""
        try:
            return cls(value)
        except ValueError:
            return cls.ALPHABETICAL


# (attribute, descending) per sort mode
_SORT_FIELDS = {
    SortKey.ALPHABETICAL: ("name", False),
    SortKey.STARS: ("stars", True),
    SortKey.ACTIVITY: ("last_commit", True),
    SortKey.RECENTLY_ADDED: ("created_at", True),
    SortKey.AGE_ASC: ("first_commit", False),
    SortKey.AGE_DESC: ("first_commit", True),
}


def strip_nul(value: str) -> str:
    """Remove NUL characters, which PostgreSQL text cannot hold."""
    return value.replace("\x00", "")


def parse_tag_filter(tag_filter: Optional[str]) -> Tuple[str, ...]:
    """
    Split a comma-separated tag filter into distinct, trimmed tags.

    Empty pieces are dropped and the first occurrence of each tag wins,
    so ``" cloud, ,cli,cloud"`` becomes ``("cloud", "cli")``.
    """
    if not tag_filter:
        return ()

    tags: List[str] = []
    for piece in strip_nul(tag_filter).split(","):
        tag = piece.strip()
        if tag and tag not in tags:
            tags.append(tag)
    return tuple(tags)


@dataclass(frozen=True)
class CatalogQuery:
    """Normalized filter and sort parameters for one catalog request."""

    keyword: str = ""
    tags: Tuple[str, ...] = field(default_factory=tuple)
    sort_key: SortKey = SortKey.ALPHABETICAL

    @classmethod
    def from_params(
        cls,
        keyword: Optional[str] = None,
        tag_filter: Optional[str] = None,
        sort_key: Optional[str] = None,
    ) -> "CatalogQuery":
        """Build a query from raw ``q``, ``tags`` and ``sort`` request values."""
        return cls(
            keyword=strip_nul(keyword or ""),
            tags=parse_tag_filter(tag_filter),
            sort_key=SortKey.parse(sort_key),
        )

    @property
    def has_keyword(self) -> bool:
        return bool(self.keyword)

    @property
    def has_tags(self) -> bool:
        return bool(self.tags)

    def matches_keyword(self, entry: CatalogEntry) -> bool:
        """True if the keyword is a case-insensitive substring of a searchable field or tag."""
        if not self.has_keyword:
            return True

        needle = self.keyword.lower()
        fields = [
            entry.name,
            entry.description,
            entry.maintainer,
            entry.license,
            entry.country,
            entry.language,
            *entry.tags,
        ]
        return any(needle in (value or "").lower() for value in fields)

    def matches_tags(self, entry: CatalogEntry) -> bool:
        """True if the entry carries every requested tag."""
        return set(self.tags).issubset(entry.tags)

    def matches(self, entry: CatalogEntry) -> bool:
        return self.matches_keyword(entry) and self.matches_tags(entry)


def sort_entries(entries: Iterable[CatalogEntry], sort_key: SortKey) -> List[CatalogEntry]:
    """
    Return entries ordered by the given sort mode.

    Timestamps are compared as ISO-8601 strings. Ties keep their input order.

    Args:
        entries: Entries to order
        sort_key: One of the six supported orderings

    Returns:
        A new sorted list
    """
    attribute, descending = _SORT_FIELDS[sort_key]
    return sorted(entries, key=lambda entry: getattr(entry, attribute), reverse=descending)
