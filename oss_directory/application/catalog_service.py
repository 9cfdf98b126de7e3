"""Application service for searching the application catalog."""

import logging
from typing import List, Optional

from oss_directory.domain.catalog_entry import CatalogEntry
from oss_directory.domain.query import CatalogQuery, sort_entries

logger = logging.getLogger(__name__)


class CatalogQueryService:
    """Service turning raw filter parameters into an ordered list of catalog entries."""

    def __init__(self, store):
        """
        Initialize catalog query service.

        Args:
            store: Read-only entry store exposing ``fetch_entries(query)``
                (a CatalogDatabase in production)
        """
        self.store = store

    def search(
        self,
        keyword: Optional[str] = None,
        tag_filter: Optional[str] = None,
        sort_key: Optional[str] = None,
    ) -> List[CatalogEntry]:
        """
        Find and order the entries matching the given filters.

        Args:
            keyword: Free-text search; matches name, description, maintainer,
                license, country, language or any tag (case-insensitive)
            tag_filter: Comma-separated tags the entry must all carry
            sort_key: One of alphabetical, stars, activity, recently_added,
                age_asc, age_desc; anything else sorts alphabetically

        Returns:
            Matching entries in the requested order

        Raises:
            QueryError: If the store fails or returns malformed rows
        """
        query = CatalogQuery.from_params(keyword, tag_filter, sort_key)
        return self.run(query)

    def run(self, query: CatalogQuery) -> List[CatalogEntry]:
        """Execute a normalized query against the store and rank the result."""
        entries = self.store.fetch_entries(query)

        # Drop duplicate ids, keeping the first occurrence
        seen_ids = set()
        unique_entries = []
        for entry in entries:
            if entry.id not in seen_ids:
                seen_ids.add(entry.id)
                unique_entries.append(entry)

        ranked = sort_entries(unique_entries, query.sort_key)
        logger.info(
            f"Catalog query keyword={query.keyword!r} tags={list(query.tags)} "
            f"sort={query.sort_key.value} returned {len(ranked)} entries"
        )
        return ranked
