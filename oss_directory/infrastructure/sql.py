"""Parameterized SQL for catalog reads.

Every statement is assembled from fixed templates chosen by which filters
are present, so user input only ever reaches PostgreSQL as a bound
parameter.
"""

from typing import Any, Dict, Tuple

from oss_directory.domain.query import CatalogQuery

ENTRY_COLUMNS = (
    "id",
    "name",
    "description",
    "source_url",
    "license",
    "language",
    "stars",
    "created_at",
    "first_commit",
    "last_commit",
    "maintainer",
    "country",
    "tags",
)

SELECT_ENTRIES = """
    SELECT a.id::text AS id,
           a.name,
           a.description,
           a.source_url,
           a.license,
           a.language,
           a.stars,
           a.created_at,
           a.first_commit,
           a.last_commit,
           a.maintainer,
           a.country,
           COALESCE(
               array_agg(t.tag ORDER BY t.tag) FILTER (WHERE t.tag IS NOT NULL),
               '{}'
           ) AS tags
    FROM apps a
    LEFT JOIN app_tags t ON t.app_id = a.id
"""

GROUP_AND_ORDER = """
    GROUP BY a.id
    ORDER BY a.name, a.id
"""

# Only columns of ``a`` may appear here; the tag join happens before grouping.
KEYWORD_PREDICATE = """(
        a.name ILIKE %(keyword)s
        OR a.description ILIKE %(keyword)s
        OR a.maintainer ILIKE %(keyword)s
        OR a.license ILIKE %(keyword)s
        OR a.country ILIKE %(keyword)s
        OR a.language ILIKE %(keyword)s
        OR a.id IN (SELECT app_id FROM app_tags WHERE tag ILIKE %(keyword)s)
    )"""

TAGS_PREDICATE = """a.id IN (
        SELECT app_id FROM app_tags
        WHERE tag = ANY(%(tags)s)
        GROUP BY app_id
        HAVING COUNT(DISTINCT tag) = %(tag_count)s
    )"""

# Keyed by (has_keyword, has_tags)
WHERE_TEMPLATES = {
    (False, False): "",
    (True, False): f"WHERE {KEYWORD_PREDICATE}",
    (False, True): f"WHERE {TAGS_PREDICATE}",
    (True, True): f"WHERE {KEYWORD_PREDICATE}\n    AND {TAGS_PREDICATE}",
}


def escape_like(value: str) -> str:
    """Escape LIKE wildcards so ``value`` matches literally."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def build_entry_query(query: CatalogQuery) -> Tuple[str, Dict[str, Any]]:
    """
    Build the statement selecting entries, with their tags, that match a query.

    Args:
        query: Normalized filter parameters

    Returns:
        Tuple of (SQL text with named placeholders, parameter mapping)
    """
    params: Dict[str, Any] = {}
    if query.has_keyword:
        params["keyword"] = f"%{escape_like(query.keyword)}%"
    if query.has_tags:
        params["tags"] = list(query.tags)
        params["tag_count"] = len(query.tags)

    where = WHERE_TEMPLATES[(query.has_keyword, query.has_tags)]
    return f"{SELECT_ENTRIES}{where}{GROUP_AND_ORDER}", params
