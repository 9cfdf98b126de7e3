"""Domain entities for cataloged applications."""

from dataclasses import dataclass, field
from typing import Tuple


@dataclass(frozen=True)
class CatalogEntry:
    """Immutable catalog entry for one open-source application."""
    
    id: str
    name: str
    description: str
    source_url: str
    license: str
    language: str
    stars: int
    created_at: str
    first_commit: str
    last_commit: str
    tags: Tuple[str, ...] = field(default_factory=tuple)
    maintainer: str = ""
    country: str = ""
