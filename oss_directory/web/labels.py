"""Localized UI labels loaded from ``i18n/<locale>.json``."""

import json
import logging
import re
from functools import lru_cache
from pathlib import Path
from typing import Dict

logger = logging.getLogger(__name__)

I18N_DIR = Path(__file__).resolve().parent / "i18n"
FALLBACK_LOCALE = "en"

_LOCALE_PATTERN = re.compile(r"^[a-z]{2}(?:[-_][A-Za-z]{2})?$")


@lru_cache(maxsize=None)
def load_labels(locale: str) -> Dict[str, str]:
    """
    Load the label table for a locale.

    Raises:
        FileNotFoundError: If the locale name is invalid or has no label file
        ValueError: If the label file is not a JSON object of strings
    """
    if not _LOCALE_PATTERN.match(locale):
        raise FileNotFoundError(f"Invalid locale name: {locale!r}")

    path = I18N_DIR / f"{locale}.json"
    with path.open("r", encoding="utf-8") as f:
        labels = json.load(f)

    if not isinstance(labels, dict) or not all(isinstance(v, str) for v in labels.values()):
        raise ValueError(f"Label file {path} must map keys to strings")
    return labels


def resolve_locale(locale: str) -> str:
    """Return ``locale`` if it has usable labels, otherwise English."""
    try:
        load_labels(locale)
        return locale
    except (OSError, ValueError) as e:
        logger.warning(f"Could not load language file for {locale!r}, falling back to English: {e}")
        return FALLBACK_LOCALE


def get_labels(locale: str) -> Dict[str, str]:
    """Return labels for ``locale``, falling back to English when unavailable."""
    return load_labels(resolve_locale(locale))
