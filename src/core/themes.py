"""Profile theme catalog and legacy alias normalization."""

import logging

logger = logging.getLogger(__name__)

AVAILABLE_THEMES: tuple[str, ...] = ("blossom", "terracota", "dark-basic")

# "default" and "automatic" mean no stored preference
AUTOMATIC_THEME_VALUES = frozenset({"default", "automatic"})

LEGACY_THEME_ALIASES: dict[str, str] = {
    "blossom": "blossom",
    "tamara": "blossom",
    "theme-blossom": "blossom",
    "dark": "terracota",
    "terracota": "terracota",
    "terracotta": "terracota",
    "carlos": "terracota",
    "theme-dark": "terracota",
    "theme-terracota": "terracota",
    "dark-basic": "dark-basic",
    "darkbasic": "dark-basic",
    "theme-dark-basic": "dark-basic",
}


class UnknownThemeError(ValueError):
    """Raised when a theme name matches neither the catalog nor a legacy alias."""


def normalize_theme_name(raw_theme: str | None) -> str | None:
    """Map a stored or client-supplied theme name to the current catalog.

    Args:
        raw_theme: Theme as sent by a client or read from the profiles table.

    Returns:
        str | None: Catalog theme name, or None for the automatic theme.

    Raises:
        UnknownThemeError: If the value is not recognized.
    """
    if raw_theme is None:
        return None

    cleaned = raw_theme.strip().lower()
    if not cleaned or cleaned in AUTOMATIC_THEME_VALUES:
        return None

    mapped = LEGACY_THEME_ALIASES.get(cleaned)
    if mapped is None:
        logger.warning("Unknown theme name: %s", raw_theme)
        raise UnknownThemeError(f"Unknown theme '{raw_theme}'")

    return mapped
