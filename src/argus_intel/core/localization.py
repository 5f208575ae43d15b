"""
Localization for the dashboard and the CLI.

Translations live in ``argus_intel/locales/<language>.yaml``. A ``Localizer``
is created explicitly (default language from ``config.yaml``) and passed to
whatever needs user-facing text.
"""

import logging
import pathlib
from typing import Any, Dict, Optional, Union

import yaml

from .config_loader import CONFIG

logger = logging.getLogger(__name__)

LOCALES_DIR = pathlib.Path(__file__).resolve().parent.parent / "locales"
SUPPORTED_LANGUAGES = ("fr", "en")

TranslationTree = Dict[str, Any]


def load_translations(
    directory: pathlib.Path = LOCALES_DIR,
) -> Dict[str, TranslationTree]:
    """Loads one translation tree per supported language."""
    translations: Dict[str, TranslationTree] = {}
    for language in SUPPORTED_LANGUAGES:
        path = directory / f"{language}.yaml"
        try:
            with open(path, "r", encoding="utf-8") as f:
                translations[language] = yaml.safe_load(f) or {}
        except FileNotFoundError:
            logger.warning("Translation file %s not found.", path)
            translations[language] = {}
    return translations


class Localizer:
    """Looks up user-facing strings by dotted key in the active language."""

    def __init__(
        self,
        language: Optional[str] = None,
        translations: Optional[Dict[str, TranslationTree]] = None,
    ):
        self.translations = (
            translations if translations is not None else load_translations()
        )
        self._language = "fr"
        self.set_language(language or CONFIG.dashboard.default_language)

    @property
    def language(self) -> str:
        return self._language

    def set_language(self, language: str) -> None:
        if language not in SUPPORTED_LANGUAGES:
            raise ValueError(
                f"Unsupported language '{language}'. "
                f"Choose one of: {', '.join(SUPPORTED_LANGUAGES)}."
            )
        self._language = language

    def toggle(self) -> str:
        """Switches between French and English and returns the new language."""
        self.set_language("en" if self._language == "fr" else "fr")
        return self._language

    def lookup(self, key: str) -> Union[str, TranslationTree]:
        """
        Resolves a dotted key such as ``whois.registrar``.

        Returns:
            The string or subtree found, or ``key`` itself if any segment is missing.
        """
        node: Any = self.translations.get(self._language, {})
        for part in key.split("."):
            if isinstance(node, dict) and part in node:
                node = node[part]
            else:
                return key
        return node

    def text(self, key: str) -> str:
        """Like ``lookup`` but always returns a string."""
        value = self.lookup(key)
        return value if isinstance(value, str) else key
