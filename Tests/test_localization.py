import pytest

from argus_intel.core.localization import (
    SUPPORTED_LANGUAGES,
    Localizer,
    load_translations,
)


def _flatten(tree, prefix=""):
    keys = set()
    for key, value in tree.items():
        path = f"{prefix}{key}"
        if isinstance(value, dict):
            keys |= _flatten(value, f"{path}.")
        else:
            keys.add(path)
    return keys


def test_languages_share_the_same_keys():
    translations = load_translations()
    assert set(translations) == set(SUPPORTED_LANGUAGES)
    assert _flatten(translations["fr"]) == _flatten(translations["en"])


def test_lookup_dotted_key():
    t = Localizer("en")
    assert t.text("whois.registrar") == "Registrar"
    assert t.text("errors.title") == "Error"
    t.set_language("fr")
    assert t.text("errors.title") == "Erreur"
    assert t.text("fira.reliabilityLevels.High") == "Élevée"


def test_lookup_missing_key_returns_key():
    t = Localizer("en")
    assert t.lookup("whois.unknown") == "whois.unknown"
    assert t.lookup("nothing.here.at.all") == "nothing.here.at.all"


def test_lookup_subtree():
    t = Localizer("en")
    levels = t.lookup("fira.reliabilityLevels")
    assert levels == {"High": "High", "Medium": "Medium", "Low": "Low"}
    assert t.text("fira.reliabilityLevels") == "fira.reliabilityLevels"


def test_toggle():
    t = Localizer("fr")
    assert t.toggle() == "en"
    assert t.language == "en"
    assert t.toggle() == "fr"


def test_unsupported_language():
    with pytest.raises(ValueError, match="Unsupported language 'de'"):
        Localizer("de")
    t = Localizer("en")
    with pytest.raises(ValueError):
        t.set_language("es")
    assert t.language == "en"


def test_injected_translations():
    t = Localizer("en", translations={"fr": {}, "en": {"greeting": "Hello"}})
    assert t.text("greeting") == "Hello"


def test_missing_translation_directory(tmp_path):
    assert load_translations(tmp_path) == {"fr": {}, "en": {}}
