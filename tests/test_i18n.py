"""Unit tests for translated labels."""

from ulwila.i18n import SUPPORTED_LANGUAGES, display_title, translations


def test_supported_languages() -> None:
    assert SUPPORTED_LANGUAGES == ("en", "hu")


def test_english_labels() -> None:
    labels = translations("en")
    assert labels.untitled_score == "Untitled Score"
    assert labels.durations["eighth"] == "Eighth"
    assert labels.note_labels["H"] == "H (Si)"


def test_hungarian_labels() -> None:
    labels = translations("hu")
    assert labels.untitled_score == "Névtelen kotta"
    assert labels.octaves["upper"] == "Magas"


def test_region_suffix_and_case_are_ignored() -> None:
    assert translations("HU-hu") is translations("hu")


def test_unknown_language_falls_back_to_english() -> None:
    assert translations("de") is translations("en")
    assert translations(None) is translations("en")


def test_every_bundle_covers_all_keys() -> None:
    english = translations("en")
    for code in SUPPORTED_LANGUAGES:
        labels = translations(code)
        assert labels.durations.keys() == english.durations.keys()
        assert labels.octaves.keys() == english.octaves.keys()
        assert labels.note_labels.keys() == english.note_labels.keys()


def test_display_title_uses_placeholder_for_blank() -> None:
    assert display_title("  ", "hu") == "Névtelen kotta"
    assert display_title("", "en") == "Untitled Score"
    assert display_title(" Song ", "en") == "Song"
