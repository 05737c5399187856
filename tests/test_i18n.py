from __future__ import annotations

import pytest

from account_registry.i18n import MessageCatalog


@pytest.fixture(scope="module")
def catalog() -> MessageCatalog:
    return MessageCatalog(
        {
            "en": {"GREETING": {"HELLO": "Hello"}, "ONLY_EN": "English only"},
            "de": {"GREETING": {"HELLO": "Hallo"}},
        },
        default_locale="en",
    )


def test_translate_resolves_dotted_keys(catalog):
    assert catalog.translate("GREETING.HELLO", "de") == "Hallo"
    assert catalog.translate("GREETING.HELLO", "en") == "Hello"


def test_translate_falls_back_to_default_locale_then_key(catalog):
    assert catalog.translate("ONLY_EN", "de") == "English only"
    assert catalog.translate("GREETING.HELLO", "fr") == "Hello"
    assert catalog.translate("MISSING.KEY", "de") == "MISSING.KEY"


@pytest.mark.parametrize(
    ("kwargs", "expected"),
    [
        ({}, "en"),
        ({"accept_language": "de-CH"}, "de"),
        ({"accept_language": "fr, de;q=0.8, en;q=0.9"}, "en"),
        ({"accept_language": "fr;q=1, *;q=0.1"}, "en"),
        ({"accept_language": "de;q=0, en"}, "en"),
        ({"cookie": "de", "accept_language": "en"}, "de"),
        ({"query": "en", "cookie": "de"}, "en"),
        ({"query": "xx", "cookie": "DE"}, "de"),
    ],
)
def test_negotiate(catalog, kwargs, expected):
    assert catalog.negotiate(**kwargs) == expected


def test_default_locale_must_have_a_table():
    with pytest.raises(ValueError):
        MessageCatalog({"de": {}}, default_locale="en")


def test_shipped_tables_share_the_same_keys():
    shipped = MessageCatalog.from_directory(["en", "de"], "en")

    for key in (
        "DEFAULT_ERRORS.TEMPORARILY_UNAVAILABLE",
        "DEFAULT_ERRORS.SERVER_ERROR",
        "VAL_ERRORS.USR_ACC_NEW_EMAIL_EXISTS",
    ):
        assert shipped.translate(key, "en") != shipped.translate(key, "de")
