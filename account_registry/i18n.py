"""Locale-keyed message tables and request locale negotiation."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

LOCALES_DIR = Path(__file__).resolve().parent / "locales"


class MessageCatalog:
    """Resolve dotted message keys (``VAL_ERRORS.X``) against per-locale tables."""

    def __init__(self, tables: Mapping[str, Mapping[str, Any]], default_locale: str) -> None:
        if default_locale not in tables:
            raise ValueError(f"default locale {default_locale!r} has no message table")
        self._tables = dict(tables)
        self.default_locale = default_locale

    @classmethod
    def from_directory(
        cls,
        locales: Iterable[str],
        default_locale: str,
        directory: Path = LOCALES_DIR,
    ) -> "MessageCatalog":
        """Load ``<locale>.json`` for every configured locale."""
        tables: dict[str, Mapping[str, Any]] = {}
        for locale in locales:
            path = directory / f"{locale}.json"
            with path.open(encoding="utf-8") as handle:
                tables[locale] = json.load(handle)
            logger.debug("loaded message table %s", path)
        return cls(tables, default_locale)

    @property
    def locales(self) -> tuple[str, ...]:
        return tuple(self._tables)

    def translate(self, key: str, locale: str | None = None) -> str:
        """Return the message for ``key``, falling back to the default locale, then the key."""
        for candidate in (locale, self.default_locale):
            if candidate not in self._tables:
                continue
            value = self._lookup(self._tables[candidate], key)
            if isinstance(value, str):
                return value
        logger.warning("missing message key %s for locale %s", key, locale)
        return key

    def negotiate(
        self,
        *,
        query: str | None = None,
        cookie: str | None = None,
        accept_language: str | None = None,
    ) -> str:
        """Pick the request locale: explicit query, then cookie, then ``Accept-Language``."""
        for explicit in (query, cookie):
            match = self._match(explicit)
            if match:
                return match
        for tag in _parse_accept_language(accept_language or ""):
            if tag == "*":
                return self.default_locale
            match = self._match(tag)
            if match:
                return match
        return self.default_locale

    def _match(self, tag: str | None) -> str | None:
        if not tag:
            return None
        tag = tag.strip().lower().replace("_", "-")
        if tag in self._tables:
            return tag
        primary = tag.split("-", 1)[0]
        if primary in self._tables:
            return primary
        return None

    @staticmethod
    def _lookup(table: Mapping[str, Any], key: str) -> Any:
        node: Any = table
        for part in key.split("."):
            if not isinstance(node, Mapping) or part not in node:
                return None
            node = node[part]
        return node


def _parse_accept_language(header: str) -> list[str]:
    weighted: list[tuple[float, str]] = []
    for item in header.split(","):
        tag, _, params = item.strip().partition(";")
        if not tag:
            continue
        quality = 1.0
        params = params.strip()
        if params.startswith("q="):
            try:
                quality = float(params[2:])
            except ValueError:
                quality = 0.0
        if quality > 0:
            weighted.append((quality, tag.strip()))
    # sorted() is stable, so equal weights keep header order
    return [tag for _, tag in sorted(weighted, key=lambda pair: pair[0], reverse=True)]
