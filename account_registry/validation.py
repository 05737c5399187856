"""Declarative input validation.

A schema maps field names to an ordered list of rules. Each rule is a pure
predicate over the sanitised value (and the whole sanitised record, for
cross-field checks) paired with a message key from the locale tables.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Callable, Mapping

from email_validator import EmailNotValidError, validate_email

from .errors import FieldError, ValidationError
from .i18n import MessageCatalog
from .security.passwords import MAX_PASSWORD_BYTES

Predicate = Callable[[str, Mapping[str, Any]], bool]

_INT_RE = re.compile(r"[-+]?[0-9]+")


@dataclass(frozen=True, slots=True)
class Rule:
    check: Predicate
    message_key: str


@dataclass(frozen=True, slots=True)
class FieldRules:
    """Rules for one field. Optional fields are skipped entirely when absent."""

    rules: tuple[Rule, ...] = ()
    optional: bool = False
    trim: bool = True


def required(message_key: str) -> Rule:
    return Rule(lambda value, _record: value != "", message_key)


def is_int(message_key: str) -> Rule:
    return Rule(lambda value, _record: _INT_RE.fullmatch(value) is not None, message_key)


def is_email(message_key: str) -> Rule:
    def check(value: str, _record: Mapping[str, Any]) -> bool:
        try:
            validate_email(value, check_deliverability=False)
        except EmailNotValidError:
            return False
        return True

    return Rule(check, message_key)


def max_bytes(limit: int, message_key: str) -> Rule:
    return Rule(lambda value, _record: len(value.encode("utf-8")) <= limit, message_key)


def equals_field(other: str, message_key: str) -> Rule:
    """The value must be non-empty and equal to the sanitised value of ``other``."""

    def check(value: str, record: Mapping[str, Any]) -> bool:
        expected = record.get(other)
        return bool(expected) and expected == value

    return Rule(check, message_key)


def _as_text(raw: Any) -> str | None:
    """Render a scalar body value as text; lists, objects and nulls count as absent."""
    if isinstance(raw, str):
        return raw
    if isinstance(raw, bool):
        return "true" if raw else "false"
    if isinstance(raw, float) and raw.is_integer():
        return str(int(raw))
    if isinstance(raw, (int, float)):
        return str(raw)
    return None


class Schema:
    """An ordered field-name to rules mapping evaluated against a plain record."""

    def __init__(self, fields: Mapping[str, FieldRules]) -> None:
        self._fields = dict(fields)

    def sanitize(self, data: Mapping[str, Any]) -> dict[str, str | None]:
        sanitized: dict[str, str | None] = {}
        for name, field_rules in self._fields.items():
            value = _as_text(data.get(name))
            if value is None:
                sanitized[name] = None if field_rules.optional else ""
                continue
            sanitized[name] = value.strip() if field_rules.trim else value
        return sanitized

    def check(self, sanitized: Mapping[str, str | None]) -> list[tuple[str, str]]:
        """Return ``(field, message_key)`` for the first failing rule of each field."""
        failures: list[tuple[str, str]] = []
        for name, field_rules in self._fields.items():
            value = sanitized.get(name)
            if value is None:
                if field_rules.optional:
                    continue
                value = ""
            for rule in field_rules.rules:
                if not rule.check(value, sanitized):
                    failures.append((name, rule.message_key))
                    break
        return failures

    def validate(
        self, data: Mapping[str, Any], messages: MessageCatalog, locale: str
    ) -> dict[str, str | None]:
        """Sanitise and check ``data``; raise ``ValidationError`` listing every failing field."""
        sanitized = self.sanitize(data)
        failures = self.check(sanitized)
        if failures:
            raise ValidationError(
                [FieldError(name, messages.translate(key, locale)) for name, key in failures]
            )
        return sanitized


REGISTRATION_SCHEMA = Schema(
    {
        "first_name": FieldRules((required("VAL_ERRORS.USR_ACC_NEW_MISSING_F_NAME"),)),
        "last_name": FieldRules(optional=True),
        "contact_phone": FieldRules(
            (
                required("VAL_ERRORS.USR_ACC_NEW_MISSING_PHONE"),
                is_int("VAL_ERRORS.USR_ACC_NEW_INVALID_PHONE"),
            )
        ),
        "email": FieldRules(
            (
                required("VAL_ERRORS.USR_ACC_NEW_MISSING_EMAIL"),
                is_email("VAL_ERRORS.USR_ACC_NEW_INVALID_EMAIL"),
            )
        ),
        "password": FieldRules(
            (
                required("VAL_ERRORS.USR_ACC_NEW_MISSING_PWD"),
                max_bytes(MAX_PASSWORD_BYTES, "VAL_ERRORS.USR_ACC_NEW_PWD_TOO_LONG"),
            )
        ),
        "cnf_password": FieldRules(
            (
                required("VAL_ERRORS.USR_ACC_NEW_MISSING_CNF_PWD"),
                equals_field("password", "VAL_ERRORS.USR_ACC_NEW_CNF_PWD_MISMATCH"),
            )
        ),
    }
)
