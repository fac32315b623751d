"""Declarative request validation.

A rule list is an ordered sequence of :class:`Rule` descriptors, each pairing
a field name with a predicate and the message reported when the predicate
fails. :func:`evaluate` runs every rule and collects all failures instead of
stopping at the first one, and :func:`validate_body` turns a rule list into a
FastAPI dependency that rejects the request before the route body runs.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Collection, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from email_validator import EmailNotValidError, validate_email
from fastapi import Request

from ..errors import ValidationError

Predicate = Callable[[Any], bool]

_MISSING: Any = object()


@dataclass(frozen=True, slots=True)
class Rule:
    """A single ``(field, predicate, message)`` check."""

    field: str
    check: Predicate
    message: str
    optional: bool = False
    sensitive: bool = False


@dataclass(frozen=True, slots=True)
class FieldError:
    """A failed rule, reported back to the client."""

    field: str
    message: str
    location: str = "body"
    value: Any = _MISSING

    def as_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "field": self.field,
            "message": self.message,
            "location": self.location,
        }
        if self.value is not _MISSING:
            payload["value"] = self.value
        return payload


def is_non_blank(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def is_string_or_null(value: Any) -> bool:
    return value is None or isinstance(value, str)


def is_email(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    try:
        validate_email(value.strip(), check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


def min_length(length: int) -> Predicate:
    def _check(value: Any) -> bool:
        return isinstance(value, str) and len(value) >= length

    return _check


def one_of(choices: Collection[str]) -> Predicate:
    allowed = frozenset(choices)

    def _check(value: Any) -> bool:
        return isinstance(value, str) and value in allowed

    return _check


def evaluate(payload: Any, rules: Sequence[Rule]) -> list[FieldError]:
    """Run every rule against ``payload`` and return all failures in rule order."""
    data: Mapping[str, Any] = payload if isinstance(payload, Mapping) else {}
    errors: list[FieldError] = []
    for rule in rules:
        value = data.get(rule.field, _MISSING)
        if value is _MISSING and rule.optional:
            continue
        try:
            passed = value is not _MISSING and rule.check(value)
        except (TypeError, ValueError):
            passed = False
        if passed:
            continue
        reported = _MISSING if rule.sensitive else value
        errors.append(FieldError(field=rule.field, message=rule.message, value=reported))
    return errors


def validate_body(rules: Sequence[Rule]) -> Callable[[Request], Awaitable[None]]:
    """Build a dependency that evaluates ``rules`` against the JSON request body."""

    async def _dependency(request: Request) -> None:
        try:
            payload = await request.json()
        except ValueError:
            payload = None
        errors = evaluate(payload, rules)
        if errors:
            raise ValidationError(errors=[error.as_dict() for error in errors])

    return _dependency


__all__ = [
    "FieldError",
    "Predicate",
    "Rule",
    "evaluate",
    "is_email",
    "is_non_blank",
    "is_string_or_null",
    "min_length",
    "one_of",
    "validate_body",
]
