"""
Error records and exception types.

A ValidationError is *data*: the structured record of one failed check, handed
to whatever renders the form. The exception classes below are for faults only
(bad configuration, caller misuse, a broken asynchronous check); a failing
check never raises.
"""

import uuid
from types import MappingProxyType
from typing import Any, Dict, Hashable, Mapping, Optional


class ValidationError:
    """
    One failed check for one field.

    The message key is resolved to display text by the presentation layer;
    params carry the values to interpolate (e.g. the configured minimum).
    Every instance gets its own uuid so UI layers can key, animate and remove
    individual error displays, even when two errors have identical content.
    """

    __slots__ = ("_field", "_message_key", "_params", "_uuid")

    def __init__(
        self,
        field: Hashable,
        message_key: str,
        params: Optional[Mapping[str, Any]] = None,
    ):
        """
        Args:
            field: Identifier of the field that produced the error
            message_key: Key naming the kind of error (e.g. "min_length")
            params: Values for message interpolation (e.g. {"min": 3})
        """
        self._field = field
        self._message_key = message_key
        self._params = MappingProxyType(dict(params or {}))
        self._uuid = uuid.uuid4()

    @property
    def field(self) -> Hashable:
        return self._field

    @property
    def message_key(self) -> str:
        return self._message_key

    @property
    def params(self) -> Mapping[str, Any]:
        return self._params

    @property
    def uuid(self) -> uuid.UUID:
        return self._uuid

    def to_dict(self) -> Dict[str, Any]:
        """Return a plain dict suitable for handing to a rendering layer."""
        return {
            "field": self._field,
            "message_key": self._message_key,
            "params": dict(self._params),
            "uuid": str(self._uuid),
        }

    def __eq__(self, other):
        if not isinstance(other, ValidationError):
            return NotImplemented
        return self._uuid == other._uuid

    def __hash__(self):
        return hash(self._uuid)

    def __repr__(self):
        return (
            f"ValidationError(field={self._field!r}, "
            f"message_key={self._message_key!r}, params={dict(self._params)!r}, "
            f"uuid={self._uuid})"
        )


class FormValidationException(Exception):
    """Base class for every fault raised by form_validation."""


class RuleConfigurationError(FormValidationException, ValueError):
    """A rule was built with malformed parameters (e.g. min greater than max)."""


class ConfigError(FormValidationException, ValueError):
    """A form definition could not be loaded or does not match its schema."""


class MissingFieldValueError(FormValidationException, KeyError):
    """A field with a configured validator was given no value."""

    def __init__(self, field: Hashable):
        super().__init__(field)
        self.field = field

    def __str__(self):
        return f"No value supplied for validated field {self.field!r}"


class AsyncRuleError(FormValidationException, RuntimeError):
    """
    An asynchronous check could not be completed.

    This is a fault in the collaborator behind the rule (network error, bad
    response), not a validation failure. It is never turned into "valid";
    the host decides whether to retry, block submission or show a notice.
    """

    def __init__(self, message: str, field: Hashable = None, rule_id: Optional[str] = None):
        super().__init__(message)
        self.field = field
        self.rule_id = rule_id
