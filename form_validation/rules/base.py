"""
Abstract base classes for validation rules.

A rule checks one value and reports failures as RuleFailure records. It does
not know which field it is attached to: the Validator owning the rule binds
the field when it turns each failure into a ValidationError. This lets one
rule instance be shared by many fields and forms.

Rules must be stateless. Nothing a rule computes during evaluate() may be
kept for the next call; the same value must always produce the same failures.
"""

import uuid
from abc import ABC, abstractmethod
from types import MappingProxyType
from typing import Any, Iterable, List, Mapping, NamedTuple, Optional


class RuleFailure(NamedTuple):
    """A failed check, before a field is attached."""

    message_key: str
    params: Mapping[str, Any] = MappingProxyType({})


class BaseRule(ABC):
    """
    Behaviour shared by synchronous and asynchronous rules.

    The rule ID identifies this rule instance (two validators holding the same
    rule IDs in the same order are equal). A random ID is generated when the
    caller does not provide one.
    """

    #: Message key reported on failure unless overridden per instance.
    default_message_key: str = "invalid"

    def __init__(self, rule_id: Optional[str] = None, message_key: Optional[str] = None):
        """
        Args:
            rule_id: Optional stable identifier (e.g. from a form definition)
            message_key: Overrides default_message_key for this instance
        """
        self._rule_id = rule_id or f"{type(self).__name__.lower()}_{uuid.uuid4().hex}"
        self.message_key = message_key

    def get_id(self) -> str:
        """Return the unique rule identifier."""
        return self._rule_id

    def description(self) -> str:
        """Return plain English description of what this rule checks."""
        return type(self).__name__

    def fail(
        self,
        default_key: Optional[str] = None,
        params: Optional[Mapping[str, Any]] = None,
    ) -> RuleFailure:
        """
        Build a failure for this rule.

        The instance's message_key wins over default_key, which wins over the
        class default_message_key. Params are copied, so any parameter names
        are allowed.
        """
        key = self.message_key or default_key or self.default_message_key
        return RuleFailure(key, MappingProxyType(dict(params or {})))

    def __repr__(self):
        return f"{type(self).__name__}(rule_id={self._rule_id!r})"


class Rule(BaseRule):
    """A synchronous rule."""

    is_async = False

    @abstractmethod
    def evaluate(self, value: Any) -> Iterable[RuleFailure]:
        """
        Check a value.

        Args:
            value: The field's current value

        Returns:
            Zero or more failures. An empty result means the value passed.
        """


class AsyncRule(BaseRule):
    """
    A rule whose check needs an external collaborator (a server round-trip,
    a worker). Its result is only available after awaiting.
    """

    is_async = True

    @abstractmethod
    async def evaluate(self, value: Any) -> List[RuleFailure]:
        """
        Check a value.

        Args:
            value: The field's current value

        Returns:
            Zero or more failures. Faults in the collaborator must be raised,
            not reported as an empty result.
        """
