"""
Validator - runs an ordered list of rules for one field.
"""

import asyncio
import logging
from typing import Any, Hashable, Iterable, List, Optional

from .errors import AsyncRuleError, FormValidationException, ValidationError
from .rules.base import BaseRule, RuleFailure
from .validation import Validation

logger = logging.getLogger(__name__)


class Validator:
    """
    Ordered rules bound to a single field.

    Errors in the returned Validation follow rule declaration order, whatever
    order asynchronous rules happen to finish in.

    Example:
        validator = (
            Validator("username")
            .rule(Required())
            .rule(Length(min=3, max=20))
        )
        result = validator.validate("ab")
    """

    def __init__(self, field: Hashable, rules: Optional[Iterable[BaseRule]] = None):
        """
        Args:
            field: Identifier of the field this validator checks
            rules: Initial rules, in evaluation order
        """
        self.field = field
        self.rules: List[BaseRule] = list(rules or [])

    def rule(self, rule: BaseRule) -> "Validator":
        """Append a rule and return self for chaining."""
        self.rules.append(rule)
        return self

    @property
    def is_async(self) -> bool:
        """True when at least one rule must be awaited."""
        return any(rule.is_async for rule in self.rules)

    def validate(self, value: Any) -> Validation:
        """
        Run every rule against a value.

        Args:
            value: The field's current value

        Returns:
            Validation holding this field's errors (empty when all rules pass)

        Raises:
            TypeError: If any rule is asynchronous; use validate_async()
        """
        if self.is_async:
            raise TypeError(
                f"Validator for {self.field!r} has asynchronous rules; use validate_async()"
            )
        results = [self._bind(rule.evaluate(value)) for rule in self.rules]
        validation = Validation.concat(results)
        logger.debug(
            "Field validated",
            extra={'field': self.field, 'rules': len(self.rules), 'errors': len(validation)}
        )
        return validation

    async def validate_async(self, value: Any) -> Validation:
        """
        Run synchronous and asynchronous rules against a value.

        Asynchronous rules are awaited together. Nothing is returned until all
        of them have finished, and the merged result is assembled in rule
        declaration order.

        Args:
            value: The field's current value

        Returns:
            Validation holding this field's errors

        Raises:
            AsyncRuleError: If an asynchronous rule fails to complete
        """
        outcomes = await asyncio.gather(
            *(self._evaluate(rule, value) for rule in self.rules),
            return_exceptions=True,
        )

        results = []
        for rule, outcome in zip(self.rules, outcomes):
            if isinstance(outcome, BaseException):
                raise self._rule_fault(rule, outcome)
            results.append(self._bind(outcome))

        validation = Validation.concat(results)
        logger.debug(
            "Field validated",
            extra={'field': self.field, 'rules': len(self.rules), 'errors': len(validation)}
        )
        return validation

    async def _evaluate(self, rule: BaseRule, value: Any) -> Iterable[RuleFailure]:
        if rule.is_async:
            return await rule.evaluate(value)
        return list(rule.evaluate(value))

    def _rule_fault(self, rule: BaseRule, exc: BaseException) -> BaseException:
        """Attach field context to a fault raised by an asynchronous rule."""
        if not rule.is_async or not isinstance(exc, Exception):
            return exc
        if isinstance(exc, AsyncRuleError):
            if exc.field is None:
                exc.field = self.field
            if exc.rule_id is None:
                exc.rule_id = rule.get_id()
            return exc
        if isinstance(exc, FormValidationException):
            return exc
        logger.error(
            "Asynchronous rule failed",
            extra={'field': self.field, 'rule_id': rule.get_id(), 'error': str(exc)}
        )
        fault = AsyncRuleError(
            f"Rule {rule.get_id()} for {self.field!r} failed: {type(exc).__name__}: {exc}",
            field=self.field,
            rule_id=rule.get_id(),
        )
        fault.__cause__ = exc
        return fault

    def _bind(self, failures: Iterable[RuleFailure]) -> Validation:
        """Turn a rule's failures into errors for this validator's field."""
        return Validation.concat(
            Validation.with_error(ValidationError(self.field, f.message_key, f.params))
            for f in failures
        )

    def __eq__(self, other):
        if not isinstance(other, Validator):
            return NotImplemented
        return self.field == other.field and [r.get_id() for r in self.rules] == [
            r.get_id() for r in other.rules
        ]

    def __repr__(self):
        return f"Validator(field={self.field!r}, rules={self.rules!r})"
