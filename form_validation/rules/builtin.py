"""
Built-in rules.

Each rule reports exactly one failure when its check does not hold, carrying
the configured bound, pattern or choices in params for message interpolation.
Configuration problems are raised from the constructor as
RuleConfigurationError; evaluate() itself never raises for a failing check.

Except for Required, rules let None through: pair them with Required to make
a field mandatory.
"""

import re
from collections.abc import Sized
from typing import Any, Awaitable, Callable, Iterable, List, Mapping, Optional

from ..errors import RuleConfigurationError
from .base import AsyncRule, Rule, RuleFailure


def _check_bounds(low, high, name: str):
    if low is None and high is None:
        raise RuleConfigurationError(f"{name} rule needs at least one of min or max")
    if low is not None and high is not None and low > high:
        raise RuleConfigurationError(
            f"{name} rule has min ({low}) greater than max ({high})"
        )


class Required(Rule):
    """Value must be present: not None, not blank text, not an empty collection."""

    default_message_key = "required"

    def description(self) -> str:
        return "Value is required"

    def evaluate(self, value: Any) -> Iterable[RuleFailure]:
        if value is None:
            return [self.fail()]
        if isinstance(value, str):
            if not value.strip():
                return [self.fail()]
        elif isinstance(value, Sized) and len(value) == 0:
            return [self.fail()]
        return []


class Length(Rule):
    """
    Length of a string or collection must fall within [min, max].

    Values must support len(); anything else (e.g. an int) is a caller type
    error and raises TypeError from evaluate(). Use Range for numbers.
    """

    def __init__(
        self,
        min: Optional[int] = None,
        max: Optional[int] = None,
        message_key: Optional[str] = None,
        rule_id: Optional[str] = None,
    ):
        _check_bounds(min, max, "Length")
        if (min is not None and min < 0) or (max is not None and max < 0):
            raise RuleConfigurationError("Length rule bounds cannot be negative")
        super().__init__(rule_id=rule_id, message_key=message_key)
        self.min = min
        self.max = max

    def description(self) -> str:
        return f"Length must be between {self.min} and {self.max}"

    def evaluate(self, value: Any) -> Iterable[RuleFailure]:
        if value is None:
            return []
        length = len(value)
        if self.min is not None and length < self.min:
            return [self.fail("min_length", {"min": self.min})]
        if self.max is not None and length > self.max:
            return [self.fail("max_length", {"max": self.max})]
        return []


class Range(Rule):
    """
    Numeric (or otherwise ordered) value must fall within [min, max].

    Values must be comparable with the bounds; a value that is not (e.g. text
    against numeric bounds) raises TypeError from evaluate().
    """

    def __init__(
        self,
        min: Any = None,
        max: Any = None,
        message_key: Optional[str] = None,
        rule_id: Optional[str] = None,
    ):
        _check_bounds(min, max, "Range")
        super().__init__(rule_id=rule_id, message_key=message_key)
        self.min = min
        self.max = max

    def description(self) -> str:
        return f"Value must be between {self.min} and {self.max}"

    def evaluate(self, value: Any) -> Iterable[RuleFailure]:
        if value is None:
            return []
        if self.min is not None and value < self.min:
            return [self.fail("min_value", {"min": self.min})]
        if self.max is not None and value > self.max:
            return [self.fail("max_value", {"max": self.max})]
        return []


class Pattern(Rule):
    """
    Text must match a regular expression.

    The pattern is applied with re.search, so anchor it (^...$) to require a
    full match. Non-string values are converted with str() first.
    """

    default_message_key = "pattern_mismatch"

    def __init__(
        self,
        pattern: str,
        message_key: Optional[str] = None,
        rule_id: Optional[str] = None,
        flags: int = 0,
    ):
        if not pattern:
            raise RuleConfigurationError("Pattern rule needs a non-empty pattern")
        try:
            self._regex = re.compile(pattern, flags)
        except re.error as e:
            raise RuleConfigurationError(f"Invalid pattern {pattern!r}: {e}") from e
        super().__init__(rule_id=rule_id, message_key=message_key)
        self.pattern = pattern

    def description(self) -> str:
        return f"Value must match {self.pattern}"

    def evaluate(self, value: Any) -> Iterable[RuleFailure]:
        if value is None:
            return []
        if self._regex.search(str(value)) is None:
            return [self.fail(params={"pattern": self.pattern})]
        return []


class OneOf(Rule):
    """Value must be one of a fixed set of choices."""

    default_message_key = "not_one_of"

    def __init__(
        self,
        choices: Iterable[Any],
        message_key: Optional[str] = None,
        rule_id: Optional[str] = None,
    ):
        choices = list(choices)
        if not choices:
            raise RuleConfigurationError("OneOf rule needs at least one choice")
        super().__init__(rule_id=rule_id, message_key=message_key)
        self.choices = tuple(choices)

    def description(self) -> str:
        return f"Value must be one of {list(self.choices)}"

    def evaluate(self, value: Any) -> Iterable[RuleFailure]:
        if value is None or value in self.choices:
            return []
        return [self.fail(params={"choices": list(self.choices)})]


class Predicate(Rule):
    """
    Wraps a caller-supplied check.

    The check receives the value and returns a truthy result when the value is
    acceptable. It must not keep state between calls.
    """

    def __init__(
        self,
        check: Callable[[Any], Any],
        message_key: str,
        params: Optional[Mapping[str, Any]] = None,
        rule_id: Optional[str] = None,
    ):
        if not callable(check):
            raise RuleConfigurationError(f"Predicate check must be callable, got {check!r}")
        if not message_key:
            raise RuleConfigurationError("Predicate rule needs a message_key")
        super().__init__(rule_id=rule_id, message_key=message_key)
        self.check = check
        self.params = dict(params or {})

    def description(self) -> str:
        return getattr(self.check, "__doc__", None) or f"Custom check {self.message_key}"

    def evaluate(self, value: Any) -> Iterable[RuleFailure]:
        if self.check(value):
            return []
        return [self.fail(params=self.params)]


class AsyncPredicate(AsyncRule):
    """Wraps a caller-supplied coroutine function returning truthy when the value passes."""

    def __init__(
        self,
        check: Callable[[Any], Awaitable[Any]],
        message_key: str,
        params: Optional[Mapping[str, Any]] = None,
        rule_id: Optional[str] = None,
    ):
        if not callable(check):
            raise RuleConfigurationError(f"AsyncPredicate check must be callable, got {check!r}")
        if not message_key:
            raise RuleConfigurationError("AsyncPredicate rule needs a message_key")
        super().__init__(rule_id=rule_id, message_key=message_key)
        self.check = check
        self.params = dict(params or {})

    def description(self) -> str:
        return getattr(self.check, "__doc__", None) or f"Custom async check {self.message_key}"

    async def evaluate(self, value: Any) -> List[RuleFailure]:
        if await self.check(value):
            return []
        return [self.fail(params=self.params)]
