"""Validation rules: base classes and built-in checks."""

from .base import AsyncRule, BaseRule, Rule, RuleFailure
from .builtin import (
    AsyncPredicate,
    Length,
    OneOf,
    Pattern,
    Predicate,
    Range,
    Required,
)
from .remote import RemoteCheck

__all__ = [
    "AsyncPredicate",
    "AsyncRule",
    "BaseRule",
    "Length",
    "OneOf",
    "Pattern",
    "Predicate",
    "Range",
    "RemoteCheck",
    "Required",
    "Rule",
    "RuleFailure",
]
