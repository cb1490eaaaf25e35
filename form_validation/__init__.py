"""
form-validation: composable form field validation

This library provides validation logic that can be shared between client and
server and reused across fields:
- Rules producing structured errors (message key + params), never text
- A mergeable Validation result with per-field error ordering
- Validators for single fields and a FormValidator for whole forms
- Asynchronous rules (e.g. server-side uniqueness checks)
- YAML form definitions checked against a JSON schema

Example:
    from form_validation import FormValidator, Validator, Required, Length

    form = FormValidator([
        Validator("username").rule(Required()).rule(Length(min=3)),
    ])
    result = form.validate_all({"username": "ab"})
    result.errors_for("username")[0].message_key  # "min_length"
"""

from .config_loader import ConfigLoader
from .errors import (
    AsyncRuleError,
    ConfigError,
    FormValidationException,
    MissingFieldValueError,
    RuleConfigurationError,
    ValidationError,
)
from .form import FormValidator
from .rule_loader import RuleLoader
from .rules import (
    AsyncPredicate,
    AsyncRule,
    Length,
    OneOf,
    Pattern,
    Predicate,
    Range,
    RemoteCheck,
    Required,
    Rule,
    RuleFailure,
)
from .validation import Validation
from .validator import Validator

__version__ = "0.1.0"
__all__ = [
    "AsyncPredicate",
    "AsyncRule",
    "AsyncRuleError",
    "ConfigError",
    "ConfigLoader",
    "FormValidationException",
    "FormValidator",
    "Length",
    "MissingFieldValueError",
    "OneOf",
    "Pattern",
    "Predicate",
    "Range",
    "RemoteCheck",
    "Required",
    "Rule",
    "RuleConfigurationError",
    "RuleFailure",
    "RuleLoader",
    "Validation",
    "ValidationError",
    "Validator",
]
