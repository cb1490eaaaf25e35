"""
Rule Loader - builds rules and validators from form definitions.

Each rule config is a dict with a "type" naming a registered rule class; the
remaining keys are passed to that class as keyword arguments:

    - type: length
      min: 3
      max: 20

Two types import code named by a "module:attribute" path:

- predicate: "function" names a callable taking the value and returning
  truthy when it passes.
- custom: "class" names a Rule/AsyncRule subclass, instantiated with the
  remaining keys.

Imported objects are cached by path.
"""

import importlib
import logging
from typing import Any, Dict, List, Optional, Type

from .errors import ConfigError, RuleConfigurationError
from .rules import (
    BaseRule,
    Length,
    OneOf,
    Pattern,
    Predicate,
    Range,
    RemoteCheck,
    Required,
)
from .validator import Validator

logger = logging.getLogger(__name__)

BUILTIN_RULE_TYPES: Dict[str, Type[BaseRule]] = {
    "required": Required,
    "length": Length,
    "range": Range,
    "pattern": Pattern,
    "one_of": OneOf,
    "predicate": Predicate,
    "remote": RemoteCheck,
}


class RuleLoader:
    """Turns rule configs into rule instances."""

    def __init__(self, remote_checks_config: Optional[Dict[str, Any]] = None):
        """
        Initialize rule loader.

        Args:
            remote_checks_config: Defaults merged into every "remote" rule
                config (e.g. {"timeout_ms": 3000}); explicit keys win
        """
        self.remote_checks_config = dict(remote_checks_config or {})
        self.rule_types: Dict[str, Type[BaseRule]] = dict(BUILTIN_RULE_TYPES)
        self.loaded_objects: Dict[str, Any] = {}  # Cache: "module:attr" -> object

    def register(self, type_name: str, rule_class: Type[BaseRule]) -> None:
        """
        Make a rule class available under a config type name.

        Raises:
            ConfigError: If rule_class is not a rule
        """
        if not (isinstance(rule_class, type) and issubclass(rule_class, BaseRule)):
            raise ConfigError(f"Cannot register {rule_class!r}: not a Rule or AsyncRule subclass")
        self.rule_types[type_name] = rule_class

    def load_validator(
        self,
        field: Any,
        rule_configs: List[Dict[str, Any]],
        remote_defaults: Optional[Dict[str, Any]] = None,
    ) -> Validator:
        """Build the validator for one field from its rule configs."""
        return Validator(field, self.load_rules(rule_configs, remote_defaults=remote_defaults))

    def load_rules(
        self,
        rule_configs: List[Dict[str, Any]],
        remote_defaults: Optional[Dict[str, Any]] = None,
    ) -> List[BaseRule]:
        """
        Load rules from configuration, preserving order.

        Args:
            rule_configs: List of rule config dicts
            remote_defaults: Remote rule defaults for this call only (e.g. a
                form's remote_checks section); they override the loader's
                remote_checks_config, and explicit rule keys override both

        Returns:
            List of instantiated rule objects
        """
        remote_config = {**self.remote_checks_config, **(remote_defaults or {})}
        return [self._load_single_rule(config, remote_config) for config in rule_configs]

    def _load_single_rule(self, config: Dict[str, Any], remote_config: Dict[str, Any]) -> BaseRule:
        """
        Load a single rule.

        Raises:
            ConfigError: If the type is unknown, an import fails, or the rule
                rejects its parameters
        """
        kwargs = dict(config)
        type_name = kwargs.pop("type", None)

        if type_name == "custom":
            rule_class = self._import_object(kwargs.pop("class", None))
            if not (isinstance(rule_class, type) and issubclass(rule_class, BaseRule)):
                raise ConfigError(f"Custom rule class {config.get('class')!r} is not a Rule subclass")
        elif type_name in self.rule_types:
            rule_class = self.rule_types[type_name]
        else:
            raise ConfigError(
                f"Unknown rule type {type_name!r}. "
                f"Known types: {', '.join(sorted(self.rule_types))}, custom"
            )

        if type_name == "predicate":
            kwargs["check"] = self._import_object(kwargs.pop("function", None))
        elif type_name == "remote":
            kwargs = {**remote_config, **kwargs}

        try:
            rule = rule_class(**kwargs)
        except RuleConfigurationError as e:
            raise ConfigError(f"Invalid {type_name} rule {config!r}: {e}") from e
        except TypeError as e:
            raise ConfigError(f"Bad parameters for {type_name} rule {config!r}: {e}") from e

        logger.debug("Rule loaded", extra={'rule_type': type_name, 'rule_id': rule.get_id()})
        return rule

    def _import_object(self, path: Optional[str]) -> Any:
        """
        Import "package.module:attribute".

        Raises:
            ConfigError: If the path is malformed or cannot be imported
        """
        if path in self.loaded_objects:
            return self.loaded_objects[path]

        if not path or ":" not in path:
            raise ConfigError(f"Expected 'module:attribute' import path, got {path!r}")

        module_name, _, attr = path.partition(":")
        try:
            module = importlib.import_module(module_name)
        except ImportError as e:
            raise ConfigError(f"Failed to import {module_name} for {path}: {e}") from e

        obj = module
        for part in attr.split("."):
            if not hasattr(obj, part):
                raise ConfigError(f"'{attr}' not found in module {module_name}")
            obj = getattr(obj, part)

        self.loaded_objects[path] = obj
        return obj
