"""
FormValidator - validates a whole form, or one field of it.

This is the "front door" of the library: it owns one Validator per field and
merges their results into a single form-wide Validation.
"""

import asyncio
import logging
from typing import Any, Dict, Hashable, Iterable, List, Mapping, Optional

from .config_loader import ConfigLoader
from .errors import MissingFieldValueError
from .rule_loader import RuleLoader
from .validation import Validation
from .validator import Validator

logger = logging.getLogger(__name__)


class FormValidator:
    """
    Maps field identifiers to their validators.

    Fields without a validator are never a source of errors. Every validated
    field must be given a value in validate_all(); pass None (or "") for an
    empty field rather than leaving it out.

    Example:
        form = FormValidator([
            Validator("name").rule(Required()),
            Validator("password").rule(Length(min=8)),
        ])

        state = form.validate_all({"name": "", "password": "hunter2"})

        # Later, when only the password changes:
        state = state.update_field(
            "password", form.validate_field("password", "correct horse")
        )

    Not thread-safe: callers sharing one instance across threads must
    serialize validate and add/remove calls themselves.
    """

    def __init__(self, validators: Optional[Iterable[Validator]] = None, name: Optional[str] = None):
        """
        Args:
            validators: Initial validators; one per field
            name: Optional form name (used in logs)
        """
        self.name = name
        self._validators: Dict[Hashable, Validator] = {}
        for validator in validators or []:
            self.add_validator(validator)

    @classmethod
    def from_config(cls, uri: str, rule_loader: Optional[RuleLoader] = None, **loader_kwargs) -> "FormValidator":
        """
        Build a form from a YAML form definition.

        Args:
            uri: Path or URI of the definition (see ConfigLoader)
            rule_loader: Loader to use, e.g. one with extra registered rule
                types; it is not modified, so one loader can build many
                forms. The definition's remote_checks override the
                loader's own remote defaults for this form only.
            **loader_kwargs: Passed to ConfigLoader (cache_dir, use_cache)

        Raises:
            ConfigError: If the definition or any rule in it is invalid
        """
        config_loader = ConfigLoader(uri, **loader_kwargs)
        if rule_loader is None:
            rule_loader = RuleLoader()
        remote_defaults = config_loader.get_remote_checks_config()

        validators = [
            rule_loader.load_validator(field, rule_configs, remote_defaults=remote_defaults)
            for field, rule_configs in config_loader.get_fields().items()
        ]
        form = cls(validators, name=config_loader.get_form_name())
        logger.info(
            "Form built from definition",
            extra={'form': form.name, 'uri': uri, 'fields': form.fields}
        )
        return form

    @property
    def fields(self) -> List[Hashable]:
        """Validated fields, in the order their validators were added."""
        return list(self._validators)

    @property
    def is_async(self) -> bool:
        return any(v.is_async for v in self._validators.values())

    def add_validator(self, validator: Validator) -> None:
        """Set the validator for validator.field, replacing any existing one."""
        self._validators[validator.field] = validator

    def remove_validator(self, field: Hashable) -> Optional[Validator]:
        """Stop validating a field. Returns the removed validator, if any."""
        return self._validators.pop(field, None)

    def validator_for(self, field: Hashable) -> Optional[Validator]:
        return self._validators.get(field)

    def validate_all(self, values: Mapping[Hashable, Any]) -> Validation:
        """
        Validate every field that has a validator.

        Args:
            values: field -> current value; must contain every validated field

        Returns:
            Form-wide Validation, fields in validator order

        Raises:
            MissingFieldValueError: If a validated field has no value
            TypeError: If any validator has asynchronous rules
        """
        results = [
            validator.validate(self._value_for(values, field))
            for field, validator in self._validators.items()
        ]
        return self._finish(Validation.concat(results))

    async def validate_all_async(self, values: Mapping[Hashable, Any]) -> Validation:
        """
        Validate every field, awaiting asynchronous rules.

        All fields are checked concurrently; the result is still ordered by
        validator order, and nothing is returned until every field is done.

        Raises:
            MissingFieldValueError: If a validated field has no value
            AsyncRuleError: If an asynchronous rule fails to complete
        """
        field_values = [
            (validator, self._value_for(values, field))
            for field, validator in self._validators.items()
        ]
        results = await asyncio.gather(
            *(validator.validate_async(value) for validator, value in field_values),
            return_exceptions=True,
        )
        for result in results:
            if isinstance(result, BaseException):
                raise result
        return self._finish(Validation.concat(results))

    def validate_field(self, field: Hashable, value: Any) -> Validation:
        """
        Validate a single field.

        Returns an empty Validation for fields without a validator. To fold the
        result into a stored form-wide Validation, use
        stored.remove_errors_for(field).merge(result), or stored.update_field().
        """
        validator = self._validators.get(field)
        if validator is None:
            return Validation.empty()
        return validator.validate(value)

    async def validate_field_async(self, field: Hashable, value: Any) -> Validation:
        """Validate a single field, awaiting asynchronous rules."""
        validator = self._validators.get(field)
        if validator is None:
            return Validation.empty()
        return await validator.validate_async(value)

    def _value_for(self, values: Mapping[Hashable, Any], field: Hashable) -> Any:
        try:
            return values[field]
        except KeyError:
            raise MissingFieldValueError(field) from None

    def _finish(self, validation: Validation) -> Validation:
        logger.debug(
            "Form validated",
            extra={'form': self.name, 'valid': validation.is_valid(), 'invalid_fields': validation.fields()}
        )
        return validation
