"""
Validation - the mergeable result of validating one or more fields.

A Validation maps field identifiers to the ordered errors raised for them.
Results from individual rules, fields and forms are combined with merge(),
which is associative and has Validation.empty() as its identity, so any level
of aggregation can be built from any other without special cases.
"""

from typing import Any, Dict, Hashable, Iterable, Iterator, List, Mapping, Tuple

from .errors import ValidationError


class Validation:
    """
    Immutable mapping of field -> tuple of ValidationError.

    A field that is absent and a field present with no errors are treated
    identically: both are valid, and errors_for() returns an empty tuple for
    either.
    """

    __slots__ = ("_errors",)

    def __init__(self, errors: Mapping[Hashable, Iterable[ValidationError]] = None):
        """
        Args:
            errors: Optional mapping of field -> errors. Fields with no errors
                are dropped so equality does not depend on empty entries.
        """
        normalized: Dict[Hashable, Tuple[ValidationError, ...]] = {}
        for field, field_errors in (errors or {}).items():
            field_errors = tuple(field_errors)
            if field_errors:
                normalized[field] = field_errors
        self._errors = normalized

    @classmethod
    def empty(cls) -> "Validation":
        """Return a Validation with no errors."""
        return cls()

    @classmethod
    def with_error(cls, error: ValidationError) -> "Validation":
        """Return a Validation holding a single error for the error's field."""
        return cls({error.field: (error,)})

    @classmethod
    def concat(cls, validations: Iterable["Validation"]) -> "Validation":
        """
        Merge any number of validations, left to right.

        Args:
            validations: Validations in the order their errors should appear

        Returns:
            The merged Validation (empty if nothing was given)
        """
        result = cls.empty()
        for validation in validations:
            result = result.merge(validation)
        return result

    def merge(self, other: "Validation") -> "Validation":
        """
        Combine two validations.

        Each field's errors are this validation's errors followed by the other
        validation's errors. Fields present on only one side are copied through.

        Args:
            other: Validation to append

        Returns:
            New Validation; neither operand is modified
        """
        if not other._errors:
            return self
        if not self._errors:
            return other

        merged: Dict[Hashable, Tuple[ValidationError, ...]] = dict(self._errors)
        for field, field_errors in other._errors.items():
            merged[field] = merged.get(field, ()) + field_errors
        return Validation(merged)

    def is_valid(self) -> bool:
        """True when no field has any error."""
        return not self._errors

    def errors_for(self, field: Hashable) -> Tuple[ValidationError, ...]:
        """
        Return the errors for a field, in rule evaluation order.

        Unknown fields and valid fields both return an empty tuple.
        """
        return self._errors.get(field, ())

    def remove_errors_for(self, field: Hashable) -> "Validation":
        """Return a copy of this validation with the given field's errors cleared."""
        if field not in self._errors:
            return self
        return Validation({f: e for f, e in self._errors.items() if f != field})

    def update_field(self, field: Hashable, result: "Validation") -> "Validation":
        """
        Replace a field's errors with a freshly computed result.

        Equivalent to remove_errors_for(field).merge(result); this is the idiom
        for re-validating one field of a form without re-running the others.
        """
        return self.remove_errors_for(field).merge(result)

    def fields(self) -> List[Hashable]:
        """Fields that have at least one error, in the order they were first seen."""
        return list(self._errors)

    def to_dict(self) -> Dict[Hashable, List[Dict[str, Any]]]:
        """Return {field: [error dict, ...]} for rendering layers."""
        return {
            field: [error.to_dict() for error in field_errors]
            for field, field_errors in self._errors.items()
        }

    def __iter__(self) -> Iterator[ValidationError]:
        for field_errors in self._errors.values():
            yield from field_errors

    def __len__(self) -> int:
        return sum(len(field_errors) for field_errors in self._errors.values())

    def __eq__(self, other):
        if not isinstance(other, Validation):
            return NotImplemented
        return self._errors == other._errors

    def __repr__(self):
        return f"Validation({self._errors!r})"
