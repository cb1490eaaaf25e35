"""
Tests for Validation and ValidationError

Covers the merge monoid laws, per-field queries and error identity.
"""
import pytest
from form_validation import Validation, ValidationError


@pytest.fixture
def a():
    """Validation with errors on two fields."""
    return Validation.concat([
        Validation.with_error(ValidationError("name", "required")),
        Validation.with_error(ValidationError("email", "pattern_mismatch", {"pattern": "@"})),
    ])


@pytest.fixture
def b():
    """Validation overlapping a on one field."""
    return Validation.concat([
        Validation.with_error(ValidationError("email", "email_taken")),
        Validation.with_error(ValidationError("age", "min_value", {"min": 18})),
    ])


@pytest.fixture
def c():
    """Validation with a second error on name."""
    return Validation.with_error(ValidationError("name", "min_length", {"min": 2}))


class TestValidationError:
    """Test ValidationError records."""

    def test_exposes_attributes(self):
        """Test that all constructor arguments are readable."""
        error = ValidationError("age", "min_value", {"min": 18})
        assert error.field == "age"
        assert error.message_key == "min_value"
        assert error.params == {"min": 18}

    def test_params_default_empty(self):
        """Test that params default to an empty mapping."""
        assert dict(ValidationError("age", "required").params) == {}

    def test_identical_errors_have_distinct_uuids(self):
        """Test that two errors with identical content are distinct instances."""
        first = ValidationError("name", "required", {"x": 1})
        second = ValidationError("name", "required", {"x": 1})
        assert first.uuid != second.uuid
        assert first != second

    def test_params_are_read_only(self):
        """Test that params cannot be changed after construction."""
        source = {"min": 3}
        error = ValidationError("name", "min_length", source)
        source["min"] = 99
        assert error.params["min"] == 3
        with pytest.raises(TypeError):
            error.params["min"] = 5

    def test_attributes_are_read_only(self):
        """Test that attributes cannot be reassigned."""
        error = ValidationError("name", "required")
        with pytest.raises(AttributeError):
            error.message_key = "other"

    def test_to_dict(self):
        """Test plain dict form for rendering layers."""
        error = ValidationError("name", "min_length", {"min": 3})
        assert error.to_dict() == {
            "field": "name",
            "message_key": "min_length",
            "params": {"min": 3},
            "uuid": str(error.uuid),
        }

    def test_any_hashable_field(self):
        """Test that non-string field identifiers are accepted."""
        error = ValidationError(("address", 0), "required")
        validation = Validation.with_error(error)
        assert validation.errors_for(("address", 0)) == (error,)


class TestMerge:
    """Test merge() and its monoid laws."""

    def test_associative(self, a, b, c):
        """Test (a + b) + c == a + (b + c)."""
        assert a.merge(b).merge(c) == a.merge(b.merge(c))

    def test_empty_is_identity(self, a):
        """Test that empty() is a left and right identity."""
        assert a.merge(Validation.empty()) == a
        assert Validation.empty().merge(a) == a

    def test_left_errors_first(self, a, b):
        """Test that the left operand's errors come first within a field."""
        merged = a.merge(b)
        keys = [e.message_key for e in merged.errors_for("email")]
        assert keys == ["pattern_mismatch", "email_taken"]

    def test_one_sided_fields_copied(self, a, b):
        """Test that fields present on one side only are copied through."""
        merged = a.merge(b)
        assert merged.errors_for("name") == a.errors_for("name")
        assert merged.errors_for("age") == b.errors_for("age")

    def test_operands_unchanged(self, a, b):
        """Test that merge does not modify either operand."""
        before_a, before_b = len(a), len(b)
        a.merge(b)
        assert len(a) == before_a
        assert len(b) == before_b

    def test_concat_empty(self):
        """Test that concatenating nothing gives an empty Validation."""
        assert Validation.concat([]) == Validation.empty()

    def test_concat_counts(self):
        """Test concat over several results, as when joining rule outputs."""
        result = Validation.concat([
            Validation.empty(),
            Validation.with_error(ValidationError("field1", "TEST_ERROR1")),
            Validation.with_error(ValidationError("field1", "TEST_ERROR2")),
            Validation.with_error(ValidationError("field2", "TEST_ERROR1")),
        ])
        assert len(result) == 3
        assert len(result.errors_for("field1")) == 2
        assert len(result.errors_for("field2")) == 1


class TestQueries:
    """Test is_valid(), errors_for(), fields() and iteration."""

    def test_empty_is_valid(self):
        """Test that an empty Validation is valid."""
        assert Validation.empty().is_valid()

    def test_with_error_is_invalid(self):
        """Test that a Validation with an error is not valid."""
        assert not Validation.with_error(ValidationError("x", "required")).is_valid()

    def test_empty_entries_are_valid(self):
        """Test that a field present with no errors counts as valid."""
        validation = Validation({"name": []})
        assert validation.is_valid()
        assert validation == Validation.empty()

    def test_errors_for_unknown_field(self, a):
        """Test that unknown fields report no errors rather than failing."""
        assert a.errors_for("nonexistent") == ()

    def test_fields_in_first_seen_order(self, a, b):
        """Test that fields() lists invalid fields in order of appearance."""
        assert a.merge(b).fields() == ["name", "email", "age"]

    def test_iteration_yields_all_errors(self, a, b):
        """Test that iterating yields every error."""
        merged = a.merge(b)
        assert len(list(merged)) == len(merged) == 4

    def test_to_dict(self, a):
        """Test nested dict form."""
        as_dict = a.to_dict()
        assert set(as_dict) == {"name", "email"}
        assert as_dict["email"][0]["params"] == {"pattern": "@"}


class TestRemoveErrors:
    """Test remove_errors_for() and update_field()."""

    def test_clears_only_that_field(self, a, b):
        """Test that other fields' errors are unchanged after removal."""
        merged = a.merge(b)
        removed = merged.remove_errors_for("email")
        assert removed.errors_for("email") == ()
        assert removed.errors_for("name") == merged.errors_for("name")
        assert removed.errors_for("age") == merged.errors_for("age")

    def test_remove_unknown_field(self, a):
        """Test that removing an unknown field changes nothing."""
        assert a.remove_errors_for("nonexistent") == a

    def test_original_unchanged(self, a):
        """Test that removal returns a new Validation."""
        a.remove_errors_for("name")
        assert len(a.errors_for("name")) == 1

    def test_update_field(self, a):
        """Test replacing one field's errors with a new result."""
        new_error = ValidationError("name", "min_length", {"min": 2})
        updated = a.update_field("name", Validation.with_error(new_error))
        assert updated.errors_for("name") == (new_error,)
        assert updated.errors_for("email") == a.errors_for("email")

    def test_update_field_with_valid_result(self, a):
        """Test that a valid result clears the field."""
        updated = a.update_field("name", Validation.empty())
        assert updated.errors_for("name") == ()
        assert updated.fields() == ["email"]
