"""Unit tests for the field schema compiler."""

import math

from dynform.model.field import FieldDescriptor, FieldKind
from dynform.model.schema import coerce_number, coerce_values, compile_schema, validate_values
from dynform.model.visibility import CONTACT_METHOD_FIELD


class TestCompileSchema:
    """Tests for compile_schema."""

    def test_one_rule_per_descriptor(self, sample_fields):
        schema = compile_schema(sample_fields)
        assert list(schema) == [d.name for d in sample_fields]

    def test_empty_and_none_give_empty_mapping(self):
        assert compile_schema([]) == {}
        assert compile_schema(None) == {}

    def test_compilation_is_repeatable(self, sample_fields):
        first = compile_schema(sample_fields)
        second = compile_schema(sample_fields)
        assert [r.kind for r in first.values()] == [r.kind for r in second.values()]

    def test_unsupported_descriptor_still_gets_rule(self):
        schema = compile_schema([FieldDescriptor("d", "Date", "date", "DatePicker")])
        assert schema["d"].kind is FieldKind.UNSUPPORTED
        assert schema["d"].check("anything") is None


class TestTextRule:
    """Tests for text field validation."""

    def test_empty_string_uses_label_message(self, sample_fields):
        rule = compile_schema(sample_fields)["name_8066616423"]
        assert rule.check("") == "Name is required"

    def test_non_empty_passes(self, sample_fields):
        rule = compile_schema(sample_fields)["name_8066616423"]
        assert rule.check("Ada") is None


class TestNumberRule:
    """Tests for number field validation and coercion."""

    def test_negative_fails(self, sample_fields):
        rule = compile_schema(sample_fields)["age_12345"]
        assert rule.check(rule.coerce("-1")) is not None

    def test_zero_and_positive_pass(self, sample_fields):
        rule = compile_schema(sample_fields)["age_12345"]
        assert rule.check(rule.coerce("0")) is None
        assert rule.check(rule.coerce("42")) is None

    def test_non_numeric_fails(self, sample_fields):
        rule = compile_schema(sample_fields)["age_12345"]
        value = rule.coerce("abc")
        assert math.isnan(value)
        assert rule.check(value) is not None

    def test_infinity_fails(self, sample_fields):
        rule = compile_schema(sample_fields)["age_12345"]
        assert rule.check(rule.coerce("inf")) is not None

    def test_coerce_number(self):
        assert coerce_number("25") == 25
        assert coerce_number(" 2.5 ") == 2.5
        assert coerce_number(7) == 7
        assert math.isnan(coerce_number(""))
        assert math.isnan(coerce_number(None))
        assert math.isnan(coerce_number(True))


class TestCheckboxRule:
    """Tests for checkbox validation."""

    def test_any_boolean_passes(self, sample_fields):
        rule = compile_schema(sample_fields)["terms_001"]
        assert rule.check(True) is None
        assert rule.check(False) is None

    def test_non_boolean_fails(self, sample_fields):
        rule = compile_schema(sample_fields)["terms_001"]
        assert rule.check("yes") is not None

    def test_empty_coerces_to_unchecked(self, sample_fields):
        rule = compile_schema(sample_fields)["terms_001"]
        assert rule.coerce("") is False


class TestSelectRule:
    """Tests for single-select validation."""

    def test_options_and_empty_pass_when_optional(self):
        rule = compile_schema([CONTACT_METHOD_FIELD])["contact_method"]
        assert rule.check("email") is None
        assert rule.check("phone") is None
        assert rule.check("") is None

    def test_unknown_option_fails(self):
        rule = compile_schema([CONTACT_METHOD_FIELD])["contact_method"]
        assert rule.check("fax") is not None

    def test_required_select_rejects_empty(self):
        descriptor = FieldDescriptor("pick", "Pick", "select", "Select", required=True, options=("a",))
        rule = compile_schema([descriptor])["pick"]
        assert rule.check("") == "Pick is required"


class TestValidateValues:
    """Tests for whole-form validation."""

    def test_reports_every_failing_field(self, sample_fields):
        errors = validate_values(compile_schema(sample_fields), {"terms_001": False})
        assert errors == {
            "name_8066616423": "Name is required",
            "age_12345": errors["age_12345"],
        }

    def test_valid_values_have_no_errors(self, sample_fields):
        values = {"name_8066616423": "Ada", "age_12345": "30", "terms_001": True}
        assert validate_values(compile_schema(sample_fields), values) == {}

    def test_coerce_values_builds_payload(self, sample_fields):
        values = {"name_8066616423": "Ada", "age_12345": "30", "terms_001": True, "extra": 1}
        assert coerce_values(compile_schema(sample_fields), values) == {
            "name_8066616423": "Ada",
            "age_12345": 30,
            "terms_001": True,
        }
