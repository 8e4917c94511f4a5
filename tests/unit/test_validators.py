"""
Unit tests for validators.

Includes property-based testing with hypothesis for validators.
"""

import json

import pytest
from hypothesis import given
from hypothesis import strategies as st

from invoice_harvester.core.validators import (
    ColumnListValidator,
    RequiredFieldValidator,
    TypeValidator,
    UniqueNameValidator,
    ValidationError,
    parse_columns,
)


@pytest.mark.unit
class TestRequiredFieldValidator:
    """Tests for RequiredFieldValidator"""

    def test_valid_required_field(self):
        """Test validation passes for present field"""
        validator = RequiredFieldValidator("name")
        record = {"name": "Shop ABC"}
        validator.validate(record["name"], record)  # Should not raise

    def test_missing_field_raises_error(self):
        """Test validation fails for missing field"""
        validator = RequiredFieldValidator("name")

        with pytest.raises(ValidationError) as exc_info:
            validator.validate(None, {"columns": ["a"]})

        assert exc_info.value.field_name == "name"
        assert exc_info.value.rule_name == "required_field"

    def test_blank_string_raises_error(self):
        """Test validation fails for whitespace-only names"""
        validator = RequiredFieldValidator("name")

        with pytest.raises(ValidationError) as exc_info:
            validator.validate("   ", {"name": "   "})

        assert "blank" in str(exc_info.value).lower()

    @given(st.text(min_size=1).filter(lambda s: s.strip() != ""))
    def test_property_any_nonblank_string_passes(self, value):
        """Property test: any non-blank string should pass"""
        validator = RequiredFieldValidator("field")
        validator.validate(value, {"field": value})  # Should not raise


@pytest.mark.unit
class TestTypeValidator:
    """Tests for TypeValidator"""

    def test_number_from_string(self):
        validator = TypeValidator("total_price", {"expected_type": "number"})

        assert validator.coerce(" 42.5 ") == 42.5

    def test_number_from_int(self):
        validator = TypeValidator("total_price", {"expected_type": "number"})

        result = validator.coerce(3)

        assert result == 3.0
        assert isinstance(result, float)

    @pytest.mark.parametrize("value", ["abc", "", "12,5", "nan", "inf", True, None])
    def test_number_rejects_unparseable(self, value):
        validator = TypeValidator("total_price", {"expected_type": "number"})

        with pytest.raises(ValidationError) as exc_info:
            validator.coerce(value)

        assert exc_info.value.rule_name == "type_check"

    def test_product_list_from_json(self):
        validator = TypeValidator("products", {"expected_type": "product-list"})

        result = validator.coerce('[{"name": "Widget", "quantity": 2, "price": 10}]')

        assert result == [{"name": "Widget", "quantity": 2, "price": 10}]

    @pytest.mark.parametrize("value", [
        "not json",
        '{"name": "Widget"}',
        '["Widget"]',
        '[{"name": {"nested": true}}]',
        '[{"tags": ["a"]}]',
    ])
    def test_product_list_rejects_malformed(self, value):
        validator = TypeValidator("products", {"expected_type": "product-list"})

        with pytest.raises(ValidationError):
            validator.coerce(value)

    def test_text_and_date_are_stored_as_is(self):
        assert TypeValidator("supplier", {"expected_type": "text"}).coerce("  Acme ") == "  Acme "
        assert TypeValidator("date", {"expected_type": "date"}).coerce("31.12.2024") == "31.12.2024"

    def test_validate_allows_none(self):
        validator = TypeValidator("total_price", {"expected_type": "number"})
        validator.validate(None, {})  # Should not raise

    def test_missing_expected_type(self):
        with pytest.raises(ValueError):
            TypeValidator("x", {})

    @pytest.mark.parametrize("expected_type", ["blob", "string", "float", "decimal", "products_list"])
    def test_unsupported_type(self, expected_type):
        """Test only the schema field types are accepted"""
        with pytest.raises(ValueError):
            TypeValidator("x", {"expected_type": expected_type})

    @given(st.floats(allow_nan=False, allow_infinity=False))
    def test_property_finite_floats_round_trip_through_text(self, value):
        """Property test: the text form of any finite float parses back to it"""
        validator = TypeValidator("amount", {"expected_type": "number"})

        assert validator.coerce(repr(value)) == value

    @given(st.lists(st.dictionaries(
        st.text(min_size=1, max_size=10),
        st.one_of(st.none(), st.booleans(), st.integers(), st.text(max_size=20)),
        max_size=4,
    ), max_size=4))
    def test_property_scalar_product_lists_accepted(self, products):
        """Property test: JSON lists of flat objects always parse"""
        validator = TypeValidator("products", {"expected_type": "product-list"})

        assert validator.coerce(json.dumps(products)) == products


@pytest.mark.unit
class TestColumns:
    """Tests for column parsing and ColumnListValidator"""

    def test_parse_columns_text(self):
        assert parse_columns(' "ArtNr" , Qty,, Price ') == ["ArtNr", "Qty", "Price"]

    def test_parse_columns_strips_single_quotes(self):
        assert parse_columns("'Menge', Einzel'preis") == ["Menge", "Einzelpreis"]

    def test_parse_columns_deduplicates_in_order(self):
        assert parse_columns("a, b, a, c, b") == ["a", "b", "c"]

    def test_parse_columns_sequence(self):
        assert parse_columns([" name ", "", "qty"]) == ["name", "qty"]

    def test_parse_columns_none(self):
        assert parse_columns(None) == []

    @pytest.mark.parametrize("value", ["", " , ,", "\"\"", None, []])
    def test_empty_column_set_rejected(self, value):
        validator = ColumnListValidator("columns")

        with pytest.raises(ValidationError) as exc_info:
            validator.validate(value, {"columns": value})

        assert exc_info.value.rule_name == "columns"

    @given(st.lists(st.text(alphabet="abcxyz ", min_size=1, max_size=8), min_size=1, max_size=10))
    def test_property_parsed_columns_are_trimmed_and_unique(self, tokens):
        """Property test: parsed columns are non-empty, trimmed and unique"""
        parsed = parse_columns(",".join(tokens))

        assert len(parsed) == len(set(parsed))
        assert all(c and c == c.strip() for c in parsed)


@pytest.mark.unit
class TestUniqueNameValidator:
    """Tests for UniqueNameValidator"""

    def test_case_insensitive_collision(self):
        validator = UniqueNameValidator("name", {"taken": ["Shop ABC"]})

        with pytest.raises(ValidationError) as exc_info:
            validator.validate("  shop abc ", {})

        assert "already exists" in exc_info.value.message

    def test_new_name_passes(self):
        validator = UniqueNameValidator("name", {"taken": ["Shop ABC"]})
        validator.validate("Shop XYZ", {})  # Should not raise



@pytest.mark.unit
class TestBaseValidator:
    """Tests for the shared check() / fail() helpers"""

    def test_check_reads_own_key_from_candidate(self):
        validator = ColumnListValidator("columns")

        validator.check({"name": "Shop ABC", "columns": "ArtNr, Qty"})  # Should not raise

        with pytest.raises(ValidationError):
            validator.check({"name": "Shop ABC"})

    @pytest.mark.parametrize("validator,candidate", [
        (RequiredFieldValidator("name"), {"name": " "}),
        (ColumnListValidator("columns"), {"columns": " , "}),
        (UniqueNameValidator("name", {"taken": ["Shop ABC"]}), {"name": "shop abc"}),
        (TypeValidator("total_price", {"expected_type": "number"}), {"total_price": "abc"}),
    ])
    def test_errors_carry_rule_type_and_field(self, validator, candidate):
        with pytest.raises(ValidationError) as exc_info:
            validator.check(candidate)

        assert exc_info.value.rule_name == validator.rule_type
        assert exc_info.value.field_name == validator.field_name
        assert exc_info.value.message in str(exc_info.value)
