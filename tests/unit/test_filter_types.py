"""
Unit tests -- filter type registry: descriptors, aliases, pairings, validation.
"""
import dataclasses

import pytest

from tabquery.filters.catalog import load_catalog
from tabquery.filters.types import (
    Types,
    build_registry,
    get_default_filter_for_type,
    get_filter_type_for_url_suffix,
    get_filter_types_for_type,
    get_registry,
)

WIRE_SUFFIXES = {
    "eq", "neq", "neqornull", "gt", "lt", "gte", "lte", "in", "notin",
    "between", "notbetween", "startswith", "doesnotstartwith", "contains",
    "doesnotcontain", "containsoneof", "containsnoneof", "isblank",
    "isnonblank", "hasmvvalue", "nomvvalue", "memberof", "dateeq", "dateneq",
    "dategt", "datelt", "dategte", "datelte", "exp:childof",
}


# ── Catalog contents ─────────────────────────────────────

def test_every_wire_suffix_registered():
    assert set(get_registry().url_map) == WIRE_SUFFIXES


def test_has_any_value_has_no_suffix():
    assert Types.HAS_ANY_VALUE.get_url_suffix() is None
    assert not Types.HAS_ANY_VALUE.is_data_value_required()


def test_equal_descriptor():
    eq = Types.EQUAL
    assert eq.get_display_text() == "Equals"
    assert eq.get_display_symbol() == "="
    assert eq.get_url_suffix() == "eq"
    assert eq.is_data_value_required()
    assert not eq.is_multi_valued()
    assert eq.get_long_display_text() == "Equals"


def test_date_variants_copy_display_text():
    assert Types.DATE_EQUAL.get_display_text() == "Equals"
    assert Types.DATE_EQUAL.get_display_symbol() == "="
    assert Types.DATE_LESS_THAN_OR_EQUAL.get_display_symbol() == "=<"
    assert Types.NEQ_OR_NULL.get_display_text() == "Does Not Equal"


def test_between_is_bounded_multi_value():
    between = Types.BETWEEN
    assert between.is_multi_valued()
    assert between.get_multi_value_separator() == ","
    assert between.get_multi_value_min_occurs() == 2
    assert between.get_multi_value_max_occurs() == 2
    assert between.get_long_display_text() == "Between, Inclusive (example usage: -4,4)"


def test_in_separator():
    assert Types.IN.get_multi_value_separator() == ";"
    assert Types.IN.get_multi_value_min_occurs() is None


def test_valueless_operators():
    for name in ("ISBLANK", "NONBLANK", "HAS_MISSING_VALUE", "DOES_NOT_HAVE_MISSING_VALUE"):
        assert not Types[name].is_data_value_required()


# ── Aliases ──────────────────────────────────────────────

def test_aliases_share_descriptor():
    assert Types.EQUALS_ONE_OF is Types.IN
    assert Types.EQUALS_NONE_OF is Types.NOT_IN
    assert Types.NOT_MISSING is Types.NONBLANK
    assert Types.MISSING is Types.ISBLANK
    assert Types.NEQ is Types.NOT_EQUAL
    assert Types.GTE is Types.GREATER_THAN_OR_EQUAL
    assert Types.NOT_EQUAL_OR_MISSING is Types.NEQ_OR_NULL


def test_url_map_holds_named_descriptor():
    assert get_filter_type_for_url_suffix("in") is Types.EQUALS_ONE_OF
    assert get_filter_type_for_url_suffix("isblank") is Types.MISSING


def test_unknown_suffix_is_none():
    assert get_filter_type_for_url_suffix("bogus") is None


def test_types_is_read_only():
    with pytest.raises(AttributeError):
        Types.EQUAL = Types.IN
    with pytest.raises(AttributeError):
        Types.NOPE


def test_types_mapping_access():
    assert Types["EQUAL"] is Types.EQUAL
    assert "GTE" in Types


# ── Opposites ────────────────────────────────────────────

def test_equal_opposite_is_neq_or_null():
    assert Types.EQUAL.get_opposite().get_url_suffix() == "neqornull"


def test_neq_or_null_opposite_is_equal():
    assert Types.NEQ_OR_NULL.get_opposite().get_url_suffix() == "eq"


def test_neq_opposite_is_equal():
    assert Types.NOT_EQUAL.get_opposite() is Types.EQUAL


def test_comparison_opposites():
    assert Types.GT.get_opposite() is Types.LTE
    assert Types.LT.get_opposite() is Types.GTE
    assert Types.DATE_GREATER_THAN.get_opposite() is Types.DATE_LESS_THAN_OR_EQUAL


def test_member_of_is_its_own_opposite():
    assert Types.MEMBER_OF.get_opposite() is Types.MEMBER_OF


def test_has_any_value_has_no_opposite():
    assert Types.HAS_ANY_VALUE.get_opposite() is None
    assert Types.EXP_CHILD_OF.get_opposite() is None


# ── Single / multi value pairs ───────────────────────────

def test_equal_and_in_pair():
    assert Types.EQUAL.get_multi_value_filter() is Types.IN
    assert Types.IN.get_single_value_filter() is Types.EQUAL


def test_multi_valued_has_no_multi_filter():
    assert Types.IN.get_multi_value_filter() is None
    assert Types.BETWEEN.get_multi_value_filter() is None


def test_member_of_has_no_multi_filter():
    assert Types.MEMBER_OF.get_multi_value_filter() is None


def test_neq_maps_to_not_in_one_way():
    assert Types.NOT_EQUAL.get_multi_value_filter() is Types.NOT_IN
    assert Types.NOT_IN.get_single_value_filter() is None


def test_between_single_value_is_gte():
    assert Types.BETWEEN.get_single_value_filter() is Types.GTE
    assert Types.NOT_BETWEEN.get_single_value_filter() is Types.LT


def test_single_valued_resolution_finds_nothing():
    assert Types.EQUAL.get_single_value_filter() is None


def test_lookups_resolve_regardless_of_build_order():
    catalog = load_catalog()
    reversed_catalog = dataclasses.replace(catalog, entries=list(reversed(catalog.entries)))
    _, types = build_registry(reversed_catalog)
    assert types.EQUAL.get_opposite() is types.NEQ_OR_NULL
    assert types.CONTAINS.get_multi_value_filter() is types.CONTAINS_ONE_OF
    assert types.EQUAL is not Types.EQUAL


# ── JSON type tables ─────────────────────────────────────

def test_filter_types_for_int():
    types = get_filter_types_for_type("INT")
    assert len(types) == 13
    assert types[0] is Types.HAS_ANY_VALUE
    assert Types.BETWEEN in types
    assert Types.CONTAINS not in types


def test_filter_types_for_type_with_missing_values():
    types = get_filter_types_for_type("boolean", mv_enabled=True)
    assert types[-2:] == [Types.HAS_MISSING_VALUE, Types.DOES_NOT_HAVE_MISSING_VALUE]
    assert len(types) == 7


def test_filter_types_for_type_returns_copy():
    types = get_filter_types_for_type("string")
    types.clear()
    assert len(get_filter_types_for_type("string")) == 19


def test_filter_types_for_unknown_type():
    assert get_filter_types_for_type(None) == []
    assert get_filter_types_for_type("blob") == []


def test_default_filter_for_type():
    assert get_default_filter_for_type("string") is Types.CONTAINS
    assert get_default_filter_for_type("Date") is Types.DATE_EQUAL
    assert get_default_filter_for_type("int") is Types.EQUAL
    assert get_default_filter_for_type("blob") is Types.EQUAL
    assert get_default_filter_for_type(None) is Types.EQUAL


# ── validate() ───────────────────────────────────────────

def test_valueless_operator_always_valid():
    result = Types.ISBLANK.validate(None, "int", "Age")
    assert result
    assert result.value is None


def test_operator_not_applicable_to_type():
    result = Types.CONTAINS.validate("x", "int", "Age")
    assert not result
    assert "can't be applied to int" in result.message


def test_unknown_json_type_invalid():
    assert not Types.EQUAL.validate("x", "blob", "Col")


def test_validate_normalises_boolean():
    assert Types.EQUAL.validate("yes", "boolean", "Flag").value == "1"


def test_validate_json_type_case_insensitive():
    assert Types.EQUAL.validate("5", "INT", "Age").value == "5"


def test_validate_bad_int():
    result = Types.EQUAL.validate("abc", "int", "Age")
    assert not result
    assert "Age" in result.message


def test_validate_in_normalises_parts():
    assert Types.IN.validate("a; b ;c", "string", "Name").value == "a;b;c"


def test_validate_between_requires_two_values():
    assert Types.BETWEEN.validate("1,5", "int", "Age").value == "1,5"

    too_few = Types.BETWEEN.validate("1", "int", "Age")
    assert not too_few
    assert "At least 2" in too_few.message

    too_many = Types.BETWEEN.validate("1,2,3", "int", "Age")
    assert not too_many
    assert "At most 2" in too_many.message
