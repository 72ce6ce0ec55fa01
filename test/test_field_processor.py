from __future__ import annotations

import json

import pytest

from common import ConfigurationError

from processors.field_processor import (
    FIELD_EXTRACTORS,
    FieldProcessor,
    get_clean_email_value,
    get_clean_plain_text_value,
    get_clean_url,
    get_date_value,
    get_float_value,
    get_formula_number_value,
    get_formula_text_value,
    get_int_value,
    get_multi_select_strings,
    get_name,
    get_number,
    get_phone_number_value,
    get_plain_text_value,
    get_properties,
    get_rollup_formula_string,
    get_rollup_plain_text,
    get_select_value,
    get_status,
    get_url_value,
)

DEFAULTS = {
    "title": "No Name",
    "status": "No Status",
    "float": "",
    "int": "",
    "text": "",
    "clean_text": "",
    "select": "",
    "multi_select": [],
    "date": "",
    "url": "",
    "clean_url": "",
    "email": "",
    "phone": "",
    "formula_text": "",
    "formula_number": 0.0,
    "rollup_text": [""],
    "rollup_formula": "",
}

MALFORMED_SHAPES = [
    None,
    "text",
    42,
    True,
    [],
    [{"name": "x"}],
    {},
    {"title": None, "status": None, "number": None, "rich_text": None, "select": None,
     "multi_select": None, "date": None, "url": None, "email": None, "phone_number": None,
     "formula": None, "rollup": None},
    {"title": "x", "status": "x", "number": "12", "rich_text": "x", "select": "x",
     "multi_select": "x", "date": "2024-01-01", "url": 5, "email": [], "phone_number": {},
     "formula": [], "rollup": "x"},
    {"title": [None], "rich_text": [5], "multi_select": [None, 3], "formula": {"string": 1, "number": "1"},
     "rollup": {"array": None}, "status": {"name": 7}, "select": {"name": None}, "date": {"start": None}},
    {"title": [{"text": None}], "rollup": {"array": [None, "x", {"rich_text": "x", "formula": None}]}},
    {"title": [{"text": {"content": None}}], "rollup": {"array": [{"rich_text": [{"plain_text": None}]}]}},
]


def test_every_kind_has_a_default():
    assert set(DEFAULTS) == set(FIELD_EXTRACTORS)


@pytest.mark.parametrize("kind", sorted(FIELD_EXTRACTORS))
@pytest.mark.parametrize("shape", MALFORMED_SHAPES)
def test_extractors_return_default_for_malformed_shapes(kind, shape):
    props = {"Field": shape, "Field (As Text)": shape}
    assert FIELD_EXTRACTORS[kind](props, "Field") == DEFAULTS[kind]


@pytest.mark.parametrize("kind", sorted(FIELD_EXTRACTORS))
def test_extractors_return_default_for_absent_field(kind):
    assert FIELD_EXTRACTORS[kind]({}, "Missing") == DEFAULTS[kind]


@pytest.mark.parametrize("kind", sorted(FIELD_EXTRACTORS))
def test_extractors_tolerate_non_mapping_properties(kind):
    assert FIELD_EXTRACTORS[kind](None, "Field") == DEFAULTS[kind]


def test_extractors_do_not_mutate_input():
    props = {
        "Name": {"title": [{"text": {"content": "Widget"}}]},
        "Tags": {"multi_select": [{"name": "a"}, {"name": "b"}]},
        "Location": {"rollup": {"array": []}},
    }
    snapshot = repr(props)
    for extractor in FIELD_EXTRACTORS.values():
        for key in props:
            extractor(props, key)
    assert repr(props) == snapshot


def test_get_name():
    props = {"Name": {"title": [{"text": {"content": "Widget"}}, {"text": {"content": "ignored"}}]}}
    assert get_name(props, "Name") == "Widget"
    assert get_name({}, "Name") == "No Name"
    assert get_name({"Name": {"title": []}}, "Name") == "No Name"


def test_get_name_keeps_empty_content():
    assert get_name({"Name": {"title": [{"text": {"content": ""}}]}}, "Name") == ""


def test_get_status():
    props = {"Asset Status": {"status": {"id": "1", "name": "In Service", "color": "green"}}}
    assert get_status(props, "Asset Status") == "In Service"
    assert get_status({"Asset Status": {"status": None}}, "Asset Status") == "No Status"


def test_float_and_int_values():
    props = {"Price": {"number": 12.5}}
    assert get_float_value(props, "Price") == "12.50"
    assert get_int_value(props, "Price") == "12"


def test_integer_json_numbers_are_accepted():
    props = {"Quantity": {"number": 7}}
    assert get_float_value(props, "Quantity") == "7.00"
    assert get_int_value(props, "Quantity") == "7"


def test_int_value_truncates_toward_zero():
    assert get_int_value({"Delta": {"number": -3.9}}, "Delta") == "-3"
    assert get_int_value({"Delta": {"number": 3.999}}, "Delta") == "3"


def test_float_value_rounds_to_two_decimals():
    assert get_float_value({"Rate": {"number": 0.125}}, "Rate") == "0.12"
    assert get_float_value({"Rate": {"number": 1234.567}}, "Rate") == "1234.57"


def test_booleans_and_non_finite_numbers_are_rejected():
    assert get_number({"number": True}, "number") is None
    assert get_float_value({"Price": {"number": float("nan")}}, "Price") == ""
    assert get_int_value({"Price": {"number": float("inf")}}, "Price") == ""
    assert get_formula_number_value({"F": {"formula": {"number": float("-inf")}}}, "F") == 0.0


def test_integers_too_large_for_a_float_give_default():
    huge = json.loads("1" + "0" * 400)
    assert get_number({"number": huge}, "number") is None
    assert get_float_value({"Price": {"number": huge}}, "Price") == ""
    assert get_int_value({"Price": {"number": huge}}, "Price") == ""
    assert get_formula_number_value({"F": {"formula": {"number": huge}}}, "F") == 0.0


def test_plain_text_values():
    props = {"Notes": {"rich_text": [{"plain_text": "  first line\n"}, {"plain_text": "second"}]}}
    assert get_plain_text_value(props, "Notes") == "  first line\n"
    assert get_clean_plain_text_value(props, "Notes") == "first line"
    assert get_plain_text_value({"Notes": {"rich_text": []}}, "Notes") == ""


def test_select_value():
    assert get_select_value({"Category": {"select": {"name": "Laptop"}}}, "Category") == "Laptop"
    assert get_select_value({"Category": {"select": None}}, "Category") == ""


def test_multi_select_strings_keep_order_and_skip_bad_items():
    props = {"Tags": {"multi_select": [{"name": "b"}, {"color": "red"}, "x", {"name": "a"}]}}
    assert get_multi_select_strings(props, "Tags") == ["b", "a"]
    assert get_multi_select_strings({"Tags": {"multi_select": []}}, "Tags") == []


def test_date_value():
    assert get_date_value({"Due": {"date": {"start": "2024-03-05"}}}, "Due") == "03/05/2024"
    assert get_date_value({"Due": {"date": {"start": "not-a-date"}}}, "Due") == "not-a-date"


def test_date_value_returns_unparsed_start_unchanged():
    datetime_start = "2024-03-05T10:30:00.000+00:00"
    assert get_date_value({"Due": {"date": {"start": datetime_start}}}, "Due") == datetime_start
    assert get_date_value({"Due": {"date": {"start": "2024-02-30"}}}, "Due") == "2024-02-30"
    assert get_date_value({"Due": {"date": {"start": "2024-3-5"}}}, "Due") == "2024-3-5"


def test_date_value_only_reformats_ascii_digits():
    arabic_indic = "٢٠٢٤-٠٣-٠٥"
    assert get_date_value({"Due": {"date": {"start": arabic_indic}}}, "Due") == arabic_indic


def test_date_value_empty_start_is_default():
    assert get_date_value({"Due": {"date": {"start": ""}}}, "Due") == ""


def test_url_email_and_phone_values():
    props = {
        "Manual": {"url": " https://example.com/manual \n"},
        "Vendor Email": {"email": "\tsales@example.com "},
        "Vendor Phone": {"phone_number": " +1 555 0100\n"},
    }
    assert get_url_value(props, "Manual") == " https://example.com/manual \n"
    assert get_clean_url(props, "Manual") == "https://example.com/manual"
    assert get_clean_email_value(props, "Vendor Email") == "sales@example.com"
    assert get_phone_number_value(props, "Vendor Phone") == "+1 555 0100"


def test_formula_text_reads_as_text_companion_property():
    props = {
        "Asset Code": {"formula": {"string": "wrong property"}},
        "Asset Code (As Text)": {"formula": {"type": "string", "string": "AC-0042"}},
    }
    assert get_formula_text_value(props, "Asset Code") == "AC-0042"
    assert get_formula_text_value({"Asset Code": {"formula": {"string": "x"}}}, "Asset Code") == ""


def test_formula_number_value():
    assert get_formula_number_value({"Depreciation": {"formula": {"number": 250}}}, "Depreciation") == 250.0
    assert get_formula_number_value({"Depreciation": {"formula": {"number": None}}}, "Depreciation") == 0.0


def test_rollup_plain_text_collects_first_fragment_of_each_item():
    props = {"Location": {"rollup": {"array": [
        {"rich_text": [{"plain_text": "Warehouse A"}, {"plain_text": "ignored"}]},
        {"rich_text": []},
        {"title": [{"plain_text": "not rich text"}]},
        {"rich_text": [{"plain_text": "Warehouse B"}]},
    ]}}}
    assert get_rollup_plain_text(props, "Location") == ["Warehouse A", "Warehouse B"]


def test_rollup_plain_text_empty_array_and_absent_field_both_give_single_empty_string():
    empty_array = {"Location": {"rollup": {"type": "array", "array": []}}}
    assert get_rollup_plain_text(empty_array, "Location") == [""]
    assert get_rollup_plain_text({}, "Location") == [""]


def test_rollup_plain_text_with_no_usable_items_gives_single_empty_string():
    props = {"Location": {"rollup": {"array": [{"number": 3}]}}}
    assert get_rollup_plain_text(props, "Location") == [""]


def test_rollup_formula_string_returns_first_match():
    props = {"Owner": {"rollup": {"array": [
        {"number": 1},
        {"formula": {"string": "Alice"}},
        {"formula": {"string": "Bob"}},
    ]}}}
    assert get_rollup_formula_string(props, "Owner") == "Alice"
    assert get_rollup_formula_string({"Owner": {"rollup": {"array": []}}}, "Owner") == ""


def test_get_properties():
    assert get_properties({"properties": {"Name": {}}}) == {"Name": {}}
    assert get_properties({"properties": None}) == {}
    assert get_properties("page") == {}


class TestFieldProcessor:

    def test_extract_all_fields_builds_flat_row(self):
        processor = FieldProcessor({
            "Name": ("Name", "title"),
            "Price": ("Price", "float"),
            "Tags": ("Tags", "multi_select"),
            "Depreciation": ("Depreciation", "formula_number"),
        })
        record = {"properties": {
            "Name": {"title": [{"text": {"content": "Widget"}}]},
            "Price": {"number": 12.5},
            "Tags": {"multi_select": [{"name": "a"}, {"name": "b"}]},
            "Depreciation": {"formula": {"number": 1.5}},
        }}
        assert processor.extract_all_fields(record) == {
            "Name": "Widget",
            "Price": "12.50",
            "Tags": "a; b",
            "Depreciation": 1.5,
        }

    def test_missing_properties_give_defaults(self):
        processor = FieldProcessor({"Name": ("Name", "title"), "Location": ("Location", "rollup_text")},
                                   list_separator="|")
        assert processor.extract_all_fields({}) == {"Name": "No Name", "Location": ""}

    def test_columns_keep_mapping_order(self):
        processor = FieldProcessor({"b": ("B", "text"), "a": ("A", "text")})
        assert processor.columns == ["b", "a"]

    def test_unknown_kind_is_rejected(self):
        with pytest.raises(ConfigurationError, match="Unknown field kinds"):
            FieldProcessor({"Name": ("Name", "people")})

    def test_extract_records_preserves_order(self):
        processor = FieldProcessor({"Name": ("Name", "title")})
        records = [{"properties": {"Name": {"title": [{"text": {"content": n}}]}}} for n in ("x", "y", "z")]
        assert [row["Name"] for row in processor.extract_records(records)] == ["x", "y", "z"]
